from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_store
from ..llm_client import TextGenerationClient, get_text_client
from ..reports import ReportAssembler
from ..stats_engine import OfficerNotFound, StatisticsEngine
from ..store import CLASSES, RecordStore
from .auth import require_user


router = APIRouter(prefix="/data-entry", tags=["reports"], dependencies=[Depends(require_user)])

logger = logging.getLogger(__name__)


def get_statistics(store: RecordStore = Depends(get_store)) -> StatisticsEngine:
    return StatisticsEngine(store)


@router.get("/class/{class_id}/average")
async def class_average(class_id: str, stats: StatisticsEngine = Depends(get_statistics)):
    try:
        return {"averageMarks": await stats.class_average(class_id)}
    except Exception:
        logger.exception("Error calculating average for class %s", class_id)
        raise HTTPException(status_code=500, detail="Failed to calculate class average")


@router.get("/classes/average")
async def all_class_averages(stats: StatisticsEngine = Depends(get_statistics)):
    try:
        classes = await asyncio.to_thread(stats.store.query, CLASSES)
        averages = await asyncio.gather(*(stats.class_average(c.id) for c in classes))
    except Exception:
        logger.exception("Error calculating class averages")
        raise HTTPException(status_code=500, detail="Failed to calculate class averages")
    return [
        {"classId": c.id, "className": c.get("name"), "averageMarks": avg}
        for c, avg in zip(classes, averages)
    ]


@router.get("/officer/{officer_id}/average")
async def officer_average(officer_id: str, stats: StatisticsEngine = Depends(get_statistics)):
    try:
        return {"averageMarks": await stats.officer_average_marks(officer_id)}
    except Exception:
        logger.exception("Error calculating average for officer %s", officer_id)
        raise HTTPException(status_code=500, detail="Failed to calculate officer average")


@router.get("/class/{class_id}/failed-optional-courses")
async def failed_optional_courses(class_id: str, stats: StatisticsEngine = Depends(get_statistics)):
    try:
        return {"failedOfficersDetails": await stats.failed_officers_details(class_id)}
    except Exception:
        logger.exception("Error getting failed optional courses for class %s", class_id)
        raise HTTPException(status_code=500, detail="Failed to get failed optional courses")


@router.get("/class/{class_id}/failed-compulsory-courses")
async def failed_compulsory_courses(class_id: str, stats: StatisticsEngine = Depends(get_statistics)):
    try:
        return {"failedCourses": await stats.failed_compulsory_courses(class_id)}
    except Exception:
        logger.exception("Error getting failed compulsory courses for class %s", class_id)
        raise HTTPException(status_code=500, detail="Failed to get failed compulsory courses")


@router.get("/class/{class_id}/ai-summary")
async def class_ai_summary(
    class_id: str,
    stats: StatisticsEngine = Depends(get_statistics),
    client: Optional[TextGenerationClient] = Depends(get_text_client),
):
    try:
        bundle = await stats.class_statistics(class_id)
        summary = await ReportAssembler(client).class_summary(bundle)
    except Exception:
        logger.exception("Error generating AI summary for class %s", class_id)
        raise HTTPException(status_code=500, detail="Failed to generate class summary")
    return {"aiSummary": summary}


@router.get("/officer/{officer_id}/ai-summary")
async def officer_ai_summary(
    officer_id: str,
    stats: StatisticsEngine = Depends(get_statistics),
    client: Optional[TextGenerationClient] = Depends(get_text_client),
):
    try:
        bundle = await stats.officer_statistics(officer_id)
        summary = await ReportAssembler(client).officer_summary(bundle)
    except OfficerNotFound:
        raise HTTPException(status_code=404, detail="Officer not found")
    except Exception:
        logger.exception("Error generating AI summary for officer %s", officer_id)
        raise HTTPException(status_code=500, detail="Failed to generate officer summary")
    return {"aiSummary": summary}
