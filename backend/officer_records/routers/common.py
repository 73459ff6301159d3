from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from ..db import get_store
from ..store import CLASSES, ENROLLMENTS, OFFICERS, RecordStore
from .auth import require_user


router = APIRouter(tags=["common"], dependencies=[Depends(require_user)])

@router.get("/class/{class_id}/officers")
async def officers_of_class(class_id: str, store: RecordStore = Depends(get_store)):
    enrollments = await asyncio.to_thread(store.query, ENROLLMENTS, {"classId": class_id})
    docs = await asyncio.gather(*(asyncio.to_thread(store.get, OFFICERS, e.get("officerId")) for e in enrollments))
    return [doc.to_dict() for doc in docs if doc is not None]


@router.get("/officer/{officer_id}/classes")
async def classes_of_officer(officer_id: str, store: RecordStore = Depends(get_store)):
    enrollments = await asyncio.to_thread(store.query, ENROLLMENTS, {"officerId": officer_id})
    docs = await asyncio.gather(*(asyncio.to_thread(store.get, CLASSES, e.get("classId")) for e in enrollments))
    return [doc.to_dict() for doc in docs if doc is not None]


@router.get("/classes")
async def list_classes(store: RecordStore = Depends(get_store)):
    classes = await asyncio.to_thread(store.query, CLASSES)
    counts = await asyncio.gather(*(asyncio.to_thread(store.query, ENROLLMENTS, {"classId": c.id}) for c in classes))
    return [{**c.to_dict(), "numberOfStudents": len(enrolled)} for c, enrolled in zip(classes, counts)]
