from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_store
from ..schemas import AssessmentIn, CourseIn, MarkBatchUpdate, MarkEntry, MarkUpdate
from ..store import ASSESSMENTS, COURSES, MARKS, Document, RecordStore, WriteOp
from .auth import require_user


router = APIRouter(prefix="/data-entry", tags=["courses"], dependencies=[Depends(require_user)])


def _ceiling(assessment: Document) -> float:
    return float(assessment.get("totalMarks") or 0)


def _require(store: RecordStore, collection: str, doc_id: str, label: str) -> Document:
    doc = store.get(collection, doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


# ---- courses ----

@router.post("/course", status_code=201)
def add_course(req: CourseIn, store: RecordStore = Depends(get_store)):
    course_id = store.add(COURSES, req.model_dump(exclude_none=True))
    return {"id": course_id, "message": "Course added successfully"}


@router.get("/course")
def list_courses(store: RecordStore = Depends(get_store)):
    return [doc.to_dict() for doc in store.query(COURSES)]


def _courses_of_type(store: RecordStore, course_type: str, category: Optional[str]) -> List[dict]:
    where = {"type": course_type}
    if category:
        where["category"] = category
    return [doc.to_dict() for doc in store.query(COURSES, where)]


@router.get("/course/compulsory")
def list_compulsory_courses(category: Optional[str] = None, store: RecordStore = Depends(get_store)):
    return _courses_of_type(store, "Compulsory", category)


@router.get("/course/optional")
def list_optional_courses(category: Optional[str] = None, store: RecordStore = Depends(get_store)):
    return _courses_of_type(store, "Optional", category)


@router.delete("/course/{course_id}")
def delete_course(course_id: str, store: RecordStore = Depends(get_store)):
    _require(store, COURSES, course_id, "Course")
    store.delete(COURSES, course_id)
    return {"message": "Course deleted successfully"}


# ---- assessments ----

@router.post("/assessment/{course_id}", status_code=201)
def add_assessment(course_id: str, req: AssessmentIn, store: RecordStore = Depends(get_store)):
    _require(store, COURSES, course_id, "Course")
    assessment_id = store.add(ASSESSMENTS, {
        "courseId": course_id,
        "assessmentName": req.name,
        "totalMarks": req.totalMarks,
    })
    return {"id": assessment_id, "message": "Assessment added successfully"}


@router.get("/assessment/{course_id}")
def list_assessments(course_id: str, store: RecordStore = Depends(get_store)):
    return [doc.to_dict() for doc in store.query(ASSESSMENTS, {"courseId": course_id})]


@router.delete("/assessment/{assessment_id}")
def delete_assessment(assessment_id: str, store: RecordStore = Depends(get_store)):
    _require(store, ASSESSMENTS, assessment_id, "Assessment")
    store.delete(ASSESSMENTS, assessment_id)
    return {"message": "Assessment deleted successfully"}


# ---- marks ----

@router.get("/assessment/{assessment_id}/marks")
def list_marks(assessment_id: str, store: RecordStore = Depends(get_store)):
    return [{"marksId": doc.id, **doc.data} for doc in store.query(MARKS, {"assessmentId": assessment_id})]


@router.post("/marks/{assessment_id}", status_code=201)
def add_marks(assessment_id: str, entries: List[MarkEntry], store: RecordStore = Depends(get_store)):
    assessment = _require(store, ASSESSMENTS, assessment_id, "Assessment")
    ceiling = _ceiling(assessment)
    over = [e.officerId for e in entries if e.marks > ceiling]
    if over:
        raise HTTPException(
            status_code=400,
            detail=f"Marks exceed total marks ({ceiling:g}) for officers: {', '.join(over)}",
        )
    store.batch_write([
        WriteOp(MARKS, "set", None, {"assessmentId": assessment_id, "officerId": e.officerId, "marks": e.marks})
        for e in entries
    ])
    return {"message": "Marks added successfully for all officers"}


@router.put("/marks/update-all")
def update_all_marks(updates: List[MarkBatchUpdate], store: RecordStore = Depends(get_store)):
    ceilings: Dict[str, float] = {}
    for update in updates:
        mark = _require(store, MARKS, update.marksId, "Marks record")
        assessment_id = mark.get("assessmentId")
        if assessment_id not in ceilings:
            assessment = store.get(ASSESSMENTS, assessment_id)
            # An orphaned mark has no ceiling left to enforce
            ceilings[assessment_id] = _ceiling(assessment) if assessment else float("inf")
        if update.marks > ceilings[assessment_id]:
            raise HTTPException(status_code=400, detail=f"Marks for {update.marksId} exceed total marks for the assessment")
    store.batch_write([WriteOp(MARKS, "update", u.marksId, {"marks": u.marks}) for u in updates])
    return {"message": "Marks updated successfully for all officers"}


@router.put("/marks/{marks_id}/{assessment_id}")
def update_marks(marks_id: str, assessment_id: str, req: MarkUpdate, store: RecordStore = Depends(get_store)):
    assessment = _require(store, ASSESSMENTS, assessment_id, "Assessment")
    _require(store, MARKS, marks_id, "Marks record")
    if req.updatedMarks > _ceiling(assessment):
        raise HTTPException(status_code=400, detail="Updated marks exceed total marks for the assessment")
    store.update(MARKS, marks_id, {"marks": req.updatedMarks})
    return {"message": "Marks updated successfully"}


@router.delete("/marks/{marks_id}")
def delete_marks(marks_id: str, store: RecordStore = Depends(get_store)):
    _require(store, MARKS, marks_id, "Marks record")
    store.delete(MARKS, marks_id)
    return {"message": "Marks deleted successfully"}
