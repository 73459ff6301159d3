from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_store
from ..schemas import BulkCourseMarks, CompulsoryMarksUpdate, CourseMarks, OfficerIn, OfficerUpdate, Pet
from ..store import OFFICERS, DocumentNotFound, RecordStore, WriteOp
from .auth import require_user


router = APIRouter(prefix="/data-entry", tags=["officers"], dependencies=[Depends(require_user)])

logger = logging.getLogger(__name__)


def _merge_by_course(
    existing: List[Dict[str, Any]], course_id: str, item: Dict[str, Any], *, replace: bool = False
) -> List[Dict[str, Any]]:
    merged = [dict(m) for m in existing]
    for i, current in enumerate(merged):
        if current.get("courseId") == course_id:
            merged[i] = dict(item) if replace else {**current, **item}
            return merged
    merged.append(item)
    return merged


@router.post("/officer", status_code=201)
def add_officer(officer: OfficerIn, store: RecordStore = Depends(get_store)):
    officer_id = store.add(OFFICERS, officer.as_document())
    return {"id": officer_id, "message": "Officer data saved successfully"}


@router.get("/officer")
def list_officers(store: RecordStore = Depends(get_store)):
    return [doc.to_dict() for doc in store.query(OFFICERS)]


# The marks routes are registered before /officer/{officer_id} so "marks" is
# never taken for an officer id.

@router.put("/officer/marks")
def update_course_marks_for_officers(req: BulkCourseMarks, store: RecordStore = Depends(get_store)):
    # Read-modify-write without a version check: concurrent merges on the same
    # officer keep whichever write lands last.
    ops: List[WriteOp] = []
    for entry in req.marks:
        officer = store.get(OFFICERS, entry.officerId)
        if officer is None:
            logger.warning("Officer %s not found, skipping", entry.officerId)
            continue
        merged = _merge_by_course(officer.get("marks") or [], req.courseId, {"courseId": req.courseId, "marks": entry.marks})
        ops.append(WriteOp(OFFICERS, "update", officer.id, {"marks": merged}))
    store.batch_write(ops)
    return {"message": "Marks updated successfully for all officers", "updated": len(ops)}


@router.put("/officer/marks/{officer_id}")
def update_officer_marks(officer_id: str, marks: List[CourseMarks], store: RecordStore = Depends(get_store)):
    officer = store.get(OFFICERS, officer_id)
    if officer is None:
        raise HTTPException(status_code=404, detail="Officer not found")
    merged = officer.get("marks") or []
    for item in marks:
        merged = _merge_by_course(merged, item.courseId, item.model_dump(), replace=True)
    store.update(OFFICERS, officer_id, {"marks": merged})
    return {"message": "Marks updated successfully", "officerId": officer_id, "marks": merged}


@router.get("/officer/{officer_id}")
def get_officer(officer_id: str, store: RecordStore = Depends(get_store)):
    officer = store.get(OFFICERS, officer_id)
    if officer is None:
        raise HTTPException(status_code=404, detail="Officer not found")
    return officer.to_dict()


@router.put("/officer/{officer_id}")
def update_officer(officer_id: str, update: OfficerUpdate, store: RecordStore = Depends(get_store)):
    try:
        store.update(OFFICERS, officer_id, update.as_document())
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Officer not found")
    return {"message": "Officer data updated successfully"}


@router.put("/officer/{officer_id}/pet")
def update_officer_pet(officer_id: str, pet: Pet, store: RecordStore = Depends(get_store)):
    try:
        store.update(OFFICERS, officer_id, {"pet": pet.model_dump(exclude_none=True)})
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Officer not found")
    return {"message": "PET record updated successfully"}


@router.delete("/officer/{officer_id}")
def delete_officer(officer_id: str, store: RecordStore = Depends(get_store)):
    if store.get(OFFICERS, officer_id) is None:
        raise HTTPException(status_code=404, detail="Officer not found")
    store.delete(OFFICERS, officer_id)
    return {"message": "Officer deleted successfully"}


@router.put("/compulsory-marks/update-all")
def update_compulsory_marks(updates: List[CompulsoryMarksUpdate], store: RecordStore = Depends(get_store)):
    # Several updates may target the same officer, so merge into a working copy
    # before writing each officer once.
    pending: Dict[str, List[Dict[str, Any]]] = {}
    for update in updates:
        if update.officerId not in pending:
            officer = store.get(OFFICERS, update.officerId)
            if officer is None:
                logger.warning("Officer %s not found, skipping", update.officerId)
                continue
            pending[update.officerId] = officer.get("compulsoryCourses") or []
        pending[update.officerId] = _merge_by_course(
            pending[update.officerId],
            update.courseId,
            {"courseId": update.courseId, "marksArray": update.marks},
        )
    store.batch_write([WriteOp(OFFICERS, "update", oid, {"compulsoryCourses": courses}) for oid, courses in pending.items()])
    return {"message": "Compulsory marks updated successfully for all officers"}
