from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..db import get_store
from ..schemas import ClassIn, ClassUpdate, EnrollOfficers
from ..store import CLASSES, ENROLLMENTS, OFFICERS, DocumentNotFound, RecordStore, WriteOp
from .auth import require_user


router = APIRouter(prefix="/data-entry", tags=["classes"], dependencies=[Depends(require_user)])


@router.post("/class", status_code=201)
def add_class(req: ClassIn, store: RecordStore = Depends(get_store)):
    class_id = store.add(CLASSES, req.model_dump())
    return {"id": class_id, "message": "Class added successfully"}


@router.put("/class/{class_id}")
def update_class(class_id: str, update: ClassUpdate, store: RecordStore = Depends(get_store)):
    try:
        store.update(CLASSES, class_id, update.as_document())
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Class not found")
    return {"message": "Class updated successfully"}


@router.delete("/class/{class_id}")
def delete_class(class_id: str, store: RecordStore = Depends(get_store)):
    if store.get(CLASSES, class_id) is None:
        raise HTTPException(status_code=404, detail="Class not found")
    # Enrollments go with the class; the officers themselves are kept
    ops = [WriteOp(ENROLLMENTS, "delete", e.id) for e in store.query(ENROLLMENTS, {"classId": class_id})]
    ops.append(WriteOp(CLASSES, "delete", class_id))
    store.batch_write(ops)
    return {"message": "Class deleted successfully", "enrollmentsRemoved": len(ops) - 1}


@router.post("/class/{class_id}/officer/{officer_id}", status_code=201)
def enroll_officer(class_id: str, officer_id: str, store: RecordStore = Depends(get_store)):
    if store.get(CLASSES, class_id) is None:
        raise HTTPException(status_code=404, detail="Class not found")
    if store.get(OFFICERS, officer_id) is None:
        raise HTTPException(status_code=404, detail="Officer not found")
    store.add(ENROLLMENTS, {"classId": class_id, "officerId": officer_id})
    return {"message": "Officer added to class successfully"}


@router.post("/class/{class_id}/officers", status_code=201)
def enroll_officers(class_id: str, req: EnrollOfficers, store: RecordStore = Depends(get_store)):
    if store.get(CLASSES, class_id) is None:
        raise HTTPException(status_code=404, detail="Class not found")
    missing = [oid for oid in req.officerIds if store.get(OFFICERS, oid) is None]
    if missing:
        raise HTTPException(status_code=404, detail=f"Officers not found: {', '.join(missing)}")
    store.batch_write([
        WriteOp(ENROLLMENTS, "set", None, {"classId": class_id, "officerId": oid})
        for oid in req.officerIds
    ])
    return {"message": "Officers added to class successfully"}
