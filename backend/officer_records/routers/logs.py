"""Per-officer logs: traits, warnings, leave, medical, kit and movements.

Each kind is its own collection with the same four routes, so they are
registered from one table instead of being written out six times.
"""
from typing import Type

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..db import get_store
from ..schemas import DocumentIn, KitItemIn, LeaveIn, MedicalIn, MovementIn, TraitIn, WarningIn
from ..store import KIT, LEAVE, MEDICAL, MOVEMENTS, OFFICERS, TRAITS, WARNINGS, DocumentNotFound, RecordStore
from .auth import require_user


router = APIRouter(prefix="/data-entry", tags=["officer-logs"], dependencies=[Depends(require_user)])

# path segment -> (collection, create schema, display label)
LOG_KINDS = {
    "traits": (TRAITS, TraitIn, "Trait"),
    "warnings": (WARNINGS, WarningIn, "Warning"),
    "leave": (LEAVE, LeaveIn, "Leave record"),
    "medical": (MEDICAL, MedicalIn, "Medical record"),
    "kit": (KIT, KitItemIn, "Kit item"),
    "movements": (MOVEMENTS, MovementIn, "Movement"),
}


def _register(path: str, collection: str, schema: Type[BaseModel], label: str) -> None:
    def create(record: schema, store: RecordStore = Depends(get_store)):  # type: ignore[valid-type]
        if store.get(OFFICERS, record.officerId) is None:
            raise HTTPException(status_code=404, detail="Officer not found")
        record_id = store.add(collection, record.as_document())
        return {"id": record_id, "message": f"{label} added successfully"}

    def list_for_officer(officer_id: str, store: RecordStore = Depends(get_store)):
        return [doc.to_dict() for doc in store.query(collection, {"officerId": officer_id})]

    def update(record_id: str, changes: DocumentIn, store: RecordStore = Depends(get_store)):
        try:
            store.update(collection, record_id, changes.as_document())
        except DocumentNotFound:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"message": f"{label} updated successfully"}

    def delete(record_id: str, store: RecordStore = Depends(get_store)):
        if store.get(collection, record_id) is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        store.delete(collection, record_id)
        return {"message": f"{label} deleted successfully"}

    router.add_api_route(f"/{path}", create, methods=["POST"], status_code=201, name=f"add_{path}")
    router.add_api_route(f"/officer/{{officer_id}}/{path}", list_for_officer, methods=["GET"], name=f"list_{path}")
    router.add_api_route(f"/{path}/{{record_id}}", update, methods=["PUT"], name=f"update_{path}")
    router.add_api_route(f"/{path}/{{record_id}}", delete, methods=["DELETE"], name=f"delete_{path}")


for _path, (_collection, _schema, _label) in LOG_KINDS.items():
    _register(_path, _collection, _schema, _label)
