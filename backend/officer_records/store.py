"""Document store over a single SQLAlchemy table.

Collections hold schemaless JSON documents keyed by an opaque id. Reads are
equality filters, writes go through ``batch_write`` which applies every
operation in one transaction or none of them.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import DocumentRow


# Collection names shared by the routers, the statistics engine and cleanup
OFFICERS = "officers"
CLASSES = "class"
ENROLLMENTS = "enrollments"
COURSES = "courses"
ASSESSMENTS = "assessments"
MARKS = "marks"
TRAITS = "traits"
WARNINGS = "warnings"
LEAVE = "leave"
MEDICAL = "medical"
KIT = "kit"
MOVEMENTS = "movements"
CREDENTIALS = "credentials"
REFRESH_TOKENS = "refreshTokens"


class StoreError(Exception):
	"""The store could not complete a read or write."""


class DocumentNotFound(StoreError):
	def __init__(self, collection: str, doc_id: str) -> None:
		super().__init__(f"{collection}/{doc_id} does not exist")
		self.collection = collection
		self.doc_id = doc_id


@dataclass
class Document:
	id: str
	data: Dict[str, Any]

	def get(self, key: str, default: Any = None) -> Any:
		return self.data.get(key, default)

	def to_dict(self) -> Dict[str, Any]:
		return {"id": self.id, **self.data}


@dataclass
class WriteOp:
	collection: str
	# "set" replaces (or creates) a document, "update" merges into an existing one
	op: str = "set"
	doc_id: Optional[str] = None
	data: Dict[str, Any] = field(default_factory=dict)


def new_id() -> str:
	return uuid.uuid4().hex


class RecordStore:
	def __init__(self, session_factory: Callable[[], Session]) -> None:
		self._session_factory = session_factory

	def query(self, collection: str, where: Optional[Dict[str, Any]] = None, *, limit: Optional[int] = None) -> List[Document]:
		"""Documents of ``collection`` whose fields equal every value in ``where``.

		Results come back in insertion order. No match is an empty list.
		String values are compared in SQL on the JSON payload; other values
		(numbers, lists, None) are checked on the loaded rows.
		"""
		where = where or {}
		try:
			with self._session_factory() as db:
				stmt = select(DocumentRow).where(DocumentRow.collection == collection)
				for key, value in where.items():
					if isinstance(value, str):
						stmt = stmt.where(DocumentRow.data[key].as_string() == value)
				stmt = stmt.order_by(DocumentRow.seq)
				found: List[Document] = []
				for row in db.execute(stmt).scalars():
					data = row.data or {}
					if any(data.get(key) != value for key, value in where.items()):
						continue
					found.append(Document(row.doc_id, dict(data)))
					if limit is not None and len(found) >= limit:
						break
				return found
		except SQLAlchemyError as e:
			raise StoreError(str(e)) from e

	def get(self, collection: str, doc_id: str) -> Optional[Document]:
		try:
			with self._session_factory() as db:
				row = self._row(db, collection, doc_id)
				if row is None:
					return None
				return Document(row.doc_id, dict(row.data or {}))
		except SQLAlchemyError as e:
			raise StoreError(str(e)) from e

	def add(self, collection: str, data: Dict[str, Any]) -> str:
		return self.batch_write([WriteOp(collection, "set", None, data)])[0]

	def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
		self.batch_write([WriteOp(collection, "update", doc_id, data)])

	def delete(self, collection: str, doc_id: str) -> None:
		self.batch_write([WriteOp(collection, "delete", doc_id)])

	def batch_write(self, ops: List[WriteOp]) -> List[str]:
		"""Apply ``ops`` atomically and return the id each one touched.

		Updating a missing document raises ``DocumentNotFound`` and nothing in
		the batch is written. Deleting a missing document is a no-op.
		"""
		ids: List[str] = []
		try:
			with self._session_factory() as db, db.begin():
				for op in ops:
					ids.append(self._apply(db, op))
		except SQLAlchemyError as e:
			raise StoreError(str(e)) from e
		return ids

	def _apply(self, db: Session, op: WriteOp) -> str:
		if op.op == "set":
			doc_id = op.doc_id or new_id()
			row = self._row(db, op.collection, doc_id) if op.doc_id else None
			if row is None:
				db.add(DocumentRow(collection=op.collection, doc_id=doc_id, data=dict(op.data)))
			else:
				row.data = dict(op.data)
			db.flush()
			return doc_id
		if not op.doc_id:
			raise ValueError(f"{op.op} requires a document id")
		row = self._row(db, op.collection, op.doc_id)
		if op.op == "update":
			if row is None:
				raise DocumentNotFound(op.collection, op.doc_id)
			# Reassign so the JSON column is flagged dirty
			row.data = {**(row.data or {}), **op.data}
		elif op.op == "delete":
			if row is not None:
				db.delete(row)
		else:
			raise ValueError(f"unknown write op: {op.op}")
		db.flush()
		return op.doc_id

	@staticmethod
	def _row(db: Session, collection: str, doc_id: str) -> Optional[DocumentRow]:
		stmt = select(DocumentRow).where(DocumentRow.collection == collection, DocumentRow.doc_id == doc_id)
		return db.execute(stmt).scalar_one_or_none()
