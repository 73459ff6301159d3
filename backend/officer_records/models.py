from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, JSON, UniqueConstraint
from .db import Base


class DocumentRow(Base):
	__tablename__ = "documents"
	# seq preserves insertion order, which is the order queries return documents in
	seq = Column(Integer, primary_key=True, autoincrement=True)
	collection = Column(String(64), nullable=False, index=True)
	doc_id = Column(String(64), nullable=False, index=True)
	data = Column(JSON, nullable=False, default=dict)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	__table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),)
