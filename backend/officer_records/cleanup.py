from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from .store import REFRESH_TOKENS, RecordStore, WriteOp


def _parse(value: object) -> Optional[datetime]:
	if not isinstance(value, str):
		return None
	try:
		parsed = datetime.fromisoformat(value)
	except ValueError:
		return None
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed


def purge_expired_refresh_tokens(store: RecordStore, now: Optional[datetime] = None) -> int:
	now = now or datetime.now(timezone.utc)
	# Tokens without a readable expiry are left alone; the JWT itself still expires
	stale = []
	for doc in store.query(REFRESH_TOKENS):
		expires = _parse(doc.get("expiresAt"))
		if expires is not None and expires < now:
			stale.append(doc.id)
	if stale:
		store.batch_write([WriteOp(REFRESH_TOKENS, "delete", doc_id) for doc_id in stale])
	return len(stale)
