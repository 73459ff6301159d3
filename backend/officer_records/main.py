import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, engine, get_store
from .cleanup import purge_expired_refresh_tokens
from .settings import settings
from .routers import health
from .routers import auth
from .routers import common
from .routers import officers
from .routers import classes
from .routers import courses
from .routers import logs
from .routers import reports
# Registers the documents table on Base.metadata
from . import models  # noqa: F401

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(title="Officer Training Records API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
	allow_headers=["Content-Type", "Authorization"],
	allow_credentials=True,
)
app.include_router(health.router)
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(common.router, prefix=API_PREFIX)
app.include_router(officers.router, prefix=API_PREFIX)
app.include_router(classes.router, prefix=API_PREFIX)
app.include_router(courses.router, prefix=API_PREFIX)
app.include_router(logs.router, prefix=API_PREFIX)
app.include_router(reports.router, prefix=API_PREFIX)

@app.get("/info")
def root():
	return {"status": "ok", "llm_configured": bool(settings.llm_api_key), "llm_provider": settings.llm_provider}


def _purge_tokens() -> None:
	try:
		removed = purge_expired_refresh_tokens(get_store())
		if removed:
			logger.info("Purged %d expired refresh tokens", removed)
	except Exception:
		logger.exception("Refresh token cleanup failed")


async def _cleanup_watcher():
	# Startup already ran one pass; repeat daily
	while True:
		await asyncio.sleep(24 * 60 * 60)
		await asyncio.to_thread(_purge_tokens)

@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	_purge_tokens()
	# Start periodic cleanup loop
	asyncio.create_task(_cleanup_watcher())
