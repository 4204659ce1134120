import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from wl_app.core.errors import error_response
from wl_app.db.base import Database, get_database

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Waitlist backend is running"


@router.get("/health")
async def health(db: Database = Depends(get_database)):
    try:
        await db.ping()
    except (SQLAlchemyError, OSError):
        log.exception("health check failed")
        return error_response(500, "db_unreachable")
    return {"ok": True}
