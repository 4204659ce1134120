import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from wl_app.api.deps import get_settings, rate_limit
from wl_app.core.errors import ApiError
from wl_app.db.base import Database, get_database
from wl_app.db.models import WaitlistEntry
from wl_app.schemas.waitlist import WaitlistEntryOut, WaitlistListOut

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def require_admin(request: Request, x_admin_token: Optional[str] = Header(None)) -> None:
    expected = get_settings(request).admin_token
    # no configured token means nobody gets in
    if not expected or not x_admin_token:
        raise ApiError(401, "unauthorized")
    if not hmac.compare_digest(x_admin_token.encode(), expected.encode()):
        raise ApiError(401, "unauthorized")


def parse_limit(raw: Optional[str]) -> int:
    try:
        n = int(raw) if raw not in (None, "") else DEFAULT_LIMIT
    except ValueError:
        n = DEFAULT_LIMIT
    return max(1, min(n, MAX_LIMIT))


@router.get(
    "/waitlist",
    response_model=WaitlistListOut,
    dependencies=[Depends(rate_limit()), Depends(require_admin)],
)
async def list_waitlist(limit: Optional[str] = None, db: Database = Depends(get_database)):
    stmt = (
        select(WaitlistEntry)
        .order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc())
        .limit(parse_limit(limit))
    )
    try:
        async with db.session() as s:
            rows = (await s.execute(stmt)).scalars().all()
    except SQLAlchemyError:
        log.exception("GET /api/admin/waitlist failed")
        raise ApiError(500, "server_error")

    return WaitlistListOut(rows=[WaitlistEntryOut.model_validate(r) for r in rows])
