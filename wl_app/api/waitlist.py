import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from wl_app.api.deps import client_ip, rate_limit, read_json_object
from wl_app.core.errors import ApiError
from wl_app.db.base import Database, get_database
from wl_app.db.models import WaitlistEntry, utcnow
from wl_app.schemas.waitlist import SubmitOut, WaitlistIn, first_error_code

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["waitlist"])

MAX_USER_AGENT_LEN = 5000


@router.post("/waitlist", response_model=SubmitOut, dependencies=[Depends(rate_limit())])
async def submit(request: Request, db: Database = Depends(get_database)):
    payload = await read_json_object(request)
    try:
        data = WaitlistIn.model_validate(payload)
    except ValidationError as e:
        raise ApiError(400, first_error_code(e))

    user_agent = request.headers.get("user-agent")
    entry = WaitlistEntry(
        **data.model_dump(),
        ip=client_ip(request),
        user_agent=user_agent[:MAX_USER_AGENT_LEN] if user_agent else None,
        created_at=utcnow(),
    )
    try:
        async with db.session() as s:
            s.add(entry)
            await s.commit()
    except SQLAlchemyError:
        log.exception("POST /api/waitlist failed")
        raise ApiError(500, "server_error")

    return SubmitOut(id=entry.id)
