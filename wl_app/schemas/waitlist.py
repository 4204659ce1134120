import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _as_text(v):
    # booleans, objects and arrays are not text; they fail as missing
    if v is None or isinstance(v, (bool, dict, list)):
        return v
    return str(v).strip()


class WaitlistIn(BaseModel):
    # declaration order is the order errors are reported in
    name: str = Field(min_length=2, max_length=255)
    zip: str = Field(min_length=3, max_length=20)
    phone: str = Field(min_length=7, max_length=50)
    plan_interest: str = Field(min_length=2, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    note: Optional[str] = None

    @field_validator("name", "zip", "phone", "plan_interest", mode="before")
    @classmethod
    def _trim(cls, v):
        return _as_text(v)

    @field_validator("email", "note", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        v = _as_text(v)
        return v or None

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v):
        if v is not None and not EMAIL_RE.match(v):
            raise ValueError("email_invalid")
        return v


def first_error_code(exc: ValidationError) -> str:
    """Machine-readable code for the first failing field only."""
    err = exc.errors()[0]
    field = str(err["loc"][0]) if err["loc"] else "body"
    if field == "email":
        return "email_invalid"
    if err["type"] == "string_too_long":
        return f"{field}_too_long"
    return f"{field}_required"


class SubmitOut(BaseModel):
    ok: bool = True
    id: int


class WaitlistEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    zip: str
    phone: str
    email: Optional[str] = None
    plan_interest: str
    note: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class WaitlistListOut(BaseModel):
    ok: bool = True
    rows: List[WaitlistEntryOut]
