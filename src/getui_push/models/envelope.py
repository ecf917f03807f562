"""
Response envelopes — every Getui REST response carries at least ``result``.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

RESULT_OK = "ok"
RESULT_NO_USER = "no_user"


class Envelope(BaseModel):
    result: str
    desc: str = ""
    taskid: Optional[str] = None
    status: Optional[str] = None
    request_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("requestID", "requestid", "request_id"),
    )

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def ok(self) -> bool:
        return self.result == RESULT_OK


class TokenEnvelope(Envelope):
    """auth_sign response"""
    auth_token: Optional[str] = None
    expire_time: Optional[Union[int, str]] = None


class UserStatus(Envelope):
    """user_status response. ``lastlogin`` is only present while the user is offline."""
    cid: Optional[str] = None
    lastlogin: Optional[Union[int, str]] = None

    @field_validator("lastlogin")
    @classmethod
    def _millis(cls, v):
        if isinstance(v, str) and v and not v.isdigit():
            raise ValueError(f"lastlogin is not a millisecond timestamp: {v!r}")
        return v

    @property
    def last_login(self) -> Optional[datetime]:
        if self.lastlogin in (None, ""):
            return None
        return datetime.fromtimestamp(int(self.lastlogin) / 1000, tz=timezone.utc)

    @property
    def online(self) -> bool:
        return self.status == "online"


class RequestSpec(BaseModel):
    """One outgoing request, built per call and discarded after sending."""
    operation: str
    method: str
    path: str
    body: Optional[dict[str, Any]] = None
    headers: dict[str, str] = Field(default_factory=dict)
