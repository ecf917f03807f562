"""
Credential and session lifecycle models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACQUIRING = "acquiring"
    ACTIVE = "active"
    RENEWING = "renewing"
    FAILED = "failed"
    CLOSED = "closed"


class StalePolicy(str, Enum):
    """What current_token() does after a failed renewal."""
    KEEP = "keep"  # keep serving the previous token
    FAIL = "fail"  # raise AuthError until a renewal succeeds


class Credential(BaseModel):
    token: str
    issued_at: datetime
    expire_time: Optional[Union[int, str]] = None

    model_config = {"frozen": True}


class RenewalOutcome(BaseModel):
    ok: bool
    token_rotated: bool = False
    revoked: bool = False
    error: Optional[str] = None
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
