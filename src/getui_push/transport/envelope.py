"""
Envelope decoding and request id generation.
"""

import json
import threading
import time
from typing import Optional, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from getui_push.errors import DecodeError, RemoteError
from getui_push.models.envelope import Envelope

E = TypeVar("E", bound=Envelope)

_BODY_EXCERPT = 200
_id_lock = threading.Lock()
_last_id = 0


def new_request_id() -> str:
    """Base-12 rendering of the nanosecond clock, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        now = max(time.time_ns(), _last_id + 1)
        _last_id = now
    return _to_base12(now)


def _to_base12(n: int) -> str:
    digits = "0123456789ab"
    out = []
    while n:
        n, r = divmod(n, 12)
        out.append(digits[r])
    return "".join(reversed(out)) or "0"


def decode_envelope(resp: httpx.Response, model: type[E] = Envelope) -> E:  # type: ignore[assignment]
    """Parse a response body into ``model``. Raises DecodeError on bad JSON or a missing result."""
    text = resp.text
    try:
        data = json.loads(text)
    except ValueError as e:
        raise DecodeError(
            f"HTTP {resp.status_code}: response is not JSON ({e})",
            body=text[:_BODY_EXCERPT], status_code=resp.status_code,
        ) from e
    if not isinstance(data, dict):
        raise DecodeError(
            f"HTTP {resp.status_code}: expected a JSON object",
            body=text[:_BODY_EXCERPT], status_code=resp.status_code,
        )
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(
            f"HTTP {resp.status_code}: malformed envelope: {e.errors()[0]['msg']}",
            body=text[:_BODY_EXCERPT], status_code=resp.status_code,
        ) from e


def check_envelope(envelope: E, allow: Optional[frozenset[str]] = None) -> E:
    """Raise RemoteError unless the result is ``ok`` (or one of ``allow``)."""
    if envelope.ok or (allow and envelope.result in allow):
        return envelope
    raise RemoteError(envelope.result, envelope.desc, details=envelope.model_dump(exclude_none=True))
