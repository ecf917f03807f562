"""
Getui push error types: validation, transport, decode, remote and auth failures.
"""

from typing import Any, Optional


class GetuiError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ValidationError(GetuiError):
    """Caller input rejected before any network call."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(code, message)


class TransportError(GetuiError):
    """Connection, timeout or DNS failure. Never retried."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__("transport_error", message)
        self.__cause__ = cause


class DecodeError(GetuiError):
    def __init__(self, message: str, body: str = "", status_code: Optional[int] = None):
        super().__init__("decode_error", message, {"body": body, "status_code": status_code})
        self.body = body
        self.status_code = status_code


class RemoteError(GetuiError):
    """The envelope was parsed but its result code is not ``ok``."""

    def __init__(self, result: str, desc: str = "", details: Optional[dict[str, Any]] = None):
        message = f"Getui returned {result!r}: {desc}" if desc else f"Getui returned {result!r}"
        super().__init__(result, message, details)
        self.result = result
        self.desc = desc


class AuthError(GetuiError):
    def __init__(self, message: str, code: str = "auth_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)
