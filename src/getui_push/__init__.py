"""
getui-push — Getui push REST API client for Python.

Signed auth-token session with background renewal, plus single, list and
app-wide pushes, task stop and user status lookup.
"""

from getui_push.client import GetuiClient, AsyncGetuiClient
from getui_push.auth import SessionManager
from getui_push.dispatcher import RequestDispatcher
from getui_push.config import ApplicationCredentials, ClientConfig, load_config
from getui_push.endpoints import Operation
from getui_push.errors import GetuiError, ValidationError, TransportError, DecodeError, RemoteError, AuthError
from getui_push.models.session import RenewalOutcome, SessionState, StalePolicy
from getui_push.signing import sign

__version__ = "0.1.0"
__all__ = [
    "GetuiClient",
    "AsyncGetuiClient",
    "SessionManager",
    "RequestDispatcher",
    "ApplicationCredentials",
    "ClientConfig",
    "load_config",
    "Operation",
    "GetuiError",
    "ValidationError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "AuthError",
    "RenewalOutcome",
    "SessionState",
    "StalePolicy",
    "sign",
]
