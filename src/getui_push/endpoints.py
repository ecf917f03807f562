"""
Endpoint catalog: logical operation to HTTP method and path under ``/v1/{appid}/``.
"""

from enum import Enum
from typing import NamedTuple
from urllib.parse import quote


class Operation(str, Enum):
    AUTH_SIGN = "auth_sign"
    AUTH_CLOSE = "auth_close"
    PUSH_SINGLE = "push_single"
    SAVE_LIST_BODY = "save_list_body"
    PUSH_LIST = "push_list"
    PUSH_APP = "push_app"
    STOP_TASK = "stop_task"
    USER_STATUS = "user_status"


class Endpoint(NamedTuple):
    method: str
    path: str
    stamps_request_id: bool = False

    @property
    def has_body(self) -> bool:
        return self.method not in ("GET", "DELETE")

    def render(self, **params: str) -> str:
        return self.path.format(**{k: quote(str(v), safe="") for k, v in params.items()})


CATALOG: dict[Operation, Endpoint] = {
    Operation.AUTH_SIGN: Endpoint("POST", "auth_sign"),
    Operation.AUTH_CLOSE: Endpoint("POST", "auth_close"),
    Operation.PUSH_SINGLE: Endpoint("POST", "push_single", stamps_request_id=True),
    Operation.SAVE_LIST_BODY: Endpoint("POST", "save_list_body"),
    Operation.PUSH_LIST: Endpoint("POST", "push_list"),
    Operation.PUSH_APP: Endpoint("POST", "push_app", stamps_request_id=True),
    Operation.STOP_TASK: Endpoint("DELETE", "stop_task/{task_id}"),
    Operation.USER_STATUS: Endpoint("GET", "user_status/{cid}"),
}


def lookup(operation: Operation) -> Endpoint:
    return CATALOG[Operation(operation)]
