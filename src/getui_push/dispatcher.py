"""
Request dispatcher — the pipeline every push operation goes through.

validate -> stamp appkey/requestid -> resolve endpoint -> attach token ->
send -> decode envelope -> check result code.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from getui_push.auth import SessionManager
from getui_push.endpoints import Operation, lookup
from getui_push.errors import DecodeError, ValidationError
from getui_push.models.envelope import RESULT_NO_USER, Envelope, RequestSpec, UserStatus
from getui_push.models.push import AppPush, ListPush, SaveListBody, SinglePush
from getui_push.transport.envelope import E, check_envelope, decode_envelope, new_request_id
from getui_push.transport.http import HttpClient

logger = logging.getLogger(__name__)

Body = Union[BaseModel, dict[str, Any], None]


def _require_target(body: dict[str, Any]) -> None:
    if not body.get("cid") and not body.get("alias"):
        raise ValidationError("Push target required: set cid or alias", code="missing_target")


VALIDATORS: dict[Operation, Callable[[dict[str, Any]], None]] = {
    Operation.PUSH_SINGLE: _require_target,
    Operation.PUSH_LIST: _require_target,
}

STAMPS_APPKEY = frozenset({
    Operation.PUSH_SINGLE, Operation.SAVE_LIST_BODY, Operation.PUSH_LIST, Operation.PUSH_APP,
})


def _to_dict(body: Body) -> Optional[dict[str, Any]]:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(by_alias=True, exclude_none=True)
    return copy.deepcopy(dict(body))


class RequestDispatcher:
    def __init__(self, http: HttpClient, session: SessionManager):
        self._http = http
        self._session = session

    def build(
        self,
        operation: Operation,
        body: Body = None,
        path_params: Optional[dict[str, str]] = None,
    ) -> RequestSpec:
        """Validate and stamp ``body`` and resolve the endpoint. No network activity."""
        operation = Operation(operation)
        endpoint = lookup(operation)
        data = _to_dict(body)
        params = path_params or {}
        for name, value in params.items():
            if not value:
                raise ValidationError(f"{operation.value}: {name} must not be empty", code=f"missing_{name}")

        if endpoint.has_body:
            data = data or {}
            validate = VALIDATORS.get(operation)
            if validate:
                validate(data)
            if operation in STAMPS_APPKEY:
                message = data.setdefault("message", {})
                if not isinstance(message, dict):
                    raise ValidationError(f"{operation.value}: message must be an object", code="invalid_message")
                message["appkey"] = self._session.app_key
            if endpoint.stamps_request_id and not data.get("requestid"):
                data["requestid"] = new_request_id()
        else:
            data = None

        return RequestSpec(
            operation=operation.value,
            method=endpoint.method,
            path=endpoint.render(**params),
            body=data,
            headers=self._http.headers(self._session.current_token()),
        )

    async def execute(
        self,
        operation: Operation,
        body: Body = None,
        *,
        path_params: Optional[dict[str, str]] = None,
        response_model: type[E] = Envelope,  # type: ignore[assignment]
        allow_results: Optional[frozenset[str]] = None,
        timeout: Optional[float] = None,
    ) -> E:
        spec = self.build(operation, body, path_params)
        logger.debug("Dispatching %s %s", spec.method, spec.path)
        resp = await self._http.send(spec.method, spec.path, spec.body, headers=spec.headers, timeout=timeout)
        envelope = check_envelope(decode_envelope(resp, response_model), allow=allow_results)
        if spec.body and envelope.request_id is None and spec.body.get("requestid"):
            envelope.request_id = spec.body["requestid"]
        return envelope

    async def push_to_single(self, body: Union[SinglePush, dict[str, Any]], timeout: Optional[float] = None) -> Envelope:
        return await self.execute(Operation.PUSH_SINGLE, body, timeout=timeout)

    async def push_to_app(self, body: Union[AppPush, dict[str, Any]], timeout: Optional[float] = None) -> Envelope:
        return await self.execute(Operation.PUSH_APP, body, timeout=timeout)

    async def push_to_list(self, body: Union[ListPush, dict[str, Any]], timeout: Optional[float] = None) -> Envelope:
        """Two-phase list push: save the shared message body, then push it to the targets.

        A failed save raises before ``push_list`` is attempted.
        """
        if isinstance(body, dict):
            try:
                body = ListPush.model_validate(body)
            except PydanticValidationError as e:
                raise ValidationError(f"push_list: invalid body: {e.errors()[0]['msg']}", code="invalid_body") from e
        _require_target(_to_dict(body) or {})

        message = body.message.model_copy()
        saved = await self.execute(
            Operation.SAVE_LIST_BODY,
            SaveListBody(message=message, notification=body.notification, push_info=body.push_info),
            timeout=timeout,
        )
        if not saved.taskid:
            raise DecodeError("save_list_body returned no taskid", body=saved.model_dump_json())

        push = body.model_copy(update={"taskid": saved.taskid, "need_detail": True})
        data = push.model_dump(by_alias=True, exclude_none=True)
        data["message"].pop("offline_expire_time", None)
        envelope = await self.execute(Operation.PUSH_LIST, data, timeout=timeout)
        if envelope.taskid is None:
            envelope.taskid = saved.taskid
        return envelope

    async def stop_task(self, task_id: str, timeout: Optional[float] = None) -> Envelope:
        return await self.execute(Operation.STOP_TASK, path_params={"task_id": task_id}, timeout=timeout)

    async def user_status(self, cid: str, timeout: Optional[float] = None) -> UserStatus:
        return await self.execute(
            Operation.USER_STATUS, path_params={"cid": cid}, response_model=UserStatus, timeout=timeout,
        )

    async def user_exists(self, cid: str, timeout: Optional[float] = None) -> bool:
        """``no_user`` means the cid is unknown, not that the lookup failed."""
        status = await self.execute(
            Operation.USER_STATUS,
            path_params={"cid": cid},
            response_model=UserStatus,
            allow_results=frozenset({RESULT_NO_USER}),
            timeout=timeout,
        )
        return status.result != RESULT_NO_USER
