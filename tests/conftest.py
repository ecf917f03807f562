"""Fake Getui REST service backed by httpx.MockTransport."""

import itertools
import json
from typing import Any, Callable, NamedTuple, Optional, Union

import httpx
import pytest
import pytest_asyncio

from getui_push import AsyncGetuiClient

APP_ID = "APPID"
APP_KEY = "K"
MASTER_SECRET = "S"

Route = Union[dict, httpx.Response, Exception, Callable[[httpx.Request], Any]]


class Call(NamedTuple):
    method: str
    name: str
    token: Optional[str]
    body: Optional[dict]
    content_type: Optional[str]


class FakeGetui:
    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.issued: list[str] = []
        self.routes: dict[str, Route] = {}
        self._ids = itertools.count(1)
        self.route("auth_sign", self._issue)
        self.route("auth_close", {"result": "ok"})

    def _issue(self, _request: httpx.Request) -> dict:
        token = f"token-{next(self._ids):04d}"
        self.issued.append(token)
        return {"result": "ok", "auth_token": token, "expire_time": "1700000000000"}

    def route(self, name: str, response: Route) -> None:
        self.routes[name] = response

    def names(self) -> list[str]:
        return [c.name for c in self.calls]

    def calls_to(self, name: str) -> list[Call]:
        return [c for c in self.calls if c.name == name]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split(f"/v1/{APP_ID}/", 1)[1]
        name = path.split("/")[0]
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(
            request.method, name, request.headers.get("authtoken"), body, request.headers.get("content-type"),
        ))
        response = self.routes.get(name, {"result": "ok"})
        if callable(response) and not isinstance(response, httpx.Response):
            response = response(request)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake() -> FakeGetui:
    return FakeGetui()


def make_client(fake: FakeGetui, **kwargs: Any) -> AsyncGetuiClient:
    return AsyncGetuiClient(APP_ID, APP_KEY, MASTER_SECRET, transport=fake.transport, **kwargs)


@pytest_asyncio.fixture
async def client(fake):
    c = make_client(fake)
    await c.start()
    yield c
    await c.close()
