"""AsyncGetuiClient lifecycle and the GetuiClient sync wrapper."""

import threading

import pydantic
import pytest

from getui_push import AsyncGetuiClient, AuthError, GetuiClient, SessionState
from getui_push.config import ApplicationCredentials, ClientConfig
from getui_push.models.push import SinglePush

from conftest import APP_ID, APP_KEY, MASTER_SECRET, FakeGetui, make_client


class TestAsyncClient:
    @pytest.mark.asyncio
    async def test_context_manager_signs_and_closes(self, fake):
        async with make_client(fake) as client:
            assert client.started
            assert client.auth_token == "token-0001"
            await client.push_to_single(SinglePush(cid="c"))
        assert fake.names() == ["auth_sign", "push_single", "auth_close"]
        assert client.session.state is SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_close_without_revoking(self, fake):
        client = make_client(fake)
        await client.start()
        await client.close(close_auth=False)
        assert fake.names() == ["auth_sign"]

    @pytest.mark.asyncio
    async def test_start_failure(self, fake):
        fake.route("auth_sign", {"result": "error", "desc": "appkey invalid"})
        client = make_client(fake)
        with pytest.raises(AuthError, match="appkey invalid"):
            await client.start()
        assert not client.started

    @pytest.mark.asyncio
    async def test_close_auth_then_calls_fail(self, fake):
        async with make_client(fake) as client:
            await client.close_auth()
            with pytest.raises(AuthError):
                await client.push_to_single(SinglePush(cid="c"))
        assert fake.calls_to("push_single") == []

    @pytest.mark.asyncio
    async def test_independent_sessions(self):
        fake_a, fake_b = FakeGetui(), FakeGetui()
        async with make_client(fake_a) as a, make_client(fake_b) as b:
            await a.session.renew()
            assert a.auth_token == "token-0002"
            assert b.auth_token == "token-0001"

    @pytest.mark.asyncio
    async def test_from_config(self, fake):
        cfg = ClientConfig(
            credentials=ApplicationCredentials(app_id=APP_ID, app_key=APP_KEY, master_secret=MASTER_SECRET),
            renewal_interval=0,
        )
        client = AsyncGetuiClient.from_config(cfg, transport=fake.transport)
        assert client.session.renewal_interval == 20 * 3600
        async with client:
            assert client.auth_token


class TestSyncClient:
    def test_push_and_close(self, fake):
        with GetuiClient(APP_ID, APP_KEY, MASTER_SECRET, transport=fake.transport) as client:
            ret = client.push_to_single(SinglePush(cid="c"))
            assert ret.ok
            assert client.user_exists("c")
        assert fake.names() == ["auth_sign", "push_single", "user_status", "auth_close"]

    def test_renewal_runs_between_calls(self, fake):
        renewed = threading.Event()
        client = GetuiClient(
            APP_ID, APP_KEY, MASTER_SECRET,
            transport=fake.transport, renewal_interval=0.02, on_renewal=lambda _o: renewed.set(),
        )
        client.start()
        try:
            assert renewed.wait(timeout=2)
            assert client.auth_token != "token-0001"
        finally:
            client.close()

    def test_calls_after_close(self, fake):
        client = GetuiClient(APP_ID, APP_KEY, MASTER_SECRET, transport=fake.transport)
        client.start()
        client.close()
        client.close()
        with pytest.raises(AuthError):
            client.stop_task("T1")

    def test_failed_construction_stops_loop_thread(self):
        def loop_threads():
            return [t for t in threading.enumerate() if t.name == "getui-push-loop"]

        before = len(loop_threads())
        with pytest.raises(pydantic.ValidationError):
            GetuiClient(APP_ID, APP_KEY, None)
        assert len(loop_threads()) == before
