"""RequestDispatcher: validation, stamping, envelope mapping, list push and user lookups."""

import httpx
import pytest

from getui_push import DecodeError, Operation, RemoteError, TransportError, ValidationError
from getui_push.models.push import (
    AppCondition,
    AppPush,
    ListPush,
    Message,
    Notification,
    NotificationStyle,
    SinglePush,
)

from conftest import APP_KEY


def notification(title="Hello", text="World") -> Notification:
    return Notification(style=NotificationStyle(title=title, text=text))


class TestPushSingle:
    @pytest.mark.asyncio
    async def test_requires_cid_or_alias(self, client, fake):
        with pytest.raises(ValidationError) as exc:
            await client.push_to_single(SinglePush(notification=notification()))
        assert exc.value.code == "missing_target"
        assert fake.names() == ["auth_sign"]

    @pytest.mark.asyncio
    async def test_stamps_appkey_requestid_and_token(self, client, fake):
        fake.route("push_single", {"result": "ok", "taskid": "T1", "status": "successed_online"})
        ret = await client.push_to_single(SinglePush(cid="cid-1", notification=notification()))

        call = fake.calls_to("push_single")[0]
        assert call.method == "POST"
        assert call.token == client.auth_token
        assert call.content_type == "application/json"
        assert call.body["message"]["appkey"] == APP_KEY
        assert call.body["cid"] == "cid-1"
        assert "alias" not in call.body
        assert call.body["requestid"]
        assert ret.taskid == "T1"
        assert ret.status == "successed_online"
        assert ret.request_id == call.body["requestid"]

    @pytest.mark.asyncio
    async def test_keeps_caller_request_id(self, client, fake):
        ret = await client.push_to_single(SinglePush(alias="bob", requestid="my-request"))
        assert fake.calls_to("push_single")[0].body["requestid"] == "my-request"
        assert ret.request_id == "my-request"

    @pytest.mark.asyncio
    async def test_accepts_plain_dict(self, client, fake):
        await client.dispatcher.push_to_single({"cid": "c", "message": {"msgtype": "transmission"}})
        body = fake.calls_to("push_single")[0].body
        assert body["message"] == {"msgtype": "transmission", "appkey": APP_KEY}

    @pytest.mark.asyncio
    async def test_dict_without_message_gets_appkey(self, client, fake):
        await client.dispatcher.push_to_single({"cid": "c"})
        body = fake.calls_to("push_single")[0].body
        assert body["message"] == {"appkey": APP_KEY}
        assert body["requestid"]

    @pytest.mark.asyncio
    async def test_non_object_message(self, client, fake):
        with pytest.raises(ValidationError) as exc:
            await client.dispatcher.push_to_single({"cid": "c", "message": "hi"})
        assert exc.value.code == "invalid_message"
        assert fake.calls_to("push_single") == []

    @pytest.mark.asyncio
    async def test_remote_error_despite_http_200(self, client, fake):
        fake.route("push_single", {"result": "error", "desc": "quota exceeded"})
        with pytest.raises(RemoteError, match="quota exceeded") as exc:
            await client.push_to_single(SinglePush(cid="c"))
        assert exc.value.result == "error"

    @pytest.mark.asyncio
    async def test_undecodable_body(self, client, fake):
        fake.route("push_single", httpx.Response(200, text="not json"))
        with pytest.raises(DecodeError) as exc:
            await client.push_to_single(SinglePush(cid="c"))
        assert exc.value.body == "not json"

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self, client, fake):
        fake.route("push_single", httpx.ConnectError("dns failure"))
        with pytest.raises(TransportError, match="dns failure") as exc:
            await client.push_to_single(SinglePush(cid="c"))
        assert isinstance(exc.value.__cause__, httpx.ConnectError)
        assert len(fake.calls_to("push_single")) == 1

    @pytest.mark.asyncio
    async def test_token_read_at_send_time(self, client, fake):
        await client.push_to_single(SinglePush(cid="c"))
        await client.session.renew()
        await client.push_to_single(SinglePush(cid="c"))
        first, second = fake.calls_to("push_single")
        assert first.token == "token-0001"
        assert second.token == "token-0002"


class TestPushList:
    @pytest.mark.asyncio
    async def test_two_phase(self, client, fake):
        fake.route("save_list_body", {"result": "ok", "taskid": "T1"})
        fake.route("push_list", {"result": "ok", "status": "successed_online"})
        body = ListPush(
            message=Message(is_offline=True, offline_expire_time=3600000),
            notification=notification(),
            cid=["a", "b"],
        )
        ret = await client.push_to_list(body)

        assert fake.names() == ["auth_sign", "save_list_body", "push_list"]
        saved = fake.calls_to("save_list_body")[0].body
        assert saved["message"] == {
            "appkey": APP_KEY, "is_offline": True, "msgtype": "notification", "offline_expire_time": 3600000,
        }
        assert saved["notification"]["style"]["title"] == "Hello"
        pushed = fake.calls_to("push_list")[0].body
        assert pushed["taskid"] == "T1"
        assert pushed["need_detail"] is True
        assert pushed["cid"] == ["a", "b"]
        assert pushed["message"]["appkey"] == APP_KEY
        assert "offline_expire_time" not in pushed["message"]
        assert ret.taskid == "T1"

    @pytest.mark.asyncio
    async def test_save_failure_short_circuits(self, client, fake):
        fake.route("save_list_body", {"result": "error", "desc": "body too large"})
        with pytest.raises(RemoteError, match="body too large"):
            await client.push_to_list(ListPush(cid=["a"]))
        assert fake.calls_to("push_list") == []

    @pytest.mark.asyncio
    async def test_save_transport_failure_short_circuits(self, client, fake):
        fake.route("save_list_body", httpx.ReadTimeout("slow"))
        with pytest.raises(TransportError):
            await client.push_to_list(ListPush(alias=["bob"]))
        assert fake.calls_to("push_list") == []

    @pytest.mark.asyncio
    async def test_save_without_taskid(self, client, fake):
        fake.route("save_list_body", {"result": "ok"})
        with pytest.raises(DecodeError):
            await client.push_to_list(ListPush(cid=["a"]))
        assert fake.calls_to("push_list") == []

    @pytest.mark.asyncio
    async def test_requires_target_before_any_call(self, client, fake):
        with pytest.raises(ValidationError):
            await client.push_to_list(ListPush(cid=[]))
        assert fake.names() == ["auth_sign"]

    @pytest.mark.asyncio
    async def test_single_alias_string(self, client, fake):
        fake.route("save_list_body", {"result": "ok", "taskid": "T1"})
        await client.dispatcher.push_to_list({"alias": "bob"})
        assert fake.calls_to("push_list")[0].body["alias"] == ["bob"]

    @pytest.mark.asyncio
    async def test_malformed_dict_is_validation_error(self, client, fake):
        with pytest.raises(ValidationError) as exc:
            await client.dispatcher.push_to_list({"cid": 42})
        assert exc.value.code == "invalid_body"
        assert fake.names() == ["auth_sign"]

    @pytest.mark.asyncio
    async def test_push_phase_failure(self, client, fake):
        fake.route("save_list_body", {"result": "ok", "taskid": "T1"})
        fake.route("push_list", {"result": "error", "desc": "no valid cid"})
        with pytest.raises(RemoteError, match="no valid cid"):
            await client.push_to_list(ListPush(cid=["a"]))


class TestPushApp:
    @pytest.mark.asyncio
    async def test_conditions_and_request_id(self, client, fake):
        fake.route("push_app", {"result": "ok", "taskid": "APP-T"})
        ret = await client.push_to_app(AppPush(
            notification=notification(),
            condition=[AppCondition(key="phonetype", values=["ANDROID"])],
        ))
        body = fake.calls_to("push_app")[0].body
        assert body["condition"] == [{"key": "phonetype", "values": ["ANDROID"], "opt_type": "or"}]
        assert body["message"]["appkey"] == APP_KEY
        assert ret.request_id == body["requestid"]
        assert ret.taskid == "APP-T"


class TestStopTask:
    @pytest.mark.asyncio
    async def test_delete_without_body(self, client, fake):
        ret = await client.stop_task("T1")
        call = fake.calls[-1]
        assert (call.method, call.name, call.body) == ("DELETE", "stop_task", None)
        assert call.token == client.auth_token
        assert ret.ok

    @pytest.mark.asyncio
    async def test_empty_task_id(self, client, fake):
        with pytest.raises(ValidationError):
            await client.stop_task("")
        assert fake.names() == ["auth_sign"]


class TestUserStatus:
    @pytest.mark.asyncio
    async def test_offline_with_last_login(self, client, fake):
        fake.route("user_status", {"result": "ok", "cid": "c1", "status": "offline", "lastlogin": "1500000000000"})
        status = await client.user_status("c1")
        assert fake.calls[-1].method == "GET"
        assert status.cid == "c1"
        assert status.last_login.year == 2017

    @pytest.mark.asyncio
    async def test_non_numeric_last_login_is_decode_error(self, client, fake):
        fake.route("user_status", {"result": "ok", "status": "offline", "lastlogin": "abc"})
        with pytest.raises(DecodeError, match="lastlogin"):
            await client.user_status("c1")

    @pytest.mark.asyncio
    async def test_no_user_is_an_error_for_status(self, client, fake):
        fake.route("user_status", {"result": "no_user"})
        with pytest.raises(RemoteError):
            await client.user_status("c1")

    @pytest.mark.asyncio
    async def test_exists(self, client, fake):
        fake.route("user_status", {"result": "ok", "status": "online"})
        assert await client.user_exists("c1") is True

    @pytest.mark.asyncio
    async def test_no_user_means_false(self, client, fake):
        fake.route("user_status", {"result": "no_user"})
        assert await client.user_exists("c1") is False

    @pytest.mark.asyncio
    async def test_other_codes_propagate(self, client, fake):
        fake.route("user_status", {"result": "sign_error", "desc": "token expired"})
        with pytest.raises(RemoteError, match="token expired"):
            await client.user_exists("c1")


class TestBuild:
    @pytest.mark.asyncio
    async def test_get_has_no_body(self, client):
        spec = client.dispatcher.build(Operation.USER_STATUS, {"ignored": True}, {"cid": "c1"})
        assert spec.method == "GET"
        assert spec.path == "user_status/c1"
        assert spec.body is None
        assert spec.headers["authtoken"] == client.auth_token

    @pytest.mark.asyncio
    async def test_validation_precedes_token_lookup(self, client):
        await client.session.invalidate()
        with pytest.raises(ValidationError):
            client.dispatcher.build(Operation.PUSH_SINGLE, SinglePush())
