"""Unit tests for JSON-RPC handler."""
import asyncio
from datetime import datetime, timezone

import pytest
from json_rpc_endpoint.jsonrpc.handler import JSONRPCHandler
from json_rpc_endpoint.jsonrpc.models import ErrorCode
from json_rpc_endpoint.utils.errors import InvalidParamsError, NestedError, RPCError


@pytest.mark.asyncio
async def test_jsonrpc_method_not_found():
    """Test that non-existent methods return METHOD_NOT_FOUND error."""
    handler = JSONRPCHandler()

    response = await handler.handle_request({
        "jsonrpc": "2.0",
        "method": "noSuchMethod",
        "id": "x"
    })

    assert response == {
        "jsonrpc": "2.0",
        "id": "x",
        "error": {
            "code": ErrorCode.METHOD_NOT_FOUND,
            "message": 'Method "noSuchMethod" not found'
        }
    }


@pytest.mark.asyncio
async def test_jsonrpc_successful_call():
    """Test the add scenario end to end."""
    handler = JSONRPCHandler()
    handler.register_method("add", lambda req, ctx, params: params["a"] + params["b"])

    response = await handler.handle_request({
        "jsonrpc": "2.0",
        "method": "add",
        "params": {"a": 2, "b": 3},
        "id": 1
    })

    assert response == {"jsonrpc": "2.0", "id": 1, "result": 5}


@pytest.mark.asyncio
async def test_jsonrpc_async_handler():
    """Test that awaitable results are awaited."""
    handler = JSONRPCHandler()

    async def test_method(req, ctx, params):
        await asyncio.sleep(0)
        return {"result": "success", "input": params}

    handler.register_method("test", test_method)

    response = await handler.handle_request({
        "jsonrpc": "2.0",
        "method": "test",
        "params": {"key": "value"},
        "id": 1
    })

    assert "error" not in response
    assert response["result"] == {"result": "success", "input": {"key": "value"}}


@pytest.mark.asyncio
async def test_jsonrpc_handler_arguments():
    """Test that handlers get the request artifact, the context and params."""
    context = {"user": "admin"}
    handler = JSONRPCHandler(context=context)
    seen = {}

    def capture(req, ctx, params):
        seen["req"] = req
        seen["ctx"] = ctx
        seen["params"] = params
        return None

    handler.register_method("capture", capture)
    marker = object()

    response = await handler.handle_request(
        {"jsonrpc": "2.0", "method": "capture", "params": [1, 2], "id": 9},
        request=marker
    )

    assert seen["req"] is marker
    assert seen["ctx"] is context
    assert seen["params"] == [1, 2]
    assert response == {"jsonrpc": "2.0", "id": 9, "result": None}


@pytest.mark.asyncio
async def test_jsonrpc_invalid_version():
    """Test that a wrong jsonrpc version returns INVALID_REQUEST."""
    handler = JSONRPCHandler()

    response = await handler.handle_request({"jsonrpc": "1.0", "method": "x", "id": 3})

    assert response["id"] == 3
    assert response["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert response["error"]["message"] == "Invalid Request: 'jsonrpc' must be '2.0'."
    assert "result" not in response


@pytest.mark.asyncio
async def test_jsonrpc_non_string_method():
    """Test that a non-string method returns INVALID_REQUEST."""
    handler = JSONRPCHandler()

    response = await handler.handle_request({"jsonrpc": "2.0", "method": 42, "id": 4})

    assert response["error"] == {
        "code": ErrorCode.INVALID_REQUEST,
        "message": "Invalid Request: 'method' must be a string."
    }


@pytest.mark.asyncio
async def test_jsonrpc_non_object_body():
    """Test that non-object bodies, including batches, are rejected."""
    handler = JSONRPCHandler()

    for body in (None, "text", [{"jsonrpc": "2.0", "method": "x", "id": 1}]):
        response = await handler.handle_request(body)
        assert response["id"] is None
        assert response["error"]["code"] == ErrorCode.INVALID_REQUEST


@pytest.mark.asyncio
async def test_jsonrpc_internal_error():
    """Test that unexpected exceptions return INTERNAL_ERROR."""
    handler = JSONRPCHandler()

    async def crash_method(req, ctx, params):
        raise RuntimeError("Something went wrong")

    handler.register_method("crash", crash_method)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "crash", "id": 3})

    error = response["error"]
    assert error["code"] == ErrorCode.INTERNAL_ERROR
    assert error["message"] == "Something went wrong"
    assert error["data"]["type"] == "Error"
    assert error["data"]["message"] == "Something went wrong"
    assert "RuntimeError" in error["data"]["stack"]
    assert "result" not in response


@pytest.mark.asyncio
async def test_jsonrpc_sync_and_async_failures_match():
    """Test that sync and async failures produce the same envelope shape."""
    handler = JSONRPCHandler()

    def sync_fail(req, ctx, params):
        raise ValueError("boom")

    async def async_fail(req, ctx, params):
        raise ValueError("boom")

    handler.register_method("sync", sync_fail)
    handler.register_method("async", async_fail)

    sync_response = await handler.handle_request({"jsonrpc": "2.0", "method": "sync", "id": 1})
    async_response = await handler.handle_request({"jsonrpc": "2.0", "method": "async", "id": 1})

    for response in (sync_response, async_response):
        assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR
        assert response["error"]["message"] == "boom"
        assert response["error"]["data"]["type"] == "Error"


@pytest.mark.asyncio
async def test_jsonrpc_custom_error_code():
    """Test that a failure's own code and message are used."""
    handler = JSONRPCHandler()

    def bad(req, ctx, params):
        raise RPCError("bad", code=400)

    handler.register_method("bad", bad)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "bad", "id": 5})

    assert response["error"]["code"] == 400
    assert response["error"]["message"] == "bad"
    assert response["error"]["data"]["code"] == 400


@pytest.mark.asyncio
async def test_jsonrpc_non_integer_code_ignored():
    """Test that string error codes fall back to INTERNAL_ERROR."""
    handler = JSONRPCHandler()

    def fail(req, ctx, params):
        error = OSError("disk gone")
        error.code = "ENOENT"
        raise error

    handler.register_method("fail", fail)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "fail", "id": 6})

    assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert response["error"]["data"]["code"] == "ENOENT"


@pytest.mark.asyncio
async def test_jsonrpc_empty_message():
    """Test that an exception without a message reports 'Internal error'."""
    handler = JSONRPCHandler()

    def fail(req, ctx, params):
        raise RuntimeError()

    handler.register_method("fail", fail)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "fail", "id": 7})

    assert response["error"]["message"] == "Internal error"


@pytest.mark.asyncio
async def test_jsonrpc_nested_error_sanitized():
    """Test that chained errors are nested and paths are stripped."""
    handler = JSONRPCHandler()

    def read_config(req, ctx, params):
        try:
            open("/definitely/not/here.cfg")
        except OSError as e:
            raise NestedError("config unavailable", e)

    handler.register_method("read", read_config)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "read", "id": 8})

    data = response["error"]["data"]
    assert data["type"] == "NestedError"
    assert data["nested"]["type"] == "Error"
    assert data["nested"]["errno"] is not None
    assert "filename" not in data["nested"]


@pytest.mark.asyncio
async def test_jsonrpc_failure_does_not_break_later_calls():
    """Test that the handler keeps serving after a failure."""
    handler = JSONRPCHandler()
    handler.register_method("crash", lambda req, ctx, params: 1 / 0)
    handler.register_method("ping", lambda req, ctx, params: "pong")

    first = await handler.handle_request({"jsonrpc": "2.0", "method": "crash", "id": 1})
    second = await handler.handle_request({"jsonrpc": "2.0", "method": "ping", "id": 2})

    assert first["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert second == {"jsonrpc": "2.0", "id": 2, "result": "pong"}


@pytest.mark.asyncio
async def test_jsonrpc_unprintable_failure():
    """Test that a failure whose __str__ raises still yields an envelope."""
    class Unprintable(Exception):
        def __str__(self):
            raise RuntimeError("no text")

    def explode(req, ctx, params):
        raise Unprintable()

    handler = JSONRPCHandler()
    handler.register_method("explode", explode)
    handler.register_method("ping", lambda req, ctx, params: "pong")

    first = await handler.handle_request({"jsonrpc": "2.0", "method": "explode", "id": 1})
    second = await handler.handle_request({"jsonrpc": "2.0", "method": "ping", "id": 2})

    assert first["id"] == 1
    assert first["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert first["error"]["message"] == "Internal error"
    assert first["error"]["data"]["type"] == "Error"
    assert second == {"jsonrpc": "2.0", "id": 2, "result": "pong"}


@pytest.mark.asyncio
async def test_jsonrpc_unreadable_code():
    """Test that a failure whose code property raises falls back to INTERNAL_ERROR."""
    class BrokenCode(Exception):
        @property
        def code(self):
            raise AttributeError("gone")

        @property
        def message(self):
            raise ValueError("gone too")

    def explode(req, ctx, params):
        raise BrokenCode("broken")

    handler = JSONRPCHandler()
    handler.register_method("explode", explode)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "explode", "id": 3})

    assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert response["error"]["message"] == "broken"
    assert response["error"]["data"]["message"] == "<unreadable message>"


@pytest.mark.asyncio
async def test_jsonrpc_no_params():
    """Test method call with no params."""
    handler = JSONRPCHandler()

    def no_params_method(req, ctx, params):
        assert params == {}
        return {"status": "ok"}

    handler.register_method("no_params", no_params_method)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "no_params", "id": 4})

    assert "error" not in response
    assert response["result"] == {"status": "ok"}


@pytest.mark.asyncio
async def test_jsonrpc_notification():
    """Test notification (no id) still gets a response with null id."""
    handler = JSONRPCHandler()
    handler.register_method("notify", lambda req, ctx, params: {"received": True})

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "notify"})

    assert response == {"jsonrpc": "2.0", "id": None, "result": {"received": True}}


@pytest.mark.asyncio
async def test_jsonrpc_result_is_encoded():
    """Test that big integers and datetimes in results become strings."""
    handler = JSONRPCHandler()
    moment = datetime(2024, 5, 17, 8, 30, tzinfo=timezone.utc)
    big = 123456789012345678901234567890

    handler.register_method("values", lambda req, ctx, params: {"big": [big], "at": moment})

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "values", "id": 1})

    assert response["result"] == {
        "big": ["123456789012345678901234567890"],
        "at": "2024-05-17T08:30:00.000Z"
    }


@pytest.mark.asyncio
async def test_jsonrpc_decode_params():
    """Test that params are decoded when the option is on."""
    handler = JSONRPCHandler(decode_params=True)
    handler.register_method("inspect", lambda req, ctx, params: type(params["n"]).__name__)

    response = await handler.handle_request({
        "jsonrpc": "2.0",
        "method": "inspect",
        "params": {"n": "123456789012345678901234567890n"},
        "id": 1
    })

    assert response["result"] == "int"


@pytest.mark.asyncio
async def test_jsonrpc_handler_timeout():
    """Test that a stalled handler is cut off when a timeout is set."""
    handler = JSONRPCHandler(handler_timeout=0.01)

    async def stall(req, ctx, params):
        await asyncio.sleep(10)

    handler.register_method("stall", stall)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "stall", "id": 1})

    assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert response["error"]["message"] == 'Method "stall" timed out'


@pytest.mark.asyncio
async def test_jsonrpc_last_registration_wins():
    """Test that re-registering a name replaces the handler."""
    handler = JSONRPCHandler()
    handler.register_method("version", lambda req, ctx, params: 1)
    handler.register_method("version", lambda req, ctx, params: 2)

    response = await handler.handle_request({"jsonrpc": "2.0", "method": "version", "id": 1})

    assert response["result"] == 2
    assert len(handler.methods) == 1


def test_error_codes():
    """Test that error codes are correctly defined."""
    assert ErrorCode.PARSE_ERROR == -32700
    assert ErrorCode.INVALID_REQUEST == -32600
    assert ErrorCode.METHOD_NOT_FOUND == -32601
    assert ErrorCode.INVALID_PARAMS == -32602
    assert ErrorCode.INTERNAL_ERROR == -32603


def test_application_error_codes():
    """Test the default codes carried by the application exceptions."""
    assert InvalidParamsError().code == ErrorCode.INVALID_PARAMS
    assert RPCError("bad").code == ErrorCode.INTERNAL_ERROR
    assert NestedError("outer", ValueError("inner")).code == ErrorCode.INTERNAL_ERROR
    assert NestedError("outer", code=409).code == 409
