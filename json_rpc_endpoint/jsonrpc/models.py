"""JSON-RPC 2.0 request/response models."""
from pydantic import BaseModel
from typing import Any, Optional, Union, Literal


RequestId = Optional[Union[str, int, float]]


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    params: Optional[Any] = None
    id: RequestId = None


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error model."""

    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 response model.

    Only fields passed explicitly are dumped (``exclude_unset``), so a
    ``None`` result is still sent as ``"result": null``.
    """

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None


class ErrorCode:
    """JSON-RPC 2.0 standard error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
