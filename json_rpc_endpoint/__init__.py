"""JSON-RPC 2.0 endpoint for FastAPI with lossless big integers and datetimes."""
from .endpoint import JsonRPCEndpoint
from .client import JsonRPCClient
from .jsonrpc import JSONRPCHandler, MethodRegistry, encode, decode, normalize_error
from .utils.errors import (
    RPCError,
    InvalidParamsError,
    NestedError,
    RPCClientError,
    RPCTransportError,
)

__all__ = [
    "JsonRPCEndpoint",
    "JsonRPCClient",
    "JSONRPCHandler",
    "MethodRegistry",
    "encode",
    "decode",
    "normalize_error",
    "RPCError",
    "InvalidParamsError",
    "NestedError",
    "RPCClientError",
    "RPCTransportError",
]
