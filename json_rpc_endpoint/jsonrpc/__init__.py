"""JSON-RPC 2.0 protocol handling: validation, dispatch, errors and codec."""
from .models import JSONRPCRequest, JSONRPCResponse, JSONRPCError, ErrorCode
from .handler import JSONRPCHandler
from .registry import MethodRegistry
from .codec import encode, decode
from .normalizer import normalize_error

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "ErrorCode",
    "JSONRPCHandler",
    "MethodRegistry",
    "encode",
    "decode",
    "normalize_error",
]
