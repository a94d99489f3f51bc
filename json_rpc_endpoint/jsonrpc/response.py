"""JSON-RPC 2.0 response envelope builder."""
from typing import Any, Dict, Optional

from .models import JSONRPCError, JSONRPCResponse, RequestId

_MISSING = object()


def build_response(
    id: RequestId = None,
    result: Any = _MISSING,
    error: Optional[JSONRPCError] = None,
) -> Dict[str, Any]:
    """Assemble a response envelope carrying exactly one of result/error.

    Args:
        id: Request id; an absent id is sent back as ``null``
        result: Already-encoded method result
        error: Error record; takes precedence over ``result``

    Returns:
        Envelope dict ready for JSON serialization
    """
    if error is not None:
        response = JSONRPCResponse(jsonrpc="2.0", id=id, error=error)
    else:
        response = JSONRPCResponse(
            jsonrpc="2.0",
            id=id,
            result=None if result is _MISSING else result,
        )
    return response.model_dump(exclude_unset=True)


def build_error(
    id: RequestId, code: int, message: str, data: Any = _MISSING
) -> Dict[str, Any]:
    """Shortcut for an error envelope; ``data`` is omitted unless given."""
    if data is _MISSING:
        error = JSONRPCError(code=code, message=message)
    else:
        error = JSONRPCError(code=code, message=message, data=data)
    return build_response(id, error=error)
