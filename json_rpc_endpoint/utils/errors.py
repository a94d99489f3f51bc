"""Custom exception classes for the JSON-RPC endpoint."""
from typing import Optional

from ..jsonrpc.models import ErrorCode


class RPCError(Exception):
    """Base exception for errors a handler reports to the caller.

    ``code`` and ``message`` are copied into the error envelope.
    """

    def __init__(self, message: str, code: int = ErrorCode.INTERNAL_ERROR):
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidParamsError(RPCError):
    """Handler parameters are missing or malformed."""

    def __init__(self, message: str = "Invalid params"):
        super().__init__(message, code=ErrorCode.INVALID_PARAMS)


class NestedError(RPCError):
    """Error wrapping the error that caused it."""

    def __init__(
        self,
        message: str,
        nested: Optional[BaseException] = None,
        code: int = ErrorCode.INTERNAL_ERROR,
    ):
        super().__init__(message, code=code)
        self.nested = nested
        self.__cause__ = nested


class RPCClientError(Exception):
    """The server answered with a JSON-RPC error envelope."""

    def __init__(self, code: int, message: str, data=None):
        super().__init__(f"RPC Error: {message} (Code: {code})")
        self.code = code
        self.message = message
        self.data = data


class RPCTransportError(Exception):
    """The HTTP exchange with the server failed."""

    pass
