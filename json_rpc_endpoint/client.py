"""Client for calling a JSON-RPC 2.0 endpoint over HTTP."""
import logging
from typing import Any, Dict, Optional, Union

import httpx

from .jsonrpc import codec
from .jsonrpc.models import JSONRPCRequest
from .utils.errors import RPCClientError, RPCTransportError

logger = logging.getLogger(__name__)


class JsonRPCClient:
    """Client for a JSON-RPC 2.0 endpoint.

    Request bodies are encoded and results decoded with the same codec as
    the server, so big integers and datetimes survive the round trip.
    """

    def __init__(
        self,
        endpoint: str,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = 30,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize the client.

        Args:
            endpoint: Endpoint URL (e.g., http://localhost:3000/api)
            default_headers: Headers sent with every call
            timeout: Request timeout in seconds
            http_client: Pre-built httpx client; it is not closed by us
        """
        self.endpoint = endpoint
        self.default_headers = {
            "Content-Type": "application/json",
            **(default_headers or {}),
        }
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self.client.close()

    def call(
        self,
        method: str,
        params: Any = None,
        id: Optional[Union[str, int]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make a JSON-RPC call.

        Args:
            method: RPC method name
            params: Method parameters, encoded before sending
            id: Request id; None sends ``"id": null``
            headers: Per-call headers overriding the defaults

        Returns:
            Decoded result

        Raises:
            RPCTransportError: HTTP failure or a non-JSON reply
            RPCClientError: The server answered with an error envelope
        """
        request_payload = codec.encode(JSONRPCRequest(
            method=method,
            params={} if params is None else params,
            id=id,
        ).model_dump())

        try:
            response = self.client.post(
                self.endpoint,
                json=request_payload,
                headers={**self.default_headers, **(headers or {})},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during JSON-RPC call {method}: {e}")
            raise RPCTransportError(f"HTTP error calling {method}: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid JSON in response to {method}: {e}")
            raise RPCTransportError(f"Invalid JSON response calling {method}") from e

        if not isinstance(body, dict):
            raise RPCTransportError(f"Malformed JSON-RPC response calling {method}")

        error = body.get("error")
        if error:
            raise RPCClientError(
                error.get("code"), error.get("message"), error.get("data")
            )

        return codec.decode(body.get("result"))
