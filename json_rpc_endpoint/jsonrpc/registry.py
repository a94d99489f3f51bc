"""Registry of JSON-RPC method handlers."""
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# handler(request, context, params) -> value or awaitable
MethodHandler = Callable[[Any, Any, Any], Any]


class MethodRegistry:
    """Name to handler mapping, filled before traffic starts.

    Registering while requests are in flight is not guarded.
    """

    def __init__(self):
        self._methods: Dict[str, MethodHandler] = {}

    def register(self, name: str, handler: MethodHandler) -> None:
        """Register a handler; an existing entry with the same name is replaced."""
        if name in self._methods:
            logger.info(f"Replacing JSON-RPC method: {name}")
        else:
            logger.info(f"Registered JSON-RPC method: {name}")
        self._methods[name] = handler

    def lookup(self, name: str) -> Optional[MethodHandler]:
        return self._methods.get(name)

    def entries(self) -> Mapping[str, MethodHandler]:
        """Read-only view of all registered methods."""
        return MappingProxyType(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)
