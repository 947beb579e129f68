"""
Interceptor chains for request and response phases.

Each stage is an ``(on_fulfilled, on_rejected)`` pair. A value travels
through ``on_fulfilled`` handlers; once a handler raises, the error travels
through ``on_rejected`` handlers until one of them returns a value
(recovery) or the end of the chain is reached.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

OnFulfilled = Callable[[Any], Any]
OnRejected = Callable[[BaseException], Any]


@dataclass(frozen=True)
class Interceptor:
    """Registered handler pair."""
    on_fulfilled: Optional[OnFulfilled] = None
    on_rejected: Optional[OnRejected] = None


class InterceptorManager:
    """
    Registry of interceptor pairs for one phase.

    Thread-safe registration; ``run`` iterates over a snapshot so handlers
    can be added or ejected while requests are in flight.

    Example:
        >>> manager = InterceptorManager()
        >>> handler_id = manager.use(lambda config: config)
        >>> len(manager)
        1
        >>> manager.eject(handler_id)
        >>> len(manager)
        0
    """

    def __init__(self, reverse: bool = False):
        """
        Args:
            reverse: Run handlers in reverse registration order
                     (used for the request phase)
        """
        self._handlers: Dict[int, Interceptor] = {}
        self._next_id = 0
        self._lock = threading.Lock()
        self._reverse = reverse

    def use(
        self,
        on_fulfilled: Optional[OnFulfilled] = None,
        on_rejected: Optional[OnRejected] = None,
    ) -> int:
        """
        Register a handler pair.

        Returns:
            Id for ``eject``
        """
        with self._lock:
            handler_id = self._next_id
            self._next_id += 1
            self._handlers[handler_id] = Interceptor(on_fulfilled, on_rejected)
        return handler_id

    def eject(self, handler_id: int) -> None:
        """Remove a handler pair; unknown ids are ignored."""
        with self._lock:
            self._handlers.pop(handler_id, None)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Interceptor]:
        with self._lock:
            handlers: List[Interceptor] = list(self._handlers.values())
        if self._reverse:
            handlers.reverse()
        return iter(handlers)

    def run(self, value: Any = None, error: Optional[BaseException] = None) -> Any:
        """
        Pass ``value`` (or ``error``) through the chain.

        Returns:
            Final value

        Raises:
            The error left at the end of the chain
        """
        for interceptor in self:
            if error is None:
                if interceptor.on_fulfilled is None:
                    continue
                try:
                    value = interceptor.on_fulfilled(value)
                except Exception as exc:
                    error = exc
            else:
                if interceptor.on_rejected is None:
                    continue
                try:
                    value = interceptor.on_rejected(error)
                    error = None
                except Exception as exc:
                    error = exc

        if error is not None:
            raise error
        return value


class Interceptors:
    """Request and response interceptor managers of one client."""

    def __init__(self):
        self.request = InterceptorManager(reverse=True)
        self.response = InterceptorManager()
