"""Transition event payloads and multicast handler lists.

Every callback registered on a StateManager is called as
``handler(sender, event)`` where ``sender`` is the manager's context object
(or the manager itself) and ``event`` is one of the payloads below:

- StateChanged: handed to global callbacks on every transition
- StateExited: handed to exit callbacks of the state being left
- StateEntered: handed to enter callbacks of the state being entered

EventHook holds one ordered group of such callbacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")

Handler = Callable[[Any, Any], None]


@dataclass(frozen=True)
class StateChanged(Generic[T]):
    """Payload for global transition callbacks.

    Attributes:
        new_state: State the manager moved to.
        previous_state: State the manager was in before the transition.
    """

    new_state: T
    previous_state: T


@dataclass(frozen=True)
class StateExited(Generic[T]):
    """Payload for exit callbacks of the state being left."""

    new_state: T


@dataclass(frozen=True)
class StateEntered(Generic[T]):
    """Payload for enter callbacks of the state being entered."""

    previous_state: T


class EventHook:
    """Ordered list of handlers invoked together.

    Binding appends, so a handler bound twice fires twice. Removal drops the
    first entry that compares equal, which lets bound methods be unbound with
    a fresh ``obj.method`` reference. Removing a handler that is not present
    does nothing.

    Example:
        >>> hook = EventHook()
        >>> hook.add(lambda sender, event: print(event))
        >>> hook.fire(None, "ping")
        ping
    """

    def __init__(self, handlers: Optional[Iterable[Handler]] = None) -> None:
        self._handlers: list[Handler] = list(handlers) if handlers else []

    def add(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def remove(self, handler: Handler) -> None:
        """Remove the first occurrence of handler. Safe if not bound."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def clear(self) -> None:
        self._handlers.clear()

    def fire(self, sender: Any, event: Any) -> None:
        """Call every handler in bind order.

        Iterates over a snapshot, so handlers bound or unbound while firing
        only affect the next dispatch. Exceptions raised by a handler are not
        caught; handlers after it do not run.
        """
        for handler in tuple(self._handlers):
            handler(sender, event)

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(tuple(self._handlers))

    def __contains__(self, handler: object) -> bool:
        return handler in self._handlers

    def __repr__(self) -> str:
        return f"EventHook(handlers={len(self._handlers)})"
