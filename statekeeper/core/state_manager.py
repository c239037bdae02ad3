"""Event-based state manager.

This module implements a small finite-state container meant to be embedded
in an owning object (a game entity, a UI widget, a workflow node, ...). The
owner declares the set of states, drives transitions with set_state(), and
other parties subscribe to transitions.

There is no transition graph: any registered state may follow any other.

Dispatch order on every successful transition:
1. global callbacks, with StateChanged(new_state, previous_state)
2. exit callbacks of the previous state, with StateExited(new_state)
3. enter callbacks of the new state, with StateEntered(previous_state)

Runtime operations (add/remove/bind/unbind/set_state) report expected
failures by returning False and leave the manager unchanged. Construction
problems raise StateValidationError.
"""

from __future__ import annotations

import enum
import logging
from typing import (
    Any,
    Generic,
    Hashable,
    Iterable,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from statekeeper.core.events import (
    EventHook,
    Handler,
    StateChanged,
    StateEntered,
    StateExited,
)
from statekeeper.core.settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)
E = TypeVar("E", bound=enum.Enum)

StateSource = Union[
    Mapping[T, Optional["StateEvents"]],
    Iterable[tuple[T, Optional["StateEvents"]]],
]


class StateValidationError(ValueError):
    """Raised when a state manager cannot be constructed from its arguments.

    Attributes:
        message: Human readable description.
        code: Stable error code, one of STATES_MISSING, STATES_EMPTY,
            DUPLICATE_STATE, INVALID_INITIAL_STATE, INVALID_RESERVED_STATE.
    """

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


def _invalid(message: str, code: str) -> StateValidationError:
    logger.warning(f"State manager construction rejected ({code}): {message}")
    return StateValidationError(message, code)


class StateEvents:
    """Enter and exit callbacks registered for one state.

    Either argument may be a single handler, an iterable of handlers, or
    omitted for an empty list.

    Example:
        >>> events = StateEvents(on_enter=lambda sender, event: None)
        >>> len(events.on_enter), len(events.on_exit)
        (1, 0)
    """

    def __init__(
        self,
        on_enter: Union[Handler, Iterable[Handler], None] = None,
        on_exit: Union[Handler, Iterable[Handler], None] = None,
    ) -> None:
        self.on_enter = self._as_hook(on_enter)
        self.on_exit = self._as_hook(on_exit)

    @staticmethod
    def _as_hook(handlers: Union[Handler, Iterable[Handler], None]) -> EventHook:
        if handlers is None:
            return EventHook()
        if callable(handlers):
            return EventHook([handlers])
        return EventHook(handlers)

    def __repr__(self) -> str:
        return f"StateEvents(on_enter={len(self.on_enter)}, on_exit={len(self.on_exit)})"


class StateManager(Generic[T]):
    """Registry of states with a validated current state and transition hooks.

    Identifiers can be any hashable value: strings, ints, enum members.

    The active state can never be removed. A manager may additionally
    reserve one identifier that can never be removed at all, which
    with_default() always does.

    Thread Safety:
        This implementation is NOT thread-safe. Callers that share a manager
        across threads must serialize access themselves.

    Example:
        >>> manager = StateManager.from_states(["idle", "running"], "idle")
        >>> manager.bind_enter("running", lambda sender, event: print(event))
        True
        >>> manager.set_state("running")
        StateEntered(previous_state='idle')
        True
    """

    def __init__(
        self,
        states: Optional[StateSource[T]],
        initial_state: T,
        handler: Optional[Handler] = None,
        context: Any = None,
        *,
        reserved_state: Optional[T] = None,
    ) -> None:
        """Initialize the manager from identifiers paired with their callbacks.

        Args:
            states: Mapping of identifier to StateEvents, or an iterable of
                (identifier, StateEvents) pairs. A None entry gets empty
                callback lists.
            initial_state: Starting state, must be one of ``states``.
            handler: Optional global callback bound before any transition.
            context: Optional owner object passed as ``sender`` to every
                callback. Defaults to the manager itself.
            reserved_state: Optional identifier that can never be removed.

        Raises:
            StateValidationError: If ``states`` is None or empty, contains a
                duplicate identifier, or does not contain ``initial_state``
                (or ``reserved_state``).
        """
        if states is None:
            raise _invalid("Parameter `states` cannot be None.", "STATES_MISSING")

        pairs = states.items() if isinstance(states, Mapping) else states
        registry: dict[T, StateEvents] = {}
        for state, events in pairs:
            if state in registry:
                raise _invalid(f"State {state!r} is declared more than once.", "DUPLICATE_STATE")
            registry[state] = events if events is not None else StateEvents()

        if not registry:
            raise _invalid("Parameter `states` cannot be empty.", "STATES_EMPTY")

        if initial_state not in registry:
            raise _invalid(
                f"Initial state {initial_state!r} must be an element of `states`. "
                f"Valid states are: {list(registry)}",
                "INVALID_INITIAL_STATE",
            )

        if reserved_state is not None and reserved_state not in registry:
            raise _invalid(
                f"Reserved state {reserved_state!r} must be an element of `states`.",
                "INVALID_RESERVED_STATE",
            )

        self._states = registry
        self._current_state: T = initial_state
        self._reserved_state = reserved_state
        self._context = context
        self._state_changed = EventHook([handler] if handler is not None else None)

    # ********** Alternate constructors **********

    @classmethod
    def with_default(
        cls,
        name: Optional[str] = None,
        handler: Optional[Handler] = None,
        context: Any = None,
    ) -> StateManager[str]:
        """Create a manager holding only the reserved default state.

        Args:
            name: Identifier of the default state. Defaults to
                ``Settings.default_state`` ("Default").
            handler: Optional global callback.
            context: Optional owner object passed as ``sender``.

        Returns:
            A manager whose current, and only, state is the default state.
            The default state can never be removed.
        """
        name = name or get_settings().default_state
        return cls({name: StateEvents()}, name, handler, context, reserved_state=name)

    @classmethod
    def from_states(
        cls,
        states: Optional[Iterable[T]],
        initial_state: T,
        handler: Optional[Handler] = None,
        context: Any = None,
        *,
        reserved_state: Optional[T] = None,
    ) -> StateManager[T]:
        """Create a manager from bare identifiers, each with empty callbacks."""
        if states is None:
            raise _invalid("Parameter `states` cannot be None.", "STATES_MISSING")
        return cls(
            [(state, None) for state in states],
            initial_state,
            handler,
            context,
            reserved_state=reserved_state,
        )

    @classmethod
    def from_enum(
        cls,
        enum_cls: type[E],
        initial_state: Optional[E] = None,
        handler: Optional[Handler] = None,
        context: Any = None,
        *,
        reserved_state: Optional[E] = None,
    ) -> StateManager[E]:
        """Create a manager registering every member of an Enum.

        Args:
            enum_cls: Enum whose members become the states. Aliases are
                skipped.
            initial_state: Starting member. Defaults to the first member.
            handler: Optional global callback.
            context: Optional owner object passed as ``sender``.
            reserved_state: Optional member that can never be removed.

        Example:
            >>> class Light(enum.Enum):
            ...     RED = 1
            ...     GREEN = 2
            >>> StateManager.from_enum(Light).current_state
            <Light.RED: 1>
        """
        members = list(enum_cls)
        if initial_state is None and members:
            initial_state = members[0]
        return cls.from_states(
            members, initial_state, handler, context, reserved_state=reserved_state
        )

    # ********** Introspection **********

    @property
    def current_state(self) -> T:
        return self._current_state

    @property
    def states(self) -> frozenset[T]:
        """Snapshot of all registered identifiers."""
        return frozenset(self._states)

    @property
    def state_count(self) -> int:
        return len(self._states)

    @property
    def context(self) -> Any:
        return self._context

    @property
    def reserved_state(self) -> Optional[T]:
        return self._reserved_state

    def has_state(self, state: T) -> bool:
        return state in self._states

    def get_state_events(self, state: T) -> Optional[StateEvents]:
        """Return the live callback entry of a state, or None if unregistered."""
        return self._states.get(state)

    def __contains__(self, state: object) -> bool:
        return state in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return (
            f"StateManager(current_state={self._current_state!r}, "
            f"states={list(self._states)!r})"
        )

    # ********** Registry mutation **********

    def add_state(self, state: T, events: Optional[StateEvents] = None) -> bool:
        """Register a new state.

        Args:
            state: Identifier to add.
            events: Optional pre-built callbacks. Defaults to empty lists.

        Returns:
            False if the state already exists, otherwise True.
        """
        if state in self._states:
            logger.debug(f"add_state rejected: {state!r} already registered")
            return False

        self._states[state] = events if events is not None else StateEvents()
        return True

    def remove_state(self, state: T) -> bool:
        """Unregister a state, dropping every callback bound to it.

        Returns:
            False if the state is the current state, is reserved, or is not
            registered, otherwise True.
        """
        if state == self._current_state:
            logger.debug(f"remove_state rejected: {state!r} is the current state")
            return False
        if self._reserved_state is not None and state == self._reserved_state:
            logger.debug(f"remove_state rejected: {state!r} is reserved")
            return False
        if state not in self._states:
            logger.debug(f"remove_state rejected: {state!r} is not registered")
            return False

        del self._states[state]
        return True

    # ********** Callback binding **********

    def bind(self, handler: Handler) -> None:
        """Bind a handler to every transition."""
        self._state_changed.add(handler)

    def unbind(self, handler: Handler) -> None:
        """Unbind a global handler. Safe to call if it was never bound."""
        self._state_changed.remove(handler)

    def bind_exit(self, state: T, handler: Handler) -> bool:
        """Bind a handler fired when the manager leaves ``state``.

        Returns:
            False if the state does not exist, otherwise True.
        """
        events = self._lookup(state, "bind_exit")
        if events is None:
            return False
        events.on_exit.add(handler)
        return True

    def unbind_exit(self, state: T, handler: Handler) -> bool:
        """Unbind an exit handler of ``state``.

        Returns:
            False if the state does not exist, otherwise True.
        """
        events = self._lookup(state, "unbind_exit")
        if events is None:
            return False
        events.on_exit.remove(handler)
        return True

    def bind_enter(self, state: T, handler: Handler) -> bool:
        """Bind a handler fired when the manager enters ``state``.

        Returns:
            False if the state does not exist, otherwise True.
        """
        events = self._lookup(state, "bind_enter")
        if events is None:
            return False
        events.on_enter.add(handler)
        return True

    def unbind_enter(self, state: T, handler: Handler) -> bool:
        """Unbind an enter handler of ``state``.

        Returns:
            False if the state does not exist, otherwise True.
        """
        events = self._lookup(state, "unbind_enter")
        if events is None:
            return False
        events.on_enter.remove(handler)
        return True

    def _lookup(self, state: T, operation: str) -> Optional[StateEvents]:
        events = self._states.get(state)
        if events is None:
            logger.debug(f"{operation} rejected: {state!r} is not registered")
        return events

    # ********** Transitions **********

    def set_state(self, new_state: T, sender: Any = None) -> bool:
        """Transition to ``new_state`` and fire callbacks.

        Self-transitions are allowed and fire every callback group with
        ``previous_state == new_state``. The state change is committed before
        any callback runs; an exception raised by a callback propagates to
        the caller and the remaining callbacks are skipped.

        Args:
            new_state: Target state.
            sender: Object passed as ``sender`` for this transition only.
                Defaults to the construction context, or the manager itself.

        Returns:
            False if ``new_state`` is not registered (nothing changes and no
            callback fires), otherwise True.
        """
        if new_state not in self._states:
            logger.debug(
                f"set_state rejected: {new_state!r} is not registered "
                f"(current state {self._current_state!r})"
            )
            return False

        previous_state = self._current_state
        exit_events = self._states[previous_state]
        enter_events = self._states[new_state]

        self._current_state = new_state
        logger.debug(f"State transition: {previous_state!r} -> {new_state!r}")

        if sender is None:
            sender = self._context if self._context is not None else self

        self._state_changed.fire(sender, StateChanged(new_state, previous_state))
        exit_events.on_exit.fire(sender, StateExited(new_state))
        enter_events.on_enter.fire(sender, StateEntered(previous_state))
        return True
