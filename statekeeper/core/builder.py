"""Fluent builder for StateManager.

StateManagerBuilder collects states, hooks and options step by step and
reports invalid configuration as an Err instead of raising:

    >>> result = (StateManagerBuilder()
    ...     .with_state("idle")
    ...     .with_state("running")
    ...     .with_enter_hook("running", on_running)
    ...     .build(initial_state="idle"))
    >>> if result.is_ok():
    ...     manager = result.unwrap()
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Hashable, Optional, TypeVar

from statekeeper.core.events import Handler
from statekeeper.core.result import Err, Ok, Result
from statekeeper.core.state_manager import StateEvents, StateManager, StateValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


class StateManagerBuilder(Generic[T]):
    """Fluent API builder for StateManager configuration.

    All ``with_*`` methods return self for method chaining. Hooks may be
    attached to a state before or after with_state(); attaching a hook
    registers the state implicitly.

    Thread Safety:
        This builder is NOT thread-safe.
    """

    def __init__(self) -> None:
        self._states: dict[T, StateEvents] = {}
        self._handlers: list[Handler] = []
        self._context: Any = None
        self._reserved_state: Optional[T] = None

    def with_state(self, state: T, events: Optional[StateEvents] = None) -> StateManagerBuilder[T]:
        """Add a state, optionally with pre-built callbacks.

        Adding a state twice keeps the first entry unless ``events`` is given,
        in which case its callbacks are appended to the existing entry.
        """
        entry = self._entry(state)
        if events is not None:
            for handler in events.on_enter:
                entry.on_enter.add(handler)
            for handler in events.on_exit:
                entry.on_exit.add(handler)
        return self

    def with_enter_hook(self, state: T, handler: Handler) -> StateManagerBuilder[T]:
        self._entry(state).on_enter.add(handler)
        return self

    def with_exit_hook(self, state: T, handler: Handler) -> StateManagerBuilder[T]:
        self._entry(state).on_exit.add(handler)
        return self

    def with_handler(self, handler: Handler) -> StateManagerBuilder[T]:
        """Add a global callback fired on every transition."""
        self._handlers.append(handler)
        return self

    def with_context(self, context: Any) -> StateManagerBuilder[T]:
        """Set the owner object passed as ``sender`` to every callback."""
        self._context = context
        return self

    def with_reserved_state(self, state: T) -> StateManagerBuilder[T]:
        """Mark a state as never removable."""
        self._reserved_state = state
        return self

    def _entry(self, state: T) -> StateEvents:
        if state not in self._states:
            self._states[state] = StateEvents()
        return self._states[state]

    def build(self, initial_state: T) -> Result[StateManager[T]]:
        """Build a StateManager from the collected configuration.

        Args:
            initial_state: Starting state; must have been added.

        Returns:
            Ok with a manager that owns its own copy of the callback lists,
            so building twice yields independent managers. Err carrying the StateValidationError
            message and code (STATES_EMPTY, INVALID_INITIAL_STATE,
            INVALID_RESERVED_STATE).
        """
        try:
            manager: StateManager[T] = StateManager(
                {
                    state: StateEvents(on_enter=list(events.on_enter), on_exit=list(events.on_exit))
                    for state, events in self._states.items()
                },
                initial_state,
                context=self._context,
                reserved_state=self._reserved_state,
            )
        except StateValidationError as e:
            return Err(e.message, code=e.code)

        for handler in self._handlers:
            manager.bind(handler)

        logger.debug(f"Built state manager with {len(manager)} states")
        return Ok(manager)
