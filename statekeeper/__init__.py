"""statekeeper - Event-based state manager"""

from statekeeper.core import (
    Err,
    EventHook,
    Ok,
    Result,
    StateChanged,
    StateEntered,
    StateEvents,
    StateExited,
    StateManager,
    StateManagerBuilder,
    StateValidationError,
)

__version__ = "0.1.0"
__all__ = [
    "StateManager",
    "StateManagerBuilder",
    "StateEvents",
    "StateValidationError",
    "EventHook",
    "StateChanged",
    "StateEntered",
    "StateExited",
    "Result",
    "Ok",
    "Err",
]
