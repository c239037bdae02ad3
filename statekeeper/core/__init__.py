"""statekeeper - Core module exports"""

from .events import EventHook, Handler, StateChanged, StateEntered, StateExited
from .result import Err, Ok, Result
from .state_manager import StateEvents, StateManager, StateValidationError
from .builder import StateManagerBuilder
from .settings import Settings, configure_logging, get_settings, reload_settings

__all__ = [
    # State manager
    "StateManager",
    "StateEvents",
    "StateValidationError",
    "StateManagerBuilder",
    # Events
    "EventHook",
    "Handler",
    "StateChanged",
    "StateEntered",
    "StateExited",
    # Result
    "Result",
    "Ok",
    "Err",
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    "configure_logging",
]
