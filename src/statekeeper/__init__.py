"""Guarded finite-state holder with reactive subscriptions."""

from .core.errors import (
    IllegalDirectMutation,
    InvalidConfiguration,
    NotificationDepthExceeded,
    StateError,
    UnknownProperty,
    UnknownState,
)
from .core.state import OMITTED, State, StateContainer

__all__ = [
    "State",
    "StateContainer",
    "OMITTED",
    "StateError",
    "InvalidConfiguration",
    "UnknownProperty",
    "IllegalDirectMutation",
    "UnknownState",
    "NotificationDepthExceeded",
]
