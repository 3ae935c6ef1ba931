"""Errors raised by the state container and its guard.

Every error here is a usage error raised synchronously at the call site.
Nothing is retried or logged by the container itself.
"""


class StateError(Exception):
    """Base class for all statekeeper errors."""


class InvalidConfiguration(StateError, ValueError):
    """The initial state mapping is empty or cannot be used."""


class UnknownProperty(StateError, AttributeError, TypeError):
    """Read access to a name the state does not declare."""

    def __init__(self, name: str):
        super().__init__(f"Missing property on state: {name}")
        self.name = name


class IllegalDirectMutation(StateError, AttributeError):
    """Attempt to write or delete a property on the guarded state."""

    def __init__(self, name: str):
        super().__init__(
            f"Cannot directly set property ({name}) on state. "
            "Please use the set() method instead."
        )
        self.name = name


class UnknownState(StateError, LookupError):
    """set() was given a state that the container does not hold."""


class NotificationDepthExceeded(StateError, RecursionError):
    """Subscribers kept calling set() from inside their own notifications."""
