"""Guarded state container.

A State holds a fixed set of named states, exactly one of which is
current at any time, and notifies subscribers on every transition.

    state = State({"UNKNOWN": {}, "OK": {}, "NOT_OK": {}})
    state.subscribe(lambda s: print(s.current_name))   # prints UNKNOWN
    state.set(state.NOT_OK, {"error": "bad"})           # prints NOT_OK

Every attribute read on the State handle is checked: undeclared names
raise UnknownProperty, so a typo in a state name fails at the call site.
Every write raises IllegalDirectMutation, so the only way to change the
state is set(), which is also the only place subscribers get notified.

Transitions are unrestricted. Any state may follow any other.
"""

import itertools
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterator, NamedTuple

from .errors import (
    IllegalDirectMutation,
    InvalidConfiguration,
    NotificationDepthExceeded,
    UnknownProperty,
    UnknownState,
)

log = logging.getLogger("statekeeper.core.state")

DEFAULT_MAX_DEPTH = 32


class _Omitted:
    """Marks an omitted context argument (None is a valid context)."""

    def __repr__(self) -> str:
        return "<omitted>"


OMITTED = _Omitted()

# Names readable through the guard besides the declared states.
OPERATIONS = frozenset({
    "is", "is_", "set", "set_by_name", "subscribe", "unsubscribe", "get",
})
ACCESSORS = frozenset({"now", "current", "current_name", "names"})
RESERVED_NAMES = OPERATIONS | ACCESSORS | {"internal"}

# Shared by all containers so ids never repeat within a process.
_subscription_ids = itertools.count(1)


class Subscription(NamedTuple):
    id: int
    handler: Callable[[Any], None]


# Compared by value, like JS primitives. Everything else by identity.
_SCALARS = (int, float, complex, str, bytes, bool, type(None))


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    # type check keeps 1, 1.0 and True apart
    return type(a) is type(b) and isinstance(a, _SCALARS) and a == b


def _validate(states: Mapping, max_depth: int) -> None:
    if not isinstance(states, Mapping):
        raise InvalidConfiguration(
            f"State must be created from a mapping, got {type(states).__name__}"
        )
    if not states:
        raise InvalidConfiguration("State must declare at least one state")
    for name in states:
        if not isinstance(name, str) or not name.isidentifier():
            raise InvalidConfiguration(f"Invalid state name: {name!r}")
        if name.startswith("_"):
            raise InvalidConfiguration(
                f"State names may not start with an underscore: {name}"
            )
        if name in RESERVED_NAMES:
            raise InvalidConfiguration(
                f"State name shadows a State operation: {name}"
            )
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise InvalidConfiguration(f"max_depth must be a positive integer, got {max_depth!r}")


class StateContainer:
    """The unguarded container behind a State handle.

    Reachable as ``state.internal``. Nothing stops direct writes here,
    so prefer the handle outside of tests.
    """

    def __init__(self, states: Mapping, max_depth: int = DEFAULT_MAX_DEPTH):
        _validate(states, max_depth)
        self.states: dict[str, Any] = dict(states)
        self.current_name: str = next(iter(self.states))
        self.now: Any = self.states[self.current_name]
        self.subscribers: list[Subscription] = []
        self.max_depth = max_depth
        self.view = None  # guarded handle passed to subscribers, set by State
        self._depth = 0

    @property
    def current(self) -> Any:
        return self.now

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.states)

    def get(self, name: str) -> Any:
        """Return the context stored for a declared state name."""
        try:
            return self.states[name]
        except KeyError:
            raise UnknownProperty(name) from None

    def is_(self, state: Any) -> bool:
        return _same(self.now, state)

    def set(self, state: Any, context: Any = OMITTED) -> None:
        """Make ``state`` current, optionally replacing its context.

        ``state`` is the stored value (e.g. ``state.OK``), matched by
        identity, or by value for scalars such as ints and strings. When
        two names share a value the first declared name wins; use
        set_by_name() to pick explicitly.
        """
        for name, value in self.states.items():
            if _same(value, state):
                break
        else:
            raise UnknownState(f"State not found in container: {state!r}")
        self._transition(name, context)

    def set_by_name(self, name: str, context: Any = OMITTED) -> None:
        if name not in self.states:
            raise UnknownState(f"Unknown state: {name}")
        self._transition(name, context)

    def _transition(self, name: str, context: Any) -> None:
        if self._depth >= self.max_depth:
            raise NotificationDepthExceeded(
                f"set({name}) nested {self._depth} notifications deep "
                f"(max_depth={self.max_depth})"
            )

        # Only update the context if one is passed.
        if context is not OMITTED:
            self.states[name] = context
        self.current_name = name
        self.now = self.states[name]
        log.debug("State → %s (depth %d)", name, self._depth)

        self._notify()

    def _notify(self) -> None:
        target = self.view if self.view is not None else self
        self._depth += 1
        try:
            # Snapshot: handlers added during this round run from the next one.
            for subscription in tuple(self.subscribers):
                subscription.handler(target)
        finally:
            self._depth -= 1

    def subscribe(self, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register ``handler`` and call it once right away.

        Returns a function that removes this subscription. Calling it
        again is harmless.
        """
        subscription_id = next(_subscription_ids)
        self.subscribers.append(Subscription(subscription_id, handler))
        log.debug(
            "Subscribed %s (id %d)",
            getattr(handler, "__name__", repr(handler)),
            subscription_id,
        )

        try:
            handler(self.view if self.view is not None else self)
        except Exception:
            # The caller never gets an unsubscribe function back.
            self.unsubscribe(subscription_id)
            raise

        def unsubscribe() -> None:
            self.unsubscribe(subscription_id)

        return unsubscribe

    def unsubscribe(self, subscription_id: int) -> None:
        before = len(self.subscribers)
        self.subscribers = [s for s in self.subscribers if s.id != subscription_id]
        if len(self.subscribers) != before:
            log.debug("Unsubscribed id %d", subscription_id)

    def __repr__(self) -> str:
        return (
            f"StateContainer(names={list(self.states)}, now={self.current_name}, "
            f"subscribers={len(self.subscribers)})"
        )


class State:
    """Guarded handle over a StateContainer."""

    __slots__ = ("_container",)

    def __init__(self, states: Mapping, *, max_depth: int = DEFAULT_MAX_DEPTH):
        container = StateContainer(states, max_depth=max_depth)
        object.__setattr__(self, "_container", container)
        container.view = self

    def __getattr__(self, name: str) -> Any:
        # State names never start with "_". This also covers an unset slot.
        if name.startswith("_"):
            raise UnknownProperty(name)

        container = self._container
        if name == "internal":
            return container
        if name in container.states:
            return container.states[name]
        if name == "is":
            return container.is_
        if name in OPERATIONS or name in ACCESSORS:
            return getattr(container, name)
        raise UnknownProperty(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise IllegalDirectMutation(name)

    def __delattr__(self, name: str) -> None:
        raise IllegalDirectMutation(name)

    def __getitem__(self, name: str) -> Any:
        return self._container.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        raise IllegalDirectMutation(name)

    def __delitem__(self, name: str) -> None:
        raise IllegalDirectMutation(name)

    def __contains__(self, name: object) -> bool:
        return name in self._container.states

    def __iter__(self) -> Iterator[str]:
        return iter(self._container.names)

    def __len__(self) -> int:
        return len(self._container.states)

    def __dir__(self) -> list[str]:
        return sorted(set(self._container.states) | RESERVED_NAMES)

    def __repr__(self) -> str:
        container = self._container
        return f"State({', '.join(container.states)}; now={container.current_name})"
