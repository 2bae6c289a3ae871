"""
Client-side global state: the signed-in identity and the notification queue.

Views never mutate state directly. They dispatch actions, the store reduces
them into a new ``State`` and then calls every subscriber synchronously, which
is how the routing shell notices logins and logouts.
"""

import itertools
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SEVERITIES = ("success", "info", "warning", "error")


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    severity: str = "info"


@dataclass(frozen=True)
class State:
    auth: AuthState = field(default_factory=AuthState)
    notifications: Tuple[Notification, ...] = ()


# --- Actions ---

@dataclass(frozen=True)
class LoginSucceeded:
    user: Dict[str, Any]
    token: str


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class Notify:
    message: str
    severity: str = "info"


@dataclass(frozen=True)
class Dismiss:
    notification_id: int


Listener = Callable[[State], None]


class Store:
    def __init__(self, state: Optional[State] = None):
        self._state = state or State()
        self._listeners: List[Listener] = []
        self._ids = itertools.count(1)

    @property
    def state(self) -> State:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action) -> State:
        self._state = self._reduce(self._state, action)
        logger.debug("dispatched %s", type(action).__name__)
        # copy: a listener may unsubscribe itself while being notified
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _reduce(self, state: State, action) -> State:
        if isinstance(action, LoginSucceeded):
            return replace(state, auth=AuthState(user=action.user, token=action.token))
        if isinstance(action, LoggedOut):
            return replace(state, auth=AuthState())
        if isinstance(action, Notify):
            if action.severity not in SEVERITIES:
                raise ValueError(f"unknown severity: {action.severity!r}")
            note = Notification(id=next(self._ids), message=action.message, severity=action.severity)
            return replace(state, notifications=state.notifications + (note,))
        if isinstance(action, Dismiss):
            remaining = tuple(n for n in state.notifications if n.id != action.notification_id)
            return replace(state, notifications=remaining)
        raise TypeError(f"unknown action: {action!r}")

    # shorthands used by views and the API client

    def notify(self, message: str, severity: str = "info") -> Notification:
        state = self.dispatch(Notify(message, severity))
        return state.notifications[-1]

    def dismiss(self, notification_id: int) -> None:
        self.dispatch(Dismiss(notification_id))

    def pop_notification(self) -> Optional[Notification]:
        """What the notification component does: take the oldest and dismiss it."""
        if not self._state.notifications:
            return None
        note = self._state.notifications[0]
        self.dismiss(note.id)
        return note
