"""
Routing shell for the client: maps a location to a view, keeping private
views behind a signed-in identity.

``resolve`` is the pure rule set. ``Router`` wraps it with a current
location, history, and a store subscription so that logging in or out
re-evaluates where the user should be.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from carhub.client.store import State, Store

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/cars"

# guards against a misconfigured table redirecting forever
MAX_REDIRECTS = 5


@dataclass(frozen=True)
class Route:
    pattern: str
    view: str
    private: bool
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        source = re.sub(r":(\w+)", r"(?P<\1>[^/]+)", self.pattern)
        object.__setattr__(self, "regex", re.compile(source))

    def match(self, path: str) -> Optional[Dict[str, str]]:
        m = self.regex.fullmatch(path)
        return m.groupdict() if m else None


# more specific patterns first: /cars/new must win over /cars/:id
ROUTES: Tuple[Route, ...] = (
    Route("/login", "login", private=False),
    Route("/register", "register", private=False),
    Route("/cars/new", "car_create", private=True),
    Route("/cars/:id/edit", "car_edit", private=True),
    Route("/cars/:id", "car_detail", private=True),
    Route("/cars", "car_list", private=True),
)


@dataclass(frozen=True)
class ViewMatch:
    view: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    layout: bool = False  # private views render inside the shared layout


@dataclass(frozen=True)
class Redirect:
    to: str
    from_path: Optional[str] = None


def normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def resolve(path: str, authenticated: bool) -> Union[ViewMatch, Redirect]:
    path = normalize(path)

    for route in ROUTES:
        if route.private:
            continue
        params = route.match(path)
        if params is not None:
            return ViewMatch(route.view, path, params)

    if not authenticated:
        return Redirect(LOGIN_PATH, from_path=path)

    for route in ROUTES:
        if not route.private:
            continue
        params = route.match(path)
        if params is not None:
            return ViewMatch(route.view, path, params, layout=True)

    return Redirect(HOME_PATH)


class Router:
    def __init__(self, store: Store, initial_path: str = "/"):
        self.store = store
        self.history: List[str] = []
        self.current: Optional[ViewMatch] = None
        # mirrors the location state a redirect to /login carries
        self.location_state: Dict[str, str] = {}
        self._was_authenticated = store.state.auth.is_authenticated
        self._unsubscribe = store.subscribe(self._on_store_change)
        self.navigate(initial_path)

    @property
    def location(self) -> Optional[str]:
        return self.current.path if self.current else None

    def navigate(self, path: str, replace: bool = False) -> ViewMatch:
        state: Dict[str, str] = {}
        outcome = resolve(path, self.store.state.auth.is_authenticated)
        hops = 0
        while isinstance(outcome, Redirect):
            hops += 1
            if hops > MAX_REDIRECTS:
                raise RuntimeError(f"redirect loop while resolving {path!r}")
            if outcome.from_path is not None:
                state = {"from": outcome.from_path}
            logger.debug("redirect %s -> %s", path, outcome.to)
            outcome = resolve(outcome.to, self.store.state.auth.is_authenticated)

        if replace and self.history:
            self.history[-1] = outcome.path
        else:
            self.history.append(outcome.path)
        self.current = outcome
        self.location_state = state
        return outcome

    def _on_store_change(self, state: State) -> None:
        authenticated = state.auth.is_authenticated
        changed = authenticated != self._was_authenticated
        self._was_authenticated = authenticated
        if not changed or self.current is None:
            return

        if authenticated and self.current.view == "login":
            # back to wherever the user was headed before being sent to log in
            self.navigate(self.location_state.get("from", HOME_PATH), replace=True)
        elif not authenticated and self.current.layout:
            self.navigate(self.current.path, replace=True)

    def close(self) -> None:
        self._unsubscribe()
