from dataclasses import dataclass
from enum import Enum

from eventpages.auth.session import SessionStatus, SessionStore
from eventpages.config.settings import settings


class GateAction(str, Enum):
    LOADING = "loading"
    GRANT = "grant"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    location: str | None = None

    @property
    def granted(self) -> bool:
        return self.action is GateAction.GRANT


class AccessGate:
    """Decides whether a route may render for the current session.

    Protected routes send anonymous users to the login route; unprotected
    ones (login, sign up) send signed-in users to the default route.
    """

    def __init__(
        self,
        session: SessionStore,
        login_route: str = settings.login_route,
        default_route: str = settings.default_route,
    ) -> None:
        self.session = session
        self.login_route = login_route
        self.default_route = default_route

    def check(self, protected: bool) -> GateDecision:
        status = self.session.status
        if status is SessionStatus.UNRESOLVED:
            return GateDecision(GateAction.LOADING)

        authenticated = status is SessionStatus.AUTHENTICATED
        if protected and not authenticated:
            return GateDecision(GateAction.REDIRECT, self.login_route)
        if not protected and authenticated:
            return GateDecision(GateAction.REDIRECT, self.default_route)
        return GateDecision(GateAction.GRANT)
