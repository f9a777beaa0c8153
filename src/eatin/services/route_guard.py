"""Keeps the displayed page consistent with the session state."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from eatin.domain.identity import SessionState
from eatin.domain.pages import Page
from eatin.services.session_store import Navigator, SessionStore, Subscription

logger = logging.getLogger(__name__)


class GuardAction(Enum):
    """What the view should do for the current page."""

    LOADING = "loading"
    STAY = "stay"
    NAVIGATE = "navigate"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of evaluating the guard for a page."""

    action: GuardAction
    target: Page | None = None


LOADING = GuardDecision(GuardAction.LOADING)
STAY = GuardDecision(GuardAction.STAY)


def evaluate(state: SessionState, page: Page) -> GuardDecision:
    """Return the guard decision for a page under the given session state."""
    if state.is_loading:
        return LOADING
    if state.identity is None and page.requires_auth:
        return GuardDecision(GuardAction.NAVIGATE, Page.AUTH)
    if state.identity is not None and page.is_public_landing:
        return GuardDecision(GuardAction.NAVIGATE, Page.DASHBOARD)
    return STAY


@dataclass
class RouteGuard:
    """Re-evaluates the current page whenever the session store changes."""

    store: SessionStore
    navigator: Navigator
    page: Page = Page.ENTRY
    _subscription: Subscription | None = field(default=None, init=False, repr=False)

    def attach(self) -> None:
        """Start following session store updates."""
        if self._subscription is None:
            self._subscription = self.store.add_listener(self._on_state)

    def detach(self) -> None:
        """Stop following session store updates."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def enter(self, page: Page) -> GuardDecision:
        """Record the page being shown and evaluate it."""
        self.page = page
        return self.check()

    def check(self) -> GuardDecision:
        """Evaluate the current page and navigate when required."""
        decision = evaluate(self.store.state, self.page)
        if decision.action is GuardAction.NAVIGATE and decision.target is not None:
            logger.info(
                "Redirecting",
                extra={"from_page": self.page.path, "to_page": decision.target.path},
            )
            self.page = decision.target
            self.navigator.navigate(decision.target)
        return decision

    def _on_state(self, _state: SessionState) -> None:
        self.check()
