"""Client-side session state kept in sync with the identity provider.

One ``SessionStore`` exists per view. It starts in the loading state, issues a
single bootstrap fetch for any pre-existing session, and then follows the
provider's change events until the view is torn down.

Updates are ordered by ticket rather than by request completion: the bootstrap
takes its ticket when the fetch is issued, an event takes its ticket when it is
delivered, and an update older than the latest applied one is dropped. A slow
bootstrap can therefore never reinstate a session that a later event removed.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from eatin.domain.errors import AuthError, SubscriptionError
from eatin.domain.identity import Identity, SessionEvent, SessionState
from eatin.domain.pages import Page

logger = logging.getLogger(__name__)

SessionCallback = Callable[[SessionEvent], None]
StateListener = Callable[[SessionState], None]


class Subscription(Protocol):
    """Handle returned by subscriptions."""

    def unsubscribe(self) -> None:
        """Stop delivering callbacks."""


class AuthGateway(Protocol):
    """Interface to the hosted identity provider."""

    async def get_current_session(self) -> Identity | None:
        """Return the identity of an existing session, if any."""

    def on_session_change(self, callback: SessionCallback) -> Subscription:
        """Deliver every session change to the callback until unsubscribed."""

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """Sign in with email and password."""

    async def sign_up(self, email: str, password: str) -> None:
        """Register a new account."""

    async def sign_out(self) -> None:
        """Revoke the current session."""


class Navigator(Protocol):
    """Moves the view to another page."""

    def navigate(self, page: Page) -> None:
        """Request navigation to the page."""


@dataclass
class _ListenerHandle:
    listeners: list[StateListener]
    listener: StateListener

    def unsubscribe(self) -> None:
        if self.listener in self.listeners:
            self.listeners.remove(self.listener)


class SessionStore:
    """Single source of truth for who is logged in within one view."""

    def __init__(self, gateway: AuthGateway, navigator: Navigator) -> None:
        self._gateway = gateway
        self._navigator = navigator
        self._state = SessionState()
        self._listeners: list[StateListener] = []
        self._subscription: Subscription | None = None
        self._issued = 0
        self._applied = 0
        self._opened = False
        self._closed = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._state.identity

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "SessionStore":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    async def open(self) -> None:
        """Subscribe to session changes and fetch the existing session once.

        When the subscription cannot be established no bootstrap is issued:
        without change events a fetched identity could never be revoked, so
        the session falls back to Absent instead.
        """
        if self._opened:
            raise RuntimeError("Session store has already been opened")
        self._opened = True
        try:
            self._subscription = self._gateway.on_session_change(self._handle_event)
        except SubscriptionError:
            logger.exception("Failed to subscribe to session changes")
            self._apply(self._next_ticket(), None)
            return
        await self._bootstrap()

    def close(self) -> None:
        """Release the provider subscription and every state listener."""
        if self._closed:
            return
        self._closed = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._listeners.clear()

    def add_listener(self, listener: StateListener) -> Subscription:
        """Call the listener with every new state until unsubscribed."""
        self._listeners.append(listener)
        return _ListenerHandle(self._listeners, listener)

    async def sign_out(self) -> None:
        """Sign out and move to the auth page even when the revoke fails.

        A failed revoke delivers no change event, so the local session is
        cleared as if one had arrived.
        """
        try:
            await self._gateway.sign_out()
        except AuthError:
            logger.exception("Sign out failed; clearing the local session")
            self._apply(self._next_ticket(), None)
        finally:
            self._navigator.navigate(Page.AUTH)

    async def _bootstrap(self) -> None:
        ticket = self._next_ticket()
        try:
            identity = await self._gateway.get_current_session()
        except AuthError:
            logger.exception("Failed to fetch the current session")
            identity = None
        self._apply(ticket, identity)

    def _handle_event(self, event: SessionEvent) -> None:
        if self._closed:
            return
        logger.info(
            "Session event received",
            extra={"event": event.kind, "authenticated": event.identity is not None},
        )
        self._apply(self._next_ticket(), event.identity)

    def _next_ticket(self) -> int:
        self._issued += 1
        return self._issued

    def _apply(self, ticket: int, identity: Identity | None) -> None:
        if self._closed:
            return
        if ticket <= self._applied:
            logger.debug(
                "Dropping stale session update",
                extra={"ticket": ticket, "applied": self._applied},
            )
            return
        self._applied = ticket
        self._state = SessionState(identity=identity, is_loading=False)
        for listener in list(self._listeners):
            listener(self._state)
