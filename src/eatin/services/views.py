"""Per-browser client views and their lifecycle."""

import logging
import secrets
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date

from eatin.domain.pages import Page
from eatin.services.auth_form import AuthFormController
from eatin.services.dashboard import DashboardController
from eatin.services.route_guard import RouteGuard
from eatin.services.session_store import AuthGateway, SessionStore
from eatin.services.visits import VisitRepository, VisitService

logger = logging.getLogger(__name__)


@dataclass
class PendingNavigation:
    """Navigator that remembers the last requested page."""

    target: Page | None = None

    def navigate(self, page: Page) -> None:
        self.target = page

    def take(self) -> Page | None:
        """Return and clear the requested page."""
        target, self.target = self.target, None
        return target


@dataclass
class ViewBackend:
    """Service clients bound to one view."""

    gateway: AuthGateway
    repository: VisitRepository
    close: Callable[[], Awaitable[None]]


BackendFactory = Callable[[], Awaitable[ViewBackend]]


@dataclass
class View:
    """One browser's session store, route guard, and controllers."""

    id: str
    backend: ViewBackend
    navigator: PendingNavigation
    session_store: SessionStore
    route_guard: RouteGuard
    auth_form: AuthFormController
    dashboard: DashboardController

    async def close(self) -> None:
        """Tear down subscriptions before releasing the clients."""
        self.route_guard.detach()
        self.session_store.close()
        await self.backend.close()


class ViewRegistry:
    """Creates, looks up, and tears down views.

    Views idle for longer than ``idle_seconds`` are closed, and once
    ``max_views`` are open the least recently used one is closed to make room.
    Both checks run whenever a new view is opened.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        show_debug: bool = False,
        today: Callable[[], date] = date.today,
        idle_seconds: float = 1800,
        max_views: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend_factory = backend_factory
        self._show_debug = show_debug
        self._today = today
        self._idle_seconds = idle_seconds
        self._max_views = max_views
        self._clock = clock
        self._views: dict[str, View] = {}
        self._last_used: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._views)

    def get(self, view_id: str | None) -> View | None:
        """Return the live view and mark it as used; idle views are not live."""
        if not view_id or view_id not in self._views:
            return None
        now = self._clock()
        if now - self._last_used[view_id] > self._idle_seconds:
            return None
        self._last_used[view_id] = now
        return self._views[view_id]

    async def open_view(self, page: Page = Page.ENTRY) -> View:
        """Build a view, bootstrap its session, and register it."""
        await self.evict()
        backend = await self._backend_factory()
        navigator = PendingNavigation()
        store = SessionStore(backend.gateway, navigator)
        guard = RouteGuard(store=store, navigator=navigator, page=page)
        guard.attach()
        view = View(
            id=secrets.token_urlsafe(24),
            backend=backend,
            navigator=navigator,
            session_store=store,
            route_guard=guard,
            auth_form=AuthFormController(backend.gateway),
            dashboard=DashboardController(
                session_store=store,
                visit_service=VisitService(backend.repository, today=self._today),
                show_debug=self._show_debug,
            ),
        )
        self._views[view.id] = view
        self._last_used[view.id] = self._clock()
        await store.open()
        logger.info("Opened view", extra={"open_views": len(self._views)})
        return view

    async def evict(self) -> int:
        """Close idle views, then the least recently used ones above the cap."""
        now = self._clock()
        stale = [
            view_id
            for view_id, used in self._last_used.items()
            if now - used > self._idle_seconds
        ]
        by_age = sorted(
            (view_id for view_id in self._last_used if view_id not in stale),
            key=self._last_used.__getitem__,
        )
        overflow = len(by_age) - self._max_views + 1
        if overflow > 0:
            stale.extend(by_age[:overflow])
        for view_id in stale:
            try:
                await self.close_view(view_id)
            except Exception:
                logger.exception("Failed to close view")
        if stale:
            logger.info(
                "Evicted views",
                extra={"evicted": len(stale), "open_views": len(self._views)},
            )
        return len(stale)

    async def close_view(self, view_id: str) -> None:
        self._last_used.pop(view_id, None)
        view = self._views.pop(view_id, None)
        if view is not None:
            await view.close()

    async def close_all(self) -> None:
        """Close every open view."""
        for view_id in list(self._views):
            try:
                await self.close_view(view_id)
            except Exception:
                logger.exception("Failed to close view")
