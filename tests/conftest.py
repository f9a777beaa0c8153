"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from eatin.config import Settings
from eatin.containers import AppContainer
from eatin.domain.errors import AuthError, RemoteError, SubscriptionError
from eatin.domain.identity import Identity, SessionEvent
from eatin.domain.pages import Page
from eatin.domain.visits import NewVisit, Visit, VisitUpdate
from eatin.services.session_store import AuthGateway, SessionCallback
from eatin.services.views import ViewBackend, ViewRegistry
from eatin.services.visits import VisitRepository

TODAY = date(2024, 3, 1)


@dataclass
class FakeSubscription:
    """Subscription handle that removes its callback."""

    callbacks: list[SessionCallback]
    callback: SessionCallback
    active: bool = True

    def unsubscribe(self) -> None:
        self.active = False
        if self.callback in self.callbacks:
            self.callbacks.remove(self.callback)


@dataclass
class FakeAuthGateway(AuthGateway):
    """In-memory identity provider that emits session events."""

    accounts: dict[str, tuple[Identity, str]] = field(default_factory=dict)
    identity: Identity | None = None
    callbacks: list[SessionCallback] = field(default_factory=list)
    subscriptions: list[FakeSubscription] = field(default_factory=list)
    bootstrap_calls: int = 0
    sign_out_calls: int = 0
    bootstrap_error: AuthError | None = None
    subscribe_error: SubscriptionError | None = None
    sign_out_error: AuthError | None = None
    bootstrap_gate: asyncio.Event | None = None
    confirm_sign_ups: bool = False

    def register(self, email: str, password: str) -> Identity:
        identity = Identity(id=uuid4(), email=email)
        self.accounts[email] = (identity, password)
        return identity

    def emit(self, kind: str, identity: Identity | None) -> None:
        self.identity = identity
        for callback in list(self.callbacks):
            callback(SessionEvent(kind=kind, identity=identity))

    async def get_current_session(self) -> Identity | None:
        self.bootstrap_calls += 1
        snapshot = self.identity
        if self.bootstrap_gate is not None:
            await self.bootstrap_gate.wait()
        if self.bootstrap_error is not None:
            raise self.bootstrap_error
        return snapshot

    def on_session_change(self, callback: SessionCallback) -> FakeSubscription:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.callbacks.append(callback)
        subscription = FakeSubscription(self.callbacks, callback)
        self.subscriptions.append(subscription)
        return subscription

    async def sign_in_with_password(self, email: str, password: str) -> None:
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise AuthError("Invalid login credentials")
        self.emit("SIGNED_IN", account[0])

    async def sign_up(self, email: str, password: str) -> None:
        if email in self.accounts:
            raise AuthError("User already registered")
        identity = self.register(email, password)
        if self.confirm_sign_ups:
            self.emit("SIGNED_IN", identity)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.emit("SIGNED_OUT", None)


@dataclass
class RecordingNavigator:
    """Navigator that records every requested page."""

    pages: list[Page] = field(default_factory=list)

    def navigate(self, page: Page) -> None:
        self.pages.append(page)


@dataclass
class FakeClock:
    """Clock that advances one second per reading."""

    current: datetime = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class InMemoryVisitRepository(VisitRepository):
    """In-memory visit table; ``acting_as`` mimics row-level security."""

    rows: dict[UUID, Visit] = field(default_factory=dict)
    acting_as: Callable[[], UUID | None] | None = None
    clock: FakeClock = field(default_factory=FakeClock)
    fail_with: RemoteError | None = None

    def _caller(self, fallback: UUID | None = None) -> UUID | None:
        if self.acting_as is None:
            return fallback
        return self.acting_as()

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def list_visits(self, owner_id: UUID) -> list[Visit]:
        self._check()
        caller = self._caller(owner_id)
        visits = [
            visit
            for visit in self.rows.values()
            if visit.owner_id == owner_id and visit.owner_id == caller
        ]
        return sorted(
            visits, key=lambda visit: (visit.visited_on, visit.created_at), reverse=True
        )

    async def create_visit(self, visit: NewVisit) -> Visit:
        self._check()
        if self._caller(visit.owner_id) != visit.owner_id:
            raise RemoteError("new row violates row-level security policy")
        now = self.clock()
        stored = Visit(
            id=uuid4(),
            owner_id=visit.owner_id,
            restaurant_name=visit.restaurant_name,
            visited_on=visit.visited_on,
            notes=visit.notes,
            created_at=now,
            updated_at=now,
        )
        self.rows[stored.id] = stored
        return stored

    async def update_visit(self, visit_id: UUID, changes: VisitUpdate) -> Visit:
        self._check()
        current = self.rows.get(visit_id)
        if current is None or self._caller(current.owner_id) != current.owner_id:
            raise RemoteError("Visit not found or you do not have access to it.")
        values = changes.as_changes()
        updated = Visit(
            id=current.id,
            owner_id=current.owner_id,
            restaurant_name=str(values.get("restaurant_name", current.restaurant_name)),
            visited_on=values.get("visited_on", current.visited_on),  # type: ignore[arg-type]
            notes=values.get("notes", current.notes),  # type: ignore[arg-type]
            created_at=current.created_at,
            updated_at=self.clock(),
        )
        self.rows[visit_id] = updated
        return updated

    async def delete_visit(self, visit_id: UUID) -> None:
        self._check()
        current = self.rows.get(visit_id)
        if current is None or self._caller(current.owner_id) != current.owner_id:
            raise RemoteError("Visit not found or you do not have access to it.")
        del self.rows[visit_id]


@dataclass
class FakeBackendFactory:
    """Builds per-view fakes sharing one account list and one visit table."""

    accounts: dict[str, tuple[Identity, str]] = field(default_factory=dict)
    rows: dict[UUID, Visit] = field(default_factory=dict)
    gateways: list[FakeAuthGateway] = field(default_factory=list)
    closed: int = 0

    def register(self, email: str, password: str) -> Identity:
        identity = Identity(id=uuid4(), email=email)
        self.accounts[email] = (identity, password)
        return identity

    async def __call__(self) -> ViewBackend:
        gateway = FakeAuthGateway(accounts=self.accounts)
        self.gateways.append(gateway)

        def acting_as() -> UUID | None:
            return gateway.identity.id if gateway.identity else None

        repository = InMemoryVisitRepository(rows=self.rows, acting_as=acting_as)

        async def close() -> None:
            self.closed += 1

        return ViewBackend(gateway=gateway, repository=repository, close=close)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        environment="test",
    )


@pytest.fixture
def backend_factory() -> FakeBackendFactory:
    return FakeBackendFactory()


@pytest.fixture
def container(
    settings: Settings, backend_factory: FakeBackendFactory
) -> AppContainer:
    views = ViewRegistry(backend_factory, today=lambda: TODAY)

    async def close_resources() -> None:
        await views.close_all()

    return AppContainer(
        settings=settings,
        views=views,
        close_resources=close_resources,
    )
