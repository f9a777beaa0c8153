"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import acreate_client

from eatin.adapters.supabase_auth_gateway import SupabaseAuthGateway
from eatin.adapters.supabase_visit_repository import SupabaseVisitRepository
from eatin.config import Settings
from eatin.services.views import ViewBackend, ViewRegistry


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    views: ViewRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()

    async def open_backend() -> ViewBackend:
        # One client per view: the client carries that user's access token,
        # which row-level security checks on every query.
        supabase_client = await acreate_client(
            resolved_settings.supabase_url, resolved_settings.supabase_anon_key
        )

        async def close() -> None:
            await supabase_client.postgrest.aclose()

        return ViewBackend(
            gateway=SupabaseAuthGateway(supabase_client),
            repository=SupabaseVisitRepository(supabase_client),
            close=close,
        )

    views = ViewRegistry(
        open_backend,
        show_debug=resolved_settings.show_debug,
        idle_seconds=resolved_settings.view_idle_seconds,
        max_views=resolved_settings.max_views,
    )

    async def close_resources() -> None:
        await views.close_all()

    return AppContainer(
        settings=resolved_settings,
        views=views,
        close_resources=close_resources,
    )
