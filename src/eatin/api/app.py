"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from eatin.api.pages import render_auth, render_dashboard, render_loading
from eatin.app_logging import configure_logging
from eatin.containers import AppContainer
from eatin.domain.pages import Page
from eatin.services.route_guard import GuardAction
from eatin.services.views import View
from eatin.services.visits import VisitForm


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    async def resolve_view(request: Request) -> View:
        state_container: AppContainer = request.app.state.container
        view_id = request.cookies.get(settings.view_cookie_name)
        view = state_container.views.get(view_id)
        if view is None:
            view = await state_container.views.open_view()
            logger.info("Started a new view", extra={"path": request.url.path})
        return view

    def bind(view: View, response: Response) -> Response:
        response.set_cookie(
            settings.view_cookie_name,
            view.id,
            httponly=True,
            samesite="lax",
            secure=settings.cookie_secure,
        )
        return response

    def guard_page(view: View, page: Page) -> Response | None:
        """Return the loading page or a redirect, or None to render the page."""
        view.navigator.take()
        decision = view.route_guard.enter(page)
        view.navigator.take()
        if decision.action is GuardAction.LOADING:
            return HTMLResponse(render_loading())
        if decision.action is GuardAction.NAVIGATE and decision.target is not None:
            return _redirect(decision.target)
        return None

    def guard_action(view: View, page: Page) -> Response | None:
        """Like guard_page, but a blocked form post is sent back to a page."""
        view.navigator.take()
        decision = view.route_guard.enter(page)
        view.navigator.take()
        if decision.action is GuardAction.STAY:
            return None
        return _redirect(decision.target or page)

    def after_action(view: View, page: Page) -> Response:
        return bind(view, _redirect(view.navigator.take() or page))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def entry(request: Request) -> Response:
        """Entry page: always forwards once the session is known."""
        view = await resolve_view(request)
        response = guard_page(view, Page.ENTRY) or HTMLResponse(render_loading())
        return bind(view, response)

    @app.get("/auth", response_class=HTMLResponse)
    async def auth_page(request: Request) -> Response:
        view = await resolve_view(request)
        blocked = guard_page(view, Page.AUTH)
        if blocked is not None:
            return bind(view, blocked)
        return bind(view, HTMLResponse(render_auth(view.auth_form)))

    @app.post("/auth")
    async def submit_credentials(
        request: Request, email: str = Form(""), password: str = Form("")
    ) -> Response:
        """Sign in or sign up; a resulting session event redirects to the dashboard."""
        view = await resolve_view(request)
        blocked = guard_action(view, Page.AUTH)
        if blocked is not None:
            return bind(view, blocked)
        await view.auth_form.submit(email, password)
        return after_action(view, Page.AUTH)

    @app.post("/auth/mode")
    async def toggle_auth_mode(request: Request) -> Response:
        view = await resolve_view(request)
        view.auth_form.toggle_mode()
        return bind(view, _redirect(Page.AUTH))

    @app.post("/signout")
    async def sign_out(request: Request) -> Response:
        """Sign out; always lands on the auth page."""
        view = await resolve_view(request)
        await view.session_store.sign_out()
        return after_action(view, Page.AUTH)

    @app.get("/dashboard", response_class=HTMLResponse)
    async def dashboard_page(request: Request) -> Response:
        view = await resolve_view(request)
        blocked = guard_page(view, Page.DASHBOARD)
        if blocked is not None:
            return bind(view, blocked)
        await view.dashboard.ensure_loaded()
        identity = view.session_store.identity
        if identity is None:
            return after_action(view, Page.AUTH)
        html = render_dashboard(
            identity, view.dashboard, view.dashboard.visit_service.today()
        )
        return bind(view, HTMLResponse(html))

    @app.post("/dashboard/visits")
    async def save_visit(
        request: Request,
        restaurant_name: str = Form(""),
        visited_on: str = Form(""),
        notes: str = Form(""),
    ) -> Response:
        """Create a visit, or update the one being edited."""
        view = await resolve_view(request)
        blocked = guard_action(view, Page.DASHBOARD)
        if blocked is not None:
            return bind(view, blocked)
        await view.dashboard.ensure_loaded()
        await view.dashboard.submit(
            VisitForm(
                restaurant_name=restaurant_name, visited_on=visited_on, notes=notes
            )
        )
        return after_action(view, Page.DASHBOARD)

    @app.post("/dashboard/visits/{visit_id}/edit")
    async def edit_visit(visit_id: UUID, request: Request) -> Response:
        view = await resolve_view(request)
        blocked = guard_action(view, Page.DASHBOARD)
        if blocked is not None:
            return bind(view, blocked)
        await view.dashboard.ensure_loaded()
        view.dashboard.begin_edit(visit_id)
        return after_action(view, Page.DASHBOARD)

    @app.post("/dashboard/edit/cancel")
    async def cancel_edit(request: Request) -> Response:
        view = await resolve_view(request)
        view.dashboard.cancel_edit()
        return after_action(view, Page.DASHBOARD)

    @app.post("/dashboard/visits/{visit_id}/delete")
    async def request_delete(visit_id: UUID, request: Request) -> Response:
        """Ask for confirmation; nothing is deleted yet."""
        view = await resolve_view(request)
        blocked = guard_action(view, Page.DASHBOARD)
        if blocked is not None:
            return bind(view, blocked)
        await view.dashboard.ensure_loaded()
        view.dashboard.request_delete(visit_id)
        return after_action(view, Page.DASHBOARD)

    @app.post("/dashboard/delete/confirm")
    async def confirm_delete(request: Request) -> Response:
        view = await resolve_view(request)
        blocked = guard_action(view, Page.DASHBOARD)
        if blocked is not None:
            return bind(view, blocked)
        await view.dashboard.confirm_delete()
        return after_action(view, Page.DASHBOARD)

    @app.post("/dashboard/delete/cancel")
    async def cancel_delete(request: Request) -> Response:
        view = await resolve_view(request)
        view.dashboard.cancel_delete()
        return after_action(view, Page.DASHBOARD)

    return app


def _redirect(page: Page) -> RedirectResponse:
    return RedirectResponse(page.path, status_code=303)
