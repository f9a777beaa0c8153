"""Dashboard state: the visit form, the visit list, and pending deletes."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from eatin.domain.errors import RemoteError
from eatin.domain.models import Notice
from eatin.domain.visits import DiaryStats, Visit
from eatin.services.session_store import SessionStore
from eatin.services.visits import VisitForm, VisitService

logger = logging.getLogger(__name__)


@dataclass
class DashboardController:
    """Sequences form submissions and list refreshes for the signed-in user."""

    session_store: SessionStore
    visit_service: VisitService
    show_debug: bool = False
    visits: list[Visit] = field(default_factory=list)
    form: VisitForm = field(default_factory=VisitForm)
    editing_id: UUID | None = None
    pending_delete_id: UUID | None = None
    notice: Notice | None = None
    loaded_for: UUID | None = None

    def __post_init__(self) -> None:
        if not self.form.visited_on:
            self.form = self.blank_form()

    def blank_form(self) -> VisitForm:
        return VisitForm(visited_on=self.visit_service.today().isoformat())

    @property
    def stats(self) -> DiaryStats:
        return self.visit_service.stats(self.visits)

    @property
    def pending_delete(self) -> Visit | None:
        return self._find(self.pending_delete_id)

    async def ensure_loaded(self) -> None:
        """Load the list when it belongs to nobody or to another identity."""
        identity = self.session_store.identity
        if identity is None:
            return
        if self.loaded_for != identity.id:
            self._reset()
            await self.refresh()

    async def refresh(self) -> None:
        """Re-fetch the visit list for the current identity."""
        identity = self.session_store.identity
        if identity is None:
            return
        try:
            self.visits = await self.visit_service.list_visits(identity.id)
            self.loaded_for = identity.id
        except RemoteError as exc:
            logger.exception(
                "Failed to load visits", extra={"owner_id": str(identity.id)}
            )
            self.notice = self._failure("Failed to load visits", exc)

    async def submit(self, form: VisitForm) -> bool:
        """Create or update a visit from the form; keep the form on failure."""
        identity = self.session_store.identity
        if identity is None:
            return False
        self.form = form
        self.notice = None
        editing_id = self.editing_id
        try:
            await self.visit_service.save_visit(
                identity.id, form, visit_id=editing_id
            )
        except ValueError as exc:
            self.notice = Notice(str(exc), is_error=True)
            return False
        except RemoteError as exc:
            logger.exception(
                "Failed to save visit",
                extra={"owner_id": str(identity.id), "visit_id": str(editing_id)},
            )
            self.notice = Notice(exc.message or "Failed to save visit", is_error=True)
            return False
        self.notice = Notice("Visit updated!" if editing_id else "Visit added!")
        self.editing_id = None
        self.form = self.blank_form()
        await self.refresh()
        return True

    def begin_edit(self, visit_id: UUID) -> bool:
        """Pre-fill the form from a listed visit and route submits to update."""
        visit = self._find(visit_id)
        if visit is None:
            self.notice = Notice("That visit is no longer in your list.", True)
            return False
        self.form = VisitForm.from_visit(visit)
        self.editing_id = visit.id
        self.pending_delete_id = None
        self.notice = None
        return True

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.form = self.blank_form()

    def request_delete(self, visit_id: UUID) -> bool:
        """Ask for confirmation before deleting a listed visit."""
        if self._find(visit_id) is None:
            self.notice = Notice("That visit is no longer in your list.", True)
            return False
        self.pending_delete_id = visit_id
        self.notice = None
        return True

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    async def confirm_delete(self) -> bool:
        """Delete the visit awaiting confirmation."""
        visit_id = self.pending_delete_id
        if visit_id is None:
            return False
        self.pending_delete_id = None
        try:
            await self.visit_service.remove_visit(visit_id)
        except RemoteError as exc:
            logger.exception(
                "Failed to delete visit", extra={"visit_id": str(visit_id)}
            )
            self.notice = self._failure("Failed to delete visit", exc)
            return False
        if self.editing_id == visit_id:
            self.cancel_edit()
        await self.refresh()
        self.notice = Notice("Visit deleted")
        return True

    def _find(self, visit_id: UUID | None) -> Visit | None:
        if visit_id is None:
            return None
        return next((visit for visit in self.visits if visit.id == visit_id), None)

    def _reset(self) -> None:
        self.visits = []
        self.editing_id = None
        self.pending_delete_id = None
        self.notice = None
        self.form = self.blank_form()
        self.loaded_for = None

    def _failure(self, fallback: str, exc: RemoteError) -> Notice:
        if self.show_debug and exc.message:
            return Notice(f"{fallback} (debug: {exc.message})", is_error=True)
        return Notice(fallback, is_error=True)
