"""Visit validation and persistence."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator

from eatin.domain.visits import DiaryStats, NewVisit, Visit, VisitUpdate

MAX_RESTAURANT_NAME_LENGTH = 200


class VisitRepository(Protocol):
    """Persistence interface for visits."""

    async def list_visits(self, owner_id: UUID) -> list[Visit]:
        """Return the owner's visits, newest visit date first."""

    async def create_visit(self, visit: NewVisit) -> Visit:
        """Insert a visit and return the stored row."""

    async def update_visit(self, visit_id: UUID, changes: VisitUpdate) -> Visit:
        """Apply a partial update and return the stored row."""

    async def delete_visit(self, visit_id: UUID) -> None:
        """Delete a visit."""


@dataclass(frozen=True)
class VisitForm:
    """Raw visit form contents as typed by the user."""

    restaurant_name: str = ""
    visited_on: str = ""
    notes: str = ""

    @classmethod
    def from_visit(cls, visit: Visit) -> "VisitForm":
        return cls(
            restaurant_name=visit.restaurant_name,
            visited_on=visit.visited_on.isoformat(),
            notes=visit.notes or "",
        )


class VisitFields(BaseModel):
    """Validated visit form fields."""

    restaurant_name: str = Field(min_length=1, max_length=MAX_RESTAURANT_NAME_LENGTH)
    visited_on: date
    notes: str | None = None

    @field_validator("restaurant_name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("notes", mode="before")
    @classmethod
    def _blank_notes_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value


def parse_visit_form(form: VisitForm, today: date) -> VisitFields:
    """Validate form contents, raising ValueError with a user-facing message."""
    try:
        fields = VisitFields(
            restaurant_name=form.restaurant_name,
            visited_on=form.visited_on,
            notes=form.notes,
        )
    except ValidationError as exc:
        raise ValueError(_describe_error(exc)) from exc
    if fields.visited_on > today:
        raise ValueError("Visit date cannot be in the future.")
    return fields


def _describe_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = error["loc"][0] if error["loc"] else ""
    if location == "restaurant_name":
        if error["type"] == "string_too_long":
            return (
                "Restaurant name must be at most "
                f"{MAX_RESTAURANT_NAME_LENGTH} characters."
            )
        return "Restaurant name is required."
    if location == "visited_on":
        return "Visit date must be a valid date (YYYY-MM-DD)."
    return "Please check the visit details."


@dataclass
class VisitService:
    """Application service for diary visits."""

    repository: VisitRepository
    today: Callable[[], date] = field(default=date.today)

    async def list_visits(self, owner_id: UUID) -> list[Visit]:
        """Return the owner's visits, newest first."""
        return await self.repository.list_visits(owner_id)

    async def save_visit(
        self, owner_id: UUID, form: VisitForm, visit_id: UUID | None = None
    ) -> Visit:
        """Create a visit, or update ``visit_id`` when given."""
        fields = parse_visit_form(form, self.today())
        if visit_id is None:
            return await self.repository.create_visit(
                NewVisit(
                    owner_id=owner_id,
                    restaurant_name=fields.restaurant_name,
                    visited_on=fields.visited_on,
                    notes=fields.notes,
                )
            )
        return await self.repository.update_visit(
            visit_id,
            VisitUpdate(
                restaurant_name=fields.restaurant_name,
                visited_on=fields.visited_on,
                notes=fields.notes,
                clear_notes=fields.notes is None,
            ),
        )

    async def remove_visit(self, visit_id: UUID) -> None:
        """Delete a visit."""
        await self.repository.delete_visit(visit_id)

    @staticmethod
    def stats(visits: list[Visit]) -> DiaryStats:
        """Summarize a visit list."""
        restaurants = {visit.restaurant_name.casefold() for visit in visits}
        return DiaryStats(
            total_visits=len(visits), distinct_restaurants=len(restaurants)
        )
