"""Domain models for restaurant visits."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class Visit:
    """One diary entry owned by an identity."""

    id: UUID
    owner_id: UUID
    restaurant_name: str
    visited_on: date
    notes: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NewVisit:
    """Fields supplied by the client when creating a visit."""

    owner_id: UUID
    restaurant_name: str
    visited_on: date
    notes: str | None = None


@dataclass(frozen=True)
class VisitUpdate:
    """Partial update; None fields are left unchanged except notes."""

    restaurant_name: str | None = None
    visited_on: date | None = None
    notes: str | None = None
    clear_notes: bool = False

    def as_changes(self) -> dict[str, object]:
        """Return only the fields that should be written."""
        changes: dict[str, object] = {}
        if self.restaurant_name is not None:
            changes["restaurant_name"] = self.restaurant_name
        if self.visited_on is not None:
            changes["visited_on"] = self.visited_on
        if self.notes is not None or self.clear_notes:
            changes["notes"] = self.notes
        return changes


@dataclass(frozen=True)
class DiaryStats:
    """Counters shown next to the visit list."""

    total_visits: int
    distinct_restaurants: int
