"""Supabase repository for diary visits."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from eatin.domain.errors import RemoteError
from eatin.domain.visits import NewVisit, Visit, VisitUpdate
from eatin.services.visits import VisitRepository

_COLUMNS = "id, user_id, restaurant_name, visited_at, notes, created_at, updated_at"
_NOT_PERMITTED = "Visit not found or you do not have access to it."


@dataclass
class SupabaseVisitRepository(VisitRepository):
    """Supabase implementation for visits; row-level security scopes every row."""

    client: AsyncClient

    async def list_visits(self, owner_id: UUID) -> list[Visit]:
        """Return the owner's visits, newest visit date first."""
        rows = await _execute(
            self.client.table("visits")
            .select(_COLUMNS)
            .eq("user_id", str(owner_id))
            .order("visited_at", desc=True)
            .order("created_at", desc=True),
            "Failed to load visits",
        )
        return [_parse_visit(row) for row in rows]

    async def create_visit(self, visit: NewVisit) -> Visit:
        """Insert a visit row and return it."""
        rows = await _execute(
            self.client.table("visits").insert(
                {
                    "user_id": str(visit.owner_id),
                    "restaurant_name": visit.restaurant_name,
                    "visited_at": visit.visited_on.isoformat(),
                    "notes": visit.notes,
                }
            ),
            "Failed to save visit",
        )
        if not rows:
            raise RemoteError("Failed to save visit")
        return _parse_visit(rows[0])

    async def update_visit(self, visit_id: UUID, changes: VisitUpdate) -> Visit:
        """Update a visit row and return it."""
        payload = _update_payload(changes)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        rows = await _execute(
            self.client.table("visits").update(payload).eq("id", str(visit_id)),
            "Failed to save visit",
        )
        if not rows:
            raise RemoteError(_NOT_PERMITTED)
        return _parse_visit(rows[0])

    async def delete_visit(self, visit_id: UUID) -> None:
        """Delete a visit row."""
        rows = await _execute(
            self.client.table("visits").delete().eq("id", str(visit_id)),
            "Failed to delete visit",
        )
        if not rows:
            raise RemoteError(_NOT_PERMITTED)


async def _execute(query: Any, failure: str) -> list[dict[str, object]]:
    try:
        response = await query.execute()
    except APIError as exc:
        raise RemoteError(exc.message or failure) from exc
    except httpx.HTTPError as exc:
        raise RemoteError(failure) from exc
    return response.data or []


def _update_payload(changes: VisitUpdate) -> dict[str, object]:
    payload: dict[str, object] = {}
    for key, value in changes.as_changes().items():
        if key == "visited_on" and isinstance(value, date):
            payload["visited_at"] = value.isoformat()
        else:
            payload[key] = value
    return payload


def _parse_visit(row: dict[str, object]) -> Visit:
    return Visit(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["user_id"])),
        restaurant_name=str(row.get("restaurant_name", "")),
        visited_on=date.fromisoformat(str(row["visited_at"])[:10]),
        notes=str(row["notes"]) if row.get("notes") else None,
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
