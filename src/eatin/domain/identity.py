"""Domain models for authenticated identities and session state."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Identity:
    """Authenticated principal as reported by the identity provider."""

    id: UUID
    email: str | None = None


@dataclass(frozen=True)
class SessionEvent:
    """Session change delivered by the identity provider."""

    kind: str
    identity: Identity | None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of who is logged in for one view."""

    identity: Identity | None = None
    is_loading: bool = True
