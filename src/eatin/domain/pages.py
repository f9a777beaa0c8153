"""Navigable pages of the diary."""

from enum import Enum


class Page(Enum):
    """Addressable pages and their paths."""

    ENTRY = "/"
    AUTH = "/auth"
    DASHBOARD = "/dashboard"

    @property
    def path(self) -> str:
        return self.value

    @property
    def requires_auth(self) -> bool:
        """Return True when the page may only be shown to a signed-in user."""
        return self is not Page.AUTH

    @property
    def is_public_landing(self) -> bool:
        """Return True for pages a signed-in user is moved away from."""
        return self in {Page.ENTRY, Page.AUTH}
