"""Supabase Auth implementation of the identity provider gateway."""

from dataclasses import dataclass
from uuid import UUID

import httpx
from supabase import AsyncClient
from supabase import AuthError as SupabaseAuthError

from eatin.domain.errors import AuthError, SubscriptionError
from eatin.domain.identity import Identity, SessionEvent
from eatin.services.session_store import AuthGateway, SessionCallback, Subscription


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Wraps ``AsyncClient.auth`` and translates its errors."""

    client: AsyncClient

    async def get_current_session(self) -> Identity | None:
        """Return the identity of the stored session, if any."""
        try:
            session = await self.client.auth.get_session()
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError("Could not reach the authentication service.") from exc
        return _identity_from_session(session)

    def on_session_change(self, callback: SessionCallback) -> Subscription:
        """Forward Supabase auth state changes as session events."""

        def handle(event: str, session: object | None) -> None:
            callback(
                SessionEvent(kind=str(event), identity=_identity_from_session(session))
            )

        try:
            return self.client.auth.on_auth_state_change(handle)
        except Exception as exc:
            raise SubscriptionError("Could not subscribe to session changes.") from exc

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """Sign in with email and password."""
        try:
            await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError("Could not reach the authentication service.") from exc

    async def sign_up(self, email: str, password: str) -> None:
        """Register an account; Supabase sends the confirmation email."""
        try:
            await self.client.auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError("Could not reach the authentication service.") from exc

    async def sign_out(self) -> None:
        """Revoke the session and clear it locally."""
        try:
            await self.client.auth.sign_out()
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise AuthError("Could not reach the authentication service.") from exc


def _identity_from_session(session: object | None) -> Identity | None:
    user = getattr(session, "user", None)
    if user is None:
        return None
    return Identity(id=UUID(str(user.id)), email=getattr(user, "email", None))
