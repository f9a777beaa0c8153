"""Sign-in and sign-up form handling."""

import logging
from dataclasses import dataclass
from enum import Enum

from eatin.domain.errors import AuthError
from eatin.domain.models import Notice
from eatin.services.session_store import AuthGateway

logger = logging.getLogger(__name__)

CONFIRMATION_SENT = "Check your email for the confirmation link!"


class AuthMode(Enum):
    """Which action the auth form performs."""

    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


@dataclass
class AuthFormController:
    """Submits credentials; the resulting session event drives navigation."""

    gateway: AuthGateway
    mode: AuthMode = AuthMode.SIGN_IN
    email: str = ""
    notice: Notice | None = None

    def toggle_mode(self) -> None:
        """Switch between sign-in and sign-up, clearing the form."""
        self.mode = (
            AuthMode.SIGN_UP if self.mode is AuthMode.SIGN_IN else AuthMode.SIGN_IN
        )
        self.email = ""
        self.notice = None

    async def submit(self, email: str, password: str) -> bool:
        """Sign in or sign up; show provider errors inline."""
        self.notice = None
        self.email = email.strip()
        if not self.email or not password:
            self.notice = Notice("Email and password are required.", is_error=True)
            return False
        try:
            if self.mode is AuthMode.SIGN_IN:
                await self.gateway.sign_in_with_password(self.email, password)
            else:
                await self.gateway.sign_up(self.email, password)
                self.notice = Notice(CONFIRMATION_SENT)
        except AuthError as exc:
            logger.warning(
                "Authentication failed",
                extra={"mode": self.mode.value, "reason": exc.message},
            )
            self.notice = Notice(exc.message or "An error occurred", is_error=True)
            return False
        return True
