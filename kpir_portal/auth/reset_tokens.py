"""Mini README: Single-use password reset tokens.

Structure:
    * PasswordResetToken - stored token with expiry and usage timestamp.
    * PasswordResetService - issues tokens, e-mails reset links, and
      completes resets.

Issuing a token deletes any earlier token of the same user. Links point at
``<app_base_url>/?token=<token>`` because static hosts cannot serve deep
links; the recovery gate moves the visitor to the reset page from there.
Unknown e-mail addresses are accepted silently so the endpoint cannot be
used to probe which accounts exist.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from ..logging_utils import get_logger, mask_secret
from ..notifications import Mailer, build_password_reset_email
from .errors import PasswordPolicyError, ResetTokenError
from .users import UserAccount, UserDirectory

LOGGER = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_token() -> str:
    """Return 64 hexadecimal characters of cryptographic randomness."""

    return secrets.token_hex(32)


@dataclass(slots=True)
class PasswordResetToken:
    """Reset token bound to a single user."""

    token_id: str
    user_id: str
    token: str
    expires_at: datetime
    used_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now


class PasswordResetService:
    """Coordinate reset token issue and verification."""

    def __init__(
        self,
        users: UserDirectory,
        mailer: Mailer,
        *,
        app_base_url: str,
        ttl_minutes: int = 60,
        min_password_length: int = 8,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self._users = users
        self._mailer = mailer
        self._app_base_url = app_base_url.rstrip("/")
        self._ttl = timedelta(minutes=ttl_minutes)
        self._min_password_length = min_password_length
        self._clock = clock
        self._token_factory = token_factory
        self._tokens: Dict[str, PasswordResetToken] = {}
        self._sequence = 0

    def _next_id(self) -> str:
        self._sequence += 1
        return f"prt_{self._sequence:04d}"

    def reset_url(self, token: str) -> str:
        return f"{self._app_base_url}/?token={token}"

    def _invalidate_user_tokens(self, user_id: str) -> None:
        stale = [key for key, record in self._tokens.items() if record.user_id == user_id]
        for key in stale:
            del self._tokens[key]
        if stale:
            LOGGER.debug("Invalidated %s earlier reset tokens for %s", len(stale), user_id)

    def request_reset(self, email: str) -> Optional[PasswordResetToken]:
        """Issue a token for ``email`` and send the reset e-mail.

        Returns ``None`` when no account matches; callers must respond the
        same way in both cases.
        """

        if not email or not email.strip():
            raise ValueError("E-mail is required")
        account = self._users.find_by_email(email)
        if account is None:
            LOGGER.info("Password reset requested for unknown e-mail")
            return None

        self._invalidate_user_tokens(account.user_id)
        record = PasswordResetToken(
            token_id=self._next_id(),
            user_id=account.user_id,
            token=self._token_factory(),
            expires_at=self._clock() + self._ttl,
        )
        self._tokens[record.token] = record

        message = build_password_reset_email(
            account.email,
            account.name,
            self.reset_url(record.token),
            int(self._ttl.total_seconds() // 60),
        )
        self._mailer.send(message)
        LOGGER.info(
            "Password reset e-mail sent to user %s (token %s)",
            account.user_id,
            mask_secret(record.token),
        )
        return record

    def lookup(self, token: str) -> PasswordResetToken:
        """Return the usable record for ``token`` or raise ``ResetTokenError``."""

        record = self._tokens.get(token)
        if record is None:
            LOGGER.warning("Reset token %s not found", mask_secret(token))
            raise ResetTokenError("Invalid or expired password reset link")
        if record.used_at is not None:
            LOGGER.warning("Reset token %s already used", mask_secret(token))
            raise ResetTokenError("This password reset link has already been used")
        if record.is_expired(self._clock()):
            LOGGER.warning("Reset token %s expired", mask_secret(token))
            raise ResetTokenError("The password reset link has expired. Request a new one.")
        return record

    def verify_reset(self, token: str, new_password: str) -> UserAccount:
        """Consume ``token`` and set ``new_password`` for its owner."""

        if not token or not new_password:
            raise ValueError("Token and new password are required")
        if len(new_password) < self._min_password_length:
            raise PasswordPolicyError(
                f"Password must be at least {self._min_password_length} characters long"
            )

        record = self.lookup(token)
        account = self._users.set_password(record.user_id, new_password)
        record.used_at = self._clock()
        LOGGER.info("Password reset completed for user %s", record.user_id)
        return account
