"""Mini README: Login attempt journal and failed-login lockout check.

Structure:
    * LoginEvent - one recorded sign-in attempt.
    * LockoutStatus - result of comparing recent failures to a threshold.
    * LoginEventLog - records events, counts failures, evaluates lockouts.

Failures are counted by user id when one is known, otherwise by e-mail,
because failed attempts against a mistyped address never resolve to a user.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..logging_utils import get_logger
from .reset_tokens import Clock, utcnow

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class LoginEvent:
    """A single sign-in attempt with client details."""

    event_id: str
    email: str
    success: bool
    created_at: datetime
    user_id: Optional[str] = None
    error_message: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "event_id": self.event_id,
            "email": self.email,
            "success": self.success,
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
            "error_message": self.error_message,
            "ip": self.ip,
            "user_agent": self.user_agent,
        }


@dataclass(frozen=True, slots=True)
class LockoutStatus:
    locked: bool
    count: int
    threshold: int


class LoginEventLog:
    """Append-only, in-memory login journal."""

    def __init__(self, *, clock: Clock = utcnow) -> None:
        self._events: List[LoginEvent] = []
        self._clock = clock

    def record(
        self,
        email: str,
        *,
        success: bool = False,
        user_id: Optional[str] = None,
        error_message: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LoginEvent:
        """Append an attempt to the journal."""

        if not email or not email.strip():
            raise ValueError("Missing email")
        event = LoginEvent(
            event_id=f"login_{len(self._events) + 1:06d}",
            email=email.strip().lower(),
            success=bool(success),
            created_at=self._clock(),
            user_id=user_id or None,
            error_message=error_message or None,
            ip=ip,
            user_agent=user_agent,
        )
        self._events.append(event)
        LOGGER.info(
            "Login %s for %s from %s",
            "succeeded" if event.success else "failed",
            event.user_id or event.email,
            ip or "unknown address",
        )
        return event

    def list_events(self, limit: Optional[int] = None) -> List[LoginEvent]:
        """Return events newest first."""

        ordered = sorted(self._events, key=lambda event: event.event_id, reverse=True)
        return ordered if limit is None else ordered[:limit]

    def count_failed(
        self,
        since: datetime,
        *,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> int:
        """Count failed attempts at or after ``since`` for a user or e-mail."""

        if not user_id and not email:
            raise ValueError("Missing user_id/email")
        wanted_email = email.strip().lower() if email else None
        count = 0
        for event in self._events:
            if event.success or event.created_at < since:
                continue
            if user_id:
                if event.user_id == user_id:
                    count += 1
            elif event.email == wanted_email:
                count += 1
        LOGGER.debug("Failed login count for %s: %s", user_id or wanted_email, count)
        return count

    def lockout_status(
        self,
        *,
        window_minutes: int,
        threshold: int,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> LockoutStatus:
        """Report whether recent failures reached ``threshold``."""

        since = self._clock() - timedelta(minutes=window_minutes)
        count = self.count_failed(since, user_id=user_id, email=email)
        locked = count >= threshold
        if locked:
            LOGGER.warning("Sign-in locked for %s after %s failures", user_id or email, count)
        return LockoutStatus(locked=locked, count=count, threshold=threshold)
