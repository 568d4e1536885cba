"""Mini README: Outgoing e-mail abstraction and the reset message builder.

Structure:
    * EmailMessage - dataclass describing one message.
    * Mailer - abstract delivery interface.
    * OutboxMailer - in-memory mailer that records and logs messages.
    * build_password_reset_email - render the reset e-mail from templates.

Real SMTP delivery lives outside this service. The outbox keeps the rest of
the flow testable and lets operators inspect what would have been sent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

SYSTEM_NAME = "KPiR Finance System"

_TEMPLATES = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
    keep_trailing_newline=True,
)


@dataclass(slots=True)
class EmailMessage:
    """Single e-mail ready for delivery."""

    to: str
    subject: str
    html: str
    text: str


class Mailer(ABC):
    """Delivery interface used by services that notify users."""

    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        """Deliver ``message`` or raise when delivery is impossible."""


class OutboxMailer(Mailer):
    """Mailer that keeps every message in memory."""

    def __init__(self) -> None:
        self._outbox: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        if not message.to:
            raise ValueError("E-mail recipient is required")
        self._outbox.append(message)
        LOGGER.info("Queued e-mail '%s' for %s", message.subject, message.to)

    @property
    def outbox(self) -> List[EmailMessage]:
        return list(self._outbox)


def build_password_reset_email(
    recipient: str, user_name: str, reset_url: str, ttl_minutes: int
) -> EmailMessage:
    """Render the HTML and plain-text bodies of a password reset e-mail."""

    context = {
        "system_name": SYSTEM_NAME,
        "user_name": user_name,
        "reset_url": reset_url,
        "ttl_minutes": ttl_minutes,
    }
    return EmailMessage(
        to=recipient,
        subject=f"Password reset - {SYSTEM_NAME}",
        html=_TEMPLATES.get_template("password_reset.html").render(**context),
        text=_TEMPLATES.get_template("password_reset.txt").render(**context),
    )
