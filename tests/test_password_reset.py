"""Mini README: Tests for password reset token issue and verification.

Structure:
    * issuing e-mails a root-level ``?token=`` link and replaces older tokens.
    * unknown e-mails are accepted without sending anything.
    * tokens are single use, expire, and enforce the password policy.
"""

from __future__ import annotations

import re

import pytest

from kpir_portal.auth import (
    PasswordPolicyError,
    PasswordResetService,
    ResetTokenError,
    UserDirectory,
)
from kpir_portal.notifications import OutboxMailer
from kpir_portal.recovery import Location, extract_reset_token


def _service(users: UserDirectory, mailer: OutboxMailer, clock) -> PasswordResetService:
    return PasswordResetService(
        users,
        mailer,
        app_base_url="https://finance.example/",
        ttl_minutes=60,
        min_password_length=8,
        clock=clock,
    )


def test_request_reset_sends_link_the_extractor_understands(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)

    record = service.request_reset("Anna@Example.com")

    assert record is not None
    assert re.fullmatch(r"[0-9a-f]{64}", record.token)
    [message] = mailer.outbox
    assert message.to == "anna@example.com"
    link = f"https://finance.example/?token={record.token}"
    assert link in message.text
    assert link in message.html
    assert "Anna Kowalska" in message.text
    assert extract_reset_token(Location.from_url(link)) == record.token


def test_new_request_invalidates_previous_token(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)
    first = service.request_reset("anna@example.com")
    second = service.request_reset("anna@example.com")

    assert first is not None and second is not None
    with pytest.raises(ResetTokenError):
        service.lookup(first.token)
    assert service.lookup(second.token).user_id == second.user_id


def test_unknown_email_is_silent(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)

    assert service.request_reset("nobody@example.com") is None
    assert mailer.outbox == []


def test_missing_email_is_rejected(users, mailer, clock) -> None:
    with pytest.raises(ValueError):
        _service(users, mailer, clock).request_reset("  ")


def test_verify_reset_changes_password_once(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)
    record = service.request_reset("anna@example.com")
    assert record is not None

    service.verify_reset(record.token, "brand-new-pass")

    assert users.verify_credentials("anna@example.com", "brand-new-pass") is not None
    assert users.verify_credentials("anna@example.com", "initial-pass") is None
    with pytest.raises(ResetTokenError, match="already been used"):
        service.verify_reset(record.token, "another-pass")


def test_expired_token_is_rejected(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)
    record = service.request_reset("anna@example.com")
    assert record is not None

    clock.advance(minutes=61)

    with pytest.raises(ResetTokenError, match="expired"):
        service.verify_reset(record.token, "brand-new-pass")


def test_short_password_is_rejected_before_token_use(users, mailer, clock) -> None:
    service = _service(users, mailer, clock)
    record = service.request_reset("anna@example.com")
    assert record is not None

    with pytest.raises(PasswordPolicyError):
        service.verify_reset(record.token, "short")
    assert service.lookup(record.token).used_at is None


def test_unknown_token_is_rejected(users, mailer, clock) -> None:
    with pytest.raises(ResetTokenError, match="Invalid"):
        _service(users, mailer, clock).verify_reset("deadbeef", "brand-new-pass")


def test_duplicate_email_registration_is_rejected(users) -> None:
    with pytest.raises(ValueError):
        users.add_user("Someone Else", "ANNA@example.com", "whatever-pass")
