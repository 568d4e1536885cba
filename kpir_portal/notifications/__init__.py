"""Mini README: Notification helpers (currently e-mail only)."""

from .mailer import EmailMessage, Mailer, OutboxMailer, build_password_reset_email

__all__ = ["EmailMessage", "Mailer", "OutboxMailer", "build_password_reset_email"]
