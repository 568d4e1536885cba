"""Mini README: Exceptions raised by the account-security services.

The web layer converts these into HTTP responses; plain ``ValueError`` is
still used for malformed input, matching the rest of the package.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for expected, user-facing failures."""


class ResetTokenError(PortalError):
    """A reset token is unknown, already used, or expired."""


class PasswordPolicyError(PortalError):
    """A new password does not satisfy the configured policy."""
