"""Mini README: Account-security services behind the recovery flow.

Exposes the user directory, password reset token service, and the login
event journal used for failed-login lockouts. All stores are in memory and
owned by whichever application instance creates them.
"""

from .errors import PasswordPolicyError, PortalError, ResetTokenError
from .login_events import LockoutStatus, LoginEvent, LoginEventLog
from .reset_tokens import PasswordResetService, PasswordResetToken
from .users import UserAccount, UserDirectory

__all__ = [
    "LockoutStatus",
    "LoginEvent",
    "LoginEventLog",
    "PasswordPolicyError",
    "PasswordResetService",
    "PasswordResetToken",
    "PortalError",
    "ResetTokenError",
    "UserAccount",
    "UserDirectory",
]
