"""Mini README: In-memory user directory with bcrypt password hashes.

Structure:
    * UserAccount - dataclass holding profile data and the password hash.
    * UserDirectory - registers users, looks them up by e-mail, and updates
      passwords.

The hosted auth platform owns real accounts; this directory gives the reset
and login-event services something concrete to act on in development and
tests. E-mail lookups are case-insensitive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import bcrypt

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


def _normalise_email(email: str) -> str:
    return email.strip().lower()


@dataclass(slots=True)
class UserAccount:
    """Represent a user able to sign in."""

    user_id: str
    name: str
    email: str
    password_hash: bytes

    def check_password(self, password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password_hash)
        except ValueError:
            return False


class UserDirectory:
    """Manage user accounts keyed by identifier."""

    def __init__(
        self, accounts: Optional[Iterable[UserAccount]] = None, *, hash_rounds: int = 12
    ) -> None:
        self._accounts: Dict[str, UserAccount] = {}
        self._sequence = 0
        self._hash_rounds = hash_rounds
        for account in accounts or ():
            self._register(account)
        LOGGER.debug("User directory initialised with %s accounts", len(self._accounts))

    def hash_password(self, password: str) -> bytes:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._hash_rounds))

    def _next_id(self) -> str:
        self._sequence += 1
        return f"user_{self._sequence:04d}"

    def _register(self, account: UserAccount) -> None:
        if account.user_id in self._accounts:
            raise ValueError(f"User {account.user_id} already exists.")
        if self.find_by_email(account.email) is not None:
            raise ValueError(f"E-mail {account.email} is already registered.")
        self._accounts[account.user_id] = account

    def add_user(self, name: str, email: str, password: str) -> UserAccount:
        """Create an account, hashing ``password`` with bcrypt."""

        if not email or "@" not in email:
            raise ValueError(f"Invalid e-mail address: {email!r}")
        account = UserAccount(
            user_id=self._next_id(),
            name=name,
            email=_normalise_email(email),
            password_hash=self.hash_password(password),
        )
        self._register(account)
        LOGGER.info("Registered user %s", account.user_id)
        return account

    def get(self, user_id: str) -> UserAccount:
        if user_id not in self._accounts:
            raise KeyError(f"User {user_id} not found")
        return self._accounts[user_id]

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        wanted = _normalise_email(email)
        for account in self._accounts.values():
            if account.email == wanted:
                return account
        return None

    def set_password(self, user_id: str, password: str) -> UserAccount:
        """Replace the password hash of an existing account."""

        account = self.get(user_id)
        account.password_hash = self.hash_password(password)
        LOGGER.info("Password updated for user %s", user_id)
        return account

    def verify_credentials(self, email: str, password: str) -> Optional[UserAccount]:
        """Return the account when ``password`` matches, otherwise ``None``."""

        account = self.find_by_email(email)
        if account is None or not account.check_password(password):
            return None
        return account
