"""Mini README: Route gate steering recovery links to the reset page.

Structure:
    * RecoveryPayload - token and/or type marker found in a location.
    * NavigationIntent - target location handed to the router.
    * Navigator - callable contract of the routing layer.
    * detect_recovery_payload - pure detection over a ``Location``.
    * RecoveryRouteGate - runs detection on each location change and issues
      at most one history-replacing navigation to the canonical reset path.

Recovery e-mails frequently land on ``/`` (or a deep link the host cannot
serve). The gate moves such visits onto the reset route while carrying the
query string and fragment across byte for byte, so the reset page can read
the token (or the ``access_token``/``type=recovery`` fragment) itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, TypeVar

from ..logging_utils import get_logger, mask_secret
from .extractor import TokenSource, match_reset_token, query_param
from .location import Location, LocationProvider

LOGGER = get_logger(__name__)

RECOVERY_TYPE = "recovery"
DEFAULT_RESET_PATH = "/reset-password"

T = TypeVar("T")

_BLANK_TOKEN_ENTRY = re.compile(r"(?<=[?&])token=?(?=&|$)")


@dataclass(frozen=True, slots=True)
class RecoveryPayload:
    """Transient result of scanning a single location."""

    token: Optional[str] = None
    type: Optional[str] = None
    source: Optional[TokenSource] = None


@dataclass(frozen=True, slots=True)
class NavigationIntent:
    """Where the router should go; search and hash are copied verbatim."""

    pathname: str
    search: str = ""
    hash: str = ""

    def to_url(self) -> str:
        return f"{self.pathname}{self.search}{self.hash}"

    def as_dict(self) -> Dict[str, str]:
        return {"pathname": self.pathname, "search": self.search, "hash": self.hash}


class Navigator(Protocol):
    def __call__(self, target: NavigationIntent, *, replace: bool) -> None:
        ...


def _recovery_type(location: Location) -> Optional[str]:
    """Return the ``type`` marker, preferring the fragment over the query."""

    hash_type = query_param(location.hash.removeprefix("#"), "type", keep_blank=True)
    if hash_type is not None:
        return hash_type
    return query_param(location.search, "type", keep_blank=True)


def detect_recovery_payload(location: Location) -> Optional[RecoveryPayload]:
    """Return the recovery payload carried by ``location``, if any."""

    found = match_reset_token(location)
    marker = _recovery_type(location)
    if found is None and marker != RECOVERY_TYPE:
        return None
    if found is None:
        return RecoveryPayload(type=marker)
    return RecoveryPayload(token=found.token, type=marker, source=found.source)


def _carry_search(search: str, payload: RecoveryPayload) -> str:
    """Keep ``search`` verbatim; a token only present in the path is moved in.

    The path itself is replaced by the redirect, so a path-encoded token has
    to move into the query for the reset page to find it again. A blank
    ``token`` entry is filled in place, otherwise it would shadow the new one.
    """

    if payload.source is not TokenSource.ENCODED_PATH or payload.token is None:
        return search
    filled, replaced = _BLANK_TOKEN_ENTRY.subn(f"token={payload.token}", search, count=1)
    if replaced:
        return filled
    separator = "&" if search not in ("", "?") else ""
    prefix = search if search else "?"
    return f"{prefix}{separator}token={payload.token}"


class RecoveryRouteGate:
    """Transparent wrapper that redirects recovery links to the reset route."""

    def __init__(self, navigate: Navigator, reset_path: str = DEFAULT_RESET_PATH) -> None:
        self._navigate = navigate
        self.reset_path = reset_path

    def evaluate(self, location: Location) -> Optional[NavigationIntent]:
        """Return the navigation the gate would issue for ``location``."""

        if location.pathname == self.reset_path:
            return None
        payload = detect_recovery_payload(location)
        if payload is None:
            return None
        LOGGER.debug(
            "Recovery payload on %s (token=%s, type=%s)",
            location.pathname,
            mask_secret(payload.token),
            payload.type,
        )
        return NavigationIntent(
            pathname=self.reset_path,
            search=_carry_search(location.search, payload),
            hash=location.hash,
        )

    def on_location_change(self, location: Location) -> Optional[NavigationIntent]:
        """Evaluate ``location`` and, when needed, replace the current entry."""

        intent = self.evaluate(location)
        if intent is None:
            return None
        LOGGER.info("Redirecting recovery link from %s to %s", location.pathname, intent.pathname)
        self._navigate(intent, replace=True)
        return intent

    def observe(self, provider: LocationProvider) -> Optional[NavigationIntent]:
        """Run the gate against whatever ``provider`` reports as current."""

        return self.on_location_change(provider.current())

    def wrap(self, provider: LocationProvider, render: Callable[[], T]) -> T:
        """Run the gate, then render the wrapped content unconditionally."""

        self.observe(provider)
        return render()
