"""Mini README: Password-reset token extraction from a browser location.

Structure:
    * TokenSource - enum naming where a token was found.
    * TokenMatch - the token plus its source.
    * STRATEGIES - ordered matchers tried first-match-wins.
    * match_reset_token / extract_reset_token - public entry points.

Reset links reach the application in several shapes depending on the host:
a plain ``?token=`` query, a hash-routed ``#/?token=`` fragment, or a path in
which the whole query string was percent-encoded (``/%3Ftoken=...``). Each
shape has its own matcher so they can be tested in isolation. Matchers are
pure and treat malformed input as "no token".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, unquote

from ..logging_utils import get_logger
from .location import Location

LOGGER = get_logger(__name__)

# Capture is alphanumeric only: "ABC-123" in an encoded path yields "ABC".
_PATH_TOKEN_PATTERN = re.compile(r"[?&]token=([A-Za-z0-9]+)")
_HASH_ROUTE_PREFIX = re.compile(r"^#/?")
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class TokenSource(str, Enum):
    """Where in the location a reset token was discovered."""

    QUERY = "query"
    HASH = "hash"
    ENCODED_PATH = "encoded_path"


@dataclass(frozen=True, slots=True)
class TokenMatch:
    token: str
    source: TokenSource


def query_param(query: str, name: str, *, keep_blank: bool = False) -> Optional[str]:
    """Return the first value of ``name`` in a query string.

    Mirrors ``URLSearchParams.get``: a leading ``?`` is ignored and ``+``
    decodes to a space. Blank values count as missing unless ``keep_blank``.
    """

    if query.startswith("?"):
        query = query[1:]
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key == name:
            return value if keep_blank else (value or None)
    return None


def _decode_path_once(pathname: str) -> str:
    """Percent-decode ``pathname`` a single time, rejecting broken escapes."""

    if _MALFORMED_ESCAPE.search(pathname):
        raise ValueError(f"Malformed percent-encoding in path {pathname!r}")
    return unquote(pathname, errors="strict")


def _match_query(location: Location) -> Optional[str]:
    return query_param(location.search, "token")


def _match_hash(location: Location) -> Optional[str]:
    if not location.hash:
        return None
    content = _HASH_ROUTE_PREFIX.sub("", location.hash, count=1)
    if "token=" not in content:
        return None
    return query_param(content, "token")


def _match_encoded_path(location: Location) -> Optional[str]:
    decoded = _decode_path_once(location.pathname)
    found = _PATH_TOKEN_PATTERN.search(decoded)
    return found.group(1) if found else None


TokenMatcher = Callable[[Location], Optional[str]]

STRATEGIES: Sequence[Tuple[TokenSource, TokenMatcher]] = (
    (TokenSource.QUERY, _match_query),
    (TokenSource.HASH, _match_hash),
    (TokenSource.ENCODED_PATH, _match_encoded_path),
)


def match_reset_token(
    location: Location,
    strategies: Sequence[Tuple[TokenSource, TokenMatcher]] = STRATEGIES,
) -> Optional[TokenMatch]:
    """Run ``strategies`` in order and return the first token found."""

    for source, matcher in strategies:
        try:
            token = matcher(location)
        except ValueError as error:
            LOGGER.debug("Ignoring undecodable %s component: %s", source.value, error)
            continue
        if token:
            return TokenMatch(token=token, source=source)
    return None


def extract_reset_token(location: Location) -> Optional[str]:
    """Return the reset token carried by ``location`` or ``None``."""

    found = match_reset_token(location)
    return found.token if found else None
