"""Mini README: Recovery-link detection and routing.

``location`` models the URL components and their providers, ``extractor``
finds reset tokens, and ``gate`` decides whether a visit must be moved onto
the canonical reset route. Everything here is synchronous and free of web
framework imports so it can run in tests, the CLI, or a request handler.
"""

from .extractor import TokenMatch, TokenSource, extract_reset_token, match_reset_token
from .gate import (
    NavigationIntent,
    RecoveryPayload,
    RecoveryRouteGate,
    detect_recovery_payload,
)
from .location import (
    Location,
    LocationProvider,
    RequestLocationProvider,
    StaticLocationProvider,
)

__all__ = [
    "Location",
    "LocationProvider",
    "NavigationIntent",
    "RecoveryPayload",
    "RecoveryRouteGate",
    "RequestLocationProvider",
    "StaticLocationProvider",
    "TokenMatch",
    "TokenSource",
    "detect_recovery_payload",
    "extract_reset_token",
    "match_reset_token",
]
