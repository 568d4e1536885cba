"""Mini README: Location value object and injectable location providers.

Structure:
    * Location - immutable (pathname, search, hash) triple mirroring the
      browser's ``window.location`` components.
    * LocationProvider - abstract source of "the current location".
    * StaticLocationProvider - fixed location for tests and the CLI.
    * RequestLocationProvider - location derived from an incoming ASGI
      request, used for server-side gating.

Extraction and gating only ever read a ``Location``; they never touch a
global. Anything able to produce the three components (a browser payload, a
request, a literal URL) can feed the recovery logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, urlsplit


@dataclass(frozen=True, slots=True)
class Location:
    """Read-only view of a URL split the way browsers expose it."""

    pathname: str = "/"
    search: str = ""
    hash: str = ""

    @classmethod
    def from_url(cls, url: str) -> "Location":
        """Split an absolute or relative URL without decoding any component."""

        parts = urlsplit(url)
        return cls(
            pathname=parts.path or "/",
            search=f"?{parts.query}" if parts.query else "",
            hash=f"#{parts.fragment}" if parts.fragment else "",
        )

    @classmethod
    def from_components(cls, pathname: str = "/", search: str = "", hash: str = "") -> "Location":
        """Normalise loosely supplied components (e.g. a browser JSON payload)."""

        if search and not search.startswith("?"):
            search = f"?{search}"
        if hash and not hash.startswith("#"):
            hash = f"#{hash}"
        return cls(pathname=pathname or "/", search=search, hash=hash)

    def to_url(self) -> str:
        """Return the relative URL (path, query and fragment) verbatim."""

        return f"{self.pathname}{self.search}{self.hash}"


class LocationProvider(ABC):
    """Source of the location the recovery gate should evaluate."""

    @abstractmethod
    def current(self) -> Location:
        """Return the location as it is right now."""


class StaticLocationProvider(LocationProvider):
    """Provider that always answers with the location it was built with."""

    def __init__(self, location: Location) -> None:
        self._location = location

    @classmethod
    def from_url(cls, url: str) -> "StaticLocationProvider":
        return cls(Location.from_url(url))

    def current(self) -> Location:
        return self._location


class RequestLocationProvider(LocationProvider):
    """Derive the location from an ASGI scope (or a Starlette ``Request``).

    Servers never receive the fragment, so ``hash`` is always empty here.
    The raw, still percent-encoded path is preferred so an encoded ``%3F``
    survives until the extractor decodes it.
    """

    def __init__(self, scope: Mapping[str, Any]) -> None:
        self._scope = scope

    @classmethod
    def from_request(cls, request: Any) -> "RequestLocationProvider":
        return cls(request.scope)

    def current(self) -> Location:
        raw_path = self._scope.get("raw_path")
        if raw_path:
            pathname = raw_path.decode("latin-1").split("?", 1)[0]
        else:
            pathname = quote(self._scope.get("path", "/"), safe="/%")
        query = self._scope.get("query_string", b"").decode("latin-1")
        return Location(pathname=pathname or "/", search=f"?{query}" if query else "")
