"""Mini README: Tests for the recovery route gate and location providers.

Structure:
    * recovery fragments on other pages redirect once, search/hash verbatim.
    * the canonical reset path never redirects, however often it is checked.
    * the fragment's ``type`` takes precedence over the query's.
    * path-encoded tokens move into the query of the target.
    * wrapped content always renders.
"""

from __future__ import annotations

from typing import List, Tuple

from kpir_portal.recovery import (
    Location,
    NavigationIntent,
    RecoveryPayload,
    RecoveryRouteGate,
    RequestLocationProvider,
    StaticLocationProvider,
    detect_recovery_payload,
    extract_reset_token,
)

RECOVERY_HASH = "#access_token=t1&refresh_token=t2&type=recovery"


class RecordingNavigator:
    def __init__(self) -> None:
        self.calls: List[Tuple[NavigationIntent, bool]] = []

    def __call__(self, target: NavigationIntent, *, replace: bool) -> None:
        self.calls.append((target, replace))


def test_recovery_fragment_redirects_once_preserving_search_and_hash() -> None:
    navigator = RecordingNavigator()
    gate = RecoveryRouteGate(navigator)

    gate.on_location_change(Location(pathname="/dashboard", search="?lang=pl", hash=RECOVERY_HASH))

    assert navigator.calls == [
        (NavigationIntent(pathname="/reset-password", search="?lang=pl", hash=RECOVERY_HASH), True)
    ]


def test_reset_path_never_redirects() -> None:
    navigator = RecordingNavigator()
    gate = RecoveryRouteGate(navigator)

    gate.on_location_change(Location(pathname="/reset-password", search="?token=ABC123"))
    gate.on_location_change(Location(pathname="/reset-password", hash=RECOVERY_HASH))

    assert navigator.calls == []


def test_rerunning_on_redirected_location_is_a_no_op() -> None:
    navigator = RecordingNavigator()
    gate = RecoveryRouteGate(navigator)

    intent = gate.on_location_change(Location(pathname="/", search="?token=ABC123"))
    assert intent is not None
    landed = Location(pathname=intent.pathname, search=intent.search, hash=intent.hash)
    gate.on_location_change(landed)
    gate.on_location_change(landed)

    assert len(navigator.calls) == 1


def test_query_type_marker_alone_redirects() -> None:
    gate = RecoveryRouteGate(RecordingNavigator())

    intent = gate.evaluate(Location(pathname="/", search="?type=recovery"))

    assert intent == NavigationIntent(pathname="/reset-password", search="?type=recovery")


def test_hash_type_takes_precedence_over_query() -> None:
    location = Location(pathname="/", search="?type=recovery", hash="#type=signup")

    assert detect_recovery_payload(location) is None


def test_payload_carries_token_and_type() -> None:
    payload = detect_recovery_payload(Location(pathname="/", search="?token=T1&type=recovery"))

    assert isinstance(payload, RecoveryPayload)
    assert (payload.token, payload.type) == ("T1", "recovery")


def test_non_recovery_location_is_inert() -> None:
    navigator = RecordingNavigator()
    gate = RecoveryRouteGate(navigator)

    assert gate.on_location_change(Location(pathname="/kpir", search="?type=signup")) is None
    assert navigator.calls == []


def test_encoded_path_token_is_moved_into_query() -> None:
    gate = RecoveryRouteGate(RecordingNavigator())

    intent = gate.evaluate(Location(pathname="/%3Ftoken=BAR42"))
    assert intent is not None
    assert intent.to_url() == "/reset-password?token=BAR42"

    with_query = gate.evaluate(Location(pathname="/%3Ftoken=BAR42", search="?lang=pl"))
    assert with_query is not None
    assert with_query.search == "?lang=pl&token=BAR42"


def test_encoded_path_token_fills_blank_query_token() -> None:
    gate = RecoveryRouteGate(RecordingNavigator())

    intent = gate.evaluate(Location(pathname="/%3Ftoken=BAR42", search="?token=&x=1"))

    assert intent is not None
    assert intent.search == "?token=BAR42&x=1"
    landed = Location(pathname=intent.pathname, search=intent.search)
    assert extract_reset_token(landed) == "BAR42"


def test_custom_reset_path() -> None:
    gate = RecoveryRouteGate(RecordingNavigator(), reset_path="/auth/reset")

    intent = gate.evaluate(Location(pathname="/", search="?token=ABC"))

    assert intent is not None
    assert intent.pathname == "/auth/reset"


def test_wrap_renders_children_with_and_without_payload() -> None:
    navigator = RecordingNavigator()
    gate = RecoveryRouteGate(navigator)
    rendered: List[str] = []

    def render() -> str:
        rendered.append("page")
        return "page"

    assert gate.wrap(StaticLocationProvider.from_url("/dashboard"), render) == "page"
    assert gate.wrap(StaticLocationProvider.from_url("/dashboard" + RECOVERY_HASH), render) == "page"
    assert rendered == ["page", "page"]
    assert len(navigator.calls) == 1


def test_request_provider_keeps_raw_encoded_path() -> None:
    scope = {
        "type": "http",
        "path": "/?token=BAR42",
        "raw_path": b"/%3Ftoken=BAR42",
        "query_string": b"lang=pl",
    }

    location = RequestLocationProvider(scope).current()

    assert location == Location(pathname="/%3Ftoken=BAR42", search="?lang=pl", hash="")


def test_location_from_components_adds_prefixes() -> None:
    location = Location.from_components("/x", "a=1", "type=recovery")

    assert location.to_url() == "/x?a=1#type=recovery"
