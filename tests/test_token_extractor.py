"""Mini README: Tests for reset token extraction.

Structure:
    * query, hash and encoded-path strategies each resolve their URL shape.
    * strategies run in order and the first hit wins.
    * path capture stops at the first non-alphanumeric character.
    * malformed percent-encoding is treated as "no token".
"""

from __future__ import annotations

import pytest

from kpir_portal.recovery import Location, TokenSource, extract_reset_token, match_reset_token


def test_query_string_token() -> None:
    assert extract_reset_token(Location.from_url("https://finance.example/?token=ABC123")) == "ABC123"


@pytest.mark.parametrize(
    "fragment, expected",
    [
        ("#/?token=XYZ789", "XYZ789"),
        ("#?token=XYZ789", "XYZ789"),
        ("#token=FOO", "FOO"),
        ("#/reset?x=1", None),
    ],
)
def test_hash_fragment_token(fragment: str, expected: str) -> None:
    assert extract_reset_token(Location(pathname="/", hash=fragment)) == expected


def test_encoded_pathname_token() -> None:
    found = match_reset_token(Location(pathname="/%3Ftoken=BAR42"))

    assert found is not None
    assert found.token == "BAR42"
    assert found.source is TokenSource.ENCODED_PATH


def test_encoded_pathname_truncates_at_hyphen() -> None:
    """Only the alphanumeric prefix is captured from a path-encoded token."""

    assert extract_reset_token(Location(pathname="/%3Ftoken=ABC-123")) == "ABC"


def test_encoded_pathname_accepts_ampersand_prefix() -> None:
    assert extract_reset_token(Location(pathname="/%3Flang%3Dpl%26token%3DQ1W2")) == "Q1W2"


def test_pathname_without_separator_is_ignored() -> None:
    assert extract_reset_token(Location(pathname="/token=ABC")) is None


def test_query_wins_over_hash_and_path() -> None:
    location = Location(pathname="/%3Ftoken=PATH1", search="?token=QUERY1", hash="#token=HASH1")

    found = match_reset_token(location)
    assert found is not None
    assert (found.token, found.source) == ("QUERY1", TokenSource.QUERY)


def test_blank_query_token_falls_through_to_hash() -> None:
    location = Location(pathname="/", search="?token=", hash="#/?token=HASH2")

    assert extract_reset_token(location) == "HASH2"


def test_access_token_fragment_is_not_a_reset_token() -> None:
    location = Location(pathname="/", hash="#access_token=t1&refresh_token=t2&type=recovery")

    assert extract_reset_token(location) is None


@pytest.mark.parametrize("pathname", ["/%E0%A4%A%3Ftoken=ABC", "/%FF%3Ftoken=ABC"])
def test_malformed_path_encoding_means_no_token(pathname: str) -> None:
    assert extract_reset_token(Location(pathname=pathname)) is None


def test_no_token_anywhere() -> None:
    assert extract_reset_token(Location.from_url("/dashboard?tab=budget#summary")) is None
