from __future__ import annotations

import unicodedata

import pytest

from hueforge.errors import InvalidName
from hueforge.names import (
    MAX_NAME_LENGTH,
    normalize_and_validate,
    parse_name_pair,
    to_ascii,
    transliterate,
    validate_ascii,
)


def test_normalize_returns_nfc() -> None:
    decomposed = unicodedata.normalize("NFD", "Rosé")
    assert normalize_and_validate(decomposed, "scheme") == "Rosé"


@pytest.mark.parametrize("name", ["", "a b", "a/b", "a.b", "x" * (MAX_NAME_LENGTH + 1), "con", "LPT1"])
def test_normalize_rejects(name: str) -> None:
    with pytest.raises(InvalidName):
        normalize_and_validate(name, "scheme")


def test_error_message_names_context() -> None:
    with pytest.raises(InvalidName, match="invalid swatch name `a b`"):
        normalize_and_validate("a b", "swatch")


def test_transliterate_strips_accents() -> None:
    assert transliterate("Zoë Ångström") == "Zoe Angstrom"


@pytest.mark.parametrize(
    ("display", "expected"),
    [
        ("Rosé", "Rose"),
        ("rosé-pine", "rose-pine"),
        ("night_owl", "night_owl"),
        ("Crème Brûlée", "Creme-Brulee"),
        ("a→b", "a_b"),
        ("ﬁre", "fire"),
    ],
)
def test_to_ascii(display: str, expected: str) -> None:
    assert to_ascii(display, "scheme") == expected


def test_to_ascii_empty_result() -> None:
    with pytest.raises(InvalidName) as exc:
        to_ascii("日本", "scheme")
    assert exc.value.ascii_name == ""
    assert "generated ascii fallback" in str(exc.value)


def test_validate_ascii_rejects_non_ascii() -> None:
    with pytest.raises(InvalidName, match="non-ascii"):
        validate_ascii("rosé", "swatch")


def test_parse_name_pair() -> None:
    assert parse_name_pair("Rosé", None, "swatch") == ("Rosé", "Rose")
    assert parse_name_pair("Rosé", "rose", "swatch") == ("Rosé", "rose")
