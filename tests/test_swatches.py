from __future__ import annotations

import pytest

from hueforge.errors import CollidingAsciiNames, CollidingNameCases, InvalidColor, SwatchError
from hueforge.swatches import normalize_hex, parse_palette


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("#000000", "#000000"),
        ("#ABC", "#aabbcc"),
        ("fff", "#ffffff"),
        ("#1234", "#11223344"),
        ("#11223344", "#11223344"),
    ],
)
def test_normalize_hex(raw: str, expected: str) -> None:
    assert normalize_hex(raw) == expected


@pytest.mark.parametrize("raw", ["", "#12345", "#ggg", "red"])
def test_normalize_hex_invalid(raw: str) -> None:
    with pytest.raises(InvalidColor):
        normalize_hex(raw, "black")


def test_parse_palette_keeps_order_and_overrides() -> None:
    palette = parse_palette({"black": "#000", "Rosé": {"hex": "#e0b0b0", "ascii": "rose"}})
    assert palette.names() == ["black", "Rosé"]
    rose = palette.get("Rosé")
    assert rose is not None
    assert rose.ascii == "rose"
    assert rose.rgb == (0xE0, 0xB0, 0xB0)
    assert palette.get("black").hex == "#000000"  # type: ignore[union-attr]
    assert palette.to_list()[0] == {"name": "black", "color": "#000000", "ascii": "black"}


def test_case_collision() -> None:
    with pytest.raises(CollidingNameCases):
        parse_palette({"Red": "#f00", "red": "#f00"})


def test_ascii_collision() -> None:
    with pytest.raises(CollidingAsciiNames) as exc:
        parse_palette({"rosé": "#000", "rose": "#fff"})
    assert exc.value.ascii_name == "rose"


@pytest.mark.parametrize("value", [5, {"ascii": "x"}, {"hex": "#000", "ascii": 3}])
def test_invalid_structure(value: object) -> None:
    with pytest.raises(SwatchError, match="invalid structure"):
        parse_palette({"x": value})
