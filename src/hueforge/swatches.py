"""Swatches and palettes.

A swatch is a named color. Palettes are written in scheme files as::

    [palette]
    black = "#000"
    "Rosé" = { hex = "#e0b0b0", ascii = "rose" }

Colors are normalized to lowercase ``#rrggbb`` (or ``#rrggbbaa`` when an
alpha channel is given).
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from hueforge.errors import CollidingAsciiNames, CollidingNameCases, InvalidColor, SwatchError
from hueforge.names import parse_name_pair

__all__ = ["Swatch", "Palette", "normalize_hex", "parse_swatch", "parse_palette"]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def normalize_hex(value: str, swatch: str = "?") -> str:
    """Return ``value`` as lowercase ``#rrggbb``/``#rrggbbaa``.

    Short ``#rgb``/``#rgba`` forms are expanded; the leading ``#`` is optional.

    Raises:
        InvalidColor: If ``value`` is not a 3, 4, 6 or 8 digit hex color.
    """

    m = _HEX_RE.match(value.strip())
    if not m:
        raise InvalidColor(swatch, value)
    digits = m.group(1).lower()
    if len(digits) in (3, 4):
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


@dataclass(slots=True, frozen=True)
class Swatch:
    """A named color in a scheme's palette.

    Attributes:
        name: Validated display name (NFC, may contain Unicode letters).
        ascii: ASCII twin of ``name`` used where only ASCII is allowed.
        color: Normalized hex color.
    """

    name: str
    ascii: str
    color: str

    @property
    def hex(self) -> str:
        return self.color

    @property
    def rgb(self) -> tuple[int, int, int]:
        digits = self.color[1:7]
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "color": self.color, "ascii": self.ascii}


def parse_swatch(key: str, value: Any) -> Swatch:
    """Build a :class:`Swatch` from one ``[palette]`` entry.

    Args:
        key: Display name as written in the palette table.
        value: Either a hex string or a ``{hex, ascii}`` table.

    Raises:
        SwatchError: If the value has the wrong shape or an invalid color.
        InvalidName: If the name or ASCII override fails validation.
    """

    if isinstance(value, str):
        name, ascii_name = parse_name_pair(key, None, "swatch")
        return Swatch(name=name, ascii=ascii_name, color=normalize_hex(value, key))
    if isinstance(value, Mapping):
        raw_hex = value.get("hex")
        if not isinstance(raw_hex, str):
            raise SwatchError(
                f"invalid structure for swatch `{key}`: swatch table missing `hex` field "
                "(add or make swatch value a string)"
            )
        raw_ascii = value.get("ascii")
        if raw_ascii is not None and not isinstance(raw_ascii, str):
            raise SwatchError(f"invalid structure for swatch `{key}`: `ascii` must be a string")
        name, ascii_name = parse_name_pair(key, raw_ascii, "swatch")
        return Swatch(name=name, ascii=ascii_name, color=normalize_hex(raw_hex, key))
    raise SwatchError(f"invalid structure for swatch `{key}`: must be hex string or `{{ hex, ascii }}` table")


class Palette:
    """Ordered, name-keyed collection of swatches.

    Iteration follows the order swatches were declared in the scheme file.
    """

    __slots__ = ("_swatches",)

    def __init__(self, swatches: Iterable[Swatch] = ()) -> None:
        self._swatches: dict[str, Swatch] = {}
        for swatch in swatches:
            self._swatches[swatch.name] = swatch

    def __iter__(self) -> Iterator[Swatch]:
        return iter(self._swatches.values())

    def __len__(self) -> int:
        return len(self._swatches)

    def __contains__(self, name: object) -> bool:
        return name in self._swatches

    def __repr__(self) -> str:
        return f"Palette({list(self._swatches)!r})"

    def get(self, name: str) -> Swatch | None:
        return self._swatches.get(name)

    def names(self) -> list[str]:
        return list(self._swatches)

    def check_collisions(self) -> None:
        """Reject swatches whose names collide case-insensitively or in ASCII.

        Raises:
            CollidingAsciiNames: Two swatches share an ASCII name.
            CollidingNameCases: Two swatch names differ only in case.
        """

        by_ascii: dict[str, list[str]] = {}
        for swatch in self:
            by_ascii.setdefault(swatch.ascii, []).append(swatch.name)
        for ascii_name, names in by_ascii.items():
            if len(names) > 1:
                raise CollidingAsciiNames(ascii_name, names)

        by_lower: dict[str, list[str]] = {}
        for swatch in self:
            by_lower.setdefault(swatch.name.lower(), []).append(swatch.name)
        for names in by_lower.values():
            if len(names) > 1:
                raise CollidingNameCases(names)

    def to_list(self) -> list[dict[str, str]]:
        return [s.to_dict() for s in self]


def parse_palette(table: Mapping[str, Any]) -> Palette:
    """Parse a ``[palette]`` table and validate name collisions."""
    palette = Palette(parse_swatch(key, value) for key, value in table.items())
    if len(palette) != len(table):
        # two raw keys normalized (NFC) to the same display name
        seen: dict[str, list[str]] = {}
        for key in table:
            seen.setdefault(unicodedata.normalize("NFC", key), []).append(key)
        dupes = next(keys for keys in seen.values() if len(keys) > 1)
        raise SwatchError(f"swatches {', '.join(f'`{k}`' for k in dupes)} normalize to the same name")
    palette.check_collisions()
    return palette
