"""Validation and ASCII transliteration of scheme and swatch names.

Names end up in file paths, so they are restricted to Unicode letters,
digits, ``-`` and ``_``, must not exceed :data:`MAX_NAME_LENGTH` characters
and must not be a reserved Windows device name. Every name has an ASCII
twin, either given explicitly or derived with :func:`to_ascii`.
"""

from __future__ import annotations

import unicodedata

from hueforge.errors import InvalidName

__all__ = [
    "MAX_NAME_LENGTH",
    "normalize_and_validate",
    "validate_ascii",
    "transliterate",
    "to_ascii",
    "parse_name_pair",
]

MAX_NAME_LENGTH = 255

WINDOWS_RESERVED = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)

# characters mapped to `-` by the ascii fallback; anything else becomes `_`
_DASH_SEPARATORS = frozenset(" /:,;|+")


def _is_reserved(name: str) -> bool:
    base = name.split(".", 1)[0]
    return base.upper() in WINDOWS_RESERVED


def _is_safe(c: str) -> bool:
    return c.isalnum() or c in "-_"


def normalize_and_validate(name: str, context: str) -> str:
    """Return the NFC-normalized ``name`` or raise :class:`InvalidName`.

    Args:
        name: Raw name as written by the author.
        context: What is being named (``"scheme"``, ``"swatch"``); used in
            error messages.

    Returns:
        The normalized name.

    Raises:
        InvalidName: If the name is empty, too long, reserved, or contains
            characters other than letters, digits, ``-`` and ``_``.
    """

    normalized = unicodedata.normalize("NFC", name)
    if not normalized:
        raise InvalidName(context, name, "empty")
    if not all(_is_safe(c) for c in normalized):
        raise InvalidName(
            context, name, "contains character that's not a unicode letter, number, `-` or `_`"
        )
    if len(normalized) > MAX_NAME_LENGTH:
        raise InvalidName(
            context, name, f"too long ({len(normalized)} characters; max is {MAX_NAME_LENGTH})"
        )
    if _is_reserved(normalized):
        raise InvalidName(context, name, "uses reserved windows name")
    return normalized


def validate_ascii(name: str, context: str) -> str:
    """Validate an explicitly provided ASCII name."""
    normalized = normalize_and_validate(name, f"{context} ascii")
    if not normalized.isascii():
        bad = "".join(sorted({c for c in normalized if not c.isascii()}))
        raise InvalidName(f"{context} ascii", name, f"contains non-ascii character(s) `{bad}`")
    return normalized


def transliterate(text: str) -> str:
    """Strip accents and compatibility forms, keeping other characters."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def to_ascii(display_name: str, context: str) -> str:
    """Derive an ASCII fallback for ``display_name``.

    Accents are stripped via NFKD decomposition; runs of separators collapse
    to a single ``-`` (for spaces and punctuation-like separators) or ``_``
    (for any other non-alphanumeric character), and leading/trailing
    separators are trimmed.

    Raises:
        InvalidName: If nothing usable remains, or the result is too long or
            reserved.
    """

    out: list[str] = []
    last_was_sep = False
    for c in transliterate(display_name):
        if c.isascii() and c.isalnum():
            out.append(c)
            last_was_sep = False
            continue
        if last_was_sep:
            continue
        last_was_sep = True
        if c in "-_":
            out.append(c)
        elif c in _DASH_SEPARATORS:
            out.append("-")
        else:
            out.append("_")
    ascii_name = "".join(out).strip("-_")

    if not ascii_name:
        raise InvalidName(
            context,
            display_name,
            "transliteration produced no valid filename characters",
            ascii_name=ascii_name,
        )
    if len(ascii_name) > MAX_NAME_LENGTH:
        raise InvalidName(
            context,
            display_name,
            f"too long ({len(ascii_name)} characters; max is {MAX_NAME_LENGTH})",
            ascii_name=ascii_name,
        )
    if _is_reserved(ascii_name):
        raise InvalidName(context, display_name, "uses reserved windows name", ascii_name=ascii_name)
    return ascii_name


def parse_name_pair(name: str, ascii_name: str | None, context: str) -> tuple[str, str]:
    """Validate ``name`` and return it with its (given or derived) ASCII twin."""
    display = normalize_and_validate(name, context)
    if ascii_name is not None:
        return display, validate_ascii(ascii_name, context)
    return display, to_ascii(display, context)
