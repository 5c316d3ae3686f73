"""Tidy rendered output by file type.

Formatting is applied to rendered text before it is written, so the
content hash stored in the ledger is the hash of what ends up on disk.
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from hueforge.errors import FormattingError

__all__ = ["SUPPORTED_SUFFIXES", "format_content"]

logger = logging.getLogger(__name__)

JSON_INDENT = 2

_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")


def _finish(text: str) -> str:
    text = text.replace("\r\n", "\n")
    return text.rstrip("\n") + "\n"


def _json(path: Path, text: str) -> str:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormattingError(str(path), f"invalid json: {exc}") from exc
    return json.dumps(data, ensure_ascii=False, indent=JSON_INDENT) + "\n"


def _loose_json(path: Path, text: str) -> str:
    return _finish(_TRAILING_WS.sub("", text))


def _toml(path: Path, text: str) -> str:
    try:
        document = tomlkit.parse(text)
    except TOMLKitError as exc:
        raise FormattingError(str(path), f"invalid toml: {exc}") from exc
    return _finish(_TRAILING_WS.sub("", tomlkit.dumps(document)))


def _markdown(path: Path, text: str) -> str:
    lines = []
    for line in text.replace("\r\n", "\n").split("\n"):
        stripped = line.rstrip(" \t")
        # two trailing spaces are a hard break; keep it in its explicit form
        if line.endswith("  ") and stripped:
            stripped += "\\"
        lines.append(stripped)
    return _finish(_BLANK_RUNS.sub("\n\n", "\n".join(lines)))


def _xml(path: Path, text: str) -> str:
    try:
        ET.fromstring(text)
    except ET.ParseError as exc:
        raise FormattingError(str(path), f"invalid xml: {exc}") from exc
    return _finish(_TRAILING_WS.sub("", text))


_FORMATTERS: dict[str, Callable[[Path, str], str]] = {
    ".json": _json,
    ".jsonc": _loose_json,
    ".json5": _loose_json,
    ".md": _markdown,
    ".svg": _xml,
    ".toml": _toml,
    ".xml": _xml,
}

SUPPORTED_SUFFIXES = frozenset(_FORMATTERS)


def format_content(path: Path, text: str) -> str:
    """Return ``text`` formatted for ``path``'s file type.

    Unsupported file types are returned unchanged.

    Raises:
        FormattingError: The text does not parse as its file type.
    """

    formatter = _FORMATTERS.get(path.suffix.lower())
    if formatter is None:
        return text
    formatted = formatter(path, text)
    if formatted != text:
        logger.debug("formatted `%s`", path)
    return formatted
