"""Template directives.

Templates may start with comment lines that configure rendering and are
removed before the template is compiled::

    #hueforge: render_swatch_names = true
    #hueforge: render_as_ascii = true

Lines that match one of the configured *strip patterns* (for example tool
pragmas such as ``#:tombi lint.disabled = true``) are removed as well, but
re-emitted verbatim at the top of every rendered file. Lines starting with
``##`` are ordinary content.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from hueforge.context import ColorStyle, RenderStyle, TextStyle
from hueforge.errors import TemplateError

__all__ = ["DIRECTIVE_PREFIX", "TOML_FORMAT_DISABLED", "Directives", "parse_template"]

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "#hueforge:"
TOML_FORMAT_DISABLED = "#:tombi format.disabled = true"


def _parse_bool(directive: str, value: str, template_name: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    logger.error(
        "invalid value `%s` for directive `%s` in `%s`: expected `true` or `false`, defaulting to false",
        value,
        directive,
        template_name,
    )
    return False


def _parse_style(raw: dict[str, str], template_name: str) -> RenderStyle:
    color = ColorStyle.HEX
    text = TextStyle.UNICODE
    for directive, value in raw.items():
        if directive == "render_swatch_names":
            color = ColorStyle.NAME if _parse_bool(directive, value, template_name) else ColorStyle.HEX
        elif directive == "render_as_ascii":
            text = TextStyle.ASCII if _parse_bool(directive, value, template_name) else TextStyle.UNICODE
        else:
            logger.debug(
                "ignoring unknown directive `%s` with value `%s` in `%s`", directive, value, template_name
            )
    return RenderStyle(color=color, text=text)


def _matches(line: str, patterns: Sequence[Sequence[str]]) -> bool:
    """True if ``line`` contains every part of some pattern, in order."""
    for pattern in patterns:
        pos = 0
        for part in pattern:
            found = line.find(part, pos)
            if found < 0:
                break
            pos = found + len(part)
        else:
            return True
    return False


def _canonicalize(line: str) -> str:
    return " = ".join(part.strip() for part in line.lower().split("="))


def _trim_blank_ends(lines: list[str]) -> str:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


@dataclass(slots=True)
class Directives:
    """Rendering options and passthrough header lines of one template."""

    style: RenderStyle = field(default_factory=RenderStyle)
    header_lines: set[str] = field(default_factory=set)

    def make_header(self, output_path: Path) -> str:
        """Return the header prepended to ``output_path``'s rendered content.

        TOML outputs always carry :data:`TOML_FORMAT_DISABLED` so that editor
        formatters leave generated files alone.
        """

        lines = set(self.header_lines)
        if output_path.suffix.lower() == ".toml":
            canonical = _canonicalize(TOML_FORMAT_DISABLED)
            if not any(_canonicalize(line) == canonical for line in lines):
                lines.add(TOML_FORMAT_DISABLED)
        if not lines:
            return ""
        return "\n".join(sorted(lines)) + "\n\n"


def parse_template(
    content: str,
    template_name: str,
    strip_patterns: Sequence[Sequence[str]] = (),
) -> tuple[Directives, str]:
    """Split raw template text into directives and compilable source.

    Args:
        content: Raw template file contents.
        template_name: Logical template name, for messages.
        strip_patterns: Ordered substring patterns of passthrough lines.

    Returns:
        ``(directives, source)`` where ``source`` has directive lines
        removed and leading/trailing blank lines trimmed.

    Raises:
        TemplateError: On a ``#hueforge:`` line without ``key = value``.
    """

    raw: dict[str, str] = {}
    header: set[str] = set()
    body: list[str] = []

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed.startswith("#") or trimmed.startswith("##"):
            body.append(line)
            continue
        if trimmed.startswith(DIRECTIVE_PREFIX):
            key, sep, value = trimmed[len(DIRECTIVE_PREFIX) :].partition("=")
            if not sep or not key.strip():
                raise TemplateError(
                    f"incomplete directive in `{template_name}`: `{trimmed}` (expected `key = value`)"
                )
            raw[key.strip()] = value.strip()
            continue
        if _matches(trimmed, strip_patterns):
            header.add(trimmed)
            continue
        body.append(line)

    directives = Directives(style=_parse_style(raw, template_name), header_lines=header)
    return directives, _trim_blank_ends(body)
