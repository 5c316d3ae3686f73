"""Build the evaluation context handed to templates.

The context is a static snapshot of a scheme: every role and swatch is
wrapped in a :class:`ColorValue` that renders as a hex string or a swatch
name depending on the template's :class:`RenderStyle`, and exposes its
components as attributes (``{{ bg.hex }}``, ``{{ bg.r }}``,
``{{ palette[0].roles }}``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from hueforge.errors import InternalBug
from hueforge.names import transliterate
from hueforge.roles import GROUP_SEPARATOR, ResolvedRole
from hueforge.schemes import Scheme
from hueforge.swatches import Swatch

__all__ = [
    "SET_SENTINEL",
    "ColorStyle",
    "TextStyle",
    "RenderStyle",
    "ColorKind",
    "ColorValue",
    "UpstreamLinks",
    "build_context",
]

# context key listing the roles a scheme sets explicitly; read by the `set` test
SET_SENTINEL = "_set"


class ColorStyle(enum.Enum):
    HEX = "hex"
    NAME = "name"


class TextStyle(enum.Enum):
    UNICODE = "unicode"
    ASCII = "ascii"


@dataclass(slots=True, frozen=True)
class RenderStyle:
    """How a bare color value prints inside a template."""

    color: ColorStyle = ColorStyle.HEX
    text: TextStyle = TextStyle.UNICODE


class ColorKind(enum.Enum):
    SWATCH = "swatch"
    ROLE = "role"


@dataclass(slots=True, frozen=True)
class ColorValue:
    """A swatch or resolved role as seen by templates.

    For roles, ``name``/``ascii`` are those of the swatch the role resolves
    to (also available as ``swatch``/``swatch_ascii``). ``roles`` is only
    populated for swatches and lists the roles resolving to them.
    """

    kind: ColorKind
    hex: str
    name: str
    ascii: str
    rgb: tuple[int, int, int]
    style: RenderStyle = RenderStyle()
    roles: tuple[str, ...] = field(default=())

    def __str__(self) -> str:
        if self.style.color is ColorStyle.HEX:
            return self.hex
        if self.style.text is TextStyle.ASCII:
            return self.ascii
        return self.name

    @property
    def swatch(self) -> str:
        return self.name

    @property
    def swatch_ascii(self) -> str:
        return self.ascii

    @property
    def r(self) -> int:
        return self.rgb[0]

    @property
    def g(self) -> int:
        return self.rgb[1]

    @property
    def b(self) -> int:
        return self.rgb[2]

    @property
    def rf(self) -> float:
        return self.rgb[0] / 255.0

    @property
    def gf(self) -> float:
        return self.rgb[1] / 255.0

    @property
    def bf(self) -> float:
        return self.rgb[2] / 255.0


@dataclass(slots=True, frozen=True)
class UpstreamLinks:
    """Links to where a rendered file lives in its upstream repository."""

    upstream_file: str | None = None
    upstream_repo: str | None = None


def _swatch_value(swatch: Swatch, roles: list[str], style: RenderStyle) -> ColorValue:
    return ColorValue(
        kind=ColorKind.SWATCH,
        hex=swatch.hex,
        name=swatch.name,
        ascii=swatch.ascii,
        rgb=swatch.rgb,
        style=style,
        roles=tuple(roles),
    )


def _role_value(scheme: Scheme, role: str, resolved: ResolvedRole, style: RenderStyle) -> ColorValue:
    swatch = scheme.palette.get(resolved.swatch)
    if swatch is None:
        raise InternalBug(
            "context",
            f"resolved role `{role}` references missing swatch `${resolved.swatch}`",
        )
    return ColorValue(
        kind=ColorKind.ROLE,
        hex=resolved.hex,
        name=resolved.swatch,
        ascii=resolved.ascii,
        rgb=swatch.rgb,
        style=style,
    )


def _swatch_roles(scheme: Scheme) -> dict[str, list[str]]:
    by_swatch: dict[str, list[str]] = {name: [] for name in scheme.palette.names()}
    for role, resolved in scheme.resolved_roles.items():
        if resolved.swatch in by_swatch:
            by_swatch[resolved.swatch].append(role)
    return by_swatch


def _meta(scheme: Scheme, style: RenderStyle) -> dict[str, str | None]:
    meta = scheme.meta.model_dump()
    if style.text is not TextStyle.ASCII:
        return meta
    out: dict[str, str | None] = {}
    for key in ("author", "license", "blurb"):
        unicode_value = meta.get(key)
        ascii_value = meta.get(f"{key}_ascii")
        if ascii_value is None and unicode_value is not None:
            ascii_value = transliterate(unicode_value).encode("ascii", "ignore").decode("ascii")
        out[key] = ascii_value
        out[f"{key}_ascii"] = ascii_value
    return out


def build_context(
    scheme: Scheme,
    style: RenderStyle | None = None,
    upstream: UpstreamLinks | None = None,
    swatch: str | None = None,
) -> dict[str, Any]:
    """Return the template context for ``scheme``.

    Args:
        scheme: Loaded scheme.
        style: Rendering style of the template; defaults to hex/unicode.
        upstream: Upstream links for the file being rendered, if known.
        swatch: Name of the current swatch for per-swatch templates.

    Returns:
        Mapping with top-level roles, role groups, ``palette``, ``meta``,
        ``scheme``, ``scheme_ascii``, ``special``, the optional current
        ``swatch`` and the ``_set`` sentinel.

    Raises:
        InternalBug: A resolved role or the current swatch is not in the palette.
    """

    style = style or RenderStyle()
    upstream = upstream or UpstreamLinks()
    swatch_roles = _swatch_roles(scheme)

    ctx: dict[str, Any] = {
        "scheme": scheme.ascii if style.text is TextStyle.ASCII else scheme.name,
        "scheme_ascii": scheme.ascii,
        "meta": _meta(scheme, style),
        "palette": [_swatch_value(s, swatch_roles[s.name], style) for s in scheme.palette],
    }

    groups: dict[str, dict[str, ColorValue]] = {}
    for role, resolved in scheme.resolved_roles.items():
        value = _role_value(scheme, role, resolved, style)
        group, sep, key = role.partition(GROUP_SEPARATOR)
        if sep:
            groups.setdefault(group, {})[key] = value
        else:
            ctx[role] = value
    ctx.update(groups)

    if swatch is not None:
        current = scheme.palette.get(swatch)
        if current is None:
            raise InternalBug("context", f"current swatch `{swatch}` not in palette of `{scheme.name}`")
        ctx["swatch"] = _swatch_value(current, swatch_roles[current.name], style)

    ctx["special"] = {
        "upstream_file": upstream.upstream_file or "",
        "upstream_repo": upstream.upstream_repo or "",
    }
    ctx[SET_SENTINEL] = list(scheme.set_roles)
    return ctx
