"""Role vocabulary and role resolution.

Roles are the semantic color purposes a template refers to (``bg``,
``syntax.keyword``, ``ansi.red_bright``...). The vocabulary is a fixed,
ordered table. Roles are either *base* roles, which every scheme must set,
or *optional* variants whose name carries a trailing ``_suffix``; an unset
optional role falls back to the role obtained by stripping that suffix
(``select_alt`` -> ``select``).

Scheme authors assign each role either a swatch (``"$black"``) or another
role (``"fg"``). :class:`RoleResolver` dereferences those assignments into a
flat ``{role: ResolvedRole}`` map once, at scheme load time.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from hueforge.errors import (
    CircularReference,
    InternalBug,
    MissingRequiredRoles,
    UndefinedRole,
    UndefinedSwatch,
)
from hueforge.logging_setup import TRACE_LEVEL
from hueforge.swatches import Palette

__all__ = [
    "ROLES",
    "VARIANT_SEPARATOR",
    "GROUP_SEPARATOR",
    "SWATCH_PREFIX",
    "RoleKind",
    "RoleInfo",
    "RoleVocabulary",
    "VOCABULARY",
    "SwatchRef",
    "RoleRef",
    "RoleValue",
    "ResolvedRole",
    "parse_role_value",
    "RoleResolver",
    "resolve_roles",
]

logger = logging.getLogger(__name__)

VARIANT_SEPARATOR = "_"
GROUP_SEPARATOR = "."
SWATCH_PREFIX = "$"

ROLES: tuple[str, ...] = (
    "bg",
    "bg_alt",
    "fg",
    "fg_alt",
    "toolbar",
    "toolbar_popup",
    "toolbar_alt",
    "select",
    "select_2nd",
    "select_alt",
    "accent",
    "accent_2nd",
    "accent_separator",
    "accent_popup",
    "accent_linenum",
    "inactive",
    "focus",
    "guide",
    "guide_inlay",
    "guide_linenum",
    "guide_ruler",
    "guide_whitespace",
    "match",
    "error",
    "warning",
    "info",
    "hint",
    "debug.active",
    "debug.breakpoint",
    "debug.frameline",
    "mode.normal",
    "mode.normal_2nd",
    "mode.insert",
    "mode.insert_2nd",
    "mode.select",
    "mode.select_2nd",
    "syntax.variable",
    "syntax.variable_builtin",
    "syntax.variable_parameter",
    "syntax.variable_member",
    "syntax.keyword",
    "syntax.keyword_operator",
    "syntax.keyword_function",
    "syntax.keyword_conditional",
    "syntax.keyword_repeat",
    "syntax.keyword_import",
    "syntax.keyword_return",
    "syntax.keyword_exception",
    "syntax.keyword_directive",
    "syntax.keyword_storage",
    "syntax.type",
    "syntax.type_builtin",
    "syntax.type_variant",
    "syntax.function",
    "syntax.function_builtin",
    "syntax.function_method",
    "syntax.function_macro",
    "syntax.constant",
    "syntax.constant_builtin",
    "syntax.constant_boolean",
    "syntax.constant_number",
    "syntax.constant_character",
    "syntax.label",
    "syntax.constructor",
    "syntax.string",
    "syntax.attribute",
    "syntax.namespace",
    "syntax.tag",
    "syntax.tag_builtin",
    "syntax.comment",
    "syntax.comment_doc",
    "syntax.operator",
    "syntax.punctuation",
    "syntax.punctuation_rainbow1",
    "syntax.punctuation_rainbow2",
    "syntax.punctuation_rainbow3",
    "syntax.punctuation_rainbow4",
    "syntax.punctuation_rainbow5",
    "syntax.punctuation_rainbow6",
    "syntax.special",
    "syntax.special_function",
    "syntax.special_character",
    "syntax.special_string",
    "syntax.special_punctuation",
    "diff.plus",
    "diff.minus",
    "diff.delta",
    "diff.delta_moved",
    "diff.delta_conflict",
    "markup.heading",
    "markup.heading_2nd",
    "markup.heading_3rd",
    "markup.heading_4th",
    "markup.heading_5th",
    "markup.heading_6th",
    "markup.list",
    "markup.list_numbered",
    "markup.list_checked",
    "markup.list_unchecked",
    "markup.link",
    "markup.link_text",
    "markup.bold",
    "markup.italic",
    "markup.strikethrough",
    "markup.quote",
    "markup.raw",
    "ansi.black",
    "ansi.black_bright",
    "ansi.red",
    "ansi.red_bright",
    "ansi.green",
    "ansi.green_bright",
    "ansi.yellow",
    "ansi.yellow_bright",
    "ansi.blue",
    "ansi.blue_bright",
    "ansi.magenta",
    "ansi.magenta_bright",
    "ansi.cyan",
    "ansi.cyan_bright",
    "ansi.white",
    "ansi.white_bright",
)


class RoleKind(enum.Enum):
    BASE = "base"
    OPTIONAL = "optional"


@dataclass(slots=True, frozen=True)
class RoleInfo:
    """Precomputed facts about one role name.

    Attributes:
        name: Full role name, e.g. ``syntax.keyword_function``.
        kind: Whether the role is required or an optional variant.
        base: Role an unset optional role falls back to; ``None`` for base roles.
        group: Dotted group prefix (``syntax``) or ``None`` for top-level roles.
        key: Name within the group (``keyword_function``).
    """

    name: str
    kind: RoleKind
    base: str | None
    group: str | None
    key: str


def _split(name: str) -> tuple[str | None, str]:
    group, sep, key = name.rpartition(GROUP_SEPARATOR)
    return (group if sep else None), key


def _derive(name: str) -> RoleInfo:
    group, key = _split(name)
    if VARIANT_SEPARATOR not in key:
        return RoleInfo(name=name, kind=RoleKind.BASE, base=None, group=group, key=key)
    base_key = key.rsplit(VARIANT_SEPARATOR, 1)[0]
    base = f"{group}{GROUP_SEPARATOR}{base_key}" if group else base_key
    return RoleInfo(name=name, kind=RoleKind.OPTIONAL, base=base, group=group, key=key)


class RoleVocabulary:
    """Closed, ordered set of role names with O(1) classification.

    Args:
        names: Role names in declaration order. Every optional role's base
            must also be part of the vocabulary.

    Raises:
        ValueError: If a name is duplicated, malformed, or an optional role
            has no base in the vocabulary.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self._roles: dict[str, RoleInfo] = {}
        for name in names:
            if name in self._roles:
                raise ValueError(f"duplicate role `{name}`")
            if not name or name.count(GROUP_SEPARATOR) > 1:
                raise ValueError(f"role `{name}` not formatted like `[group.]role`")
            self._roles[name] = _derive(name)
        for info in self._roles.values():
            if info.base is not None and info.base not in self._roles:
                raise ValueError(f"optional role `{info.name}` has no base role `{info.base}`")
        self._base = tuple(n for n, i in self._roles.items() if i.kind is RoleKind.BASE)

    def __iter__(self) -> Iterator[str]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def __contains__(self, name: object) -> bool:
        return name in self._roles

    def info(self, name: str) -> RoleInfo:
        try:
            return self._roles[name]
        except KeyError:
            raise UndefinedRole(name) from None

    def classify(self, name: str) -> RoleKind:
        return self.info(name).kind

    def base_of(self, name: str) -> str | None:
        return self.info(name).base

    def group_of(self, name: str) -> str | None:
        return self.info(name).group

    def base_roles(self) -> tuple[str, ...]:
        return self._base

    def parse(self, name: str) -> str:
        """Return ``name`` if it belongs to the vocabulary, else raise."""
        if name not in self._roles:
            raise UndefinedRole(name)
        return name


VOCABULARY = RoleVocabulary(ROLES)


@dataclass(slots=True, frozen=True)
class SwatchRef:
    """Role assignment pointing directly at a palette swatch (``"$name"``)."""

    name: str

    def __str__(self) -> str:
        return f"{SWATCH_PREFIX}{self.name}"


@dataclass(slots=True, frozen=True)
class RoleRef:
    """Role assignment pointing at another role."""

    name: str

    def __str__(self) -> str:
        return self.name


RoleValue = SwatchRef | RoleRef


def parse_role_value(raw: str, vocabulary: RoleVocabulary = VOCABULARY) -> RoleValue:
    """Parse an author-written role value.

    ``"$name"`` references a swatch; anything else must be a role name.

    Raises:
        UndefinedRole: If the value is neither a swatch reference nor a known role.
    """

    if raw.startswith(SWATCH_PREFIX):
        swatch = raw[len(SWATCH_PREFIX) :]
        if not swatch:
            raise UndefinedRole(f"invalid swatch reference: `{raw}`")
        return SwatchRef(swatch)
    return RoleRef(vocabulary.parse(raw))


@dataclass(slots=True, frozen=True)
class ResolvedRole:
    """Terminal value of a role after all indirection is followed."""

    hex: str
    swatch: str
    ascii: str

    def to_dict(self) -> dict[str, str]:
        return {"hex": self.hex, "swatch": self.swatch, "ascii": self.ascii}


class RoleResolver:
    """Resolve a scheme's role assignments against its palette.

    The resolver is stateless between calls; every top-level role gets its
    own visited set, threaded explicitly through the recursion.
    """

    def __init__(
        self,
        roles: Mapping[str, RoleValue],
        palette: Palette,
        vocabulary: RoleVocabulary = VOCABULARY,
    ) -> None:
        self.roles = roles
        self.palette = palette
        self.vocabulary = vocabulary

    def missing_base_roles(self) -> list[str]:
        return [r for r in self.vocabulary.base_roles() if r not in self.roles]

    def resolve(self, role: str, visited: dict[str, None] | None = None) -> ResolvedRole:
        """Resolve a single role.

        Args:
            role: Role to resolve.
            visited: Ordered set (dict keys) of roles on the current path.

        Raises:
            CircularReference: ``role`` is already on the current path.
            UndefinedSwatch: A swatch reference is not in the palette.
            MissingRequiredRoles: An unset base role was reached.
        """

        if visited is None:
            visited = {}
        if role in visited:
            raise CircularReference([*visited, role])
        visited[role] = None

        value = self.roles.get(role)
        if isinstance(value, SwatchRef):
            swatch = self.palette.get(value.name)
            if swatch is None:
                raise UndefinedSwatch(role, value.name)
            return ResolvedRole(hex=swatch.hex, swatch=swatch.name, ascii=swatch.ascii)
        if isinstance(value, RoleRef):
            return self.resolve(value.name, visited)
        if value is not None:
            raise InternalBug("roles", f"role `{role}` has unexpected value {value!r}")

        info = self.vocabulary.info(role)
        if info.kind is RoleKind.BASE or info.base is None:
            raise MissingRequiredRoles([role])
        logger.log(TRACE_LEVEL, "role `%s` unset, falling back to `%s`", role, info.base)
        return self.resolve(info.base, dict(visited))

    def resolve_all(self) -> dict[str, ResolvedRole]:
        """Resolve every vocabulary role, in vocabulary order.

        Raises:
            MissingRequiredRoles: Listing every unset base role at once.
            RoleError: The first resolution failure otherwise.
        """

        missing = self.missing_base_roles()
        if missing:
            raise MissingRequiredRoles(missing)
        return {role: self.resolve(role) for role in self.vocabulary}


def resolve_roles(
    roles: Mapping[str, RoleValue],
    palette: Palette,
    vocabulary: RoleVocabulary = VOCABULARY,
) -> dict[str, ResolvedRole]:
    """Convenience wrapper around :meth:`RoleResolver.resolve_all`."""
    return RoleResolver(roles, palette, vocabulary).resolve_all()
