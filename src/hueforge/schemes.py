"""Scheme loading.

A scheme file is a TOML document::

    scheme = "Rosé Pine"          # optional, defaults to the file stem
    scheme_ascii = "rose-pine"    # optional, derived from `scheme`

    [meta]                        # optional
    author = "..."
    license = "MIT"
    blurb = "..."

    [palette]
    black = "#000000"

    [roles]
    bg = "$black"
    fg_alt = "fg"

    [roles.syntax]
    keyword = "$red"

Roles are resolved once at load time; the resulting :class:`Scheme` is
read-only input for every template rendered against it.
"""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hueforge.errors import HueforgeError, SchemeError, UndefinedRole
from hueforge.names import parse_name_pair
from hueforge.roles import (
    GROUP_SEPARATOR,
    VOCABULARY,
    ResolvedRole,
    RoleValue,
    RoleVocabulary,
    parse_role_value,
    resolve_roles,
)
from hueforge.swatches import Palette, parse_palette

__all__ = [
    "MAX_META_FIELD_LENGTH",
    "Meta",
    "Scheme",
    "parse_roles",
    "load",
    "load_all",
    "LoadFailure",
]

logger = logging.getLogger(__name__)

MAX_META_FIELD_LENGTH = 1000
SCHEME_SUFFIX = ".toml"


class Meta(BaseModel):
    """Free-form descriptive fields of a scheme."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    author: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)
    author_ascii: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)
    license: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)
    license_ascii: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)
    blurb: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)
    blurb_ascii: str | None = Field(default=None, max_length=MAX_META_FIELD_LENGTH)


@dataclass(slots=True, frozen=True)
class Scheme:
    """A named palette plus its resolved role assignments.

    Attributes:
        name: Display name.
        ascii: ASCII twin of ``name``.
        meta: Descriptive metadata.
        palette: Declared swatches.
        roles: Raw role assignments as written by the author.
        resolved_roles: Every vocabulary role mapped to its terminal value,
            in vocabulary order.
    """

    name: str
    ascii: str
    meta: Meta
    palette: Palette
    roles: Mapping[str, RoleValue]
    resolved_roles: Mapping[str, ResolvedRole]
    source: Path | None = field(default=None, compare=False)

    def to_canonical(self) -> dict[str, Any]:
        """Return a JSON-ready dict with a fixed field order.

        Any change to names, metadata, palette, author-set roles or resolved
        roles changes this representation.
        """

        return {
            "scheme": self.name,
            "scheme_ascii": self.ascii,
            "meta": self.meta.model_dump(),
            "palette": self.palette.to_list(),
            "roles": {role: str(value) for role, value in self.roles.items()},
            "resolved_roles": {role: r.to_dict() for role, r in self.resolved_roles.items()},
        }

    def canonical_json(self) -> str:
        return json.dumps(self.to_canonical(), ensure_ascii=False, indent=2)

    @property
    def set_roles(self) -> list[str]:
        return list(self.roles)


def _parse_role(
    key: str, value: Any, path: str, vocabulary: RoleVocabulary, out: dict[str, RoleValue]
) -> None:
    if key not in vocabulary:
        raise SchemeError(path, f"invalid role name: `{key}`")
    if not isinstance(value, str):
        raise SchemeError(path, f"role `{key}` must be a string")
    try:
        out[key] = parse_role_value(value, vocabulary)
    except UndefinedRole as exc:
        raise SchemeError(path, f"role `{key}`: {exc}") from exc


def parse_roles(
    table: Any, path: str, vocabulary: RoleVocabulary = VOCABULARY
) -> dict[str, RoleValue]:
    """Flatten a ``[roles]`` table (with one level of groups) into a dict.

    Raises:
        SchemeError: On a non-table section, unknown role, or non-string value.
    """

    if not isinstance(table, Mapping):
        raise SchemeError(path, "`roles` must be a table")
    result: dict[str, RoleValue] = {}
    for key, value in table.items():
        if isinstance(value, Mapping):
            for nested_key, nested_value in value.items():
                full_key = f"{key}{GROUP_SEPARATOR}{nested_key}"
                _parse_role(full_key, nested_value, path, vocabulary, result)
        else:
            _parse_role(key, value, path, vocabulary, result)
    return result


def _optional_str(root: Mapping[str, Any], key: str, path: str) -> str | None:
    value = root.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemeError(path, f"`{key}` must be a string")
    return value


def load(name: str, path: str | Path, vocabulary: RoleVocabulary = VOCABULARY) -> Scheme:
    """Load and resolve one scheme file.

    Args:
        name: Fallback display name, usually the file stem.
        path: TOML file to read.
        vocabulary: Role vocabulary to validate and resolve against.

    Returns:
        Fully resolved :class:`Scheme`.

    Raises:
        SchemeError: Unreadable file, invalid TOML or invalid structure.
        InvalidName: Invalid scheme or swatch names.
        SwatchError: Invalid colors or colliding swatch names.
        RoleError: Undefined swatch, circular reference or missing roles.
    """

    src = Path(path)
    path_str = str(src)
    try:
        text = src.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemeError(path_str, f"failed to read: {exc}") from exc
    try:
        root = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise SchemeError(path_str, f"invalid toml syntax: {exc}") from exc

    raw_name = _optional_str(root, "scheme", path_str)
    raw_ascii = _optional_str(root, "scheme_ascii", path_str)
    scheme_name, scheme_ascii = parse_name_pair(raw_name or name, raw_ascii, "scheme")

    meta_raw = root.get("meta", {})
    if not isinstance(meta_raw, Mapping):
        raise SchemeError(path_str, "`meta` must be a table")
    try:
        meta = Meta.model_validate(dict(meta_raw))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise SchemeError(path_str, f"invalid meta field(s): {problems}") from exc

    if "palette" not in root:
        raise SchemeError(path_str, "missing `palette` section")
    if not isinstance(root["palette"], Mapping):
        raise SchemeError(path_str, "`palette` must be a table")
    palette: Palette = parse_palette(root["palette"])

    if "roles" not in root:
        raise SchemeError(path_str, "missing `roles` section")
    roles = parse_roles(root["roles"], path_str, vocabulary)

    resolved = resolve_roles(roles, palette, vocabulary)
    logger.debug("loaded scheme `%s` (%d swatches, %d roles set)", scheme_name, len(palette), len(roles))

    return Scheme(
        name=scheme_name,
        ascii=scheme_ascii,
        meta=meta,
        palette=palette,
        roles=roles,
        resolved_roles=resolved,
        source=src,
    )


@dataclass(slots=True)
class LoadFailure:
    """A scheme that failed to load and was excluded from rendering."""

    path: Path
    error: HueforgeError


def load_all(
    directory: str | Path,
    vocabulary: RoleVocabulary = VOCABULARY,
    *,
    strict: bool = True,
    failures: list[LoadFailure] | None = None,
) -> dict[str, Scheme]:
    """Load every ``*.toml`` scheme below ``directory``.

    Args:
        directory: Root directory, walked recursively in sorted order.
        vocabulary: Role vocabulary shared by all schemes.
        strict: Re-raise the first failure. When ``False`` failing schemes
            are logged, appended to ``failures`` and skipped so other schemes
            still render.
        failures: Optional list collecting skipped schemes.

    Returns:
        Mapping of file stem to scheme, in path order.

    Raises:
        SchemeError: Two scheme files share a stem.
        HueforgeError: The first load failure when ``strict``.
    """

    root = Path(directory)
    schemes: dict[str, Scheme] = {}
    if not root.is_dir():
        logger.warning("scheme directory `%s` does not exist", root)
        return schemes

    for path in sorted(p for p in root.rglob(f"*{SCHEME_SUFFIX}") if p.is_file()):
        stem = path.stem
        if stem in schemes:
            raise SchemeError(str(path), f"duplicate scheme name `{stem}`")
        try:
            schemes[stem] = load(stem, path, vocabulary)
        except HueforgeError as exc:
            if strict:
                raise
            logger.error("skipping scheme `%s`: %s", path, exc)
            if failures is not None:
                failures.append(LoadFailure(path=path, error=exc))
    return schemes
