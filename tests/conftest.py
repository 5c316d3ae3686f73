from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

import pytest

# Ensure src/ is on sys.path so tests run without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from hueforge.roles import GROUP_SEPARATOR, RoleVocabulary  # noqa: E402

SMALL_ROLES = (
    "bg",
    "bg_alt",
    "bg_alt_deep",
    "fg",
    "fg_alt",
    "syntax.keyword",
    "syntax.keyword_fn",
)


def scheme_toml(
    palette: Mapping[str, str],
    roles: Mapping[str, str],
    *,
    name: str | None = None,
    meta: Mapping[str, str] | None = None,
) -> str:
    """Return scheme TOML text; dotted role names become ``[roles.group]`` tables."""

    lines: list[str] = []
    if name is not None:
        lines.append(f'scheme = "{name}"')
    if meta:
        lines.append("[meta]")
        lines.extend(f'{k} = "{v}"' for k, v in meta.items())
    lines.append("[palette]")
    lines.extend(f'"{k}" = "{v}"' for k, v in palette.items())
    lines.append("[roles]")
    groups: dict[str, dict[str, str]] = {}
    for role, value in roles.items():
        group, sep, key = role.partition(GROUP_SEPARATOR)
        if sep:
            groups.setdefault(group, {})[key] = value
        else:
            lines.append(f'"{role}" = "{value}"')
    for group, entries in groups.items():
        lines.append(f"[roles.{group}]")
        lines.extend(f'"{k}" = "{v}"' for k, v in entries.items())
    return "\n".join(lines) + "\n"


@pytest.fixture
def small_vocab() -> RoleVocabulary:
    return RoleVocabulary(SMALL_ROLES)


@pytest.fixture
def write_scheme(tmp_path: Path) -> Callable[..., Path]:
    """Write a scheme file under ``tmp_path/schemes`` and return its path."""

    def _write(stem: str, palette: Mapping[str, str], roles: Mapping[str, str], **kwargs: object) -> Path:
        directory = tmp_path / "schemes"
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{stem}.toml"
        path.write_text(scheme_toml(palette, roles, **kwargs), encoding="utf-8")  # type: ignore[arg-type]
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers the CLI attaches so they don't outlive captured streams."""
    yield
    pkg = logging.getLogger("hueforge")
    for handler in list(pkg.handlers):
        pkg.removeHandler(handler)
    pkg.setLevel(logging.NOTSET)
