"""Project configuration (``hueforge.toml``).

Every key is optional::

    strip_directives = [["#:tombi", "lint.disabled", "=", "true"]]

    [dirs]
    schemes = "schemes"
    templates = "templates"
    render = "render"

    [upstream]
    repo_path = "~/src/dotfiles"
    pattern = "{base}/blob/{branch}/{file}"
    branch = "main"

Paths are expanded (``~`` and ``$VAR``) and, when relative, are taken
relative to the project root.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hueforge.errors import ConfigError
from hueforge.ledger import MANIFEST_PATH

__all__ = ["CONFIG_FILENAME", "Dirs", "UpstreamConfig", "Config", "expand_path", "load_config"]

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "hueforge.toml"

DEFAULT_STRIP_DIRECTIVES = [["#:tombi", "lint.disabled", "=", "true"]]


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))


class Dirs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemes: Path = Path("schemes")
    templates: Path = Path("templates")
    render: Path = Path("render")

    @field_validator("schemes", "templates", "render", mode="before")
    @classmethod
    def _expand(cls, value: object) -> object:
        return expand_path(value) if isinstance(value, str) else value


class UpstreamConfig(BaseModel):
    """Overrides for upstream link generation.

    ``repo_path`` switches to mapping rendered files onto a checkout instead
    of detecting the repository the render directory itself lives in.
    """

    model_config = ConfigDict(extra="forbid")

    repo_path: Path | None = None
    pattern: str | None = None
    branch: str | None = None

    @field_validator("repo_path", mode="before")
    @classmethod
    def _expand(cls, value: object) -> object:
        return expand_path(value) if isinstance(value, str) else value


class Config(BaseModel):
    model_config = ConfigDict(extra="forbid")

    root: Path = Field(default=Path("."), exclude=True)
    dirs: Dirs = Field(default_factory=Dirs)
    upstream: UpstreamConfig | None = None
    strip_directives: list[list[str]] = Field(
        default_factory=lambda: [list(p) for p in DEFAULT_STRIP_DIRECTIVES]
    )

    def _under_root(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    @property
    def schemes_dir(self) -> Path:
        return self._under_root(self.dirs.schemes)

    @property
    def templates_dir(self) -> Path:
        return self._under_root(self.dirs.templates)

    @property
    def render_dir(self) -> Path:
        return self._under_root(self.dirs.render)

    @property
    def manifest_path(self) -> Path:
        return self._under_root(MANIFEST_PATH)


def load_config(root: str | Path = ".") -> Config:
    """Load ``hueforge.toml`` from ``root``; defaults when it is absent.

    Args:
        root: Project root directory.

    Returns:
        Validated :class:`Config` whose ``root`` is ``root``.

    Raises:
        ConfigError: The file cannot be read, is not TOML, or has unknown or
            mistyped keys.
    """

    root = Path(root)
    path = root / CONFIG_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("no `%s` in `%s`, using defaults", CONFIG_FILENAME, root)
        return Config(root=root)
    except OSError as exc:
        raise ConfigError(f"failed to read `{path}`: {exc}") from exc

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to parse `{path}`: {exc}") from exc
    try:
        return Config.model_validate({**data, "root": root})
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid `{path}`: {problems}") from exc
