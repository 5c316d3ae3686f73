"""Template discovery and compilation (Jinja2).

Every ``*.jinja`` file below the templates directory becomes one template,
named by its POSIX path relative to that directory (``kitty/SCHEME.conf.jinja``).
Directive lines are stripped before compilation (see :mod:`hueforge.directives`);
the stripped text is what gets evaluated and hashed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
    UndefinedError,
    pass_context,
)
from jinja2.runtime import Context

from hueforge.context import SET_SENTINEL
from hueforge.directives import Directives, parse_template
from hueforge.errors import InternalBug, TemplateError

__all__ = ["TEMPLATE_SUFFIX", "CompiledTemplate", "Loader", "create_environment"]

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".jinja"


@pass_context
def _set_test(ctx: Context, value: Any) -> bool:
    """``{% if "syntax.keyword" is set %}`` – was the role set by the author?"""
    if not isinstance(value, str):
        raise TypeError("`set` test requires a string argument")
    if SET_SENTINEL not in ctx:
        raise UndefinedError(f"`{SET_SENTINEL}` missing from context")
    return value in ctx[SET_SENTINEL]


def _code_filter(value: Any) -> str:
    return f"`{value}`"


def create_environment(sources: Mapping[str, str] | None = None) -> Environment:
    """Return the Jinja2 environment templates are compiled with.

    Undefined variables raise instead of rendering empty strings; block
    tags do not leave stray newlines or indentation behind.
    """

    env = Environment(
        loader=DictLoader(dict(sources or {})),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        autoescape=False,
    )
    env.tests["set"] = _set_test
    env.filters["code"] = _code_filter
    return env


@dataclass(slots=True, frozen=True)
class CompiledTemplate:
    """A compiled template plus its directives.

    Attributes:
        name: Logical name (relative POSIX path, including ``.jinja``).
        source: Source text the template was compiled from; used for hashing.
        directives: Parsed directives.
        template: Jinja2 template object.
    """

    name: str
    source: str
    directives: Directives
    template: Template

    def render(self, context: Mapping[str, Any]) -> str:
        return self.template.render(dict(context))


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


class Loader:
    """Load and compile every template below ``directory``.

    Args:
        directory: Templates root.
        strip_patterns: Passthrough-line patterns (see :mod:`hueforge.directives`).

    Raises:
        TemplateError: A template cannot be read, has a malformed directive,
            or fails to compile.
    """

    def __init__(self, directory: str | Path, strip_patterns: Sequence[Sequence[str]] = ()) -> None:
        self.directory = Path(directory)
        self.strip_patterns = [list(p) for p in strip_patterns]
        self._directives: dict[str, Directives] = {}
        sources: dict[str, str] = {}

        if not self.directory.is_dir():
            logger.warning("template directory `%s` does not exist", self.directory)
        else:
            for path in sorted(self.directory.rglob(f"*{TEMPLATE_SUFFIX}")):
                if not path.is_file() or _is_hidden(path, self.directory):
                    continue
                name = path.relative_to(self.directory).as_posix()
                try:
                    raw = path.read_text(encoding="utf-8")
                except OSError as exc:
                    raise TemplateError(f"failed to read template `{path}`: {exc}") from exc
                directives, source = parse_template(raw, name, self.strip_patterns)
                self._directives[name] = directives
                sources[name] = source

        self._compile(sources)
        logger.debug("loaded %d templates from `%s`", len(self._templates), self.directory)

    @classmethod
    def from_sources(
        cls, sources: Mapping[str, str], strip_patterns: Sequence[Sequence[str]] = ()
    ) -> Loader:
        """Build a loader from in-memory ``{name: raw_text}`` templates."""
        self = cls.__new__(cls)
        self.directory = Path(".")
        self.strip_patterns = [list(p) for p in strip_patterns]
        self._directives = {}
        compiled: dict[str, str] = {}
        for name, raw in sources.items():
            directives, source = parse_template(raw, name, self.strip_patterns)
            self._directives[name] = directives
            compiled[name] = source
        self._compile(compiled)
        return self

    def _compile(self, sources: dict[str, str]) -> None:
        self.env = create_environment(sources)
        self._templates: dict[str, CompiledTemplate] = {}
        for name, source in sources.items():
            try:
                template = self.env.get_template(name)
            except TemplateSyntaxError as exc:
                raise TemplateError(f"template compilation failed for `{name}`: {exc}") from exc
            self._templates[name] = CompiledTemplate(
                name=name, source=source, directives=self._directives[name], template=template
            )

    def __len__(self) -> int:
        return len(self._templates)

    def templates(self) -> dict[str, CompiledTemplate]:
        """Return compiled templates keyed by name, in path order.

        Raises:
            InternalBug: A compiled template has no directives entry.
        """

        for name in self._templates:
            if name not in self._directives:
                raise InternalBug("templates", f"template `{name}` compiled but missing from directives map")
        return dict(self._templates)
