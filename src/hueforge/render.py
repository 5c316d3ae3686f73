"""Render every template against every scheme.

For each template × scheme (× swatch, for templates whose name contains
``SWATCH``) the output path is resolved, the template is evaluated, the
ledger is consulted and :func:`hueforge.strategy.decide` picks what to do.
The ledger is saved once at the end of a successful, non-dry run; any
error aborts the run with the ledger left untouched.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import TemplateError as JinjaTemplateError
from jinja2 import UndefinedError

from hueforge.config import Config
from hueforge.context import SET_SENTINEL, UpstreamLinks, build_context
from hueforge.errors import InternalBug, RenderingError, WriteError
from hueforge.formatting import format_content
from hueforge.ledger import Ledger, ManagedFile, hash_file
from hueforge.schemes import Scheme
from hueforge.strategy import Decision, WriteMode, decide
from hueforge.templates import TEMPLATE_SUFFIX, CompiledTemplate, Loader
from hueforge.upstream import GitCache, GitInfo, build_url, extract_base_url

__all__ = [
    "SCHEME_MARKER",
    "SWATCH_MARKER",
    "SKIP_PREFIX",
    "RenderUnit",
    "RenderReport",
    "should_render",
    "uses_swatch_iteration",
    "resolve_path",
    "build_upstream",
    "render_all",
]

logger = logging.getLogger(__name__)

SCHEME_MARKER = "SCHEME"
SWATCH_MARKER = "SWATCH"
SKIP_PREFIX = "_"


@dataclass(slots=True, frozen=True)
class RenderUnit:
    """Outcome for one output file."""

    template: str
    scheme: str
    swatch: str | None
    path: Path
    decision: Decision


@dataclass(slots=True)
class RenderReport:
    """Everything one run decided, in processing order."""

    units: list[RenderUnit] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    dry_run: bool = False

    def decisions(self) -> dict[str, Decision]:
        return {unit.path.as_posix(): unit.decision for unit in self.units}

    def counts(self) -> Counter[Decision]:
        return Counter(unit.decision for unit in self.units)

    @property
    def conflicts(self) -> list[RenderUnit]:
        return [unit for unit in self.units if unit.decision is Decision.CONFLICT]

    @property
    def written(self) -> list[RenderUnit]:
        return [unit for unit in self.units if unit.decision.should_write]


def should_render(template_name: str) -> bool:
    """False if any path segment starts with the skip prefix (partials, macros)."""
    return not any(part.startswith(SKIP_PREFIX) for part in template_name.split("/"))


def uses_swatch_iteration(template_name: str) -> bool:
    return SWATCH_MARKER in template_name


def resolve_path(
    template_name: str,
    scheme_name: str,
    render_dir: Path,
    swatch_name: str | None = None,
) -> Path:
    """Return ``render_dir/<scheme>/<template dirs>/<filename>``.

    ``SCHEME`` (and, when rendering per swatch, ``SWATCH``) in the file name
    are replaced; the ``.jinja`` suffix is dropped.

    Raises:
        InternalBug: The template name has no file name component.
    """

    relative = template_name.removesuffix(TEMPLATE_SUFFIX)
    parts = relative.split("/")
    filename = parts[-1]
    if not filename or filename in (".", ".."):
        raise InternalBug("render", f"attempted to render to corrupted path `{relative}`")

    output = filename.replace(SCHEME_MARKER, scheme_name)
    if swatch_name is not None:
        output = output.replace(SWATCH_MARKER, swatch_name)
    return render_dir.joinpath(scheme_name, *parts[:-1], output)


def _relative_to(path: Path, prefix: Path, mode: str) -> Path | None:
    try:
        return path.relative_to(prefix)
    except ValueError:
        logger.warning("%s... failed to strip prefix `%s` from path `%s`", mode, prefix, path)
        return None


def _locate(
    render_path: Path, scheme_name: str, config: Config, git_cache: GitCache
) -> tuple[GitInfo, Path] | None:
    upstream = config.upstream
    if upstream is not None and upstream.repo_path is not None:
        mode = "configuring repo_path mode"
        rel = _relative_to(render_path, config.render_dir / scheme_name, mode)
        if rel is None:
            return None
        target = (upstream.repo_path / rel).resolve()
    else:
        mode = "auto-detect mode"
        target = render_path.resolve()

    info = git_cache.get_or_detect(target)
    if info is None:
        return None
    rel_path = _relative_to(target, info.root, f"{mode}... path not under repo root")
    if rel_path is None:
        return None
    return info, rel_path


def build_upstream(
    render_path: Path, scheme_name: str, config: Config, git_cache: GitCache
) -> UpstreamLinks:
    """Return upstream links for ``render_path``; empty when unavailable."""
    located = _locate(render_path, scheme_name, config, git_cache)
    if located is None:
        return UpstreamLinks()
    info, rel_path = located
    upstream = config.upstream
    url = build_url(
        info,
        rel_path,
        pattern=upstream.pattern if upstream else None,
        branch=upstream.branch if upstream else None,
    )
    return UpstreamLinks(upstream_file=url, upstream_repo=extract_base_url(url))


def _evaluate(template: CompiledTemplate, scheme_name: str, context: dict) -> str:
    if SET_SENTINEL not in context:
        raise InternalBug("render", f"context missing `{SET_SENTINEL}`")
    try:
        return template.render(context)
    except UndefinedError as exc:
        raise InternalBug("render", f"template `{template.name}`: {exc}") from exc
    except (JinjaTemplateError, ArithmeticError, TypeError, ValueError) as exc:
        raise RenderingError(template.name, scheme_name, str(exc)) from exc


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError("create output directory", str(path.parent), str(exc)) from exc
    try:
        path.write_text(content, encoding="utf-8", newline="")
    except OSError as exc:
        raise WriteError("write rendered file", str(path), str(exc)) from exc


def _render_unit(
    template: CompiledTemplate,
    scheme_name: str,
    scheme: Scheme,
    swatch: str | None,
    *,
    config: Config,
    mode: WriteMode,
    dry_run: bool,
    ledger: Ledger[ManagedFile],
    git_cache: GitCache,
) -> RenderUnit:
    path = resolve_path(template.name, scheme_name, config.render_dir, swatch)
    upstream = build_upstream(path, scheme_name, config, git_cache)
    context = build_context(scheme, template.directives.style, upstream, swatch)

    rendered = _evaluate(template, scheme_name, context)
    if rendered and not rendered.endswith("\n"):
        rendered += "\n"
    content = format_content(path, template.directives.make_header(path) + rendered)

    decision = decide(ledger.check(path, scheme, template), mode)
    unit = RenderUnit(template.name, scheme_name, swatch, path, decision)

    if decision is Decision.CONFLICT:
        logger.warning(
            "`%s` was modified since it was last rendered; re-run with `--force` to overwrite it",
            path,
        )
        return unit
    if not decision.should_write:
        logger.debug("%s `%s`", decision.action, path)
        return unit
    if dry_run:
        logger.info("would be %s `%s`", decision.action, path)
        return unit

    logger.info("%s `%s`", decision.action, path)
    _write(path, content)
    ledger.insert(ManagedFile.make(path, template, scheme, content))
    return unit


def _prune(ledger: Ledger[ManagedFile], report: RenderReport, dry_run: bool) -> None:
    for orphan in ledger.find_orphans(unit.path for unit in report.units):
        path = Path(orphan)
        entry = ledger.get(orphan)
        report.pruned.append(orphan)
        if dry_run:
            logger.info("would prune `%s`", path)
            continue
        if path.exists():
            if entry is not None and hash_file(path) != entry.hash:
                logger.warning("`%s` was modified since it was last rendered; untracking but keeping it", path)
            else:
                try:
                    path.unlink()
                except OSError as exc:
                    raise WriteError("delete orphaned file", str(path), str(exc)) from exc
        logger.info("pruned `%s`", path)
        ledger.remove(orphan)


def render_all(
    templates: Loader | Mapping[str, CompiledTemplate],
    schemes: Mapping[str, Scheme],
    config: Config,
    mode: WriteMode = WriteMode.SMART,
    dry_run: bool = False,
    ledger: Ledger[ManagedFile] | None = None,
    git_cache: GitCache | None = None,
    *,
    prune: bool = False,
) -> RenderReport:
    """Render all templates for all schemes and persist the ledger.

    Args:
        templates: Template loader or compiled templates keyed by name.
        schemes: Schemes keyed by the name used for output directories.
        config: Project configuration.
        mode: How existing files are treated.
        dry_run: Decide and log only; no files or ledger are written.
        ledger: Ledger to use; loaded from ``config.manifest_path`` if omitted.
        git_cache: Upstream lookup memo; a fresh one if omitted.
        prune: Delete and untrack ledger entries this run did not produce.

    Returns:
        A :class:`RenderReport` with one unit per output file.

    Raises:
        HueforgeError: Any failure; the ledger is not saved.
    """

    if isinstance(templates, Loader):
        templates = templates.templates()
    if ledger is None:
        ledger = Ledger.load_or_create(config.manifest_path, ManagedFile)
    git_cache = git_cache or GitCache()
    report = RenderReport(dry_run=dry_run)

    for name, template in templates.items():
        if not should_render(name):
            logger.debug("skipping partial template `%s`", name)
            continue
        per_swatch = uses_swatch_iteration(name)
        if per_swatch and "swatch" not in template.source:
            logger.warning(
                "template `%s` has `%s` in filename but doesn't use it inside template", name, SWATCH_MARKER
            )
        for scheme_name, scheme in schemes.items():
            swatches: list[str | None] = list(scheme.palette.names()) if per_swatch else [None]
            for swatch in swatches:
                report.units.append(
                    _render_unit(
                        template,
                        scheme_name,
                        scheme,
                        swatch,
                        config=config,
                        mode=mode,
                        dry_run=dry_run,
                        ledger=ledger,
                        git_cache=git_cache,
                    )
                )

    if prune:
        _prune(ledger, report, dry_run)

    if dry_run:
        logger.info("dry run: ledger not saved")
    else:
        ledger.save()

    if report.conflicts:
        logger.warning("%d file(s) in conflict; re-run with `--force` to overwrite", len(report.conflicts))
    return report
