"""Command line entry point: ``hueforge`` / ``python -m hueforge``."""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path

from hueforge import __version__
from hueforge.config import load_config
from hueforge.errors import HueforgeError, InternalBug, WriteError
from hueforge.logging_setup import level_from_verbosity, setup_logging
from hueforge.render import render_all
from hueforge.roles import VOCABULARY
from hueforge.schemes import load_all
from hueforge.strategy import WriteMode
from hueforge.templates import Loader

logger = logging.getLogger(__name__)

__all__ = ["build_parser", "write_mode", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hueforge",
        description="Render templates for every color scheme, keeping user edits safe.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    chatter = parser.add_mutually_exclusive_group()
    chatter.add_argument(
        "-v", "--verbose", action="count", default=0, help="output more info (-v, -vv, -vvv)"
    )
    chatter.add_argument("-q", "--quiet", action="store_true", help="only report errors")
    parser.add_argument("-k", "--keep", action="store_true", help="don't overwrite existing files")
    parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="delete the output directory before rendering (implies --force)",
    )
    parser.add_argument(
        "-f", "--force", action="store_true", help="overwrite all files, even user-modified ones"
    )
    parser.add_argument(
        "--dry-run", "--dry", action="store_true", help="preview changes without writing anything"
    )
    parser.add_argument(
        "--prune",
        action="store_true",
        help="delete tracked files that no template/scheme produces anymore",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="skip schemes that fail to load instead of aborting",
    )
    parser.add_argument(
        "-C", dest="directory", type=Path, default=None, help="run as if started in DIRECTORY"
    )
    return parser


def write_mode(args: argparse.Namespace) -> WriteMode:
    if args.force or args.clean:
        return WriteMode.FORCE
    if args.keep:
        return WriteMode.SKIP
    return WriteMode.SMART


def _clean(render_dir: Path, dry_run: bool) -> None:
    if not render_dir.exists():
        return
    if dry_run:
        logger.info("would clean `%s`", render_dir)
        return
    shutil.rmtree(render_dir)
    logger.info("cleaned `%s`", render_dir)


def _run(args: argparse.Namespace) -> int:
    config = load_config(Path("."))
    templates = Loader(config.templates_dir, config.strip_directives)
    schemes = load_all(config.schemes_dir, VOCABULARY, strict=not args.keep_going)
    if not schemes:
        logger.warning("no schemes found in `%s`", config.schemes_dir)

    if args.clean:
        try:
            _clean(config.render_dir, args.dry_run)
        except OSError as exc:
            raise WriteError("clean", str(config.render_dir), str(exc)) from exc

    report = render_all(
        templates,
        schemes,
        config,
        write_mode(args),
        args.dry_run,
        prune=args.prune,
    )
    counts = report.counts()
    logger.info(
        "%d file(s): %s",
        len(report.units),
        ", ".join(f"{n} {d.value}" for d, n in sorted(counts.items(), key=lambda kv: kv[0].value)),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hueforge`` CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.keep and (args.force or args.clean):
        parser.error("--keep cannot be combined with --force or --clean")

    setup_logging(level_from_verbosity(args.verbose, args.quiet), force=True)

    if args.directory is not None:
        try:
            os.chdir(args.directory)
        except OSError as exc:
            print(f"error: cannot change to `{args.directory}`: {exc}", file=sys.stderr)
            return 1

    try:
        return _run(args)
    except InternalBug as exc:
        print(exc, file=sys.stderr)
        return 1
    except HueforgeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
