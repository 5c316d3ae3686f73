"""Persistent record of rendered files.

The ledger maps output paths to the hashes they were written with so later
runs can tell untouched outputs from files the user has edited. It is stored
as one JSON document::

    {"version": 0, "files": [{"path": ..., "hash": "sha256:...", ...}]}

``files`` is an array kept in insertion order.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from hueforge.errors import LedgerError
from hueforge.schemes import Scheme
from hueforge.strategy import FileStatus, NotTracked, Tracked
from hueforge.templates import CompiledTemplate

__all__ = [
    "MANIFEST_PATH",
    "MANIFEST_VERSION",
    "LedgerEntry",
    "ManagedFile",
    "Ledger",
    "hash_content",
    "hash_file",
    "hash_template",
    "hash_scheme",
]

logger = logging.getLogger(__name__)

MANIFEST_PATH = Path(".hueforge") / "manifest.json"
MANIFEST_VERSION = 0


def hash_content(content: bytes) -> str:
    """Return ``"sha256:<hex>"`` of ``content``."""
    return "sha256:" + hashlib.sha256(content).hexdigest()


def hash_file(path: Path) -> str:
    """Hash the exact bytes of ``path``.

    Raises:
        LedgerError: The file cannot be read.
    """

    try:
        return hash_content(path.read_bytes())
    except OSError as exc:
        raise LedgerError(f"failed to read `{path}` for hashing: {exc}") from exc


def hash_template(template: CompiledTemplate) -> str:
    return hash_content(template.source.encode("utf-8"))


def hash_scheme(scheme: Scheme) -> str:
    return hash_content(scheme.canonical_json().encode("utf-8"))


class LedgerEntry(BaseModel):
    """Base model for anything a :class:`Ledger` can store.

    Subclasses set ``FILENAME``/``VERSION`` and add their own fields.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    FILENAME: ClassVar[str]
    VERSION: ClassVar[int]

    path: str
    hash: str


class ManagedFile(LedgerEntry):
    """A rendered file and the hashes of everything it was rendered from."""

    FILENAME: ClassVar[str] = MANIFEST_PATH.name
    VERSION: ClassVar[int] = MANIFEST_VERSION

    template: str
    scheme: str
    template_hash: str
    scheme_hash: str

    @classmethod
    def make(cls, path: Path, template: CompiledTemplate, scheme: Scheme, content: str) -> ManagedFile:
        return cls(
            path=path.as_posix(),
            template=template.name,
            scheme=scheme.name,
            hash=hash_content(content.encode("utf-8")),
            template_hash=hash_template(template),
            scheme_hash=hash_scheme(scheme),
        )


EntryT = TypeVar("EntryT", bound=LedgerEntry)


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int
    files: list[dict[str, Any]]


class Ledger(Generic[EntryT]):
    """Keyed store of entries persisted to a single JSON file.

    Args:
        path: Location of the JSON document.
        entry_type: Pydantic model of the entries; must provide ``path`` and
            ``hash`` fields plus ``FILENAME``/``VERSION`` class attributes.
    """

    def __init__(self, path: str | Path, entry_type: type[EntryT]) -> None:
        self.path = Path(path)
        self.entry_type = entry_type
        self.version: int = entry_type.VERSION
        self._entries: dict[str, EntryT] = {}

    @staticmethod
    def _key(path: str | Path) -> str:
        return Path(path).as_posix()

    @classmethod
    def load_or_create(cls, path: str | Path, entry_type: type[EntryT]) -> Ledger[EntryT]:
        """Read the ledger at ``path``, or start an empty one if absent.

        Raises:
            LedgerError: The file exists but cannot be read or parsed.
        """

        ledger = cls(path, entry_type)
        try:
            text = ledger.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning(
                "`%s` not found, generating new one (all files untracked! all files in the output "
                "directory will be OVERWRITTEN by newly rendered templates by default!)",
                ledger.path,
            )
            return ledger
        except OSError as exc:
            raise LedgerError(f"failed to read `{ledger.path}`: {exc}") from exc

        try:
            document = _Document.model_validate_json(text)
            entries = [entry_type.model_validate(raw) for raw in document.files]
        except ValidationError as exc:
            raise LedgerError(f"failed to parse `{ledger.path}`: {exc}") from exc

        ledger.version = document.version
        for entry in entries:
            ledger._entries[ledger._key(entry.path)] = entry
        logger.debug("loaded %d ledger entries from `%s`", len(ledger), ledger.path)
        return ledger

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EntryT]:
        return iter(self._entries.values())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and self._key(path) in self._entries

    def get(self, path: str | Path) -> EntryT | None:
        return self._entries.get(self._key(path))

    def insert(self, entry: EntryT) -> bool:
        """Add or replace ``entry``; return True if it replaced one."""
        key = self._key(entry.path)
        replaced = key in self._entries
        self._entries[key] = entry
        return replaced

    def remove(self, path: str | Path) -> bool:
        return self._entries.pop(self._key(path), None) is not None

    def find_orphans(self, rendered_paths: Iterable[str | Path]) -> list[str]:
        """Return tracked paths not in ``rendered_paths``, in ledger order."""
        rendered = {self._key(p) for p in rendered_paths}
        return [key for key in self._entries if key not in rendered]

    def check(self, path: Path, scheme: Scheme, template: CompiledTemplate) -> FileStatus:
        """Compare ``path`` on disk and its inputs against the stored entry.

        ``user_modified`` compares the exact bytes on disk with the recorded
        content hash; it is only set for a file that exists.

        Raises:
            LedgerError: The file exists but cannot be read.
        """

        entry = self.get(path)
        if entry is None:
            return NotTracked()

        file_exists = path.exists()
        return Tracked(
            file_exists=file_exists,
            user_modified=file_exists and hash_file(path) != entry.hash,
            template_changed=hash_template(template) != getattr(entry, "template_hash", None),
            scheme_changed=hash_scheme(scheme) != getattr(entry, "scheme_hash", None),
        )

    def to_json(self) -> str:
        document = {
            "version": self.version,
            "files": [entry.model_dump() for entry in self._entries.values()],
        }
        return json.dumps(document, ensure_ascii=False, indent=2)

    def save(self) -> None:
        """Write the whole ledger, replacing the old file atomically.

        Raises:
            LedgerError: The directory cannot be created or the file written.
        """

        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LedgerError(f"failed to create `{directory}` dir: {exc}") from exc

        content = self.to_json()
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise LedgerError(f"failed to write `{self.path}`: {exc}") from exc
        logger.debug("saved %d ledger entries to `%s`", len(self), self.path)
