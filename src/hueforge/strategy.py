"""Write decisions for rendered files.

:func:`decide` maps what the ledger knows about an output file and the
active :class:`WriteMode` to a :class:`Decision`. It performs no I/O.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = ["WriteMode", "Decision", "NotTracked", "Tracked", "FileStatus", "decide"]


class WriteMode(enum.Enum):
    """How to treat files that already exist."""

    SMART = "smart"
    SKIP = "skip"
    FORCE = "force"


class Decision(enum.Enum):
    CREATE = "create"
    RECREATE = "recreate"
    UPDATE = "update"
    OVERWRITE = "overwrite"
    SKIP = "skip"
    CONFLICT = "conflict"

    @property
    def should_write(self) -> bool:
        return self in _WRITING

    @property
    def action(self) -> str:
        """Verb used when logging this decision."""
        return _ACTIONS[self]


_WRITING = frozenset({Decision.CREATE, Decision.RECREATE, Decision.UPDATE, Decision.OVERWRITE})

_ACTIONS = {
    Decision.CREATE: "creating",
    Decision.RECREATE: "recreating",
    Decision.UPDATE: "updating",
    Decision.OVERWRITE: "overwriting",
    Decision.SKIP: "skipped",
    Decision.CONFLICT: "conflict",
}


@dataclass(slots=True, frozen=True)
class NotTracked:
    """The ledger has no entry for the path."""


@dataclass(slots=True, frozen=True)
class Tracked:
    """The ledger has an entry; the flags are computed independently."""

    file_exists: bool
    user_modified: bool
    template_changed: bool
    scheme_changed: bool


FileStatus = NotTracked | Tracked


def decide(status: FileStatus, mode: WriteMode) -> Decision:
    """Return the action to take for one output file.

    A missing file is always recreated. User edits win over template and
    scheme changes: they conflict under ``SMART``, are overwritten under
    ``FORCE`` and left alone under ``SKIP``. ``SKIP`` never touches an
    existing tracked file.
    """

    if isinstance(status, NotTracked):
        return Decision.CREATE
    if not status.file_exists:
        return Decision.RECREATE
    if status.user_modified:
        if mode is WriteMode.FORCE:
            return Decision.OVERWRITE
        if mode is WriteMode.SMART:
            return Decision.CONFLICT
        return Decision.SKIP
    if mode is WriteMode.SKIP or not (status.template_changed or status.scheme_changed):
        return Decision.SKIP
    return Decision.UPDATE
