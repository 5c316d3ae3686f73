from __future__ import annotations

import itertools

import pytest

from hueforge.strategy import Decision, NotTracked, Tracked, WriteMode, decide

FLAGS = list(itertools.product([False, True], repeat=4))


def _expected(status: Tracked, mode: WriteMode) -> Decision:
    if not status.file_exists:
        return Decision.RECREATE
    if status.user_modified:
        return {
            WriteMode.FORCE: Decision.OVERWRITE,
            WriteMode.SMART: Decision.CONFLICT,
            WriteMode.SKIP: Decision.SKIP,
        }[mode]
    if not (status.template_changed or status.scheme_changed):
        return Decision.SKIP
    return Decision.SKIP if mode is WriteMode.SKIP else Decision.UPDATE


@pytest.mark.parametrize("mode", list(WriteMode))
@pytest.mark.parametrize(("exists", "modified", "template_changed", "scheme_changed"), FLAGS)
def test_decision_table(
    exists: bool, modified: bool, template_changed: bool, scheme_changed: bool, mode: WriteMode
) -> None:
    status = Tracked(
        file_exists=exists,
        user_modified=modified,
        template_changed=template_changed,
        scheme_changed=scheme_changed,
    )
    decision = decide(status, mode)
    assert isinstance(decision, Decision)
    assert decision is _expected(status, mode)


@pytest.mark.parametrize("mode", list(WriteMode))
def test_untracked_is_created(mode: WriteMode) -> None:
    assert decide(NotTracked(), mode) is Decision.CREATE


def test_should_write() -> None:
    writing = {d for d in Decision if d.should_write}
    assert writing == {Decision.CREATE, Decision.RECREATE, Decision.UPDATE, Decision.OVERWRITE}


def test_action_verbs() -> None:
    assert [d.action for d in Decision] == [
        "creating",
        "recreating",
        "updating",
        "overwriting",
        "skipped",
        "conflict",
    ]
