from __future__ import annotations

import pytest

from hueforge.errors import CircularReference, MissingRequiredRoles, UndefinedRole, UndefinedSwatch
from hueforge.roles import (
    VOCABULARY,
    RoleKind,
    RoleRef,
    RoleResolver,
    RoleVocabulary,
    SwatchRef,
    parse_role_value,
    resolve_roles,
)
from hueforge.swatches import parse_palette

PALETTE = parse_palette({"black": "#000000", "white": "#ffffff", "red": "#ff0000"})


def _small_roles() -> dict:
    return {
        "bg": SwatchRef("black"),
        "fg": SwatchRef("white"),
        "syntax.keyword": SwatchRef("red"),
    }


def test_vocabulary_classification(small_vocab: RoleVocabulary) -> None:
    assert small_vocab.classify("bg") is RoleKind.BASE
    assert small_vocab.classify("bg_alt") is RoleKind.OPTIONAL
    assert small_vocab.base_of("bg_alt_deep") == "bg_alt"
    assert small_vocab.group_of("syntax.keyword_fn") == "syntax"
    assert small_vocab.group_of("fg") is None
    info = small_vocab.info("syntax.keyword_fn")
    assert info.group == "syntax"
    assert info.base == "syntax.keyword"
    assert small_vocab.base_roles() == ("bg", "fg", "syntax.keyword")


def test_builtin_vocabulary() -> None:
    assert "bg" in VOCABULARY
    assert "ansi.white_bright" in VOCABULARY
    assert VOCABULARY.base_of("ansi.red_bright") == "ansi.red"
    with pytest.raises(UndefinedRole):
        VOCABULARY.info("nope")


@pytest.mark.parametrize("names", [["bg_alt"], ["bg", "bg"], ["a.b.c"]])
def test_invalid_vocabulary(names: list[str]) -> None:
    with pytest.raises(ValueError):
        RoleVocabulary(names)


def test_parse_role_value(small_vocab: RoleVocabulary) -> None:
    assert parse_role_value("$black", small_vocab) == SwatchRef("black")
    assert parse_role_value("fg", small_vocab) == RoleRef("fg")
    with pytest.raises(UndefinedRole):
        parse_role_value("nope", small_vocab)
    with pytest.raises(UndefinedRole):
        parse_role_value("$", small_vocab)


def test_resolution_is_deterministic(small_vocab: RoleVocabulary) -> None:
    first = resolve_roles(_small_roles(), PALETTE, small_vocab)
    second = resolve_roles(_small_roles(), PALETTE, small_vocab)
    assert first == second
    assert list(first) == list(small_vocab)


def test_role_reference(small_vocab: RoleVocabulary) -> None:
    roles = {**_small_roles(), "fg_alt": RoleRef("syntax.keyword")}
    resolved = resolve_roles(roles, PALETTE, small_vocab)
    assert resolved["fg_alt"].hex == "#ff0000"
    assert resolved["fg_alt"].swatch == "red"


def test_optional_chain_falls_back_to_base(small_vocab: RoleVocabulary) -> None:
    resolved = resolve_roles(_small_roles(), PALETTE, small_vocab)
    assert resolved["bg_alt"] == resolved["bg"]
    assert resolved["bg_alt_deep"] == resolved["bg"]
    assert resolved["syntax.keyword_fn"] == resolved["syntax.keyword"]


def test_optional_chain_stops_at_first_set_role(small_vocab: RoleVocabulary) -> None:
    roles = {**_small_roles(), "bg_alt": SwatchRef("red")}
    resolved = resolve_roles(roles, PALETTE, small_vocab)
    assert resolved["bg_alt_deep"].swatch == "red"


def test_cycle_reports_chain() -> None:
    vocab = RoleVocabulary(["a", "b"])
    roles = {"a": RoleRef("b"), "b": RoleRef("a")}
    with pytest.raises(CircularReference) as exc:
        resolve_roles(roles, PALETTE, vocab)
    assert exc.value.chain == ["a", "b", "a"]
    assert "`a` -> `b` -> `a`" in str(exc.value)


def test_self_reference() -> None:
    vocab = RoleVocabulary(["a"])
    with pytest.raises(CircularReference) as exc:
        RoleResolver({"a": RoleRef("a")}, PALETTE, vocab).resolve("a")
    assert exc.value.chain == ["a", "a"]


def test_cycle_through_fallback_terminates() -> None:
    vocab = RoleVocabulary(["bg", "bg_alt"])
    with pytest.raises(CircularReference) as exc:
        resolve_roles({"bg": RoleRef("bg_alt")}, PALETTE, vocab)
    assert exc.value.chain == ["bg", "bg_alt", "bg"]


def test_undefined_swatch(small_vocab: RoleVocabulary) -> None:
    roles = {**_small_roles(), "bg": SwatchRef("nope")}
    with pytest.raises(UndefinedSwatch) as exc:
        resolve_roles(roles, PALETTE, small_vocab)
    assert exc.value.role == "bg"
    assert exc.value.swatch == "nope"


def test_one_missing_role_reported() -> None:
    roles = {role: SwatchRef("black") for role in VOCABULARY.base_roles() if role != "fg"}
    with pytest.raises(MissingRequiredRoles) as exc:
        resolve_roles(roles, PALETTE)
    assert exc.value.missing == ["fg"]


def test_all_missing_roles_reported_together() -> None:
    vocab = RoleVocabulary(["a", "b", "c", "d"])
    with pytest.raises(MissingRequiredRoles) as exc:
        resolve_roles({"d": SwatchRef("black")}, PALETTE, vocab)
    assert exc.value.missing == ["a", "b", "c"]
    assert str(exc.value) == "missing required roles: a, b, c"


def test_full_vocabulary_resolves() -> None:
    roles = {role: SwatchRef("black") for role in VOCABULARY.base_roles()}
    resolved = resolve_roles(roles, PALETTE)
    assert len(resolved) == len(VOCABULARY)
    assert all(r.hex == "#000000" for r in resolved.values())
