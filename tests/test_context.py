from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from hueforge.context import (
    SET_SENTINEL,
    ColorKind,
    ColorStyle,
    RenderStyle,
    TextStyle,
    UpstreamLinks,
    build_context,
)
from hueforge.errors import InternalBug
from hueforge.roles import RoleVocabulary
from hueforge.schemes import Scheme, load


@pytest.fixture
def scheme(write_scheme: Callable[..., Path], small_vocab: RoleVocabulary) -> Scheme:
    path = write_scheme(
        "rose",
        {"black": "#000", "Crème": "#fffdd0"},
        {"bg": "$black", "fg": "$Crème", "syntax.keyword": "fg"},
        name="Rosé",
        meta={"author": "Zoë"},
    )
    return load("rose", path, small_vocab)


def test_roles_render_as_hex_by_default(scheme: Scheme) -> None:
    ctx = build_context(scheme)
    assert str(ctx["bg"]) == "#000000"
    assert ctx["bg"].kind is ColorKind.ROLE
    assert ctx["bg"].rgb == (0, 0, 0)
    assert ctx["fg"].swatch == "Crème"
    assert ctx["fg"].swatch_ascii == "Creme"
    assert ctx["syntax"]["keyword_fn"].hex == "#fffdd0"
    assert ctx["scheme"] == "Rosé"
    assert ctx["scheme_ascii"] == "Rose"
    assert ctx["meta"]["author"] == "Zoë"


def test_name_style(scheme: Scheme) -> None:
    ctx = build_context(scheme, RenderStyle(color=ColorStyle.NAME))
    assert str(ctx["fg"]) == "Crème"
    ascii_ctx = build_context(scheme, RenderStyle(color=ColorStyle.NAME, text=TextStyle.ASCII))
    assert str(ascii_ctx["fg"]) == "Creme"
    assert ascii_ctx["scheme"] == "Rose"
    assert ascii_ctx["meta"]["author"] == "Zoe"


def test_palette_lists_roles_per_swatch(scheme: Scheme) -> None:
    palette = build_context(scheme)["palette"]
    assert [s.name for s in palette] == ["black", "Crème"]
    assert palette[0].kind is ColorKind.SWATCH
    assert "bg" in palette[0].roles
    assert "bg_alt_deep" in palette[0].roles
    assert "syntax.keyword" in palette[1].roles
    assert palette[1].rf == pytest.approx(1.0)
    assert (palette[0].rf, palette[0].gf, palette[0].bf) == (0.0, 0.0, 0.0)


def test_current_swatch_and_special(scheme: Scheme) -> None:
    links = UpstreamLinks(upstream_file="https://x/blob/main/a", upstream_repo="https://x")
    ctx = build_context(scheme, upstream=links, swatch="black")
    assert ctx["swatch"].hex == "#000000"
    assert ctx["special"] == {"upstream_file": "https://x/blob/main/a", "upstream_repo": "https://x"}
    assert build_context(scheme)["special"] == {"upstream_file": "", "upstream_repo": ""}


def test_set_sentinel(scheme: Scheme) -> None:
    assert build_context(scheme)[SET_SENTINEL] == ["bg", "fg", "syntax.keyword"]


def test_unknown_swatch_is_a_bug(scheme: Scheme) -> None:
    with pytest.raises(InternalBug, match="this is a bug"):
        build_context(scheme, swatch="nope")
