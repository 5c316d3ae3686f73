from __future__ import annotations

from pathlib import Path

import pytest

from hueforge.config import CONFIG_FILENAME, load_config
from hueforge.errors import ConfigError


def test_defaults_without_file(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.schemes_dir == tmp_path / "schemes"
    assert config.templates_dir == tmp_path / "templates"
    assert config.render_dir == tmp_path / "render"
    assert config.upstream is None
    assert config.strip_directives == [["#:tombi", "lint.disabled", "=", "true"]]
    assert config.manifest_path == tmp_path / ".hueforge" / "manifest.json"


def test_full_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("DOTS", "dotfiles")
    (tmp_path / CONFIG_FILENAME).write_text(
        """
strip_directives = [["# vim:"]]

[dirs]
schemes = "palettes"
render = "~/out"

[upstream]
repo_path = "~/src/$DOTS"
pattern = "{base}/tree/{branch}/{file}"
branch = "trunk"
""",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.schemes_dir == tmp_path / "palettes"
    assert config.templates_dir == tmp_path / "templates"
    assert config.render_dir == tmp_path / "home" / "out"
    assert config.upstream is not None
    assert config.upstream.repo_path == tmp_path / "home" / "src" / "dotfiles"
    assert config.upstream.branch == "trunk"
    assert config.strip_directives == [["# vim:"]]


@pytest.mark.parametrize(
    ("text", "match"),
    [
        ("[dirs\n", "failed to parse"),
        ("[dirs]\noutput = 'x'\n", "dirs.output"),
        ("nope = 1\n", "nope"),
        ("strip_directives = 'x'\n", "strip_directives"),
    ],
)
def test_invalid_config(tmp_path: Path, text: str, match: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match=match):
        load_config(tmp_path)
