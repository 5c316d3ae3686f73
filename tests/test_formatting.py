from __future__ import annotations

from pathlib import Path

import pytest

from hueforge.errors import FormattingError
from hueforge.formatting import format_content


def test_json_is_reindented() -> None:
    assert format_content(Path("a.json"), '{"a": [1,2],   "b": "é"}') == (
        '{\n  "a": [\n    1,\n    2\n  ],\n  "b": "é"\n}\n'
    )


def test_jsonc_keeps_comments() -> None:
    text = '{\n  // bg\n  "bg": "#000",  \n}'
    assert format_content(Path("a.jsonc"), text) == '{\n  // bg\n  "bg": "#000",\n}\n'


def test_toml_keeps_layout() -> None:
    text = "#:tombi format.disabled = true\n\n[colors]   \nbg = '#000'\n\n\n"
    assert format_content(Path("a.toml"), text) == (
        "#:tombi format.disabled = true\n\n[colors]\nbg = '#000'\n"
    )


def test_markdown_hard_breaks_and_blank_runs() -> None:
    text = "# Title\n\n\n\nline one  \nline two\t\n"
    assert format_content(Path("a.md"), text) == "# Title\n\nline one\\\nline two\n"


def test_xml_is_validated() -> None:
    assert format_content(Path("a.svg"), "<svg>  \n</svg>") == "<svg>\n</svg>\n"
    with pytest.raises(FormattingError, match="invalid xml"):
        format_content(Path("a.xml"), "<a>")


@pytest.mark.parametrize(("name", "text"), [("a.json", "{nope"), ("a.toml", "a = ")])
def test_invalid_input(name: str, text: str) -> None:
    with pytest.raises(FormattingError, match=name):
        format_content(Path(name), text)


def test_unsupported_type_is_untouched() -> None:
    assert format_content(Path("a.conf"), "x  \n\n\n") == "x  \n\n\n"
