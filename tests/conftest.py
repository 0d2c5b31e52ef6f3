"""Shared fixtures for the builder tests."""

from pathlib import Path

import pytest

STYLE = "<style>body { max-width: 40em; }</style>\n"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A project root with a content directory and a stylesheet."""
    (tmp_path / "src").mkdir()
    (tmp_path / "style.css").write_text(STYLE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def content_dir(site: Path) -> Path:
    src = site / "src"
    (src / "hello.md").write_text("# Hello\nSome *text*.\n", encoding="utf-8")
    (src / "links.md").write_text(
        "# Links\n\nSee [the index](https://thomasnyberg.com/index.html) "
        "or visit https://thomasnyberg.com directly.\n",
        encoding="utf-8",
    )
    return src


@pytest.fixture
def upper_converter():
    """A converter that needs no markdown parsing, for exact output checks."""

    def convert(text: str) -> str:
        return f"<pre>{text.upper()}</pre>\n"

    return convert
