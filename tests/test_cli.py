"""Tests for the build-blog command line."""

import logging
import sys

import pytest

from blogsite.build import main, parse_args


@pytest.fixture
def in_site(site, content_dir, monkeypatch):
    monkeypatch.chdir(site)
    return site


def test_default_command_is_build():
    assert parse_args([]).command == "build"


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        parse_args(["publish"])


@pytest.mark.parametrize("command", ["build", "deploy"])
def test_build_writes_pages(in_site, command):
    assert main([command]) == 0
    html = (in_site / "src" / "links.html").read_text(encoding="utf-8")
    assert html.startswith("<!doctype html>")
    assert "https://thomasnyberg.com/index.html" in html


def test_build_logs_created_files(in_site, caplog):
    with caplog.at_level(logging.INFO):
        assert main([]) == 0
    assert any("Created" in message and "hello.html" in message for message in caplog.messages)


def test_local_rewrites_to_source_dir(in_site):
    assert main(["local"]) == 0
    html = (in_site / "src" / "links.html").read_text(encoding="utf-8")
    local = f"file://{(in_site / 'src').resolve().as_posix()}"
    assert "https://thomasnyberg.com" not in html
    assert f'href="{local}/index.html"' in html


def test_local_with_custom_prefixes(in_site):
    assert main(["local", "--local-prefix", "file:///preview"]) == 0
    assert "file:///preview/index.html" in (in_site / "src" / "links.html").read_text(encoding="utf-8")


def test_clean_removes_pages(in_site):
    assert main(["build"]) == 0
    assert main(["clean"]) == 0
    assert not list((in_site / "src").glob("*.html"))
    assert main(["clean"]) == 0


def test_missing_stylesheet_exits_nonzero(in_site, caplog):
    assert main(["build", "--stylesheet", "nope.css"]) == 1
    assert any("Stylesheet not found" in message for message in caplog.messages)


def test_failing_converter_exits_nonzero(in_site):
    failing = f"{sys.executable} -c 'import sys; sys.exit(1)'"
    assert main(["build", "--converter", failing]) == 1


def test_external_converter(in_site):
    echo = f"{sys.executable} -c 'import sys; sys.stdout.write(sys.stdin.read())'"
    assert main(["build", "--converter", echo, "--jobs", "2"]) == 0
    html = (in_site / "src" / "hello.html").read_text(encoding="utf-8")
    assert "Some *text*." in html


def test_invalid_jobs(in_site):
    assert main(["build", "--jobs", "0"]) == 2


def test_undecodable_source_exits_nonzero(in_site, caplog):
    (in_site / "src" / "latin1.md").write_bytes(b"# Caf\xe9\n")
    assert main(["build"]) == 1
    assert any("latin1.md" in message for message in caplog.messages)


def test_latin1_stylesheet_builds(in_site):
    (in_site / "style.css").write_bytes(b"/* \xa9 me */\n")
    assert main(["local"]) == 0
    assert b"/* \xa9 me */\n" in (in_site / "src" / "hello.html").read_bytes()
