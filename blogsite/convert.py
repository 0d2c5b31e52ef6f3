"""Markdown to HTML converters.

A converter is any callable taking markdown text and returning an HTML
fragment. The builder wraps whatever a converter raises in a
``ConversionError`` for the file being processed.
"""

import logging
import subprocess
from collections.abc import Callable, Sequence

import markdown

from .exceptions import ConversionError

logger = logging.getLogger(__name__)

Converter = Callable[[str], str]


def markdown_converter(extensions: Sequence[str] = ("extra",)) -> Converter:
    """Return a converter backed by the Python-Markdown library."""
    extensions = list(extensions)

    def convert(text: str) -> str:
        # Markdown instances keep per-document state, so use a fresh one per call
        md = markdown.Markdown(extensions=extensions)
        return md.convert(text)

    return convert


def command_converter(argv: Sequence[str]) -> Converter:
    """Return a converter that pipes markdown through an external program.

    The program reads markdown on stdin and writes HTML to stdout, like the
    ``markdown`` command line tool.
    """
    argv = list(argv)
    if not argv:
        raise ValueError("converter command must not be empty")

    def convert(text: str) -> str:
        logger.debug("Running %s", " ".join(argv))
        try:
            result = subprocess.run(
                argv,
                input=text,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConversionError(None, f"could not run {argv[0]!r}: {exc}") from exc
        if result.returncode != 0:
            stderr = result.stderr.strip()
            reason = f"{argv[0]} exited with status {result.returncode}"
            if stderr:
                reason += f": {stderr}"
            raise ConversionError(None, reason)
        return result.stdout

    return convert
