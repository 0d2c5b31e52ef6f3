"""Exceptions raised while building the site."""

from pathlib import Path


class BuildError(Exception):
    """Base exception for all build failures."""


class ConversionError(BuildError):
    """Raised when a source document could not be converted to HTML."""

    def __init__(self, source: Path | None, reason: str | Exception) -> None:
        self.source = source
        self.reason = reason
        if source is None:
            super().__init__(f"Conversion failed: {reason}")
        else:
            super().__init__(f"Failed to convert '{source}': {reason}")


class MissingStylesheetError(BuildError, FileNotFoundError):
    """Raised when the stylesheet to embed in each page does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Stylesheet not found: '{path}'")

    def __str__(self) -> str:
        return f"Stylesheet not found: '{self.path}'"


class RewriteIOError(BuildError, OSError):
    """Raised when a rendered page could not be read or written during link rewriting."""

    def __init__(self, path: Path, reason: str | Exception) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not rewrite links in '{path}': {reason}")

    def __str__(self) -> str:
        return f"Could not rewrite links in '{self.path}': {self.reason}"
