"""Build settings for the blog site."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SOURCE_DIR = Path("src")
DEFAULT_STYLESHEET = Path("style.css")
DEFAULT_CANONICAL_PREFIX = "https://thomasnyberg.com"


@dataclass
class SiteConfig:
    source_dir: Path = DEFAULT_SOURCE_DIR
    stylesheet: Path = DEFAULT_STYLESHEET
    source_suffix: str = ".md"
    output_suffix: str = ".html"
    canonical_prefix: str = DEFAULT_CANONICAL_PREFIX
    local_prefix: str | None = None
    jobs: int = 1
    keep_going: bool = False
    converter_command: list[str] | None = None

    def __post_init__(self) -> None:
        self.source_dir = Path(self.source_dir)
        self.stylesheet = Path(self.stylesheet)
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")

    def resolved_local_prefix(self) -> str:
        """Return the prefix production URLs are rewritten to for local preview."""
        if self.local_prefix is not None:
            return self.local_prefix
        return f"file://{self.source_dir.resolve().as_posix()}"
