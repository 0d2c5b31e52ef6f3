#!/usr/bin/env python3

"""
Blog builder - converts markdown posts to HTML pages

Every ``*.md`` file in the content directory is rendered to a sibling
``*.html`` file. The ``local`` profile additionally rewrites the site's
canonical URL to a ``file://`` URL so the pages can be browsed offline.
"""

import argparse
import logging
import shlex
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path

from .config import DEFAULT_CANONICAL_PREFIX, DEFAULT_SOURCE_DIR, DEFAULT_STYLESHEET, SiteConfig
from .convert import Converter, command_converter, markdown_converter
from .exceptions import BuildError, ConversionError, MissingStylesheetError, RewriteIOError

logger = logging.getLogger(__name__)


def discover_sources(source_dir: Path, source_suffix: str = ".md") -> list[Path]:
    """Return the source documents directly inside source_dir, sorted by name."""
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        logger.warning("Source directory %s does not exist", source_dir)
        return []
    return sorted(p for p in source_dir.glob(f"*{source_suffix}") if p.is_file())


def output_path_for(source: Path, output_suffix: str = ".html") -> Path:
    """Map a source document to the sibling path its HTML is written to."""
    return Path(source).with_suffix(output_suffix)


def extract_title(text: str) -> str | None:
    """Return the text of the first '# ' heading line, or None if there is none."""
    for line in text.splitlines():
        if line.startswith("# "):
            return line[2:]
    return None


class BlogConverter:
    def __init__(self, converter: Converter | None = None, stylesheet: Path | None = None):
        self.converter = converter or markdown_converter()
        self.stylesheet = Path(stylesheet) if stylesheet is not None else None
        self._style: str | None = None

        self.html_template = (
            "<!doctype html><html lang=en><head><meta charset=utf-8><title>\n"
            "{title}"
            "</title>\n"
            "{style}"
            "</head><body>\n"
            "{content}"
            "</body></html>\n"
        )

    def load_stylesheet(self) -> str:
        """Read the stylesheet once; its contents are embedded verbatim in every page."""
        if self._style is None:
            if self.stylesheet is None:
                raise ValueError("No stylesheet configured")
            try:
                self._style = self.stylesheet.read_bytes().decode("utf-8", errors="surrogateescape")
            except OSError as exc:
                raise MissingStylesheetError(self.stylesheet) from exc
        return self._style

    def convert_text(self, text: str, source: Path | None = None) -> str:
        """Run the markdown converter, reporting any failure against source."""
        try:
            return self.converter(text)
        except ConversionError as exc:
            if exc.source is not None or source is None:
                raise
            raise ConversionError(source, exc.reason) from exc
        except Exception as exc:
            raise ConversionError(source, exc) from exc

    def render_page(self, text: str, source: Path | None = None) -> str:
        """Wrap converted markdown in the page shell with title and stylesheet."""
        title = extract_title(text)
        content = self.convert_text(text, source)
        if content and not content.endswith("\n"):
            content += "\n"
        return self.html_template.format(
            title="" if title is None else f"{title}\n",
            style=self.load_stylesheet(),
            content=content,
        )

    def convert_file(self, input_path: Path, output_path: Path, shell: bool = True) -> Path:
        """Convert one markdown file and write the result to output_path."""
        try:
            text = input_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConversionError(input_path, exc) from exc

        if shell:
            html = self.render_page(text, input_path)
        else:
            html = self.convert_text(text, input_path)

        try:
            output_path.write_text(html, encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise ConversionError(input_path, exc) from exc
        logger.info("Created %s", output_path)
        return output_path


def _run_per_file(
    paths: Iterable[Path],
    task: Callable[[Path], Path],
    jobs: int = 1,
    keep_going: bool = False,
) -> set[Path]:
    """Apply task to every path.

    Stops at the first BuildError unless keep_going is set, in which case all
    paths are attempted and the failures are reported together at the end.
    Files finished before a failure stay on disk.
    """
    paths = list(paths)
    done: set[Path] = set()
    failures: list[BuildError] = []

    if jobs <= 1:
        for path in paths:
            try:
                done.add(task(path))
            except BuildError as exc:
                if not keep_going:
                    raise
                logger.error("%s", exc)
                failures.append(exc)
    else:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = [executor.submit(task, path) for path in paths]
            if not keep_going:
                finished, _ = wait(futures, return_when=FIRST_EXCEPTION)
                for future in futures:
                    if future in finished and future.exception() is not None:
                        executor.shutdown(wait=True, cancel_futures=True)
                        raise future.exception()
            for future in futures:
                try:
                    done.add(future.result())
                except BuildError as exc:
                    if not keep_going:
                        raise
                    logger.error("%s", exc)
                    failures.append(exc)

    if failures:
        if len(failures) == 1:
            raise failures[0]
        sources = ", ".join(str(getattr(f, "source", f)) for f in failures)
        raise ConversionError(None, f"{len(failures)} files failed: {sources}")
    return done


def _build(
    source_dir: Path,
    blog: BlogConverter,
    shell: bool,
    source_suffix: str,
    output_suffix: str,
    jobs: int,
    keep_going: bool,
) -> set[Path]:
    sources = discover_sources(source_dir, source_suffix)
    logger.debug("Found %d source documents in %s", len(sources), source_dir)

    def task(source: Path) -> Path:
        return blog.convert_file(source, output_path_for(source, output_suffix), shell=shell)

    return _run_per_file(sources, task, jobs=jobs, keep_going=keep_going)


def build(
    source_dir: Path,
    converter: Converter | None = None,
    source_suffix: str = ".md",
    output_suffix: str = ".html",
    jobs: int = 1,
    keep_going: bool = False,
) -> set[Path]:
    """Write the raw converter output for every source document."""
    blog = BlogConverter(converter)
    return _build(Path(source_dir), blog, False, source_suffix, output_suffix, jobs, keep_going)


def build_with_shell(
    source_dir: Path,
    stylesheet: Path = DEFAULT_STYLESHEET,
    converter: Converter | None = None,
    source_suffix: str = ".md",
    output_suffix: str = ".html",
    jobs: int = 1,
    keep_going: bool = False,
) -> set[Path]:
    """Write a complete HTML page (title, stylesheet, body) for every source document."""
    blog = BlogConverter(converter, stylesheet)
    # Fail before touching any output if the stylesheet is missing
    blog.load_stylesheet()
    return _build(Path(source_dir), blog, True, source_suffix, output_suffix, jobs, keep_going)


def _rewrite_file(path: Path, canonical_prefix: str, local_prefix: str) -> Path:
    try:
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        raise RewriteIOError(path, exc) from exc

    # Plain text substitution: prefixes in visible prose are rewritten as well
    rewritten = text.replace(canonical_prefix, local_prefix)
    if rewritten != text:
        try:
            path.write_text(rewritten, encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise RewriteIOError(path, exc) from exc
        logger.debug("Rewrote links in %s", path)
    return path


def rewrite_for_local_preview(
    output_paths: Iterable[Path],
    canonical_prefix: str,
    local_prefix: str,
    jobs: int = 1,
) -> None:
    """Replace every occurrence of canonical_prefix with local_prefix, in place."""
    if not canonical_prefix:
        raise ValueError("canonical_prefix must not be empty")

    def task(path: Path) -> Path:
        return _rewrite_file(Path(path), canonical_prefix, local_prefix)

    _run_per_file(output_paths, task, jobs=jobs)


def clean(source_dir: Path, output_suffix: str = ".html") -> None:
    """Delete every rendered document under source_dir. Missing files are not an error."""
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        return
    for path in sorted(source_dir.rglob(f"*{output_suffix}")):
        if not path.is_file():
            continue
        path.unlink(missing_ok=True)
        logger.info("removed '%s'", path)


def build_site(config: SiteConfig, local: bool = False) -> set[Path]:
    """Build the site as configured; with local, rewrite links for offline preview."""
    if config.converter_command:
        converter = command_converter(config.converter_command)
    else:
        converter = markdown_converter()

    outputs = build_with_shell(
        config.source_dir,
        config.stylesheet,
        converter=converter,
        source_suffix=config.source_suffix,
        output_suffix=config.output_suffix,
        jobs=config.jobs,
        keep_going=config.keep_going,
    )
    if local:
        rewrite_for_local_preview(
            sorted(outputs),
            config.canonical_prefix,
            config.resolved_local_prefix(),
            jobs=config.jobs,
        )
    return outputs


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert markdown blog posts to HTML pages.")
    parser.add_argument(
        "command",
        nargs="?",
        default="build",
        choices=["build", "deploy", "local", "clean"],
        help="build/deploy: render pages; local: render and point links at local files; "
        "clean: delete rendered pages (default: build)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=DEFAULT_SOURCE_DIR,
        help="Directory holding the markdown posts (default: %(default)s)",
    )
    parser.add_argument(
        "--stylesheet",
        type=Path,
        default=DEFAULT_STYLESHEET,
        help="Stylesheet embedded in every page (default: %(default)s)",
    )
    parser.add_argument(
        "--canonical-prefix",
        default=DEFAULT_CANONICAL_PREFIX,
        help="Production URL prefix replaced in local mode (default: %(default)s)",
    )
    parser.add_argument(
        "--local-prefix",
        default=None,
        help="Replacement prefix in local mode (default: file:// URL of the source directory)",
    )
    parser.add_argument("-j", "--jobs", type=int, default=1, help="Number of files to convert in parallel")
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="Convert the remaining files after a failure instead of stopping",
    )
    parser.add_argument(
        "--converter",
        default=None,
        help="External command used instead of the markdown library, e.g. 'markdown'",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        config = SiteConfig(
            source_dir=args.source_dir,
            stylesheet=args.stylesheet,
            canonical_prefix=args.canonical_prefix,
            local_prefix=args.local_prefix,
            jobs=args.jobs,
            keep_going=args.keep_going,
            converter_command=shlex.split(args.converter) if args.converter else None,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.command == "clean":
        clean(config.source_dir, config.output_suffix)
        return 0

    try:
        outputs = build_site(config, local=args.command == "local")
    except BuildError as exc:
        logger.error("%s", exc)
        return 1
    logger.debug("Built %d pages", len(outputs))
    return 0


if __name__ == "__main__":
    sys.exit(main())
