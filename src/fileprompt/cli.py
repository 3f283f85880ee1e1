"""
CLI entrypoint for fileprompt package.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from . import __version__
from .console import Console
from .core import (
    load_extra_patterns,
    open_output,
    validate_roots,
    write_prompt,
    InvalidRootError,
    ConfigFileError,
    OutputError,
)
from .formats import DEFAULT_SEPARATOR, FormatOptions, FormatStyle
from .walker import WalkOptions


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="fileprompt",
        description=(
            "Concatenate files and directory trees into a single prompt for a "
            "large language model. Reads paths from stdin when none are given."
        ),
    )
    p.add_argument("paths", nargs="*", metavar="PATH", help="Files or directories to include")
    p.add_argument(
        "-e",
        "--extension",
        dest="extensions",
        action="append",
        default=[],
        metavar="EXT",
        help="Only include files with this extension (repeatable)",
    )
    p.add_argument(
        "--include-hidden",
        action="store_true",
        help="Include files and folders starting with '.'",
    )
    p.add_argument(
        "--ignore",
        dest="ignore_patterns",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern to exclude (repeatable)",
    )
    p.add_argument(
        "--ignore-files-only",
        action="store_true",
        help="Only match ignore patterns against files; directories are pruned by trailing-'/' patterns only",
    )
    p.add_argument(
        "--ignore-gitignore",
        action="store_true",
        help="Do not read .gitignore / .ignore files or git's exclude files",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    fmt = p.add_mutually_exclusive_group()
    fmt.add_argument("-c", "--cxml", action="store_true", help="Output in Claude XML format")
    fmt.add_argument("-m", "--markdown", action="store_true", help="Output Markdown fenced code blocks")
    p.add_argument("-n", "--line-numbers", action="store_true", help="Prefix content lines with line numbers")
    p.add_argument(
        "--separator",
        default=DEFAULT_SEPARATOR,
        help=f"Separator line for the plain format (default {DEFAULT_SEPARATOR})",
    )
    p.add_argument("-o", "--output", type=Path, help="Write output to this file instead of stdout")
    p.add_argument(
        "-0",
        "--null",
        action="store_true",
        help="Paths on stdin are separated by NUL instead of newlines",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def read_stdin_paths(stream: TextIO, null_separator: bool = False) -> List[str]:
    """Split piped path lists on newlines (or NULs) and drop blanks."""
    separator = "\0" if null_separator else "\n"
    return [p.strip() for p in stream.read().split(separator) if p.strip()]


def utf8_stdout() -> TextIO:
    """Return stdout switched to UTF-8, whatever the locale or PYTHONIOENCODING says."""
    out = sys.stdout
    encoding = (getattr(out, "encoding", None) or "").lower().replace("-", "").replace("_", "")
    if encoding != "utf8" and hasattr(out, "reconfigure"):
        out.reconfigure(encoding="utf-8", errors="strict")
    return out


def _format_style(ns: argparse.Namespace) -> FormatStyle:
    if ns.cxml:
        return FormatStyle.XML
    if ns.markdown:
        return FormatStyle.MARKDOWN
    return FormatStyle.PLAIN


def main(argv: Optional[List[str]] = None) -> None:
    console = Console()
    try:
        ns = _parse_args(argv)
        console.verbose = ns.verbose

        paths: List[str] = list(ns.paths)
        if not paths and not sys.stdin.isatty():
            paths = read_stdin_paths(sys.stdin, ns.null)
        if not paths:
            print(
                "No input paths provided either as arguments or via stdin. Use --help for usage.",
                file=sys.stderr,
            )
            return

        try:
            roots = validate_roots(paths)
        except InvalidRootError as e:
            console.error(str(e))
            sys.exit(1)

        extra_patterns: List[str] = []
        if ns.config:
            try:
                extra_patterns = load_extra_patterns(ns.config.resolve())
                console.info(f"Loaded extra patterns from {ns.config}")
            except ConfigFileError as e:
                console.error(str(e))
                sys.exit(1)

        walk_options = WalkOptions(
            extensions=frozenset(ns.extensions),
            include_hidden=ns.include_hidden,
            ignore_patterns=tuple(ns.ignore_patterns),
            ignore_files_only=ns.ignore_files_only,
            use_gitignore=not ns.ignore_gitignore,
        )
        format_options = FormatOptions(
            style=_format_style(ns),
            line_numbers=ns.line_numbers,
            separator=ns.separator,
        )

        try:
            out_fh = open_output(ns.output) if ns.output else utf8_stdout()
        except OutputError as e:
            console.error(str(e))
            sys.exit(1)

        try:
            stats = write_prompt(
                roots,
                out_fh,
                walk_options=walk_options,
                format_options=format_options,
                console=console,
                extra_patterns=extra_patterns,
            )
        except OSError as e:
            console.error(f"Could not write output: {e}")
            sys.exit(1)
        finally:
            if out_fh is not sys.stdout:
                out_fh.close()

        if ns.output:
            console.done(f"Wrote {ns.output}")
        if stats.all_roots_failed:
            console.error("No file could be read from any of the given paths")
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
