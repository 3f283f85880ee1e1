"""
Core logic for fileprompt package.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO

from .console import Console
from .formats import FormatOptions, make_formatter
from .ignore import PatternSet
from .walker import WalkOptions, walk


# Exceptions
class FilepromptError(Exception): ...
class InvalidRootError(FilepromptError): ...
class ConfigFileError(FilepromptError): ...
class OutputError(FilepromptError): ...
class FileReadError(FilepromptError): ...


# Input helpers
def validate_roots(roots: Sequence[str]) -> List[str]:
    """Fail fast on roots that do not exist, before any traversal work."""
    if not roots:
        raise InvalidRootError("No input paths provided")
    for root in roots:
        if not Path(root).exists():
            raise InvalidRootError(f"Path does not exist: {root}")
    return list(roots)


def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated ignore patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.rstrip("\r\n")
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def read_text(path: Path) -> str:
    """Return the UTF-8 text of *path* or raise :class:`FileReadError`."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileReadError(f"Error reading: {e}")
    if _is_binary(raw):
        raise FileReadError("Binary content")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise FileReadError("Not valid UTF-8")


def open_output(out_path: Path) -> TextIO:
    """Open *out_path* for writing, creating parent directories as needed."""
    try:
        out_path = out_path.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")

    try:
        return out_path.open("w", encoding="utf-8", newline="\n")
    except OSError as e:
        raise OutputError(f"Could not open output file '{out_path}': {e}")


# Run summary
@dataclass
class RunStats:
    written: int = 0
    skipped: List[str] = field(default_factory=list)
    per_root: Dict[str, List[int]] = field(default_factory=lambda: defaultdict(lambda: [0, 0]))

    def record(self, root: str, ok: bool, display_path: str = "") -> None:
        counts = self.per_root[root]
        if ok:
            self.written += 1
            counts[0] += 1
        else:
            self.skipped.append(display_path)
            counts[1] += 1

    def seed(self, roots: Sequence[str]) -> None:
        for root in roots:
            self.per_root.setdefault(root, [0, 0])

    @property
    def all_roots_failed(self) -> bool:
        """True when every requested root had unreadable files and no readable ones."""
        if not self.per_root:
            return False
        return all(written == 0 and skipped > 0 for written, skipped in self.per_root.values())


# Main writer
def write_prompt(
    roots: Sequence[str],
    out_fh: TextIO,
    walk_options: Optional[WalkOptions] = None,
    format_options: Optional[FormatOptions] = None,
    console: Optional[Console] = None,
    extra_patterns: Sequence[str] = (),
) -> RunStats:
    """Walk *roots* and write every included file to *out_fh*."""
    walk_options = walk_options or WalkOptions()
    format_options = format_options or FormatOptions()
    console = console or Console()

    global_patterns = PatternSet.from_lines(
        list(walk_options.ignore_patterns) + list(extra_patterns), console=console
    )
    formatter = make_formatter(format_options)
    stats = RunStats()
    stats.seed(roots)

    console.info(f"Scanning {', '.join(roots)} …")
    out_fh.write(formatter.prologue())
    for item in walk(roots, walk_options, console, global_patterns):
        try:
            text = read_text(item.path)
        except FileReadError as e:
            console.warn(f"Skipping file {item.display_path} - {e}")
            stats.record(item.root, False, item.display_path)
            continue
        out_fh.write(formatter.render(item.display_path, text))
        stats.record(item.root, True)
    out_fh.write(formatter.epilogue())
    out_fh.flush()

    console.done(
        f"Done. {stats.written} files written, {len(stats.skipped)} skipped."
    )
    return stats
