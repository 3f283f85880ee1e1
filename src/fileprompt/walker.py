"""
Depth-first traversal of the input roots.

``walk`` yields :class:`IncludedFile` records lazily, visiting each
directory's entries in name order so the output never depends on the
filesystem's own listing order.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .console import Console
from .ignore import PatternSet, Verdict, load_directory_rules, load_git_excludes

HIDDEN_MARKER = "."


def _normalize_extensions(extensions: Iterable[str]) -> FrozenSet[str]:
    return frozenset(e.strip().lstrip(".").lower() for e in extensions if e.strip().lstrip("."))


@dataclass(frozen=True)
class WalkOptions:
    extensions: FrozenSet[str] = frozenset()
    include_hidden: bool = False
    ignore_patterns: Tuple[str, ...] = ()
    ignore_files_only: bool = False
    use_gitignore: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", _normalize_extensions(self.extensions))
        object.__setattr__(self, "ignore_patterns", tuple(self.ignore_patterns))


@dataclass(frozen=True)
class IncludedFile:
    """A file that survived every filter."""

    display_path: str
    relative_path: str
    path: Path
    root: str


def display_path(root: str, relative: str = "") -> str:
    """Join *root* and *relative* the way users typed them, minus a leading ``./``."""
    joined = os.path.join(root, relative) if relative else root
    joined = joined.replace(os.sep, "/")
    while joined.startswith("./") and len(joined) > 2:
        joined = joined[2:].lstrip("/")
    return joined


def has_allowed_extension(name: str, extensions: FrozenSet[str]) -> bool:
    if not extensions:
        return True
    suffix = os.path.splitext(name)[1]
    return bool(suffix) and suffix[1:].lower() in extensions


@dataclass
class _Frame:
    directory: Path
    relative: str
    patterns: PatternSet
    entries: Iterator[os.DirEntry] = field(default_factory=lambda: iter(()))


class Walker:
    """Owns the walk state for one run: visited directories and the global rules."""

    def __init__(
        self,
        options: WalkOptions,
        global_patterns: Optional[PatternSet] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.options = options
        self.console = console or Console()
        if global_patterns is None:
            global_patterns = PatternSet.from_lines(options.ignore_patterns, console=self.console)
        self.global_patterns = global_patterns
        self._visited: Set[Tuple[int, int]] = set()

    def walk(self, roots: Sequence[str]) -> Iterator[IncludedFile]:
        for root in roots:
            root_path = Path(root)
            if root_path.is_file():
                # Explicitly named files bypass every implicit filter.
                yield IncludedFile(
                    display_path=display_path(root),
                    relative_path=root_path.name,
                    path=root_path.resolve(),
                    root=root,
                )
            elif root_path.is_dir():
                yield from self._walk_tree(root, root_path)
            else:
                self.console.warn(f"Skipping {root} - not a regular file or directory")

    def _enter(self, directory: Path, relative: str, patterns: PatternSet) -> Optional[_Frame]:
        try:
            st = directory.stat()
        except OSError as e:
            self.console.warn(f"Could not stat directory {directory}: {e}")
            return None

        key = (st.st_dev, st.st_ino)
        if key in self._visited:
            self.console.info(f"Skipping already visited directory {directory}")
            return None
        self._visited.add(key)

        if self.options.use_gitignore:
            patterns = patterns.extend(load_directory_rules(directory, relative, self.console))

        try:
            with os.scandir(directory) as it:
                entries: List[os.DirEntry] = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.console.warn(f"Could not read directory {directory}: {e}")
            return None

        return _Frame(directory, relative, patterns, iter(entries))

    def _walk_tree(self, root: str, root_path: Path) -> Iterator[IncludedFile]:
        patterns = self.global_patterns
        if self.options.use_gitignore:
            patterns = patterns.extend(load_git_excludes(root_path, self.console))
        frame = self._enter(root_path, "", patterns)
        stack: List[_Frame] = [frame] if frame is not None else []

        while stack:
            current = stack[-1]
            entry = next(current.entries, None)
            if entry is None:
                stack.pop()
                continue

            relative = f"{current.relative}/{entry.name}" if current.relative else entry.name
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                self.console.warn(f"Could not inspect {entry.path}: {e}")
                continue
            if not (is_dir or is_file):
                self.console.info(f"Skipping {display_path(root, relative)} (not a regular file)")
                continue

            if not self._accept(entry.name, relative, is_dir, current.patterns):
                continue

            if is_dir:
                child = self._enter(Path(entry.path), relative, current.patterns)
                if child is not None:
                    stack.append(child)
            else:
                yield IncludedFile(
                    display_path=display_path(root, relative),
                    relative_path=relative,
                    path=Path(entry.path).absolute(),
                    root=root,
                )

    def _accept(self, name: str, relative: str, is_dir: bool, patterns: PatternSet) -> bool:
        opts = self.options
        if not opts.include_hidden and name.startswith(HIDDEN_MARKER):
            return False
        verdict = patterns.matches(relative, is_dir, files_only=opts.ignore_files_only)
        if verdict is Verdict.EXCLUDED:
            self.console.info(f"Ignoring {relative}{'/' if is_dir else ''}")
            return False
        if not is_dir and not has_allowed_extension(name, opts.extensions):
            return False
        return True


def walk(
    roots: Sequence[str],
    options: WalkOptions,
    console: Optional[Console] = None,
    global_patterns: Optional[PatternSet] = None,
) -> Iterator[IncludedFile]:
    """Lazily yield every included file under *roots*, in output order."""
    return Walker(options, global_patterns, console).walk(roots)
