"""
Gitignore-style rule matching.

A :class:`PatternSet` is an ordered, immutable tuple of :class:`IgnoreRule`.
Each rule is compiled with pathspec's ``gitwildmatch`` flavour; negation and
the directory-only marker are handled here so that every rule can be asked
about one candidate at a time, with the last matching rule deciding.

Besides per-directory ``.gitignore`` and ``.ignore`` files, the user's global
git excludes file and a repository's ``.git/info/exclude`` are honored.
"""

from __future__ import annotations

import enum
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Tuple

# Third-party dependency
try:
    import pathspec  # type: ignore
except ImportError:  # pragma: no cover
    sys.stderr.write(
        "Error: 'pathspec' library is required. Install via 'pip install pathspec'.\n"
    )
    sys.exit(1)

from .console import Console

IGNORE_FILE_NAMES: Tuple[str, ...] = (".gitignore", ".ignore")

_GLOB_CHARS = re.compile(r"([\\*?\[\]!#])")

# pathspec ends a non-"**" pattern with an optional "/ and anything below",
# e.g. "(?:(?P<ps_d>/).*)?$"; dropping it leaves a match on the path itself.
_DESCENDANT_TAIL = re.compile(r"\(\?:(?:\(\?P<\w+>/\)|/)\.\*\)\?\$$")


class Verdict(enum.Enum):
    INCLUDED = "included"
    EXCLUDED = "excluded"


def _compile(body: str) -> Pattern[str]:
    """Compile one gitignore body into a regex that only hits the path itself."""
    spec = pathspec.PathSpec.from_lines("gitwildmatch", [body])
    regex = spec.patterns[0].regex
    if regex is None:
        raise ValueError(f"{body!r} compiles to no pattern")
    return re.compile(_DESCENDANT_TAIL.sub("$", regex.pattern))


@dataclass(frozen=True)
class IgnoreRule:
    """One parsed gitignore line, scoped to the directory *base*."""

    pattern: str
    regex: Pattern[str] = field(compare=False, repr=False)
    negated: bool = False
    dir_only: bool = False
    anchored: bool = False
    base: str = ""

    @classmethod
    def parse(
        cls,
        line: str,
        base: str = "",
        console: Optional[Console] = None,
    ) -> Optional["IgnoreRule"]:
        """Parse a single gitignore line; blank lines and comments give ``None``."""
        text = line.rstrip("\r\n")
        if not text.strip() or text.startswith("#"):
            return None

        body = text
        negated = body.startswith("!")
        if negated:
            body = body[1:]

        dir_only = False
        while body.endswith("/") and not body.endswith("\\/"):
            dir_only = True
            body = body[:-1]
        if not body.strip("/"):
            return None

        anchored = "/" in body
        try:
            regex = _compile(body)
        except ValueError as e:
            if console is not None:
                console.warn(f"Invalid ignore pattern {text!r} ({e}); matching it literally")
            regex = _compile(_GLOB_CHARS.sub(r"\\\1", body))

        return cls(
            pattern=text,
            regex=regex,
            negated=negated,
            dir_only=dir_only,
            anchored=anchored,
            base=base,
        )

    def applies_to(self, relative_path: str) -> bool:
        return not self.base or relative_path.startswith(self.base + "/")

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Return True when this rule matches *relative_path* itself."""
        if self.dir_only and not is_dir:
            return False
        if not self.applies_to(relative_path):
            return False

        local = relative_path[len(self.base) + 1 :] if self.base else relative_path
        return self.regex.match(local) is not None


class PatternSet:
    """Ordered gitignore rules; ``extend`` returns a new set."""

    __slots__ = ("rules",)

    def __init__(self, rules: Iterable[IgnoreRule] = ()) -> None:
        self.rules: Tuple[IgnoreRule, ...] = tuple(rules)

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        base: str = "",
        console: Optional[Console] = None,
    ) -> "PatternSet":
        rules = (IgnoreRule.parse(line, base, console) for line in lines)
        return cls(r for r in rules if r is not None)

    def extend(self, rules: Iterable[IgnoreRule]) -> "PatternSet":
        added = tuple(rules)
        if not added:
            return self
        return PatternSet(self.rules + added)

    def matches(
        self,
        relative_path: str,
        is_dir: bool,
        files_only: bool = False,
    ) -> Verdict:
        """
        Judge *relative_path* (POSIX, relative to the traversal root).

        With *files_only*, directories are only tested against directory-only
        rules, so plain name patterns never prune descent.
        """
        verdict = Verdict.INCLUDED
        for rule in self.rules:
            if files_only and is_dir and not rule.dir_only:
                continue
            if rule.matches(relative_path, is_dir):
                verdict = Verdict.INCLUDED if rule.negated else Verdict.EXCLUDED
        return verdict

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"PatternSet({[r.pattern for r in self.rules]!r})"


def load_ignore_file(
    path: Path,
    base: str,
    console: Optional[Console] = None,
) -> List[IgnoreRule]:
    """Parse the ignore file at *path* into rules scoped to *base*."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            lines = fh.readlines()
    except OSError as e:
        if console is not None:
            console.warn(f"Could not read {path}: {e}")
        return []

    rules = (IgnoreRule.parse(line, base, console) for line in lines)
    return [r for r in rules if r is not None]


def load_directory_rules(
    directory: Path,
    base: str,
    console: Optional[Console] = None,
) -> List[IgnoreRule]:
    """Collect the rules of every ignore file present in *directory*."""
    rules: List[IgnoreRule] = []
    for name in IGNORE_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            rules.extend(load_ignore_file(candidate, base, console))
            if console is not None:
                console.info(f"Loaded {candidate}")
    return rules


def git_global_excludes_file() -> Optional[Path]:
    """Git's default global excludes file, ``$XDG_CONFIG_HOME/git/ignore``."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    candidate = Path(config_home) / "git" / "ignore"
    return candidate if candidate.is_file() else None


def load_git_excludes(root: Path, console: Optional[Console] = None) -> List[IgnoreRule]:
    """
    Rules git applies beneath every ``.gitignore``: the global excludes file,
    then ``<root>/.git/info/exclude``. Both are anchored at *root*.
    """
    rules: List[IgnoreRule] = []
    global_file = git_global_excludes_file()
    if global_file is not None:
        rules.extend(load_ignore_file(global_file, "", console))
        if console is not None:
            console.info(f"Loaded {global_file}")

    exclude = root / ".git" / "info" / "exclude"
    if exclude.is_file():
        rules.extend(load_ignore_file(exclude, "", console))
        if console is not None:
            console.info(f"Loaded {exclude}")
    return rules
