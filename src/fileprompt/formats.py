"""
Output formats.

Three strategies render one file at a time: plain text with separator lines,
Claude XML ``<document>`` elements and Markdown fenced code blocks.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Dict, List, Type

DEFAULT_SEPARATOR = "---"

_LANG_MAP: Dict[str, str] = {
    ".py": "python",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".java": "java",
    ".js": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".jsx": "jsx",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".xml": "xml",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
    ".sh": "bash",
    ".rb": "ruby",
    ".md": "markdown",
    ".go": "go",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".sql": "sql",
}


def lang_from_path(path: str) -> str:
    return _LANG_MAP.get(os.path.splitext(path)[1].lower(), "")


class FormatStyle(enum.Enum):
    PLAIN = "plain"
    XML = "xml"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class FormatOptions:
    style: FormatStyle = FormatStyle.PLAIN
    line_numbers: bool = False
    separator: str = DEFAULT_SEPARATOR


def _split_lines(content: str) -> List[str]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def add_line_numbers(content: str) -> str:
    """Prefix every line with its 1-based number, padded to a common width."""
    lines = _split_lines(content)
    width = len(str(len(lines))) if lines else 1
    return "\n".join(f"{i:<{width}}  {line}" for i, line in enumerate(lines, start=1))


def _terminated(content: str) -> str:
    return content if content.endswith("\n") else content + "\n"


def fence_for(content: str) -> str:
    """Shortest backtick fence (at least three) that does not occur in *content*."""
    fence = "```"
    while fence in content:
        fence += "`"
    return fence


class Formatter:
    """Base strategy: ``prologue``, one ``render`` per file, ``epilogue``."""

    def __init__(self, options: FormatOptions) -> None:
        self.options = options

    def prologue(self) -> str:
        return ""

    def epilogue(self) -> str:
        return ""

    def prepare(self, content: str) -> str:
        if self.options.line_numbers:
            content = add_line_numbers(content)
        return _terminated(content)

    def render(self, display_path: str, content: str) -> str:
        raise NotImplementedError


class PlainFormatter(Formatter):
    def render(self, display_path: str, content: str) -> str:
        sep = self.options.separator
        return f"{display_path}\n{sep}\n{self.prepare(content)}{sep}\n\n"


class XMLFormatter(Formatter):
    """Claude XML; ``index`` counts documents from 1 for the formatter's lifetime."""

    def __init__(self, options: FormatOptions) -> None:
        super().__init__(options)
        self.index = 1

    def prologue(self) -> str:
        return "<documents>\n"

    def epilogue(self) -> str:
        return "</documents>\n"

    def render(self, display_path: str, content: str) -> str:
        out = (
            f'<document index="{self.index}">\n'
            f"<source>{display_path}</source>\n"
            "<document_content>\n"
            f"{self.prepare(content)}"
            "</document_content>\n"
            "</document>\n"
        )
        self.index += 1
        return out


class MarkdownFormatter(Formatter):
    def render(self, display_path: str, content: str) -> str:
        body = self.prepare(content)
        fence = fence_for(body)
        return f"{display_path}\n{fence}{lang_from_path(display_path)}\n{body}{fence}\n\n"


_FORMATTERS: Dict[FormatStyle, Type[Formatter]] = {
    FormatStyle.PLAIN: PlainFormatter,
    FormatStyle.XML: XMLFormatter,
    FormatStyle.MARKDOWN: MarkdownFormatter,
}


def make_formatter(options: FormatOptions) -> Formatter:
    return _FORMATTERS[options.style](options)
