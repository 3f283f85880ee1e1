"""
Colored diagnostics for fileprompt.

Everything goes to stderr: stdout may be the prompt itself.
"""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from colorama import Fore, Style, just_fix_windows_console

# Leaves stdout untouched: it may carry file contents verbatim.
just_fix_windows_console()

PREFIX = "[fileprompt]"


class Console:
    """Verbose-gated progress output plus always-on warnings."""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None) -> None:
        self.verbose = verbose
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the swapped stderr.
        return self._stream if self._stream is not None else sys.stderr

    def _emit(self, msg: str, color: str = "") -> None:
        if color:
            print(color + msg + Style.RESET_ALL, file=self.stream)
        else:
            print(msg, file=self.stream)

    def info(self, msg: str) -> None:
        if self.verbose:
            self._emit(f"{PREFIX} {msg}")

    def done(self, msg: str) -> None:
        if self.verbose:
            self._emit(f"{PREFIX} {msg}", Fore.GREEN)

    def warn(self, msg: str) -> None:
        self._emit(f"Warning: {msg}", Fore.YELLOW)

    def error(self, msg: str) -> None:
        self._emit(f"Error: {msg}", Fore.RED)
