#!/usr/bin/env python3
"""
Import Log Module
Line buffer collecting the report of one conversion run.

Lines are accumulated while a hierarchy is processed and emitted as a single
block on flush(), so every import produces one readable report.
"""

from typing import Callable, List, Optional


class ImportLog:
    """Accumulates report lines and flushes them as one unit"""

    def __init__(self, progress_callback: Optional[Callable[[str], None]] = None):
        """Initialize log buffer

        Args:
            progress_callback: Optional function receiving the flushed report
                              Signature: callback(message: str) -> None
        """
        self.progress_callback = progress_callback
        self.lines: List[str] = []

    def info(self, message: str = ""):
        self.lines.append(message)

    def warning(self, message: str):
        self.lines.append(f"WARNING: {message}")

    @property
    def warnings(self) -> List[str]:
        return [line for line in self.lines if line.startswith("WARNING: ")]

    def text(self) -> str:
        return "\n".join(self.lines)

    def clear(self):
        self.lines = []

    def flush(self) -> str:
        """Emit the buffered report and clear the buffer

        Returns:
            str: The emitted text (empty string if nothing was logged)
        """
        if not self.lines:
            return ""

        report = self.text()
        if self.progress_callback:
            self.progress_callback(report)
        print(report)
        self.clear()
        return report
