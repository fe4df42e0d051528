"""
Progress reporting utilities for repofarm.

Per-item progress goes to stderr so stdout stays clean for --json output.
Quiet mode hides progress; errors are always shown.
"""

import os
import sys
import threading
import time
from typing import Optional

from .domain.operation import OperationDetail, OperationStatus


# Markers per status: (emoji, plain)
STATUS_MARKERS = {
    OperationStatus.SUCCESS: ("✔", "ok"),
    OperationStatus.SKIPPED: ("➖", "skip"),
    OperationStatus.FAILED: ("❎", "FAIL"),
    OperationStatus.DRY_RUN: ("💭", "dry"),
}

STATUS_COLORS = {
    OperationStatus.SUCCESS: 'green',
    OperationStatus.SKIPPED: 'yellow',
    OperationStatus.FAILED: 'red',
    OperationStatus.DRY_RUN: 'cyan',
}


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, use_emoji: bool = True,
                 use_colors: Optional[bool] = None, stream=None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_emoji: Use emoji status markers (plain words otherwise)
            use_colors: Use ANSI colors in output. None = auto-detect
            stream: Output stream (stderr by default)
        """
        self.stream = stream or sys.stderr
        is_tty = hasattr(self.stream, 'isatty') and self.stream.isatty()

        self.enabled = True if enabled is None else enabled
        self.use_emoji = use_emoji
        if use_colors is None:
            self.use_colors = is_tty and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors
        self.animate = is_tty

        self.colors = {
            'reset': '\033[0m',
            'dim': '\033[2m',
            'red': '\033[31m',
            'green': '\033[32m',
            'yellow': '\033[33m',
            'cyan': '\033[36m',
        }
        self.spinner_frames = (['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
                               if use_emoji else ['-', '\\', '|', '/'])
        self._spinner: Optional['Spinner'] = None

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def _print(self, message: str) -> None:
        print(message, file=self.stream, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        self.stop()
        self._print(self._colorize(f"ERROR: {message}", 'red'))

    def marker(self, status: OperationStatus) -> str:
        emoji, plain = STATUS_MARKERS[status]
        return emoji if self.use_emoji else plain

    def start(self, message: str) -> None:
        """Show a spinner for an item that is about to run."""
        if not self.enabled:
            return
        self.stop()
        if self.animate:
            self._spinner = Spinner(self, message)
            self._spinner.start()

    def stop(self) -> None:
        if self._spinner is not None:
            self._spinner.stop()
            self._spinner = None

    def finish(self, detail: OperationDetail) -> None:
        """Replace the running spinner with the item's final status line."""
        if not self.enabled:
            return
        self.stop()
        marker = self._colorize(self.marker(detail.status), STATUS_COLORS[detail.status])
        line = f"{marker} {detail.label}: {detail.action}"
        if detail.status == OperationStatus.SKIPPED and detail.message:
            line += self._colorize(f" ({detail.message})", 'dim')
        self._print(line)


class Spinner:
    """Animated spinner for long-running operations."""

    def __init__(self, reporter: ProgressReporter, message: str):
        self.reporter = reporter
        self.message = message
        self.thread: Optional[threading.Thread] = None
        self.running = False

    def start(self) -> None:
        self.running = True
        self.thread = threading.Thread(target=self._spin, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        self.running = False
        if self.thread:
            self.thread.join()
            self.thread = None
            # Clear the spinner line
            print('\r' + ' ' * (len(self.message) + 4) + '\r', end='',
                  file=self.reporter.stream, flush=True)

    def _spin(self) -> None:
        """Spin animation loop."""
        while self.running:
            for char in self.reporter.spinner_frames:
                if not self.running:
                    break
                frame = self.reporter._colorize(char, 'cyan') + f" {self.message}"
                print(f"\r{frame}", end='', file=self.reporter.stream, flush=True)
                time.sleep(0.1)
