"""
Progress reporting utilities for spex.

Renders engine events on stderr so stdout stays clean for data.
"""

import os
import sys
from enum import Enum
from typing import Dict, Optional

from .domain import event as events
from .domain.event import Event
from .render import format_updated


class LogLevel(Enum):
    """Log levels for progress messages."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


# Event type -> (level, message builder)
EVENT_MESSAGES: Dict[str, tuple] = {
    events.BUILD_STARTED: (LogLevel.INFO, lambda d: f"Building spex in {d['cwd']}"),
    events.VALIDATION_PASSED: (LogLevel.SUCCESS, lambda d: f"Structure valid ({', '.join(d['types'])})"),
    events.AGENTS_FILE_WRITTEN: (LogLevel.SUCCESS, lambda d: f"Wrote {d['path']}"),
    events.BUILD_FILE_MISSING: (LogLevel.INFO, lambda d: f"No build file at {d['path']}, nothing to import"),
    events.BUILD_FILE_DETECTED: (LogLevel.DEBUG, lambda d: f"Reading {d['path']}"),
    events.PACKAGES_RESOLVED: (LogLevel.INFO, lambda d: f"{len(d['package_ids'])} package(s) declared"),
    events.PACKAGE_IMPORT_STARTED: (LogLevel.INFO, lambda d: f"Importing {d['package_id']}"),
    events.MIRROR_CLONED: (LogLevel.DEBUG, lambda d: f"Cloned mirror {d['source_url']}"),
    events.MIRROR_UPDATED: (LogLevel.DEBUG, lambda d: f"Updated mirror {d['source_url']}"),
    events.PACKAGE_IMPORTED: (LogLevel.SUCCESS, lambda d: f"{d['package_id']} -> {d['target_path']}"),
    events.BUILD_FINISHED: (LogLevel.SUCCESS, lambda d: f"Build finished ({d['imported_count']} imported)"),
    events.CATALOG_BUILD_STARTED: (LogLevel.INFO, lambda d: f"Building catalog in {d['cwd']}"),
    events.CATALOG_SPECIFICATION_READ: (
        LogLevel.INFO, lambda d: f"{d['package_count']} package(s) in {d['path']}"),
    events.CATALOG_ENTRY_HARVESTED: (
        LogLevel.SUCCESS, lambda d: f"{d['id']}: {d['name']} (updated {format_updated(d['updated'])})"),
    events.CATALOG_INDEX_WRITTEN: (LogLevel.SUCCESS, lambda d: f"Wrote {d['path']}"),
    events.CATALOG_BUILD_FINISHED: (
        LogLevel.SUCCESS, lambda d: f"Catalog finished ({d['package_count']} package(s))"),
    events.BUILD_FILE_CREATED: (LogLevel.INFO, lambda d: f"Created {d['path']}"),
    events.PACKAGE_ADDED: (LogLevel.SUCCESS, lambda d: f"Added {d['package_id']} to {d['build_file_path']}"),
}


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None,
                 show_debug: bool = False):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_colors: Use ANSI colors in output
            show_debug: Also print DEBUG level messages
        """
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty()
        else:
            self.enabled = enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

        self.show_debug = show_debug

        self.colors = {
            'reset': '\033[0m',
            'dim': '\033[2m',
            'red': '\033[31m',
            'green': '\033[32m',
            'yellow': '\033[33m',
        }

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            force: Force output even if disabled
            level: Log level for the message
        """
        if not (force or self.enabled):
            return
        if level == LogLevel.DEBUG and not self.show_debug:
            return

        if level == LogLevel.ERROR:
            message = self._colorize(f"✗ {message}", 'red')
        elif level == LogLevel.WARNING:
            message = self._colorize(f"⚠ {message}", 'yellow')
        elif level == LogLevel.SUCCESS:
            message = self._colorize(f"✓ {message}", 'green')
        elif level == LogLevel.DEBUG:
            message = self._colorize(f"  {message}", 'dim')

        print(message, file=sys.stderr, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        error_msg = self._colorize(f"ERROR: {message}", 'red')
        print(error_msg, file=sys.stderr, flush=True)

    def warning(self, message: str):
        """Output warnings to stderr if enabled."""
        if self.enabled:
            warning_msg = self._colorize(f"WARNING: {message}", 'yellow')
            print(warning_msg, file=sys.stderr, flush=True)

    def success(self, message: str):
        """Output success message if enabled."""
        if self.enabled:
            self(message, level=LogLevel.SUCCESS)

    def report(self, event: Event):
        """Render one engine event."""
        level, build_message = EVENT_MESSAGES.get(event.type, (LogLevel.DEBUG, None))
        message = build_message(event.data) if build_message else str(event)
        self(message, level=level)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None, show_debug: bool = False) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display
        show_debug: Also print DEBUG level messages

    Returns:
        ProgressReporter instance
    """
    global _progress
    if _progress is None or enabled is not None or show_debug:
        _progress = ProgressReporter(enabled, show_debug=show_debug)
    return _progress


def run_with_progress(generator, progress: Optional[ProgressReporter] = None):
    """
    Drive an event generator, reporting every event, and return its result.

    Args:
        generator: Service generator yielding Event values
        progress: ProgressReporter (default: global reporter)
    """
    reporter = progress or get_progress()
    while True:
        try:
            event = next(generator)
        except StopIteration as stop:
            return stop.value
        reporter.report(event)


# Environment variable override
if os.environ.get('SPEX_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('SPEX_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
