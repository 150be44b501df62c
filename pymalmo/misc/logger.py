"""
Console logging for pymalmo.

Every component (MissionSpec, the XML codec, the plan view) gets its own
MalmoLogger from create_logger(). Messages are printed as

    [pymalmo] [MissionSpec] Video requested: 320x240
    [pymalmo] [MissionSpec] Warning: Video width 322 is not divisible by 4

Informational output follows the component's `verbose` flag; warnings go to
stderr regardless.
"""

import sys
from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2


class MalmoLogger:
    """Prefixed print logger for one pymalmo component."""

    def __init__(self, verbose: bool = True, name: Optional[str] = None, min_level: LogLevel = LogLevel.INFO):
        self.verbose = verbose
        self.name = name
        self.min_level = min_level
        self._prefix = "[pymalmo]" + (f" [{name}]" if name else "")

    def _enabled(self, level: LogLevel) -> bool:
        if level == LogLevel.WARNING:
            return True
        return self.verbose and level >= self.min_level

    def debug(self, message: str):
        if self._enabled(LogLevel.DEBUG):
            print(f"{self._prefix} DEBUG: {message}")

    def info(self, message: str):
        if self._enabled(LogLevel.INFO):
            print(f"{self._prefix} {message}")

    def warning(self, message: str):
        print(f"{self._prefix} Warning: {message}", file=sys.stderr)


def create_logger(verbose: bool = True, name: Optional[str] = None, debug: bool = False) -> MalmoLogger:
    """
    Build the logger for a component.

    Args:
        verbose: If False, only warnings are printed
        name: Component tag shown after the [pymalmo] prefix
        debug: If True (and verbose), DEBUG messages are printed too
    """
    return MalmoLogger(verbose=verbose, name=name, min_level=LogLevel.DEBUG if debug else LogLevel.INFO)
