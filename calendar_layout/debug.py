"""
Debug output for the calendar layout engine.

Messages go to stderr with a timestamp and a short tag, e.g.
``[14:02:11] DAY: 3 events in 1 group(s)``. Output is off by default
and switched on via ``set_debug`` (the CLI's ``--debug`` flag or the
``debug`` key of the configuration file).
"""

import sys
from datetime import datetime


_debug_enabled: bool = False


def set_debug(enabled: bool):
    """Enable or disable debug output for all modules."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


def is_debug_enabled() -> bool:
    return _debug_enabled


def debug_print(tag: str, msg: str) -> None:
    if not _debug_enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {msg}", file=sys.stderr)
