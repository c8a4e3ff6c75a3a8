"""Minimal logging utilities.

One-line messages in the form ``LEVEL: name: message``. Every textkit component
accepts an optional ``sink`` (any callable taking a str) so hosts can route
messages into their own log window; without a sink lines go to stderr.
"""
from __future__ import annotations
from typing import Callable, Optional
import sys

Sink = Callable[[str], None]


def log_line(level: str, msg: str, name: str = 'textkit', sink: Optional[Sink] = None):
    """Log a single line message."""
    try:
        if sink:
            sink(f"{level.upper()}: {name}: {msg}")
        else:
            sys.stderr.write(f"{level.upper()}: {name}: {msg}\n")
    except Exception:
        pass


def log_exception(msg: str, exc: BaseException, name: str = 'textkit', sink: Optional[Sink] = None):
    """Log ``msg`` at error level with the exception type and text appended."""
    log_line('error', f"{msg} ({type(exc).__name__}: {exc})", name=name, sink=sink)


__all__ = ['Sink', 'log_line', 'log_exception']
