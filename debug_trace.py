"""
debug_trace.py

Runtime trace for the map viewer (map lifecycle, tools, navigation).

MAPNOTES_TRACE selects what is traced:
    MAPNOTES_TRACE=1            every category except ZOOM
    MAPNOTES_TRACE=MAP,TOOL     only the listed categories
    MAPNOTES_TRACE=all          every category, ZOOM included

Lines go to stderr and to ``trace.log`` in the user log folder
(``platformdirs.user_log_dir("mapnotes")``). ERROR and CRASH lines are
written whenever tracing is on, whatever the category filter.
"""

import os
import sys
import traceback
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import FrozenSet, Optional

import platformdirs

APP_NAME = "mapnotes"
LOG_NAME = "trace.log"

# Per-zoom-step lines; only traced when asked for by name or by "all"
VERBOSE_CATEGORIES = frozenset({"ZOOM"})
ALWAYS_CATEGORIES = frozenset({"ERROR", "CRASH"})

_log_file = None


def parse_trace_setting(value: str) -> Optional[FrozenSet[str]]:
    """
    Categories selected by a MAPNOTES_TRACE value.

    Returns:
        None when tracing is off, an empty set for "every category but the
        verbose ones", ``{"*"}`` for all, or the upper-cased category names
    """
    value = (value or "").strip()
    if value in ("", "0"):
        return None
    if value.lower() in ("1", "true", "yes"):
        return frozenset()
    if value.lower() == "all":
        return frozenset({"*"})
    return frozenset(part.strip().upper() for part in value.split(",") if part.strip())


TRACE_CATEGORIES = parse_trace_setting(os.environ.get("MAPNOTES_TRACE", ""))
DEBUG_TRACE = TRACE_CATEGORIES is not None


def category_enabled(category: str, selected: Optional[FrozenSet[str]] = None) -> bool:
    """Whether lines of *category* are written under the *selected* filter."""
    if selected is None:
        selected = TRACE_CATEGORIES
        if selected is None:
            return False
    if category in ALWAYS_CATEGORIES or "*" in selected:
        return True
    if not selected:
        return category not in VERBOSE_CATEGORIES
    return category in selected


def log_path() -> Path:
    return Path(platformdirs.user_log_dir(APP_NAME)) / LOG_NAME


def _get_log_file():
    global _log_file
    if _log_file is None:
        path = log_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _log_file = open(path, "w", encoding="utf-8")
        except OSError as e:
            print(f"[trace] cannot open {path}: {e}", file=sys.stderr)
            _log_file = False
    return _log_file or None


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE or not category_enabled(category):
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def trace_exception(msg: str = "Exception"):
    """Trace the exception being handled."""
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace method entry and exit."""
    def decorator(func):
        if not DEBUG_TRACE:
            return func

        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
            trace(f"<<< {func_name} -> {result!r}", category)
            return result
        return wrapper
    return decorator


def close_log():
    """Close the log file."""
    global _log_file
    if _log_file:
        _log_file.close()
    _log_file = None
