"""
Central logging configuration and debug decorator.

Every module logs through the "teslashop" logger: INFO and above to the
console, everything to ``system_debug.log``. ``debug_watcher`` wraps the
long-running entry points (preview, import, category setup) so their timings
and failures end up in the log file.
"""

import functools
import logging
import os
import traceback
from pathlib import Path
from time import perf_counter
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

ROOT_LOGGER_NAME = "teslashop"

# TESLASHOP_LOG_FILE overrides the default location
LOG_FILE = Path(
    os.environ.get("TESLASHOP_LOG_FILE", Path(__file__).resolve().parent.parent / "system_debug.log")
)

_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s]: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure(logger: logging.Logger) -> None:
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)
    logger.addHandler(console)

    debug_file = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
    debug_file.setLevel(logging.DEBUG)
    debug_file.setFormatter(formatter)
    logger.addHandler(debug_file)


_logger = logging.getLogger(ROOT_LOGGER_NAME)
_logger.setLevel(logging.DEBUG)

# Re-imports must not stack handlers
if not _logger.handlers:
    _configure(_logger)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a child of the package logger.

    Args:
        name: Module name (``__name__``). Names already under the package are
              used as-is; anything else (``__main__``) is nested under it.
    """
    if not name:
        return _logger
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _describe_call(args: tuple, kwargs: dict) -> str:
    # Uploaded file bytes can be large; show a short prefix only
    shown = [str(arg)[:100] for arg in args[:3]]
    shown += [f"{k}={str(v)[:50]}" for k, v in list(kwargs.items())[:3]]
    return ", ".join(shown)


def debug_watcher(func: F) -> F:
    """
    Log entry, elapsed time and failures of ``func``.

    Exceptions are logged (traceback at DEBUG, so file only) and re-raised.
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        name = func.__name__
        started = perf_counter()
        logger.info(f"Starting {name}... ({_describe_call(args, kwargs)})")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = perf_counter() - started
            logger.error(f"Exception in {name} after {elapsed:.3f} seconds: {type(e).__name__}: {e}")
            logger.debug(f"Full traceback for {name}:\n{traceback.format_exc()}")
            raise
        logger.info(f"Completed {name} in {perf_counter() - started:.3f} seconds.")
        return result

    return wrapper  # type: ignore[return-value]
