"""Logging setup and timing helpers.

setup_logging() installs, on the "nodecraft" logger:
- a console handler at NODECRAFT_LOG_LEVEL (default INFO)
- a rotating DEBUG file at NODECRAFT_LOG_FILE (default ~/.nodecraft/nodecraft.log)
- a rotating perf file next to it for the "nodecraft.perf" logger

NODECRAFT_LOG_MAX_SIZE (MB, default 10) and NODECRAFT_LOG_BACKUPS
(default 5) apply to both files.

Timing lines look like::

    query                | sw1             |     3.12ms | OK

Usage:
    @timed("query")
    def query(self, command): ...

    with timed_section_sync("cmd_ref_load", directory=path):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

perf_logger = logging.getLogger("nodecraft.perf")

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-25s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level() -> int:
    """Console level from NODECRAFT_LOG_LEVEL; unknown names mean INFO."""
    name = os.environ.get("NODECRAFT_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_log_file() -> Path:
    default = Path.home() / ".nodecraft" / "nodecraft.log"
    return Path(os.environ.get("NODECRAFT_LOG_FILE", str(default)))


def _rotating(path: Path, fmt: str) -> RotatingFileHandler:
    max_mb = int(os.environ.get("NODECRAFT_LOG_MAX_SIZE", "10"))
    handler = RotatingFileHandler(
        path,
        maxBytes=max_mb * 1024 * 1024,
        backupCount=int(os.environ.get("NODECRAFT_LOG_BACKUPS", "5")),
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: Optional[int] = None) -> None:
    """Install the nodecraft handlers; later calls do nothing."""
    package_logger = logging.getLogger("nodecraft")
    if package_logger.handlers:
        return

    console_level = get_log_level() if level is None else level
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Handlers filter; the logger passes everything
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(console)
    package_logger.addHandler(_rotating(log_file, LOG_FORMAT))

    # Perf records also propagate to the handlers above
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(_rotating(log_file.parent / "nodecraft-perf.log", PERF_FORMAT))

    package_logger.info(
        f"Logging initialized: level={logging.getLevelName(console_level)}, file={log_file}"
    )


def _report(
    operation: str,
    node: Optional[str],
    start: float,
    error: Optional[BaseException] = None,
    extra: Optional[dict] = None,
) -> None:
    """Write one timing line to the perf logger."""
    elapsed = (time.perf_counter() - start) * 1000
    outcome = "OK" if error is None else f"FAIL: {error}"
    line = f"{operation:20s} | {node or 'N/A':15s} | {elapsed:8.2f}ms | {outcome}"
    if extra:
        line += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    if error is None:
        perf_logger.info(line)
    else:
        perf_logger.warning(line)


def timed(operation: str, node: Optional[str] = None):
    """Decorator timing a function or coroutine.

    Without an explicit node, the name attribute of the first argument
    (a transport or Node) is used.
    """
    def node_of(args) -> Optional[str]:
        if node is None and args:
            name = getattr(args[0], "name", None)
            return name if isinstance(name, str) else None
        return node

    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _report(operation, node_of(args), start, e)
                    raise
                _report(operation, node_of(args), start)
                return result
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, node_of(args), start, e)
                raise
            _report(operation, node_of(args), start)
            return result
        return wrapper

    return decorator


@contextmanager
def timed_section_sync(operation: str, node: Optional[str] = None, **extra):
    """Time a block; keyword arguments are appended to the line."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, node, start, e, extra)
        raise
    _report(operation, node, start, extra=extra)
