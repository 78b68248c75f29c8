"""
Logging setup for the depsadmin CLI.

``main.cli`` calls ``setup_logging`` once per invocation; every module
logs through ``logging.getLogger(__name__)`` and inherits it.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  $DEPSADMIN_LOG_LEVEL  >  WARNING

$DEPSADMIN_LOG_FILE adds a file handler at $DEPSADMIN_LOG_FILE_LEVEL
(default: the console level). Package-manager stdout is logged at INFO,
so ``-v`` is what shows npm/yarn/pnpm/bun output.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LOG_LEVEL_ENV = "DEPSADMIN_LOG_LEVEL"
LOG_FILE_ENV = "DEPSADMIN_LOG_FILE"
LOG_FILE_LEVEL_ENV = "DEPSADMIN_LOG_FILE_LEVEL"

# (max level, format, datefmt): the first row whose level is >= the
# console level is used; above INFO only the message is printed
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
]
_CONSOLE_PLAIN = "%(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Console level name from the CLI flags, else the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(LOG_LEVEL_ENV) or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with the depsadmin ones.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file that always gets full detail.
        log_file_level: Level for the file (default: ``level``).
    """
    console_level = _parse_level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(_parse_level(log_file_level) if log_file_level else console_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False


def _console_formatter(level: int) -> logging.Formatter:
    for max_level, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= max_level:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_PLAIN)


def _parse_level(level: str | None) -> int:
    """Numeric level for a name; unknown or empty names mean WARNING."""
    value = logging.getLevelName((level or "").strip().upper())
    return value if isinstance(value, int) else logging.WARNING
