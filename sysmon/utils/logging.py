"""Logging setup for the monitor.

Every record carries a ``plugin`` field so that registry messages and plain
module messages share one format.
"""

import logging
from typing import Iterable, Optional, Union

from rich.logging import RichHandler

from sysmon.core.config import Settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(plugin)s | %(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class PluginFilter(logging.Filter):
    """Ensures %(plugin)s is always present in log records to avoid KeyError in format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "plugin"):
            record.plugin = "-"
        return True


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level name ("debug", "WARNING") or number into a logging level.

    Raises:
        ValueError: If the name is not a known logging level
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    settings: Optional[Settings] = None,
    rich_tracebacks: bool = True,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> int:
    """Initialize rich-based logging with a format that includes the plugin field.

    Args:
        level: Explicit level; wins over ``settings.log_level``
        settings: Settings to read ``log_level`` from (loaded from env if omitted)
        rich_tracebacks: Render exceptions with rich
        quiet_loggers: Loggers held at WARNING unless ``level`` is DEBUG

    Returns:
        The effective root level
    """
    if level is None:
        level = (settings or Settings.from_env()).log_level
    effective = resolve_level(level)

    handler = RichHandler(rich_tracebacks=rich_tracebacks, markup=False)
    handler.addFilter(PluginFilter())

    logging.basicConfig(
        level=effective,
        format=LOG_FORMAT,
        datefmt=DATE_FMT,
        handlers=[handler],
        force=True,
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(effective if effective <= logging.DEBUG else logging.WARNING)

    return effective
