from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "contextor"

_configured_target: tuple[str, int] | None = None


def _build_handler(filename: str | Path | None) -> logging.Handler:
    if filename:
        return logging.FileHandler(str(filename), encoding="utf-8")
    return logging.StreamHandler(sys.stderr)


def setup_logging(
    filename: str | Path | None = None,
    *,
    level: int | str = logging.INFO,
) -> structlog.BoundLogger:
    """Configure JSON structured logging for contextor.

    Logging is configured once per target: calling again with the same target is
    a no-op, while a new target (e.g. a `--log-file` given on the command line
    after import-time setup) replaces the previous handler.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level emitted, as a `logging` constant or a level name.

    Returns:
        The bound logger for the contextor package.
    """
    global _configured_target  # noqa: PLW0603
    numeric_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    target = (str(filename) if filename else "<stderr>", numeric_level)

    if _configured_target != target:
        logging.basicConfig(
            level=numeric_level,
            handlers=[_build_handler(filename)],
            format="%(message)s",
            force=True,
        )
        structlog.configure(
            processors=[
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _configured_target = target

    return structlog.get_logger(LOGGER_NAME)


logger = setup_logging()
