"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  CUSTOMZSH_LOG_LEVEL env var  >  WARNING (default)

Optional file output via CUSTOMZSH_LOG_FILE / CUSTOMZSH_LOG_FILE_LEVEL env vars.

Step lines: every orchestrator step logs one entry line and one outcome
line through ``log_step_start`` / ``log_step_result`` so runs can be
compared line-by-line (a second install logs "skipped" everywhere).
"""

from __future__ import annotations

import logging
import sys

from customzsh.core.models.report import StepResult

# ── Format strings ──────────────────────────────────────────────

_FMT_FULL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# (threshold, format, datefmt): first threshold >= level wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, _FMT_FULL, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

_STEP_MARKERS = {"performed": "✓", "skipped": "⊘", "failed": "✗"}


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install a stderr handler and, optionally, a file handler on the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names mean WARNING.
        log_file: Optional path to a log file; always written in full format.
        log_file_level: Level for the log file, ``level`` when omitted.
    """
    console_level = _parse_level(level)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stderr), console_level,
                             *_console_format(console_level)))

    lowest = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), file_level,
                                 _FMT_FULL, "%Y-%m-%d %H:%M:%S"))
        lowest = min(lowest, file_level)

    # root passes everything either handler wants; handlers filter
    root.setLevel(lowest)
    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return fmt, datefmt
    return "%(message)s", None


def _handler(handler: logging.Handler, level: int, fmt: str,
             datefmt: str | None) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def log_step_start(logger: logging.Logger, step: str) -> None:
    """Entry line for an orchestrator step."""
    logger.info("→ %s", step)


def log_step_result(logger: logging.Logger, result: StepResult) -> None:
    """Outcome line: performed / skipped (already present) / failed."""
    marker = _STEP_MARKERS.get(result.status, "?")
    if result.status == "failed":
        level = logging.ERROR if result.fatal else logging.WARNING
        logger.log(level, "%s %s: failed — %s", marker, result.step, result.message)
    elif result.status == "skipped":
        logger.info("%s %s: skipped (%s)", marker, result.step, result.message or "already present")
    else:
        logger.info("%s %s: performed%s", marker, result.step,
                    f" — {result.message}" if result.message else "")


def _parse_level(level: str | None) -> int:
    """Level name to its numeric constant; WARNING for anything unknown."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
