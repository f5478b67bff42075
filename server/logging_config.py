"""
Logging configuration for the Joker Draw server.

Production (ENVIRONMENT=production) writes one JSON object per line;
anything else gets colored single-line output for a terminal.

Two context variables tag every record written while they are set:
    participant_id_var: the connection currently being served
    game_id_var: the session that connection is seated in
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

participant_id_var: ContextVar[Optional[str]] = ContextVar("participant_id", default=None)
game_id_var: ContextVar[Optional[str]] = ContextVar("game_id", default=None)

# Record attributes copied into structured output when present
CONTEXT_FIELDS = ("participant_id", "game_id", "phase", "round")


def _context_value(record: logging.LogRecord, name: str):
    value = getattr(record, name, None)
    if value is None:
        if name == "participant_id":
            value = participant_id_var.get()
        elif name == "game_id":
            value = game_id_var.get()
    return value


class JSONFormatter(logging.Formatter):
    """Format records as JSON for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = _context_value(record, name)
            if value is not None:
                log_data[name] = value

        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Participant and game ids are shortened to 8 characters.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        context_parts = []
        participant_id = _context_value(record, "participant_id")
        if participant_id:
            context_parts.append(f"conn={str(participant_id)[:8]}")
        game_id = _context_value(record, "game_id")
        if game_id:
            context_parts.append(f"game={str(game_id)[:8]}")
        phase = getattr(record, "phase", None)
        if phase:
            context_parts.append(f"phase={phase}")

        context = f" [{', '.join(context_parts)}]" if context_parts else ""
        output = f"{timestamp} {color}{record.levelname:8}{reset} {record.name}{context} - {record.getMessage()}"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        environment: Environment name (production uses JSON, else human-readable).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if environment == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured: level={level}, environment={environment}")


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that attaches fixed context to every record.

    Usage:
        logger = get_logger(__name__)
        logger.with_context(game_id=session.game_id, phase="GameOver").info("Reset")
    """

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def with_context(self, **kwargs) -> "ContextLogger":
        """Return a new logger whose context also includes kwargs."""
        return ContextLogger(self.logger, {**self.extra, **kwargs})

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger (name is typically __name__)."""
    return ContextLogger(logging.getLogger(name))
