import json
import logging
import time
from collections import Counter, deque
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "aiosqlite", "multipart")

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including fields passed via `extra`"""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(log_level: str = "INFO", log_format: str = "text"):
    """
    Point the root logger at stderr.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR
        log_format: "text" while developing, "json" when shipped to a collector
    """
    handler = logging.StreamHandler()
    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured: level={log_level}, format={log_format}")


class ErrorTracker:
    """Counts errors per type and keeps the most recent ones"""

    def __init__(self, max_history: int = 100):
        self.counts: Counter = Counter()
        self.recent = deque(maxlen=max_history)

    def track_error(
        self,
        error_type: str,
        error_message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.counts[error_type] += 1
        self.recent.append(
            {
                "timestamp": time.time(),
                "type": error_type,
                "message": error_message,
                "context": context or {},
            }
        )
        logger.warning(
            f"Error tracked: {error_type} ({self.counts[error_type]} so far)",
            extra={"error_type": error_type, "context": context},
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "error_counts": dict(self.counts),
            "total_errors": sum(self.counts.values()),
            "last_errors": list(self.recent)[-10:],
        }

    def reset_stats(self):
        self.counts.clear()
        self.recent.clear()


error_tracker = ErrorTracker()


def log_business_event(
    event: str,
    entity_type: str,
    entity_id: Optional[str],
    details: Optional[Dict[str, Any]] = None,
):
    """
    Log a domain event such as attendance_initialized or student_registered.

    Args:
        event: Event name
        entity_type: attendance_instance, student, course, ...
        entity_id: Business identifier of the entity
        details: Extra context
    """
    logger.info(
        f"Business event: {event}",
        extra={
            "event": event,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "details": details or {},
            "category": "business_event",
        },
    )


def log_security_event(
    event_type: str,
    student_id: Optional[str],
    instance_id: Optional[str],
    reason: str,
):
    """A rejected attendance attempt; mirrors what lands in security_logs"""
    logger.warning(
        f"Security event: {event_type}",
        extra={
            "event": event_type,
            "student_id": student_id,
            "instance_id": instance_id,
            "reason": reason,
            "category": "security",
        },
    )
