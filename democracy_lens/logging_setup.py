# democracy_lens/logging_setup.py
"""
Logging for the API, the scheduler and the background tasks.

Events are logged as an UPPER_SNAKE key plus `extra=` fields:

    logger.info("INGEST_DONE", extra={"run_id": run_id, "count": 12})

The text formatter appends those fields as `key=value` pairs; LOG_FORMAT=json
emits one JSON object per line instead. Every record carries the request id
set by RequestContextMiddleware ("-" outside a request).
"""
import json
import logging
from logging.config import dictConfig
from logging import LogRecord
from pathlib import Path
from typing import Any, Dict, Optional
import contextvars
import os

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

BASE_DIR = Path(__file__).resolve().parents[1]
LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()  # text | json
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() in ("1", "true", "yes")

# attributes every LogRecord has; anything else came in through `extra=`
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "request_id"}


def _extras(record: LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class RequestIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class KeyValueFormatter(logging.Formatter):
    """Standard text line followed by the record's extra fields."""

    def format(self, record: LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if not extras:
            return line
        pairs = " ".join(f"{k}={v!r}" if isinstance(v, str) else f"{k}={v}" for k, v in sorted(extras.items()))
        head, sep, tail = line.partition("\n")  # keep tracebacks below the pairs
        return f"{head} | {pairs}{sep}{tail}"


class JsonFormatter(logging.Formatter):
    def format(self, record: LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "event": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_logging_config(level: str = LOG_LEVEL, log_file: Optional[Path] = None, fmt: str = LOG_FORMAT) -> Dict[str, Any]:
    app_handlers = ["console"] + (["file"] if log_file else [])
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if fmt == "json" else "text",
            "filters": ["request_id"],
        },
        "uvicorn_console": {
            "class": "logging.StreamHandler",
            "formatter": "uvicorn",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "json" if fmt == "json" else "text",
            "filters": ["request_id"],
            "filename": str(log_file),
            "when": "midnight",
            "backupCount": 14,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "text": {
                "()": KeyValueFormatter,
                "format": "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s | %(message)s",
            },
            "json": {"()": JsonFormatter},
            "uvicorn": {"format": "%(asctime)s | %(levelname)s | %(message)s"},
        },
        "handlers": handlers,
        "loggers": {
            "democracy_lens": {"handlers": app_handlers, "level": level, "propagate": False},
            "apscheduler": {"handlers": app_handlers, "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["uvicorn_console"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["uvicorn_console"], "level": "INFO", "propagate": False},
            # client libraries log every request at INFO
            "httpx": {"level": "WARNING"},
            "openai": {"level": "WARNING"},
            "trafilatura": {"level": "WARNING"},
        },
        "root": {"handlers": app_handlers, "level": level},
    }


def setup_logging(log_dir: Optional[Path] = None) -> Optional[Path]:
    """Configure logging once at startup; returns the log file path, if any."""
    log_file = None
    if LOG_TO_FILE:
        target = Path(log_dir or LOG_DIR)
        target.mkdir(parents=True, exist_ok=True)
        log_file = target / "democracy_lens.log"

    dictConfig(build_logging_config(log_file=log_file))
    logging.getLogger("democracy_lens").info(
        "LOGGING_CONFIGURED", extra={"log_file": str(log_file) if log_file else None, "format": LOG_FORMAT}
    )
    return log_file


def get_logger(name: str = "democracy_lens") -> logging.Logger:
    return logging.getLogger(name)
