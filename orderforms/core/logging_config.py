"""
Structured logging configuration for the order forms service.
Import and call setup_logging() once at app startup.

Loggers in this package attach context through `extra=`; both formatters
pick up the keys listed in CONTEXT_KEYS and ignore everything else.
"""
import logging
import logging.handlers
import os
import json
from datetime import datetime, timezone

from orderforms.core import paths

# extra= keys set by orderforms loggers (api, assembler, orchestrator, sinks)
CONTEXT_KEYS = ("route", "method", "vendor", "items", "rows",
                "documents", "errors", "duration_ms")


def _context(record) -> dict:
    return {k: getattr(record, k) for k in CONTEXT_KEYS if hasattr(record, k)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, stamped with the record's own creation time."""
    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc)
                          .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_context(record),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Colored console line; context keys trail the message as key=value."""
    COLORS = {
        "DEBUG": "\033[36m", "INFO": "\033[32m",
        "WARNING": "\033[33m", "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        context = " ".join(f"{k}={v}" for k, v in _context(record).items())
        line = f"{color}{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}{self.RESET}"
        if context:
            line += f"  ({context})"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level=None, json_logs=None, log_dir=None):
    """
    Configure logging for the full application.

    Args:
        level: Override log level (default: from LOG_LEVEL env or INFO)
        json_logs: Force JSON format (default: from LOG_JSON env)
        log_dir: Where the rotating log file goes (default: DATA_DIR/logs)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if json_logs is None:
        json_logs = os.environ.get("LOG_JSON", "").lower() in ("1", "true", "yes")
    log_dir = log_dir or paths.LOG_DIR

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    # Console handler
    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # Rotating file handler: 5MB x 5 backups
    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, "orderforms.log"),
            maxBytes=5_000_000, backupCount=5,
        )
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)
    except OSError:
        root.warning("File logging disabled: %s not writable", log_dir)

    # Quiet noisy libs
    for name in ("werkzeug", "reportlab", "pypdf"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("orderforms").info("Logging initialized (level=%s)", level)
