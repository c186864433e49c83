import logging
import sys
import json
import re
from typing import Any, Dict, Optional
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from storefront.config.settings import config_settings
from storefront.common.constants import SENSITIVE_PATTERNS, request_id_ctx

ENV = getattr(config_settings, "ENV", "dev").lower()

# attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = (
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "taskName", "message", "asctime",
)


def sanitize_message_text(msg: str) -> str:
    """Redact token, password and header values inside a text message (best-effort)."""
    # bearer credentials may appear without a key in front of them
    out = re.sub(r"(Bearer\s+)[\w\-\.~+/]+=*", r"\1[REDACTED]", msg)
    for p in SENSITIVE_PATTERNS:
        # replace occurrences like "token=abc" or '"token": "abc"'
        out = re.sub(rf'("{p}"\s*:\s*")[^"]+(")', rf'\1[REDACTED]\2', out, flags=re.IGNORECASE)
        out = re.sub(rf'({p}\s*[=:\s]\s*)[\w\-\./]+', rf'\1[REDACTED]', out, flags=re.IGNORECASE)
    return out


def _is_sensitive_field(name: str) -> bool:
    lowered = name.lower()
    return any(p in lowered for p in SENSITIVE_PATTERNS)


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for staging and prod"""
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "env": ENV,
            "service": getattr(config_settings, "SERVICE_NAME", "storefront-client"),
        }

        rid = request_id_ctx.get()
        if rid:
            log_data["request_id"] = rid

        extra_fields = {}
        for k, v in record.__dict__.items():
            if k in _RESERVED_ATTRS or k.startswith("_"):
                continue
            extra_fields[k] = v

        # never ship credentials, and shorten user identifiers outside dev
        for field in list(extra_fields):
            if _is_sensitive_field(field):
                extra_fields[field] = "[REDACTED]"
        if ENV != "dev" and "email" in extra_fields:
            val = str(extra_fields["email"])
            extra_fields["email"] = val[:2] + "***" + val[val.find("@"):] if "@" in val else "[REDACTED]"

        log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if ENV != "dev":
            log_data["message"] = sanitize_message_text(log_data.get("message", ""))

        return json.dumps(log_data, default=str)


class SecurityFilter(logging.Filter):
    """Redact credentials from the rendered message outside dev"""

    def filter(self, record: logging.LogRecord) -> bool:
        if ENV == "dev":
            return True
        msg = record.getMessage()
        record.msg = sanitize_message_text(msg)
        record.args = ()
        return True


# Non-blocking queue-based logging. Call once when the client starts.
_queue_listener: Optional[QueueListener] = None

_LEVELS = {"prod": logging.INFO, "staging": logging.INFO}

_DEV_FORMAT = "%(asctime)s [%(levelname)8s] %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecurityFilter())
    if ENV == "dev":
        handler.setFormatter(logging.Formatter(_DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    else:
        handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> "ContextLogger":
    """Route every record through a queue to a single stdout handler. Safe to call again."""
    global _queue_listener

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    q: Queue = Queue(-1)
    root.addHandler(QueueHandler(q))
    root.setLevel(_LEVELS.get(ENV, logging.DEBUG))

    shutdown_logging()
    _queue_listener = QueueListener(q, _console_handler(), respect_handler_level=True)
    _queue_listener.start()

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.INFO if ENV == "dev" else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return get_logger("storefront.client")


def shutdown_logging():
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


class ContextLogger(logging.LoggerAdapter):
    """Adds the bound request id to every record; explicit `extra` keys win."""

    def process(self, msg, kwargs):
        extra = {}
        rid = request_id_ctx.get()
        if rid:
            extra["request_id"] = rid
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str = "storefront.client") -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})
