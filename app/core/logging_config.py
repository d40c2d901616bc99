"""Logging configuration.

Provides console output plus optional rotating files (general, error, access) with
JSON or plain formatting. Request context (request_id/user_id/ip) lives in
contextvars bound by the logging middleware and is stamped onto every record by a
handler-level filter so records propagated from module loggers carry it too.
"""

import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

import orjson

# Context variables used across middleware/handlers to enrich logs
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[Optional[int]] = ContextVar("user_id", default=None)
ip_ctx: ContextVar[Optional[str]] = ContextVar("ip_address", default=None)

_PLAIN_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
)
_ACCESS_FORMAT = (
    "%(asctime)s | %(method)s %(endpoint)s | Status: %(status_code)s"
    " | Duration: %(duration)sms | IP: %(ip_address)s"
)
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attributes copied into JSON output when present.
_EXTRA_FIELDS = (
    "request_id",
    "user_id",
    "ip_address",
    "endpoint",
    "method",
    "status_code",
    "path",
    "error_code",
    "error_type",
)


class JSONFormatter(logging.Formatter):
    """Emit logs as one JSON object per line for aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if hasattr(record, "duration"):
            log_data["duration_ms"] = record.duration

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(log_data, default=str).decode("utf-8")


class ColoredFormatter(logging.Formatter):
    """Add ANSI colors to console output for local readability."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class ContextEnricher(logging.Filter):
    """Inject contextvars (request_id, user_id, ip_address) into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = request_id_ctx.get()
        user_id = user_id_ctx.get()
        ip_address = ip_ctx.get()
        if request_id and not hasattr(record, "request_id"):
            record.request_id = request_id
        if user_id and not hasattr(record, "user_id"):
            record.user_id = user_id
        if ip_address and not hasattr(record, "ip_address"):
            record.ip_address = ip_address
        return True


def bind_request_context(
    *,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
) -> List[Tuple[str, object]]:
    """Bind request context into contextvars; returns tokens for reset."""
    tokens = []
    if request_id is not None:
        tokens.append(("request_id", request_id_ctx.set(request_id)))
    if user_id is not None:
        tokens.append(("user_id", user_id_ctx.set(user_id)))
    if ip_address is not None:
        tokens.append(("ip_address", ip_ctx.set(ip_address)))
    return tokens


def reset_request_context(tokens) -> None:
    """Reset bound contextvars using tokens returned by bind_request_context."""
    variables = {"request_id": request_id_ctx, "user_id": user_id_ctx, "ip_address": ip_ctx}
    for key, token in reversed(tokens):
        variables[key].reset(token)


def _reset_handlers(logger: logging.Logger) -> None:
    """Close and remove any existing handlers to avoid descriptor leaks."""
    for handler in list(logger.handlers):
        try:
            handler.flush()
        finally:
            handler.close()
            logger.removeHandler(handler)


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextEnricher())
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    app_name: str = "minisocial",
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    use_json: bool = False,
    use_colors: bool = True,
) -> None:
    """Configure root logging.

    Args:
        log_level: Minimum logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory to store log files; if None, logs only to console.
        app_name: Application name used in log filenames.
        max_bytes: Max size per log file before rotation.
        backup_count: Number of rotated files to keep.
        use_json: If True, use JSON for file handlers (better for aggregation).
        use_colors: If True, add ANSI colors to console output.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _reset_handlers(root_logger)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter_cls = ColoredFormatter if use_colors else logging.Formatter
    console_handler.setFormatter(formatter_cls(_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.addFilter(ContextEnricher())
    root_logger.addHandler(console_handler)

    access_logger = logging.getLogger("access")
    _reset_handlers(access_logger)
    access_logger.setLevel(logging.INFO)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        def file_formatter(fmt: str) -> logging.Formatter:
            if use_json:
                return JSONFormatter()
            return logging.Formatter(fmt, datefmt=_DATE_FORMAT)

        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}.log",
                logging.DEBUG,
                file_formatter(_PLAIN_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_error.log",
                logging.ERROR,
                file_formatter(_PLAIN_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        # Access lines go to their own file only.
        access_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_access.log",
                logging.INFO,
                file_formatter(_ACCESS_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        access_logger.propagate = False
    else:
        access_logger.propagate = True

    for noisy in ("urllib3", "asyncio", "multipart", "passlib"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured. Level: %s, Directory: %s",
        log_level,
        log_dir or "console only",
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: float,
    ip_address: str,
    user_id: Optional[int] = None,
    request_id: Optional[str] = None,
) -> None:
    """
    Log an HTTP request with structured data.

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Request endpoint/path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
        ip_address: Client IP address
        user_id: User ID if authenticated
        request_id: Unique request ID for tracking
    """
    extra = {
        "method": method,
        "endpoint": endpoint,
        "status_code": status_code,
        "duration": f"{duration_ms:.2f}",
        "ip_address": ip_address,
    }
    if user_id:
        extra["user_id"] = user_id
    if request_id:
        extra["request_id"] = request_id

    logging.getLogger("access").info(
        f"{method} {endpoint} - {status_code} - {duration_ms:.2f}ms", extra=extra
    )
