"""
Logging setup with contextvars-based metadata injection.

- Every line carries the session tag, the client id and, inside
  ``record_scope``, the id of the record being resolved.
- Console-only logging, or console plus a rotating file per session.
- Quiets chatty library loggers.
"""

import contextvars
import hashlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

cv_session_tag = contextvars.ContextVar("session_tag", default="-")
cv_client_id = contextvars.ContextVar("client_id", default="-")
cv_record_id = contextvars.ContextVar("record_id", default="-")

# Reported in JSON outputs, not printed on every line
cv_session_id_full = contextvars.ContextVar("session_id_full", default="-")
cv_consumer = contextvars.ContextVar("consumer", default="-")

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] s=%(session)s c=%(client)s r=%(record)s | %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | s=%(session)s c=%(client)s r=%(record)s | %(message)s"

QUIET_LOGGERS = ("asyncio", "openpyxl")


def make_session_tag(session_id_full: str, length: int = 8) -> str:
    """Short stable tag for a session id (BLAKE2s hex prefix)."""
    return hashlib.blake2s(session_id_full.encode("utf-8"), digest_size=8).hexdigest()[:length]


class ContextInjectFilter(logging.Filter):
    """Copy the session, client and record context onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = cv_session_tag.get() or "-"
        record.client = cv_client_id.get() or "-"
        record.record = cv_record_id.get() or "-"
        return True


def set_log_context(
    *,
    session_id_full: str | None = None,
    client_id: str | None = None,
    consumer: str | None = None,
) -> None:
    """Update the logging context; values are task-local through contextvars."""
    if session_id_full is not None:
        cv_session_id_full.set(str(session_id_full))
        cv_session_tag.set(make_session_tag(str(session_id_full)))
    if client_id is not None:
        cv_client_id.set(str(client_id))
    if consumer is not None:
        cv_consumer.set(str(consumer))


def get_log_context() -> dict[str, str]:
    """Current context as a dict, for JSON reports."""
    return {
        "session_tag": str(cv_session_tag.get() or "-"),
        "session_id_full": str(cv_session_id_full.get() or "-"),
        "client_id": str(cv_client_id.get() or "-"),
        "consumer": str(cv_consumer.get() or "-"),
    }


def clear_session_context() -> None:
    """Reset session context to default (keep client)."""
    cv_session_tag.set("-")
    cv_session_id_full.set("-")
    cv_consumer.set("-")
    cv_record_id.set("-")


@contextmanager
def record_scope(record_id: str | None) -> Iterator[None]:
    """Tag log lines emitted inside the block with a record id."""
    token = cv_record_id.set(str(record_id) if record_id else "-")
    try:
        yield
    finally:
        cv_record_id.reset(token)


def _handler(handler: logging.Handler, level: int, fmt: str, datefmt: str, ctx: logging.Filter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handler.addFilter(ctx)
    return handler


def configure_logging(
    *,
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure root logging for a session.

    Args:
        log_file: Session log file; console only when None
        console_level: Minimum level for console output (default: INFO)
        file_level: Minimum level for file output (default: DEBUG)
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated files to keep
    """
    # Calling twice must not duplicate lines
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    ctx = ContextInjectFilter()
    root.addHandler(_handler(logging.StreamHandler(), console_level, CONSOLE_FORMAT, "%H:%M:%S", ctx))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        root.addHandler(_handler(rotating, file_level, FILE_FORMAT, "%Y-%m-%d %H:%M:%S", ctx))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured (console_level=%s, file=%s)",
        logging.getLevelName(console_level),
        log_file if log_file is not None else "-",
    )
