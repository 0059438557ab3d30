import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

from pythonjsonlogger import jsonlogger

from message_store.config import get_settings


# Context variable holding the id of the table operation in progress
operation_id_ctx: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


def get_operation_id() -> Optional[str]:
    """Get the current operation ID from context."""
    return operation_id_ctx.get()


@contextmanager
def operation_context(operation_id: Optional[str] = None) -> Iterator[str]:
    """
    Tag every log line emitted inside the block with one operation ID.

    Args:
        operation_id: ID to use; a random UUID is generated when omitted
    """
    operation_id = operation_id or str(uuid.uuid4())
    token = operation_id_ctx.set(operation_id)
    try:
        yield operation_id
    finally:
        operation_id_ctx.reset(token)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter to ensure ISO-8601 timestamps and operation_id."""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        # Ensure timestamp is in ISO-8601 format with Z suffix
        if not log_record.get('ts'):
            log_record['ts'] = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        log_record['level'] = record.levelname

        if 'operation_id' not in log_record:
            op_id = operation_id_ctx.get()
            if op_id:
                log_record['operation_id'] = op_id


def setup_logging(log_level: Optional[str] = None):
    """
    Setup structured JSON logging on the root logger.

    Host applications call this once at startup; the library itself only
    creates module loggers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to LOG_LEVEL from settings
    """
    log_level = log_level or get_settings().LOG_LEVEL
    logger = logging.getLogger()
    logger.setLevel(log_level.upper())

    # Remove existing handlers
    logger.handlers = []

    json_handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        '%(ts)s %(level)s %(name)s %(message)s'
    )
    json_handler.setFormatter(formatter)
    logger.addHandler(json_handler)

    # SQLAlchemy engine logging is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger
