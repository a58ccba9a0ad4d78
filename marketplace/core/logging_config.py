"""
Structured logging configuration with trace IDs
"""
import logging
import contextvars
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from marketplace.core.config import get_settings

# Context variable to store trace ID across calls
trace_id_var = contextvars.ContextVar('trace_id', default=None)

# Extra fields copied onto every JSON record when present
DOMAIN_FIELDS = ('user_id', 'item_id', 'bidder_id', 'bid_id', 'amount', 'question_id', 'duration_ms')


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with trace ID and marketplace fields"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname

        trace_id = get_trace_id()
        if trace_id:
            log_record['trace_id'] = trace_id

        log_record['service'] = 'auction-marketplace'

        for field in DOMAIN_FIELDS:
            if hasattr(record, field):
                value = getattr(record, field)
                log_record[field] = str(value) if field == 'amount' else value


def setup_logging() -> logging.Logger:
    """Configure root logging from settings"""
    settings = get_settings()

    if settings.LOG_JSON:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)

    # Avoid duplicate handlers when the app is created more than once
    for handler in list(root_logger.handlers):
        if getattr(handler, '_marketplace', False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler._marketplace = True
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(formatter)
        file_handler._marketplace = True
        root_logger.addHandler(file_handler)

    # Reduce noise from libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    return root_logger


def get_trace_id() -> Optional[str]:
    """Get current trace ID"""
    return trace_id_var.get()


def set_trace_id(trace_id: str):
    """Set trace ID for current context"""
    trace_id_var.set(trace_id)


def generate_trace_id() -> str:
    """Generate a new trace ID"""
    return str(uuid.uuid4())
