"""
Logging system - structured logging configuration

Provides:
- Structured JSON logs
- Request tracing
- Operation timing
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional
import time


class StructuredFormatter(logging.Formatter):
    """Structured JSON log formatter"""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # extra fields
        if hasattr(record, 'request_id'):
            log_data["request_id"] = record.request_id
        if hasattr(record, 'duration_ms'):
            log_data["duration_ms"] = record.duration_ms
        if hasattr(record, 'extra_data'):
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    """Simple coloured formatter (development)"""

    COLORS = {
        'DEBUG': '\033[36m',     # cyan
        'INFO': '\033[32m',      # green
        'WARNING': '\033[33m',   # yellow
        'ERROR': '\033[31m',     # red
        'CRITICAL': '\033[35m',  # magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

        msg = f"{color}[{timestamp}] [{record.levelname}]{self.RESET} {record.getMessage()}"

        if getattr(record, 'request_id', None):
            msg = f"{color}[{record.request_id}]{self.RESET} {msg}"

        if getattr(record, 'duration_ms', None) is not None:
            msg += f" ({record.duration_ms:.2f}ms)"

        if getattr(record, 'extra_data', None):
            msg += f" {json.dumps(record.extra_data, ensure_ascii=False, default=str)}"

        return msg


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the logging system

    Args:
        level: log level
        json_format: emit JSON lines instead of coloured text
        log_file: optional log file path (always JSON)

    Returns:
        logging.Logger: the root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if json_format:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(SimpleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger"""
    return logging.getLogger(name)


class LogContext:
    """Times one operation and logs its start and end"""

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        request_id: Optional[str] = None,
        **extra
    ):
        self.logger = logger
        self.operation = operation
        self.request_id = request_id
        self.extra = extra
        self.start_time = None

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return (time.perf_counter() - self.start_time) * 1000

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(
            f"Started {self.operation}",
            extra={
                'request_id': self.request_id,
                'extra_data': self.extra
            }
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = self.elapsed_ms
        if exc_type:
            self.logger.error(
                f"Failed {self.operation}: {exc_val}",
                extra={
                    'request_id': self.request_id,
                    'duration_ms': duration,
                    'extra_data': self.extra
                },
                exc_info=True
            )
        else:
            self.logger.info(
                f"Finished {self.operation}",
                extra={
                    'request_id': self.request_id,
                    'duration_ms': duration,
                    'extra_data': self.extra
                }
            )
        return False
