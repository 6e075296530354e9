"""
Logging utilities for the innsyn service.
Provides structured logging that keeps request bodies and credentials out of log files.
"""

import json
import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# Configuration
LOG_DIR = Path("logs")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

# Fields that should never be logged verbatim
SENSITIVE_FIELDS = {
    'api_key', 'anon_key', 'service_role_key', 'password', 'token',
    'secret', 'credential', 'authorization', 'body',
}

# Extra attributes copied from log records into the JSON output
CONTEXT_FIELDS = (
    'user_id', 'session_id', 'request_id', 'entry_uid', 'case_key',
    'execution_time',
)


def sanitize_log_data(data: Any) -> Any:
    """
    Recursively sanitize data to remove sensitive information.

    Args:
        data: Data to sanitize (dict, list, or primitive)

    Returns:
        Sanitized data with sensitive fields masked
    """
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                sanitized[key] = "***REDACTED***"
            else:
                sanitized[key] = sanitize_log_data(value)
        return sanitized

    elif isinstance(data, (list, tuple)):
        return [sanitize_log_data(item) for item in data]

    elif isinstance(data, str):
        if len(data) > 8 and any(pattern in data.lower() for pattern in ['password', 'secret', 'apikey']):
            return "***REDACTED***"
        return data

    else:
        return data


class InnsynJSONFormatter(logging.Formatter):
    """JSON formatter carrying session and request context"""

    def format(self, record):
        log_record = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)

        sanitized_record = sanitize_log_data(log_record)

        return json.dumps(sanitized_record, ensure_ascii=False, default=str)


def setup_logging(
    app_name: str = "innsyn",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    json_file: bool = True,
    max_size_mb: int = 10,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """
    Set up console and rotating file logging.

    Args:
        app_name: Name of the application logger
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        json_file: Whether to write a JSON log file next to the console output
        max_size_mb: Rotation size for the file handlers
        backup_count: Number of rotated files to keep

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if json_file:
        if log_dir is None:
            log_dir = LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(InnsynJSONFormatter())
        logger.addHandler(file_handler)

        # Separate audit log
        audit_logger = logging.getLogger('audit')
        audit_logger.setLevel(logging.INFO)
        audit_logger.handlers.clear()
        audit_handler = logging.handlers.RotatingFileHandler(
            log_dir / "audit.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        audit_handler.setLevel(logging.INFO)
        audit_handler.setFormatter(InnsynJSONFormatter())
        audit_logger.addHandler(audit_handler)

    logger.info(f"Logging initialized for {app_name} at level {log_level}")

    return logger


def get_logger(name: str, **kwargs) -> logging.Logger:
    """
    Get a logger instance with optional extra context.

    Args:
        name: Logger name (usually __name__)
        **kwargs: Additional context to include in logs

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if kwargs:
        return logging.LoggerAdapter(logger, sanitize_log_data(kwargs))

    return logger


class TimedOperation:
    """Context manager for logging store round trips"""

    def __init__(self, logger: logging.Logger, operation: str, **context: Any):
        self.logger = logger
        self.operation = operation
        self.context = sanitize_log_data(context)
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.debug(f"{self.operation} started", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        execution_time = (datetime.now() - self.start_time).total_seconds()
        extra = {**self.context, 'execution_time': execution_time}

        if exc_type is None:
            self.logger.debug(f"{self.operation} completed", extra=extra)
        else:
            self.logger.warning(
                f"{self.operation} failed: {exc_val}",
                extra={**extra, 'error_type': exc_type.__name__}
            )
        return False


def log_performance_metric(metric_name: str, value: float, unit: str, context: Dict[str, Any] = None):
    """
    Log performance metrics.

    Args:
        metric_name: Name of the metric
        value: Metric value
        unit: Unit of measurement
        context: Additional context
    """
    performance_logger = logging.getLogger('performance')

    performance_logger.info(
        f"Performance metric: {metric_name}",
        extra={
            'event_type': 'performance',
            'metric_name': metric_name,
            'value': value,
            'unit': unit,
            'context': sanitize_log_data(context or {}),
            'timestamp': datetime.now().isoformat()
        }
    )
