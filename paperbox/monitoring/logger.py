"""
Strukturiertes Logging System
"""
import json
import logging
import os
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Any, Optional

DEFAULT_LOG_DIR = os.getenv('PAPERBOX_LOG_DIR', 'logs')


class StructuredLogger:
    """Strukturierter Logger mit JSON-Format und Context-Support"""

    def __init__(self, name: str, log_dir: Optional[str] = None):
        self.name = name
        self.log_dir = Path(log_dir or DEFAULT_LOG_DIR)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Verhindere doppelte Handler
        if not self.logger.handlers:
            self._setup_handlers()

        self.context = {}

    def _setup_handlers(self):
        """Konfiguriert Console- und Datei-Handler"""
        level_name = os.getenv('LOG_LEVEL', 'INFO').upper()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, level_name, logging.INFO))
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        self.logger.addHandler(console_handler)

        # Strukturierte Logs, 10MB pro Datei
        file_formatter = StructuredFormatter()
        file_handler = RotatingFileHandler(
            self.log_dir / f"{self.name}.log", maxBytes=10*1024*1024, backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            self.log_dir / f"{self.name}_errors.log", maxBytes=5*1024*1024, backupCount=3
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        self.logger.addHandler(error_handler)

    def set_context(self, **kwargs):
        """Setzt globalen Kontext für alle Log-Nachrichten"""
        self.context.update(kwargs)

    def clear_context(self):
        """Löscht globalen Kontext"""
        self.context.clear()

    def _create_log_entry(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'logger': self.name,
            'message': message,
            'process_id': os.getpid(),
        }
        entry.update(self.context)
        entry.update(kwargs)
        return entry

    def _attach_exception(self, entry: Dict[str, Any], exception: Optional[Exception]):
        if exception:
            entry['exception'] = {
                'type': type(exception).__name__,
                'message': str(exception),
                'traceback': traceback.format_exc()
            }

    def info(self, message: str, **kwargs):
        """Info-Level Logging"""
        entry = self._create_log_entry('INFO', message, **kwargs)
        self.logger.info(json.dumps(entry, default=str))

    def debug(self, message: str, **kwargs):
        """Debug-Level Logging"""
        entry = self._create_log_entry('DEBUG', message, **kwargs)
        self.logger.debug(json.dumps(entry, default=str))

    def warning(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Warning-Level Logging"""
        entry = self._create_log_entry('WARNING', message, **kwargs)
        self._attach_exception(entry, exception)
        self.logger.warning(json.dumps(entry, default=str))

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Error-Level Logging mit Exception-Support"""
        entry = self._create_log_entry('ERROR', message, **kwargs)
        self._attach_exception(entry, exception)
        self.logger.error(json.dumps(entry, default=str))

    def critical(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Critical-Level Logging"""
        entry = self._create_log_entry('CRITICAL', message, **kwargs)
        self._attach_exception(entry, exception)
        self.logger.critical(json.dumps(entry, default=str))


class StructuredFormatter(logging.Formatter):
    """Custom Formatter für strukturierte Logs"""

    def format(self, record):
        # Wenn die Nachricht bereits JSON ist, gib sie direkt zurück
        try:
            json.loads(record.getMessage())
            return record.getMessage()
        except (json.JSONDecodeError, ValueError):
            entry = {
                'timestamp': datetime.fromtimestamp(record.created).isoformat(),
                'level': record.levelname,
                'logger': record.name,
                'message': record.getMessage(),
                'module': record.module,
                'function': record.funcName,
                'line': record.lineno,
                'process_id': os.getpid()
            }
            return json.dumps(entry)


# Global Logger Instanzen
_loggers = {}


def get_logger(name: str = 'paperbox') -> StructuredLogger:
    """Holt oder erstellt Logger-Instanz"""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def log_performance(operation: str):
    """Decorator für Performance-Logging"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger('performance')
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                logger.info(f"Operation completed: {operation}",
                            operation=operation,
                            duration=time.time() - start_time,
                            status='success')
                return result

            except Exception as e:
                logger.error(f"Operation failed: {operation}",
                             operation=operation,
                             duration=time.time() - start_time,
                             status='error',
                             exception=e)
                raise

        return wrapper

    return decorator
