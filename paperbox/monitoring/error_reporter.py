"""
Error Reporting für Storage- und Request-Fehler
"""
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Dict, Optional, Any

from .logger import get_logger


class ErrorReporter:
    """Zählt gemeldete Fehler pro Typ und hält eine kurze Historie vor"""

    def __init__(self, history_size: int = 100):
        self.logger = get_logger('error_reporter')
        self.error_counts = defaultdict(int)
        self.error_history = defaultdict(lambda: deque(maxlen=history_size))
        self.lock = Lock()

    def report_error(self, error_type: str, message: str,
                     context: Optional[Dict[str, Any]] = None) -> str:
        """Meldet einen Fehler und gibt eine Error-ID zurück"""
        current_time = time.time()

        with self.lock:
            self.error_counts[error_type] += 1
            error_id = f"{error_type}-{int(current_time * 1000)}-{self.error_counts[error_type]}"
            self.error_history[error_type].append({
                'id': error_id,
                'timestamp': current_time,
                'message': message,
                'context': context or {}
            })

        self.logger.error(f"Error reported: {error_type}",
                          error_id=error_id,
                          error_type=error_type,
                          error_message=message,
                          context=context,
                          total_count=self.error_counts[error_type])
        return error_id

    def get_error_statistics(self) -> Dict[str, Any]:
        """Gibt Error-Statistiken zurück"""
        hour_ago = time.time() - 3600

        stats = {
            'total_errors': dict(self.error_counts),
            'error_types': list(self.error_counts.keys()),
            'recent_errors': {},
            'top_errors': []
        }

        for error_type, history in self.error_history.items():
            stats['recent_errors'][error_type] = {
                'last_hour': len([e for e in history if e['timestamp'] > hour_ago]),
                'total': len(history)
            }

        sorted_errors = sorted(self.error_counts.items(),
                               key=lambda x: x[1], reverse=True)
        stats['top_errors'] = sorted_errors[:10]

        return stats


# Global Error Reporter Instance
_error_reporter = None


def get_error_reporter() -> ErrorReporter:
    """Holt oder erstellt Error Reporter Instanz"""
    global _error_reporter
    if _error_reporter is None:
        _error_reporter = ErrorReporter()
    return _error_reporter
