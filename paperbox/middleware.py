"""
Middleware for the Paperbox Storage Service
Includes request timing, performance statistics and security headers
"""

import time
from collections import defaultdict, deque
from flask import request, jsonify, g, current_app

from .monitoring import get_logger

logger = get_logger('middleware')


class PerformanceMonitor:
    """Performance monitoring middleware"""

    def __init__(self, slow_request_seconds: float = 2.0):
        self.slow_request_seconds = slow_request_seconds
        self.request_times = deque(maxlen=1000)
        self.slow_requests = deque(maxlen=100)
        self.error_count = defaultdict(int)

    def record_request(self, path: str, method: str, duration: float, status_code: int):
        """Record request performance metrics"""
        now = time.time()

        self.request_times.append({
            'path': path,
            'method': method,
            'duration': duration,
            'status_code': status_code,
            'timestamp': now
        })

        if duration > self.slow_request_seconds:
            self.slow_requests.append({
                'path': path,
                'method': method,
                'duration': duration,
                'timestamp': now
            })
            logger.warning("Slow request", path=path, method=method, duration=duration)

        if status_code >= 400:
            self.error_count[f"{status_code}"] += 1

    def get_performance_stats(self) -> dict:
        """Get current performance statistics"""
        if not self.request_times:
            return {
                'avg_response_time': 0,
                'slow_request_count': 0,
                'total_requests': 0,
                'error_rate': 0,
                'errors_by_status': {}
            }

        recent_times = [r['duration'] for r in self.request_times]
        avg_time = sum(recent_times) / len(recent_times)

        total_requests = len(self.request_times)
        error_requests = sum(1 for r in self.request_times if r['status_code'] >= 400)
        error_rate = (error_requests / total_requests) * 100

        return {
            'avg_response_time': round(avg_time, 3),
            'slow_request_count': len(self.slow_requests),
            'total_requests': total_requests,
            'error_rate': round(error_rate, 2),
            'errors_by_status': dict(self.error_count),
            'p95_response_time': self._calculate_percentile(recent_times, 95)
        }

    def _calculate_percentile(self, values: list, percentile: int) -> float:
        if not values:
            return 0

        sorted_values = sorted(values)
        index = int((percentile / 100) * len(sorted_values))
        return round(sorted_values[min(index, len(sorted_values) - 1)], 3)


class SecurityMiddleware:
    """Security enhancements middleware"""

    def check_security_headers(self, response):
        """Add security headers to response"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        return response

    def validate_request_size(self, req) -> bool:
        """Validate request content length against MAX_CONTENT_LENGTH"""
        max_size = current_app.config.get('MAX_CONTENT_LENGTH')
        content_length = req.content_length

        if max_size and content_length and content_length > max_size:
            return False

        return True


def register_middleware(app, performance_monitor: PerformanceMonitor = None):
    """Register request middleware with Flask app"""
    monitor = performance_monitor or PerformanceMonitor()
    security = SecurityMiddleware()
    app.extensions['performance_monitor'] = monitor

    @app.before_request
    def before_request():
        g.start_time = time.time()

        if not security.validate_request_size(request):
            logger.warning("Request too large",
                           ip=request.remote_addr,
                           size=request.content_length)
            return jsonify({'error': 'Request too large'}), 413

    @app.after_request
    def after_request(response):
        duration = time.time() - g.get('start_time', time.time())

        monitor.record_request(
            request.path,
            request.method,
            duration,
            response.status_code
        )

        # Die UI läuft auf einem anderen Host/Port als der Storage Service
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        response = security.check_security_headers(response)
        response.headers['X-Response-Time'] = f"{duration:.3f}s"

        logger.debug("HTTP Response sent",
                     status_code=response.status_code,
                     path=request.path,
                     duration=duration)
        return response

    return monitor
