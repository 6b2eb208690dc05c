"""
Global Error Handlers for the Paperbox Storage Service
Provides error handling and JSON error responses
"""

import traceback
from datetime import datetime
from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from .monitoring import get_logger, get_error_reporter

logger = get_logger('error_handlers')


def register_error_handlers(app):
    """Register global error handlers with Flask app"""

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors"""
        logger.warning("404 Not Found",
                       path=request.path,
                       method=request.method,
                       remote_addr=request.remote_addr)

        return jsonify({
            'error': 'Not Found',
            'message': 'The requested resource was not found',
            'status_code': 404,
            'timestamp': datetime.now().isoformat()
        }), 404

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors"""
        logger.warning("400 Bad Request",
                       path=request.path,
                       method=request.method,
                       error_description=str(error))

        return jsonify({
            'error': 'Bad Request',
            'message': 'The request contains invalid data',
            'status_code': 400,
            'timestamp': datetime.now().isoformat()
        }), 400

    @app.errorhandler(413)
    def payload_too_large(error):
        """Handle 413 for uploads above MAX_CONTENT_LENGTH"""
        logger.warning("413 Payload Too Large",
                       path=request.path,
                       content_length=request.content_length)

        return jsonify({
            'error': 'Payload Too Large',
            'message': 'The uploaded file exceeds the configured size limit',
            'status_code': 413,
            'timestamp': datetime.now().isoformat()
        }), 413

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        """Handle general HTTP exceptions"""
        logger.warning("HTTP Exception",
                       status_code=error.code,
                       path=request.path,
                       method=request.method,
                       description=error.description)

        return jsonify({
            'error': error.name,
            'message': error.description,
            'status_code': error.code,
            'timestamp': datetime.now().isoformat()
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        """Handle unexpected exceptions"""
        error_id = get_error_reporter().report_error(
            'unexpected_error',
            str(error),
            {
                'path': request.path,
                'method': request.method,
                'traceback': traceback.format_exc(),
                'error_type': type(error).__name__
            }
        )

        logger.critical("Unexpected error",
                        path=request.path,
                        method=request.method,
                        error_id=error_id,
                        error_type=type(error).__name__,
                        exception=error)

        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred',
            'error_id': error_id,
            'status_code': 500,
            'timestamp': datetime.now().isoformat()
        }), 500


class StorageError(Exception):
    """Raised when a call to the storage service fails"""
    def __init__(self, message, operation=None, status_code=None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


def safe_execute(func, fallback_value=None, error_message="Operation failed"):
    """
    Safely execute a function with error handling and logging

    Args:
        func: Function to execute
        fallback_value: Value to return if function fails
        error_message: Custom error message for logging

    Returns:
        Function result or fallback_value if error occurs
    """
    try:
        return func()
    except Exception as e:
        logger.error(f"Safe execution failed: {error_message}",
                     exception=e,
                     function_name=getattr(func, '__name__', 'unknown'))
        return fallback_value


def create_error_response(error_type, message, status_code=500, details=None):
    """
    Create standardized error response

    Returns:
        Tuple of (response, status_code)
    """
    response = {
        'error': error_type,
        'message': message,
        'status_code': status_code,
        'timestamp': datetime.now().isoformat()
    }

    if details:
        response['details'] = details

    return jsonify(response), status_code
