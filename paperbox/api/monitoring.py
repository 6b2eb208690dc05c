"""
Monitoring API Blueprint
Health check and request statistics for the storage service
"""

from datetime import datetime
from flask import Blueprint, jsonify, current_app

import psutil

from .. import __version__
from ..monitoring import get_logger, get_error_reporter
from .context import get_store

monitoring_bp = Blueprint('monitoring', __name__, url_prefix='/api')

logger = get_logger('monitoring_api')


@monitoring_bp.route('/monitoring/health')
def health():
    """Health Check inklusive Speicherplatz des Datenverzeichnisses"""
    store = get_store()
    disk = psutil.disk_usage(str(store.data_dir))
    writable = store.data_dir.is_dir() and store.tmp_dir.is_dir()
    logger.debug("Health check", writable=writable, disk_percent=disk.percent)

    return jsonify({
        'status': 'healthy' if writable else 'degraded',
        'timestamp': datetime.now().isoformat(),
        'version': __version__,
        'storage': {
            'data_dir': str(store.data_dir),
            'writable': writable,
            'disk_free_gb': round(disk.free / (1024 ** 3), 2),
            'disk_percent': disk.percent
        }
    })


@monitoring_bp.route('/monitoring/status')
def status():
    """Request-Statistiken und Fehlerzähler"""
    monitor = current_app.extensions['performance_monitor']

    return jsonify({
        'performance': monitor.get_performance_stats(),
        'errors': get_error_reporter().get_error_statistics(),
        'timestamp': datetime.now().isoformat()
    })
