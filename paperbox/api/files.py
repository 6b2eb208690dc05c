"""
Static serving of stored binaries under /data/<storagePath>
"""

from flask import Blueprint, send_from_directory

from ..storage import PUBLIC_PREFIX
from .context import get_store

files_bp = Blueprint('files', __name__)


@files_bp.route(f'/{PUBLIC_PREFIX}/<path:filename>')
def serve_file(filename):
    """Liefert eine gespeicherte Datei aus; 404 wenn sie fehlt"""
    return send_from_directory(get_store().data_dir, filename,
                               mimetype='application/pdf' if filename.endswith('.pdf') else None)
