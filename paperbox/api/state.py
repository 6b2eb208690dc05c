"""
State Document API Blueprint
Reads and replaces the single shared application state document
"""

from flask import Blueprint, request, jsonify

from ..error_handlers import create_error_response
from .context import get_store
from ..monitoring import get_logger, log_performance

state_bp = Blueprint('state', __name__, url_prefix='/api')

logger = get_logger('state_api')


@state_bp.route('/state', methods=['GET'])
def get_state():
    """Gibt das gespeicherte State-Dokument zurück"""
    return jsonify(get_store().read_state())


@state_bp.route('/state', methods=['POST'])
@log_performance("save_state")
def save_state():
    """Ersetzt das State-Dokument vollständig (kein Merge)"""
    payload = request.get_json(silent=True)
    if payload is None:
        logger.warning("State save rejected: body is not valid JSON",
                       content_type=request.content_type)
        return create_error_response('Invalid JSON', 'Request body must be a JSON document', 400)

    get_store().write_state(payload)
    return jsonify({'ok': True})
