"""
PDF Binary API Blueprint
Handles upload and deletion of stored PDF files
"""

from flask import Blueprint, request, jsonify

from ..error_handlers import create_error_response
from .context import get_store
from ..monitoring import get_logger, log_performance

pdfs_bp = Blueprint('pdfs', __name__, url_prefix='/api')

logger = get_logger('pdfs_api')


@pdfs_bp.route('/pdfs', methods=['POST'])
@log_performance("upload_pdf")
def upload_pdf():
    """Speichert ein hochgeladenes PDF unter {folder}/{id}.pdf"""
    upload = request.files.get('file')
    if upload is None:
        logger.warning("PDF upload rejected: missing file")
        return create_error_response('Missing file', 'Multipart field "file" is required', 400)

    result = get_store().save_pdf(
        upload,
        file_id=request.form.get('id'),
        folder=request.form.get('folder')
    )

    logger.info("PDF upload completed",
                storage_path=result['storagePath'],
                original_filename=upload.filename)
    return jsonify(result)


@pdfs_bp.route('/pdfs/delete', methods=['POST'])
@log_performance("delete_pdf")
def delete_pdf():
    """Löscht ein gespeichertes PDF"""
    data = request.get_json(silent=True) or {}
    storage_path = data.get('storagePath')

    if not storage_path:
        logger.warning("PDF delete rejected: missing storagePath")
        return create_error_response('Missing storagePath', 'Field "storagePath" is required', 400)

    if not get_store().delete_pdf(storage_path):
        return create_error_response('File not found', f'No stored file at {storage_path}', 404)

    return jsonify({'ok': True})
