"""
Paperbox Storage Service
Flask application factory wiring storage, blueprints, error handlers and middleware
"""

from typing import Optional

from flask import Flask

from .api import state_bp, pdfs_bp, files_bp, monitoring_bp
from .error_handlers import register_error_handlers
from .middleware import register_middleware, PerformanceMonitor
from .monitoring import get_logger
from .production_config import ProductionConfig, config_manager
from .storage import DocumentStore

logger = get_logger('paperbox_server')


def create_app(config: Optional[ProductionConfig] = None) -> Flask:
    """Erstellt die Flask-App für den Storage Service"""
    app = Flask(__name__)

    config_manager.initialize_app(app, config)
    config = config_manager.config

    app.extensions['document_store'] = DocumentStore(
        config.data_path,
        state_file=config.state_file,
        default_folder=config.default_folder
    )

    register_error_handlers(app)
    register_middleware(app, PerformanceMonitor(config.slow_request_seconds))

    app.register_blueprint(state_bp)
    app.register_blueprint(pdfs_bp)
    app.register_blueprint(files_bp)
    app.register_blueprint(monitoring_bp)

    logger.info("Storage service initialized",
                data_dir=str(config.data_path),
                max_file_size_mb=config.max_file_size_mb)
    return app
