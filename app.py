#!/usr/bin/env python3
"""
Paperbox Storage Service
Speichert das Anwendungs-State-Dokument und die archivierten PDFs
"""

from paperbox.monitoring import get_logger
from paperbox.production_config import config_manager
from paperbox.server import create_app

app = create_app()
logger = get_logger('paperbox')


if __name__ == '__main__':
    config = config_manager.config
    config_manager.print_config_summary()

    logger.info("Starting Paperbox storage service",
                host=config.host,
                port=config.port,
                data_dir=str(config.data_path),
                debug_mode=config.debug)

    print(f"Data directory: {config.data_path}")
    print(f"Health Check: /api/monitoring/health")

    try:
        app.run(debug=config.debug, host=config.host, port=config.port)
    except Exception as e:
        logger.critical("Application startup failed", exception=e)
        raise
