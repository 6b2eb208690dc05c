"""
Paperbox Client
Baut Storage-Client, Einstellungen und State Controller aus der Client-Konfiguration
"""
from typing import Optional

from .monitoring import get_logger
from .preferences import PreferenceStore
from .services.state_controller import AppStateController
from .services.storage_client import StorageClient
from .settings import Config, config as default_config

logger = get_logger('paperbox_client')


def create_controller(config: Optional[Config] = None, load: bool = True) -> AppStateController:
    """
    Erstellt den State Controller für eine Client-Sitzung

    Args:
        config: Client-Konfiguration; Default ist die globale aus settings
        load: Startet direkt das initiale Laden des State-Dokuments

    Returns:
        AppStateController, bereit oder noch vor dem ersten Laden
    """
    config = config or default_config
    logger.info("Client configuration", **config.get_summary())

    client = StorageClient(base_url=config.storage_url, timeout=config.request_timeout)
    preferences = PreferenceStore(config.preferences_path)
    controller = AppStateController(client, preferences=preferences)

    if load:
        controller.load()
    return controller
