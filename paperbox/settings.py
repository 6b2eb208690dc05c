"""
Client Configuration for Paperbox
Centralized handling of the storage service location and local preferences
"""

import os
from pathlib import Path
from typing import Dict, Any
from urllib.parse import urlparse


class Config:
    """Client configuration with default values"""

    DEFAULT_STORAGE_URL = 'http://localhost:8089'
    DEFAULT_REQUEST_TIMEOUT = 30
    DEFAULT_PREFERENCES_FILE = '~/.paperbox/preferences.json'

    def __init__(self):
        """Initialize configuration from config_secret.py, the environment or defaults"""
        self._load_configuration()
        self._validate_configuration()

    def _load_configuration(self):
        try:
            from config_secret import STORAGE_URL, REQUEST_TIMEOUT, PREFERENCES_FILE
            self.storage_url = STORAGE_URL
            self.request_timeout = REQUEST_TIMEOUT
            self.preferences_file = PREFERENCES_FILE
            self._config_source = "config_secret.py"

        except ImportError:
            self.storage_url = os.getenv('PAPERBOX_STORAGE_URL', self.DEFAULT_STORAGE_URL)
            self.request_timeout = float(os.getenv('PAPERBOX_REQUEST_TIMEOUT',
                                                   self.DEFAULT_REQUEST_TIMEOUT))
            self.preferences_file = os.getenv('PAPERBOX_PREFERENCES_FILE',
                                              self.DEFAULT_PREFERENCES_FILE)
            self._config_source = "environment"

        self.storage_url = self.storage_url.rstrip('/')

    def _validate_configuration(self):
        if not self.storage_url.startswith(('http://', 'https://')):
            raise ValueError(f"Invalid storage URL: {self.storage_url}")

        if not urlparse(self.storage_url).netloc:
            raise ValueError(f"Storage URL has no host: {self.storage_url}")

        if self.request_timeout <= 0:
            raise ValueError(f"Invalid request timeout: {self.request_timeout}")

    @property
    def preferences_path(self) -> Path:
        return Path(self.preferences_file).expanduser()

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging"""
        return {
            'config_source': self._config_source,
            'storage_url': self.storage_url,
            'request_timeout': self.request_timeout,
            'preferences_file': str(self.preferences_path)
        }


# Global configuration instance
config = Config()
