"""
Storage Service Configuration
Handles environment-specific configuration with validation
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional


@dataclass
class ProductionConfig:
    """Storage service configuration with validation"""

    # Flask settings
    debug: bool = False
    testing: bool = False
    secret_key: str = field(default_factory=lambda: os.urandom(32).hex())

    # Server settings
    host: str = '0.0.0.0'
    port: int = 8089

    # Storage settings
    data_dir: str = './data'
    default_folder: str = 'pdfs'
    state_file: str = 'db.sqlite.json'
    max_file_size_mb: int = 50

    # Monitoring settings
    log_level: str = 'INFO'
    slow_request_seconds: float = 2.0

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.validate()

    def validate(self):
        """Validate configuration values"""
        errors = []

        if not self.data_dir:
            errors.append("data_dir cannot be empty")

        if not self.state_file:
            errors.append("state_file cannot be empty")

        if self.port < 1 or self.port > 65535:
            errors.append("Port must be between 1 and 65535")

        if self.max_file_size_mb < 1:
            errors.append("Max file size must be at least 1 MB")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).resolve()

    @property
    def tmp_path(self) -> Path:
        return self.data_path / 'tmp'

    @property
    def state_path(self) -> Path:
        return self.data_path / self.state_file

    def create_directories(self):
        """Create data and upload staging directories"""
        self.data_path.mkdir(parents=True, exist_ok=True)
        self.tmp_path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_environment(cls, **overrides) -> 'ProductionConfig':
        """Create configuration from environment variables"""
        config = cls(**overrides)

        env_mappings = {
            'FLASK_DEBUG': ('debug', lambda x: x.lower() == 'true'),
            'FLASK_HOST': ('host', str),
            'FLASK_PORT': ('port', int),
            'PORT': ('port', int),
            'FLASK_SECRET_KEY': ('secret_key', str),

            'DATA_DIR': ('data_dir', str),
            'STATE_FILE': ('state_file', str),
            'MAX_FILE_SIZE_MB': ('max_file_size_mb', int),

            'LOG_LEVEL': ('log_level', str),
        }

        for env_var, (attr_name, converter) in env_mappings.items():
            if attr_name in overrides:
                continue
            value = os.getenv(env_var)
            if value is not None:
                try:
                    setattr(config, attr_name, converter(value))
                except ValueError as e:
                    print(f"Warning: Invalid value for {env_var}: {value} ({e})")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary (without secrets)"""
        result = dict(self.__dict__)
        result.pop('secret_key', None)
        return result

    def get_flask_config(self) -> Dict[str, Any]:
        """Get Flask-specific configuration"""
        return {
            'DEBUG': self.debug,
            'TESTING': self.testing,
            'SECRET_KEY': self.secret_key,
            'MAX_CONTENT_LENGTH': self.max_file_size_mb * 1024 * 1024
        }


class ConfigManager:
    """Central configuration manager"""

    def __init__(self):
        self._config: Optional[ProductionConfig] = None
        self._is_production = os.getenv('FLASK_ENV') == 'production'

    @property
    def config(self) -> ProductionConfig:
        if self._config is None:
            self._config = ProductionConfig.from_environment()
        return self._config

    @property
    def is_production(self) -> bool:
        return self._is_production

    def initialize_app(self, app, config: Optional[ProductionConfig] = None):
        """Initialize Flask app with configuration"""
        if config is not None:
            self._config = config
        app.config.update(self.config.get_flask_config())
        app.config['PAPERBOX'] = self.config
        self.config.create_directories()
        return app

    def print_config_summary(self):
        """Print configuration summary for startup"""
        config = self.config
        print("\nConfiguration Summary:")
        print(f"   Mode: {'Production' if self.is_production else 'Development'}")
        print(f"   Host: {config.host}:{config.port}")
        print(f"   Debug: {config.debug}")
        print(f"   Data: {config.data_path}")
        print(f"   Max upload: {config.max_file_size_mb} MB")
        print()


# Global configuration manager instance
config_manager = ConfigManager()
