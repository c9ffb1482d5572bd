"""
Centralized configuration for the Keyhold identity service.

This module provides a single source of truth for all configuration settings,
with environment variable support and validation.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from a local .env file if present
load_dotenv()


class Config:
    """Base configuration class with common settings."""

    # Application
    APP_NAME = "Keyhold"
    APP_VERSION = "1.0.0"

    # Flask
    TESTING = os.environ.get('TESTING', 'false').lower() == 'true'
    DEBUG = os.environ.get('DEBUG', 'false').lower() == 'true'
    PORT = int(os.environ.get('PORT', 3000))
    HOST = os.environ.get('HOST', '0.0.0.0')

    # Storage location descriptor: a filesystem path selects the file backend,
    # anything with a URI scheme selects a placeholder backend.
    STORAGE_URI = os.environ.get('STORAGE_URI', './storage')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')  # 'json' or 'text'
    AUDIT_LOG_FILE = os.environ.get('AUDIT_LOG_FILE', None)  # None = stdout only

    @classmethod
    def validate(cls):
        """Validate configuration values."""
        errors = []

        if not cls.STORAGE_URI or not cls.STORAGE_URI.strip():
            errors.append("STORAGE_URI must not be empty")

        if not 0 < cls.PORT < 65536:
            errors.append("PORT must be between 1 and 65535")

        if cls.LOG_FORMAT not in ('json', 'text'):
            errors.append("LOG_FORMAT must be 'json' or 'text'")

        if errors:
            raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return True

    @classmethod
    def ensure_directories(cls):
        """Ensure required directories exist."""
        if cls.AUDIT_LOG_FILE:
            Path(cls.AUDIT_LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing environment configuration."""
    TESTING = True
    LOG_FORMAT = 'text'


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False
    TESTING = False

    @classmethod
    def validate(cls):
        """Additional validation for production."""
        super().validate()
        if not os.environ.get('STORAGE_URI'):
            import warnings
            warnings.warn("STORAGE_URI is not set; storing identities under ./storage")


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(env: Optional[str] = None) -> type[Config]:
    """
    Get configuration class for specified environment.

    Args:
        env: Environment name ('development', 'testing', 'production')
             If None, uses FLASK_ENV environment variable

    Returns:
        Configuration class for the environment
    """
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')

    config_class = config.get(env, config['default'])
    config_class.validate()
    config_class.ensure_directories()

    return config_class
