"""
Configuration module for the HF Propagation Dashboard.
Centralizes all configuration settings and environment variables.
"""

import os
from dotenv import load_dotenv
from typing import Optional

from calculations.constants import SUPPORTED_BANDS

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Application configuration class."""

    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_ENV') == 'development'
    TESTING = False
    PORT = int(os.getenv('PORT', 8088))

    # Analysis oracle (messages API)
    ORACLE_API_URL = os.getenv('ORACLE_API_URL', 'https://api.anthropic.com/v1/messages')
    ORACLE_API_KEY = os.getenv('ORACLE_API_KEY')
    ORACLE_API_VERSION = os.getenv('ORACLE_API_VERSION', '2023-06-01')
    ORACLE_MODEL = os.getenv('ORACLE_MODEL', 'claude-sonnet-4-20250514')
    ORACLE_TIMEOUT = int(os.getenv('ORACLE_TIMEOUT', 30))

    # Dashboard
    DEFAULT_BAND = os.getenv('DEFAULT_BAND', '160m')
    TIMEZONE = os.getenv('DASHBOARD_TIMEZONE', 'UTC')
    AUTO_REFRESH = _env_flag('AUTO_REFRESH', 'true')
    REFRESH_INTERVAL = int(os.getenv('REFRESH_INTERVAL', 300))  # 5 minutes

    # Database Configuration
    DATABASE_PATH = os.getenv('DATABASE_PATH', 'data/hf_propagation.db')

    # Flask-Caching Configuration
    CACHE_TYPE = 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = 300  # 5 minutes default
    CACHE_KEY_PREFIX = 'hf_propagation_'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL')
    LOG_FILE = os.getenv('LOG_FILE')

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration values."""
        errors = []

        if not cls.ORACLE_API_KEY:
            errors.append("ORACLE_API_KEY is required")

        if cls.REFRESH_INTERVAL <= 0:
            errors.append("REFRESH_INTERVAL must be positive")

        if cls.DEFAULT_BAND not in SUPPORTED_BANDS:
            errors.append(f"DEFAULT_BAND must be one of {', '.join(SUPPORTED_BANDS)}")

        return errors

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production mode."""
        return not cls.DEBUG and not cls.TESTING


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    PORT = 5001  # Development port


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_FILE = os.getenv('LOG_FILE', 'logs/hf_propagation.log')

    @classmethod
    def validate(cls) -> list[str]:
        """Additional validation for production."""
        errors = super().validate()

        # Only warn about SECRET_KEY in production, don't fail
        if cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            print("Warning: SECRET_KEY is using default value - consider setting a secure key in production")

        return errors


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DATABASE_PATH = ':memory:'  # Use in-memory database for tests
    LOG_FILE = None
    ORACLE_API_KEY = 'test-key'
    AUTO_REFRESH = False
    REFRESH_INTERVAL = 60
    CACHE_TYPE = 'NullCache'


# Configuration mapping
config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig  # Default to production
}


def get_config(config_name: Optional[str] = None) -> type[Config]:
    """Get configuration based on environment."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    return config_map.get(config_name, config_map['default'])
