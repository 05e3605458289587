"""Configuration settings for the Staff Booking application."""

import os
from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# LOCAL SEED CREDENTIALS (for development/testing only)
# =============================================================================
# Email: admin@salon.local
# Password: Admin123!
# =============================================================================


def _get_database_url():
    """Get and normalize the database URL."""
    url = os.environ.get('DATABASE_URL', 'sqlite:///staffbooking.db')
    # Heroku/Railway style postgres:// URLs need postgresql:// for SQLAlchemy
    if url and url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _get_engine_options(db_url):
    """Get SQLAlchemy engine options based on database type.

    PostgreSQL connections need pool management to handle:
    - Cold starts
    - Connection timeouts
    - Stale connections after idle periods
    """
    if db_url and db_url.startswith('postgresql://'):
        return {
            'pool_pre_ping': True,  # Verify connections before use
            'pool_recycle': 300,    # Recycle connections every 5 minutes
            'pool_size': 5,
            'max_overflow': 10,
        }
    if db_url and db_url.startswith('sqlite:///'):
        # Writers queue on BEGIN IMMEDIATE; wait instead of failing fast
        return {'connect_args': {'timeout': 30}}
    return {}


def _get_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Seeded administrator
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@salon.local')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'Admin123!')
    SEED_DEMO_DATA = _get_bool('SEED_DEMO_DATA', True)

    # Database configuration
    SQLALCHEMY_DATABASE_URI = _get_database_url()
    SQLALCHEMY_ENGINE_OPTIONS = _get_engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Overlap policy
    # Shifts may touch end-to-start; appointments may not (legacy behaviour).
    SHIFT_OVERLAP_MODE = os.environ.get('SHIFT_OVERLAP_MODE', 'strict')
    APPOINTMENT_OVERLAP_MODE = os.environ.get('APPOINTMENT_OVERLAP_MODE', 'inclusive')
    INCLUDE_CANCELED_IN_OVERLAP_CHECK = _get_bool('INCLUDE_CANCELED_IN_OVERLAP_CHECK', True)

    # Bulk shift generation
    BULK_MAX_WEEKS = int(os.environ.get('BULK_MAX_WEEKS', 26))

    # Stored timestamps are naive wall-clock times in this zone
    BUSINESS_TIMEZONE = os.environ.get('BUSINESS_TIMEZONE', 'UTC')

    # Calendar grid
    CALENDAR_START_HOUR = int(os.environ.get('CALENDAR_START_HOUR', 8))
    CALENDAR_END_HOUR = int(os.environ.get('CALENDAR_END_HOUR', 20))
    SLOT_MINUTES = int(os.environ.get('SLOT_MINUTES', 15))

    # Session config
    SESSION_COOKIE_SECURE = os.environ.get('FLASK_ENV') == 'production'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Test configuration: isolated in-memory database, fast hashing."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    BCRYPT_LOG_ROUNDS = 4
    SEED_DEMO_DATA = False
    SESSION_COOKIE_SECURE = False
    SHIFT_OVERLAP_MODE = 'strict'
    APPOINTMENT_OVERLAP_MODE = 'inclusive'
    INCLUDE_CANCELED_IN_OVERLAP_CHECK = True
    BULK_MAX_WEEKS = 26


# Config selector
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
