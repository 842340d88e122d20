"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


class Config:
    """Base configuration class with common settings."""

    # Secret key for session management
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration (raw SQLite)
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/hotel_booking.db'
    DATABASE_TIMEOUT = float(os.environ.get('DATABASE_TIMEOUT', 5))

    # Security settings
    WTF_CSRF_ENABLED = False  # JSON API, no HTML forms
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 8))
    )

    # Timezone used for "today" and "now"
    TIMEZONE = os.environ.get('TIMEZONE') or 'UTC'

    # Booking policy
    BOOKING_HORIZON_DAYS = int(os.environ.get('BOOKING_HORIZON_DAYS', 30))
    HALL_OPENING_TIME = os.environ.get('HALL_OPENING_TIME') or '09:00'
    HALL_CLOSING_TIME = os.environ.get('HALL_CLOSING_TIME') or '22:00'
    HALL_MAINTENANCE_MINUTES = int(os.environ.get('HALL_MAINTENANCE_MINUTES', 30))
    HALL_SLOT_MINUTES = int(os.environ.get('HALL_SLOT_MINUTES', 60))
    CANCELLATION_LEAD_HOURS = int(os.environ.get('CANCELLATION_LEAD_HOURS', 24))

    # Clock override (tests inject a FixedClock here)
    CLOCK = None

    # Application settings
    APP_NAME = 'HotelBooking'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False
    SESSION_COOKIE_SECURE = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    SECRET_KEY = 'test-secret-key'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
