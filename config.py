"""
Centralized Configuration for OOH Ops
Manages environment-specific settings, secrets, and service configurations.
"""
import os
from datetime import timedelta

class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB max file upload

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With',
                          'X-Company-Id', 'X-User-Id']

    # Database Settings
    DATABASE_URL = os.environ.get('DATABASE_URL', 'postgresql://localhost/ooh_ops')
    SQLALCHEMY_ECHO = False

    # File Storage Paths
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    OUTPUT_FOLDER = os.environ.get('OUTPUT_FOLDER', 'outputs')

    # Object storage (S3 compatible). Empty bucket means local OUTPUT_FOLDER.
    STORAGE_BUCKET = os.environ.get('STORAGE_BUCKET', '')
    STORAGE_REGION = os.environ.get('STORAGE_REGION', 'ap-southeast-1')
    STORAGE_ENDPOINT_URL = os.environ.get('STORAGE_ENDPOINT_URL') or None
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    STORAGE_URL_EXPIRY = int(os.environ.get('STORAGE_URL_EXPIRY', '604800'))  # seconds

    # Email (SMTP)
    SMTP_HOST = os.environ.get('SMTP_HOST', '')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USER = os.environ.get('SMTP_USER', '')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD', '')
    SMTP_USE_TLS = os.environ.get('SMTP_USE_TLS', 'true').lower() == 'true'
    FROM_EMAIL = os.environ.get('FROM_EMAIL', 'OH Plus <noreply@ohplus.ph>')

    # Hosted search index
    SEARCH_APP_ID = os.environ.get('SEARCH_APP_ID', '')
    SEARCH_API_KEY = os.environ.get('SEARCH_API_KEY', '')
    SEARCH_INDEX_PREFIX = os.environ.get('SEARCH_INDEX_PREFIX', '')
    SEARCH_TIMEOUT = int(os.environ.get('SEARCH_TIMEOUT', '10'))  # seconds

    # Image fetching for PDF composition
    IMAGE_FETCH_TIMEOUT = int(os.environ.get('IMAGE_FETCH_TIMEOUT', '10'))  # seconds

    # Public URL used in emails
    APP_URL = os.environ.get('APP_URL', 'http://localhost:5000')

    # Business defaults
    VAT_RATE = 0.12
    CURRENCY = 'PHP'
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'OH Plus')
    COMPANY_ADDRESS = os.environ.get(
        'COMPANY_ADDRESS', 'No. 727 General Solano St., San Miguel, Manila 1005'
    )
    COMPANY_PHONE = os.environ.get('COMPANY_PHONE', '(02) 5310 1750 to 53')
    COMPANY_EMAIL = os.environ.get('COMPANY_EMAIL', 'sales@ohplus.ph')

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')

    # Session Configuration
    SESSION_PERMANENT = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    # Allow all CORS in development
    CORS_ORIGINS = ['*']
    DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///ooh_ops_dev.db')


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    # Strict CORS in production
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://app.ohplus.ph').split(',')
    # Force HTTPS
    PREFERRED_URL_SCHEME = 'https'
    # Enable all security features
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    DATABASE_URL = 'sqlite:///:memory:'
    # External services stay disabled in tests
    STORAGE_BUCKET = ''
    SMTP_HOST = ''
    SEARCH_APP_ID = ''
    SEARCH_API_KEY = ''


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)
