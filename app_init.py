"""
Application Initialization Module
Properly initializes Flask app with all infrastructure components
"""
import os
from flask import Flask
from config import config_by_name, get_config
from logging_config import setup_logging
from security import setup_security
from health_checks import register_health_checks
from database.connection import configure, init_db
from database.seed import seed_database
from services.search_indexer import SearchIndexer
from services.storage_service import StorageService
import logging

logger = logging.getLogger(__name__)


def create_app(config_name=None, overrides=None):
    """
    Application factory that creates and configures Flask app with all infrastructure

    Args:
        config_name: 'development', 'production' or 'testing'; defaults to FLASK_ENV
        overrides: optional dict applied on top of the config class

    Returns:
        Configured Flask application instance
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    config_class = config_by_name.get(config_name) if config_name else get_config()
    app.config.from_object(config_class or get_config())
    if overrides:
        app.config.update(overrides)

    setup_logging(app)

    logger.info("=" * 60)
    logger.info("🚀 Initializing OOH Ops Application")
    logger.info("=" * 60)
    logger.info(f"Environment: {config_name or os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    # Setup security (CORS, headers, tenant context, error handlers)
    setup_security(app, app.config)

    # Create required directories
    create_required_directories(app)

    # Database
    initialize_database(app)

    # External integrations
    app.extensions['search_indexer'] = initialize_search(app)
    app.extensions['storage'] = initialize_storage(app)

    # Register API blueprints and health check endpoints
    from app import register_blueprints
    register_blueprints(app)
    register_health_checks(app)

    logger.info("✅ Application initialization complete")
    logger.info("=" * 60)

    return app


def create_required_directories(app):
    """
    Create all required application directories

    Args:
        app: Flask application instance
    """
    directories = [
        app.config['OUTPUT_FOLDER'],
        'logs'
    ]

    for directory in directories:
        try:
            os.makedirs(directory, exist_ok=True)
            logger.debug(f"Directory ensured: {directory}")
        except OSError as e:
            logger.error(f"Failed to create directory {directory}: {e}")

    logger.info(f"✅ Created {len(directories)} required directories")


def initialize_database(app):
    """
    Bind the engine to DATABASE_URL, create tables and seed defaults

    Args:
        app: Flask application instance
    """
    configure(app.config['DATABASE_URL'], echo=app.config.get('SQLALCHEMY_ECHO', False))
    init_db()

    if not app.config.get('TESTING'):
        seed_database(app.config)

    logger.info("✅ Database initialized")


def initialize_search(app):
    """
    Build the search indexer; without credentials it stays disabled

    Returns:
        SearchIndexer instance
    """
    indexer = SearchIndexer.from_config(app.config)
    if indexer.enabled:
        logger.info("✅ Search indexing enabled")
    else:
        logger.warning("⚠️  Search not configured - indexing disabled")
    return indexer


def initialize_storage(app):
    """
    Build the storage service; without a bucket files stay in OUTPUT_FOLDER

    Returns:
        StorageService instance
    """
    storage = StorageService.from_config(app.config)
    if storage.is_remote:
        logger.info(f"✅ Object storage: bucket {app.config['STORAGE_BUCKET']}")
    else:
        logger.info(f"💾 Local file storage in {app.config['OUTPUT_FOLDER']}")
    return storage
