"""
Health Check & Monitoring Endpoints
Provides endpoints for deployment health checks and monitoring
"""
import os
import sys
import time
import psutil
from datetime import datetime
from typing import Dict, Any
from flask import Blueprint, jsonify
import logging

logger = logging.getLogger(__name__)

# Create Blueprint for health check routes
health_bp = Blueprint('health', __name__)

# Track application start time
START_TIME = time.time()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic system metrics

    Returns:
        Dictionary of system metrics
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': process.memory_info().rss / 1024 / 1024,
            'memory_percent': process.memory_percent(),
            'threads': process.num_threads(),
        }
    except Exception as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Get application uptime

    Returns:
        Dictionary with uptime information
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_minutes': round(uptime_seconds / 60, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME).isoformat()
    }


def check_external_services(app) -> Dict[str, bool]:
    """
    Check which external services are configured

    Args:
        app: Flask application instance

    Returns:
        Dictionary of service availability
    """
    return {
        'object_storage': bool(app.config.get('STORAGE_BUCKET')),
        'smtp': bool(app.config.get('SMTP_HOST') and app.config.get('SMTP_USER')),
        'search_index': bool(app.config.get('SEARCH_APP_ID') and app.config.get('SEARCH_API_KEY')),
    }


def check_database() -> Dict[str, Any]:
    """Run a trivial query against the configured database."""
    from database.connection import check_db_connection

    try:
        check_db_connection()
        return {'healthy': True}
    except Exception as e:
        return {'healthy': False, 'error': str(e)}


def check_filesystem(app) -> Dict[str, Dict[str, bool]]:
    """
    Check if the PDF output directory exists and is writable

    Returns:
        Dictionary of filesystem checks
    """
    filesystem_status = {}

    for dir_name in [app.config.get('OUTPUT_FOLDER', 'outputs')]:
        dir_path = os.path.join(os.getcwd(), dir_name)
        exists = os.path.exists(dir_path)
        writable = os.access(dir_path, os.W_OK) if exists else False

        filesystem_status[dir_name] = {
            'exists': exists,
            'writable': writable,
            'healthy': exists and writable
        }

    return filesystem_status


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint
    Returns 200 if application is running
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': 'ooh-ops'
    }), 200


@health_bp.route('/health/ready', methods=['GET'])
def readiness_check():
    """
    Readiness probe endpoint
    Returns 200 once the database answers and the output folder is writable
    """
    from flask import current_app

    try:
        database = check_database()
        filesystem = check_filesystem(current_app)
        filesystem_healthy = all(
            status['healthy'] for status in filesystem.values()
        )

        is_ready = database['healthy'] and filesystem_healthy

        response = {
            'status': 'ready' if is_ready else 'not_ready',
            'timestamp': datetime.utcnow().isoformat(),
            'checks': {
                'database': database,
                'filesystem': filesystem,
                'services': check_external_services(current_app),
            }
        }

        return jsonify(response), 200 if is_ready else 503

    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return jsonify({
            'status': 'error',
            'error': str(e),
            'timestamp': datetime.utcnow().isoformat()
        }), 503


@health_bp.route('/health/metrics', methods=['GET'])
def metrics():
    """
    Basic metrics endpoint
    Returns system metrics and application statistics
    """
    from flask import current_app

    try:
        response = {
            'timestamp': datetime.utcnow().isoformat(),
            'service': 'ooh-ops',
            'environment': os.environ.get('FLASK_ENV', 'production'),
            'uptime': get_uptime(),
            'system': get_system_metrics(),
            'services': check_external_services(current_app),
            'python_version': sys.version.split()[0]
        }

        return jsonify(response), 200

    except Exception as e:
        logger.error(f"Metrics collection failed: {e}")
        return jsonify({
            'status': 'error',
            'error': str(e),
            'timestamp': datetime.utcnow().isoformat()
        }), 500


@health_bp.route('/health/ping', methods=['GET'])
def ping():
    """Simple ping endpoint"""
    return 'pong', 200


def register_health_checks(app):
    """
    Register health check blueprint with Flask app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp)
    logger.info("Health check endpoints registered")
