"""
OOH Ops - Application Package

This package contains the HTTP layer:
- api/: HTTP route handlers (Flask Blueprints)
- utils/: Shared helpers for the route handlers

The app factory and core Flask setup remain in app_init.py at the project root.
Repositories and integrations live in the top-level services package, and
PDF composition in the documents package.
"""

import logging

from app.api.products import products_bp
from app.api.clients import clients_bp
from app.api.proposals import proposals_bp
from app.api.cost_estimates import cost_estimates_bp
from app.api.quotations import quotations_bp
from app.api.job_orders import job_orders_bp
from app.api.bookings import bookings_bp
from app.api.teams import teams_bp
from app.api.reports import reports_bp
from app.api.documents import documents_bp
from app.api.emails import emails_bp
from app.api.search import search_bp
from app.api.files import files_bp

logger = logging.getLogger(__name__)

BLUEPRINTS = (
    products_bp,
    clients_bp,
    proposals_bp,
    cost_estimates_bp,
    quotations_bp,
    job_orders_bp,
    bookings_bp,
    teams_bp,
    reports_bp,
    documents_bp,
    emails_bp,
    search_bp,
    files_bp,
)


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.
    Called from app_init.create_app after the services are attached.

    Args:
        app: Flask application instance
    """
    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)

    logger.info(f"Registered {len(BLUEPRINTS)} API blueprints")


__all__ = ['register_blueprints', 'BLUEPRINTS'] + [bp.name for bp in BLUEPRINTS]
