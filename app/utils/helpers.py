"""
Helper functions shared by the API blueprints.
"""

import logging

from flask import current_app, g, jsonify

from database.models import Company, User, Product
from services.errors import ServiceError
from validators import ValidationError

logger = logging.getLogger(__name__)


def repository(repo_class, session):
    """Build a repository bound to the request's company and user."""
    return repo_class(
        session,
        g.company_id,
        g.user_id,
        indexer=current_app.extensions.get('search_indexer')
    )


def error_response(e, action):
    """
    Map an exception to a JSON error response.

    ValidationError and ValueError become 400; ServiceError subclasses use
    their own status code; anything else is logged and returned as 500.
    """
    if isinstance(e, ValidationError):
        return jsonify({'success': False, 'error': e.message, 'field': e.field}), 400
    if isinstance(e, ServiceError):
        return jsonify({'success': False, 'error': e.message}), e.status_code
    if isinstance(e, ValueError):
        return jsonify({'success': False, 'error': str(e)}), 400

    logger.error(f"Error {action}: {str(e)}")
    return jsonify({'success': False, 'error': str(e)}), 500


def company_profile(session):
    """Letterhead details for documents: the Company row, else configured defaults."""
    config = current_app.config
    profile = {
        'name': config.get('COMPANY_NAME'),
        'address': config.get('COMPANY_ADDRESS'),
        'phone': config.get('COMPANY_PHONE'),
        'email': config.get('COMPANY_EMAIL'),
    }

    company = session.query(Company).filter(Company.id == g.company_id).first()
    if company:
        for key, value in company.to_dict().items():
            if value:
                profile[key] = value
    else:
        logger.warning(f"Company {g.company_id} not found, using default letterhead")
    return profile


def find_user(session, user_id):
    if not user_id:
        return None
    user = session.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"User {user_id} not found")
        return None
    return user.to_dict()


def find_product(session, product_id):
    if not product_id:
        return None
    product = session.query(Product).filter(
        Product.id == product_id,
        Product.company_id == g.company_id
    ).first()
    if not product:
        logger.warning(f"Product {product_id} not found")
        return None
    return product.to_dict()
