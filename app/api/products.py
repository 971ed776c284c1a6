"""
Product (Site) Routes Blueprint

CRUD for billboard sites in the company inventory plus their bookings.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.product_repository import ProductRepository
from validators import validate_pagination, validate_required_fields

logger = logging.getLogger(__name__)

products_bp = Blueprint('products_bp', __name__)


@products_bp.route('/api/products', methods=['GET', 'POST'])
@require_company
def products():
    """List products (paginated) or create a new product"""
    try:
        with get_db_session() as session:
            repo = repository(ProductRepository, session)

            if request.method == 'GET':
                page, per_page = validate_pagination(
                    request.args,
                    current_app.config['DEFAULT_PAGE_SIZE'],
                    current_app.config['MAX_PAGE_SIZE']
                )
                result = repo.list_paginated(
                    page=page,
                    per_page=per_page,
                    content_type=request.args.get('content_type'),
                    search=request.args.get('search'),
                    seller_id=request.args.get('seller_id')
                )
                return jsonify({'success': True, **result})

            data = request.get_json(silent=True) or {}
            is_valid, error = validate_required_fields(data, ['name'])
            if not is_valid:
                return jsonify({'success': False, 'error': error}), 400

            product = repo.create(data)
            return jsonify({'success': True, 'product': product}), 201

    except Exception as e:
        return error_response(e, "in products endpoint")


@products_bp.route('/api/products/<product_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def product_detail(product_id):
    """Get, update, or soft delete a product"""
    try:
        with get_db_session() as session:
            repo = repository(ProductRepository, session)

            if request.method == 'GET':
                product = repo.get(product_id)
                if not product:
                    return jsonify({'success': False, 'error': 'Product not found'}), 404
                return jsonify({'success': True, 'product': product})

            elif request.method == 'PUT':
                data = request.get_json(silent=True) or {}
                product = repo.update(product_id, data)
                if not product:
                    return jsonify({'success': False, 'error': 'Product not found'}), 404
                return jsonify({'success': True, 'product': product})

            elif request.method == 'DELETE':
                if not repo.delete(product_id):
                    return jsonify({'success': False, 'error': 'Product not found'}), 404
                return jsonify({'success': True, 'message': 'Product deleted'})

    except Exception as e:
        return error_response(e, f"in product endpoint {product_id}")


@products_bp.route('/api/products/<product_id>/bookings', methods=['GET'])
@require_company
def product_bookings(product_id):
    """Bookings made against a product"""
    try:
        with get_db_session() as session:
            repo = repository(ProductRepository, session)
            repo.get_or_raise(product_id)
            bookings = repo.bookings(product_id)
            return jsonify({'success': True, 'bookings': bookings, 'count': len(bookings)})

    except Exception as e:
        return error_response(e, f"listing bookings for product {product_id}")
