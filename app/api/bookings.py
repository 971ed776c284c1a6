"""
Booking Routes Blueprint
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.booking_repository import BookingRepository
from validators import validate_pagination

logger = logging.getLogger(__name__)

bookings_bp = Blueprint('bookings_bp', __name__)


@bookings_bp.route('/api/bookings', methods=['GET'])
@require_company
def bookings():
    """List bookings, paginated, optionally filtered by status or product"""
    try:
        page, per_page = validate_pagination(
            request.args,
            current_app.config['DEFAULT_PAGE_SIZE'],
            current_app.config['MAX_PAGE_SIZE']
        )
        with get_db_session() as session:
            repo = repository(BookingRepository, session)
            product_id = request.args.get('product_id')
            if product_id:
                return jsonify({'success': True, 'items': repo.list_by_product(product_id)})

            result = repo.list_paginated(page=page, per_page=per_page, status=request.args.get('status'))
            return jsonify({'success': True, **result})

    except Exception as e:
        return error_response(e, "listing bookings")


@bookings_bp.route('/api/bookings/count', methods=['GET'])
@require_company
def booking_count():
    """Booking count; ?status=COMPLETED counts finished campaigns"""
    try:
        with get_db_session() as session:
            repo = repository(BookingRepository, session)
            status = request.args.get('status')
            count = repo.completed_count() if status == 'COMPLETED' else repo.count(status)
            return jsonify({'success': True, 'count': count})

    except Exception as e:
        return error_response(e, "counting bookings")


@bookings_bp.route('/api/bookings/<booking_id>', methods=['GET'])
@require_company
def booking_detail(booking_id):
    try:
        with get_db_session() as session:
            booking = repository(BookingRepository, session).get(booking_id)
            if not booking:
                return jsonify({'success': False, 'error': 'Booking not found'}), 404
            return jsonify({'success': True, 'booking': booking})

    except Exception as e:
        return error_response(e, f"getting booking {booking_id}")


@bookings_bp.route('/api/bookings/<booking_id>/status', methods=['PUT'])
@require_company
def booking_status(booking_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'error': 'status is required'}), 400

    try:
        with get_db_session() as session:
            booking = repository(BookingRepository, session).update_status(booking_id, data['status'])
            return jsonify({'success': True, 'booking': booking})

    except Exception as e:
        return error_response(e, f"updating booking status {booking_id}")
