"""
Quotation Routes Blueprint

Quotations price one site over a contract period. Accepted quotations are
turned into job orders for the logistics team and bookings on the site.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.booking_repository import BookingRepository
from services.errors import ConflictError
from services.job_order_repository import JobOrderRepository
from services.quotation_repository import QuotationRepository, calculate_quotation_total
from validators import validate_pagination, validate_date_range

logger = logging.getLogger(__name__)

quotations_bp = Blueprint('quotations_bp', __name__)


def _validate_quotation(data):
    if not data.get('items'):
        return "At least one item is required"
    if data.get('start_date') and data.get('end_date'):
        is_valid, error = validate_date_range(data['start_date'], data['end_date'])
        if not is_valid:
            return error
    return None


@quotations_bp.route('/api/quotations', methods=['GET', 'POST'])
@require_company
def quotations():
    """List quotations (paginated) or create a new quotation"""
    try:
        with get_db_session() as session:
            repo = repository(QuotationRepository, session)

            if request.method == 'GET':
                page, per_page = validate_pagination(
                    request.args,
                    current_app.config['DEFAULT_PAGE_SIZE'],
                    current_app.config['MAX_PAGE_SIZE']
                )
                result = repo.list_paginated(
                    page=page,
                    per_page=per_page,
                    seller_id=request.args.get('seller_id'),
                    status=request.args.get('status'),
                    search=request.args.get('search')
                )
                return jsonify({'success': True, **result})

            data = request.get_json(silent=True) or {}
            error = _validate_quotation(data)
            if error:
                return jsonify({'success': False, 'error': error}), 400

            quotation = repo.create(data)
            return jsonify({'success': True, 'quotation': quotation}), 201

    except Exception as e:
        return error_response(e, "in quotations endpoint")


@quotations_bp.route('/api/quotations/multiple', methods=['POST'])
@require_company
def create_multiple_quotations():
    """One quotation per item, linked by a shared page id"""
    data = request.get_json(silent=True) or {}
    error = _validate_quotation(data)
    if error:
        return jsonify({'success': False, 'error': error}), 400

    try:
        with get_db_session() as session:
            created = repository(QuotationRepository, session).create_multiple(data)
            return jsonify({
                'success': True,
                'quotations': created,
                'page_id': created[0]['page_id'] if created else None
            }), 201

    except Exception as e:
        return error_response(e, "creating multiple quotations")


@quotations_bp.route('/api/quotations/calculate', methods=['POST'])
def calculate_quotation():
    """Price items over a contract period without saving anything"""
    data = request.get_json(silent=True) or {}
    if not data.get('start_date') or not data.get('end_date'):
        return jsonify({'success': False, 'error': 'start_date and end_date are required'}), 400

    is_valid, error = validate_date_range(data['start_date'], data['end_date'])
    if not is_valid:
        return jsonify({'success': False, 'error': error}), 400

    try:
        result = calculate_quotation_total(data['start_date'], data['end_date'], data.get('items') or [])
        return jsonify({'success': True, **result})

    except Exception as e:
        return error_response(e, "calculating quotation total")


@quotations_bp.route('/api/quotations/by-campaign/<campaign_id>', methods=['GET'])
@require_company
def quotations_by_campaign(campaign_id):
    try:
        with get_db_session() as session:
            quotations = repository(QuotationRepository, session).list_by_campaign(campaign_id)
            return jsonify({'success': True, 'quotations': quotations})

    except Exception as e:
        return error_response(e, f"listing quotations for campaign {campaign_id}")


@quotations_bp.route('/api/quotations/<quotation_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def quotation_detail(quotation_id):
    """Get, update, or delete a quotation"""
    try:
        with get_db_session() as session:
            repo = repository(QuotationRepository, session)

            if request.method == 'GET':
                quotation = repo.get(quotation_id)
                if not quotation:
                    return jsonify({'success': False, 'error': 'Quotation not found'}), 404
                return jsonify({'success': True, 'quotation': quotation})

            elif request.method == 'PUT':
                data = request.get_json(silent=True) or {}
                quotation = repo.update(quotation_id, data)
                if not quotation:
                    return jsonify({'success': False, 'error': 'Quotation not found'}), 404
                return jsonify({'success': True, 'quotation': quotation})

            elif request.method == 'DELETE':
                if not repo.delete(quotation_id):
                    return jsonify({'success': False, 'error': 'Quotation not found'}), 404
                return jsonify({'success': True, 'message': 'Quotation deleted'})

    except Exception as e:
        return error_response(e, f"in quotation endpoint {quotation_id}")


@quotations_bp.route('/api/quotations/<quotation_id>/status', methods=['PUT'])
@require_company
def quotation_status(quotation_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'error': 'status is required'}), 400

    try:
        with get_db_session() as session:
            quotation = repository(QuotationRepository, session).update_status(quotation_id, data['status'])
            return jsonify({'success': True, 'quotation': quotation})

    except Exception as e:
        return error_response(e, f"updating quotation status {quotation_id}")


@quotations_bp.route('/api/quotations/<quotation_id>/job-order', methods=['POST'])
@require_company
def create_job_order(quotation_id):
    """Create a job order for the quotation's site"""
    data = request.get_json(silent=True) or {}

    try:
        with get_db_session() as session:
            quotation = repository(QuotationRepository, session).get_or_raise(quotation_id)
            job_order = repository(JobOrderRepository, session).create_from_quotation(
                quotation,
                notes=data.get('notes'),
                job_order_type=data.get('job_order_type') or 'Installation'
            )
            return jsonify({'success': True, 'job_order': job_order}), 201

    except Exception as e:
        return error_response(e, f"creating job order from quotation {quotation_id}")


@quotations_bp.route('/api/quotations/<quotation_id>/booking', methods=['POST'])
@require_company
def create_booking(quotation_id):
    """Reserve the site of an accepted quotation"""
    try:
        with get_db_session() as session:
            quotation = repository(QuotationRepository, session).get_or_raise(quotation_id)
            if quotation.get('status') != 'accepted':
                raise ConflictError("Only accepted quotations can be booked")

            booking = repository(BookingRepository, session).create_from_quotation(quotation)
            return jsonify({'success': True, 'booking': booking}), 201

    except Exception as e:
        return error_response(e, f"booking quotation {quotation_id}")
