"""
Job Order Routes Blueprint

Job orders are created from quotations (see quotations blueprint) and
worked through by logistics crews.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.job_order_repository import JobOrderRepository
from validators import validate_pagination

logger = logging.getLogger(__name__)

job_orders_bp = Blueprint('job_orders_bp', __name__)


@job_orders_bp.route('/api/job-orders', methods=['GET'])
@require_company
def job_orders():
    """List job orders, paginated, optionally filtered by creator or status"""
    try:
        page, per_page = validate_pagination(
            request.args,
            current_app.config['DEFAULT_PAGE_SIZE'],
            current_app.config['MAX_PAGE_SIZE']
        )
        with get_db_session() as session:
            repo = repository(JobOrderRepository, session)
            created_by = request.args.get('created_by')
            if created_by and request.args.get('paginate', 'true').lower() == 'false':
                return jsonify({'success': True, 'items': repo.list_by_creator(created_by)})

            result = repo.list_paginated(
                page=page,
                per_page=per_page,
                created_by=created_by,
                status=request.args.get('status')
            )
            return jsonify({'success': True, **result})

    except Exception as e:
        return error_response(e, "listing job orders")


@job_orders_bp.route('/api/job-orders/<job_order_id>', methods=['GET', 'PUT'])
@require_company
def job_order_detail(job_order_id):
    """Get or update a job order"""
    try:
        with get_db_session() as session:
            repo = repository(JobOrderRepository, session)

            if request.method == 'GET':
                job_order = repo.get(job_order_id)
            else:
                job_order = repo.update(job_order_id, request.get_json(silent=True) or {})

            if not job_order:
                return jsonify({'success': False, 'error': 'Job order not found'}), 404
            return jsonify({'success': True, 'job_order': job_order})

    except Exception as e:
        return error_response(e, f"in job order endpoint {job_order_id}")


@job_orders_bp.route('/api/job-orders/<job_order_id>/status', methods=['PUT'])
@require_company
def job_order_status(job_order_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'error': 'status is required'}), 400

    try:
        with get_db_session() as session:
            job_order = repository(JobOrderRepository, session).update_status(job_order_id, data['status'])
            return jsonify({'success': True, 'job_order': job_order})

    except Exception as e:
        return error_response(e, f"updating job order status {job_order_id}")


@job_orders_bp.route('/api/job-orders/<job_order_id>/assign', methods=['POST'])
@require_company
def assign_job_order(job_order_id):
    """Assign a crew member; the job order moves to in_progress"""
    data = request.get_json(silent=True) or {}
    if not data.get('assigned_to'):
        return jsonify({'success': False, 'error': 'assigned_to is required'}), 400

    try:
        with get_db_session() as session:
            job_order = repository(JobOrderRepository, session).assign(
                job_order_id,
                data['assigned_to'],
                assigned_name=data.get('assigned_name')
            )
            return jsonify({'success': True, 'job_order': job_order})

    except Exception as e:
        return error_response(e, f"assigning job order {job_order_id}")
