"""
Cost Estimate Routes Blueprint

Cost estimates are created from a proposal, directly for a set of sites, or
as one document per site sharing a page id. Sibling documents are listed
together through the /grouped endpoint.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from documents.site_grouping import split_cost_estimate_by_site
from security import require_company
from services.cost_estimate_repository import CostEstimateRepository
from services.proposal_repository import ProposalRepository
from validators import validate_pagination, validate_cost_estimate_request, validate_line_item

logger = logging.getLogger(__name__)

cost_estimates_bp = Blueprint('cost_estimates_bp', __name__)


def _validate_line_items(items):
    for index, item in enumerate(items or []):
        is_valid, error = validate_line_item(item, index)
        if not is_valid:
            return error
    return None


@cost_estimates_bp.route('/api/cost-estimates', methods=['GET', 'POST'])
@require_company
def cost_estimates():
    """List cost estimates (paginated) or create one covering the given sites"""
    try:
        with get_db_session() as session:
            repo = repository(CostEstimateRepository, session)

            if request.method == 'GET':
                page, per_page = validate_pagination(
                    request.args,
                    current_app.config['DEFAULT_PAGE_SIZE'],
                    current_app.config['MAX_PAGE_SIZE']
                )
                result = repo.list_paginated(
                    page=page,
                    per_page=per_page,
                    status=request.args.get('status'),
                    search=request.args.get('search'),
                    created_by=request.args.get('created_by')
                )
                return jsonify({'success': True, **result})

            data = request.get_json(silent=True) or {}
            is_valid, error = validate_cost_estimate_request(data)
            if not is_valid:
                return jsonify({'success': False, 'error': error}), 400
            error = _validate_line_items(data.get('customLineItems'))
            if error:
                return jsonify({'success': False, 'error': error}), 400

            estimate = repo.create_direct(
                data['client'],
                data['sites'],
                start_date=data.get('startDate'),
                end_date=data.get('endDate'),
                notes=data.get('notes'),
                custom_line_items=data.get('customLineItems'),
                title=data.get('title')
            )
            return jsonify({'success': True, 'cost_estimate': estimate}), 201

    except Exception as e:
        return error_response(e, "in cost estimates endpoint")


@cost_estimates_bp.route('/api/cost-estimates/multiple', methods=['POST'])
@require_company
def create_multiple_cost_estimates():
    """One cost estimate per site, linked by a shared page id"""
    data = request.get_json(silent=True) or {}
    is_valid, error = validate_cost_estimate_request(data)
    if not is_valid:
        return jsonify({'success': False, 'error': error}), 400

    try:
        with get_db_session() as session:
            created = repository(CostEstimateRepository, session).create_multiple(
                data['client'],
                data['sites'],
                start_date=data.get('startDate'),
                end_date=data.get('endDate'),
                notes=data.get('notes')
            )
            return jsonify({
                'success': True,
                'cost_estimates': created,
                'page_id': created[0]['page_id'] if created else None
            }), 201

    except Exception as e:
        return error_response(e, "creating multiple cost estimates")


@cost_estimates_bp.route('/api/cost-estimates/from-proposal', methods=['POST'])
@require_company
def create_cost_estimate_from_proposal():
    data = request.get_json(silent=True) or {}
    if not data.get('proposalId'):
        return jsonify({'success': False, 'error': 'proposalId is required'}), 400
    error = _validate_line_items(data.get('customLineItems'))
    if error:
        return jsonify({'success': False, 'error': error}), 400

    try:
        with get_db_session() as session:
            proposal = repository(ProposalRepository, session).get_or_raise(data['proposalId'])
            estimate = repository(CostEstimateRepository, session).create_from_proposal(
                proposal,
                notes=data.get('notes'),
                custom_line_items=data.get('customLineItems'),
                send_email=bool(data.get('sendEmail'))
            )
            return jsonify({'success': True, 'cost_estimate': estimate}), 201

    except Exception as e:
        return error_response(e, "creating cost estimate from proposal")


@cost_estimates_bp.route('/api/cost-estimates/grouped', methods=['GET'])
@require_company
def grouped_cost_estimates():
    """Cost estimates grouped by page id"""
    try:
        with get_db_session() as session:
            groups = repository(CostEstimateRepository, session).list_grouped(
                status=request.args.get('status'),
                search=request.args.get('search'),
                created_by=request.args.get('created_by')
            )
            return jsonify({'success': True, 'groups': groups, 'total': len(groups)})

    except Exception as e:
        return error_response(e, "grouping cost estimates")


@cost_estimates_bp.route('/api/cost-estimates/by-proposal/<proposal_id>', methods=['GET'])
@require_company
def cost_estimates_by_proposal(proposal_id):
    try:
        with get_db_session() as session:
            estimates = repository(CostEstimateRepository, session).list_by_proposal(proposal_id)
            return jsonify({'success': True, 'cost_estimates': estimates})

    except Exception as e:
        return error_response(e, f"listing cost estimates for proposal {proposal_id}")


@cost_estimates_bp.route('/api/cost-estimates/by-page/<page_id>', methods=['GET'])
@require_company
def cost_estimates_by_page(page_id):
    try:
        with get_db_session() as session:
            estimates = repository(CostEstimateRepository, session).list_by_page(page_id)
            return jsonify({'success': True, 'cost_estimates': estimates})

    except Exception as e:
        return error_response(e, f"listing cost estimates for page {page_id}")


@cost_estimates_bp.route('/api/cost-estimates/<estimate_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def cost_estimate_detail(estimate_id):
    """Get, update, or delete a cost estimate"""
    try:
        with get_db_session() as session:
            repo = repository(CostEstimateRepository, session)

            if request.method == 'GET':
                estimate = repo.get(estimate_id)
                if not estimate:
                    return jsonify({'success': False, 'error': 'Cost estimate not found'}), 404
                return jsonify({'success': True, 'cost_estimate': estimate})

            elif request.method == 'PUT':
                data = request.get_json(silent=True) or {}
                error = _validate_line_items(data.get('line_items'))
                if error:
                    return jsonify({'success': False, 'error': error}), 400
                estimate = repo.update(estimate_id, data)
                if not estimate:
                    return jsonify({'success': False, 'error': 'Cost estimate not found'}), 404
                return jsonify({'success': True, 'cost_estimate': estimate})

            elif request.method == 'DELETE':
                if not repo.delete(estimate_id):
                    return jsonify({'success': False, 'error': 'Cost estimate not found'}), 404
                return jsonify({'success': True, 'message': 'Cost estimate deleted'})

    except Exception as e:
        return error_response(e, f"in cost estimate endpoint {estimate_id}")


@cost_estimates_bp.route('/api/cost-estimates/<estimate_id>/status', methods=['PUT'])
@require_company
def cost_estimate_status(estimate_id):
    """Approve, reject or otherwise move a cost estimate along"""
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'error': 'status is required'}), 400

    try:
        with get_db_session() as session:
            estimate = repository(CostEstimateRepository, session).update_status(
                estimate_id,
                data['status'],
                rejection_reason=data.get('rejectionReason')
            )
            return jsonify({'success': True, 'cost_estimate': estimate})

    except Exception as e:
        return error_response(e, f"updating cost estimate status {estimate_id}")


@cost_estimates_bp.route('/api/cost-estimates/<estimate_id>/sites', methods=['GET'])
@require_company
def cost_estimate_sites(estimate_id):
    """Per-site breakdown used to pick pages before generating PDFs"""
    try:
        with get_db_session() as session:
            estimate = repository(CostEstimateRepository, session).get_or_raise(estimate_id)

        sites = [
            {
                'site': site['site_name'],
                'cost_estimate_number': site['cost_estimate_number'],
                'line_items': len(site['line_items']),
                'subtotal': site['subtotal'],
                'total_amount': site['total_amount'],
            }
            for site in split_cost_estimate_by_site(estimate)
        ]
        return jsonify({'success': True, 'sites': sites})

    except Exception as e:
        return error_response(e, f"listing sites for cost estimate {estimate_id}")
