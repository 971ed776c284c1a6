"""
Proposal Routes Blueprint

CRUD and status changes for site proposals sent to clients.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.proposal_repository import ProposalRepository
from validators import validate_pagination

logger = logging.getLogger(__name__)

proposals_bp = Blueprint('proposals_bp', __name__)


@proposals_bp.route('/api/proposals', methods=['GET', 'POST'])
@require_company
def proposals():
    """List proposals (paginated) or create a new proposal"""
    try:
        with get_db_session() as session:
            repo = repository(ProposalRepository, session)

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
            if not data.get('title'):
                return jsonify({'success': False, 'error': 'Proposal title is required'}), 400
            if not data.get('products'):
                return jsonify({'success': False, 'error': 'At least one product is required'}), 400

            proposal = repo.create(data)
            return jsonify({'success': True, 'proposal': proposal}), 201

    except Exception as e:
        return error_response(e, "in proposals endpoint")


@proposals_bp.route('/api/proposals/count', methods=['GET'])
@require_company
def proposal_count():
    try:
        with get_db_session() as session:
            count = repository(ProposalRepository, session).count(request.args.get('status'))
            return jsonify({'success': True, 'count': count})

    except Exception as e:
        return error_response(e, "counting proposals")


@proposals_bp.route('/api/proposals/<proposal_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def proposal_detail(proposal_id):
    """Get, update, or delete a proposal"""
    try:
        with get_db_session() as session:
            repo = repository(ProposalRepository, session)

            if request.method == 'GET':
                proposal = repo.get(proposal_id)
                if not proposal:
                    return jsonify({'success': False, 'error': 'Proposal not found'}), 404
                return jsonify({'success': True, 'proposal': proposal})

            elif request.method == 'PUT':
                data = request.get_json(silent=True) or {}
                proposal = repo.update(proposal_id, data)
                if not proposal:
                    return jsonify({'success': False, 'error': 'Proposal not found'}), 404
                return jsonify({'success': True, 'proposal': proposal})

            elif request.method == 'DELETE':
                if not repo.delete(proposal_id):
                    return jsonify({'success': False, 'error': 'Proposal not found'}), 404
                return jsonify({'success': True, 'message': 'Proposal deleted'})

    except Exception as e:
        return error_response(e, f"in proposal endpoint {proposal_id}")


@proposals_bp.route('/api/proposals/<proposal_id>/status', methods=['PUT'])
@require_company
def proposal_status(proposal_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return jsonify({'success': False, 'error': 'status is required'}), 400

    try:
        with get_db_session() as session:
            proposal = repository(ProposalRepository, session).update_status(proposal_id, data['status'])
            return jsonify({'success': True, 'proposal': proposal})

    except Exception as e:
        return error_response(e, f"updating proposal status {proposal_id}")
