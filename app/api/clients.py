"""
Client Routes Blueprint

CRUD for client records, with lookup by email.
"""

import logging

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.client_repository import ClientRepository
from validators import validate_pagination, validate_required_fields, validate_email

logger = logging.getLogger(__name__)

clients_bp = Blueprint('clients_bp', __name__)


@clients_bp.route('/api/clients', methods=['GET', 'POST'])
@require_company
def clients():
    """List clients (paginated, searchable) or create a new client"""
    try:
        with get_db_session() as session:
            repo = repository(ClientRepository, session)

            if request.method == 'GET':
                page, per_page = validate_pagination(
                    request.args,
                    current_app.config['DEFAULT_PAGE_SIZE'],
                    current_app.config['MAX_PAGE_SIZE']
                )
                result = repo.list_paginated(
                    page=page,
                    per_page=per_page,
                    search=request.args.get('search'),
                    status=request.args.get('status'),
                    created_by=request.args.get('created_by')
                )
                return jsonify({'success': True, **result})

            data = request.get_json(silent=True) or {}
            is_valid, error = validate_required_fields(data, ['name'])
            if not is_valid:
                return jsonify({'success': False, 'error': error}), 400
            if data.get('email'):
                is_valid, error = validate_email(data['email'])
                if not is_valid:
                    return jsonify({'success': False, 'error': error}), 400

            client = repo.create(data)
            return jsonify({'success': True, 'client': client}), 201

    except Exception as e:
        return error_response(e, "in clients endpoint")


@clients_bp.route('/api/clients/by-email', methods=['GET'])
@require_company
def client_by_email():
    email = request.args.get('email')
    if not email:
        return jsonify({'success': False, 'error': 'email is required'}), 400

    try:
        with get_db_session() as session:
            client = repository(ClientRepository, session).get_by_email(email)
            if not client:
                return jsonify({'success': False, 'error': 'Client not found'}), 404
            return jsonify({'success': True, 'client': client})

    except Exception as e:
        return error_response(e, "looking up client by email")


@clients_bp.route('/api/clients/<client_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def client_detail(client_id):
    """Get, update, or soft delete a client"""
    try:
        with get_db_session() as session:
            repo = repository(ClientRepository, session)

            if request.method == 'GET':
                client = repo.get(client_id)
                if not client:
                    return jsonify({'success': False, 'error': 'Client not found'}), 404
                return jsonify({'success': True, 'client': client})

            elif request.method == 'PUT':
                data = request.get_json(silent=True) or {}
                client = repo.update(client_id, data)
                if not client:
                    return jsonify({'success': False, 'error': 'Client not found'}), 404
                return jsonify({'success': True, 'client': client})

            elif request.method == 'DELETE':
                if not repo.delete(client_id):
                    return jsonify({'success': False, 'error': 'Client not found'}), 404
                return jsonify({'success': True, 'message': 'Client deleted'})

    except Exception as e:
        return error_response(e, f"in client endpoint {client_id}")
