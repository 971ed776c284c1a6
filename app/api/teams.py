"""
Team Routes Blueprint

Operations crews and their members.
"""

import logging

from flask import Blueprint, request, jsonify

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.team_repository import TeamRepository

logger = logging.getLogger(__name__)

teams_bp = Blueprint('teams_bp', __name__)


@teams_bp.route('/api/teams', methods=['GET', 'POST'])
@require_company
def teams():
    """List teams (?active=true for active only) or create a team"""
    try:
        with get_db_session() as session:
            repo = repository(TeamRepository, session)

            if request.method == 'GET':
                active_only = request.args.get('active', 'false').lower() == 'true'
                teams = repo.list(active_only=active_only)
                return jsonify({'success': True, 'teams': teams, 'count': len(teams)})

            data = request.get_json(silent=True) or {}
            if not data.get('name'):
                return jsonify({'success': False, 'error': 'Team name is required'}), 400

            team = repo.create(data)
            return jsonify({'success': True, 'team': team}), 201

    except Exception as e:
        return error_response(e, "in teams endpoint")


@teams_bp.route('/api/teams/<team_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def team_detail(team_id):
    """Get, update, or delete a team"""
    try:
        with get_db_session() as session:
            repo = repository(TeamRepository, session)

            if request.method == 'GET':
                team = repo.get(team_id)
                if not team:
                    return jsonify({'success': False, 'error': 'Team not found'}), 404
                return jsonify({'success': True, 'team': team})

            elif request.method == 'PUT':
                team = repo.update(team_id, request.get_json(silent=True) or {})
                if not team:
                    return jsonify({'success': False, 'error': 'Team not found'}), 404
                return jsonify({'success': True, 'team': team})

            elif request.method == 'DELETE':
                if not repo.delete(team_id):
                    return jsonify({'success': False, 'error': 'Team not found'}), 404
                return jsonify({'success': True, 'message': 'Team deleted'})

    except Exception as e:
        return error_response(e, f"in team endpoint {team_id}")


@teams_bp.route('/api/teams/<team_id>/members', methods=['POST'])
@require_company
def add_team_member(team_id):
    member = request.get_json(silent=True) or {}
    if not member.get('id'):
        return jsonify({'success': False, 'error': 'Member id is required'}), 400

    try:
        with get_db_session() as session:
            team = repository(TeamRepository, session).add_member(team_id, member)
            return jsonify({'success': True, 'team': team})

    except Exception as e:
        return error_response(e, f"adding member to team {team_id}")


@teams_bp.route('/api/teams/<team_id>/members/<member_id>', methods=['DELETE'])
@require_company
def remove_team_member(team_id, member_id):
    try:
        with get_db_session() as session:
            team = repository(TeamRepository, session).remove_member(team_id, member_id)
            return jsonify({'success': True, 'team': team})

    except Exception as e:
        return error_response(e, f"removing member from team {team_id}")
