"""
Report Routes Blueprint

Field reports filed by logistics crews, with photo attachment uploads.
"""

import logging
import time

from flask import Blueprint, request, jsonify, current_app

from app.utils.helpers import repository, error_response
from database.connection import get_db_session
from security import require_company
from services.report_repository import ReportRepository
from validators import validate_pagination, validate_required_fields, validate_attachment_upload

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports_bp', __name__)

REQUIRED_FIELDS = ['site_id', 'report_type']


@reports_bp.route('/api/reports', methods=['GET', 'POST'])
@require_company
def reports():
    """List reports (paginated or ?recent=N) or create a draft report"""
    try:
        with get_db_session() as session:
            repo = repository(ReportRepository, session)

            if request.method == 'GET':
                if request.args.get('recent'):
                    items = repo.recent(int(request.args['recent']))
                    return jsonify({'success': True, 'items': items})

                page, per_page = validate_pagination(
                    request.args,
                    current_app.config['DEFAULT_PAGE_SIZE'],
                    current_app.config['MAX_PAGE_SIZE']
                )
                result = repo.list_paginated(
                    page=page,
                    per_page=per_page,
                    status=request.args.get('status'),
                    report_type=request.args.get('report_type'),
                    seller_id=request.args.get('seller_id')
                )
                return jsonify({'success': True, **result})

            data = request.get_json(silent=True) or {}
            is_valid, error = validate_required_fields(data, REQUIRED_FIELDS)
            if not is_valid:
                return jsonify({'success': False, 'error': error}), 400

            report = repo.create(data)
            return jsonify({'success': True, 'report': report}), 201

    except Exception as e:
        return error_response(e, "in reports endpoint")


@reports_bp.route('/api/reports/post', methods=['POST'])
@require_company
def post_report():
    """Create a report and post it straight away"""
    data = request.get_json(silent=True) or {}
    is_valid, error = validate_required_fields(data, REQUIRED_FIELDS)
    if not is_valid:
        return jsonify({'success': False, 'error': error}), 400

    try:
        with get_db_session() as session:
            report = repository(ReportRepository, session).post(data)
            return jsonify({'success': True, 'report': report}), 201

    except Exception as e:
        return error_response(e, "posting report")


@reports_bp.route('/api/reports/attachments', methods=['POST'])
@require_company
def upload_attachment():
    """
    Upload one report attachment (multipart field 'file').

    Returns the {fileUrl, fileName, fileType} entry to include in the
    report's attachments list.
    """
    file = request.files.get('file')
    is_valid, error, safe_filename = validate_attachment_upload(file)
    if not is_valid:
        return jsonify({'success': False, 'error': error}), 400

    try:
        stored_name = f"{int(time.time() * 1000)}_{safe_filename}"
        uploaded = current_app.extensions['storage'].upload(
            file.read(),
            stored_name,
            folder='report-attachments',
            content_type=file.mimetype
        )
        return jsonify({
            'success': True,
            'attachment': {
                'fileUrl': uploaded['url'],
                'fileName': safe_filename,
                'fileType': file.mimetype,
            }
        }), 201

    except Exception as e:
        return error_response(e, "uploading report attachment")


@reports_bp.route('/api/reports/<report_id>', methods=['GET', 'PUT', 'DELETE'])
@require_company
def report_detail(report_id):
    """Get, update, or delete a report"""
    try:
        with get_db_session() as session:
            repo = repository(ReportRepository, session)

            if request.method == 'GET':
                report = repo.get(report_id)
                if not report:
                    return jsonify({'success': False, 'error': 'Report not found'}), 404
                return jsonify({'success': True, 'report': report})

            elif request.method == 'PUT':
                report = repo.update(report_id, request.get_json(silent=True) or {})
                if not report:
                    return jsonify({'success': False, 'error': 'Report not found'}), 404
                return jsonify({'success': True, 'report': report})

            elif request.method == 'DELETE':
                if not repo.delete(report_id):
                    return jsonify({'success': False, 'error': 'Report not found'}), 404
                return jsonify({'success': True, 'message': 'Report deleted'})

    except Exception as e:
        return error_response(e, f"in report endpoint {report_id}")
