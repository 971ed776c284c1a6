"""
File Routes Blueprint

Serves generated documents and attachments kept in local storage when no
object storage bucket is configured.
"""

import logging

from flask import Blueprint, jsonify, send_file, current_app

logger = logging.getLogger(__name__)

files_bp = Blueprint('files_bp', __name__)


@files_bp.route('/api/files/<folder>/<filename>', methods=['GET'])
def download_file(folder, filename):
    path = current_app.extensions['storage'].local_path(folder, filename)
    if not path:
        return jsonify({'success': False, 'error': 'File not found'}), 404

    return send_file(path, as_attachment=False, download_name=filename)
