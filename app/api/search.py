"""
Search Routes Blueprint

Proxies queries to the hosted search index so API keys stay server side.
"""

import logging

from flask import Blueprint, request, jsonify, current_app, g

from services.search_indexer import EMPTY_RESPONSE, SearchIndexError

logger = logging.getLogger(__name__)

search_bp = Blueprint('search_bp', __name__)

SEARCHABLE_INDEXES = {
    'products', 'clients', 'proposals', 'cost_estimates', 'quotations',
    'job_orders', 'bookings', 'reports',
}


@search_bp.route('/api/search', methods=['GET', 'POST'])
def search():
    """
    Query params (or JSON body): index, q, filters, page, hitsPerPage.
    Results are limited to the caller's company when X-Company-Id is sent.
    """
    params = dict(request.args)
    if request.method == 'POST':
        params.update(request.get_json(silent=True) or {})

    query = params.get('q') or params.get('query')
    if not query:
        return jsonify({'error': 'Search query is required', **EMPTY_RESPONSE}), 400

    index = params.get('index') or 'products'
    if index not in SEARCHABLE_INDEXES:
        return jsonify({'error': f"Unknown search index: {index}", **EMPTY_RESPONSE}), 400

    filters = params.get('filters')
    if g.company_id:
        company_filter = f"company_id:{g.company_id}"
        filters = f"({filters}) AND {company_filter}" if filters else company_filter

    try:
        page = int(params.get('page', 0))
        hits_per_page = int(params.get('hitsPerPage', 10))
    except (TypeError, ValueError):
        return jsonify({'error': 'page and hitsPerPage must be integers', **EMPTY_RESPONSE}), 400

    try:
        result = current_app.extensions['search_indexer'].search(
            index, query, filters=filters, page=page, hits_per_page=hits_per_page
        )
        return jsonify(result)

    except SearchIndexError as e:
        logger.error(f"Error searching {index}: {str(e)}")
        return jsonify({'error': str(e), **EMPTY_RESPONSE}), 500
