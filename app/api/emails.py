"""
Document Email Routes Blueprint

Sends cost estimates, quotations and proposals to clients over SMTP with
the rendered PDFs attached. Drafts are marked as sent once delivered.
"""

import logging

from flask import Blueprint, request, jsonify, current_app, g

from app.api.documents import build_cost_estimate_pdfs, build_quotation_pdf, build_proposal_pdf
from app.utils.helpers import repository, error_response, company_profile
from database.connection import get_db_session
from documents.renderer import render_pdf_base64
from security import require_company
from services.cost_estimate_repository import CostEstimateRepository
from services.email_service import (
    EmailService,
    EmailDeliveryError,
    render_cost_estimate_email,
    render_quotation_email,
    render_proposal_email,
)
from services.proposal_repository import ProposalRepository
from services.quotation_repository import QuotationRepository
from validators import validate_send_email_request, parse_email_list

logger = logging.getLogger(__name__)

emails_bp = Blueprint('emails_bp', __name__)


def _send_document(entity_type, repo_class, render, build_attachments):
    data = request.get_json(silent=True) or {}

    is_valid, error = validate_send_email_request(data)
    if not is_valid:
        return jsonify({'success': False, 'error': error}), 400

    try:
        with get_db_session() as session:
            repo = repository(repo_class, session)
            record = repo.get_or_raise(data['id'])
            company = company_profile(session)

            html_body, text = render(
                record,
                data['subject'],
                data['body'],
                current_app.config['APP_URL'],
                company['name']
            )
            attachments = build_attachments(session, record)

            service = EmailService.from_config(session, g.company_id, g.user_id, current_app.config)
            try:
                sent = service.send(
                    data['clientEmail'],
                    data['subject'],
                    text,
                    html_body,
                    cc=parse_email_list(data.get('ccEmail')),
                    reply_to=data.get('currentUserEmail'),
                    attachments=attachments,
                    entity_type=entity_type,
                    entity_id=record['id']
                )
            except EmailDeliveryError as e:
                # The failed attempt is still committed with the session
                return jsonify({
                    'success': False,
                    'error': 'Failed to send email',
                    'details': str(e)
                }), 500

            if record.get('status') == 'draft':
                repo.update_status(record['id'], 'sent')

        return jsonify({'success': True, 'data': sent})

    except Exception as e:
        return error_response(e, f"sending {entity_type} email")


@emails_bp.route('/api/cost-estimates/send-email', methods=['POST'])
@require_company
def send_cost_estimate_email():
    """Email a cost estimate with one PDF per site attached"""
    def attachments(session, estimate):
        return [(filename, content)
                for _, filename, content in build_cost_estimate_pdfs(session, estimate,
                                                                     render=render_pdf_base64)]

    return _send_document('cost_estimate', CostEstimateRepository,
                          render_cost_estimate_email, attachments)


@emails_bp.route('/api/quotations/send-email', methods=['POST'])
@require_company
def send_quotation_email():
    """Email a quotation with its PDF attached"""
    return _send_document('quotation', QuotationRepository, render_quotation_email,
                          lambda session, quotation: [
                              build_quotation_pdf(session, quotation, render=render_pdf_base64)])


@emails_bp.route('/api/proposals/send-email', methods=['POST'])
@require_company
def send_proposal_email():
    """Email a proposal with its PDF attached"""
    return _send_document('proposal', ProposalRepository, render_proposal_email,
                          lambda session, proposal: [
                              build_proposal_pdf(session, proposal, render=render_pdf_base64)])
