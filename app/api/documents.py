"""
Document Generation Routes Blueprint

PDF generation for field reports, cost estimates, quotations and proposals.
Generated files are uploaded through the storage service and returned as
download URLs; the GET routes stream the PDF back inline instead.
"""

import io
import logging
import time

from flask import Blueprint, request, jsonify, send_file, current_app

from app.utils.helpers import repository, error_response, company_profile, find_user, find_product
from database.connection import get_db_session
from documents.cost_estimate_pdf import compose_cost_estimate_letter, compose_detailed_cost_estimate
from documents.proposal_pdf import compose_proposal
from documents.quotation_pdf import compose_quotation
from documents.renderer import render_pdf
from documents.report_pdf import compose_report
from documents.site_grouping import split_cost_estimate_by_site, is_rental_item
from security import require_company
from services.cost_estimate_repository import CostEstimateRepository
from services.errors import NotFoundError
from services.proposal_repository import ProposalRepository
from services.quotation_repository import QuotationRepository
from services.report_repository import ReportRepository

logger = logging.getLogger(__name__)

documents_bp = Blueprint('documents_bp', __name__)


# ============================================================================
# BUILDERS
# ============================================================================

def build_report_pdf(session, report):
    """Returns (filename, pdf bytes) for a field report."""
    product = report.get('product') or find_product(session, report.get('site_id'))
    instructions = compose_report(report, product=product, company=company_profile(session))
    filename = f"report-{report['id']}-{int(time.time() * 1000)}.pdf"
    return filename, render_pdf(instructions, title=f"{report.get('report_type') or 'Report'} Report")


def build_cost_estimate_pdfs(session, estimate, selected_pages=None, detailed=False,
                             render=render_pdf):
    """
    One PDF per site on the estimate.

    Returns:
        list of (site name, filename, rendered pdf); bytes from render_pdf,
        base64 text from render_pdf_base64

    Raises:
        SiteSelectionError: if selected_pages matches no site
    """
    company = company_profile(session)
    user = find_user(session, estimate.get('created_by'))
    documents = []

    for site_estimate in split_cost_estimate_by_site(estimate, selected_pages):
        if detailed:
            instructions = compose_detailed_cost_estimate(site_estimate, company)
        else:
            anchor = next((item for item in site_estimate['line_items'] if is_rental_item(item)), None)
            product = find_product(session, anchor.get('id')) if anchor else None
            instructions = compose_cost_estimate_letter(site_estimate, company, user=user, product=product)

        number = site_estimate.get('cost_estimate_number') or estimate.get('id') or 'cost-estimate'
        documents.append((
            site_estimate['site_name'],
            f"{number}.pdf",
            render(instructions, title=site_estimate.get('title')),
        ))

    logger.info(f"Rendered {len(documents)} PDF(s) for cost estimate {estimate.get('id')}")
    return documents


def build_quotation_pdf(session, quotation, render=render_pdf):
    """Returns (filename, rendered pdf) for a quotation."""
    instructions = compose_quotation(quotation, company_profile(session))
    number = quotation.get('quotation_number') or (quotation.get('id') or '')[-8:]
    return f"Quotation_{number}.pdf", render(instructions, title=f"Quotation {number}")


def build_proposal_pdf(session, proposal, render=render_pdf):
    """Returns (filename, rendered pdf) for a proposal."""
    instructions = compose_proposal(proposal, company_profile(session))
    number = proposal.get('proposal_number') or proposal.get('id')
    return f"Proposal_{number}.pdf", render(instructions, title=proposal.get('title'))


def _storage():
    return current_app.extensions['storage']


# ============================================================================
# GENERATE + UPLOAD
# ============================================================================

@documents_bp.route('/api/generate-report-pdf', methods=['POST'])
@require_company
def generate_report_pdf():
    """Generate a report PDF and upload it"""
    data = request.get_json(silent=True) or {}
    report_id = data.get('reportId')
    if not report_id:
        return jsonify({'success': False, 'error': 'reportId is required'}), 400

    try:
        with get_db_session() as session:
            report = repository(ReportRepository, session).get(report_id)
            if not report:
                return jsonify({'success': False, 'error': 'Report not found'}), 404

            filename, pdf_bytes = build_report_pdf(session, report)

        uploaded = _storage().upload_pdf(pdf_bytes, filename, folder='reports')
        logger.info(f"Generated report PDF {uploaded['filename']} for {report_id}")
        return jsonify({'success': True, 'url': uploaded['url'], 'filename': uploaded['filename']})

    except Exception as e:
        logger.error(f"Error generating report PDF: {str(e)}")
        return jsonify({'success': False, 'error': 'Failed to generate report PDF'}), 500


@documents_bp.route('/api/generate-cost-estimate-pdf', methods=['POST'])
@require_company
def generate_cost_estimate_pdf():
    """Generate one PDF per selected site of a cost estimate"""
    data = request.get_json(silent=True) or {}
    estimate_id = data.get('costEstimateId')
    if not estimate_id:
        return jsonify({'success': False, 'error': 'costEstimateId is required'}), 400

    try:
        with get_db_session() as session:
            estimate = repository(CostEstimateRepository, session).get_or_raise(estimate_id)
            documents = build_cost_estimate_pdfs(
                session,
                estimate,
                selected_pages=data.get('selectedPages'),
                detailed=bool(data.get('detailed'))
            )

        files = []
        for site, filename, pdf_bytes in documents:
            uploaded = _storage().upload_pdf(pdf_bytes, filename, folder='cost-estimates')
            files.append({'site': site, 'url': uploaded['url'], 'filename': uploaded['filename']})

        return jsonify({'success': True, 'files': files})

    except Exception as e:
        return error_response(e, "generating cost estimate PDF")


@documents_bp.route('/api/generate-quotation-pdf', methods=['POST'])
@require_company
def generate_quotation_pdf():
    data = request.get_json(silent=True) or {}
    quotation_id = data.get('quotationId')
    if not quotation_id:
        return jsonify({'success': False, 'error': 'quotationId is required'}), 400

    try:
        with get_db_session() as session:
            quotation = repository(QuotationRepository, session).get_or_raise(quotation_id)
            filename, pdf_bytes = build_quotation_pdf(session, quotation)

        uploaded = _storage().upload_pdf(pdf_bytes, filename, folder='quotations')
        return jsonify({'success': True, 'url': uploaded['url'], 'filename': uploaded['filename']})

    except Exception as e:
        return error_response(e, "generating quotation PDF")


@documents_bp.route('/api/proposals/generate-pdf', methods=['POST'])
@require_company
def generate_proposal_pdf():
    data = request.get_json(silent=True) or {}
    proposal_id = data.get('proposalId')
    if not proposal_id:
        return jsonify({'success': False, 'error': 'proposalId is required'}), 400

    try:
        with get_db_session() as session:
            proposal = repository(ProposalRepository, session).get_or_raise(proposal_id)
            filename, pdf_bytes = build_proposal_pdf(session, proposal)

        uploaded = _storage().upload_pdf(pdf_bytes, filename, folder='proposals')
        return jsonify({'success': True, 'url': uploaded['url'], 'filename': uploaded['filename']})

    except Exception as e:
        return error_response(e, "generating proposal PDF")


# ============================================================================
# INLINE DOWNLOAD
# ============================================================================

@documents_bp.route('/api/<kind>/<record_id>/pdf', methods=['GET'])
@require_company
def download_pdf(kind, record_id):
    """
    Stream a document inline.

    kind is one of reports, cost-estimates, quotations, proposals. For cost
    estimates ?site= picks one site and ?detailed=true switches layout;
    without a site the first one is returned.
    """
    try:
        with get_db_session() as session:
            if kind == 'reports':
                report = repository(ReportRepository, session).get_or_raise(record_id)
                filename, pdf_bytes = build_report_pdf(session, report)
            elif kind == 'cost-estimates':
                estimate = repository(CostEstimateRepository, session).get_or_raise(record_id)
                site = request.args.get('site')
                documents = build_cost_estimate_pdfs(
                    session,
                    estimate,
                    selected_pages=[site] if site else None,
                    detailed=request.args.get('detailed', 'false').lower() == 'true'
                )
                _, filename, pdf_bytes = documents[0]
            elif kind == 'quotations':
                quotation = repository(QuotationRepository, session).get_or_raise(record_id)
                filename, pdf_bytes = build_quotation_pdf(session, quotation)
            elif kind == 'proposals':
                proposal = repository(ProposalRepository, session).get_or_raise(record_id)
                filename, pdf_bytes = build_proposal_pdf(session, proposal)
            else:
                raise NotFoundError('document type', kind)

        return send_file(
            io.BytesIO(pdf_bytes),
            mimetype='application/pdf',
            as_attachment=False,
            download_name=filename
        )

    except Exception as e:
        return error_response(e, f"downloading {kind} PDF")
