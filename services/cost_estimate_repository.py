"""
Cost Estimate Repository - database access for cost estimates.

Cost estimates are created from a proposal, directly for one site, or as a
set of sibling estimates (one per site) sharing a page_id.
"""

import logging
import random
import string
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from database.models import CostEstimate
from documents.site_grouping import group_estimates_by_page, is_rental_item
from services.base_repository import BaseRepository, parse_datetime
from validators import validate_status

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = 0.12
DEFAULT_DURATION_DAYS = 30
VALIDITY_DAYS = 30
PASSWORD_CHARS = string.ascii_uppercase + string.digits


def generate_cost_estimate_password() -> str:
    """Random 8 character access code for the client-facing view."""
    return ''.join(random.choice(PASSWORD_CHARS) for _ in range(8))


def generate_cost_estimate_number() -> str:
    """CE-YYYYMMDD-NNNN where NNNN are the last four digits of the epoch millis."""
    millis = str(int(time.time() * 1000))
    return f"CE-{datetime.utcnow().strftime('%Y%m%d')}-{millis[-4:]}"


def calculate_totals(line_items: List[Dict], tax_rate: float = DEFAULT_TAX_RATE) -> Dict[str, float]:
    subtotal = sum(float(item.get('total') or 0) for item in line_items)
    tax_amount = subtotal * tax_rate
    return {
        'subtotal': subtotal,
        'tax_rate': tax_rate,
        'tax_amount': tax_amount,
        'total_amount': subtotal + tax_amount,
    }


def contract_duration_days(start_date, end_date) -> int:
    """Inclusive day count between two dates; 30 when either is missing."""
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    if not start or not end:
        return DEFAULT_DURATION_DAYS
    return max((end.date() - start.date()).days + 1, 1)


def build_site_line_items(site: Dict[str, Any], duration_days: int) -> List[Dict[str, Any]]:
    """
    Line items for one site: the rental row keyed by the site id, then
    production, installation and maintenance rows whose ids embed it.
    """
    site_id = site['id']
    monthly = float(site.get('price') or 0)
    site_type = (site.get('type') or '').upper()
    category = "LED Billboard Rental" if site_type == 'LED' else "Static Billboard Rental"

    items = [{
        'id': site_id,
        'description': site.get('name') or '',
        'quantity': 1,
        'unitPrice': monthly,
        'total': monthly * (duration_days / 30),
        'category': category,
        'notes': f"Location: {site.get('location') or 'N/A'}",
        'image': site.get('image'),
        'content_type': site.get('content_type') or '',
    }]
    for suffix, label in (('production', 'Production'),
                          ('installation', 'Installation'),
                          ('maintenance', 'Maintenance')):
        items.append({
            'id': f"{site_id}-{suffix}",
            'description': f"{label} - {site.get('name') or ''}",
            'quantity': 1,
            'unitPrice': 0,
            'total': 0,
            'category': label,
            'notes': '',
        })
    return items


class CostEstimateRepository(BaseRepository):
    """Repository for cost estimate database operations."""

    model = CostEstimate
    entity_type = 'cost_estimate'
    search_index = 'cost_estimates'

    UPDATABLE_FIELDS = (
        'title', 'client', 'client_id', 'line_items', 'start_date', 'end_date',
        'duration_days', 'valid_until', 'notes', 'custom_message', 'status',
    )

    def _save(self, estimate: CostEstimate, description: str) -> Dict:
        self.session.add(estimate)
        self.session.flush()
        self._log_event(
            entity_id=estimate.id,
            event_type='CREATED',
            description=description,
            metadata={'cost_estimate_number': estimate.cost_estimate_number,
                      'total_amount': estimate.total_amount}
        )
        record = estimate.to_dict()
        self._index(record)
        logger.info(f"Created cost estimate: {estimate.id}")
        return record

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_from_proposal(self, proposal: Dict[str, Any], notes: str = None,
                             custom_line_items: List[Dict] = None,
                             send_email: bool = False) -> Dict:
        """
        Create a cost estimate for a proposal.

        Without custom line items, one media_cost row is generated per
        proposal product followed by zero-priced production, installation
        and maintenance rows.
        """
        line_items = list(custom_line_items or [])

        if not line_items:
            products = proposal.get('products') or []
            for index, product in enumerate(products):
                price = float(product.get('price') or 0)
                line_items.append({
                    'id': f"item_{index + 1}",
                    'description': f"{product.get('name', '')} - {product.get('location', '')}",
                    'quantity': 1,
                    'unitPrice': price,
                    'total': price,
                    'category': 'media_cost',
                })
            count = len(line_items)
            for offset, (description, category) in enumerate((
                ("Creative Design & Production", 'production_cost'),
                ("Installation & Setup", 'installation_cost'),
                ("Maintenance & Monitoring", 'maintenance_cost'),
            ), start=1):
                line_items.append({
                    'id': f"item_{count + offset}",
                    'description': description,
                    'quantity': 1,
                    'unitPrice': 0,
                    'total': 0,
                    'category': category,
                })

        totals = calculate_totals(line_items)
        client = proposal.get('client') or {}

        estimate = CostEstimate(
            company_id=self.company_id,
            cost_estimate_number=generate_cost_estimate_number(),
            proposal_id=proposal.get('id'),
            title=f"Cost Estimate for {proposal.get('title', '')}",
            client_id=client.get('id') or proposal.get('client_id'),
            client=client,
            line_items=line_items,
            notes=notes or '',
            status='sent' if send_email else 'draft',
            password=generate_cost_estimate_password(),
            valid_until=datetime.utcnow() + timedelta(days=VALIDITY_DAYS),
            created_by=self.user_id,
            **totals
        )
        return self._save(estimate, f"Cost estimate created from proposal '{proposal.get('title', '')}'")

    def create_direct(self, client: Dict[str, Any], sites: List[Dict[str, Any]],
                      start_date=None, end_date=None, notes: str = None,
                      custom_line_items: List[Dict] = None, page_id: str = None,
                      page_number: int = None, title: str = None) -> Dict:
        """Create one cost estimate covering the given sites (usually one)."""
        duration_days = contract_duration_days(start_date, end_date)

        if custom_line_items:
            line_items = []
            for item in custom_line_items:
                item = dict(item)
                if is_rental_item(item):
                    item['total'] = float(item.get('unitPrice') or 0) * (duration_days / 30)
                line_items.append(item)
        else:
            line_items = []
            for site in sites:
                line_items.extend(build_site_line_items(site, duration_days))

        totals = calculate_totals(line_items)

        if not title:
            names = ', '.join(site.get('name') or '' for site in sites)
            title = f"Cost Estimate for {names}" if names else "Cost Estimate"

        estimate = CostEstimate(
            company_id=self.company_id,
            cost_estimate_number=generate_cost_estimate_number(),
            title=title,
            client_id=client.get('id'),
            client=client,
            line_items=line_items,
            start_date=parse_datetime(start_date),
            end_date=parse_datetime(end_date),
            duration_days=duration_days,
            valid_until=datetime.utcnow() + timedelta(days=VALIDITY_DAYS),
            notes=notes or '',
            status='draft',
            password=generate_cost_estimate_password(),
            page_id=page_id,
            page_number=page_number,
            created_by=self.user_id,
            **totals
        )
        return self._save(estimate, f"Cost estimate '{title}' was created")

    def create_multiple(self, client: Dict[str, Any], sites: List[Dict[str, Any]],
                        start_date=None, end_date=None, notes: str = None) -> List[Dict]:
        """
        Create one cost estimate per site. With more than one site they share
        page_id PAGE-<epoch millis> and are numbered 1..N in site order.
        """
        page_id = f"PAGE-{int(time.time() * 1000)}" if len(sites) > 1 else None
        created = []
        for index, site in enumerate(sites, start=1):
            created.append(self.create_direct(
                client,
                [site],
                start_date=start_date,
                end_date=end_date,
                notes=notes,
                page_id=page_id,
                page_number=index if page_id else None,
                title=f"Cost Estimate for {site.get('name', '')}",
            ))
        logger.info(f"Created {len(created)} cost estimates (page_id={page_id})")
        return created

    # =========================================================================
    # READ
    # =========================================================================

    def get(self, estimate_id: str) -> Optional[Dict]:
        estimate = self._get(estimate_id)
        return estimate.to_dict() if estimate else None

    def get_or_raise(self, estimate_id: str) -> Dict:
        return self._get_or_raise(estimate_id).to_dict()

    def list_by_proposal(self, proposal_id: str) -> List[Dict]:
        estimates = self._query().filter(
            CostEstimate.proposal_id == proposal_id
        ).order_by(CostEstimate.created_at.desc()).all()
        return [e.to_dict() for e in estimates]

    def list_by_creator(self, user_id: str) -> List[Dict]:
        estimates = self._query().filter(
            CostEstimate.created_by == user_id
        ).order_by(CostEstimate.created_at.desc()).all()
        return [e.to_dict() for e in estimates]

    def list_by_page(self, page_id: str) -> List[Dict]:
        estimates = self._query().filter(
            CostEstimate.page_id == page_id
        ).order_by(CostEstimate.page_number).all()
        return [e.to_dict() for e in estimates]

    def _filtered(self, status: str = None, search: str = None, created_by: str = None):
        query = self._query()
        if status:
            query = query.filter(CostEstimate.status == status)
        if created_by:
            query = query.filter(CostEstimate.created_by == created_by)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                CostEstimate.title.ilike(pattern),
                CostEstimate.cost_estimate_number.ilike(pattern)
            ))
        return query.order_by(CostEstimate.created_at.desc())

    def list_paginated(self, page: int = 1, per_page: int = 20, status: str = None,
                       search: str = None, created_by: str = None) -> Dict:
        return self.paginate(self._filtered(status, search, created_by), page, per_page)

    def list_grouped(self, status: str = None, search: str = None,
                     created_by: str = None) -> List[Dict]:
        """Estimates grouped by page_id, siblings ordered by page_number."""
        estimates = [e.to_dict() for e in self._filtered(status, search, created_by).all()]
        groups = group_estimates_by_page(estimates)
        return [
            {'page_id': page_id, 'count': len(members), 'estimates': members}
            for page_id, members in groups.items()
        ]

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update(self, estimate_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        estimate = self._get(estimate_id)
        if not estimate:
            return None

        changes = self._apply_updates(estimate, data, self.UPDATABLE_FIELDS)

        if 'line_items' in data:
            totals = calculate_totals(estimate.line_items or [], estimate.tax_rate or DEFAULT_TAX_RATE)
            for key, value in totals.items():
                setattr(estimate, key, value)

        estimate.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=estimate_id,
                event_type='UPDATED',
                description=f"Cost estimate '{estimate.title}' was updated",
                metadata={'fields': sorted(changes)}
            )

        record = estimate.to_dict()
        self._index(record)
        logger.info(f"Updated cost estimate: {estimate_id}")
        return record

    def update_status(self, estimate_id: str, status: str,
                      rejection_reason: str = None) -> Dict:
        """
        Change status; approvals and rejections record who and when.

        Raises:
            ValueError: for an unknown status
            NotFoundError: if the estimate does not exist
        """
        is_valid, error = validate_status('cost_estimate', status)
        if not is_valid:
            raise ValueError(error)

        estimate = self._get_or_raise(estimate_id)
        old_status = estimate.status
        actor = self.user_id or 'system'
        now = datetime.utcnow()

        estimate.status = status
        if status == 'approved':
            estimate.approved_at = now
            estimate.approved_by = actor
        elif status == 'rejected':
            estimate.rejected_at = now
            estimate.rejected_by = actor
            if rejection_reason:
                estimate.rejection_reason = rejection_reason
        estimate.updated_at = now
        self.session.flush()

        self._log_event(
            entity_id=estimate_id,
            event_type='STATUS_CHANGED',
            description=f"Cost estimate status changed from {old_status} to {status}",
            metadata={'old_status': old_status, 'new_status': status}
        )

        record = estimate.to_dict()
        self._index(record)
        return record

    def delete(self, estimate_id: str) -> bool:
        estimate = self._get(estimate_id)
        if not estimate:
            return False

        number = estimate.cost_estimate_number
        self.session.delete(estimate)
        self.session.flush()
        self._log_event(
            entity_id=estimate_id,
            event_type='DELETED',
            description=f"Cost estimate {number} was deleted"
        )
        self._unindex(estimate_id)
        return True
