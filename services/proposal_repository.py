"""
Proposal Repository - site proposals sent to prospective clients.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from database.models import Proposal
from services.base_repository import BaseRepository, parse_datetime
from services.cost_estimate_repository import generate_cost_estimate_password
from validators import validate_status

logger = logging.getLogger(__name__)

VALIDITY_DAYS = 30

CLIENT_FIELDS = (
    'id', 'company', 'contactPerson', 'email', 'phone', 'address', 'industry',
    'targetAudience', 'campaignObjective', 'designation',
)


def generate_proposal_number() -> str:
    return f"PP-{int(time.time() * 1000)}"


def clean_client(client: Dict[str, Any], client_company_id: str = None) -> Dict[str, Any]:
    """Client sub-record with every expected key present."""
    cleaned = {key: (client or {}).get(key) or '' for key in CLIENT_FIELDS}
    cleaned['company_id'] = client_company_id or (client or {}).get('company_id') or ''
    return cleaned


def clean_products(products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    cleaned = []
    for product in products or []:
        try:
            price = float(product.get('price') or 0)
        except (TypeError, ValueError):
            price = 0.0
        cleaned.append({
            'id': product.get('id'),
            'name': product.get('name') or '',
            'type': product.get('type') or '',
            'price': price,
            'location': product.get('location') or '',
            'site_code': product.get('site_code') or '',
            'media': product.get('media') or [],
            'specs_rental': product.get('specs_rental') or None,
            'light': product.get('light') or None,
            'description': product.get('description') or '',
        })
    return cleaned


class ProposalRepository(BaseRepository):
    """Repository for proposal database operations."""

    model = Proposal
    entity_type = 'proposal'
    search_index = 'proposals'

    UPDATABLE_FIELDS = (
        'title', 'client', 'products', 'valid_until', 'notes', 'custom_message',
    )

    def create(self, data: Dict[str, Any]) -> Dict:
        products = clean_products(data.get('products'))
        client = clean_client(data.get('client'), data.get('client_company_id'))

        proposal = Proposal(
            company_id=self.company_id,
            proposal_number=generate_proposal_number(),
            title=data.get('title') or '',
            client_id=client.get('id') or None,
            client=client,
            products=products,
            total_amount=sum(p['price'] for p in products),
            valid_until=parse_datetime(data.get('valid_until'))
                or datetime.utcnow() + timedelta(days=VALIDITY_DAYS),
            notes=data.get('notes') or '',
            custom_message=data.get('custom_message') or '',
            status='draft',
            password=generate_cost_estimate_password(),
            created_by=self.user_id
        )
        self.session.add(proposal)
        self.session.flush()

        self._log_event(
            entity_id=proposal.id,
            event_type='CREATED',
            description=f"Proposal '{proposal.title}' was created",
            metadata={'products': len(products), 'total_amount': proposal.total_amount}
        )

        record = proposal.to_dict()
        self._index(record)
        logger.info(f"Created proposal: {proposal.id}")
        return record

    def get(self, proposal_id: str) -> Optional[Dict]:
        proposal = self._get(proposal_id)
        return proposal.to_dict() if proposal else None

    def get_or_raise(self, proposal_id: str) -> Dict:
        return self._get_or_raise(proposal_id).to_dict()

    def count(self, status: str = None) -> int:
        query = self._query()
        if status:
            query = query.filter(Proposal.status == status)
        return query.count()

    def list_paginated(self, page: int = 1, per_page: int = 20, status: str = None,
                       search: str = None, created_by: str = None) -> Dict:
        query = self._query()
        if status:
            query = query.filter(Proposal.status == status)
        if created_by:
            query = query.filter(Proposal.created_by == created_by)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Proposal.title.ilike(pattern),
                Proposal.proposal_number.ilike(pattern)
            ))
        return self.paginate(query.order_by(Proposal.created_at.desc()), page, per_page)

    def update(self, proposal_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        proposal = self._get(proposal_id)
        if not proposal:
            return None

        if 'products' in data:
            data = dict(data, products=clean_products(data['products']))
        if 'client' in data:
            data = dict(data, client=clean_client(data['client']))
        changes = self._apply_updates(proposal, data, self.UPDATABLE_FIELDS)
        if 'products' in changes:
            proposal.total_amount = sum(p['price'] for p in proposal.products or [])
        proposal.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=proposal_id,
                event_type='UPDATED',
                description=f"Proposal '{proposal.title}' was updated",
                metadata={'fields': sorted(changes)}
            )

        record = proposal.to_dict()
        self._index(record)
        return record

    def update_status(self, proposal_id: str, status: str) -> Dict:
        is_valid, error = validate_status('proposal', status)
        if not is_valid:
            raise ValueError(error)

        proposal = self._get_or_raise(proposal_id)
        old_status = proposal.status
        proposal.status = status
        proposal.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=proposal_id,
            event_type='STATUS_CHANGED',
            description=f"Proposal status changed from {old_status} to {status}",
            metadata={'old_status': old_status, 'new_status': status}
        )

        record = proposal.to_dict()
        self._index(record)
        return record

    def delete(self, proposal_id: str) -> bool:
        proposal = self._get(proposal_id)
        if not proposal:
            return False

        title = proposal.title
        self.session.delete(proposal)
        self.session.flush()
        self._log_event(
            entity_id=proposal_id,
            event_type='DELETED',
            description=f"Proposal '{title}' was deleted"
        )
        self._unindex(proposal_id)
        return True
