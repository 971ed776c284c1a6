"""
Quotation Repository - database access for rental quotations.
"""

import logging
import math
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from database.models import Quotation, Product
from services.base_repository import BaseRepository, parse_datetime
from services.errors import NotFoundError
from validators import validate_status

logger = logging.getLogger(__name__)

VALIDITY_DAYS = 5


def generate_quotation_number() -> str:
    """QT-YYYYMMDD-NNNN where NNNN are the last four digits of the epoch millis."""
    millis = str(int(time.time() * 1000))
    return f"QT-{datetime.now().strftime('%Y%m%d')}-{millis[-4:]}"


def calculate_quotation_total(start_date, end_date, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Price each item at a daily rate of price / 30 over the contract period.

    The period is at least one day. Each item gets item_total_amount and
    duration_days; the returned dict holds the new items and the totals.
    """
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    raw_days = math.ceil((end - start).total_seconds() / 86400)
    duration_days = max(1, raw_days)

    priced = []
    total_amount = 0.0
    for item in items:
        daily_rate = float(item.get('price') or 0) / 30
        item_total = daily_rate * duration_days
        priced.append(dict(item, item_total_amount=item_total, duration_days=duration_days))
        total_amount += item_total

    return {
        'duration_days': duration_days,
        'total_amount': total_amount,
        'items': priced,
    }


class QuotationRepository(BaseRepository):
    """Repository for quotation database operations."""

    model = Quotation
    entity_type = 'quotation'
    search_index = 'quotations'

    CREATE_FIELDS = (
        'quotation_request_id', 'proposal_id', 'campaign_id', 'client_id',
        'client_name', 'client_email', 'client_company_name', 'client_designation',
        'client_address', 'client_phone', 'notes', 'signature_name',
        'signature_position', 'seller_id',
    )
    UPDATABLE_FIELDS = CREATE_FIELDS + (
        'items', 'start_date', 'end_date', 'valid_until', 'status',
    )

    def create(self, data: Dict[str, Any], page_id: str = None, page_number: int = None) -> Dict:
        """Create a quotation, pricing its items over the contract period."""
        items = data.get('items') or []
        start_date = parse_datetime(data.get('start_date'))
        end_date = parse_datetime(data.get('end_date'))

        if start_date and end_date:
            totals = calculate_quotation_total(start_date, end_date, items)
        else:
            totals = {
                'duration_days': data.get('duration_days'),
                'total_amount': float(data.get('total_amount') or 0),
                'items': items,
            }

        quotation = Quotation(
            company_id=self.company_id,
            quotation_number=data.get('quotation_number') or generate_quotation_number(),
            items=totals['items'],
            start_date=start_date,
            end_date=end_date,
            duration_days=totals['duration_days'],
            total_amount=totals['total_amount'],
            valid_until=parse_datetime(data.get('valid_until'))
                or datetime.utcnow() + timedelta(days=VALIDITY_DAYS),
            status=data.get('status', 'draft'),
            page_id=page_id,
            page_number=page_number,
            created_by=self.user_id,
            **{key: data.get(key) for key in self.CREATE_FIELDS}
        )
        if not quotation.seller_id:
            quotation.seller_id = self.user_id

        self.session.add(quotation)
        self.session.flush()

        self._log_event(
            entity_id=quotation.id,
            event_type='CREATED',
            description=f"Quotation {quotation.quotation_number} was created",
            metadata={'campaign_id': quotation.campaign_id, 'total_amount': quotation.total_amount}
        )

        record = quotation.to_dict()
        self._index(record)
        logger.info(f"Created quotation: {quotation.id}")
        return record

    def create_multiple(self, data: Dict[str, Any]) -> List[Dict]:
        """One quotation per item; several items share a page_id numbered 1..N."""
        items = data.get('items') or []
        page_id = f"PAGE-{int(time.time() * 1000)}" if len(items) > 1 else None
        created = []
        for index, item in enumerate(items, start=1):
            single = dict(data, items=[item])
            created.append(self.create(single, page_id=page_id,
                                       page_number=index if page_id else None))
        return created

    def get(self, quotation_id: str) -> Optional[Dict]:
        """
        Get a quotation with items enriched from their product records.
        The quotation's own item fields (notably price) take precedence.
        """
        quotation = self._get(quotation_id)
        if not quotation:
            return None

        record = quotation.to_dict()
        record['items'] = [self._enrich_item(item) for item in record['items']]
        return record

    def get_or_raise(self, quotation_id: str) -> Dict:
        record = self.get(quotation_id)
        if record is None:
            raise NotFoundError(self.entity_type, quotation_id)
        return record

    def _enrich_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        product_id = item.get('id')
        if not product_id:
            return item

        product = self.session.query(Product).filter(Product.id == product_id).first()
        if not product:
            return item

        details = product.to_dict()
        merged = dict(details)
        merged.update(item)
        merged['price'] = item['price'] if item.get('price') is not None else details['price']
        media = details.get('media') or []
        merged['media_url'] = media[0].get('url') if media else None
        return merged

    def list_by_campaign(self, campaign_id: str) -> List[Dict]:
        quotations = self._query().filter(
            Quotation.campaign_id == campaign_id
        ).order_by(Quotation.created_at.desc()).all()
        return [q.to_dict() for q in quotations]

    def list_by_creator(self, user_id: str) -> List[Dict]:
        quotations = self._query().filter(
            Quotation.created_by == user_id
        ).order_by(Quotation.created_at.desc()).all()
        return [q.to_dict() for q in quotations]

    def list_paginated(self, page: int = 1, per_page: int = 20, seller_id: str = None,
                       status: str = None, search: str = None) -> Dict:
        query = self._query()
        if seller_id:
            query = query.filter(Quotation.seller_id == seller_id)
        if status:
            query = query.filter(Quotation.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Quotation.quotation_number.ilike(pattern),
                Quotation.client_name.ilike(pattern),
                Quotation.client_company_name.ilike(pattern)
            ))
        return self.paginate(query.order_by(Quotation.created_at.desc()), page, per_page)

    def update(self, quotation_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        quotation = self._get(quotation_id)
        if not quotation:
            return None

        changes = self._apply_updates(quotation, data, self.UPDATABLE_FIELDS)

        if {'items', 'start_date', 'end_date'} & set(changes) and quotation.start_date and quotation.end_date:
            totals = calculate_quotation_total(quotation.start_date, quotation.end_date,
                                               quotation.items or [])
            quotation.items = totals['items']
            quotation.duration_days = totals['duration_days']
            quotation.total_amount = totals['total_amount']

        quotation.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=quotation_id,
                event_type='UPDATED',
                description=f"Quotation {quotation.quotation_number} was updated",
                metadata={'fields': sorted(changes)}
            )

        record = quotation.to_dict()
        self._index(record)
        return record

    def update_status(self, quotation_id: str, status: str) -> Dict:
        is_valid, error = validate_status('quotation', status)
        if not is_valid:
            raise ValueError(error)

        quotation = self._get_or_raise(quotation_id)
        old_status = quotation.status
        quotation.status = status
        quotation.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=quotation_id,
            event_type='STATUS_CHANGED',
            description=f"Quotation status changed from {old_status} to {status}",
            metadata={'old_status': old_status, 'new_status': status}
        )

        record = quotation.to_dict()
        self._index(record)
        logger.info(f"Quotation {quotation_id} status: {old_status} -> {status}")
        return record

    def delete(self, quotation_id: str) -> bool:
        quotation = self._get(quotation_id)
        if not quotation:
            return False

        number = quotation.quotation_number
        self.session.delete(quotation)
        self.session.flush()
        self._log_event(
            entity_id=quotation_id,
            event_type='DELETED',
            description=f"Quotation {number} was deleted"
        )
        self._unindex(quotation_id)
        return True
