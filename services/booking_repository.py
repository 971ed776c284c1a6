"""
Booking Repository - site reservations created from accepted quotations.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from database.models import Booking
from services.base_repository import BaseRepository, parse_datetime
from validators import validate_status

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository):
    """Repository for booking database operations."""

    model = Booking
    entity_type = 'booking'
    search_index = 'bookings'

    def create_from_quotation(self, quotation: Dict[str, Any]) -> Dict:
        """Reserve the quotation's first site for its contract period."""
        items = quotation.get('items') or []
        if not items:
            raise ValueError("Quotation has no sites to book")
        site = items[0]

        booking = Booking(
            company_id=self.company_id,
            product_id=site.get('product_id') or site.get('id'),
            product_name=site.get('name'),
            quotation_id=quotation.get('id'),
            quotation_number=quotation.get('quotation_number'),
            client_id=quotation.get('client_id'),
            client_name=quotation.get('client_name'),
            seller_id=quotation.get('seller_id'),
            start_date=parse_datetime(quotation.get('start_date')),
            end_date=parse_datetime(quotation.get('end_date')),
            total_cost=site.get('item_total_amount') or quotation.get('total_amount') or 0.0,
            status='RESERVED',
            created_by=self.user_id
        )
        self.session.add(booking)
        self.session.flush()

        self._log_event(
            entity_id=booking.id,
            event_type='CREATED',
            description=f"Booking for '{booking.product_name}' reserved from quotation "
                        f"{booking.quotation_number}",
            metadata={'product_id': booking.product_id, 'quotation_id': booking.quotation_id}
        )

        record = booking.to_dict()
        self._index(record)
        logger.info(f"Created booking: {booking.id}")
        return record

    def get(self, booking_id: str) -> Optional[Dict]:
        booking = self._get(booking_id)
        return booking.to_dict() if booking else None

    def list_by_product(self, product_id: str) -> List[Dict]:
        bookings = self._query().filter(
            Booking.product_id == product_id
        ).order_by(Booking.start_date).all()
        return [b.to_dict() for b in bookings]

    def count(self, status: str = None) -> int:
        query = self._query()
        if status:
            query = query.filter(Booking.status == status)
        return query.count()

    def completed_count(self) -> int:
        return self.count(status='COMPLETED')

    def list_paginated(self, page: int = 1, per_page: int = 20, status: str = None) -> Dict:
        query = self._query()
        if status:
            query = query.filter(Booking.status == status)
        return self.paginate(query.order_by(Booking.created_at.desc()), page, per_page)

    def update_status(self, booking_id: str, status: str) -> Dict:
        is_valid, error = validate_status('booking', status)
        if not is_valid:
            raise ValueError(error)

        booking = self._get_or_raise(booking_id)
        old_status = booking.status
        booking.status = status
        booking.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=booking_id,
            event_type='STATUS_CHANGED',
            description=f"Booking status changed from {old_status} to {status}",
            metadata={'old_status': old_status, 'new_status': status}
        )
        record = booking.to_dict()
        self._index(record)
        return record
