"""
Product Repository - billboard sites offered for rental.

Products are soft-deleted: deleted rows stay in the table for historical
documents but drop out of every listing.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from database.models import Product, Booking
from services.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository):
    """Repository for product (site) database operations."""

    model = Product
    entity_type = 'product'
    search_index = 'products'

    FIELDS = (
        'seller_id', 'name', 'site_code', 'type', 'content_type', 'description',
        'price', 'location', 'specs_rental', 'light', 'media', 'status', 'active',
    )

    def _query(self):
        return super()._query().filter(Product.deleted == False)  # noqa: E712

    def create(self, data: Dict[str, Any]) -> Dict:
        product = Product(
            company_id=self.company_id,
            name=data.get('name', ''),
            site_code=data.get('site_code'),
            type=data.get('type') or 'RENTAL',
            content_type=(data.get('content_type') or 'static').lower(),
            description=data.get('description'),
            price=float(data.get('price') or 0),
            location=data.get('location'),
            specs_rental=data.get('specs_rental') or {},
            light=data.get('light') or {},
            media=data.get('media') or [],
            status=data.get('status') or 'ACTIVE',
            active=data.get('active', True),
            seller_id=data.get('seller_id') or self.user_id,
            created_by=self.user_id
        )
        self.session.add(product)
        self.session.flush()

        self._log_event(
            entity_id=product.id,
            event_type='CREATED',
            description=f"Site '{product.name}' was created",
            metadata={'site_code': product.site_code, 'price': product.price}
        )

        record = product.to_dict()
        self._index(record)
        logger.info(f"Created product: {product.id}")
        return record

    def get(self, product_id: str) -> Optional[Dict]:
        product = self._get(product_id)
        return product.to_dict() if product else None

    def get_or_raise(self, product_id: str) -> Dict:
        return self._get_or_raise(product_id).to_dict()

    def list_paginated(self, page: int = 1, per_page: int = 20, content_type: str = None,
                       search: str = None, seller_id: str = None) -> Dict:
        query = self._query()
        if content_type:
            query = query.filter(Product.content_type == content_type.lower())
        if seller_id:
            query = query.filter(Product.seller_id == seller_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Product.name.ilike(pattern),
                Product.site_code.ilike(pattern),
                Product.location.ilike(pattern)
            ))
        return self.paginate(query.order_by(Product.name), page, per_page)

    def update(self, product_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        product = self._get(product_id)
        if not product:
            return None

        if data.get('content_type'):
            data = dict(data, content_type=data['content_type'].lower())
        changes = self._apply_updates(product, data, self.FIELDS)
        product.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=product_id,
                event_type='UPDATED',
                description=f"Site '{product.name}' was updated",
                metadata={'fields': sorted(changes)}
            )

        record = product.to_dict()
        self._index(record)
        return record

    def delete(self, product_id: str) -> bool:
        """Soft delete."""
        product = self._get(product_id)
        if not product:
            return False

        product.deleted = True
        product.active = False
        product.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=product_id,
            event_type='DELETED',
            description=f"Site '{product.name}' was deleted"
        )
        self._unindex(product_id)
        logger.info(f"Soft-deleted product: {product_id}")
        return True

    def bookings(self, product_id: str) -> List[Dict]:
        rows = self.session.query(Booking).filter(
            Booking.company_id == self.company_id,
            Booking.product_id == product_id
        ).order_by(Booking.start_date).all()
        return [b.to_dict() for b in rows]
