"""
Client Repository - advertiser contacts.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func, or_

from database.models import Client
from services.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ClientRepository(BaseRepository):
    """Repository for client database operations."""

    model = Client
    entity_type = 'client'
    search_index = 'clients'

    FIELDS = (
        'name', 'company', 'email', 'phone', 'address', 'designation',
        'industry', 'contact_person', 'client_company_id', 'status',
    )

    def _query(self):
        return super()._query().filter(Client.deleted == False)  # noqa: E712

    def create(self, data: Dict[str, Any]) -> Dict:
        client = Client(
            company_id=self.company_id,
            status=data.get('status') or 'lead',
            created_by=self.user_id,
            **{key: data.get(key) for key in self.FIELDS if key != 'status'}
        )
        if client.email:
            client.email = client.email.strip().lower()
        self.session.add(client)
        self.session.flush()

        self._log_event(
            entity_id=client.id,
            event_type='CREATED',
            description=f"Client '{client.name}' was created",
            metadata={'company': client.company}
        )

        record = client.to_dict()
        self._index(record)
        logger.info(f"Created client: {client.id}")
        return record

    def get(self, client_id: str) -> Optional[Dict]:
        client = self._get(client_id)
        return client.to_dict() if client else None

    def get_by_email(self, email: str) -> Optional[Dict]:
        client = self._query().filter(
            func.lower(Client.email) == (email or '').strip().lower()
        ).first()
        return client.to_dict() if client else None

    def list_paginated(self, page: int = 1, per_page: int = 20, search: str = None,
                       status: str = None, created_by: str = None) -> Dict:
        query = self._query()
        if status:
            query = query.filter(Client.status == status)
        if created_by:
            query = query.filter(Client.created_by == created_by)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Client.name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.company.ilike(pattern),
                Client.phone.ilike(pattern)
            ))
        return self.paginate(query.order_by(Client.name), page, per_page)

    def update(self, client_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        client = self._get(client_id)
        if not client:
            return None

        changes = self._apply_updates(client, data, self.FIELDS)
        client.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=client_id,
                event_type='UPDATED',
                description=f"Client '{client.name}' was updated",
                metadata={'fields': sorted(changes)}
            )

        record = client.to_dict()
        self._index(record)
        return record

    def delete(self, client_id: str) -> bool:
        """Soft delete."""
        client = self._get(client_id)
        if not client:
            return False

        client.deleted = True
        client.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=client_id,
            event_type='DELETED',
            description=f"Client '{client.name}' was deleted"
        )
        self._unindex(client_id)
        return True
