"""
Base Repository - shared plumbing for the per-entity repositories.

Every repository is bound to a session and a company (tenant). Writes are
recorded in the activity_log table and pushed to the search index.
"""

import logging
import math
from datetime import datetime, date
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from database.models import ActivityLog
from documents.formatting import parse_datetime
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Common behaviour for tenant-scoped repositories."""

    model = None
    entity_type = None
    search_index = None

    def __init__(self, session: Session, company_id: str, user_id: str = None,
                 indexer=None):
        self.session = session
        self.company_id = company_id
        self.user_id = user_id  # For tracking who made changes
        self.indexer = indexer

    def _log_event(self, entity_id: str, event_type: str, description: str = None,
                   metadata: Dict = None, entity_type: str = None):
        """Record a change in the activity log."""
        try:
            event = ActivityLog(
                company_id=self.company_id,
                timestamp=datetime.utcnow(),
                actor_type='user' if self.user_id else 'system',
                actor_id=self.user_id,
                entity_type=entity_type or self.entity_type,
                entity_id=entity_id,
                event_type=event_type,
                description=description,
                extra_data=metadata or {}
            )
            self.session.add(event)
        except Exception as e:
            logger.warning(f"Failed to log event: {e}")

    def _index(self, record: Dict[str, Any]):
        if self.indexer is not None and self.search_index:
            self.indexer.save_object(self.search_index, record)

    def _unindex(self, object_id: str):
        if self.indexer is not None and self.search_index:
            self.indexer.delete_object(self.search_index, object_id)

    def _query(self):
        """Query over this repository's model, scoped to the company."""
        return self.session.query(self.model).filter(
            self.model.company_id == self.company_id
        )

    def _get(self, record_id: str):
        return self._query().filter(self.model.id == record_id).first()

    def _get_or_raise(self, record_id: str):
        record = self._get(record_id)
        if record is None:
            raise NotFoundError(self.entity_type, record_id)
        return record

    @staticmethod
    def paginate(query, page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        """
        Offset pagination over a query.

        Returns:
            {items, total, page, per_page, pages, has_more}
        """
        page = max(int(page), 1)
        per_page = max(int(per_page), 1)

        total = query.count()
        rows = query.offset((page - 1) * per_page).limit(per_page).all()
        pages = math.ceil(total / per_page) if total else 0

        return {
            'items': [row.to_dict() for row in rows],
            'total': total,
            'page': page,
            'per_page': per_page,
            'pages': pages,
            'has_more': page < pages,
        }

    def _apply_updates(self, record, data: Dict[str, Any], fields) -> Dict[str, Dict]:
        """Copy allowed fields onto the record, returning the changes made."""
        changes = {}
        for key in fields:
            if key not in data:
                continue
            new_value = data[key]
            if key.endswith('_date') or key in ('valid_until', 'breakdate', 'date'):
                new_value = parse_datetime(new_value)
            old_value = getattr(record, key)
            if old_value != new_value:
                changes[key] = {'old': _jsonable(old_value), 'new': _jsonable(new_value)}
            setattr(record, key, new_value)
        return changes


def _jsonable(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
