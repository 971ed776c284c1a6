"""
Job Order Repository - database access for installation/maintenance work orders.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from database.models import JobOrder
from services.base_repository import BaseRepository, parse_datetime
from validators import validate_status

logger = logging.getLogger(__name__)


def generate_job_order_number() -> str:
    """JO-YYYYMMDD-NNNN where NNNN are the last four digits of the epoch millis."""
    millis = str(int(time.time() * 1000))
    return f"JO-{datetime.now().strftime('%Y%m%d')}-{millis[-4:]}"


class JobOrderRepository(BaseRepository):
    """Repository for job order database operations."""

    model = JobOrder
    entity_type = 'job_order'
    search_index = 'job_orders'

    UPDATABLE_FIELDS = (
        'job_order_type', 'client_name', 'client_company', 'product_name',
        'product_location', 'site_code', 'start_date', 'end_date', 'notes',
    )

    def create_from_quotation(self, quotation: Dict[str, Any], notes: str = None,
                              job_order_type: str = 'Installation') -> Dict:
        """Create a pending job order for the first site on a quotation."""
        items = quotation.get('items') or []
        site = items[0] if items else {}

        job_order = JobOrder(
            company_id=self.company_id,
            job_order_number=generate_job_order_number(),
            job_order_type=job_order_type,
            quotation_id=quotation.get('id'),
            quotation_number=quotation.get('quotation_number'),
            client_name=quotation.get('client_name') or '',
            client_company=quotation.get('client_company_name') or '',
            product_id=site.get('id'),
            product_name=site.get('name'),
            product_location=site.get('location') or '',
            site_code=site.get('site_code'),
            start_date=parse_datetime(quotation.get('start_date')),
            end_date=parse_datetime(quotation.get('end_date')),
            duration_days=quotation.get('duration_days'),
            total_amount=quotation.get('total_amount') or 0.0,
            status='pending',
            notes=notes,
            created_by=self.user_id
        )
        self.session.add(job_order)
        self.session.flush()

        self._log_event(
            entity_id=job_order.id,
            event_type='CREATED',
            description=f"Job order {job_order.job_order_number} created from quotation "
                        f"{job_order.quotation_number}",
            metadata={'quotation_id': job_order.quotation_id}
        )

        record = job_order.to_dict()
        self._index(record)
        logger.info(f"Created job order: {job_order.id}")
        return record

    def get(self, job_order_id: str) -> Optional[Dict]:
        job_order = self._get(job_order_id)
        return job_order.to_dict() if job_order else None

    def list_by_creator(self, user_id: str) -> List[Dict]:
        orders = self._query().filter(
            JobOrder.created_by == user_id
        ).order_by(JobOrder.created_at.desc()).all()
        return [o.to_dict() for o in orders]

    def list_by_company(self) -> List[Dict]:
        orders = self._query().order_by(JobOrder.created_at.desc()).all()
        return [o.to_dict() for o in orders]

    def list_paginated(self, page: int = 1, per_page: int = 20, created_by: str = None,
                       status: str = None) -> Dict:
        """
        Page through job orders for the company, or only those created by
        created_by when no company is bound.
        """
        if self.company_id:
            query = self._query()
        else:
            query = self.session.query(JobOrder).filter(JobOrder.created_by == created_by)
        if status:
            query = query.filter(JobOrder.status == status)
        return self.paginate(query.order_by(JobOrder.created_at.desc()), page, per_page)

    def update(self, job_order_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        job_order = self._get(job_order_id)
        if not job_order:
            return None

        changes = self._apply_updates(job_order, data, self.UPDATABLE_FIELDS)
        job_order.updated_at = datetime.utcnow()
        self.session.flush()

        if changes:
            self._log_event(
                entity_id=job_order_id,
                event_type='UPDATED',
                description=f"Job order {job_order.job_order_number} was updated",
                metadata={'fields': sorted(changes)}
            )
        record = job_order.to_dict()
        self._index(record)
        return record

    def update_status(self, job_order_id: str, status: str) -> Dict:
        is_valid, error = validate_status('job_order', status)
        if not is_valid:
            raise ValueError(error)

        job_order = self._get_or_raise(job_order_id)
        old_status = job_order.status
        job_order.status = status
        job_order.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=job_order_id,
            event_type='STATUS_CHANGED',
            description=f"Job order status changed from {old_status} to {status}",
            metadata={'old_status': old_status, 'new_status': status}
        )
        record = job_order.to_dict()
        self._index(record)
        return record

    def assign(self, job_order_id: str, assigned_to: str, assigned_name: str = None) -> Dict:
        """Assign a job order to a crew member; work is then in progress."""
        job_order = self._get_or_raise(job_order_id)
        job_order.assigned_to = assigned_to
        job_order.assigned_name = assigned_name
        job_order.status = 'in_progress'
        job_order.updated_at = datetime.utcnow()
        self.session.flush()

        self._log_event(
            entity_id=job_order_id,
            event_type='ASSIGNED',
            description=f"Job order {job_order.job_order_number} assigned to "
                        f"{assigned_name or assigned_to}",
            metadata={'assigned_to': assigned_to}
        )
        record = job_order.to_dict()
        self._index(record)
        logger.info(f"Assigned job order {job_order_id} to {assigned_to}")
        return record
