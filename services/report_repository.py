"""
Report Repository - database access for field reports.

Reports carry site photo attachments. Only attachments that finished
uploading (have both a URL and a file name) are stored.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from database.models import Report
from services.base_repository import BaseRepository, parse_datetime

logger = logging.getLogger(__name__)

# Stored only when a non-empty value is supplied
OPTIONAL_FIELDS = (
    'product', 'site_code', 'location', 'assigned_to',
    'installation_status', 'installation_timeline', 'delay_reason',
    'delay_days', 'description_of_work',
)

BASE_FIELDS = (
    'site_id', 'site_name', 'client', 'client_id', 'job_order_number',
    'job_order_type', 'sales', 'seller_id', 'report_type', 'category',
    'subcategory', 'priority', 'completion_percentage', 'created_by_name',
)

UPDATABLE_FIELDS = BASE_FIELDS + OPTIONAL_FIELDS + (
    'booking_dates', 'breakdate', 'date', 'status', 'tags',
)

DATE_FIELDS = ('breakdate', 'date')


def clean_attachments(attachments: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Keep uploaded attachments only, normalized to note/fileName/fileType/fileUrl."""
    cleaned = []
    for attachment in attachments or []:
        if not attachment or not attachment.get('fileUrl') or not attachment.get('fileName'):
            continue
        cleaned.append({
            'note': attachment.get('note') or '',
            'fileName': attachment.get('fileName') or 'Unknown file',
            'fileType': attachment.get('fileType') or 'unknown',
            'fileUrl': attachment['fileUrl'],
        })
    return cleaned


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    return True


class ReportRepository(BaseRepository):
    """Repository for field report database operations."""

    model = Report
    entity_type = 'report'
    search_index = 'reports'

    def create(self, data: Dict[str, Any]) -> Dict:
        booking_dates = data.get('booking_dates') or {}

        report = Report(
            company_id=self.company_id,
            booking_dates={
                'start': booking_dates.get('start'),
                'end': booking_dates.get('end'),
            },
            breakdate=parse_datetime(data.get('breakdate')),
            date=parse_datetime(data.get('date')) or datetime.utcnow(),
            attachments=clean_attachments(data.get('attachments')),
            status=data.get('status') or 'draft',
            tags=data.get('tags') or [],
            created_by=data.get('created_by') or self.user_id,
            **{key: data.get(key) for key in BASE_FIELDS}
        )

        for key in OPTIONAL_FIELDS:
            value = data.get(key)
            if _has_value(value):
                setattr(report, key, value.strip() if key == 'description_of_work' else value)

        self.session.add(report)
        self.session.flush()

        self._log_event(
            entity_id=report.id,
            event_type='CREATED',
            description=f"{report.report_type} report for '{report.site_name}' was created",
            metadata={'attachments': len(report.attachments or []), 'status': report.status}
        )

        record = report.to_dict()
        self._index(record)
        logger.info(f"Created report: {report.id} with {len(report.attachments or [])} attachments")
        return record

    def post(self, data: Dict[str, Any]) -> Dict:
        """Create a report that is immediately posted."""
        return self.create(dict(data, status='posted'))

    def get(self, report_id: str) -> Optional[Dict]:
        report = self._get(report_id)
        return report.to_dict() if report else None

    def get_or_raise(self, report_id: str) -> Dict:
        return self._get_or_raise(report_id).to_dict()

    def _list(self, *criteria, limit: int = None) -> List[Dict]:
        query = self._query().filter(*criteria).order_by(Report.created_at.desc())
        if limit:
            query = query.limit(limit)
        return [r.to_dict() for r in query.all()]

    def list_all(self) -> List[Dict]:
        return self._list()

    def list_by_seller(self, seller_id: str) -> List[Dict]:
        return self._list(Report.seller_id == seller_id)

    def list_by_status(self, status: str) -> List[Dict]:
        return self._list(Report.status == status)

    def list_by_type(self, report_type: str) -> List[Dict]:
        return self._list(Report.report_type == report_type)

    def recent(self, limit: int = 10) -> List[Dict]:
        return self._list(limit=limit)

    def list_paginated(self, page: int = 1, per_page: int = 20, status: str = None,
                       report_type: str = None, seller_id: str = None) -> Dict:
        query = self._query()
        if status:
            query = query.filter(Report.status == status)
        if report_type:
            query = query.filter(Report.report_type == report_type)
        if seller_id:
            query = query.filter(Report.seller_id == seller_id)
        return self.paginate(query.order_by(Report.created_at.desc()), page, per_page)

    def update(self, report_id: str, data: Dict[str, Any]) -> Optional[Dict]:
        """Apply non-empty values only; attachments are re-filtered."""
        report = self._get(report_id)
        if not report:
            return None

        clean = {key: value for key, value in data.items()
                 if key in UPDATABLE_FIELDS and value is not None and value != ''}
        if clean.get('description_of_work'):
            clean['description_of_work'] = clean['description_of_work'].strip()
        for key in DATE_FIELDS:
            if key in clean:
                clean[key] = parse_datetime(clean[key])

        changed = []
        for key, value in clean.items():
            setattr(report, key, value)
            changed.append(key)

        if data.get('attachments') is not None:
            report.attachments = clean_attachments(data['attachments'])
            changed.append('attachments')

        report.updated_at = datetime.utcnow()
        self.session.flush()

        if changed:
            self._log_event(
                entity_id=report_id,
                event_type='UPDATED',
                description=f"Report for '{report.site_name}' was updated",
                metadata={'fields': sorted(changed)}
            )

        record = report.to_dict()
        self._index(record)
        return record

    def delete(self, report_id: str) -> bool:
        report = self._get(report_id)
        if not report:
            return False

        site_name = report.site_name
        self.session.delete(report)
        self.session.flush()
        self._log_event(
            entity_id=report_id,
            event_type='DELETED',
            description=f"Report for '{site_name}' was deleted"
        )
        self._unindex(report_id)
        logger.info(f"Deleted report: {report_id}")
        return True
