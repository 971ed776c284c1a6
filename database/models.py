"""
SQLAlchemy models for OOH Ops.
Defines the tenant, sales pipeline, operations and field report tables.
Nested sub-records (line items, attachments, media) live in JSON columns.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime,
    ForeignKey, JSON, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from database.connection import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB, 'postgresql')


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# COMPANY (Multi-tenant foundation)
# =============================================================================

class Company(Base):
    """Operator company - every business record is scoped to one."""
    __tablename__ = 'companies'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    phone = Column(String(100))
    email = Column(String(255))
    website = Column(String(255))
    logo_url = Column(Text)
    settings = Column(JSONType, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    users = relationship("User", back_populates="company")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'phone': self.phone,
            'email': self.email,
            'website': self.website,
            'logo_url': self.logo_url,
            'settings': self.settings or {},
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class User(Base):
    """Company staff: sales, operations and logistics users."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    position = Column(String(100))
    phone = Column(String(50))
    signature_url = Column(Text)
    role = Column(String(50), default='sales')  # sales, logistics, admin, ...
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="users")

    __table_args__ = (
        Index('ix_users_company', 'company_id'),
    )

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part)

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'position': self.position,
            'phone': self.phone,
            'signature_url': self.signature_url,
            'role': self.role,
            'is_active': self.is_active,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# =============================================================================
# CLIENTS & PRODUCTS
# =============================================================================

class Client(Base):
    """Advertiser or agency buying billboard space."""
    __tablename__ = 'clients'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    name = Column(String(255), nullable=False)
    company = Column(String(255))
    email = Column(String(255))
    phone = Column(String(50))
    address = Column(Text)
    designation = Column(String(100))
    industry = Column(String(100))
    contact_person = Column(String(255))
    client_company_id = Column(String(36))
    status = Column(String(50), default='lead')
    created_by = Column(String(36))
    deleted = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_clients_company', 'company_id'),
        Index('ix_clients_email', 'email'),
        Index('ix_clients_name', 'name'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'name': self.name,
            'company': self.company,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'designation': self.designation,
            'industry': self.industry,
            'contact_person': self.contact_person,
            'client_company_id': self.client_company_id,
            'status': self.status,
            'created_by': self.created_by,
            'deleted': self.deleted,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Product(Base):
    """A billboard site (static or LED) offered for rent."""
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    seller_id = Column(String(36))
    name = Column(String(255), nullable=False)
    site_code = Column(String(100))
    type = Column(String(50), default='RENTAL')
    content_type = Column(String(20), default='static')  # static, dynamic
    description = Column(Text)
    price = Column(Float, default=0.0)  # monthly rate
    location = Column(Text)
    specs_rental = Column(JSONType, default=dict)
    light = Column(JSONType, default=dict)
    media = Column(JSONType, default=list)  # [{url, isVideo, type}]
    status = Column(String(50), default='ACTIVE')
    active = Column(Boolean, default=True)
    deleted = Column(Boolean, default=False)
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("Booking", back_populates="product")

    __table_args__ = (
        Index('ix_products_company', 'company_id'),
        Index('ix_products_seller', 'seller_id'),
        Index('ix_products_content_type', 'content_type'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'seller_id': self.seller_id,
            'name': self.name,
            'site_code': self.site_code,
            'type': self.type,
            'content_type': self.content_type,
            'description': self.description,
            'price': self.price or 0.0,
            'location': self.location,
            'specs_rental': self.specs_rental or {},
            'light': self.light or {},
            'media': self.media or [],
            'status': self.status,
            'active': self.active,
            'deleted': self.deleted,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# =============================================================================
# SALES PIPELINE
# =============================================================================

class Proposal(Base):
    """A multi-site offer sent to a client before pricing is finalized."""
    __tablename__ = 'proposals'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    proposal_number = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    client_id = Column(String(36))
    client = Column(JSONType, default=dict)
    products = Column(JSONType, default=list)
    total_amount = Column(Float, default=0.0)
    valid_until = Column(DateTime)
    notes = Column(Text)
    custom_message = Column(Text)
    status = Column(String(50), default='draft')  # draft, sent, accepted, declined, viewed
    password = Column(String(20))
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_proposals_company', 'company_id'),
        Index('ix_proposals_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'proposal_number': self.proposal_number,
            'title': self.title,
            'client_id': self.client_id,
            'client': self.client or {},
            'products': self.products or [],
            'total_amount': self.total_amount or 0.0,
            'valid_until': _iso(self.valid_until),
            'notes': self.notes,
            'custom_message': self.custom_message,
            'status': self.status,
            'password': self.password,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class CostEstimate(Base):
    """
    Itemized price breakdown for one billboard site.
    Multi-site estimates are stored as siblings sharing page_id.
    """
    __tablename__ = 'cost_estimates'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    cost_estimate_number = Column(String(50), nullable=False)
    proposal_id = Column(String(36))
    title = Column(String(255), nullable=False)
    client_id = Column(String(36))
    client = Column(JSONType, default=dict)
    line_items = Column(JSONType, default=list)
    subtotal = Column(Float, default=0.0)
    tax_rate = Column(Float, default=0.12)
    tax_amount = Column(Float, default=0.0)
    total_amount = Column(Float, default=0.0)
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    duration_days = Column(Integer)
    valid_until = Column(DateTime)
    notes = Column(Text)
    custom_message = Column(Text)
    status = Column(String(50), default='draft')
    password = Column(String(20))
    page_id = Column(String(50))
    page_number = Column(Integer)
    approved_at = Column(DateTime)
    approved_by = Column(String(36))
    rejected_at = Column(DateTime)
    rejected_by = Column(String(36))
    rejection_reason = Column(Text)
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_cost_estimates_company', 'company_id'),
        Index('ix_cost_estimates_proposal', 'proposal_id'),
        Index('ix_cost_estimates_page', 'page_id'),
        Index('ix_cost_estimates_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'cost_estimate_number': self.cost_estimate_number,
            'proposal_id': self.proposal_id,
            'title': self.title,
            'client_id': self.client_id,
            'client': self.client or {},
            'line_items': self.line_items or [],
            'subtotal': self.subtotal or 0.0,
            'tax_rate': self.tax_rate if self.tax_rate is not None else 0.12,
            'tax_amount': self.tax_amount or 0.0,
            'total_amount': self.total_amount or 0.0,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'duration_days': self.duration_days,
            'valid_until': _iso(self.valid_until),
            'notes': self.notes,
            'custom_message': self.custom_message,
            'status': self.status,
            'password': self.password,
            'page_id': self.page_id,
            'page_number': self.page_number,
            'approved_at': _iso(self.approved_at),
            'approved_by': self.approved_by,
            'rejected_at': _iso(self.rejected_at),
            'rejected_by': self.rejected_by,
            'rejection_reason': self.rejection_reason,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Quotation(Base):
    """Priced rental quotation for one or more sites over a contract period."""
    __tablename__ = 'quotations'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    quotation_number = Column(String(50), nullable=False)
    quotation_request_id = Column(String(36))
    proposal_id = Column(String(36))
    campaign_id = Column(String(36))
    client_id = Column(String(36))
    client_name = Column(String(255))
    client_email = Column(String(255))
    client_company_name = Column(String(255))
    client_designation = Column(String(100))
    client_address = Column(Text)
    client_phone = Column(String(50))
    items = Column(JSONType, default=list)
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    duration_days = Column(Integer)
    total_amount = Column(Float, default=0.0)
    valid_until = Column(DateTime)
    notes = Column(Text)
    status = Column(String(50), default='draft')
    signature_name = Column(String(255))
    signature_position = Column(String(100))
    page_id = Column(String(50))
    page_number = Column(Integer)
    seller_id = Column(String(36))
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_quotations_company', 'company_id'),
        Index('ix_quotations_campaign', 'campaign_id'),
        Index('ix_quotations_seller', 'seller_id'),
        Index('ix_quotations_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'quotation_number': self.quotation_number,
            'quotation_request_id': self.quotation_request_id,
            'proposal_id': self.proposal_id,
            'campaign_id': self.campaign_id,
            'client_id': self.client_id,
            'client_name': self.client_name,
            'client_email': self.client_email,
            'client_company_name': self.client_company_name,
            'client_designation': self.client_designation,
            'client_address': self.client_address,
            'client_phone': self.client_phone,
            'items': self.items or [],
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'duration_days': self.duration_days,
            'total_amount': self.total_amount or 0.0,
            'valid_until': _iso(self.valid_until),
            'notes': self.notes,
            'status': self.status,
            'signature_name': self.signature_name,
            'signature_position': self.signature_position,
            'page_id': self.page_id,
            'page_number': self.page_number,
            'seller_id': self.seller_id,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# =============================================================================
# OPERATIONS
# =============================================================================

class JobOrder(Base):
    """Work order authorizing installation or maintenance at a site."""
    __tablename__ = 'job_orders'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    job_order_number = Column(String(50), nullable=False)
    job_order_type = Column(String(50), default='Installation')
    quotation_id = Column(String(36))
    quotation_number = Column(String(50))
    client_name = Column(String(255))
    client_company = Column(String(255))
    product_id = Column(String(36))
    product_name = Column(String(255))
    product_location = Column(Text)
    site_code = Column(String(100))
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    duration_days = Column(Integer)
    total_amount = Column(Float, default=0.0)
    status = Column(String(50), default='pending')  # pending, in_progress, completed, cancelled
    assigned_to = Column(String(36))
    assigned_name = Column(String(255))
    notes = Column(Text)
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_job_orders_company', 'company_id'),
        Index('ix_job_orders_status', 'status'),
        Index('ix_job_orders_created_by', 'created_by'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'job_order_number': self.job_order_number,
            'job_order_type': self.job_order_type,
            'quotation_id': self.quotation_id,
            'quotation_number': self.quotation_number,
            'client_name': self.client_name,
            'client_company': self.client_company,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'product_location': self.product_location,
            'site_code': self.site_code,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'duration_days': self.duration_days,
            'total_amount': self.total_amount or 0.0,
            'status': self.status,
            'assigned_to': self.assigned_to,
            'assigned_name': self.assigned_name,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Booking(Base):
    """Reservation of a site for a contract period."""
    __tablename__ = 'bookings'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    product_id = Column(String(36), ForeignKey('products.id'), nullable=False)
    product_name = Column(String(255))
    quotation_id = Column(String(36))
    quotation_number = Column(String(50))
    client_id = Column(String(36))
    client_name = Column(String(255))
    seller_id = Column(String(36))
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    total_cost = Column(Float, default=0.0)
    status = Column(String(50), default='RESERVED')  # RESERVED, COMPLETED, CANCELLED
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    product = relationship("Product", back_populates="bookings")

    __table_args__ = (
        Index('ix_bookings_company', 'company_id'),
        Index('ix_bookings_product', 'product_id'),
        Index('ix_bookings_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quotation_id': self.quotation_id,
            'quotation_number': self.quotation_number,
            'client_id': self.client_id,
            'client_name': self.client_name,
            'seller_id': self.seller_id,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'total_cost': self.total_cost or 0.0,
            'status': self.status,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Team(Base):
    """Field crew (installers, maintenance) with its members."""
    __tablename__ = 'teams'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    team_type = Column(String(50), default='operations')
    leader_id = Column(String(36))
    leader_name = Column(String(255))
    members = Column(JSONType, default=list)  # [{id, name, role}]
    status = Column(String(20), default='active')  # active, inactive
    created_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_teams_company', 'company_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'name': self.name,
            'description': self.description,
            'team_type': self.team_type,
            'leader_id': self.leader_id,
            'leader_name': self.leader_name,
            'members': self.members or [],
            'status': self.status,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


class Report(Base):
    """Field report (installation, monitoring, completion) for a site."""
    __tablename__ = 'reports'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey('companies.id'), nullable=False)
    site_id = Column(String(36))
    site_name = Column(String(255))
    site_code = Column(String(100))
    location = Column(Text)
    client = Column(String(255))
    client_id = Column(String(36))
    job_order_number = Column(String(50))
    job_order_type = Column(String(50))
    booking_dates = Column(JSONType, default=dict)  # {start, end}
    breakdate = Column(DateTime)
    sales = Column(String(255))
    seller_id = Column(String(36))
    report_type = Column(String(50), nullable=False)
    date = Column(DateTime)
    attachments = Column(JSONType, default=list)  # [{note, fileName, fileType, fileUrl}]
    status = Column(String(20), default='draft')  # draft, posted, published
    category = Column(String(100))
    subcategory = Column(String(100))
    priority = Column(String(20))
    completion_percentage = Column(Integer)
    tags = Column(JSONType, default=list)
    assigned_to = Column(String(36))
    product = Column(JSONType)
    installation_status = Column(String(50))
    installation_timeline = Column(String(100))
    delay_reason = Column(Text)
    delay_days = Column(Integer)
    description_of_work = Column(Text)
    created_by = Column(String(36))
    created_by_name = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_reports_company', 'company_id'),
        Index('ix_reports_status', 'status'),
        Index('ix_reports_type', 'report_type'),
        Index('ix_reports_seller', 'seller_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'site_id': self.site_id,
            'site_name': self.site_name,
            'site_code': self.site_code,
            'location': self.location,
            'client': self.client,
            'client_id': self.client_id,
            'job_order_number': self.job_order_number,
            'job_order_type': self.job_order_type,
            'booking_dates': self.booking_dates or {},
            'breakdate': _iso(self.breakdate),
            'sales': self.sales,
            'seller_id': self.seller_id,
            'report_type': self.report_type,
            'date': _iso(self.date),
            'attachments': self.attachments or [],
            'status': self.status,
            'category': self.category,
            'subcategory': self.subcategory,
            'priority': self.priority,
            'completion_percentage': self.completion_percentage,
            'tags': self.tags or [],
            'assigned_to': self.assigned_to,
            'product': self.product,
            'installation_status': self.installation_status,
            'installation_timeline': self.installation_timeline,
            'delay_reason': self.delay_reason,
            'delay_days': self.delay_days,
            'description_of_work': self.description_of_work,
            'created_by': self.created_by,
            'created_by_name': self.created_by_name,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }


# =============================================================================
# COMMUNICATIONS & ACTIVITY
# =============================================================================

class EmailRecord(Base):
    """Every document email sent (or attempted) from the system."""
    __tablename__ = 'email_records'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36))
    entity_type = Column(String(50))  # cost_estimate, quotation, proposal
    entity_id = Column(String(36))
    to_email = Column(String(255), nullable=False)
    cc = Column(JSONType, default=list)
    reply_to = Column(String(255))
    subject = Column(String(500))
    body = Column(Text)
    attachments = Column(JSONType, default=list)  # file names
    status = Column(String(20), default='sent')  # sent, failed
    error = Column(Text)
    sent_by = Column(String(36))
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_email_records_entity', 'entity_type', 'entity_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'to_email': self.to_email,
            'cc': self.cc or [],
            'reply_to': self.reply_to,
            'subject': self.subject,
            'body': self.body,
            'attachments': self.attachments or [],
            'status': self.status,
            'error': self.error,
            'sent_by': self.sent_by,
            'created_at': _iso(self.created_at)
        }


class ActivityLog(Base):
    """
    Activity log for tracking changes to business records.
    One row per CREATED/UPDATED/STATUS_CHANGED/DELETED event.
    """
    __tablename__ = 'activity_log'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36))
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    actor_type = Column(String(50))  # user, system
    actor_id = Column(String(36))
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(36), nullable=False)
    event_type = Column(String(100), nullable=False)
    description = Column(Text)
    extra_data = Column(JSONType, default=dict)

    __table_args__ = (
        Index('ix_activity_log_company', 'company_id'),
        Index('ix_activity_log_entity', 'entity_type', 'entity_id'),
        Index('ix_activity_log_timestamp', 'timestamp'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'company_id': self.company_id,
            'timestamp': _iso(self.timestamp),
            'actor_type': self.actor_type,
            'actor_id': self.actor_id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'event_type': self.event_type,
            'description': self.description,
            'metadata': self.extra_data or {}
        }
