"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates the company, sales pipeline, operations and report tables for OOH Ops.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

JSON = sa.JSON().with_variant(postgresql.JSONB, 'postgresql')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Companies table
    op.create_table('companies',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text()),
        sa.Column('phone', sa.String(100)),
        sa.Column('email', sa.String(255)),
        sa.Column('website', sa.String(255)),
        sa.Column('logo_url', sa.Text()),
        sa.Column('settings', JSON),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('position', sa.String(100)),
        sa.Column('phone', sa.String(50)),
        sa.Column('signature_url', sa.Text()),
        sa.Column('role', sa.String(50)),
        sa.Column('is_active', sa.Boolean()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_company', 'users', ['company_id'])

    # Clients table
    op.create_table('clients',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company', sa.String(255)),
        sa.Column('email', sa.String(255)),
        sa.Column('phone', sa.String(50)),
        sa.Column('address', sa.Text()),
        sa.Column('designation', sa.String(100)),
        sa.Column('industry', sa.String(100)),
        sa.Column('contact_person', sa.String(255)),
        sa.Column('client_company_id', sa.String(36)),
        sa.Column('status', sa.String(50)),
        sa.Column('created_by', sa.String(36)),
        sa.Column('deleted', sa.Boolean()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clients_company', 'clients', ['company_id'])
    op.create_index('ix_clients_email', 'clients', ['email'])
    op.create_index('ix_clients_name', 'clients', ['name'])

    # Products (billboard sites) table
    op.create_table('products',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('seller_id', sa.String(36)),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('site_code', sa.String(100)),
        sa.Column('type', sa.String(50)),
        sa.Column('content_type', sa.String(20)),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Float()),
        sa.Column('location', sa.Text()),
        sa.Column('specs_rental', JSON),
        sa.Column('light', JSON),
        sa.Column('media', JSON),
        sa.Column('status', sa.String(50)),
        sa.Column('active', sa.Boolean()),
        sa.Column('deleted', sa.Boolean()),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_company', 'products', ['company_id'])
    op.create_index('ix_products_seller', 'products', ['seller_id'])
    op.create_index('ix_products_content_type', 'products', ['content_type'])

    # Proposals table
    op.create_table('proposals',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('proposal_number', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('client_id', sa.String(36)),
        sa.Column('client', JSON),
        sa.Column('products', JSON),
        sa.Column('total_amount', sa.Float()),
        sa.Column('valid_until', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('custom_message', sa.Text()),
        sa.Column('status', sa.String(50)),
        sa.Column('password', sa.String(20)),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_proposals_company', 'proposals', ['company_id'])
    op.create_index('ix_proposals_status', 'proposals', ['status'])

    # Cost estimates table
    op.create_table('cost_estimates',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('cost_estimate_number', sa.String(50), nullable=False),
        sa.Column('proposal_id', sa.String(36)),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('client_id', sa.String(36)),
        sa.Column('client', JSON),
        sa.Column('line_items', JSON),
        sa.Column('subtotal', sa.Float()),
        sa.Column('tax_rate', sa.Float()),
        sa.Column('tax_amount', sa.Float()),
        sa.Column('total_amount', sa.Float()),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('end_date', sa.DateTime()),
        sa.Column('duration_days', sa.Integer()),
        sa.Column('valid_until', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('custom_message', sa.Text()),
        sa.Column('status', sa.String(50)),
        sa.Column('password', sa.String(20)),
        sa.Column('page_id', sa.String(50)),
        sa.Column('page_number', sa.Integer()),
        sa.Column('approved_at', sa.DateTime()),
        sa.Column('approved_by', sa.String(36)),
        sa.Column('rejected_at', sa.DateTime()),
        sa.Column('rejected_by', sa.String(36)),
        sa.Column('rejection_reason', sa.Text()),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_cost_estimates_company', 'cost_estimates', ['company_id'])
    op.create_index('ix_cost_estimates_proposal', 'cost_estimates', ['proposal_id'])
    op.create_index('ix_cost_estimates_page', 'cost_estimates', ['page_id'])
    op.create_index('ix_cost_estimates_status', 'cost_estimates', ['status'])

    # Quotations table
    op.create_table('quotations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('quotation_number', sa.String(50), nullable=False),
        sa.Column('quotation_request_id', sa.String(36)),
        sa.Column('proposal_id', sa.String(36)),
        sa.Column('campaign_id', sa.String(36)),
        sa.Column('client_id', sa.String(36)),
        sa.Column('client_name', sa.String(255)),
        sa.Column('client_email', sa.String(255)),
        sa.Column('client_company_name', sa.String(255)),
        sa.Column('client_designation', sa.String(100)),
        sa.Column('client_address', sa.Text()),
        sa.Column('client_phone', sa.String(50)),
        sa.Column('items', JSON),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('end_date', sa.DateTime()),
        sa.Column('duration_days', sa.Integer()),
        sa.Column('total_amount', sa.Float()),
        sa.Column('valid_until', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('status', sa.String(50)),
        sa.Column('signature_name', sa.String(255)),
        sa.Column('signature_position', sa.String(100)),
        sa.Column('page_id', sa.String(50)),
        sa.Column('page_number', sa.Integer()),
        sa.Column('seller_id', sa.String(36)),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_quotations_company', 'quotations', ['company_id'])
    op.create_index('ix_quotations_campaign', 'quotations', ['campaign_id'])
    op.create_index('ix_quotations_seller', 'quotations', ['seller_id'])
    op.create_index('ix_quotations_status', 'quotations', ['status'])

    # Job orders table
    op.create_table('job_orders',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('job_order_number', sa.String(50), nullable=False),
        sa.Column('job_order_type', sa.String(50)),
        sa.Column('quotation_id', sa.String(36)),
        sa.Column('quotation_number', sa.String(50)),
        sa.Column('client_name', sa.String(255)),
        sa.Column('client_company', sa.String(255)),
        sa.Column('product_id', sa.String(36)),
        sa.Column('product_name', sa.String(255)),
        sa.Column('product_location', sa.Text()),
        sa.Column('site_code', sa.String(100)),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('end_date', sa.DateTime()),
        sa.Column('duration_days', sa.Integer()),
        sa.Column('total_amount', sa.Float()),
        sa.Column('status', sa.String(50)),
        sa.Column('assigned_to', sa.String(36)),
        sa.Column('assigned_name', sa.String(255)),
        sa.Column('notes', sa.Text()),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_job_orders_company', 'job_orders', ['company_id'])
    op.create_index('ix_job_orders_status', 'job_orders', ['status'])
    op.create_index('ix_job_orders_created_by', 'job_orders', ['created_by'])

    # Bookings table
    op.create_table('bookings',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('product_id', sa.String(36), nullable=False),
        sa.Column('product_name', sa.String(255)),
        sa.Column('quotation_id', sa.String(36)),
        sa.Column('quotation_number', sa.String(50)),
        sa.Column('client_id', sa.String(36)),
        sa.Column('client_name', sa.String(255)),
        sa.Column('seller_id', sa.String(36)),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('end_date', sa.DateTime()),
        sa.Column('total_cost', sa.Float()),
        sa.Column('status', sa.String(50)),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bookings_company', 'bookings', ['company_id'])
    op.create_index('ix_bookings_product', 'bookings', ['product_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    # Teams table
    op.create_table('teams',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('team_type', sa.String(50)),
        sa.Column('leader_id', sa.String(36)),
        sa.Column('leader_name', sa.String(255)),
        sa.Column('members', JSON),
        sa.Column('status', sa.String(20)),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_teams_company', 'teams', ['company_id'])

    # Reports table
    op.create_table('reports',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('site_id', sa.String(36)),
        sa.Column('site_name', sa.String(255)),
        sa.Column('site_code', sa.String(100)),
        sa.Column('location', sa.Text()),
        sa.Column('client', sa.String(255)),
        sa.Column('client_id', sa.String(36)),
        sa.Column('job_order_number', sa.String(50)),
        sa.Column('job_order_type', sa.String(50)),
        sa.Column('booking_dates', JSON),
        sa.Column('breakdate', sa.DateTime()),
        sa.Column('sales', sa.String(255)),
        sa.Column('seller_id', sa.String(36)),
        sa.Column('report_type', sa.String(50), nullable=False),
        sa.Column('date', sa.DateTime()),
        sa.Column('attachments', JSON),
        sa.Column('status', sa.String(20)),
        sa.Column('category', sa.String(100)),
        sa.Column('subcategory', sa.String(100)),
        sa.Column('priority', sa.String(20)),
        sa.Column('completion_percentage', sa.Integer()),
        sa.Column('tags', JSON),
        sa.Column('assigned_to', sa.String(36)),
        sa.Column('product', JSON),
        sa.Column('installation_status', sa.String(50)),
        sa.Column('installation_timeline', sa.String(100)),
        sa.Column('delay_reason', sa.Text()),
        sa.Column('delay_days', sa.Integer()),
        sa.Column('description_of_work', sa.Text()),
        sa.Column('created_by', sa.String(36)),
        sa.Column('created_by_name', sa.String(255)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reports_company', 'reports', ['company_id'])
    op.create_index('ix_reports_status', 'reports', ['status'])
    op.create_index('ix_reports_type', 'reports', ['report_type'])
    op.create_index('ix_reports_seller', 'reports', ['seller_id'])

    # Email records table
    op.create_table('email_records',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36)),
        sa.Column('entity_type', sa.String(50)),
        sa.Column('entity_id', sa.String(36)),
        sa.Column('to_email', sa.String(255), nullable=False),
        sa.Column('cc', JSON),
        sa.Column('reply_to', sa.String(255)),
        sa.Column('subject', sa.String(500)),
        sa.Column('body', sa.Text()),
        sa.Column('attachments', JSON),
        sa.Column('status', sa.String(20)),
        sa.Column('error', sa.Text()),
        sa.Column('sent_by', sa.String(36)),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_email_records_entity', 'email_records', ['entity_type', 'entity_id'])

    # Activity log table
    op.create_table('activity_log',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36)),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('actor_type', sa.String(50)),
        sa.Column('actor_id', sa.String(36)),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(36), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('extra_data', JSON),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activity_log_company', 'activity_log', ['company_id'])
    op.create_index('ix_activity_log_entity', 'activity_log', ['entity_type', 'entity_id'])
    op.create_index('ix_activity_log_timestamp', 'activity_log', ['timestamp'])


def downgrade() -> None:
    op.drop_table('activity_log')
    op.drop_table('email_records')
    op.drop_table('reports')
    op.drop_table('teams')
    op.drop_table('bookings')
    op.drop_table('job_orders')
    op.drop_table('quotations')
    op.drop_table('cost_estimates')
    op.drop_table('proposals')
    op.drop_table('products')
    op.drop_table('clients')
    op.drop_table('users')
    op.drop_table('companies')
