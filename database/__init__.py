"""
Database package for OOH Ops.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    configure,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    Company,
    User,
    Client,
    Product,
    Proposal,
    CostEstimate,
    Quotation,
    JobOrder,
    Booking,
    Team,
    Report,
    EmailRecord,
    ActivityLog
)

__all__ = [
    # Connection
    'Base',
    'configure',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'Company',
    'User',
    'Client',
    'Product',
    'Proposal',
    'CostEstimate',
    'Quotation',
    'JobOrder',
    'Booking',
    'Team',
    'Report',
    'EmailRecord',
    'ActivityLog'
]
