"""
Services package for OOH Ops.
Contains repository classes for database access plus the storage, email
and search integrations.
"""

from services.errors import ServiceError, NotFoundError, ConflictError
from services.product_repository import ProductRepository
from services.client_repository import ClientRepository
from services.proposal_repository import ProposalRepository
from services.cost_estimate_repository import CostEstimateRepository
from services.quotation_repository import QuotationRepository
from services.job_order_repository import JobOrderRepository
from services.booking_repository import BookingRepository
from services.team_repository import TeamRepository
from services.report_repository import ReportRepository
from services.storage_service import StorageService, StorageError
from services.email_service import EmailService, EmailDeliveryError
from services.search_indexer import SearchIndexer, SearchIndexError

__all__ = [
    'ServiceError',
    'NotFoundError',
    'ConflictError',
    'ProductRepository',
    'ClientRepository',
    'ProposalRepository',
    'CostEstimateRepository',
    'QuotationRepository',
    'JobOrderRepository',
    'BookingRepository',
    'TeamRepository',
    'ReportRepository',
    'StorageService',
    'StorageError',
    'EmailService',
    'EmailDeliveryError',
    'SearchIndexer',
    'SearchIndexError',
]
