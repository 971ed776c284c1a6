"""
Utilities Package

Shared helper functions used across the API blueprints.
"""

from app.utils.helpers import (
    repository,
    error_response,
    company_profile,
    find_user,
    find_product,
)

__all__ = [
    'repository',
    'error_response',
    'company_profile',
    'find_user',
    'find_product',
]
