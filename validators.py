"""
Input Validation & Sanitization Utilities
Provides validation for API requests, attachment uploads, and user input
"""
import re
import os
from datetime import datetime
from typing import Dict, Any, List, Optional, Tuple
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
import logging

logger = logging.getLogger(__name__)

# Report attachments: site photos and supporting documents
ALLOWED_ATTACHMENT_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'pdf'}
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024  # 10MB

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Allowed status values per entity
STATUS_CHOICES = {
    'proposal': {'draft', 'sent', 'accepted', 'declined', 'viewed'},
    'cost_estimate': {'draft', 'sent', 'viewed', 'approved', 'rejected', 'accepted', 'declined'},
    'quotation': {'draft', 'sent', 'accepted', 'rejected', 'expired', 'viewed'},
    'job_order': {'pending', 'in_progress', 'completed', 'cancelled'},
    'report': {'draft', 'posted', 'published'},
    'team': {'active', 'inactive'},
    'booking': {'RESERVED', 'COMPLETED', 'CANCELLED'},
}


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    return True, None


def parse_email_list(value: Optional[str]) -> List[str]:
    """
    Split a comma separated address list (the CC field) and validate each entry.

    Raises:
        ValidationError: naming the first invalid address
    """
    if not value:
        return []

    if isinstance(value, list):
        candidates = value
    else:
        candidates = value.split(',')

    emails = [email.strip() for email in candidates if email and email.strip()]
    for email in emails:
        is_valid, _ = validate_email(email)
        if not is_valid:
            raise ValidationError(f"Invalid 'CC' email address format: {email}", field='ccEmail')
    return emails


def validate_number_range(value: float, min_value: Optional[float] = None, max_value: Optional[float] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate number is within acceptable range

    Args:
        value: Number to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, "Value must be a number"

    if min_value is not None and value < min_value:
        return False, f"Value too small (minimum {min_value})"

    if max_value is not None and value > max_value:
        return False, f"Value too large (maximum {max_value})"

    return True, None


def validate_status(entity: str, status: str) -> Tuple[bool, Optional[str]]:
    """Validate a status value against the allowed set for an entity."""
    allowed = STATUS_CHOICES.get(entity)
    if allowed is None:
        return False, f"Unknown entity type: {entity}"
    if status not in allowed:
        return False, f"Invalid status '{status}'. Allowed: {', '.join(sorted(allowed))}"
    return True, None


def validate_date_range(start: Any, end: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate an ISO date range where end must not be before start.

    Args:
        start: ISO date/datetime string
        end: ISO date/datetime string

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        start_dt = datetime.fromisoformat(str(start).replace('Z', '+00:00'))
        end_dt = datetime.fromisoformat(str(end).replace('Z', '+00:00'))
    except (TypeError, ValueError):
        return False, "Dates must be ISO formatted"

    if start_dt.tzinfo != end_dt.tzinfo:
        start_dt = start_dt.replace(tzinfo=None)
        end_dt = end_dt.replace(tzinfo=None)

    if end_dt < start_dt:
        return False, "End date must not be before start date"

    return True, None


def validate_pagination(args: Dict[str, Any], default_per_page: int = 20, max_per_page: int = 100) -> Tuple[int, int]:
    """
    Read page/per_page from query args, clamping to sane bounds.

    Raises:
        ValidationError: if either value is not an integer
    """
    try:
        page = int(args.get('page', 1))
        per_page = int(args.get('per_page', default_per_page))
    except (TypeError, ValueError):
        raise ValidationError("page and per_page must be integers", field='page')

    page = max(page, 1)
    per_page = min(max(per_page, 1), max_per_page)
    return page, per_page


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent directory traversal attacks

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    safe_name = secure_filename(filename)

    if not safe_name:
        safe_name = 'file'

    return safe_name


def validate_file_extension(filename: str, allowed_extensions: set) -> Tuple[bool, Optional[str]]:
    """
    Validate file has an allowed extension

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions (without dots)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filename or '.' not in filename:
        return False, "File must have an extension"

    extension = filename.rsplit('.', 1)[1].lower()

    if extension not in allowed_extensions:
        return False, f"File type not allowed. Allowed types: {', '.join(sorted(allowed_extensions))}"

    return True, None


def validate_attachment_upload(file: FileStorage) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate a report attachment upload

    Args:
        file: FileStorage object from request.files

    Returns:
        Tuple of (is_valid, error_message, sanitized_filename)
    """
    if not file or not file.filename:
        return False, "No attachment provided", None

    safe_filename = sanitize_filename(file.filename)

    is_valid, error = validate_file_extension(safe_filename, ALLOWED_ATTACHMENT_EXTENSIONS)
    if not is_valid:
        return False, error, None

    file.seek(0, os.SEEK_END)
    file_size = file.tell()
    file.seek(0)

    if file_size > MAX_ATTACHMENT_SIZE:
        max_mb = MAX_ATTACHMENT_SIZE / (1024 * 1024)
        return False, f"Attachment too large (maximum {max_mb:.1f}MB)", None

    if file_size == 0:
        return False, "Attachment is empty", None

    logger.info(f"Attachment validation successful: {safe_filename} ({file_size} bytes)")
    return True, None, safe_filename


def validate_line_item(item: Dict[str, Any], index: int = 0) -> Tuple[bool, Optional[str]]:
    """Validate a single cost estimate line item."""
    if not isinstance(item, dict):
        return False, f"Line item {index} must be an object"

    is_valid, error = validate_required_fields(item, ['description', 'category'])
    if not is_valid:
        return False, f"Line item {index}: {error}"

    for field in ('quantity', 'unitPrice', 'total'):
        if field in item and item[field] is not None:
            is_valid, error = validate_number_range(item[field], min_value=0)
            if not is_valid:
                return False, f"Line item {index} invalid {field}: {error}"

    return True, None


def validate_cost_estimate_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate a request that creates cost estimates for one or more sites

    Args:
        data: Request data dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_required_fields(data, ['client', 'sites'])
    if not is_valid:
        return False, error

    if not isinstance(data['client'], dict) or not data['client'].get('name'):
        return False, "client must be an object with a name"

    sites = data['sites']
    if not isinstance(sites, list) or not sites:
        return False, "sites must be a non-empty array"

    for idx, site in enumerate(sites):
        if not isinstance(site, dict) or not site.get('id') or not site.get('name'):
            return False, f"Site {idx} must have an id and a name"

    if data.get('startDate') and data.get('endDate'):
        is_valid, error = validate_date_range(data['startDate'], data['endDate'])
        if not is_valid:
            return False, error

    return True, None


def validate_send_email_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate a document email request (cost estimate, quotation, proposal)

    Args:
        data: Request data dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, _ = validate_required_fields(data, ['id', 'clientEmail', 'subject', 'body'])
    if not is_valid:
        return False, "Missing required data"

    is_valid, _ = validate_email(data['clientEmail'])
    if not is_valid:
        return False, "Invalid 'To' email address format"

    try:
        parse_email_list(data.get('ccEmail'))
    except ValidationError as e:
        return False, e.message

    return True, None
