"""Display helpers shared by the PDF composers and email templates."""

from datetime import datetime, date
from typing import Any, List, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetime, date, or ISO-8601 strings (trailing Z allowed)."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed


def format_money(amount: Any, currency: Optional[str] = None) -> str:
    """1234.5 -> '1,234.50' (prefixed with the currency when given)."""
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    text = f"{value:,.2f}"
    return f"{currency} {text}" if currency else text


def format_date(value: Any, fmt: str = "%B %d, %Y", default: str = "N/A") -> str:
    """Format a datetime, date or ISO string; default when empty or unparseable."""
    if not value:
        return default
    if isinstance(value, (datetime, date)):
        return value.strftime(fmt)
    try:
        return parse_datetime(value).strftime(fmt)
    except (TypeError, ValueError):
        return default


def format_duration(duration_days: Optional[int]) -> str:
    """
    Human readable contract duration.

    None or 0 -> '1 month', 45 -> '1 month and 15 days', 60 -> '2 months'.
    """
    if not duration_days:
        return "1 month"

    months, days = divmod(int(duration_days), 30)
    month_text = f"{months} month{'s' if months != 1 else ''}"
    day_text = f"{days} day{'s' if days != 1 else ''}"

    if months == 0:
        return day_text
    if days == 0:
        return month_text
    return f"{month_text} and {day_text}"


def duration_months(duration_days: Optional[int]) -> float:
    """Contract length in (fractional) months, 30 days each; defaults to 1."""
    if not duration_days:
        return 1.0
    return duration_days / 30


def truncate(text: Any, limit: int = 35, keep: int = 32) -> str:
    """Cut text longer than limit down to keep characters plus an ellipsis."""
    text = '' if text is None else str(text)
    if len(text) > limit:
        return text[:keep] + "..."
    return text


def size_label(specs: Optional[dict]) -> str:
    """'<height>ft (H) x <width>ft (W)' from specs_rental, or 'N/A'."""
    specs = specs or {}
    height = specs.get('height')
    width = specs.get('width')
    if height and width:
        return f"{height}ft (H) x {width}ft (W)"
    return "N/A"


def wrap_text(text: str, width: int) -> List[str]:
    """Greedy word wrap on character count, keeping explicit line breaks."""
    lines = []
    for paragraph in str(text).splitlines() or ['']:
        current = ''
        for word in paragraph.split():
            candidate = f"{current} {word}".strip()
            if len(candidate) > width and current:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines
