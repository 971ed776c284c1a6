"""
Tests for document display helpers
"""
import pytest
from datetime import datetime, date

from documents.formatting import (
    duration_months,
    format_date,
    format_duration,
    format_money,
    size_label,
    truncate,
    wrap_text,
)


@pytest.mark.unit
class TestFormatMoney:

    def test_thousands_separator_and_two_decimals(self):
        assert format_money(1234.5) == '1,234.50'

    def test_currency_prefix(self):
        assert format_money(150000, 'PHP') == 'PHP 150,000.00'

    def test_bad_values_become_zero(self):
        assert format_money(None) == '0.00'
        assert format_money('abc') == '0.00'


@pytest.mark.unit
class TestFormatDate:

    def test_datetime_and_date(self):
        assert format_date(datetime(2024, 3, 5, 10, 30)) == 'March 05, 2024'
        assert format_date(date(2024, 3, 5)) == 'March 05, 2024'

    def test_iso_string_with_zulu(self):
        assert format_date('2024-03-05T00:00:00Z') == 'March 05, 2024'

    def test_empty_or_garbage_gives_default(self):
        assert format_date(None) == 'N/A'
        assert format_date('not a date') == 'N/A'
        assert format_date('', default='') == ''

    def test_custom_format(self):
        assert format_date('2024-03-05', '%m/%d/%y') == '03/05/24'


@pytest.mark.unit
class TestFormatDuration:

    @pytest.mark.parametrize('days, expected', [
        (None, '1 month'),
        (0, '1 month'),
        (1, '1 day'),
        (15, '15 days'),
        (30, '1 month'),
        (31, '1 month and 1 day'),
        (45, '1 month and 15 days'),
        (60, '2 months'),
        (95, '3 months and 5 days'),
    ])
    def test_duration_strings(self, days, expected):
        assert format_duration(days) == expected

    def test_duration_months(self):
        assert duration_months(None) == 1.0
        assert duration_months(90) == 3.0
        assert duration_months(45) == pytest.approx(1.5)


@pytest.mark.unit
class TestTextHelpers:

    def test_truncate_long_text(self):
        text = 'x' * 40
        assert truncate(text) == 'x' * 32 + '...'

    def test_truncate_short_text_unchanged(self):
        assert truncate('EDSA Guadalupe') == 'EDSA Guadalupe'
        assert truncate(None) == ''

    def test_size_label(self):
        assert size_label({'height': 40, 'width': 60}) == '40ft (H) x 60ft (W)'
        assert size_label({'height': 40}) == 'N/A'
        assert size_label(None) == 'N/A'

    def test_wrap_text_respects_width(self):
        lines = wrap_text('one two three four five six seven', 10)
        assert all(len(line) <= 10 for line in lines)
        assert ' '.join(lines) == 'one two three four five six seven'

    def test_wrap_text_keeps_line_breaks(self):
        assert wrap_text('first\nsecond', 80) == ['first', 'second']
