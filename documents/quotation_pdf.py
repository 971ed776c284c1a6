"""
Quotation document: a one-page offer for the first site on a quotation.
"""

import math
from datetime import datetime
from typing import Any, Dict, List

from documents.formatting import format_money, format_date, format_duration, size_label
from documents.instructions import Layout, BLACK

MARGIN = 20
VAT_RATE = 0.12


def _quotation_duration(days) -> str:
    if not days or days <= 0:
        return "0 days"
    return format_duration(days)


def compose_quotation(quotation: Dict[str, Any], company: Dict[str, Any]) -> List:
    """
    Args:
        quotation: quotation dict with priced items (item_total_amount)
        company: {name, address, phone, email}
    """
    layout = Layout(margin=MARGIN, bottom_limit=297 - 20)
    page_width = layout.width
    company_name = company.get('name') or 'Company Name'
    center = page_width / 2

    layout.font(24, 'bold')
    layout.color(BLACK)
    layout.text(center, layout.y, company_name, align='center')
    layout.y += 20

    layout.font(12, 'normal')
    layout.text(MARGIN, layout.y, format_date(datetime.utcnow()))
    layout.text(page_width - MARGIN, layout.y,
                f"RFQ. No. {quotation.get('quotation_number') or ''}", align='right')
    layout.y += 8
    layout.text(MARGIN, layout.y, quotation.get('client_name') or "Client Name")
    layout.y += 6
    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, quotation.get('client_company_name') or "COMPANY NAME")
    layout.y += 15

    items = quotation.get('items') or []
    item = items[0] if items else None

    layout.font(18, 'bold')
    layout.text(center, layout.y, (item or {}).get('name') or "Site Name", align='center')
    layout.y += 15

    layout.font(11, 'normal')
    layout.text(center, layout.y,
                f"Good Day! Thank you for considering {company_name} for your business needs.",
                align='center')
    layout.y += 6
    layout.text(center, layout.y, "We are pleased to submit our quotation for your requirements:",
                align='center')
    layout.y += 10
    layout.font(11, 'bold')
    layout.text(center, layout.y, "Details as follows:", align='center')
    layout.y += 15

    if item:
        _site_details(layout, quotation, item, company_name)
        _company_footer(layout, company)

    return layout.instructions


def _site_details(layout: Layout, quotation: Dict[str, Any], item: Dict[str, Any],
                  company_name: str):
    page_width = layout.width
    duration_days = quotation.get('duration_days') or 0
    duration_text = _quotation_duration(duration_days)
    price = float(item.get('price') or 0)
    lease_total = float(item.get('item_total_amount') or 0)
    size = size_label(item.get('specs_rental'))
    illumination = (item.get('specs_rental') or {}).get('illumination') \
        or "10 units of 1000 watts metal Halide"

    layout.font(11, 'normal')
    details = (
        f"- Type: {item.get('type') or 'Rental'}",
        f"- Size: {size}",
        f"- Contract Duration: {duration_text}",
        f"- Contract Period: {format_date(quotation.get('start_date'))} - "
        f"{format_date(quotation.get('end_date'))}",
        f"- Proposal to: {quotation.get('client_company_name') or 'CLIENT COMPANY NAME'}",
        f"- Illumination: {illumination}",
        f"- Lease Rate/Month: PHP {format_money(price)} (Exclusive of VAT)",
        f"- Total Lease: PHP {format_money(lease_total)} (Exclusive of VAT)",
    )
    for detail in details:
        layout.text(MARGIN, layout.y, detail)
        layout.y += 7
    layout.y += 10

    # Lease box
    box_width = page_width - 2 * MARGIN
    layout.color((248, 250, 252), 'fill')
    layout.color((229, 231, 235), 'draw')
    layout.rect(MARGIN, layout.y, box_width, 35, fill=True, stroke=True)

    right_x = page_width - MARGIN - 5
    layout.y += 8
    layout.font(11, 'normal')
    for label, amount in (("Lease rate per month", price),
                          (f"x {duration_text}", lease_total),
                          ("12% VAT", lease_total * VAT_RATE)):
        layout.text(MARGIN + 5, layout.y, label)
        layout.text(right_x, layout.y, f"PHP {format_money(amount)}", align='right')
        layout.y += 6
    layout.y += 2

    layout.color(BLACK, 'draw')
    layout.line(MARGIN + 5, layout.y, right_x, layout.y)
    layout.y += 6
    layout.font(14, 'bold')
    layout.text(MARGIN + 5, layout.y, "TOTAL")
    layout.text(right_x, layout.y, f"PHP {format_money(lease_total * (1 + VAT_RATE))}", align='right')
    layout.y += 15

    months = math.ceil(duration_days / 30)
    layout.font(11, 'normal')
    layout.text(MARGIN, layout.y, f"Note: free two (2) change material for {months} month rental")
    layout.y += 15

    layout.ensure_space(50)
    layout.font(11, 'bold')
    layout.text(MARGIN, layout.y, "Terms and Conditions:")
    layout.y += 8
    layout.font(10, 'normal')
    terms = (
        "1. Quotation validity: 5 working days.",
        "2. Availability of the site is on first-come-first-served-basis only. Only official documents such as P.O's,",
        "    Media Orders, signed quotation, & contracts are accepted in order to book the site.",
        "3. To book the site, one (1) month advance and two (2) months security deposit",
        "    payment dated 7 days before the start of rental is required.",
        "4. Final artwork should be approved ten (10) days before the contract period",
        f"5. Print is exclusively for {company_name} Only.",
    )
    for term in terms:
        layout.text(MARGIN, layout.y, term)
        layout.y += 6
    layout.y += 15

    # Two-column signature block
    layout.ensure_space(60)
    left_x = MARGIN
    right_col = page_width / 2 + 10
    layout.font(11, 'normal')
    layout.text(left_x, layout.y, "Very truly yours,")
    layout.text(right_col, layout.y, "Conforme:")
    layout.y += 25
    layout.line(left_x, layout.y, left_x + 60, layout.y)
    layout.line(right_col, layout.y, right_col + 60, layout.y)
    layout.y += 8
    layout.text(left_x, layout.y, quotation.get('signature_name') or "Account Manager")
    layout.text(right_col, layout.y, quotation.get('client_name') or "Client Name")
    layout.y += 6
    layout.text(left_x, layout.y, quotation.get('signature_position') or "Account Manager")
    layout.text(right_col, layout.y, quotation.get('client_company_name') or "COMPANY NAME")
    layout.y += 10
    layout.font(9, 'normal')
    layout.text(right_col, layout.y, "This signed quotation serves as an")
    layout.y += 4
    layout.text(right_col, layout.y, "official document for billing purposes")
    layout.y += 15


def _company_footer(layout: Layout, company: Dict[str, Any]):
    """Centered address, telephone and email lines at the cursor."""
    layout.ensure_space(15)
    center = layout.width / 2
    layout.font(10, 'normal')
    if company.get('address'):
        layout.text(center, layout.y, company['address'], align='center')
        layout.y += 5
    if company.get('phone'):
        layout.text(center, layout.y, f"Telephone: {company['phone']}", align='center')
        layout.y += 5
    if company.get('email'):
        layout.text(center, layout.y, f"Email: {company['email']}", align='center')
        layout.y += 5
