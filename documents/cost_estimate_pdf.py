"""
Cost estimate documents.

Two layouts are produced from a (single-site) cost estimate dict:

- the quotation letter sent to clients, one per site
- the detailed breakdown with the full line-item table

Both use a 15mm margin on A4 with hand-placed rows.
"""

from typing import Any, Dict, List, Optional

from documents.formatting import (
    format_money, format_date, format_duration, duration_months, truncate, size_label, wrap_text
)
from documents.instructions import Layout, BLACK
from documents.site_grouping import is_rental_item

MARGIN = 15
VAT_RATE = 0.12

CATEGORY_LABELS = {
    'media_cost': "Media Cost",
    'production_cost': "Production Cost",
    'installation_cost': "Installation Cost",
    'maintenance_cost': "Maintenance Cost",
    'other': "Other",
}

TERMS = (
    "1. Quotation validity:  5 working days.",
    "2. Availability of the site is on first-come-first-served-basis only. Only official documents such as P.O's,",
    "    Media Orders, signed quotation, & contracts are accepted in order to book the site.",
    "3. To book the site, one (1) month advance and two (2) months security deposit",
    "    payment dated 7 days before the start of rental is required.",
    "4. Final artwork should be approved ten (10) days before the contract period",
    "5. Print is exclusively for {company} Only.",
)

# Table column offsets from the left margin
COL_DESCRIPTION = 2
COL_CATEGORY = 80
COL_QTY = 120
COL_UNIT_PRICE = 135
COL_TOTAL = 165
ROW_HEIGHT = 8


def _rental_items(estimate: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [item for item in estimate.get('line_items') or []
            if is_rental_item(item) or 'LED' in (item.get('category') or '')
            or 'Static' in (item.get('category') or '')]


def _site_location(primary: Optional[Dict], product: Optional[Dict], fallback: str) -> str:
    if product:
        specs = product.get('specs_rental') or {}
        location = specs.get('location') or product.get('location')
        if location:
            return location
    notes = (primary or {}).get('notes') or ''
    if notes.startswith("Location: "):
        return notes[len("Location: "):]
    return notes or fallback


def _illumination(primary: Optional[Dict], product: Optional[Dict]) -> str:
    specs = (product or {}).get('specs_rental') or {}
    if specs.get('illumination'):
        return str(specs['illumination'])
    units = (primary or {}).get('quantity') or 10
    return f"{units} units of 1000 watts metal Halide"


def compose_cost_estimate_letter(estimate: Dict[str, Any], company: Dict[str, Any],
                                 user: Dict[str, Any] = None,
                                 product: Dict[str, Any] = None) -> List:
    """
    Quotation letter for one site of a cost estimate.

    Args:
        estimate: single-site estimate (see split_cost_estimate_by_site)
        company: {name, address, phone, email} printed in the footer
        user: account manager ({first_name, last_name}) signing the letter
        product: optional site record for size, location and illumination
    """
    layout = Layout(margin=MARGIN)
    page_width = layout.width
    content_width = layout.content_width
    client = estimate.get('client') or {}
    company_name = company.get('name') or 'OH Plus'

    rentals = _rental_items(estimate)
    primary = rentals[0] if rentals else None
    site_name = (primary or {}).get('description') or estimate.get('title') or ''
    site_location = _site_location(primary, product, site_name)

    line_items = estimate.get('line_items') or []
    subtotal = sum(float(item.get('total') or 0) for item in line_items)
    monthly_rate = float((primary or {}).get('unitPrice') or 0)
    duration_days = estimate.get('duration_days')
    duration_text = format_duration(duration_days)
    lease_total = monthly_rate * duration_months(duration_days)
    lease_vat = lease_total * VAT_RATE
    lease_total_with_vat = lease_total + lease_vat

    # Client and RFQ number
    layout.font(11, 'bold')
    layout.color(BLACK)
    layout.text(MARGIN, layout.y, client.get('name') or "Client Name")
    layout.text(page_width - MARGIN - 50, layout.y,
                f"RFQ. No. {estimate.get('cost_estimate_number') or estimate.get('id')}")
    layout.y += 6

    layout.font(11, 'normal')
    layout.text(MARGIN, layout.y, client.get('company') or "Client Company")
    layout.y += 10

    layout.font(10, 'normal')
    layout.text(MARGIN, layout.y,
                f"Good Day! Thank you for considering {company_name} for your business needs.")
    layout.y += 5
    layout.text(MARGIN, layout.y, "We are pleased to submit our quotation for your requirements:")
    layout.y += 10

    layout.font(10, 'bold')
    layout.text(MARGIN, layout.y, "Details as follows:")
    layout.y += 6

    size = size_label((product or {}).get('specs_rental'))
    period = (f"{format_date(estimate.get('start_date'))} - "
              f"{format_date(estimate.get('end_date'))}")
    details = (
        ("Site Location", site_location),
        ("Type", "Billboard"),
        ("Size", size),
        ("Contract Duration", duration_text),
        ("Contract Period", period),
        ("Proposal to", client.get('company') or "Client Company"),
        ("Illumination", _illumination(primary, product)),
        ("Lease Rate/Month", f"{format_money(monthly_rate)}PHP     (Exclusive of VAT)"),
        ("Total Lease", f"{format_money(subtotal)}PHP     (Exclusive of VAT)"),
    )
    for label, value in details:
        layout.font(10, 'normal')
        layout.text(MARGIN, layout.y, "-")
        layout.label_value(MARGIN + 5, f"{label}:", value, offset=45)
        layout.y += 5

    layout.y += 5

    # Lease computation
    amount_x = page_width - MARGIN - 40
    layout.font(10, 'normal')
    for label, amount in (("Lease rate per month", monthly_rate),
                          (f"x {duration_text}", lease_total),
                          ("12 % VAT", lease_vat)):
        layout.text(MARGIN + 5, layout.y, label)
        layout.text(amount_x, layout.y, f"{format_money(amount)}PHP")
        layout.y += 5
    layout.y += 3

    layout.font(10, 'bold')
    layout.text(MARGIN + 5, layout.y, "TOTAL")
    layout.text(amount_x, layout.y, f"{format_money(lease_total_with_vat)}PHP")
    layout.y += 8

    layout.font(9, 'normal')
    layout.text(MARGIN, layout.y, f"Note: free two (2) change material for {duration_text} rental")
    layout.y += 10

    layout.font(10, 'bold')
    layout.text(MARGIN, layout.y, "Terms and Conditions:")
    layout.y += 6
    layout.font(10, 'normal')
    for term in TERMS:
        layout.text(MARGIN, layout.y, term.format(company=company_name))
        layout.y += 5
    layout.y += 10

    # Signatures
    right_x = MARGIN + content_width / 2
    layout.text(MARGIN, layout.y, "Very truly yours,")
    layout.text(right_x, layout.y, "C o n f o r m e:")
    layout.y += 15

    user = user or {}
    if user.get('first_name') and user.get('last_name'):
        signer = f"{user['first_name']} {user['last_name']}"
    else:
        signer = "Account Manager"
    layout.text(MARGIN, layout.y, signer)
    layout.text(right_x, layout.y, client.get('name') or "Client Name")
    layout.y += 5
    layout.text(MARGIN, layout.y, "Account Management")
    layout.text(right_x, layout.y, client.get('company') or "Client Company")
    layout.y += 8

    layout.font(9, 'normal')
    layout.text(right_x, layout.y, "This signed Quotation serves as an")
    layout.y += 4
    layout.text(right_x, layout.y, "official document for billing purposes")

    # Footer
    page_height = layout.height
    layout.font(8, 'normal')
    layout.color(BLACK)
    address = company.get('address') or ''
    phone = company.get('phone')
    layout.text(MARGIN, page_height - 25,
                f"{address}. Telephone: {phone}" if phone else address)
    if company.get('email'):
        layout.text(MARGIN, page_height - 20, f"email: {company['email']}")
    layout.text(MARGIN, page_height - 10, format_date(estimate.get('created_at')))
    layout.text(page_width - MARGIN - 60, page_height - 10, f"{site_name} QUOTATION")

    return layout.instructions


def compose_detailed_cost_estimate(estimate: Dict[str, Any], company: Dict[str, Any]) -> List:
    """Full breakdown: details, client, paginated line-item table, totals, notes."""
    layout = Layout(margin=MARGIN, bottom_limit=297 - 40, top_after_break=MARGIN + 20)
    page_width = layout.width
    content_width = layout.content_width
    client = estimate.get('client') or {}

    layout.font(20, 'bold')
    layout.color(BLACK)
    layout.text(page_width / 2, layout.y, "COST ESTIMATE", align='center')
    layout.y += 10
    layout.line(MARGIN, layout.y, page_width - MARGIN, layout.y, width=1)
    layout.y += 15

    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, "Cost Estimate Details")
    layout.y += 8

    status = estimate.get('status') or 'draft'
    info = [
        ("Estimate Number:", estimate.get('cost_estimate_number') or estimate.get('id')),
        ("Title:", estimate.get('title') or ''),
        ("Created Date:", format_date(estimate.get('created_at'), '%m/%d/%Y')),
        ("Valid Until:", format_date(estimate.get('valid_until'), '%m/%d/%Y')),
        ("Status:", status[:1].upper() + status[1:]),
    ]
    if estimate.get('start_date') and estimate.get('end_date'):
        info.extend([
            ("Start Date:", format_date(estimate['start_date'], '%m/%d/%Y')),
            ("End Date:", format_date(estimate['end_date'], '%m/%d/%Y')),
            ("Duration:", f"{estimate.get('duration_days') or 0} days"),
        ])
    for label, value in info:
        layout.label_value(MARGIN, label, value, offset=40)
        layout.y += 6
    layout.y += 15

    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, "Client Information")
    layout.y += 8
    for label, key in (("Name:", 'name'), ("Company:", 'company'), ("Email:", 'email'),
                       ("Phone:", 'phone'), ("Address:", 'address')):
        layout.label_value(MARGIN, label, client.get(key) or "N/A", offset=25)
        layout.y += 6
    layout.y += 15

    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, "Cost Breakdown")
    layout.y += 10

    # Table header
    layout.font(9, 'bold')
    layout.color((240, 240, 240), 'fill')
    layout.rect(MARGIN, layout.y - 5, content_width, ROW_HEIGHT, fill=True, stroke=False)
    for offset, heading in ((COL_DESCRIPTION, "Description"), (COL_CATEGORY, "Category"),
                            (COL_QTY, "Qty"), (COL_UNIT_PRICE, "Unit Price"),
                            (COL_TOTAL, "Total")):
        layout.text(MARGIN + offset, layout.y, heading)
    layout.y += ROW_HEIGHT

    layout.font(9, 'normal')
    subtotal = 0.0
    for index, item in enumerate(estimate.get('line_items') or []):
        if layout.y > layout.bottom_limit:
            layout.new_page()
            layout.font(9, 'normal')

        shade = 255 if index % 2 == 0 else 250
        layout.color((shade, shade, shade), 'fill')
        layout.rect(MARGIN, layout.y - 5, content_width, ROW_HEIGHT, fill=True, stroke=False)

        category = item.get('category') or ''
        total = float(item.get('total') or 0)
        layout.text(MARGIN + COL_DESCRIPTION, layout.y, truncate(item.get('description')))
        layout.text(MARGIN + COL_CATEGORY, layout.y, CATEGORY_LABELS.get(category, category))
        layout.text(MARGIN + COL_QTY, layout.y, item.get('quantity') or 0)
        layout.text(MARGIN + COL_UNIT_PRICE, layout.y, f"PHP {format_money(item.get('unitPrice'))}")
        layout.text(MARGIN + COL_TOTAL, layout.y, f"PHP {format_money(total)}")

        subtotal += total
        layout.y += ROW_HEIGHT

    layout.y += 5
    layout.ensure_space(30)

    tax_rate = estimate.get('tax_rate')
    if tax_rate is None:
        tax_rate = VAT_RATE
    tax_amount = subtotal * tax_rate

    layout.font(9, 'bold')
    layout.text(MARGIN + COL_UNIT_PRICE, layout.y, "Subtotal:")
    layout.text(MARGIN + COL_TOTAL, layout.y, f"PHP {format_money(subtotal)}")
    layout.y += 6
    layout.text(MARGIN + COL_UNIT_PRICE, layout.y, f"VAT ({tax_rate * 100:.0f}%):")
    layout.text(MARGIN + COL_TOTAL, layout.y, f"PHP {format_money(tax_amount)}")
    layout.y += 6
    layout.line(MARGIN + 130, layout.y, page_width - MARGIN, layout.y, width=0.5)
    layout.y += 6
    layout.font(12, 'bold')
    layout.text(MARGIN + 110, layout.y, "TOTAL AMOUNT:")
    layout.text(MARGIN + COL_TOTAL, layout.y, f"PHP {format_money(subtotal + tax_amount)}")
    layout.y += 15

    if estimate.get('notes'):
        layout.ensure_space(20)
        layout.font(12, 'bold')
        layout.text(MARGIN, layout.y, "Notes:")
        layout.y += 8
        layout.font(10, 'normal')
        for line in wrap_text(estimate['notes'], 100):
            layout.ensure_space(5)
            layout.text(MARGIN, layout.y, line)
            layout.y += 5

    layout.font(8, 'italic')
    layout.color((100, 100, 100))
    layout.text(MARGIN, layout.height - 30,
                f"(c) {company.get('name') or 'OH Plus'} Outdoor Advertising. All rights reserved.")

    return layout.instructions
