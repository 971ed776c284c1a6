"""
Proposal document: cover page, one page per site, then a summary page.
"""

from typing import Any, Callable, Dict, List

from documents.formatting import format_money, format_date, size_label, wrap_text
from documents.images import load_image, fit_image
from documents.instructions import Layout, BLACK, WHITE

MARGIN = 20
NAVY = (30, 58, 138)
LIGHT = (243, 244, 246)
GREY = (107, 114, 128)


def _first_photo(product: Dict[str, Any]) -> str:
    for media in product.get('media') or []:
        if media.get('url') and not media.get('isVideo'):
            return media['url']
    return ''


def _count_label(value: Any) -> str:
    """Thousands separators for numbers; text values are printed as entered."""
    if value in (None, ''):
        return 'N/A'
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:,.0f}"
    return str(value)


def _cover(layout: Layout, proposal: Dict[str, Any], company: Dict[str, Any]):
    client = proposal.get('client') or {}
    center = layout.width / 2

    layout.color(NAVY, 'fill')
    layout.rect(0, 0, layout.width, 60, fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(26, 'bold')
    layout.text(center, 30, company.get('name') or 'OH Plus', align='center')
    layout.font(12, 'normal')
    layout.text(center, 42, "Outdoor Advertising Proposal", align='center')
    layout.color(BLACK)

    layout.y = 85
    layout.font(20, 'bold')
    layout.text(center, layout.y, proposal.get('title') or 'Proposal', align='center')
    layout.y += 20

    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, "Prepared for:")
    layout.y += 8
    for value in (client.get('company'), client.get('contactPerson'), client.get('email'),
                  client.get('phone'), client.get('address')):
        if value:
            layout.font(11, 'normal')
            layout.text(MARGIN + 5, layout.y, value)
            layout.y += 6
    layout.y += 10

    rows = (
        ("Proposal No.:", proposal.get('proposal_number') or ''),
        ("Date:", format_date(proposal.get('created_at'))),
        ("Valid Until:", format_date(proposal.get('valid_until'))),
        ("Sites:", str(len(proposal.get('products') or []))),
        ("Total Investment:", f"PHP {format_money(proposal.get('total_amount'))}"),
    )
    for label, value in rows:
        layout.label_value(MARGIN, label, value, offset=45, size=11)
        layout.y += 7

    if proposal.get('custom_message'):
        layout.y += 8
        layout.font(10, 'italic')
        for line in wrap_text(proposal['custom_message'], 95):
            layout.ensure_space(5)
            layout.text(MARGIN, layout.y, line)
            layout.y += 5


def _site_page(layout: Layout, product: Dict[str, Any], index: int, image_loader: Callable):
    specs = product.get('specs_rental') or {}
    content_width = layout.content_width

    layout.font(9, 'normal')
    layout.color(GREY)
    layout.text(MARGIN, layout.y, f"Site {index}")
    layout.color(BLACK)
    layout.y += 8
    layout.font(18, 'bold')
    layout.text(MARGIN, layout.y, product.get('name') or 'Site')
    layout.y += 7
    layout.font(10, 'normal')
    layout.text(MARGIN, layout.y, product.get('location') or specs.get('location') or '')
    layout.y += 8

    photo_height = 100
    url = _first_photo(product)
    layout.color(LIGHT, 'fill')
    layout.rect(MARGIN, layout.y, content_width, photo_height, fill=True, stroke=False)
    if url:
        image = image_loader(url)
        width, height = fit_image(image.width, image.height, content_width, photo_height)
        layout.image(image.reader, MARGIN + (content_width - width) / 2,
                     layout.y + (photo_height - height) / 2, width, height)
    layout.y += photo_height + 12

    layout.font(12, 'bold')
    layout.text(MARGIN, layout.y, "Site Specifications")
    layout.y += 8
    rows = (
        ("Site Code:", product.get('site_code') or 'N/A'),
        ("Type:", product.get('type') or 'N/A'),
        ("Size:", size_label(specs)),
        ("Traffic Count:", _count_label(specs.get('traffic_count'))),
        ("Elevation:", f"{specs['elevation']} ft" if specs.get('elevation') else 'N/A'),
        ("Audience:", specs.get('audience_type') or ', '.join(specs.get('audience_types') or []) or 'N/A'),
    )
    for label, value in rows:
        layout.label_value(MARGIN, label, value, offset=40)
        layout.y += 6
    layout.y += 6

    if product.get('description'):
        layout.font(10, 'normal')
        for line in wrap_text(product['description'], 95):
            layout.ensure_space(5)
            layout.text(MARGIN, layout.y, line)
            layout.y += 5
        layout.y += 5

    layout.ensure_space(20)
    layout.color(NAVY, 'fill')
    layout.rect(MARGIN, layout.y, content_width, 12, fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(12, 'bold')
    layout.text(MARGIN + 5, layout.y + 8, "Rate per month")
    layout.text(layout.width - MARGIN - 5, layout.y + 8,
                f"PHP {format_money(product.get('price'))}", align='right')
    layout.color(BLACK)
    layout.y += 20


def _summary(layout: Layout, proposal: Dict[str, Any], company: Dict[str, Any]):
    products = proposal.get('products') or []
    layout.font(16, 'bold')
    layout.text(MARGIN, layout.y, "Investment Summary")
    layout.y += 12

    layout.font(10, 'bold')
    layout.color(LIGHT, 'fill')
    layout.rect(MARGIN, layout.y - 5, layout.content_width, 8, fill=True, stroke=False)
    layout.text(MARGIN + 2, layout.y, "Site")
    layout.text(MARGIN + 110, layout.y, "Location")
    layout.text(layout.width - MARGIN - 2, layout.y, "Rate / Month", align='right')
    layout.y += 8

    layout.font(10, 'normal')
    for product in products:
        layout.ensure_space(8)
        layout.text(MARGIN + 2, layout.y, (product.get('name') or '')[:50])
        layout.text(MARGIN + 110, layout.y, (product.get('location') or '')[:30])
        layout.text(layout.width - MARGIN - 2, layout.y,
                    f"PHP {format_money(product.get('price'))}", align='right')
        layout.y += 7

    layout.line(MARGIN, layout.y, layout.width - MARGIN, layout.y, width=0.5)
    layout.y += 7
    layout.font(12, 'bold')
    layout.text(MARGIN + 2, layout.y, "TOTAL")
    layout.text(layout.width - MARGIN - 2, layout.y,
                f"PHP {format_money(proposal.get('total_amount'))}", align='right')
    layout.y += 15

    if proposal.get('notes'):
        layout.font(11, 'bold')
        layout.text(MARGIN, layout.y, "Notes:")
        layout.y += 6
        layout.font(10, 'normal')
        for line in wrap_text(proposal['notes'], 95):
            layout.ensure_space(5)
            layout.text(MARGIN, layout.y, line)
            layout.y += 5

    layout.font(8, 'normal')
    layout.color(GREY)
    footer = "  |  ".join(value for value in (company.get('address'), company.get('phone'),
                                               company.get('email')) if value)
    layout.text(layout.width / 2, layout.height - 12, footer, align='center')
    layout.color(BLACK)


def compose_proposal(proposal: Dict[str, Any], company: Dict[str, Any],
                     image_loader: Callable = load_image) -> List:
    layout = Layout(margin=MARGIN, bottom_limit=297 - 25)
    _cover(layout, proposal, company)

    for index, product in enumerate(proposal.get('products') or [], start=1):
        layout.new_page()
        _site_page(layout, product, index, image_loader)

    layout.new_page()
    _summary(layout, proposal, company)
    return layout.instructions
