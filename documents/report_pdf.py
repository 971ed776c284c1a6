"""
Field report document (installation, monitoring, completion reports).

Every page carries the 16mm logistics header band and the company footer
band. Photo attachments are fetched over HTTP and fitted into two side-by-side boxes.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from documents.formatting import format_date, parse_datetime, wrap_text
from documents.images import load_image, fit_image, is_image_file
from documents.instructions import Layout, BLACK, WHITE

logger = logging.getLogger(__name__)

MARGIN = 15
HEADER_HEIGHT = 16
FOOTER_HEIGHT = 12

NAVY = (30, 58, 138)
CYAN = (52, 211, 235)
GREEN = (34, 197, 94)
GREY = (100, 100, 100)


def _header(layout: Layout):
    layout.color(NAVY, 'fill')
    layout.rect(0, 0, layout.width, HEADER_HEIGHT, fill=True, stroke=False)
    cyan_width = layout.width * 0.4
    layout.color(CYAN, 'fill')
    layout.rect(layout.width - cyan_width * 0.75, 0, cyan_width * 0.75, HEADER_HEIGHT,
                fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(12, 'bold')
    layout.text(MARGIN, 10, "Logistics")
    layout.color(BLACK)
    layout.y = HEADER_HEIGHT + 5


def _footer(layout: Layout, company_name: str):
    top = layout.height - FOOTER_HEIGHT
    cyan_width = layout.width * 0.3
    layout.color(CYAN, 'fill')
    layout.rect(0, top, cyan_width, FOOTER_HEIGHT, fill=True, stroke=False)
    layout.color(NAVY, 'fill')
    layout.rect(cyan_width, top, layout.width - cyan_width, FOOTER_HEIGHT, fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(10, 'normal')
    layout.text(layout.width - MARGIN - 65, top + 6, "Smart. Seamless. Scalable")
    layout.font(14, 'bold')
    layout.text(layout.width - MARGIN, top + 8, company_name, align='right')
    layout.color(BLACK)


def _site_size(product: Dict[str, Any]) -> str:
    if not product:
        return "N/A"
    specs = product.get('specs_rental') or {}
    if specs.get('height') and specs.get('width'):
        return f"{specs['height']} (H) x {specs['width']} (W) x {specs.get('panels') or 'N/A'} Panels"
    return specs.get('size') or (product.get('light') or {}).get('size') or "N/A"


def _spec(product: Dict[str, Any], key: str, default: str) -> str:
    if not product:
        return "N/A"
    return str((product.get('specs_rental') or {}).get(key) or default)


def installation_days(start, end) -> int:
    """Whole days between the booking dates, rounded up; 0 if either is missing."""
    start_dt, end_dt = parse_datetime(start), parse_datetime(end)
    if not start_dt or not end_dt:
        return 0
    seconds = abs((end_dt - start_dt).total_seconds())
    return int(-(-seconds // 86400))


def project_information(report: Dict[str, Any], product: Dict[str, Any]):
    """Left and right columns of the project information table."""
    booking = report.get('booking_dates') or {}
    specs = (product or {}).get('specs_rental') or {}
    location = specs.get('location') or ((product or {}).get('light') or {}).get('location') \
        or (product or {}).get('location') or "N/A"

    left = [
        ("Site ID:", location if product else "N/A", 25),
        ("Job Order:", report.get('job_order_number') or (report.get('id') or '')[-4:].upper(), 25),
        ("Job Order Date:", format_date(report.get('date')), 35),
        ("Site:", report.get('site_name') or "N/A", 25),
        ("Size:", _site_size(product), 25),
        ("Start Date:", format_date(booking.get('start')), 25),
        ("End Date:", format_date(booking.get('end')), 25),
        ("Installation Duration:",
         f"{installation_days(booking.get('start'), booking.get('end'))} days", 45),
    ]
    right = [
        ("Content:", (product or {}).get('content_type') or "Static", 25),
        ("Material Specs:", _spec(product, 'material', "Stickers"), 35),
        ("Crew:", f"Team {report.get('assigned_to') or 'N/A'}", 25),
        ("Illumination:", _spec(product, 'illumination', "N/A"), 35),
        ("Gondola:", ("YES" if specs.get('gondola') else "NO") if product else "N/A", 25),
        ("Technology:", _spec(product, 'technology', "Clear Tapes"), 35),
        ("Sales:", report.get('sales') or "N/A", 25),
    ]
    return left, right


def compose_report(report: Dict[str, Any], product: Dict[str, Any] = None,
                   company: Dict[str, Any] = None,
                   image_loader: Callable = load_image) -> List:
    """
    Args:
        report: report dict
        product: optional site record for the project information table
        company: {name, ...} used in the footer band
        image_loader: url -> LoadedImage, placeholder on failure
    """
    company = company or {}
    company_name = company.get('name') or 'OH Plus'
    def page_frame(layout: Layout):
        _footer(layout, company_name)
        _header(layout)

    layout = Layout(margin=MARGIN, bottom_limit=297 - 30, on_new_page=page_frame)
    content_width = layout.content_width
    page_frame(layout)

    # Report type badge
    report_type = (report.get('report_type') or 'report').replace('-', ' ').title()
    layout.color(CYAN, 'fill')
    layout.rect(MARGIN, layout.y, 50, 8, fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(9, 'bold')
    layout.text(MARGIN + 2, layout.y + 5, f"{report_type} Report")
    layout.color(BLACK)
    layout.y += 13

    layout.font(9, 'italic')
    layout.color(GREY)
    layout.text(MARGIN, layout.y, f"as of {format_date(report.get('date'))}")
    layout.color(BLACK)
    layout.y += 15

    # Project information
    layout.ensure_space(70)
    layout.font(14, 'bold')
    layout.text(MARGIN, layout.y, "Project Information")
    layout.y += 8

    table_height = 55
    layout.color(BLACK, 'draw')
    layout.rect(MARGIN, layout.y, content_width, table_height, line_width=0.5)
    row_y = layout.y + 5
    left, right = project_information(report, product)
    for column_x, rows in ((MARGIN + 3, left), (MARGIN + content_width / 2 + 5, right)):
        y = row_y
        for label, value, offset in rows:
            layout.label_value(column_x, label, value, offset=offset, size=9, y=y)
            y += 5
    layout.y += table_height + 10

    # Status
    layout.ensure_space(30)
    layout.font(14, 'bold')
    layout.text(MARGIN, layout.y, "Project Status")
    layout.color(GREEN, 'fill')
    layout.rect(MARGIN + 90, layout.y - 4, 25, 6, fill=True, stroke=False)
    layout.color(WHITE)
    layout.font(10, 'bold')
    completion = report.get('completion_percentage')
    layout.text(MARGIN + 95, layout.y, f"{100 if completion is None else completion}%")
    layout.color(BLACK)
    layout.y += 15

    if report.get('description_of_work'):
        layout.font(11, 'bold')
        layout.text(MARGIN, layout.y, "Description of Work")
        layout.y += 6
        layout.font(9, 'normal')
        for line in wrap_text(report['description_of_work'], 110):
            layout.ensure_space(5)
            layout.text(MARGIN, layout.y, line)
            layout.y += 5
        layout.y += 5

    _attachments(layout, report, image_loader)

    # Prepared by
    layout.ensure_space(40)
    layout.line(MARGIN, layout.y, layout.width - MARGIN, layout.y, width=0.5)
    layout.y += 8
    layout.font(11, 'bold')
    layout.text(MARGIN, layout.y, "Prepared by:")
    layout.y += 6
    layout.font(9, 'normal')
    layout.text(MARGIN, layout.y, report.get('created_by_name') or "Logistics Team")
    layout.y += 4
    layout.text(MARGIN, layout.y, "LOGISTICS")
    layout.y += 4
    layout.text(MARGIN, layout.y, format_date(report.get('date'), '%m/%d/%y'))

    layout.font(9, 'italic')
    layout.color((107, 114, 128))
    layout.text(layout.width - MARGIN - 120, layout.y,
                f'"All data are based on the latest available records as of '
                f'{datetime.utcnow().strftime("%m/%d/%y")}."')
    layout.color(BLACK)
    return layout.instructions


def _attachments(layout: Layout, report: Dict[str, Any], image_loader: Callable):
    attachments = (report.get('attachments') or [])[:2]
    if not attachments:
        return

    layout.ensure_space(80)
    box_width = (layout.content_width - 10) / 2
    box_height = 60

    for index, attachment in enumerate(attachments):
        x = MARGIN if index == 0 else MARGIN + box_width + 10
        layout.color((200, 200, 200), 'draw')
        layout.rect(x, layout.y, box_width, box_height, line_width=0.5)

        file_name = attachment.get('fileName') or ''
        if attachment.get('fileUrl') and is_image_file(file_name):
            image = image_loader(attachment['fileUrl'])
            width, height = fit_image(image.width, image.height, box_width - 4, box_height - 4)
            layout.image(image.reader, x + (box_width - width) / 2, layout.y + 2, width, height)
        else:
            layout.font(8, 'normal')
            layout.color(GREY)
            layout.text(x + 5, layout.y + box_height / 2, file_name or f"Project Photo {index + 1}")
            layout.color(BLACK)

    layout.color(BLACK, 'draw')
    layout.y += box_height + 5

    for index, attachment in enumerate(attachments):
        x = MARGIN if index == 0 else MARGIN + box_width + 10
        layout.label_value(x, "Date:", format_date(report.get('date')), offset=15, size=8)
        layout.label_value(x, "Location:", report.get('location') or "N/A", offset=15, size=8,
                           y=layout.y + 4)
        if attachment.get('note'):
            layout.label_value(x, "Note:", attachment['note'], offset=15, size=8, y=layout.y + 8)

    layout.y += 20
