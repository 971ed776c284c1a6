"""
PDF renderer - draws instruction lists onto a reportlab canvas.

Instructions use millimetres from the top-left corner; reportlab uses
points from the bottom-left, so every y is flipped against the page height.
"""

import base64
import io
import logging
from typing import Iterable

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from documents.instructions import (
    PAGE_HEIGHT, BLACK, SetFont, SetColor, Text, Line, Rect, Image, NewPage
)

logger = logging.getLogger(__name__)

FONT_NAMES = {
    ('helvetica', 'normal'): 'Helvetica',
    ('helvetica', 'bold'): 'Helvetica-Bold',
    ('helvetica', 'italic'): 'Helvetica-Oblique',
    ('helvetica', 'bolditalic'): 'Helvetica-BoldOblique',
    ('times', 'normal'): 'Times-Roman',
    ('times', 'bold'): 'Times-Bold',
    ('times', 'italic'): 'Times-Italic',
    ('times', 'bolditalic'): 'Times-BoldItalic',
    ('courier', 'normal'): 'Courier',
    ('courier', 'bold'): 'Courier-Bold',
    ('courier', 'italic'): 'Courier-Oblique',
    ('courier', 'bolditalic'): 'Courier-BoldOblique',
}


class RenderError(Exception):
    """Raised when an instruction list cannot be rendered."""


def _rgb(color):
    return tuple(channel / 255.0 for channel in color)


def _y(top_mm: float) -> float:
    return (PAGE_HEIGHT - top_mm) * mm


class _CanvasState:
    """Font and colour state, reapplied after each page break."""

    def __init__(self):
        self.font_name = 'Helvetica'
        self.font_size = 10
        self.text_color = BLACK
        self.fill_color = BLACK
        self.draw_color = BLACK

    def apply(self, pdf):
        pdf.setFont(self.font_name, self.font_size)
        pdf.setStrokeColorRGB(*_rgb(self.draw_color))


def render_pdf(instructions: Iterable, title: str = None) -> bytes:
    """Render instructions to PDF bytes."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    if title:
        pdf.setTitle(title)

    state = _CanvasState()
    state.apply(pdf)

    for instruction in instructions:
        if isinstance(instruction, SetFont):
            key = (instruction.family.lower(), instruction.style.lower())
            state.font_name = FONT_NAMES.get(key, 'Helvetica')
            state.font_size = instruction.size
            pdf.setFont(state.font_name, state.font_size)

        elif isinstance(instruction, SetColor):
            if instruction.target == 'fill':
                state.fill_color = instruction.rgb
            elif instruction.target == 'draw':
                state.draw_color = instruction.rgb
                pdf.setStrokeColorRGB(*_rgb(instruction.rgb))
            else:
                state.text_color = instruction.rgb

        elif isinstance(instruction, Text):
            pdf.setFillColorRGB(*_rgb(state.text_color))
            x = instruction.x * mm
            y = _y(instruction.y)
            if instruction.align == 'center':
                pdf.drawCentredString(x, y, instruction.text)
            elif instruction.align == 'right':
                pdf.drawRightString(x, y, instruction.text)
            else:
                pdf.drawString(x, y, instruction.text)

        elif isinstance(instruction, Line):
            pdf.setLineWidth(instruction.width * mm)
            pdf.line(instruction.x1 * mm, _y(instruction.y1),
                     instruction.x2 * mm, _y(instruction.y2))

        elif isinstance(instruction, Rect):
            pdf.setFillColorRGB(*_rgb(state.fill_color))
            pdf.setLineWidth(instruction.line_width * mm)
            pdf.rect(instruction.x * mm, _y(instruction.y + instruction.height),
                     instruction.width * mm, instruction.height * mm,
                     stroke=1 if instruction.stroke else 0,
                     fill=1 if instruction.fill else 0)

        elif isinstance(instruction, Image):
            pdf.drawImage(instruction.source, instruction.x * mm,
                          _y(instruction.y + instruction.height),
                          width=instruction.width * mm, height=instruction.height * mm,
                          mask='auto')

        elif isinstance(instruction, NewPage):
            pdf.showPage()
            state.apply(pdf)

        else:
            raise RenderError(f"Unknown instruction: {instruction!r}")

    pdf.showPage()
    pdf.save()
    data = buffer.getvalue()
    logger.debug(f"Rendered PDF: {len(data)} bytes")
    return data


def render_pdf_base64(instructions: Iterable, title: str = None) -> str:
    """Render instructions to base64 text, for email attachments."""
    return base64.b64encode(render_pdf(instructions, title)).decode('ascii')
