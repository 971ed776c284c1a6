"""
Drawing instructions for A4 documents.

All coordinates are millimetres measured from the top-left corner of the
page. Text y positions are baselines. Colours are 0-255 RGB triples.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple

PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


@dataclass(frozen=True)
class SetFont:
    size: float
    style: str = 'normal'  # normal, bold, italic, bolditalic
    family: str = 'helvetica'


@dataclass(frozen=True)
class SetColor:
    rgb: Tuple[int, int, int]
    target: str = 'text'  # text, fill, draw


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    align: str = 'left'  # left, center, right


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.2


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: bool = False
    stroke: bool = True
    line_width: float = 0.2


@dataclass(frozen=True)
class Image:
    source: Any  # reportlab ImageReader
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class NewPage:
    pass


class Layout:
    """
    Instruction list with a vertical cursor.

    Composers append instructions through the helper methods and move
    ``y`` down the page by hand. ``ensure_space`` starts a new page when
    the next block would cross ``bottom_limit``.
    """

    def __init__(self, margin: float = 15.0, bottom_limit: float = None,
                 top_after_break: float = None, on_new_page=None):
        self.margin = margin
        self.width = PAGE_WIDTH
        self.height = PAGE_HEIGHT
        self.content_width = PAGE_WIDTH - margin * 2
        self.bottom_limit = bottom_limit if bottom_limit is not None else PAGE_HEIGHT - 40
        self.top_after_break = top_after_break if top_after_break is not None else margin
        self.on_new_page = on_new_page
        self.instructions: List[Any] = []
        self.y = margin
        self.pages = 1
        self._font = None
        self._text_color = BLACK

    def font(self, size: float, style: str = 'normal'):
        self._font = SetFont(size, style)
        self.instructions.append(self._font)

    def color(self, rgb, target: str = 'text'):
        if target == 'text':
            self._text_color = tuple(rgb)
        self.instructions.append(SetColor(tuple(rgb), target))

    def text(self, x: float, y: float, text: Any, align: str = 'left'):
        self.instructions.append(Text(x, y, '' if text is None else str(text), align))

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float = 0.2):
        self.instructions.append(Line(x1, y1, x2, y2, width))

    def rect(self, x: float, y: float, width: float, height: float, fill: bool = False,
             stroke: bool = True, line_width: float = 0.2):
        self.instructions.append(Rect(x, y, width, height, fill, stroke, line_width))

    def image(self, source, x: float, y: float, width: float, height: float):
        self.instructions.append(Image(source, x, y, width, height))

    def new_page(self):
        """Break the page; the font and text colour in effect carry over."""
        font, text_color = self._font, self._text_color
        self.instructions.append(NewPage())
        self.pages += 1
        self.y = self.top_after_break
        if self.on_new_page:
            self.on_new_page(self)
        if font:
            self.font(font.size, font.style)
        self.color(text_color)

    def ensure_space(self, needed: float = 0.0):
        if self.y + needed > self.bottom_limit:
            self.new_page()

    def label_value(self, x: float, label: str, value: Any, offset: float, size: float = 10,
                    y: float = None):
        """Bold label followed by a normal-weight value."""
        y = self.y if y is None else y
        self.font(size, 'bold')
        self.text(x, y, label)
        self.font(size, 'normal')
        self.text(x + offset, y, value)
