"""
Image loading for PDF composition.

Images are fetched over HTTP and decoded with Pillow. Any failure yields a
grey placeholder so a broken photo link never fails a document.
"""

import io
import logging
from typing import Tuple

import requests
from PIL import Image as PILImage, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

logger = logging.getLogger(__name__)

PLACEHOLDER_SIZE = (400, 300)
PLACEHOLDER_COLOR = (220, 220, 220)
IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'webp')


class LoadedImage:
    """A decoded image ready for the renderer."""

    def __init__(self, reader: ImageReader, width: int, height: int, placeholder: bool = False):
        self.reader = reader
        self.width = width
        self.height = height
        self.placeholder = placeholder


def placeholder_image() -> LoadedImage:
    image = PILImage.new('RGB', PLACEHOLDER_SIZE, PLACEHOLDER_COLOR)
    return LoadedImage(ImageReader(image), *PLACEHOLDER_SIZE, placeholder=True)


def is_image_file(filename: str) -> bool:
    return '.' in (filename or '') and filename.rsplit('.', 1)[1].lower() in IMAGE_EXTENSIONS


def load_image(url: str, timeout: int = 10) -> LoadedImage:
    """Fetch and decode an image, or return the placeholder."""
    if not url:
        return placeholder_image()
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        image = PILImage.open(io.BytesIO(response.content))
        image.load()
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        return LoadedImage(ImageReader(image), image.width, image.height)
    except (requests.RequestException, UnidentifiedImageError, OSError) as e:
        logger.warning(f"Failed to load image {url}: {e}")
        return placeholder_image()


def fit_image(width: float, height: float, max_width: float, max_height: float) -> Tuple[float, float]:
    """Scale (width, height) to fit inside the box, preserving aspect ratio."""
    if not width or not height:
        return 0.0, 0.0
    scale = min(max_width / width, max_height / height)
    return width * scale, height * scale
