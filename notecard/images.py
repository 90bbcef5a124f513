"""Avatar and thumbnail preparation: download, square crop, circular mask."""

import math
from io import BytesIO
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from .config import settings
from .errors import ImageFetchError, InvalidImageError
from .utils import get_logger, http_retry

logger = get_logger(__name__)

USER_AGENT = "notecard/0.1 (+preview card renderer)"


def _check_size(img: Image.Image) -> tuple[int, int]:
    width, height = img.size
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Image must have positive dimensions, got {width}x{height}")
    return width, height


def crop_to_square(img: Image.Image) -> Image.Image:
    """Return the centered ``min(w, h)`` square of ``img`` as a new image."""
    width, height = _check_size(img)
    size = min(width, height)
    left = (width - size) // 2
    top = (height - size) // 2
    return img.crop((left, top, left + size, top + size))


def _circle_mask(width: int, height: int) -> Image.Image:
    """L-mode mask, opaque where a pixel center lies strictly inside the circle."""
    radius = min(width, height) / 2
    cx, cy = width / 2, height / 2
    mask = Image.new("L", (width, height), 0)
    mask.putdata([
        255 if math.hypot(x + 0.5 - cx, y + 0.5 - cy) < radius else 0
        for y in range(height)
        for x in range(width)
    ])
    return mask


def round_image(img: Image.Image) -> Image.Image:
    """
    Mask ``img`` with a centered circle of diameter ``min(w, h)``.

    Pixels outside the circle become fully transparent; the result is RGBA
    with the same size as the input.
    """
    width, height = _check_size(img)
    transparent = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    return Image.composite(img.convert("RGBA"), transparent, _circle_mask(width, height))


def fetch_image_from_url(url: str, timeout: Optional[float] = None) -> Image.Image:
    """
    Download and decode an image.

    Connection errors and timeouts are retried (IMAGE_FETCH_ATTEMPTS).

    Raises:
        ImageFetchError: on HTTP errors, exhausted retries or undecodable data
    """
    timeout = settings.image_fetch_timeout_seconds if timeout is None else timeout

    @http_retry(attempts=settings.image_fetch_attempts)
    def _get() -> requests.Response:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
        return response

    try:
        response = _get()
    except requests.RequestException as e:
        raise ImageFetchError(f"Failed to download {url}: {e}") from e

    try:
        img = Image.open(BytesIO(response.content))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageFetchError(f"Cannot decode image from {url}: {e}") from e

    logger.debug(f"Fetched image {url} ({img.width}x{img.height})")
    return img


def prepare_avatar(img: Image.Image, size: int) -> Image.Image:
    """Crop, resize and round an avatar for the card header."""
    square = crop_to_square(img)
    if square.width != size:
        square = square.resize((size, size), Image.Resampling.LANCZOS)
    return round_image(square)
