# imaging.py
import logging
from io import BytesIO
from typing import BinaryIO, Union

from PIL import Image as PILImage, UnidentifiedImageError

from config import PALETTE_SIZE, COLOR_SHARE_THRESHOLD
from models import ImageMetadata

logger = logging.getLogger(__name__)

# Downscale before quantizing; colour shares barely change and large photos stay fast.
THUMBNAIL_SIZE = (256, 256)


class MetadataUnavailableError(Exception):
    """Raised when an uploaded file cannot be decoded as an image."""


def count_predominant_colors(pil_image: PILImage.Image,
                             palette_size: int = PALETTE_SIZE,
                             min_share: float = COLOR_SHARE_THRESHOLD) -> int:
    """
    Count the colours that make up a meaningful share of the image.

    The image is reduced to `palette_size` colours; a palette entry counts
    when it covers at least `min_share` of the pixels.
    """
    thumbnail = pil_image.convert("RGB")
    thumbnail.thumbnail(THUMBNAIL_SIZE)

    quantized = thumbnail.quantize(colors=palette_size)
    total_pixels = quantized.width * quantized.height
    if total_pixels == 0:
        return 0

    color_histogram = quantized.getcolors(maxcolors=palette_size) or []
    return sum(1 for pixel_count, _index in color_histogram
               if pixel_count / total_pixels >= min_share)


def extract_metadata(source: Union[bytes, BinaryIO]) -> ImageMetadata:
    """
    Read width, height, file size and colour count from an encoded image.

    Parameters:
        source: raw image bytes, or a binary stream (e.g. a werkzeug FileStorage stream).

    Raises:
        MetadataUnavailableError if the data is empty or not a readable image.
    """
    raw_bytes = source if isinstance(source, bytes) else source.read()
    if not raw_bytes:
        raise MetadataUnavailableError("empty upload")

    try:
        with PILImage.open(BytesIO(raw_bytes)) as pil_image:
            pil_image.load()
            width, height = pil_image.size
            color_count = count_predominant_colors(pil_image)
    except (UnidentifiedImageError, OSError) as exc:
        raise MetadataUnavailableError(f"could not decode image: {exc}") from exc

    metadata = ImageMetadata(
        width=width,
        height=height,
        file_size_kb=len(raw_bytes) / 1024,
        color_count=color_count,
    )
    logger.debug("Extracted image metadata: %s", metadata)
    return metadata
