# =============================================================================
# WordChef Client - Image Decoding
# =============================================================================
# Turns base64 image payloads from the image and bulk_image endpoints into
# displayable Pillow bitmaps. Two tolerance modes are kept deliberately
# separate:
#   - strict:       one bad payload fails the whole call (single image fetch)
#   - skip invalid: bad entries are logged and dropped (bulk image fetch)
# =============================================================================

import base64
import binascii
import io
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from PIL import Image, UnidentifiedImageError

from wordchef.errors import DecodeError

logger = logging.getLogger(__name__)

# Modes the PNG writer stores without conversion
_PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


@dataclass
class ImageResult:
    """
    A decoded image for one word.

    Attributes:
        word:  The word (or label) the image belongs to.
        data:  Raw image file bytes as sent by the server.
        image: The loaded Pillow bitmap, ready for display.
    """

    word: str
    data: bytes
    image: Image.Image

    @property
    def size(self):
        return self.image.size

    def save(self, directory: str) -> str:
        """
        Write the bitmap to ``<directory>/<word>.png``.

        Args:
            directory: Target directory, created if missing.

        Returns:
            The path of the written file.
        """
        os.makedirs(directory, exist_ok=True)
        safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in self.word)
        path = os.path.join(directory, f"{safe_name or 'image'}.png")
        image = self.image
        if image.mode not in _PNG_MODES:
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        image.save(path, format="PNG")
        return path


def decode_image_strict(image_base64: str, word: str) -> ImageResult:
    """
    Decode one base64 image payload, failing on any problem.

    Args:
        image_base64: Base64 text of an image file (PNG, JPEG, ...).
        word:         Word or label to attach to the result.

    Returns:
        ImageResult with the fully loaded bitmap.

    Raises:
        DecodeError: If the text is not valid base64 or not a readable image.
    """
    try:
        data = base64.b64decode(image_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid image data for '{word}'") from exc

    if not data:
        raise DecodeError(f"Empty image data for '{word}'")

    try:
        image = Image.open(io.BytesIO(data))
        # Force the pixel data to load now so truncated files fail here
        image.load()
    except (Image.DecompressionBombError, UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Unreadable image for '{word}'") from exc

    return ImageResult(word=word, data=data, image=image)


def decode_images_skip_invalid(
    images: Dict[str, str],
    requested: Optional[Iterable[str]] = None,
) -> Dict[str, ImageResult]:
    """
    Decode a word -> base64 mapping, dropping entries that fail.

    Entries that fail to decode are logged and left out; they never abort
    the batch. When ``requested`` is given, keys outside it are discarded so
    the result only ever describes words the caller asked for.

    Args:
        images:    Mapping of word to base64 image text.
        requested: Words that were sent in the request, or None for no filter.

    Returns:
        Mapping of word to ImageResult for every entry that decoded.
    """
    allowed = set(requested) if requested is not None else None
    decoded: Dict[str, ImageResult] = {}

    for word, image_base64 in images.items():
        if allowed is not None and word not in allowed:
            logger.warning("Ignoring image for unrequested word: %s", word)
            continue
        try:
            decoded[word] = decode_image_strict(image_base64, word)
        except DecodeError as exc:
            logger.warning("Failed to decode image for word: %s (%s)", word, exc)

    logger.debug("Decoded %d/%d bulk images", len(decoded), len(images))
    return decoded
