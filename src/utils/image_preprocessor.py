"""Image preparation for document field extraction.

Phone photos of ID cards and marksheets often arrive at 12+ megapixels,
rotated via EXIF, or with an alpha channel.  Vision models read a 2048 px
image just as well and the request is far smaller, so uploads are
normalised before they are sent:

    1. decode        -- reject anything Pillow cannot open
    2. exif rotate   -- apply the camera orientation tag
    3. downscale     -- largest side capped at ``max_dim`` (aspect preserved)
    4. re-encode     -- JPEG for photos, PNG when the source was PNG

Images already within limits with no orientation tag are passed through
byte-for-byte.
"""

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from src.utils.errors import InvalidImageError

# EXIF tag 0x0112 = Orientation. 1 means "already upright".
_EXIF_ORIENTATION = 0x0112


def detect_media_type(image_bytes: bytes) -> str:
    """Detect the MIME type of an image from its magic bytes.

    PNG starts with: 89 50 4E 47 0D 0A 1A 0A
    WEBP starts with: RIFF....WEBP
    JPEG starts with: FF D8
    """
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:2] == b"\xff\xd8":
        return "image/jpeg"
    return "image/jpeg"  # most phone cameras produce JPEG


class ImagePreprocessor:
    """Normalises uploaded document images before vision extraction."""

    def __init__(self, max_dim: int = 2048, jpeg_quality: int = 90) -> None:
        self._max_dim = max_dim
        self._jpeg_quality = jpeg_quality

    def decode(self, image_bytes: bytes) -> Image.Image:
        """Open *image_bytes* with Pillow, raising InvalidImageError on failure."""
        if not image_bytes:
            raise InvalidImageError("No image data provided")
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidImageError(f"Could not decode image: {exc}") from exc
        return image

    def prepare_for_extraction(self, image_bytes: bytes) -> bytes:
        """Return image bytes ready to send to a vision model.

        Args:
            image_bytes: Raw uploaded file bytes (JPEG, PNG, WEBP).

        Returns:
            The original bytes when no change is needed, otherwise the
            rotated/downscaled image re-encoded as JPEG (or PNG).
        """
        image = self.decode(image_bytes)
        source_format = image.format or "JPEG"

        orientation = image.getexif().get(_EXIF_ORIENTATION, 1)
        if max(image.size) <= self._max_dim and orientation == 1:
            return image_bytes

        image = ImageOps.exif_transpose(image)
        image = self.resize_for_extraction(image)
        return self._encode(image, source_format)

    def resize_for_extraction(self, image: Image.Image) -> Image.Image:
        """Downscale so the largest dimension is at most ``max_dim``.

        Small images are never upscaled; the model reads printed document
        text fine at native resolution.
        """
        width, height = image.size
        largest = max(width, height)
        if largest <= self._max_dim:
            return image

        scale = self._max_dim / largest
        new_width = max(1, int(width * scale))
        new_height = max(1, int(height * scale))
        return image.resize((new_width, new_height), Image.LANCZOS)

    def _encode(self, image: Image.Image, source_format: str) -> bytes:
        buffer = io.BytesIO()
        if source_format == "PNG":
            image.save(buffer, format="PNG", optimize=True)
        else:
            # JPEG cannot store alpha or palette images.
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            image.save(buffer, format="JPEG", quality=self._jpeg_quality)
        return buffer.getvalue()

