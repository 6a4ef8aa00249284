"""
Image preprocessing for uploaded problem images

Uploaded images are bounded to a square box and re-encoded as JPEG before
they are stored or sent to the AI model.
"""
import io
import base64
from PIL import Image, ImageOps, UnidentifiedImageError
from loguru import logger

from problem_solver.core.exceptions import ImageProcessingError

JPEG_MIME_TYPE = "image/jpeg"


def to_data_uri(image_bytes: bytes, mime_type: str = JPEG_MIME_TYPE) -> str:
    """Encode image bytes as a base64 data URI"""
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('utf-8')}"


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """Encode a Pillow image as JPEG, flattening any alpha channel"""
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


class ImagePreprocessor:
    """
    Resize and re-encode images

    Images are scaled down to fit within ``max_dimension`` x ``max_dimension``
    keeping their aspect ratio. Smaller images keep their size.
    """

    def __init__(self, max_dimension: int = 800, jpeg_quality: int = 80):
        self.max_dimension = max_dimension
        self.jpeg_quality = jpeg_quality

    def process(self, image_bytes: bytes) -> bytes:
        """
        Resize image to the bounding box and encode as JPEG

        Args:
            image_bytes: Raw uploaded image in any format Pillow can read

        Returns:
            JPEG bytes

        Raises:
            ImageProcessingError: If the image cannot be decoded or encoded
        """
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                original_size = image.size
                image = ImageOps.exif_transpose(image)
                image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
                jpeg_bytes = encode_jpeg(image, self.jpeg_quality)
                new_size = image.size
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"❌ Image preprocessing failed: {e}")
            raise ImageProcessingError("Failed to process image") from e

        logger.info(
            f"📸 Image resized {original_size[0]}x{original_size[1]} -> "
            f"{new_size[0]}x{new_size[1]} ({len(jpeg_bytes)} bytes)"
        )
        return jpeg_bytes
