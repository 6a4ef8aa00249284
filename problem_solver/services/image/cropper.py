"""
Crop a user-selected region out of an image

Crop regions are chosen on a scaled preview, so they are converted to the
image's native resolution before the region is cut out.
"""
import io
from dataclasses import dataclass
from typing import Literal, Tuple
from PIL import Image, UnidentifiedImageError
from loguru import logger

from problem_solver.core.exceptions import ImageProcessingError
from problem_solver.services.image.image_preprocessor import encode_jpeg


@dataclass(frozen=True)
class CropRegion:
    """Rectangle in display coordinates, in pixels or percent of the display size"""
    x: float
    y: float
    width: float
    height: float
    unit: Literal["px", "%"] = "px"

    @classmethod
    def default(cls) -> "CropRegion":
        """Centered region covering 90% of the image"""
        return cls(x=5, y=5, width=90, height=90, unit="%")

    def to_pixels(self, display_size: Tuple[int, int]) -> "CropRegion":
        """Resolve a percent region against the displayed image size"""
        if self.unit == "px":
            return self
        display_width, display_height = display_size
        return CropRegion(
            x=self.x * display_width / 100,
            y=self.y * display_height / 100,
            width=self.width * display_width / 100,
            height=self.height * display_height / 100,
        )

    def scale_to_native(
        self,
        display_size: Tuple[int, int],
        native_size: Tuple[int, int],
    ) -> Tuple[int, int, int, int]:
        """
        Convert to a (left, top, right, bottom) box in native image pixels

        The box is clamped to the image bounds.
        """
        region = self.to_pixels(display_size)
        scale_x = native_size[0] / display_size[0]
        scale_y = native_size[1] / display_size[1]

        left = max(0, round(region.x * scale_x))
        top = max(0, round(region.y * scale_y))
        right = min(native_size[0], left + round(region.width * scale_x))
        bottom = min(native_size[1], top + round(region.height * scale_y))
        return left, top, right, bottom


def crop_image(
    image_bytes: bytes,
    region: CropRegion,
    display_size: Tuple[int, int],
    jpeg_quality: int = 92,
) -> bytes:
    """
    Cut ``region`` out of the image and encode it as JPEG

    Args:
        image_bytes: Source image bytes
        region: Selected region in display coordinates
        display_size: (width, height) the image was shown at when selecting
        jpeg_quality: JPEG quality of the output

    Returns:
        JPEG bytes of the cropped region at native resolution

    Raises:
        ImageProcessingError: If the image is unreadable or the region is empty
    """
    if display_size[0] <= 0 or display_size[1] <= 0:
        raise ImageProcessingError("Display size must be positive")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            box = region.scale_to_native(display_size, image.size)
            if box[2] <= box[0] or box[3] <= box[1]:
                raise ImageProcessingError("Crop region is empty")
            cropped = image.crop(box)
            jpeg_bytes = encode_jpeg(cropped, jpeg_quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"❌ Failed to crop image: {e}")
        raise ImageProcessingError("Failed to process image") from e

    logger.debug(f"✂️ Cropped box {box} -> {cropped.size[0]}x{cropped.size[1]}")
    return jpeg_bytes
