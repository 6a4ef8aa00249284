import io

import pytest
from PIL import Image

from problem_solver.core.exceptions import ImageProcessingError
from problem_solver.services.image.cropper import CropRegion, crop_image

from conftest import make_image


def _size(jpeg_bytes):
    return Image.open(io.BytesIO(jpeg_bytes)).size


def test_pixel_region_is_scaled_to_native_resolution():
    # 800x600 image shown at 400x300
    cropped = crop_image(make_image((800, 600)), CropRegion(x=40, y=30, width=200, height=150), (400, 300))

    assert _size(cropped) == (400, 300)


def test_percent_region_uses_native_resolution():
    cropped = crop_image(make_image((1000, 500)), CropRegion.default(), (250, 125))

    assert _size(cropped) == (900, 450)


def test_crop_keeps_only_selected_region():
    image = Image.new("RGB", (200, 100), (255, 255, 255))
    image.paste((0, 0, 0), (100, 0, 200, 100))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")

    cropped = Image.open(io.BytesIO(
        crop_image(buffer.getvalue(), CropRegion(x=60, y=0, width=40, height=50), (100, 50))
    ))

    assert cropped.size == (80, 100)
    assert all(channel < 40 for channel in cropped.convert("RGB").getpixel((40, 50)))


def test_region_is_clamped_to_image():
    cropped = crop_image(make_image((100, 100)), CropRegion(x=50, y=50, width=100, height=100), (100, 100))

    assert _size(cropped) == (50, 50)


def test_empty_region_raises():
    with pytest.raises(ImageProcessingError):
        crop_image(make_image((100, 100)), CropRegion(x=10, y=10, width=0, height=10), (100, 100))


def test_unreadable_image_raises():
    with pytest.raises(ImageProcessingError, match="Failed to process image"):
        crop_image(b"nope", CropRegion.default(), (100, 100))
