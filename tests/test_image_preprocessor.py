import io

import pytest
from PIL import Image

from problem_solver.core.exceptions import ImageProcessingError
from problem_solver.services.image.image_preprocessor import ImagePreprocessor, to_data_uri

from conftest import make_image


def _open(jpeg_bytes):
    image = Image.open(io.BytesIO(jpeg_bytes))
    image.load()
    return image


def test_large_image_fits_bounding_box_keeping_aspect():
    result = _open(ImagePreprocessor(max_dimension=800).process(make_image((1600, 1200))))

    assert result.format == "JPEG"
    assert result.size == (800, 600)


def test_tall_image_limited_by_height():
    result = _open(ImagePreprocessor(max_dimension=800).process(make_image((500, 2000))))

    assert result.size == (200, 800)


def test_small_image_is_not_upscaled():
    result = _open(ImagePreprocessor(max_dimension=800).process(make_image((320, 240))))

    assert result.size == (320, 240)


def test_transparent_png_is_flattened_to_jpeg():
    png = make_image((100, 100), mode="RGBA", color=(0, 0, 255, 128))

    result = _open(ImagePreprocessor().process(png))

    assert result.mode == "RGB"


def test_invalid_bytes_raise_processing_error():
    with pytest.raises(ImageProcessingError, match="Failed to process image"):
        ImagePreprocessor().process(b"definitely not an image")


def test_data_uri():
    assert to_data_uri(b"\xff\xd8\xff") == "data:image/jpeg;base64,/9j/"
