"""Tests for the garment overlay compositor."""

from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from errors import ProcessingError
from models.compositor import (
    VirtualTryOnProcessor,
    composite,
    make_patch,
    paste_over,
    resize_contain,
)


def encode(img: Image.Image, fmt: str = 'PNG') -> bytes:
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def decode_rgb(data: bytes) -> np.ndarray:
    return np.asarray(Image.open(BytesIO(data)).convert('RGB')).astype(int)


@pytest.fixture
def black_person():
    """Solid black 500x1000 person image."""
    return encode(Image.new('RGB', (500, 1000), color=(0, 0, 0)))


# Geometry for a 500x1000 person with a square garment:
#   dress 300x300 at (100, 180); patch 270x240 at (115, 200)


# ============================================================================
# LAYER HELPERS
# ============================================================================

def test_resize_contain_exact_box():
    garment = Image.new('RGB', (400, 200), color=(255, 0, 0))
    out = resize_contain(garment, (60, 60))
    assert out.size == (60, 60)
    assert out.mode == 'RGBA'
    # Letterboxed: top and bottom bands are transparent
    assert out.getpixel((30, 0))[3] == 0
    assert out.getpixel((30, 59))[3] == 0
    assert out.getpixel((30, 30)) == (255, 0, 0, 255)


def test_resize_contain_matching_ratio_fills_box():
    garment = Image.new('RGB', (80, 100), color=(0, 255, 0))
    out = resize_contain(garment, (600, 750))
    assert out.size == (600, 750)
    assert out.getpixel((0, 0))[3] == 255
    assert out.getpixel((599, 749))[3] == 255


def test_make_patch_is_translucent_white():
    patch = make_patch((10, 5))
    assert patch.size == (10, 5)
    r, g, b, a = patch.getpixel((0, 0))
    assert (r, g, b) == (255, 255, 255)
    assert abs(a / 255 - 0.7) < 0.01


def test_paste_over_clips_outside_layer():
    base = Image.new('RGBA', (50, 50), color=(0, 0, 0, 255))
    layer = Image.new('RGBA', (40, 40), color=(255, 255, 255, 255))
    paste_over(base, layer, (30, 30))
    assert base.size == (50, 50)
    assert base.getpixel((45, 45)) == (255, 255, 255, 255)
    assert base.getpixel((10, 10)) == (0, 0, 0, 255)


def test_paste_over_ignores_fully_outside_layer():
    base = Image.new('RGBA', (20, 20), color=(0, 0, 0, 255))
    layer = Image.new('RGBA', (5, 5), color=(255, 255, 255, 255))
    paste_over(base, layer, (25, 0))
    assert np.asarray(base)[:, :, :3].max() == 0


# ============================================================================
# COMPOSITE
# ============================================================================

def test_composite_returns_progressive_jpeg(black_person):
    garment = encode(Image.new('RGB', (100, 100), color=(255, 0, 0)))
    result = Image.open(BytesIO(composite(black_person, garment)))
    assert result.format == 'JPEG'
    assert result.size == (500, 1000)
    assert result.info.get('progressive') == 1


def test_composite_is_deterministic(black_person):
    garment = encode(Image.new('RGBA', (120, 90), color=(10, 200, 30, 180)))
    assert composite(black_person, garment) == composite(black_person, garment)


def test_patch_visible_under_transparent_garment(black_person):
    garment = encode(Image.new('RGBA', (100, 100), color=(0, 0, 0, 0)))
    pixels = decode_rgb(composite(black_person, garment))

    # Inside the patch: white at 70% over black
    patch_value = pixels[320, 250]
    assert np.all(np.abs(patch_value - 178) <= 8)
    # Above the patch but inside the garment box, nothing drawn
    assert pixels[185, 250].max() <= 8
    # Outside every layer the person is untouched
    assert pixels[50, 20].max() <= 8
    assert pixels[900, 250].max() <= 8


def test_opaque_garment_covers_patch(black_person):
    garment = encode(Image.new('RGB', (100, 100), color=(255, 0, 0)))
    pixels = decode_rgb(composite(black_person, garment))

    r, g, b = pixels[330, 250]
    assert r >= 240 and g <= 15 and b <= 15
    # Garment box edge columns
    assert pixels[330, 105][0] >= 200
    assert pixels[330, 94].max() <= 20


def test_tall_garment_is_clipped_at_bottom():
    person = encode(Image.new('RGB', (200, 200), color=(0, 0, 0)))
    garment = encode(Image.new('RGB', (10, 100), color=(0, 0, 255)))
    result = Image.open(BytesIO(composite(person, garment)))
    assert result.size == (200, 200)


def test_person_with_alpha_channel(sample_garment_image):
    person = encode(Image.new('RGBA', (240, 320), color=(30, 30, 30, 128)))
    result = Image.open(BytesIO(composite(person, sample_garment_image)))
    assert result.mode == 'RGB'
    assert result.size == (240, 320)


def test_corrupt_person_raises_processing_error(sample_garment_image):
    with pytest.raises(ProcessingError) as exc_info:
        composite(b'definitely not an image', sample_garment_image)
    assert 'person' in exc_info.value.message
    assert exc_info.value.cause is not None
    assert exc_info.value.__cause__ is exc_info.value.cause


def test_corrupt_garment_raises_processing_error(sample_person_image):
    with pytest.raises(ProcessingError) as exc_info:
        composite(sample_person_image, b'\xff\xd8\xff')
    assert 'dress' in exc_info.value.message


def test_person_too_small_raises_processing_error(sample_garment_image):
    tiny = encode(Image.new('RGB', (1, 1)))
    with pytest.raises(ProcessingError):
        composite(tiny, sample_garment_image)


def test_processor_delegates_to_composite(sample_person_image, sample_garment_image):
    processor = VirtualTryOnProcessor()
    out = processor.process_images(sample_person_image, sample_garment_image)
    assert out == composite(sample_person_image, sample_garment_image)


def test_processor_propagates_processing_error(sample_garment_image):
    with pytest.raises(ProcessingError):
        VirtualTryOnProcessor().process_images(b'', sample_garment_image)
