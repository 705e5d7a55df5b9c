# Test fixtures and configuration
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from app import create_app
from config import Settings


def encode(img: Image.Image, fmt: str, **kwargs) -> bytes:
    buf = BytesIO()
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def production_settings():
    return Settings(environment="production", debug=False)


@pytest.fixture
def development_settings():
    return Settings(environment="development", debug=False)


@pytest.fixture
def client(production_settings):
    """TestClient backed by the real compositor."""
    return TestClient(create_app(production_settings))


@pytest.fixture
def sample_person_image():
    """Portrait JPEG with a simple silhouette (300x450)."""
    img = Image.new('RGB', (300, 450), color='white')
    draw = ImageDraw.Draw(img)
    draw.ellipse([130, 30, 170, 70], fill='black')  # head
    draw.rectangle([120, 70, 180, 250], fill='darkgreen')  # torso
    draw.rectangle([125, 250, 145, 420], fill='black')  # left leg
    draw.rectangle([155, 250, 175, 420], fill='black')  # right leg
    return encode(img, 'JPEG', quality=90)


@pytest.fixture
def sample_garment_image():
    """Garment PNG with a transparent background (200x250)."""
    img = Image.new('RGBA', (200, 250), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.polygon([(60, 0), (140, 0), (190, 250), (10, 250)], fill=(200, 30, 60, 255))
    return encode(img, 'PNG')


@pytest.fixture
def sample_webp_garment():
    img = Image.new('RGB', (120, 160), color=(20, 40, 200))
    return encode(img, 'WEBP', lossless=True)
