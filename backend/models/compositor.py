"""Garment overlay compositor.

Draws a resized garment over a person photo. There is no body detection or
garment warping: the garment is scaled to 60% of the person's width, centred,
and drawn at a fixed torso offset over a translucent white patch that masks
the original clothing.
"""
import logging
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps

from errors import ProcessingError
from utils.geometry import PlacementGeometry, compute_placement
from utils.preprocess import decode_image

logger = logging.getLogger(__name__)


PATCH_COLOR = (255, 255, 255)
PATCH_OPACITY = 0.7
JPEG_QUALITY = 95
TRANSPARENT = (0, 0, 0, 0)


def resize_contain(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Fit an image inside ``size`` keeping its aspect ratio.

    The result is exactly ``size``, RGBA, with the image centred and the
    remaining area fully transparent.
    """
    return ImageOps.pad(
        img.convert("RGBA"),
        size,
        method=Image.LANCZOS,
        color=TRANSPARENT,
        centering=(0.5, 0.5),
    )


def make_patch(size: Tuple[int, int]) -> Image.Image:
    """Solid white RGBA rectangle at the patch opacity."""
    alpha = int(round(PATCH_OPACITY * 255))
    return Image.new("RGBA", size, PATCH_COLOR + (alpha,))


def paste_over(base: Image.Image, layer: Image.Image, position: Tuple[int, int]) -> None:
    """Source-over blend ``layer`` onto ``base`` in place at ``position``.

    Parts of the layer outside the base image are clipped.
    """
    x, y = position
    left = max(0, -x)
    top = max(0, -y)
    right = min(layer.width, base.width - x)
    bottom = min(layer.height, base.height - y)
    if right <= left or bottom <= top:
        return
    visible = layer.crop((left, top, right, bottom))
    base.alpha_composite(visible, dest=(x + left, y + top))


def composite_layers(person: Image.Image, garment: Image.Image) -> Tuple[Image.Image, PlacementGeometry]:
    """Compose patch and garment onto the person image.

    Args:
        person: Decoded person image (any mode)
        garment: Decoded garment image (any mode)

    Returns:
        (RGB composite, geometry used)

    Raises:
        ValueError: If the computed garment or patch box is empty
    """
    geometry = compute_placement(person.size, garment.size)
    patch_size = geometry.patch_size
    if min(geometry.dress_size) < 1 or min(patch_size) < 1:
        raise ValueError(
            f"Person image {person.size} is too small to place garment {garment.size}"
        )

    dress = resize_contain(garment, geometry.dress_size)
    patch = make_patch(patch_size)

    base = person.convert("RGBA")
    paste_over(base, patch, geometry.patch_position)
    paste_over(base, dress, geometry.dress_position)
    return base.convert("RGB"), geometry


def encode_jpeg(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=JPEG_QUALITY, progressive=True)
    return buf.getvalue()


def composite(person_image: bytes, garment_image: bytes) -> bytes:
    """Produce a try-on JPEG from person and garment image bytes.

    Args:
        person_image: Encoded person photo (JPEG, PNG or WebP)
        garment_image: Encoded garment photo (JPEG, PNG or WebP)

    Returns:
        Progressive JPEG bytes at quality 95

    Raises:
        ProcessingError: If either image cannot be decoded or any later stage fails
    """
    person = decode_image(person_image, "person")
    garment = decode_image(garment_image, "dress")
    try:
        result, geometry = composite_layers(person, garment)
        logger.debug(
            f"Composited person {person.size} with garment {garment.size}: {geometry.as_dict()}"
        )
        return encode_jpeg(result)
    except Exception as e:
        raise ProcessingError(f"Compositing failed: {e}", cause=e) from e


class VirtualTryOnProcessor:
    """Stateless wrapper around ``composite`` for injection into the API."""

    def process_images(self, person_bytes: bytes, dress_bytes: bytes) -> bytes:
        try:
            return composite(person_bytes, dress_bytes)
        except ProcessingError as e:
            logger.error(f"Processing error: {e.message}")
            raise
