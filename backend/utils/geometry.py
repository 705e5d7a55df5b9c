"""Placement geometry for the garment overlay.

All values are whole pixels derived from the decoded person image's size and
the garment image's aspect ratio.
"""

import math
from dataclasses import dataclass
from typing import Tuple


# Garment width as a fraction of the person's width
DRESS_WIDTH_RATIO = 0.6
# Top of the garment as a fraction of the person's height (torso offset)
DRESS_TOP_RATIO = 0.18

# Covering patch, relative to the garment box
PATCH_WIDTH_RATIO = 0.9
PATCH_HEIGHT_RATIO = 0.8
PATCH_INSET_RATIO = 0.05
PATCH_TOP_OFFSET_PX = 20


@dataclass(frozen=True)
class PlacementGeometry:
    """Rectangle at which the resized garment is drawn on the person image."""

    dress_width: int
    dress_height: int
    dress_x: int
    dress_y: int

    @property
    def dress_size(self) -> Tuple[int, int]:
        return (self.dress_width, self.dress_height)

    @property
    def dress_position(self) -> Tuple[int, int]:
        return (self.dress_x, self.dress_y)

    @property
    def patch_size(self) -> Tuple[int, int]:
        """Size of the translucent patch drawn under the garment."""
        return (
            math.floor(self.dress_width * PATCH_WIDTH_RATIO),
            math.floor(self.dress_height * PATCH_HEIGHT_RATIO),
        )

    @property
    def patch_position(self) -> Tuple[int, int]:
        return (
            self.dress_x + math.floor(self.dress_width * PATCH_INSET_RATIO),
            self.dress_y + PATCH_TOP_OFFSET_PX,
        )

    def as_dict(self) -> dict:
        return {
            "dress_width": self.dress_width,
            "dress_height": self.dress_height,
            "dress_x": self.dress_x,
            "dress_y": self.dress_y,
        }


def compute_placement(
    person_size: Tuple[int, int],
    garment_size: Tuple[int, int],
) -> PlacementGeometry:
    """Compute where and how large the garment is drawn.

    Args:
        person_size: (width, height) of the decoded person image in pixels
        garment_size: (width, height) of the decoded garment image in pixels

    Returns:
        PlacementGeometry with the garment centred horizontally at 60% of the
        person's width and placed at 18% of the person's height

    Raises:
        ValueError: If any dimension is not a positive integer
    """
    person_w, person_h = person_size
    garment_w, garment_h = garment_size
    if min(person_w, person_h, garment_w, garment_h) <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got person={person_size} garment={garment_size}"
        )

    dress_width = math.floor(person_w * DRESS_WIDTH_RATIO)
    dress_height = math.floor((garment_h / garment_w) * dress_width)
    dress_x = math.floor((person_w - dress_width) / 2)
    dress_y = math.floor(person_h * DRESS_TOP_RATIO)

    return PlacementGeometry(
        dress_width=dress_width,
        dress_height=dress_height,
        dress_x=dress_x,
        dress_y=dress_y,
    )
