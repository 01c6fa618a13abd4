from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from .peaks import Peak


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Parent-image rectangle matched by the template.

    ``(x, y)`` is the 0-based column/row of the top-left template pixel. ``width`` and
    ``height`` span pixel centres, so they are one less than the template size and
    ``(x + width, y + height)`` is the bottom-right template pixel. Boxes are not
    clipped and may start at negative coordinates for partial overlaps.
    """

    x: int
    y: int
    width: int
    height: int

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def corners(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        Inclusive top-left and bottom-right pixel, in the order ``cv2.rectangle`` expects.
        """
        return (self.x, self.y), (self.x + self.width, self.y + self.height)

    def to_slices(self) -> Tuple[slice, slice]:
        """
        Row and column slices cropping the covered region out of the parent image.

        Parts of the box outside the image are dropped.
        """
        return (
            slice(max(self.y, 0), max(self.y + self.height + 1, 0)),
            slice(max(self.x, 0), max(self.x + self.width + 1, 0)),
        )


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def map_to_box(peak: Peak, template_height: int, template_width: int) -> BoundingBox:
    """
    Convert a full-correlation peak into the parent region the template covers there.
    """
    # Offset arithmetic is 1-based; surface indices are 0-based.
    ypeak = peak.row + 1
    xpeak = peak.col + 1
    xoffset = xpeak - template_width
    yoffset = ypeak - template_height

    xbegin = round_half_away(xoffset + 1)
    xend = round_half_away(xoffset + template_width)
    ybegin = round_half_away(yoffset + 1)
    yend = round_half_away(yoffset + template_height)

    return BoundingBox(x=xbegin - 1, y=ybegin - 1, width=xend - xbegin, height=yend - ybegin)


def map_to_boxes(
    peaks: Iterable[Peak],
    template_height: int,
    template_width: int,
) -> Tuple[BoundingBox, ...]:
    """
    Map every peak to a bounding box, preserving order.
    """
    for name, value in (("template_height", template_height), ("template_width", template_width)):
        if isinstance(value, bool) or int(value) != value or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return tuple(map_to_box(peak, int(template_height), int(template_width)) for peak in peaks)


__all__ = ["BoundingBox", "map_to_box", "map_to_boxes", "round_half_away"]
