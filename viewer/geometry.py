# SPDX-License-Identifier: AGPL-3.0-only

"""
Selection geometry for the PDF scroll container.

All rectangles are in container (document) pixels: origin at the top-left of
the scrollable content, so they stay valid when the container scrolls.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from common.errors import SelectionError

OUT_OF_VIEW_MESSAGE = "Selection is outside the visible area. Scroll to the region and try again."


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def is_selectable(self, min_size: float) -> bool:
        return self.w >= min_size and self.h >= min_size

    def intersection(self, other: "Rect") -> Optional["Rect"]:
        """Overlapping area, or None when the rectangles do not overlap."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


def normalize_rect(a: Point, b: Point) -> Rect:
    """Rectangle spanned by two drag points, whichever direction the drag went."""
    return Rect(min(a.x, b.x), min(a.y, b.y), abs(a.x - b.x), abs(a.y - b.y))


def point_in_scroll_container(client_x: float, client_y: float, box_left: float, box_top: float,
                              scroll_left: float, scroll_top: float) -> Point:
    """Convert a pointer position in client coordinates to container coordinates."""
    return Point(client_x - box_left + scroll_left, client_y - box_top + scroll_top)


def visible_crop_box(rect: Rect, scroll_left: float, scroll_top: float,
                     client_width: float, client_height: float) -> Rect:
    """
    Part of `rect` currently visible in the viewport, in container coordinates.

    Raises SelectionError when no part of the selection is on screen.
    """
    vx = rect.x - scroll_left
    vy = rect.y - scroll_top

    if vx + rect.w < 0 or vy + rect.h < 0 or vx > client_width or vy > client_height:
        raise SelectionError(OUT_OF_VIEW_MESSAGE)

    viewport = Rect(scroll_left, scroll_top, client_width, client_height)
    visible = rect.intersection(viewport)
    if visible is None:
        # Touching an edge only
        raise SelectionError(OUT_OF_VIEW_MESSAGE)
    return visible


def output_size(box: Rect, dpr: float) -> Tuple[int, int]:
    """Pixel size of the captured image, never smaller than 1x1."""
    return max(1, int(box.w * dpr)), max(1, int(box.h * dpr))
