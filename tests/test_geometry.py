# SPDX-License-Identifier: AGPL-3.0-only

import pytest

from common.errors import SelectionError
from viewer.geometry import (
    OUT_OF_VIEW_MESSAGE,
    Point,
    Rect,
    normalize_rect,
    output_size,
    point_in_scroll_container,
    visible_crop_box,
)


class TestNormalizeRect:

    @pytest.mark.parametrize("a, b", [
        (Point(10, 20), Point(50, 80)),
        (Point(50, 80), Point(10, 20)),
        (Point(10, 80), Point(50, 20)),
        (Point(50, 20), Point(10, 80)),
    ])
    def test_any_drag_direction(self, a, b):
        assert normalize_rect(a, b) == Rect(10, 20, 40, 60)

    def test_click_without_drag_is_empty(self):
        rect = normalize_rect(Point(5, 5), Point(5, 5))
        assert rect == Rect(5, 5, 0, 0)
        assert not rect.is_selectable(6)

    def test_selectable_threshold(self):
        assert Rect(0, 0, 6, 6).is_selectable(6)
        assert not Rect(0, 0, 5.9, 100).is_selectable(6)


def test_point_in_scroll_container():
    point = point_in_scroll_container(150, 120, box_left=100, box_top=50, scroll_left=30, scroll_top=400)
    assert point == Point(80, 470)


class TestVisibleCropBox:

    def test_fully_visible(self):
        rect = Rect(100, 500, 50, 40)
        assert visible_crop_box(rect, 0, 450, 800, 600) == rect

    def test_clipped_at_top_left(self):
        rect = Rect(10, 90, 100, 100)
        box = visible_crop_box(rect, scroll_left=40, scroll_top=100, client_width=800, client_height=600)
        assert box == Rect(40, 100, 70, 90)

    def test_clipped_at_bottom_right(self):
        rect = Rect(700, 500, 200, 200)
        box = visible_crop_box(rect, scroll_left=0, scroll_top=0, client_width=800, client_height=600)
        assert box == Rect(700, 500, 100, 100)

    @pytest.mark.parametrize("rect", [
        Rect(0, 0, 50, 50),        # scrolled past
        Rect(0, 2000, 50, 50),     # below the viewport
        Rect(900, 150, 50, 50),    # right of the viewport
    ])
    def test_out_of_view(self, rect):
        with pytest.raises(SelectionError) as exc:
            visible_crop_box(rect, scroll_left=0, scroll_top=100, client_width=800, client_height=600)
        assert exc.value.message == OUT_OF_VIEW_MESSAGE
        assert exc.value.status_code == 400


class TestOutputSize:

    def test_scaled_by_device_pixel_ratio(self):
        assert output_size(Rect(0, 0, 100.6, 40.2), 2) == (201, 80)

    def test_never_empty(self):
        assert output_size(Rect(0, 0, 0.2, 0.2), 1) == (1, 1)
