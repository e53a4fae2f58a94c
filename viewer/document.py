# SPDX-License-Identifier: AGPL-3.0-only

"""
Server-side PDF view.

Pages are laid out the way the front-end scroll container shows them: stacked
vertically at a fixed scale, inset by the container padding, each followed by a
gap. Captures rasterize only the page regions under the selection.
"""

import base64
import io
import logging
import threading
from dataclasses import dataclass
from typing import List, Tuple

import fitz  # PyMuPDF
from PIL import Image

from common.config import config
from .geometry import Rect, output_size, visible_crop_box

logger = logging.getLogger(__name__)

BACKGROUND = "#f2f2f2"


@dataclass(frozen=True)
class PageBox:
    """Where a page sits in the container."""
    index: int
    rect: Rect

    def to_dict(self) -> dict:
        return {"page": self.index + 1, **self.rect.to_dict()}


def image_to_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    buffer.seek(0)
    encoded = base64.b64encode(buffer.read()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


class DocumentView:
    """A PDF rendered into the scroll-container layout."""

    def __init__(self, source, scale: float = None, padding: float = None, gap: float = None):
        """
        Args:
            source: path to a PDF file, or the PDF bytes
            scale: page scale (PDF points -> px)
            padding: container padding in px
            gap: space below every page in px
        """
        layout = config.get_layout_config()
        self.scale = scale if scale is not None else layout["scale"]
        self.padding = padding if padding is not None else layout["padding"]
        self.gap = gap if gap is not None else layout["gap"]

        # Parse as PDF whatever the file extension says
        if isinstance(source, (bytes, bytearray)):
            self._doc = fitz.open(stream=bytes(source), filetype="pdf")
        else:
            self._doc = fitz.open(source, filetype="pdf")
        if not self._doc.is_pdf or self._doc.page_count == 0:
            self._doc.close()
            raise ValueError("not a PDF document")
        self._lock = threading.Lock()
        self.pages = self._layout()

    def _layout(self) -> List[PageBox]:
        boxes = []
        y = self.padding
        for index, page in enumerate(self._doc):
            w = page.rect.width * self.scale
            h = page.rect.height * self.scale
            boxes.append(PageBox(index, Rect(self.padding, y, w, h)))
            y += h + self.gap
        return boxes

    @property
    def num_pages(self) -> int:
        return len(self.pages)

    @property
    def scroll_size(self) -> Tuple[float, float]:
        """Full scrollable content size (width, height)."""
        width = max((p.rect.w for p in self.pages), default=0)
        height = sum(p.rect.h + self.gap for p in self.pages)
        return width + 2 * self.padding, height + 2 * self.padding

    def pages_under(self, box: Rect) -> List[Tuple[PageBox, Rect]]:
        """Pages overlapping `box` together with the overlapping part."""
        hits = []
        for page_box in self.pages:
            overlap = box.intersection(page_box.rect)
            if overlap is not None:
                hits.append((page_box, overlap))
        return hits

    def _page_clip(self, page, page_box: PageBox, overlap: Rect) -> fitz.Rect:
        """Overlap in container px -> clip rectangle in PDF points."""
        origin = page.rect
        x0 = origin.x0 + (overlap.x - page_box.rect.x) / self.scale
        y0 = origin.y0 + (overlap.y - page_box.rect.y) / self.scale
        return fitz.Rect(x0, y0, x0 + overlap.w / self.scale, y0 + overlap.h / self.scale)

    def capture(self, rect: Rect, scroll_left: float, scroll_top: float,
                client_width: float, client_height: float, dpr: float = 1.0) -> str:
        """
        Capture the visible part of `rect` as a PNG data URL.

        The image is `dpr` times the selection size in px; anything outside
        the pages shows the container background.
        """
        dpr = dpr or 1.0
        box = visible_crop_box(rect, scroll_left, scroll_top, client_width, client_height)
        width, height = output_size(box, dpr)
        canvas = Image.new("RGB", (width, height), BACKGROUND)
        zoom = self.scale * dpr

        with self._lock:
            for page_box, overlap in self.pages_under(box):
                page = self._doc.load_page(page_box.index)
                clip = self._page_clip(page, page_box, overlap)
                pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), clip=clip, alpha=False)
                tile = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
                canvas.paste(tile, (int((overlap.x - box.x) * dpr), int((overlap.y - box.y) * dpr)))

        logger.debug("Captured %dx%d px from %s", width, height, box)
        return image_to_data_url(canvas)

    def selected_text(self, rect: Rect) -> str:
        """Text lying under `rect`, page by page."""
        parts = []
        with self._lock:
            for page_box, overlap in self.pages_under(rect):
                page = self._doc.load_page(page_box.index)
                text = page.get_text("text", clip=self._page_clip(page, page_box, overlap)).strip()
                if text:
                    parts.append(text)
        return "\n".join(parts)

    def to_dict(self) -> dict:
        width, height = self.scroll_size
        return {
            "num_pages": self.num_pages,
            "scroll_size": {"w": width, "h": height},
            "pages": [p.to_dict() for p in self.pages],
        }

    def close(self):
        with self._lock:
            self._doc.close()


def open_document(path: str) -> DocumentView:
    return DocumentView(path, **config.get_layout_config())
