"""
adapters/memory_renderer.py
──────────────────────────────────────────────────────────────────────────────
Implements MapRendererPort by recording what a map engine would be told.

Delivery layers without a live map (CLI, Streamlit tables, tests) read the
latest classified view, the last zoom request and the open popup from here.  A
real map engine adapter would forward the same calls to its API instead.

Thread safety:
  render_regions / show_popup can be called from a fetch worker thread, so
  every mutation happens under a lock.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from wagemap.domain.models import ActivePopup, ClassifiedView, ZoomRequest

logger = logging.getLogger(__name__)


class InMemoryMapRenderer:
    """Records boundary outputs.

    Attributes are read through the properties below; they always reflect the
    most recent call.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._view: Optional[ClassifiedView] = None
        self._popup: Optional[ActivePopup] = None
        self._last_zoom: Optional[ZoomRequest] = None
        self._zoom_count = 0
        self._render_count = 0

    # ── MapRendererPort implementation ─────────────────────────────────────

    def render_regions(self, view: ClassifiedView) -> None:
        with self._lock:
            self._view = view
            self._render_count += 1
        logger.debug("render_regions | regions=%d", len(view.regions))

    def fit_bounds(self, request: ZoomRequest) -> None:
        with self._lock:
            self._last_zoom = request
            self._zoom_count += 1
        logger.debug("fit_bounds | bounds=%s max_zoom=%s", request.bounds.as_pairs(), request.max_zoom)

    def show_popup(self, popup: ActivePopup) -> None:
        with self._lock:
            self._popup = popup
        logger.debug("show_popup | region=%s label=%s", popup.region_id, popup.content.label)

    def close_popup(self) -> None:
        with self._lock:
            self._popup = None

    # ── Read access ────────────────────────────────────────────────────────

    @property
    def view(self) -> Optional[ClassifiedView]:
        with self._lock:
            return self._view

    @property
    def popup(self) -> Optional[ActivePopup]:
        with self._lock:
            return self._popup

    @property
    def last_zoom(self) -> Optional[ZoomRequest]:
        with self._lock:
            return self._last_zoom

    @property
    def zoom_count(self) -> int:
        with self._lock:
            return self._zoom_count

    @property
    def render_count(self) -> int:
        with self._lock:
            return self._render_count
