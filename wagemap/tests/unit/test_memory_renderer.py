"""
tests/unit/test_memory_renderer.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for InMemoryMapRenderer.
"""
from __future__ import annotations

from wagemap.adapters.memory_renderer import InMemoryMapRenderer
from wagemap.domain.models import BoundingBox, ZoomRequest
from wagemap.ports.renderer_port import MapRendererPort
from wagemap.services.wage_classifier import unclassified_view


def _zoom(max_zoom=None):
    return ZoomRequest(
        bounds=BoundingBox(min_lng=-1.0, min_lat=2.0, max_lng=3.0, max_lat=5.0),
        max_zoom=max_zoom,
    )


class TestInMemoryMapRenderer:
    def test_satisfies_port(self):
        assert isinstance(InMemoryMapRenderer(), MapRendererPort)

    def test_starts_empty(self):
        renderer = InMemoryMapRenderer()
        assert renderer.view is None
        assert renderer.popup is None
        assert renderer.last_zoom is None
        assert renderer.zoom_count == 0
        assert renderer.render_count == 0

    def test_keeps_only_last_zoom(self):
        renderer = InMemoryMapRenderer()
        renderer.fit_bounds(_zoom())
        second = _zoom(max_zoom=8)
        renderer.fit_bounds(second)
        assert renderer.last_zoom == second
        assert renderer.zoom_count == 2
        assert not hasattr(renderer, "zooms")

    def test_render_replaces_view(self, regions):
        renderer = InMemoryMapRenderer()
        first = unclassified_view(regions)
        second = unclassified_view(regions)
        renderer.render_regions(first)
        renderer.render_regions(second)
        assert renderer.view is second
        assert renderer.render_count == 2

    def test_close_without_popup(self):
        renderer = InMemoryMapRenderer()
        renderer.close_popup()
        assert renderer.popup is None
