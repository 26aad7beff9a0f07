"""
ports/renderer_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the map-rendering surface.

The state machine pushes four kinds of output across this boundary and never
reads anything back:
  render_regions — a new classified collection (choropleth fill by level)
  fit_bounds     — zoom/fit requests
  show_popup     — open or replace the single popup
  close_popup    — remove it

Current implementation: InMemoryMapRenderer (adapters/memory_renderer.py)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from wagemap.domain.models import ActivePopup, ClassifiedView, ZoomRequest


@runtime_checkable
class MapRendererPort(Protocol):
    """Contract for a surface that draws the county map."""

    def render_regions(self, view: ClassifiedView) -> None:
        """Replace the displayed collection with a newly classified view."""
        ...

    def fit_bounds(self, request: ZoomRequest) -> None:
        """Fit the viewport to the requested bounds."""
        ...

    def show_popup(self, popup: ActivePopup) -> None:
        """Show a popup, replacing any popup already open."""
        ...

    def close_popup(self) -> None:
        """Remove the open popup, if any."""
        ...
