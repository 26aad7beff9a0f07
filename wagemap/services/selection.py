"""
services/selection.py
──────────────────────────────────────────────────────────────────────────────
SelectionStateMachine: the session object that keeps occupation, salary,
location selection and the popup in step with the classified map.

Events → methods:
  SetState(abbr)          set_state()       zoom to a state (or the country)
  SetCounty(id)           set_county()      zoom to a county, popup at its centre
  SetOccupation(key)      set_occupation()  async wage-table fetch + reclassify
  SetSalary(text)         set_salary()      parse, reclassify with latest table
  ToggleCollapse()        toggle_collapse() panel flag only
  ToggleLottery()         toggle_lottery()  rebuild the open popup
  RegionClicked(id, pt)   region_clicked()  popup at the clicked point

Ordering of wage-table fetches:
  Every set_occupation() takes the next value of a monotonically increasing
  token.  When a fetch resolves, the worker compares its token with the
  latest issued token under the session lock; anything older is dropped
  whole (FetchOutcome.STALE).  A failed fetch leaves the previous
  classification on screen (FetchOutcome.FAILED) and is never retried.

Popup invariants:
  • at most one popup is open
  • after every reclassification or lottery toggle the popup region is
    resolved against the current view and rebuilt at the same anchor; if the
    region is gone the popup closes
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from wagemap.config.settings import Settings
from wagemap.domain.constants import USA_BOUNDS
from wagemap.domain.exceptions import InvalidSalaryError, WageMapError
from wagemap.domain.models import (
    ActivePopup,
    BoundingBox,
    ClassifiedView,
    FetchOutcome,
    LngLat,
    RegionCollection,
    SelectionState,
    WageTable,
    ZoomRequest,
)
from wagemap.ports.data_port import WageTablePort
from wagemap.ports.renderer_port import MapRendererPort
from wagemap.services.formatting import parse_currency
from wagemap.services.geometry import centroid_approx, compute_bounds, union_bounds
from wagemap.services.location_index import LocationIndex, build_location_index
from wagemap.services.popup import build_popup_content
from wagemap.services.wage_classifier import classify_all, unclassified_view

logger = logging.getLogger(__name__)


class SelectionStateMachine:
    """Interactive session state for one map.

    Inject via services/container.py — do not instantiate directly in
    application code.

    Args:
        regions:     Region collection, loaded once.
        wage_source: Any object satisfying WageTablePort.
        renderer:    Any object satisfying MapRendererPort.
        settings:    Shared application settings.
        executor:    Runs wage-table fetches.  Defaults to a private
                     ThreadPoolExecutor that close() shuts down.
    """

    def __init__(
        self,
        regions: RegionCollection,
        wage_source: WageTablePort,
        renderer: MapRendererPort,
        settings: Settings,
        executor: Optional[Executor] = None,
    ) -> None:
        self._regions = regions
        self._index = build_location_index(regions)
        self._wage_source = wage_source
        self._renderer = renderer
        self._settings = settings

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.fetch_workers,
            thread_name_prefix="wage-fetch",
        )
        self._lock = threading.RLock()

        self._state = SelectionState(
            occupation_code=settings.default_occupation,
            salary=settings.default_salary,
        )
        self._view: ClassifiedView = unclassified_view(regions)
        self._latest_table: Optional[WageTable] = None
        self._issued_token = 0

        self._renderer.render_regions(self._view)
        logger.debug(
            "SelectionStateMachine init | regions=%d states=%d",
            len(regions),
            len(self._index.state_abbrevs),
        )

    # ── Read access ────────────────────────────────────────────────────────

    @property
    def state(self) -> SelectionState:
        """A snapshot copy of the selection state."""
        with self._lock:
            return self._state.model_copy()

    @property
    def view(self) -> ClassifiedView:
        with self._lock:
            return self._view

    @property
    def index(self) -> LocationIndex:
        return self._index

    @property
    def latest_table(self) -> Optional[WageTable]:
        with self._lock:
            return self._latest_table

    # ── Location events ────────────────────────────────────────────────────

    def set_state(self, state_abbr: str) -> Optional[ZoomRequest]:
        """Select a state ("" for the whole country).

        Returns:
            The zoom request sent to the renderer, or None when the state
            has no regions with geometry.
        """
        abbr = (state_abbr or "").strip().upper()
        with self._lock:
            self._state.selected_state = abbr
            self._state.selected_county_id = ""
            self._state.county_options = self._index.counties_in(abbr) if abbr else ()
            self._close_popup()

            if abbr:
                bounds = union_bounds(r.geometry for r in self._index.regions_in(abbr))
            else:
                bounds = BoundingBox(
                    min_lng=USA_BOUNDS[0],
                    min_lat=USA_BOUNDS[1],
                    max_lng=USA_BOUNDS[2],
                    max_lat=USA_BOUNDS[3],
                )
            return self._fit(bounds)

    def set_county(self, region_id: str) -> Optional[ActivePopup]:
        """Select a county ("" to deselect).

        Zooms to the county, then opens its popup at the centre of its
        bounding box.

        Returns:
            The opened popup, or None.
        """
        region_id = (region_id or "").strip()
        with self._lock:
            if not region_id:
                self._state.selected_county_id = ""
                self._close_popup()
                return None

            region = self._index.by_id.get(region_id)
            if region is None:
                logger.warning("set_county: unknown region id %r", region_id)
                return None

            self._state.selected_county_id = region_id
            bounds = compute_bounds(region.geometry)
            self._fit(bounds, max_zoom=self._settings.county_max_zoom)
            anchor = centroid_approx(bounds)
            if anchor is None:
                self._close_popup()
                return None
            return self._open_popup(region.id, anchor)

    def region_clicked(self, region_id: str, point: LngLat) -> Optional[ActivePopup]:
        """Open the popup for a clicked region at the click point."""
        with self._lock:
            return self._open_popup(region_id, point)

    # ── Classification events ──────────────────────────────────────────────

    def set_occupation(self, occupation_key: str) -> Future:
        """Select an occupation and fetch its wage table asynchronously.

        Args:
            occupation_key: Parent key of the occupation.

        Returns:
            Future resolving to a FetchOutcome once the response has been
            applied, dropped as stale, or has failed.
        """
        occupation_key = occupation_key.strip()
        with self._lock:
            self._state.occupation_code = occupation_key
            self._issued_token += 1
            token = self._issued_token
        logger.info("Wage table requested | occupation=%s token=%d", occupation_key, token)
        return self._executor.submit(self._fetch_and_apply, token, occupation_key)

    def set_salary(self, raw: object) -> bool:
        """Set the annual salary from user text.

        Unparseable text is ignored.  An empty value clears the salary; the
        map then keeps its current levels until a valid salary arrives.
        The salary is only applied against the selected occupation's table:
        while that table is pending or its fetch failed, the map keeps its
        levels and the stored salary is used once the table arrives.

        Returns:
            True if the input was accepted, False if it was rejected.
        """
        try:
            salary = parse_currency(raw)
        except InvalidSalaryError as exc:
            logger.debug("Salary input rejected: %s", exc)
            return False

        with self._lock:
            self._state.salary = salary
            if self._table_is_current():
                self._reclassify()
            else:
                logger.debug(
                    "Salary stored; no table yet for occupation=%s",
                    self._state.occupation_code,
                )
        return True

    def clear_salary(self) -> bool:
        return self.set_salary(None)

    # ── Display toggles ────────────────────────────────────────────────────

    def toggle_collapse(self) -> bool:
        with self._lock:
            self._state.panel_collapsed = not self._state.panel_collapsed
            return self._state.panel_collapsed

    def toggle_lottery(self) -> bool:
        with self._lock:
            self._state.lottery_enabled = not self._state.lottery_enabled
            self._refresh_popup()
            return self._state.lottery_enabled

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def close(self) -> None:
        """Shut down the fetch executor if this machine created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "SelectionStateMachine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Private helpers ────────────────────────────────────────────────────

    def _fetch_and_apply(self, token: int, occupation_key: str) -> FetchOutcome:
        """Runs on the executor: fetch, then apply only if still the latest."""
        try:
            table = self._wage_source.fetch_table(occupation_key)
        except WageMapError as exc:
            logger.warning(
                "Wage table fetch failed | occupation=%s token=%d: %s",
                occupation_key,
                token,
                exc,
            )
            return FetchOutcome.FAILED

        with self._lock:
            if token != self._issued_token:
                logger.debug(
                    "Dropping stale wage table | occupation=%s token=%d latest=%d",
                    occupation_key,
                    token,
                    self._issued_token,
                )
                return FetchOutcome.STALE
            self._latest_table = table
            self._reclassify()

        logger.info(
            "Wage table applied | occupation=%s token=%d entries=%d",
            occupation_key,
            token,
            len(table),
        )
        return FetchOutcome.APPLIED

    def _table_is_current(self) -> bool:
        return (
            self._latest_table is not None
            and self._latest_table.occupation_key == self._state.occupation_code
        )

    def _reclassify(self) -> None:
        """Reclassify against the latest table.  Caller holds the lock."""
        if self._latest_table is None:
            return
        view = classify_all(
            self._latest_table,
            self._regions,
            self._state.salary,
            previous=self._view,
        )
        if view is None or view is self._view:
            return
        self._view = view
        self._renderer.render_regions(view)
        self._refresh_popup()

    def _refresh_popup(self) -> None:
        """Rebuild the open popup in place.  Caller holds the lock."""
        active = self._state.active_popup
        if active is None:
            return
        if self._view.get(active.region_id) is None:
            self._close_popup()
            return
        self._open_popup(active.region_id, active.anchor)

    def _open_popup(self, region_id: str, anchor: LngLat) -> Optional[ActivePopup]:
        classified = self._view.get(region_id)
        if classified is None:
            logger.debug("No region %r in the current view; popup not opened", region_id)
            return None
        content = build_popup_content(
            classified,
            self._view.table,
            self._state.lottery_enabled,
        )
        popup = ActivePopup(region_id=region_id, anchor=anchor, content=content)
        self._state.active_popup = popup
        self._renderer.show_popup(popup)
        return popup

    def _close_popup(self) -> None:
        if self._state.active_popup is not None:
            self._state.active_popup = None
            self._renderer.close_popup()

    def _fit(
        self,
        bounds: Optional[BoundingBox],
        max_zoom: Optional[int] = None,
    ) -> Optional[ZoomRequest]:
        if bounds is None:
            return None
        request = ZoomRequest(
            bounds=bounds,
            max_zoom=max_zoom,
            duration_ms=self._settings.zoom_duration_ms,
            padding=self._settings.zoom_padding,
        )
        self._renderer.fit_bounds(request)
        return request
