"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • adapters produce them (regions, wage tables, occupations)
  • services classify and orchestrate them
  • the rendering port and the interfaces (CLI, Streamlit) consume them

Base region features are frozen.  Classification never stamps a level onto
a RegionFeature; it produces a new ClassifiedView instead, so an earlier
view stays valid after a later pass.
"""
from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from wagemap.domain.constants import (
    LEVEL_COLORS,
    STATE_FP_TO_ABBR,
    UNCLASSIFIED_FILL,
)
from wagemap.domain.region_keys import region_key


# ── Enums ──────────────────────────────────────────────────────────────────────

class WageLevel(IntEnum):
    """Ordinal prevailing-wage level."""
    I   = 1
    II  = 2
    III = 3
    IV  = 4

    @property
    def roman(self) -> str:
        return self.name


class FetchOutcome(str, Enum):
    """What happened to a wage-table fetch once it resolved."""
    APPLIED = "applied"   # latest request; table stored and regions reclassified
    STALE   = "stale"     # superseded by a newer request; dropped untouched
    FAILED  = "failed"    # network / HTTP / JSON error; prior levels kept


# ── Geometry ───────────────────────────────────────────────────────────────────

class LngLat(BaseModel):
    """A map anchor point."""

    model_config = ConfigDict(frozen=True)

    lng: float
    lat: float


class BoundingBox(BaseModel):
    """Axis-aligned longitude/latitude rectangle."""

    model_config = ConfigDict(frozen=True)

    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @model_validator(mode="after")
    def check_ordering(self) -> "BoundingBox":
        if self.min_lng > self.max_lng or self.min_lat > self.max_lat:
            raise ValueError(
                f"Bounding box min exceeds max: "
                f"({self.min_lng}, {self.min_lat}) > ({self.max_lng}, {self.max_lat})"
            )
        return self

    def as_pairs(self) -> list[list[float]]:
        """[[min_lng, min_lat], [max_lng, max_lat]] as map engines expect it."""
        return [[self.min_lng, self.min_lat], [self.max_lng, self.max_lat]]


class ZoomRequest(BaseModel):
    """A fit-to-bounds instruction for the rendering surface."""

    model_config = ConfigDict(frozen=True)

    bounds: BoundingBox
    max_zoom: Optional[int] = None
    duration_ms: int = 600
    padding: int = 30


# ── Regions ────────────────────────────────────────────────────────────────────

class RegionFeature(BaseModel):
    """One county polygon from the region collection."""

    model_config = ConfigDict(frozen=True)

    id: str
    state_code: str
    name: str
    geometry: Optional[dict[str, Any]] = None

    @field_validator("state_code", mode="before")
    @classmethod
    def pad_state_code(cls, v: Any) -> str:
        return str(v).strip().zfill(2)

    @property
    def state_abbr(self) -> Optional[str]:
        """USPS abbreviation, or None when the state code is unmapped."""
        return STATE_FP_TO_ABBR.get(self.state_code)

    @property
    def wage_key(self) -> Optional[str]:
        """Wage-table key for this region, or None when the state is unmapped."""
        abbr = self.state_abbr
        return region_key(abbr, self.name) if abbr else None

    @classmethod
    def from_geojson(cls, feature: dict[str, Any]) -> "RegionFeature":
        """Build from a GeoJSON feature with GEOID / STATEFP / NAME properties."""
        props = feature.get("properties") or {}
        return cls(
            id=str(props["GEOID"]),
            state_code=props["STATEFP"],
            name=str(props["NAME"]),
            geometry=feature.get("geometry"),
        )


class RegionCollection(BaseModel):
    """The immutable county feature set loaded once per session."""

    model_config = ConfigDict(frozen=True)

    features: tuple[RegionFeature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    @classmethod
    def from_geojson(cls, data: dict[str, Any]) -> "RegionCollection":
        return cls(
            features=tuple(
                RegionFeature.from_geojson(f) for f in data.get("features", [])
            )
        )


class CountyOption(BaseModel):
    """A county entry in a state's selection list."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str


# ── Wage tables ────────────────────────────────────────────────────────────────

_LEVEL_FIELDS: dict[WageLevel, str] = {
    WageLevel.I:   "level_i",
    WageLevel.II:  "level_ii",
    WageLevel.III: "level_iii",
    WageLevel.IV:  "level_iv",
}


class WageThresholds(BaseModel):
    """Sparse hourly thresholds for one county.  Missing levels stay None."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level_i:   Optional[float] = Field(None, alias="I")
    level_ii:  Optional[float] = Field(None, alias="II")
    level_iii: Optional[float] = Field(None, alias="III")
    level_iv:  Optional[float] = Field(None, alias="IV")

    def for_level(self, level: WageLevel) -> Optional[float]:
        return getattr(self, _LEVEL_FIELDS[level])


class WageTable(BaseModel):
    """All county thresholds for one occupation (parent key)."""

    model_config = ConfigDict(frozen=True)

    occupation_key: str
    entries: dict[str, WageThresholds] = Field(default_factory=dict)

    def get(self, key: str) -> Optional[WageThresholds]:
        return self.entries.get(key)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_raw(cls, occupation_key: str, raw: dict[str, Any]) -> "WageTable":
        """Build from the published JSON object, re-normalizing every key.

        Keys are rebuilt with region_key() so that lookup-time normalization
        is guaranteed to match.  Keys without a "|" separator are kept as-is.
        """
        entries: dict[str, WageThresholds] = {}
        for raw_key, thresholds in raw.items():
            state, sep, name = raw_key.partition("|")
            key = region_key(state, name) if sep else raw_key
            entries[key] = WageThresholds.model_validate(thresholds or {})
        return cls(occupation_key=occupation_key, entries=entries)


# ── Classification ─────────────────────────────────────────────────────────────

class Classification(BaseModel):
    """Result of classifying one county.

    has_data=False              → "No data" (key absent from the table)
    has_data=True, level=None   → "Below Level I"
    """

    model_config = ConfigDict(frozen=True)

    has_data: bool
    level: Optional[WageLevel] = None


class ClassifiedRegion(BaseModel):
    """A region paired with its classification for one pass."""

    model_config = ConfigDict(frozen=True)

    region: RegionFeature
    classification: Classification

    @property
    def id(self) -> str:
        return self.region.id

    @property
    def level(self) -> Optional[WageLevel]:
        return self.classification.level

    @property
    def fill_color(self) -> str:
        level = self.classification.level
        return LEVEL_COLORS[level] if level is not None else UNCLASSIFIED_FILL


class ClassifiedView(BaseModel):
    """The classified region collection produced by one classification pass.

    Carries the table and salary it was computed from, so popup content is
    always derived from the same thresholds that produced the levels.
    """

    model_config = ConfigDict(frozen=True)

    regions: tuple[ClassifiedRegion, ...] = ()
    table: Optional[WageTable] = None
    annual_salary: Optional[float] = None

    _by_id: dict[str, ClassifiedRegion] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._by_id = {r.id: r for r in self.regions}

    def get(self, region_id: str) -> Optional[ClassifiedRegion]:
        return self._by_id.get(region_id)

    def level_of(self, region_id: str) -> Optional[WageLevel]:
        classified = self._by_id.get(region_id)
        return classified.level if classified else None

    def levels(self) -> dict[str, Optional[WageLevel]]:
        """region id → level, for every region in the view."""
        return {r.id: r.level for r in self.regions}

    def to_feature_collection(self) -> dict[str, Any]:
        """GeoJSON for the map engine; classified features carry a "level"."""
        features = []
        for r in self.regions:
            props: dict[str, Any] = {
                "GEOID": r.region.id,
                "STATEFP": r.region.state_code,
                "NAME": r.region.name,
            }
            if r.level is not None:
                props["level"] = int(r.level)
            features.append(
                {"type": "Feature", "properties": props, "geometry": r.region.geometry}
            )
        return {"type": "FeatureCollection", "features": features}


# ── Popup ──────────────────────────────────────────────────────────────────────

class LevelRow(BaseModel):
    """One row of the per-level table in a county popup."""

    model_config = ConfigDict(frozen=True)

    level:        WageLevel
    label:        str
    salary_floor: str
    probability:  Optional[float] = None
    is_active:    bool = False


class PopupContent(BaseModel):
    """Everything a rendering surface needs to draw a county popup."""

    model_config = ConfigDict(frozen=True)

    region_id:       str
    title:           str
    label:           str
    color_key:       Optional[int] = None
    color:           str
    level_rows:      list[LevelRow]
    lottery_enabled: bool = False
    lottery_note:    Optional[str] = None
    selection_line:  Optional[str] = None

    def to_dict(self) -> dict:
        """Serialise to a plain dict (JSON-safe)."""
        return self.model_dump(mode="json")


class ActivePopup(BaseModel):
    """The single open popup: which region, where, and what it shows."""

    model_config = ConfigDict(frozen=True)

    region_id: str
    anchor:    LngLat
    content:   PopupContent


# ── Occupations ────────────────────────────────────────────────────────────────

class OccupationEntry(BaseModel):
    """A leaf occupation from the directory.

    parent_key selects the wage table; several leaf titles can share one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code:       str
    title:      str
    parent_key: str = Field(..., alias="parent")

    @property
    def display(self) -> str:
        return f"{self.code} – {self.title}"


# ── Session state ──────────────────────────────────────────────────────────────

class SelectionState(BaseModel):
    """Mutable selection state owned by SelectionStateMachine."""

    selected_state:     str = ""
    selected_county_id: str = ""
    occupation_code:    str = ""
    salary:             Optional[float] = None
    lottery_enabled:    bool = False
    panel_collapsed:    bool = False
    active_popup:       Optional[ActivePopup] = None
    county_options:     tuple[CountyOption, ...] = ()
