"""
tests/unit/test_popup.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for popup content and level summaries.

Verifies:
  • labels distinguish "No data" from "Below Level I"
  • salary floors are hourly thresholds × 2080, rounded to $K
  • lottery odds appear only when the overlay is on
  • the popup reads thresholds from the table the view was built from
"""
from __future__ import annotations

import json

import pytest

from wagemap.domain.constants import LEVEL_COLORS, UNCLASSIFIED_BADGE
from wagemap.domain.models import Classification, WageLevel, WageTable
from wagemap.services.popup import (
    BELOW_LEVEL_I_LABEL,
    NO_DATA_LABEL,
    build_popup_content,
    level_label,
    salary_floor,
    summarize_levels,
)
from wagemap.services.wage_classifier import classify_all, unclassified_view


@pytest.fixture
def view_150k(table_a, regions):
    return classify_all(table_a, regions, 150000)


def _popup(view, region_id, lottery=False):
    return build_popup_content(view.get(region_id), view.table, lottery)


class TestLevelLabel:
    def test_no_data(self):
        assert level_label(Classification(has_data=False)) == NO_DATA_LABEL

    def test_below_level_i(self):
        assert level_label(Classification(has_data=True)) == BELOW_LEVEL_I_LABEL

    def test_level(self):
        assert level_label(Classification(has_data=True, level=WageLevel.III)) == "Level III"


class TestSalaryFloor:
    def test_rounded_annual(self):
        assert salary_floor(70) == "$146K+"

    def test_undefined_is_dash(self):
        assert salary_floor(None) == "—"


class TestBuildPopupContent:
    def test_title_and_label(self, view_150k):
        content = _popup(view_150k, "06037")
        assert content.title == "Los Angeles, CA"
        assert content.label == "Level III"
        assert content.color_key == 3
        assert content.color == LEVEL_COLORS[WageLevel.III]

    def test_level_rows_floors(self, view_150k):
        rows = _popup(view_150k, "06037").level_rows
        assert [r.label for r in rows] == ["L I", "L II", "L III", "L IV"]
        assert [r.salary_floor for r in rows] == ["$83K+", "$114K+", "$146K+", "$187K+"]

    def test_active_row_matches_level(self, view_150k):
        rows = _popup(view_150k, "06037").level_rows
        assert [r.is_active for r in rows] == [False, False, True, False]

    def test_sparse_thresholds_show_dash(self, view_150k):
        rows = _popup(view_150k, "36047").level_rows
        assert [r.salary_floor for r in rows] == ["$73K+", "—", "$135K+", "—"]

    def test_lottery_off_has_no_odds(self, view_150k):
        content = _popup(view_150k, "06037")
        assert content.lottery_enabled is False
        assert all(r.probability is None for r in content.level_rows)
        assert content.selection_line is None
        assert content.lottery_note is None

    def test_lottery_on_adds_odds(self, view_150k):
        content = _popup(view_150k, "06037", lottery=True)
        assert [r.probability for r in content.level_rows] == [15.29, 30.58, 45.87, 61.16]
        assert content.selection_line == (
            "You have a 45.87% probability of being selected to file "
            "an H-1B petition in 2027."
        )
        assert content.lottery_note == "Chances in the 2027 lottery."

    def test_no_data_county(self, view_150k):
        content = _popup(view_150k, "35013")
        assert content.label == NO_DATA_LABEL
        assert content.color == UNCLASSIFIED_BADGE
        assert content.color_key is None
        assert all(r.salary_floor == "—" for r in content.level_rows)
        assert not any(r.is_active for r in content.level_rows)

    def test_below_level_i_has_floors_but_no_selection_line(self, table_a, regions):
        view = classify_all(table_a, regions, 40000)
        content = _popup(view, "06037", lottery=True)
        assert content.label == BELOW_LEVEL_I_LABEL
        assert content.level_rows[0].salary_floor == "$83K+"
        assert content.selection_line is None

    def test_unmapped_state_title_is_name_only(self, view_150k):
        content = _popup(view_150k, "66010")
        assert content.title == "Guam"
        assert content.label == NO_DATA_LABEL

    def test_before_any_table(self, regions):
        view = unclassified_view(regions)
        content = _popup(view, "06037")
        assert content.label == NO_DATA_LABEL
        assert all(r.salary_floor == "—" for r in content.level_rows)

    def test_floors_come_from_the_given_table(self, view_150k):
        other = WageTable.from_raw("x", {"CA|los angeles": {"I": 1, "II": 2, "III": 3, "IV": 4}})
        content = build_popup_content(view_150k.get("06037"), other, False)
        assert content.level_rows[0].salary_floor == "$2K+"

    def test_to_dict_is_json_serialisable(self, view_150k):
        payload = _popup(view_150k, "06037", lottery=True).to_dict()
        parsed = json.loads(json.dumps(payload))
        assert parsed["region_id"] == "06037"
        assert parsed["level_rows"][2]["level"] == 3


class TestSummarizeLevels:
    def test_nationwide(self, view_150k):
        counts = summarize_levels(view_150k)
        assert list(counts) == [
            "Level IV", "Level III", "Level II", "Level I", BELOW_LEVEL_I_LABEL, NO_DATA_LABEL,
        ]
        assert counts["Level III"] == 2
        assert counts["Level II"] == 1
        assert counts[NO_DATA_LABEL] == 4
        assert sum(counts.values()) == 7

    def test_one_state(self, view_150k):
        counts = summarize_levels(view_150k, "CA")
        assert counts["Level III"] == 1
        assert counts["Level II"] == 1
        assert sum(counts.values()) == 2
