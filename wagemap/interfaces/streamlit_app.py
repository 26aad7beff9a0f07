"""
interfaces/streamlit_app.py
──────────────────────────────────────────────────────────────────────────────
Streamlit UI for the county wage-level classifier.

Run:
  streamlit run wagemap/interfaces/streamlit_app.py

Features:
  • Sidebar control panel: state → county pickers, occupation search,
    salary input with clear, H-1B lottery toggle, minimise toggle
  • County popup card for the selected county
  • Level summary and per-county table for the selected state
  • Legend with the fixed level colours

The SelectionStateMachine lives in st.session_state so every rerun works on
the same session; widget callbacks translate into state-machine events.
"""
from __future__ import annotations

import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pandas as pd
import streamlit as st

# ── Path setup ─────────────────────────────────────────────────────────────
# Allow running from the repo root with: streamlit run wagemap/interfaces/streamlit_app.py
_REPO_ROOT = Path(__file__).parent.parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from wagemap.config.settings import get_settings
from wagemap.domain.constants import LEVEL_COLORS
from wagemap.domain.models import PopupContent
from wagemap.services.container import build_session, get_occupation_directory
from wagemap.services.formatting import format_currency
from wagemap.services.popup import level_label, summarize_levels
from wagemap.services.selection import SelectionStateMachine

logger = logging.getLogger(__name__)

# ── Page configuration ─────────────────────────────────────────────────────
st.set_page_config(
    page_title="WageMap",
    page_icon="🇺🇸",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── CSS ────────────────────────────────────────────────────────────────────
st.markdown(
    """
    <style>
    .county-popup {
        background: white;
        border-radius: 8px;
        padding: 14px 18px;
        box-shadow: 0 1px 4px rgba(0,0,0,0.08);
        max-width: 420px;
    }
    .county-popup .title { font-size: 1.05em; font-weight: 600; color: #1e293b; }
    .county-popup .badge { font-size: 0.85em; color: #475569; }
    .county-popup .dot {
        display: inline-block; width: 10px; height: 10px;
        border-radius: 50%; margin-right: 6px;
    }
    .county-popup .selection { font-size: 0.87em; color: #4C1D95; margin: 6px 0; }
    .county-popup table { width: 100%; font-size: 0.87em; }
    .county-popup tr.active { font-weight: 700; background: #f4f6f9; }
    .legend-swatch {
        display: inline-block; width: 14px; height: 14px;
        border-radius: 3px; margin-right: 6px; vertical-align: middle;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


# ── Backend singletons ─────────────────────────────────────────────────────

@st.cache_resource(show_spinner="Loading occupation directory…")
def _load_directory():
    return get_occupation_directory()


@st.cache_resource
def _fetch_executor() -> ThreadPoolExecutor:
    """Wage-table fetch pool shared by every browser session."""
    return ThreadPoolExecutor(
        max_workers=get_settings().fetch_workers,
        thread_name_prefix="wage-fetch",
    )


def _get_session() -> SelectionStateMachine:
    """One SelectionStateMachine per browser session."""
    if "session" not in st.session_state:
        with st.spinner("Loading counties…"):
            session = build_session(executor=_fetch_executor())
            session.set_occupation(session.state.occupation_code).result()
        st.session_state["session"] = session
        st.session_state["salary_text"] = format_currency(session.state.salary)
    return st.session_state["session"]


# ── Widget callbacks → state-machine events ────────────────────────────────

def _on_state_change(session: SelectionStateMachine) -> None:
    session.set_state(st.session_state["state_select"])
    st.session_state["county_select"] = ""


def _on_county_change(session: SelectionStateMachine) -> None:
    session.set_county(st.session_state["county_select"])


def _on_occupation_change(session: SelectionStateMachine) -> None:
    entry = st.session_state["occupation_select"]
    if entry is None:
        return
    outcome = session.set_occupation(entry.parent_key).result()
    st.session_state["occupation_display"] = entry.display
    logger.info("Occupation %s → %s", entry.code, outcome.value)


def _on_salary_change(session: SelectionStateMachine) -> None:
    accepted = session.set_salary(st.session_state["salary_text"])
    st.session_state["salary_rejected"] = not accepted


def _on_salary_clear(session: SelectionStateMachine) -> None:
    session.clear_salary()
    st.session_state["salary_text"] = ""
    st.session_state["salary_rejected"] = False


# ── Sidebar ────────────────────────────────────────────────────────────────

def _render_sidebar(session: SelectionStateMachine) -> None:
    state = session.state
    with st.sidebar:
        st.markdown("## WageMap 🇺🇸")
        st.toggle(
            "Minimise panel",
            value=state.panel_collapsed,
            key="collapse_toggle",
            on_change=session.toggle_collapse,
        )

        if state.panel_collapsed:
            salary = f"${format_currency(state.salary)}/yr" if state.salary is not None else "—"
            st.markdown(f"**Occupation** {st.session_state.get('occupation_display', state.occupation_code)}")
            st.markdown(f"**Salary** {salary}")
            _render_legend()
            return

        st.caption(
            "Select your state or county, occupation, and salary. "
            "Counties are coloured by the wage level your salary reaches."
        )

        st.markdown("#### Location")
        st.selectbox(
            "State",
            [""] + list(session.index.state_abbrevs),
            format_func=lambda ab: ab or "All states",
            key="state_select",
            on_change=_on_state_change,
            args=(session,),
        )
        options = {c.id: c.name for c in state.county_options}
        st.selectbox(
            "County",
            [""] + list(options),
            format_func=lambda geoid: (
                f"{options[geoid]} County" if geoid
                else "Select county" if state.selected_state
                else "Pick a state first"
            ),
            key="county_select",
            disabled=not state.selected_state,
            on_change=_on_county_change,
            args=(session,),
        )

        st.markdown("#### Occupation")
        query = st.text_input(
            "Search",
            placeholder="Enter job title or SOC code",
            key="occupation_query",
        )
        matches = _load_directory().search(query, limit=50) if query.strip() else []
        st.selectbox(
            "Matches",
            [None] + matches,
            format_func=lambda e: e.display if e else "—",
            key="occupation_select",
            on_change=_on_occupation_change,
            args=(session,),
        )

        st.markdown("#### Annual Base Salary")
        col_input, col_clear = st.columns([4, 1])
        col_input.text_input(
            "USD",
            key="salary_text",
            on_change=_on_salary_change,
            args=(session,),
        )
        col_clear.button("×", on_click=_on_salary_clear, args=(session,), help="Clear salary")
        if st.session_state.get("salary_rejected"):
            st.warning("Not a valid salary — keeping the previous value.")

        st.toggle(
            "Show my chances in the H-1B lottery",
            value=state.lottery_enabled,
            key="lottery_toggle",
            on_change=session.toggle_lottery,
        )

        _render_legend()
        st.markdown("---")
        st.markdown(
            "<small>Wage data: "
            "<a href='https://flag.dol.gov/wage-data/wage-search'>OFLC</a></small>",
            unsafe_allow_html=True,
        )


def _render_legend() -> None:
    swatches = "".join(
        f"<span class='legend-swatch' style='background:{color}'></span>Level {label}&nbsp;&nbsp;"
        for label, color in zip(["I", "II", "III", "IV"], LEVEL_COLORS.values())
    )
    st.markdown(swatches, unsafe_allow_html=True)


# ── Main area ──────────────────────────────────────────────────────────────

def _render_popup(content: PopupContent) -> None:
    rows = "".join(
        f"<tr class='{'active' if row.is_active else ''}'>"
        f"<td>{row.label}</td><td>{row.salary_floor}</td>"
        + (f"<td>{row.probability}%</td>" if content.lottery_enabled else "")
        + "</tr>"
        for row in content.level_rows
    )
    header = "<th>Level</th><th>Salary</th>" + ("<th>Probability</th>" if content.lottery_enabled else "")
    selection = f"<div class='selection'>{content.selection_line}</div>" if content.selection_line else ""
    note = f"<div class='badge'>{content.lottery_note}</div>" if content.lottery_note else ""
    st.markdown(
        f"""
        <div class="county-popup">
            <div class="title">{content.title}</div>
            <div class="badge"><span class="dot" style="background:{content.color}"></span>{content.label}</div>
            {selection}
            <table><thead><tr>{header}</tr></thead><tbody>{rows}</tbody></table>
            {note}
        </div>
        """,
        unsafe_allow_html=True,
    )


def _counties_df(session: SelectionStateMachine, state_abbr: str) -> pd.DataFrame:
    view = session.view
    rows = []
    for option in session.index.counties_in(state_abbr):
        classified = view.get(option.id)
        if classified is None:
            continue
        rows.append(
            {
                "County": option.name,
                "GEOID": option.id,
                "Level": level_label(classified.classification),
                "Fill": classified.fill_color,
            }
        )
    return pd.DataFrame(rows)


def main() -> None:
    session = _get_session()
    _render_sidebar(session)

    state = session.state
    st.title("Prevailing wage levels by county")
    scope = state.selected_state or "All states"
    st.caption(f"Occupation {state.occupation_code} · {scope}")

    if state.active_popup is not None:
        _render_popup(state.active_popup.content)
        st.markdown("---")

    counts = summarize_levels(session.view, state.selected_state or None)
    cols = st.columns(len(counts))
    for col, (label, count) in zip(cols, counts.items()):
        col.metric(label, count)

    if state.selected_state:
        df = _counties_df(session, state.selected_state)
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "⬇ Download CSV",
            df.to_csv(index=False).encode(),
            file_name=f"wage_levels_{state.selected_state}.csv",
            mime="text/csv",
        )
    else:
        st.info("Pick a state to list its counties.")


if __name__ == "__main__":
    main()
