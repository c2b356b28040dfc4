"""
ui/results.py
Streamlit view of one RunOutcome: Result / Statistics / Raw Data tabs.
"""

from __future__ import annotations
from typing import List

import streamlit as st

from runner.formatting import format_duration, format_timestamp, result_json, stats_sections
from runner.history import RunHistory
from runner.results import Failed, RunOutcome, StillRunning, Succeeded

_STATUS_ICON = {
    "SUCCEEDED": "✅",
    "FAILED": "❌",
    "RUNNING": "⏳",
}


def render_outcome(outcome: RunOutcome) -> None:
    run = outcome.run
    icon = _STATUS_ICON.get(run.status, "🕒")
    st.subheader(f"{icon} Execution Results · `{run.status}`")

    caption = f"Run ID: {run.id or '—'}"
    if run.finished_at:
        caption += f" · Duration: {format_duration(outcome.stats.duration_millis if outcome.stats else None)}"
    st.caption(caption)

    tab_result, tab_stats, tab_raw = st.tabs(["Result", "Statistics", "Raw Data"])

    with tab_result:
        if isinstance(outcome, Failed):
            st.error(outcome.reason)
        elif isinstance(outcome, StillRunning):
            st.info(outcome.message)
        elif isinstance(outcome, Succeeded) and outcome.has_payload:
            text = result_json(outcome.payload)
            st.download_button(
                "Download", text, file_name=f"actor-result-{run.id}.json",
                mime="application/json", key=f"dl-result-{run.id}",
            )
            if isinstance(outcome.payload, str):
                st.code(text)
            else:
                st.json(outcome.payload)
        else:
            st.caption("No result data available")

    with tab_stats:
        sections = stats_sections(outcome.stats)
        if not sections:
            st.caption("No statistics available")
        cols = st.columns(2) if sections else []
        for i, (title, rows) in enumerate(sections):
            with cols[i % 2]:
                st.markdown(f"**{title}**")
                for label, value in rows:
                    st.text(f"{label}: {value}")

    with tab_raw:
        raw = outcome.model_dump(mode="json", by_alias=True)
        st.download_button(
            "Download All", result_json(raw), file_name=f"actor-raw-{run.id}.json",
            mime="application/json", key=f"dl-raw-{run.id}",
        )
        st.json(raw)


def render_history(history: RunHistory) -> None:
    rows: List[dict] = [
        {**r, "timestamp_iso": format_timestamp(r["timestamp_iso"]),
         "duration": format_duration(r["duration_ms"])}
        for r in history.as_rows()
    ]
    if not rows:
        st.caption("No runs yet")
        return
    st.dataframe(
        rows, hide_index=True,
        column_order=["timestamp_iso", "actor_name", "status", "duration"],
    )
