#!/usr/bin/env python3
"""
Streamlit front-end for the actor runner
────────────────────────────────────────
• Step 1 – pick one of the platform's actors
• Step 2 – fill the form generated from its input schema, choose OUTPUT / DATASET
• Step 3 – inspect the normalized result, statistics and raw payload

Run:  streamlit run app.py
"""
from __future__ import annotations

import asyncio
import logging
import os

import streamlit as st

from runner.config import load_settings
from runner.edge import AsyncActorGateway, EdgeContext, EdgeFunctionClient
from runner.errors import ConfigError, TransportError
from runner.history import RunHistory
from runner.orchestrator import ExecutionOrchestrator, WorkflowState
from runner.schema import ExecutionMode
from ui.fields import apply_inputs, render_fields
from ui.results import render_history, render_outcome

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"),
                    format="%(asctime)s %(levelname)-8s %(message)s")
log = logging.getLogger("runner.app")

st.set_page_config(page_title="🤖 Actor Runner", layout="centered")

_MODE_HELP = {
    ExecutionMode.OUTPUT:  "Get the actor's direct output from the OUTPUT record",
    ExecutionMode.DATASET: "Get the structured dataset items created by the actor",
}


# ── session defaults ────────────────────────────────────────────────────
def bootstrap() -> ExecutionOrchestrator:
    if "orch" in st.session_state:
        return st.session_state["orch"]
    try:
        settings = load_settings()
    except ConfigError as exc:
        st.error(f"Configuration error: {exc}")
        st.stop()

    gateway = AsyncActorGateway(EdgeFunctionClient(), EdgeContext.from_settings(settings))
    orch = ExecutionOrchestrator(gateway, history=RunHistory(settings.history_capacity))
    st.session_state.update(orch=orch, gateway=gateway, functions_url=settings.functions_url)
    asyncio.run(orch.load_actors())
    return orch


# ── helpers ─────────────────────────────────────────────────────────────
def render_sidebar(orch: ExecutionOrchestrator) -> None:
    with st.sidebar:
        st.header("Apify account")
        token = st.text_input("API token", type="password", placeholder="Enter your Apify API token")
        if st.button("Check token") and token.strip():
            try:
                user = asyncio.run(st.session_state["gateway"].validate_token(token.strip()))
            except TransportError as exc:
                st.error(f"Token check failed: {exc.message}")
            else:
                # every later list / schema / run call goes out with this token
                gateway = st.session_state["gateway"].with_token(token.strip())
                st.session_state.update(gateway=gateway, apify_user=user)
                log.info("Switched account user=%s", user.username)
                asyncio.run(orch.switch_gateway(gateway))
                st.rerun()

        user = st.session_state.get("apify_user")
        if user is not None:
            st.success(f"Connected as {user.username} ({user.email or 'no email'})")

        st.divider()
        st.header("Recent runs")
        render_history(orch.history)

        if orch.selected_actor is not None:
            st.button("Reset", on_click=orch.reset)


def render_error(orch: ExecutionOrchestrator) -> None:
    banner = orch.error
    if banner is None:
        return
    st.error(f"**{banner.title}**\n\n{banner.message}")
    c = st.columns(4)
    if c[0].button("Dismiss"):
        orch.dismiss_error()
        st.rerun()
    if banner.retryable and c[1].button("Try again"):
        asyncio.run(orch.retry())
        st.rerun()


def render_actor_select(orch: ExecutionOrchestrator) -> None:
    st.subheader("1 · Select actor")
    if not orch.actors:
        if orch.state is not WorkflowState.ERROR:
            st.info("No actors found. You don't have any actors in your Apify account yet.")
        return

    ids = [a.id for a in orch.actors]
    current = orch.selected_actor.id if orch.selected_actor else None
    picked = st.selectbox(
        f"Choose an actor to run from your {len(ids)} available actors",
        ids,
        index=ids.index(current) if current in ids else None,
        format_func=lambda i: f"{orch.find_actor(i).display_name} · {orch.find_actor(i).full_name}",
        placeholder="Choose an actor to run",
        disabled=orch.is_busy,
    )
    if picked and picked != current:
        with st.spinner("Loading configuration…"):
            asyncio.run(orch.select_actor(picked))
        st.rerun()


def render_configure(orch: ExecutionOrchestrator) -> None:
    actor, form, env = orch.selected_actor, orch.form, orch.schema
    if actor is None or form is None or env is None:
        return

    st.subheader(f"2 · Configure {actor.display_name}")
    st.caption(env.input_schema.description or "Configure the input parameters for this actor.")

    mode = st.radio(
        "Execution Mode", list(ExecutionMode), horizontal=True,
        index=list(ExecutionMode).index(orch.mode), format_func=lambda m: m.value,
    )
    orch.set_mode(mode)
    st.caption(_MODE_HELP[orch.mode])

    with st.form(f"form-{actor.id}-{env.version}"):
        raw = render_fields(form, key_prefix=f"{actor.id}:{env.version}", validation=orch.validation)
        if not form.fields:
            st.caption("This actor doesn't require any input parameters.")
        submitted = st.form_submit_button("Run Actor", disabled=orch.is_busy)

    if submitted:
        apply_inputs(form, raw)
        with st.spinner("Running actor…"):
            result = asyncio.run(orch.submit())
        if not result.ok:
            log.info("Form blocked: %s", result.by_label())
        st.rerun()


def render_result(orch: ExecutionOrchestrator) -> None:
    if orch.outcome is None:
        return
    st.subheader("3 · View results")
    render_outcome(orch.outcome)
    st.button("Run Another Actor", on_click=orch.reset)


# ── router ──────────────────────────────────────────────────────────────
orch = bootstrap()

st.title("🤖  Actor Runner")
render_sidebar(orch)
render_error(orch)
render_actor_select(orch)

if orch.state is WorkflowState.ACTOR_SELECTED:
    render_configure(orch)
elif orch.state is WorkflowState.RESULT_READY:
    render_result(orch)

st.caption(f"v0.1 · FUNCTIONS: {st.session_state.get('functions_url', '—')}")
