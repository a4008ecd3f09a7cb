"""Streamlit page: transformer throughput versus sequence length."""

from __future__ import annotations

import logging
import os
from typing import Any

if __package__ is None or __package__ == "":
    import sys
    from pathlib import Path

    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dashboard._paths import ensure_repo_root_on_path

ensure_repo_root_on_path()

import streamlit as st

from actions.state_updates import CurvePipeline
from dashboard.common import DEFAULT_MODEL_JSON_TEXT
from dashboard.components.chart import build_throughput_figure
from dashboard.components.sidebar import render_sidebar
from dashboard.components.summary import render_model_summary
from features.architecture import parse_architecture
from state.app_state import HARDWARE_KEYS, ensure_session_state_defaults
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

_PIPELINE_KEY = "curve_pipeline"


def _get_pipeline() -> CurvePipeline:
    pipeline = st.session_state.get(_PIPELINE_KEY)
    if pipeline is None:
        manager = ensure_session_state_defaults(st.session_state)
        pipeline = CurvePipeline(manager)
        st.session_state[_PIPELINE_KEY] = pipeline
    return pipeline


def _on_config_edit(pipeline: CurvePipeline) -> None:
    # the text area commits on blur, so the script runner never sees keystrokes
    pipeline.set_config_text(st.session_state["cfg_text"], immediate=True)


def _load_example(pipeline: CurvePipeline) -> None:
    st.session_state["cfg_text"] = DEFAULT_MODEL_JSON_TEXT
    pipeline.set_config_text(DEFAULT_MODEL_JSON_TEXT, immediate=True)


def main() -> None:
    setup_logging(os.environ.get("THROUGHPUT_VIZ_LOG_LEVEL", "INFO"))
    st.set_page_config(page_title="LLM Performance Visualiser", layout="wide")
    st.title("LLM Performance Visualiser")
    st.caption("Analyse and visualise transformer throughput across hardware settings.")

    pipeline = _get_pipeline()
    state = pipeline.manager.state

    def _apply(key: str, raw: Any) -> Any:
        pipeline.set_hardware(**{key: raw})
        return pipeline.manager.get(key)

    render_sidebar({key: getattr(state, key) for key in HARDWARE_KEYS}, _apply)

    st.subheader("Model Configuration")
    st.text_area(
        "Model configuration JSON",
        key="cfg_text",
        height=360,
        placeholder="Paste model configuration JSON here…",
        on_change=_on_config_edit,
        args=(pipeline,),
        label_visibility="collapsed",
    )
    st.button("Load example (Llama-2-7B)", on_click=_load_example, args=(pipeline,))

    profile = state.hardware_profile()
    if state.debounced_cfg_text.strip():
        render_model_summary(parse_architecture(state.debounced_cfg_text), profile)

    st.subheader("Throughput vs Sequence Length")
    curve = state.curve
    if not len(curve):
        st.info("Paste a model configuration to plot its throughput curve.")
        return
    st.plotly_chart(build_throughput_figure(curve), use_container_width=True, key="throughput_curve")
    with st.expander("Curve data"):
        st.dataframe(curve.to_dataframe(), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()


__all__ = ["main"]
