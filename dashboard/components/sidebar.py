"""Hardware controls: a slider and a number field per parameter."""

from __future__ import annotations

from typing import Any, Callable, Dict, NamedTuple

import streamlit as st

from features.hardware import HARDWARE_RANGES, ParamRange


class _Control(NamedTuple):
    label: str
    unit: str
    range_key: str
    integer: bool


HARDWARE_CONTROLS: Dict[str, _Control] = {
    "memory_bandwidth_GBs": _Control("Memory Bandwidth", "GB/s", "mem", False),
    "compute_tflops": _Control("Compute Power", "TFLOPs", "flops", False),
    "batch_size": _Control("Batch Size", "", "batch", True),
    "max_seq_len": _Control("Max Sequence Length", "", "seq", True),
}


def _slider_key(key: str) -> str:
    return f"{key}__slider"


def _typed(value: Any, integer: bool) -> Any:
    return int(value) if integer else float(value)


def _on_edit(widget_key: str, key: str, apply: Callable[[str, Any], Any]) -> None:
    # apply() returns the clamped value; both widgets are re-seeded with it
    clamped = apply(key, st.session_state[widget_key])
    control = HARDWARE_CONTROLS[key]
    st.session_state[key] = _typed(clamped, control.integer)
    st.session_state[_slider_key(key)] = _typed(clamped, control.integer)


def _param_control(key: str, control: _Control, value: Any, apply: Callable[[str, Any], Any]) -> None:
    rng: ParamRange = HARDWARE_RANGES[control.range_key]
    integer = control.integer
    st.session_state.setdefault(key, _typed(value, integer))
    st.session_state.setdefault(_slider_key(key), _typed(value, integer))

    unit = f" {control.unit}" if control.unit else ""
    st.markdown(f"**{control.label}:** {st.session_state[key]:,}{unit}")
    slider_col, input_col = st.columns([3, 2])
    slider_col.slider(
        control.label,
        min_value=_typed(rng.min, integer),
        max_value=_typed(rng.max, integer),
        step=_typed(rng.step, integer),
        key=_slider_key(key),
        label_visibility="collapsed",
        on_change=_on_edit,
        args=(_slider_key(key), key, apply),
    )
    input_col.number_input(
        f"{control.label}{unit}",
        step=_typed(rng.step, integer),
        key=key,
        label_visibility="collapsed",
        on_change=_on_edit,
        args=(key, key, apply),
    )


def render_sidebar(current: Dict[str, Any], apply: Callable[[str, Any], Any]) -> None:
    """Render hardware controls.

    ``current`` holds the committed values; ``apply(key, raw)`` stores an edit
    and returns the clamped value that was actually committed.
    """

    with st.sidebar:
        st.header("Hardware Parameters")
        for key, control in HARDWARE_CONTROLS.items():
            _param_control(key, control, current[key], apply)


__all__ = ["HARDWARE_CONTROLS", "render_sidebar"]
