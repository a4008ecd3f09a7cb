"""Metric strip describing the parsed model on the active hardware."""

from __future__ import annotations

from typing import Optional

import streamlit as st

from features.architecture import ArchitectureRecord
from features.hardware import HardwareProfile
from services.throughput_calcs import count_parameters, kv_cache_bytes, throughput_breakdown


def human_bytes(n: int | float | None) -> str:
    """Format ``n`` as a human readable byte string."""

    if n is None:
        return "-"
    value = float(n)
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    for unit in units:
        if value < 1024.0 or unit == units[-1]:
            return f"{value:.2f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024.0
    return f"{value:.2f} PB"


def human_count(n: Optional[int]) -> str:
    if n is None:
        return "-"
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if n >= threshold:
            return f"{n / threshold:.2f}{suffix}"
    return str(n)


def render_model_summary(record: Optional[ArchitectureRecord], profile: HardwareProfile) -> None:
    """Show parameter count, weight/KV footprint and the bottleneck at max length."""

    if record is None:
        st.warning("Model configuration is not valid JSON; the chart keeps its last curve.")
        return
    errors = record.domain_errors()
    if errors:
        st.info("Throughput is zero for this configuration:\n\n" + "\n".join(f"- {e}" for e in errors))
        return

    params = count_parameters(record)
    weight_bytes = params * record.precision.bytes_per_element if params is not None else None
    kv_bytes = kv_cache_bytes(record, profile.max_seq_len, profile.batch_size)
    breakdown = throughput_breakdown(
        record,
        profile.memory_bandwidth_GBs,
        profile.compute_tflops,
        profile.batch_size,
        profile.max_seq_len,
    )

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Parameters", human_count(params))
    c2.metric(f"Weights ({record.precision.tag})", human_bytes(weight_bytes))
    c3.metric(f"KV cache @ {profile.max_seq_len:,} tokens", human_bytes(kv_bytes))
    if breakdown is None:
        c4.metric("Bottleneck", "-")
    else:
        c4.metric(
            "Bottleneck @ max length",
            breakdown.bottleneck,
            help=(
                f"memory {breakdown.memory_time_s * 1e3:.3f} ms, "
                f"compute {breakdown.compute_time_s * 1e3:.3f} ms per forward pass"
            ),
        )


__all__ = ["human_bytes", "human_count", "render_model_summary"]
