"""Closed-form performance model for a single decoder forward pass.

The functions in this module are pure Python and therefore straightforward to
unit test.  Every stage returns ``None`` instead of raising when the
architecture record cannot be evaluated, and :func:`estimate_throughput`
collapses that absence to ``0.0`` so a live UI never sees an exception.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from features.architecture import ArchitectureRecord
from features.hardware import bytes_to_time_s, ops_to_time_s


@dataclass(frozen=True)
class ThroughputBreakdown:
    """Memory and compute time for one forward pass over the whole batch."""

    memory_bytes: int
    operations: float
    memory_time_s: float
    compute_time_s: float
    batch_size: int

    @property
    def total_time_s(self) -> float:
        # phases are sequential, not overlapped
        return self.memory_time_s + self.compute_time_s

    @property
    def tokens_per_s(self) -> float:
        total = self.total_time_s
        if total <= 0 or not math.isfinite(total):
            return 0.0
        return self.batch_size / total

    @property
    def bottleneck(self) -> str:
        return "memory" if self.memory_time_s >= self.compute_time_s else "compute"


def _usable(record: Optional[ArchitectureRecord]) -> bool:
    return record is not None and record.is_valid


def count_parameters(record: Optional[ArchitectureRecord]) -> Optional[int]:
    """Total learnable parameters (embeddings, attention, FFN and norms)."""

    if not _usable(record):
        return None
    h = record.hidden_size
    head_size = record.head_size
    embedding = record.vocab_size * h * (1 if record.tie_word_embeddings else 2)
    attention = 2 * h * h + 2 * h * record.num_key_value_heads * head_size
    feed_forward = (3 if record.is_gated else 2) * h * record.intermediate_size
    layer_norm = 4 * h
    return embedding + record.num_hidden_layers * (attention + feed_forward + layer_norm)


def count_operations(
    record: Optional[ArchitectureRecord],
    seq_len: int = 1,
    batch_size: int = 1,
) -> Optional[float]:
    """Arithmetic operations for one forward pass (a MAC counts as two)."""

    if not _usable(record) or seq_len < 1 or batch_size < 1:
        return None
    h = record.hidden_size
    inter = record.intermediate_size
    gated = record.is_gated
    act_cost = 3 if gated else 1
    kv_scale = record.num_key_value_heads / record.num_attention_heads

    # Q/K/V/O projections scaled by the KV head ratio, plus softmax and the weighted sum
    attention = 2 * h**2 * (2 + 2 * kv_scale) + 4 * h * seq_len
    feed_forward = h * inter * (6 if gated else 4) + inter * (act_cost + 1 if gated else act_cost)
    lm_head = 2 * h * record.vocab_size

    return float(batch_size * (record.num_hidden_layers * (attention + feed_forward) + lm_head))


def kv_cache_elements(record: Optional[ArchitectureRecord], seq_len: int = 1, batch_size: int = 1) -> Optional[int]:
    if not _usable(record) or seq_len < 1 or batch_size < 1:
        return None
    return batch_size * seq_len * record.num_hidden_layers * record.hidden_size * 2


def kv_cache_bytes(record: Optional[ArchitectureRecord], seq_len: int = 1, batch_size: int = 1) -> Optional[int]:
    elements = kv_cache_elements(record, seq_len, batch_size)
    if elements is None:
        return None
    return elements * record.precision.bytes_per_element


def estimate_memory_bytes(
    record: Optional[ArchitectureRecord],
    seq_len: int = 1,
    batch_size: int = 1,
) -> Optional[int]:
    """Bytes read per forward pass: every weight once plus the KV cache."""

    params = count_parameters(record)
    kv = kv_cache_elements(record, seq_len, batch_size)
    if params is None or kv is None:
        return None
    return (params + kv) * record.precision.bytes_per_element


def throughput_breakdown(
    record: Optional[ArchitectureRecord],
    memory_bandwidth_GBs: float,
    compute_tflops: float,
    batch_size: int,
    seq_len: int,
) -> Optional[ThroughputBreakdown]:
    nbytes = estimate_memory_bytes(record, seq_len, batch_size)
    ops = count_operations(record, seq_len, batch_size)
    if nbytes is None or ops is None:
        return None
    memory_time = bytes_to_time_s(nbytes, memory_bandwidth_GBs)
    compute_time = ops_to_time_s(ops, compute_tflops)
    if memory_time is None or compute_time is None:
        return None
    if not (math.isfinite(memory_time) and math.isfinite(compute_time)):
        return None
    return ThroughputBreakdown(
        memory_bytes=nbytes,
        operations=ops,
        memory_time_s=memory_time,
        compute_time_s=compute_time,
        batch_size=int(batch_size),
    )


def estimate_throughput(
    record: Optional[ArchitectureRecord],
    memory_bandwidth_GBs: float,
    compute_tflops: float,
    batch_size: int,
    seq_len: int,
) -> float:
    """Aggregate tokens/s across the batch; ``0.0`` when not computable."""

    breakdown = throughput_breakdown(record, memory_bandwidth_GBs, compute_tflops, batch_size, seq_len)
    if breakdown is None:
        return 0.0
    tokens_per_s = breakdown.tokens_per_s
    if not math.isfinite(tokens_per_s):
        return 0.0
    return tokens_per_s


__all__ = [
    "ThroughputBreakdown",
    "count_operations",
    "count_parameters",
    "estimate_memory_bytes",
    "estimate_throughput",
    "kv_cache_bytes",
    "kv_cache_elements",
    "throughput_breakdown",
]
