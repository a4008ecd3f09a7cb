"""Hardware profile and the clamped ranges of its user-facing controls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np


@dataclass(frozen=True)
class ParamRange:
    """Bounds and widget step for a single hardware control."""

    min: float
    max: float
    step: float

    def clamp(self, value: float) -> float:
        return float(np.clip(float(value), self.min, self.max))


HARDWARE_RANGES: Dict[str, ParamRange] = {
    "mem": ParamRange(min=0.1, max=8192.0, step=0.1),
    "flops": ParamRange(min=0.1, max=8192.0, step=0.1),
    "batch": ParamRange(min=1, max=1024, step=1),
    "seq": ParamRange(min=1024, max=1_048_576, step=1024),
}

DEFAULT_MEMORY_BANDWIDTH_GBS = 1792.0
DEFAULT_COMPUTE_TFLOPS = 209.0
DEFAULT_BATCH_SIZE = 1
DEFAULT_MAX_SEQ_LEN = 1024


def coerce_input(raw: object, rng: ParamRange, *, integer: bool = False) -> float | int:
    """Turn a raw widget edit into an in-range value.

    Unparseable or zero edits fall back to the range minimum instead of being
    rejected.
    """

    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = 0.0
    if not np.isfinite(value) or value == 0.0:
        value = float(rng.min)
    value = rng.clamp(value)
    if integer:
        return int(value)
    return value


@dataclass(frozen=True)
class HardwareProfile:
    """Accelerator limits plus the sweep shape used for one curve."""

    memory_bandwidth_GBs: float = DEFAULT_MEMORY_BANDWIDTH_GBS
    compute_tflops: float = DEFAULT_COMPUTE_TFLOPS
    batch_size: int = DEFAULT_BATCH_SIZE
    max_seq_len: int = DEFAULT_MAX_SEQ_LEN

    @property
    def memory_bandwidth_Bps(self) -> float:
        """Memory bandwidth in bytes per second."""

        return float(self.memory_bandwidth_GBs) * 1e9

    @property
    def compute_flops_per_s(self) -> float:
        """Compute throughput in operations per second."""

        return float(self.compute_tflops) * 1e12

    @classmethod
    def from_inputs(
        cls,
        *,
        memory_bandwidth_GBs: object = DEFAULT_MEMORY_BANDWIDTH_GBS,
        compute_tflops: object = DEFAULT_COMPUTE_TFLOPS,
        batch_size: object = DEFAULT_BATCH_SIZE,
        max_seq_len: object = DEFAULT_MAX_SEQ_LEN,
    ) -> "HardwareProfile":
        """Build a profile from raw edits, clamping each to its range."""

        return cls(
            memory_bandwidth_GBs=coerce_input(memory_bandwidth_GBs, HARDWARE_RANGES["mem"]),
            compute_tflops=coerce_input(compute_tflops, HARDWARE_RANGES["flops"]),
            batch_size=int(coerce_input(batch_size, HARDWARE_RANGES["batch"], integer=True)),
            max_seq_len=int(coerce_input(max_seq_len, HARDWARE_RANGES["seq"], integer=True)),
        )

    def as_dict(self) -> Dict[str, float]:
        return {
            "memory_bandwidth_GBs": float(self.memory_bandwidth_GBs),
            "compute_tflops": float(self.compute_tflops),
            "batch_size": int(self.batch_size),
            "max_seq_len": int(self.max_seq_len),
        }


def bytes_to_time_s(nbytes: float, bw_GBs: float) -> Optional[float]:
    """Seconds to stream ``nbytes`` at ``bw_GBs``; ``None`` for a dead link."""

    if bw_GBs <= 0:
        return None
    return float(nbytes) / (float(bw_GBs) * 1e9)


def ops_to_time_s(ops: float, tflops: float) -> Optional[float]:
    """Seconds to retire ``ops`` at ``tflops``; ``None`` for no compute."""

    if tflops <= 0:
        return None
    return float(ops) / (float(tflops) * 1e12)


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_COMPUTE_TFLOPS",
    "DEFAULT_MAX_SEQ_LEN",
    "DEFAULT_MEMORY_BANDWIDTH_GBS",
    "HARDWARE_RANGES",
    "HardwareProfile",
    "ParamRange",
    "bytes_to_time_s",
    "coerce_input",
    "ops_to_time_s",
]
