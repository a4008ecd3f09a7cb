"""Throughput-versus-sequence-length sweep."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from features.architecture import ArchitectureRecord, parse_architecture
from features.hardware import HardwareProfile
from services.throughput_calcs import estimate_throughput

logger = logging.getLogger(__name__)

MAX_CURVE_SAMPLES = 800


@dataclass(frozen=True)
class ThroughputCurve:
    """Aggregate and per-sequence throughput sharing the same x values."""

    seq_lens: Tuple[int, ...] = field(default_factory=tuple)
    total: Tuple[float, ...] = field(default_factory=tuple)
    per_user: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not (len(self.seq_lens) == len(self.total) == len(self.per_user)):
            raise ValueError("curve series must share the same x coordinates")

    @classmethod
    def empty(cls) -> "ThroughputCurve":
        return cls()

    def __len__(self) -> int:
        return len(self.seq_lens)

    def total_points(self) -> List[Tuple[int, float]]:
        return list(zip(self.seq_lens, self.total))

    def per_user_points(self) -> List[Tuple[int, float]]:
        return list(zip(self.seq_lens, self.per_user))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "seq_len": list(self.seq_lens),
                "total_tokens_per_s": list(self.total),
                "per_user_tokens_per_s": list(self.per_user),
            }
        )


def sample_seq_lens(max_seq_len: int) -> range:
    """Sequence lengths to evaluate, at most ~``MAX_CURVE_SAMPLES`` of them."""

    max_seq_len = int(max_seq_len)
    step = max(1, max_seq_len // MAX_CURVE_SAMPLES)
    return range(1, max_seq_len + 1, step)


def curve_from_record(record: ArchitectureRecord, profile: HardwareProfile) -> ThroughputCurve:
    """Sweep a parsed record; invalid records produce a flat-zero curve."""

    batch = int(profile.batch_size)
    xs: List[int] = []
    totals: List[float] = []
    per_user: List[float] = []
    for seq_len in sample_seq_lens(profile.max_seq_len):
        tokens_per_s = estimate_throughput(
            record,
            profile.memory_bandwidth_GBs,
            profile.compute_tflops,
            batch,
            seq_len,
        )
        xs.append(seq_len)
        totals.append(tokens_per_s)
        per_user.append(tokens_per_s / batch)
    return ThroughputCurve(seq_lens=tuple(xs), total=tuple(totals), per_user=tuple(per_user))


def generate_curve(config_text: str, profile: HardwareProfile) -> Optional[ThroughputCurve]:
    """Build a fresh curve, or ``None`` when the text gives nothing to plot."""

    if not config_text or not config_text.strip():
        return None
    record = parse_architecture(config_text)
    if record is None:
        return None
    errors = record.domain_errors()
    if errors:
        logger.debug("Architecture record is not usable: %s", "; ".join(errors))
    return curve_from_record(record, profile)


__all__ = [
    "MAX_CURVE_SAMPLES",
    "ThroughputCurve",
    "curve_from_record",
    "generate_curve",
    "sample_seq_lens",
]
