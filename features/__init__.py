"""Architecture parsing, hardware inputs and the throughput sweep."""

from __future__ import annotations

from .architecture import (
    ActivationFamily,
    ArchitectureParseError,
    ArchitectureRecord,
    Precision,
    architecture_from_config,
    parse_architecture,
)
from .curve import ThroughputCurve, curve_from_record, generate_curve, sample_seq_lens
from .hardware import HARDWARE_RANGES, HardwareProfile, ParamRange, coerce_input

__all__ = [
    "ActivationFamily",
    "ArchitectureParseError",
    "ArchitectureRecord",
    "HARDWARE_RANGES",
    "HardwareProfile",
    "ParamRange",
    "Precision",
    "ThroughputCurve",
    "architecture_from_config",
    "coerce_input",
    "curve_from_record",
    "generate_curve",
    "parse_architecture",
    "sample_seq_lens",
]
