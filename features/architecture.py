"""Parsing of Hugging Face style model configs into architecture records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional

from dashboard.common import load_model_json

logger = logging.getLogger(__name__)

GATED_ACTIVATIONS = frozenset({"silu", "swiglu", "geglu"})


class ArchitectureParseError(ValueError):
    """Raised when a config field cannot be coerced into the record."""


class ActivationFamily(Enum):
    """Feed-forward flavour: gated activations carry an extra projection."""

    GATED = "gated"
    STANDARD = "standard"

    @classmethod
    def from_hidden_act(cls, hidden_act: object) -> "ActivationFamily":
        if isinstance(hidden_act, str) and hidden_act in GATED_ACTIVATIONS:
            return cls.GATED
        return cls.STANDARD

    @property
    def is_gated(self) -> bool:
        return self is ActivationFamily.GATED


class Precision(Enum):
    """Numeric precision tag with its storage size."""

    FLOAT32 = ("float32", 4)
    FLOAT16 = ("float16", 2)
    BFLOAT16 = ("bfloat16", 2)

    def __init__(self, tag: str, bytes_per_element: int) -> None:
        self.tag = tag
        self.bytes_per_element = bytes_per_element

    @classmethod
    def from_tag(cls, tag: object) -> "Precision":
        """Map ``torch_dtype`` to a precision, defaulting to float32."""

        if isinstance(tag, str):
            for member in cls:
                if member.tag == tag:
                    return member
        return cls.FLOAT32


@dataclass(frozen=True)
class ArchitectureRecord:
    """Structural hyperparameters of a decoder-only transformer."""

    hidden_size: int
    num_hidden_layers: int
    intermediate_size: int
    vocab_size: int
    num_attention_heads: int
    num_key_value_heads: int
    activation: ActivationFamily = ActivationFamily.STANDARD
    hidden_act: str = ""
    tie_word_embeddings: bool = False
    precision: Precision = Precision.FLOAT32

    @property
    def head_size(self) -> Optional[int]:
        heads = self.num_attention_heads
        if heads <= 0 or self.hidden_size % heads:
            return None
        return self.hidden_size // heads

    @property
    def is_gated(self) -> bool:
        return self.activation.is_gated

    def domain_errors(self) -> List[str]:
        """Return the violated invariants; empty when the record is usable."""

        errors: List[str] = []
        for name in (
            "hidden_size",
            "num_hidden_layers",
            "intermediate_size",
            "vocab_size",
            "num_attention_heads",
            "num_key_value_heads",
        ):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be a positive integer")
        if self.num_key_value_heads > self.num_attention_heads > 0:
            errors.append("num_key_value_heads must not exceed num_attention_heads")
        if self.num_attention_heads > 0 and self.hidden_size % self.num_attention_heads:
            errors.append("hidden_size must be divisible by num_attention_heads")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.domain_errors()

    def summary(self) -> dict:
        return {
            "hidden_size": self.hidden_size,
            "num_hidden_layers": self.num_hidden_layers,
            "intermediate_size": self.intermediate_size,
            "vocab_size": self.vocab_size,
            "num_attention_heads": self.num_attention_heads,
            "num_key_value_heads": self.num_key_value_heads,
            "head_size": self.head_size,
            "activation": self.activation.value,
            "tie_word_embeddings": self.tie_word_embeddings,
            "precision": self.precision.tag,
        }


def _int_field(cfg: Mapping[str, object], key: str, default: int = 0) -> int:
    value = cfg.get(key)
    if value is None:
        return default
    # bool is an int subclass; "true" is not a layer count
    if isinstance(value, bool):
        raise ArchitectureParseError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ArchitectureParseError(f"{key} must be an integer, got {value!r}")


def architecture_from_config(cfg: Mapping[str, object]) -> ArchitectureRecord:
    """Build an :class:`ArchitectureRecord` from a decoded config mapping.

    Missing numeric fields become ``0`` so that the record still exists and
    its :meth:`ArchitectureRecord.domain_errors` explain what is wrong; this
    includes ``num_key_value_heads``. ``hidden_act`` and ``torch_dtype`` are
    matched exactly, without case folding.

    Raises
    ------
    ArchitectureParseError
        If a present field has the wrong JSON type.
    """

    heads = _int_field(cfg, "num_attention_heads")
    tie = cfg.get("tie_word_embeddings", False)
    if tie is None:
        tie = False
    if not isinstance(tie, bool):
        raise ArchitectureParseError(f"tie_word_embeddings must be a boolean, got {tie!r}")
    hidden_act = cfg.get("hidden_act")

    return ArchitectureRecord(
        hidden_size=_int_field(cfg, "hidden_size"),
        num_hidden_layers=_int_field(cfg, "num_hidden_layers"),
        intermediate_size=_int_field(cfg, "intermediate_size"),
        vocab_size=_int_field(cfg, "vocab_size"),
        num_attention_heads=heads,
        num_key_value_heads=_int_field(cfg, "num_key_value_heads"),
        activation=ActivationFamily.from_hidden_act(hidden_act),
        hidden_act=hidden_act if isinstance(hidden_act, str) else "",
        tie_word_embeddings=tie,
        precision=Precision.from_tag(cfg.get("torch_dtype")),
    )


def parse_architecture(text: str) -> Optional[ArchitectureRecord]:
    """Parse raw config text; ``None`` means there is nothing to compute."""

    if text is None:
        return None
    try:
        return architecture_from_config(load_model_json(text))
    except ValueError as exc:
        logger.debug("Model config not parsed: %s", exc)
        return None


__all__ = [
    "ActivationFamily",
    "ArchitectureParseError",
    "ArchitectureRecord",
    "GATED_ACTIVATIONS",
    "Precision",
    "architecture_from_config",
    "parse_architecture",
]
