"""Model configuration JSON decoding and the example config."""

from __future__ import annotations

import json
from typing import Mapping, MutableMapping

DEFAULT_MODEL_JSON: Mapping[str, object] = {
    "architectures": ["LlamaForCausalLM"],
    "hidden_act": "silu",
    "hidden_size": 4096,
    "intermediate_size": 11008,
    "num_attention_heads": 32,
    "num_hidden_layers": 32,
    "num_key_value_heads": 32,
    "tie_word_embeddings": False,
    "torch_dtype": "float16",
    "vocab_size": 32000,
}
"""Llama-2-7B, loaded by the "Load example" button."""


DEFAULT_MODEL_JSON_TEXT = json.dumps(DEFAULT_MODEL_JSON, indent=2)


def load_model_json(json_text: str) -> Mapping[str, object]:
    """Decode the text of a ``config.json`` into a mapping.

    Raises
    ------
    ValueError
        If the text is blank, is not valid JSON, or its top level is not an
        object. Blank text is an error because an empty editor has nothing to
        plot.
    """

    if not json_text.strip():
        raise ValueError("model configuration is empty")

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"model configuration is not valid JSON: {exc}") from exc

    if not isinstance(parsed, MutableMapping):
        raise ValueError(f"model configuration must be a JSON object, got {type(parsed).__name__}")

    return parsed


__all__ = [
    "DEFAULT_MODEL_JSON",
    "DEFAULT_MODEL_JSON_TEXT",
    "load_model_json",
]
