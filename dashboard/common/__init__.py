"""Common utilities shared by standalone dashboard applications."""

from __future__ import annotations

from .json_config import DEFAULT_MODEL_JSON, DEFAULT_MODEL_JSON_TEXT, load_model_json

__all__ = [
    "DEFAULT_MODEL_JSON",
    "DEFAULT_MODEL_JSON_TEXT",
    "load_model_json",
]
