from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from dashboard.common import DEFAULT_MODEL_JSON, DEFAULT_MODEL_JSON_TEXT, load_model_json


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_load_model_json_rejects_blank_text(text) -> None:
    with pytest.raises(ValueError, match="empty"):
        load_model_json(text)


def test_load_model_json_requires_object_top_level() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        load_model_json("[1, 2, 3]")


def test_load_model_json_wraps_decode_errors() -> None:
    with pytest.raises(ValueError, match="not valid JSON"):
        load_model_json('{"hidden_size": 768,')


def test_default_model_json_text_parses_back() -> None:
    assert DEFAULT_MODEL_JSON_TEXT.startswith("{\n  ")
    assert load_model_json(DEFAULT_MODEL_JSON_TEXT) == DEFAULT_MODEL_JSON
