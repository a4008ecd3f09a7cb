from __future__ import annotations

import json
import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

pytest.importorskip("pandas")

from actions.state_updates import CurvePipeline, set_hardware_value
from features import sample_seq_lens
from state.app_state import AppStateManager

CONFIG = json.dumps(
    {
        "hidden_size": 768,
        "num_hidden_layers": 12,
        "intermediate_size": 3072,
        "vocab_size": 50257,
        "hidden_act": "gelu",
        "tie_word_embeddings": True,
        "num_attention_heads": 12,
        "num_key_value_heads": 12,
    }
)


@pytest.fixture
def loop(fake_loop):
    return fake_loop


@pytest.fixture
def pipeline(loop):
    return CurvePipeline(AppStateManager(), debounce_s=0.2, loop=loop)


def test_rapid_edits_recompute_once_with_final_text(pipeline, loop):
    published = []
    pipeline.subscribe(published.append)

    partial = CONFIG[: len(CONFIG) // 2]
    for text in (CONFIG[:5], partial, CONFIG):
        pipeline.set_config_text(text)
        loop.advance(0.05)
    assert published == []
    assert pipeline.manager.get("cfg_text") == CONFIG
    assert pipeline.manager.get("debounced_cfg_text") == ""

    loop.advance(0.2)
    assert len(published) == 1
    state = pipeline.manager.state
    assert state.debounced_cfg_text == CONFIG
    assert state.curve is published[0]
    assert state.refresh_token == 1
    assert list(state.curve.seq_lens) == list(sample_seq_lens(1024))


def test_malformed_text_keeps_previous_curve(pipeline):
    pipeline.set_config_text(CONFIG, immediate=True)
    before = pipeline.manager.state.curve
    assert len(before) == 1024

    pipeline.set_config_text('{"hidden_size": 768,', immediate=True)
    assert pipeline.manager.state.curve is before
    assert pipeline.manager.state.refresh_token == 1

    pipeline.set_config_text("", immediate=True)
    assert pipeline.manager.state.curve is before


def test_immediate_commit_cancels_pending_edit(pipeline, loop):
    pipeline.set_config_text("{")
    assert pipeline.pending
    pipeline.set_config_text(CONFIG, immediate=True)
    assert not pipeline.pending

    loop.advance(1.0)
    assert pipeline.manager.state.debounced_cfg_text == CONFIG
    assert pipeline.manager.state.refresh_token == 1


def test_hardware_edits_recompute_immediately_and_clamp(pipeline):
    pipeline.set_config_text(CONFIG, immediate=True)
    first = pipeline.manager.state.curve

    pipeline.set_hardware(batch_size=4000, memory_bandwidth_GBs="abc", max_seq_len=4096)
    state = pipeline.manager.state
    assert state.batch_size == 1024
    assert state.memory_bandwidth_GBs == 0.1
    assert state.max_seq_len == 4096
    assert state.curve is not first
    assert state.refresh_token == 2
    assert list(state.curve.seq_lens) == list(sample_seq_lens(4096))
    for total, per_user in zip(state.curve.total, state.curve.per_user):
        assert per_user == total / 1024


def test_hardware_edits_use_last_debounced_text(pipeline, loop):
    pipeline.set_config_text(CONFIG, immediate=True)
    pipeline.set_config_text("{not json")
    pipeline.set_hardware(compute_tflops=100.0)

    assert pipeline.manager.state.debounced_cfg_text == CONFIG
    assert pipeline.manager.state.refresh_token == 2


def test_hardware_edit_without_config_publishes_nothing(pipeline):
    published = []
    pipeline.subscribe(published.append)
    pipeline.set_hardware(batch_size=8)

    assert pipeline.manager.state.batch_size == 8
    assert published == []
    assert len(pipeline.manager.state.curve) == 0


def test_set_hardware_value_rejects_unknown_keys():
    with pytest.raises(KeyError):
        set_hardware_value(AppStateManager(), "cores", 4)
