from __future__ import annotations

import math
import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

pytest.importorskip("pandas")

from features import ArchitectureRecord, architecture_from_config
from services import throughput_calcs

GPT2_SMALL = {
    "hidden_size": 768,
    "num_hidden_layers": 12,
    "intermediate_size": 3072,
    "vocab_size": 50257,
    "hidden_act": "gelu_new",
    "tie_word_embeddings": True,
    "num_attention_heads": 12,
    "num_key_value_heads": 12,
}

LLAMA2_7B = {
    "hidden_size": 4096,
    "num_hidden_layers": 32,
    "intermediate_size": 11008,
    "vocab_size": 32000,
    "hidden_act": "silu",
    "tie_word_embeddings": False,
    "num_attention_heads": 32,
    "num_key_value_heads": 32,
    "torch_dtype": "float16",
}


@pytest.fixture
def gpt2() -> ArchitectureRecord:
    return architecture_from_config(GPT2_SMALL)


@pytest.fixture
def llama() -> ArchitectureRecord:
    return architecture_from_config(LLAMA2_7B)


def test_gpt2_small_parameter_count_is_exact(gpt2):
    # embedding 38,597,376 + 12 layers x 7,080,960
    assert throughput_calcs.count_parameters(gpt2) == 123_568_896


def test_gated_untied_parameter_count(llama):
    # embedding 262,144,000 + 32 layers x (67,108,864 + 135,266,304 + 16,384)
    assert throughput_calcs.count_parameters(llama) == 6_738_673_664


def test_grouped_query_attention_shrinks_kv_projections():
    gqa = architecture_from_config({**LLAMA2_7B, "num_key_value_heads": 8})
    mha = architecture_from_config(LLAMA2_7B)
    # 2 * 4096 * (32 - 8) * 128 fewer parameters per layer
    saved = 32 * 2 * 4096 * 24 * 128
    assert throughput_calcs.count_parameters(mha) - throughput_calcs.count_parameters(gqa) == saved


def test_operation_count_matches_closed_form(gpt2):
    # attention 4,721,664 + ffn 9,440,256 per layer, lm head 77,194,752
    assert throughput_calcs.count_operations(gpt2, seq_len=1, batch_size=1) == 247_137_792
    # each extra token of context adds 4 * hidden per layer
    delta = throughput_calcs.count_operations(gpt2, seq_len=101) - throughput_calcs.count_operations(gpt2, seq_len=1)
    assert delta == 12 * 4 * 768 * 100


def test_operation_count_scales_with_batch(llama):
    one = throughput_calcs.count_operations(llama, seq_len=64, batch_size=1)
    four = throughput_calcs.count_operations(llama, seq_len=64, batch_size=4)
    assert four == 4 * one


def test_gated_feed_forward_operation_terms():
    record = architecture_from_config(
        {
            "hidden_size": 8,
            "num_hidden_layers": 1,
            "intermediate_size": 16,
            "vocab_size": 10,
            "hidden_act": "silu",
            "num_attention_heads": 2,
            "num_key_value_heads": 1,
        }
    )
    attention = 2 * 8**2 * (2 + 2 * 0.5) + 4 * 8 * 1
    feed_forward = 8 * 16 * 6 + 16 * 4
    lm_head = 2 * 8 * 10
    assert throughput_calcs.count_operations(record) == attention + feed_forward + lm_head


def test_memory_bytes_include_weights_and_kv_cache(gpt2):
    assert throughput_calcs.kv_cache_elements(gpt2, seq_len=1, batch_size=1) == 18_432
    assert throughput_calcs.estimate_memory_bytes(gpt2, seq_len=1, batch_size=1) == 494_349_312

    half = architecture_from_config({**GPT2_SMALL, "torch_dtype": "float16"})
    assert throughput_calcs.estimate_memory_bytes(half, seq_len=1, batch_size=1) == 494_349_312 // 2
    assert throughput_calcs.kv_cache_bytes(half, seq_len=1024, batch_size=2) == 2 * 1024 * 12 * 768 * 2 * 2


def test_throughput_is_additive_roofline(gpt2):
    bandwidth, tflops, batch, seq = 1000.0, 100.0, 4, 512
    nbytes = throughput_calcs.estimate_memory_bytes(gpt2, seq, batch)
    ops = throughput_calcs.count_operations(gpt2, seq, batch)
    expected = batch / (nbytes / (bandwidth * 1e9) + ops / (tflops * 1e12))

    assert throughput_calcs.estimate_throughput(gpt2, bandwidth, tflops, batch, seq) == expected

    breakdown = throughput_calcs.throughput_breakdown(gpt2, bandwidth, tflops, batch, seq)
    assert breakdown.total_time_s == breakdown.memory_time_s + breakdown.compute_time_s
    assert breakdown.bottleneck == "memory"
    assert breakdown.tokens_per_s == expected


def test_compute_bottleneck_is_reported(gpt2):
    breakdown = throughput_calcs.throughput_breakdown(gpt2, 8192.0, 0.1, 1, 1)
    assert breakdown.bottleneck == "compute"


@pytest.mark.parametrize(
    "config",
    [
        {**GPT2_SMALL, "num_attention_heads": 0, "num_key_value_heads": 0},
        {**GPT2_SMALL, "num_attention_heads": 7, "num_key_value_heads": 7},
        {"hidden_size": 768},
    ],
)
def test_invalid_records_collapse_to_zero(config):
    record = architecture_from_config(config)
    assert throughput_calcs.count_parameters(record) is None
    assert throughput_calcs.count_operations(record) is None
    assert throughput_calcs.estimate_memory_bytes(record) is None
    assert throughput_calcs.estimate_throughput(record, 1792.0, 209.0, 1, 128) == 0.0


def test_absent_record_and_dead_hardware_yield_zero(gpt2):
    assert throughput_calcs.estimate_throughput(None, 1792.0, 209.0, 1, 1) == 0.0
    assert throughput_calcs.estimate_throughput(gpt2, 0.0, 209.0, 1, 1) == 0.0
    assert throughput_calcs.estimate_throughput(gpt2, 1792.0, 0.0, 1, 1) == 0.0
    assert throughput_calcs.estimate_throughput(gpt2, 1792.0, 209.0, 1, 0) == 0.0


def test_throughput_is_positive_finite_and_non_increasing(llama):
    values = [throughput_calcs.estimate_throughput(llama, 1792.0, 209.0, 8, s) for s in (1, 16, 256, 4096, 65536)]
    assert all(v > 0 and math.isfinite(v) for v in values)
    assert all(a >= b for a, b in zip(values, values[1:]))
