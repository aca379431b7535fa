#!/usr/bin/env python3
"""Engine orchestration and self-metrics tests."""
import io

import pytest

from labelgen.config import build_config
from labelgen.engine import GeneratorEngine
from labelgen.errors import WriteError
from labelgen.metrics import SelfMetrics

from helpers import FailingSink, StubSampler


def make_config(**overrides):
    raw = {
        "labels": ["A", "B", "C"],
        "min-values": 20,
        "max-values": 40,
        "min-val": -50,
        "max-val": 50,
        "random-seed": 4242,
    }
    raw.update(overrides)
    return build_config(raw)


def test_run_result():
    config = make_config()
    engine = GeneratorEngine(config)
    out = io.BytesIO()

    result = engine.run(out)

    assert result.seed == 4242
    assert result.bytes_written == len(out.getvalue())
    assert 20 <= result.entries <= 40
    assert sum(r.values for r in result.report.values()) == result.entries
    assert result.duration_s >= 0


def test_runs_are_independent_and_reproducible():
    """Each run gets a fresh sampler, so repeated runs match."""
    engine = GeneratorEngine(make_config())
    first, second = io.BytesIO(), io.BytesIO()

    engine.run(first)
    engine.run(second)

    assert first.getvalue() == second.getvalue()


def test_time_seed_is_reported(monkeypatch):
    monkeypatch.setattr("labelgen.config.time.time", lambda: 1234567.0)
    engine = GeneratorEngine(make_config(**{"time-seed": True}))

    result = engine.run(io.BytesIO())

    assert result.seed == 1234567


def test_explicit_sampler():
    engine = GeneratorEngine(make_config(**{"min-val": -1000, "max-val": 1000}))
    sampler = StubSampler(count=2, label_indices=[2, 2], values=[10, -700])
    out = io.BytesIO()

    result = engine.run(out, sampler=sampler)

    assert out.getvalue() == b"C = 10; C = -700"
    assert result.report["C"].values == 2
    assert result.report["C"].value == -690


def test_self_metrics_recorded():
    metrics = SelfMetrics()
    engine = GeneratorEngine(make_config(), self_metrics=metrics)

    result = engine.run(io.BytesIO())
    registry = metrics.registry

    assert registry.get_sample_value("labelgen_labels_configured") == 3
    assert registry.get_sample_value("labelgen_bytes_written_total") == result.bytes_written
    assert registry.get_sample_value("labelgen_run_duration_seconds_count") == 1
    for label, aggregate in result.report.items():
        sample = registry.get_sample_value("labelgen_entries_total", {"label": label})
        assert sample == aggregate.values


def test_write_error_recorded_and_raised():
    metrics = SelfMetrics()
    engine = GeneratorEngine(make_config(), self_metrics=metrics)
    sink = FailingSink(fail_after=5)

    with pytest.raises(WriteError) as exc_info:
        engine.run(sink)

    stage = exc_info.value.stage
    registry = metrics.registry
    assert registry.get_sample_value("labelgen_write_errors_total", {"stage": stage}) == 1
    assert registry.get_sample_value("labelgen_bytes_written_total") == exc_info.value.bytes_written
    assert registry.get_sample_value("labelgen_run_duration_seconds_count") == 0


def test_metrics_textfile(tmp_path):
    metrics = SelfMetrics()
    GeneratorEngine(make_config(), self_metrics=metrics).run(io.BytesIO())

    path = tmp_path / "labelgen.prom"
    metrics.write_textfile(str(path))
    text = path.read_text()

    assert "labelgen_entries_total{label=\"A\"}" in text
    assert "labelgen_bytes_written_total" in text
