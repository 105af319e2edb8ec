"""
Tests for the stream-level entry points and AuditLogAnalyzer.
"""
from __future__ import annotations

import io
import json

import pytest

from forensic_audit import (
    AuditLogAnalyzer,
    ForensicsConfig,
    LogParseError,
    find_invalid_sessions_in,
    find_log_transfer_spikes,
    prioritize_log_alerts,
    reconstruct_session_timeline,
    trace_log_contamination,
)
from synthetic import HEADER, log_text, make_synthetic_rows

ROWS = [
    (100, "alice", "s1", "LOGIN", None, 1, 0),
    (110, "alice", "s1", "READ", "db/customers", 4, 2_000),
    (120, "alice", "s1", "COPY", "tmp/stage", 6, 8_000),
    (130, "bob", "s2", "LOGIN", None, 1, 0),
    (140, "bob", "s2", "READ", "tmp/stage", 5, 1_000),
    (150, "bob", "s2", "UPLOAD", "share/export", 9, 50_000),
    (160, "alice", "s1", "LOGOUT", None, 1, 0),
    (170, "carol", "s3", "LOGOUT", None, 2, 0),
]


def test_imports():
    from forensic_audit import AnalysisArtifacts, IOConfig, AlertConfig, ReportConfig


def test_stream_entry_points():
    text = log_text(ROWS)
    assert find_invalid_sessions_in(io.StringIO(text)) == ["s3", "s2"]
    assert reconstruct_session_timeline(io.StringIO(text), "s2") == ["LOGIN", "READ", "UPLOAD"]
    assert [a.severity for a in prioritize_log_alerts(io.StringIO(text), 2)] == [9, 6]
    assert find_log_transfer_spikes(io.StringIO(text)) == {
        100: 110, 110: 120, 120: 150, 130: 140, 140: 150,
    }
    assert trace_log_contamination(io.StringIO(text), "tmp/stage", "share/export") == [
        "tmp/stage", "share/export",
    ]
    # Sessions chain through a shared resource, but edges keep their direction
    assert trace_log_contamination(io.StringIO(text), "db/customers", "share/export") == [
        "db/customers", "tmp/stage", "share/export",
    ]
    assert trace_log_contamination(io.StringIO(text), "share/export", "db/customers") is None


@pytest.mark.parametrize("call", [
    lambda s: find_invalid_sessions_in(s),
    lambda s: reconstruct_session_timeline(s, "s1"),
    lambda s: prioritize_log_alerts(s, 0),
    lambda s: find_log_transfer_spikes(s),
    lambda s: trace_log_contamination(s, "a", "b"),
])
def test_every_entry_point_rejects_malformed_log(call):
    bad = io.StringIO(HEADER + "\n1,u,s,LOGIN,,x,0\n")
    with pytest.raises(LogParseError):
        call(bad)


def test_idempotent_runs():
    text = log_text(make_synthetic_rows(seed=2))
    a = AuditLogAnalyzer().run(io.StringIO(text), session_id="user00-s0", trace=("db/orders", "share/export"))
    b = AuditLogAnalyzer().run(io.StringIO(text), session_id="user00-s0", trace=("db/orders", "share/export"))
    assert a.summary() == b.summary()
    assert a.alerts == b.alerts
    assert a.transfer_spikes == b.transfer_spikes


def test_analyzer_run_collects_everything():
    cfg = ForensicsConfig()
    cfg.alerts.top_n = 3
    art = AuditLogAnalyzer(cfg).run(
        io.StringIO(log_text(ROWS)), session_id="s1", trace=("tmp/stage", "share/export")
    )
    assert len(art.records) == len(ROWS)
    assert art.invalid_sessions == ["s3", "s2"]
    assert art.timeline == ["LOGIN", "READ", "COPY", "LOGOUT"]
    assert len(art.alerts) == 3
    assert art.contamination_path == ["tmp/stage", "share/export"]
    assert list(art.invalid_session_report["session_id"]) == ["s3", "s2"]
    assert len(art.transfer_spike_events) == len(art.transfer_spikes)
    assert set(art.graph.edges()) == set(zip(art.transitions["resource"], art.transitions["next_resource"]))


def test_analyzer_builds_transitions_once(monkeypatch):
    import forensic_audit.graph as graph_mod
    import forensic_audit.pipeline as pipeline_mod

    calls = []
    original = graph_mod.resource_transitions

    def counting(records):
        calls.append(1)
        return original(records)

    monkeypatch.setattr(graph_mod, "resource_transitions", counting)
    monkeypatch.setattr(pipeline_mod, "resource_transitions", counting)

    art = AuditLogAnalyzer().run(io.StringIO(log_text(ROWS)), trace=("db/customers", "share/export"))
    assert art.contamination_path == ["db/customers", "tmp/stage", "share/export"]
    assert len(calls) == 1


def test_analyzer_uses_config_input_path(tmp_path):
    path = tmp_path / "audit.csv"
    path.write_text(log_text(ROWS))
    cfg = ForensicsConfig()
    cfg.io.input_path = path
    art = AuditLogAnalyzer(cfg).run()
    assert len(art.records) == len(ROWS)

    with pytest.raises(ValueError):
        AuditLogAnalyzer().run()


def test_artifacts_write(tmp_path):
    cfg = ForensicsConfig()
    art = AuditLogAnalyzer(cfg).run(io.StringIO(log_text(ROWS)), trace=("tmp/stage", "share/export"))
    written = art.write(tmp_path / "out", cfg)

    for name in ("invalid_sessions", "session_summary", "alerts", "transfer_spikes",
                 "resource_transitions", "summary", "transfer_profile", "contamination_graph"):
        assert written[name].exists(), name

    summary = json.loads(written["summary"].read_text())
    assert summary["n_records"] == len(ROWS)
    assert summary["contamination_path"] == ["tmp/stage", "share/export"]


def test_artifacts_write_without_plots(tmp_path):
    cfg = ForensicsConfig()
    cfg.report.make_plots = False
    art = AuditLogAnalyzer(cfg).run(io.StringIO(log_text(ROWS)))
    written = art.write(tmp_path, cfg)
    assert "transfer_profile" not in written
    assert not (tmp_path / "transfer_profile.png").exists()


def test_config_serialization(tmp_path):
    cfg = ForensicsConfig()
    cfg.alerts.top_n = 42
    cfg.io.delimiter = ";"
    cfg.report.make_plots = False
    json_path = str(tmp_path / "config.json")
    cfg.to_json(json_path)
    cfg2 = ForensicsConfig.from_json(json_path)
    assert cfg2.alerts.top_n == 42
    assert cfg2.io.delimiter == ";"
    assert cfg2.report.make_plots is False
    assert cfg2.io.output_dir == cfg.io.output_dir
