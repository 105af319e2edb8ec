"""
Forensic Audit Orchestrator
============================
Two ways in:

1. Stream-level entry points. Each loads the whole log from its source and
   runs exactly one analysis; nothing is shared between calls.

       find_invalid_sessions_in(stream)
       reconstruct_session_timeline(stream, session_id)
       prioritize_log_alerts(stream, n)
       find_log_transfer_spikes(stream)
       trace_log_contamination(stream, start, target)

2. AuditLogAnalyzer.run(): load once, run every analysis, and collect the
   results plus report tables into AnalysisArtifacts for export.

Malformed records raise LogParseError and I/O errors propagate; empty
timelines and missing paths are ordinary results ([] / None).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import networkx as nx
import pandas as pd

from .alerts import alerts_to_frame, prioritize_alerts
from .config import ForensicsConfig
from .graph import (
    build_contamination_graph, resource_transitions, shortest_contamination_path,
    trace_contamination, transitions_to_graph,
)
from .loaders import LogSource, load_records
from .records import Alert, LogRecord, records_to_frame
from .sessions import find_invalid_sessions, session_stack_report
from .timeline import reconstruct_timeline, session_summary
from .transfer import find_transfer_spike_events, find_transfer_spikes

logger = logging.getLogger("forensic_audit")


# ---------------------------------------------------------------------------
# Stream-level entry points
# ---------------------------------------------------------------------------

def find_invalid_sessions_in(log_stream: LogSource, cfg: Optional[ForensicsConfig] = None) -> List[str]:
    return find_invalid_sessions(load_records(log_stream, cfg))


def reconstruct_session_timeline(
    log_stream: LogSource, session_id: str, cfg: Optional[ForensicsConfig] = None
) -> List[str]:
    return reconstruct_timeline(load_records(log_stream, cfg), session_id)


def prioritize_log_alerts(log_stream: LogSource, n: int, cfg: Optional[ForensicsConfig] = None) -> List[Alert]:
    # The log is loaded (and validated) even when n <= 0
    return prioritize_alerts(load_records(log_stream, cfg), n)


def find_log_transfer_spikes(log_stream: LogSource, cfg: Optional[ForensicsConfig] = None) -> Dict[int, int]:
    return find_transfer_spikes(load_records(log_stream, cfg))


def trace_log_contamination(
    log_stream: LogSource,
    start_resource: str,
    target_resource: str,
    cfg: Optional[ForensicsConfig] = None,
) -> Optional[List[str]]:
    return trace_contamination(load_records(log_stream, cfg), start_resource, target_resource)


# ---------------------------------------------------------------------------
# Artifacts dataclass
# ---------------------------------------------------------------------------

@dataclass
class AnalysisArtifacts:
    """All outputs from one analyzer run. None = analysis was not requested."""
    records: List[LogRecord] = field(default_factory=list)
    invalid_sessions: List[str] = field(default_factory=list)
    invalid_session_report: Optional[pd.DataFrame] = None
    session_summary: Optional[pd.DataFrame] = None
    timeline_session: Optional[str] = None
    timeline: Optional[List[str]] = None
    alerts: List[Alert] = field(default_factory=list)
    transfer_spikes: Dict[int, int] = field(default_factory=dict)
    transfer_spike_events: Optional[pd.DataFrame] = None
    transitions: Optional[pd.DataFrame] = None
    graph: Optional[nx.DiGraph] = None
    trace_request: Optional[Tuple[str, str]] = None
    contamination_path: Optional[List[str]] = None

    def summary(self) -> Dict[str, object]:
        return {
            "n_records": len(self.records),
            "n_invalid_sessions": len(self.invalid_sessions),
            "invalid_sessions": self.invalid_sessions,
            "timeline_session": self.timeline_session,
            "timeline": self.timeline,
            "n_alerts": len(self.alerts),
            "n_transfer_spikes": len(self.transfer_spikes),
            "trace_request": list(self.trace_request) if self.trace_request else None,
            "contamination_path": self.contamination_path,
        }

    def write(self, out_dir: Path, cfg: Optional[ForensicsConfig] = None) -> Dict[str, Path]:
        """Export tables (CSV), the summary (JSON) and, if enabled, plots."""
        cfg = cfg or ForensicsConfig()
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        written: Dict[str, Path] = {}

        tables = {
            "invalid_sessions": self.invalid_session_report,
            "session_summary": self.session_summary,
            "alerts": alerts_to_frame(self.alerts),
            "transfer_spikes": self.transfer_spike_events,
            "resource_transitions": self.transitions,
        }
        for name, df in tables.items():
            if df is None:
                continue
            path = out_dir / f"{name}.csv"
            df.to_csv(path, index=False)
            written[name] = path

        summary_path = out_dir / "summary.json"
        with open(summary_path, "w") as f:
            json.dump(self.summary(), f, indent=2, default=str)
        written["summary"] = summary_path

        if cfg.report.make_plots and self.records:
            from .visuals import plot_contamination_graph, plot_transfer_profile

            spikes = self.transfer_spike_events
            if spikes is None:
                spikes = find_transfer_spike_events(self.records)
            written["transfer_profile"] = plot_transfer_profile(
                records_to_frame(self.records), spikes, out_dir, dpi=cfg.report.dpi
            )
            G = self.graph if self.graph is not None else build_contamination_graph(self.records)
            graph_png = plot_contamination_graph(
                G, out_dir,
                path=self.contamination_path, dpi=cfg.report.dpi,
                max_nodes=cfg.report.max_graph_nodes,
            )
            if graph_png is not None:
                written["contamination_graph"] = graph_png
            else:
                logger.info("Contamination graph not plotted (empty or larger than %d nodes)",
                            cfg.report.max_graph_nodes)

        logger.info("Wrote %d artifacts to %s", len(written), out_dir)
        return written


# ---------------------------------------------------------------------------
# Main analyzer class
# ---------------------------------------------------------------------------

class AuditLogAnalyzer:
    """
    Runs every analysis over one loaded log.

    Typical usage:
        analyzer = AuditLogAnalyzer(ForensicsConfig())
        art = analyzer.run("data/audit.csv", session_id="s42",
                           trace=("db/customers", "share/export"))
        art.write(Path("output"))
    """

    def __init__(self, cfg: Optional[ForensicsConfig] = None):
        self.cfg = cfg or ForensicsConfig()

    def run(
        self,
        source: Optional[LogSource] = None,
        session_id: Optional[str] = None,
        top_n: Optional[int] = None,
        trace: Optional[Tuple[str, str]] = None,
    ) -> AnalysisArtifacts:
        cfg = self.cfg
        if source is None:
            if cfg.io.input_path is None:
                raise ValueError("No log source given and cfg.io.input_path is not set.")
            source = cfg.io.input_path

        logger.info("run(): loading records")
        records = load_records(source, cfg)
        art = AnalysisArtifacts(records=records)

        logger.info("run(): validating sessions")
        art.invalid_sessions = find_invalid_sessions(records)
        art.invalid_session_report = session_stack_report(records)
        art.session_summary = session_summary(records)

        if session_id is not None:
            logger.info("run(): reconstructing timeline for session %s", session_id)
            art.timeline_session = session_id
            art.timeline = reconstruct_timeline(records, session_id)

        n = cfg.alerts.top_n if top_n is None else top_n
        logger.info("run(): prioritizing top %d alerts", n)
        art.alerts = prioritize_alerts(records, n)

        logger.info("run(): detecting transfer spikes")
        art.transfer_spikes = find_transfer_spikes(records)
        art.transfer_spike_events = find_transfer_spike_events(records)

        logger.info("run(): building resource transitions")
        art.transitions = resource_transitions(records)
        art.graph = transitions_to_graph(art.transitions)
        if trace is not None:
            start, target = trace
            art.trace_request = (start, target)
            art.contamination_path = shortest_contamination_path(art.graph, start, target)
            if art.contamination_path is None:
                logger.info("run(): no contamination path %s -> %s", start, target)

        return art
