"""
Forensic audit log analytics.

Five independent analyses over an ordered audit log: session validation,
timeline reconstruction, alert prioritization, transfer-spike detection and
contamination tracing.
"""
from .config import ForensicsConfig, IOConfig, AlertConfig, ReportConfig
from .records import Alert, LogRecord, LogParseError
from .loaders import load_records
from .sessions import find_invalid_sessions
from .timeline import reconstruct_timeline
from .alerts import prioritize_alerts
from .transfer import find_transfer_spikes
from .graph import build_contamination_graph, trace_contamination
from .pipeline import (
    AuditLogAnalyzer,
    AnalysisArtifacts,
    find_invalid_sessions_in,
    reconstruct_session_timeline,
    prioritize_log_alerts,
    find_log_transfer_spikes,
    trace_log_contamination,
)

__all__ = [
    "ForensicsConfig",
    "IOConfig",
    "AlertConfig",
    "ReportConfig",
    "Alert",
    "LogRecord",
    "LogParseError",
    "load_records",
    "find_invalid_sessions",
    "reconstruct_timeline",
    "prioritize_alerts",
    "find_transfer_spikes",
    "build_contamination_graph",
    "trace_contamination",
    "AuditLogAnalyzer",
    "AnalysisArtifacts",
    "find_invalid_sessions_in",
    "reconstruct_session_timeline",
    "prioritize_log_alerts",
    "find_log_transfer_spikes",
    "trace_log_contamination",
]
