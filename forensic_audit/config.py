"""
Forensic Audit Configuration
=============================
Dataclass configs for loading an audit log and shaping the report:
  - IOConfig:     input/output paths and the raw line format
  - AlertConfig:  default size of the prioritized alert list
  - ReportConfig: static plot exports

Round-trips to/from JSON so a report run can be reproduced.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import json


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

@dataclass
class IOConfig:
    """Where the log comes from and how its lines are laid out."""
    input_path: Optional[Path] = None
    output_dir: Path = Path("output")

    # Raw format: positional, no quoting
    encoding: str = "utf-8"
    delimiter: str = ","
    header_lines: int = 1


@dataclass
class AlertConfig:
    top_n: int = 10


@dataclass
class ReportConfig:
    """Static exports written by AnalysisArtifacts.write()."""
    make_plots: bool = True
    dpi: int = 160
    # Largest graph (in nodes) that plot_contamination_graph will draw
    max_graph_nodes: int = 200


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class ForensicsConfig:
    """
    Master config for the audit log analyzer.

    Usage:
        cfg = ForensicsConfig()                        # defaults
        cfg = ForensicsConfig(alerts=AlertConfig(top_n=25))
        cfg = ForensicsConfig.from_json("config.json")
    """
    io: IOConfig = field(default_factory=IOConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    def as_dict(self) -> Dict[str, Any]:
        import dataclasses
        return dataclasses.asdict(self)

    def to_json(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.as_dict(), f, indent=2, default=str)

    @classmethod
    def from_json(cls, path: str) -> "ForensicsConfig":
        with open(path) as f:
            d = json.load(f)
        io = dict(d.get("io", {}))
        if io.get("input_path") is not None:
            io["input_path"] = Path(io["input_path"])
        if io.get("output_dir") is not None:
            io["output_dir"] = Path(io["output_dir"])
        return cls(
            io=IOConfig(**io),
            alerts=AlertConfig(**d.get("alerts", {})),
            report=ReportConfig(**d.get("report", {})),
        )
