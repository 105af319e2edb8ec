"""
Command line entry point: `forensic-audit`.

    forensic-audit invalid-sessions audit.csv
    forensic-audit timeline audit.csv s42
    forensic-audit alerts audit.csv -n 20
    forensic-audit spikes audit.csv
    forensic-audit trace audit.csv db/customers share/export
    forensic-audit report audit.csv --output results/ --session s42 --trace A B

Use "-" as the log path to read stdin.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .alerts import alerts_to_frame
from .config import ForensicsConfig
from .pipeline import (
    AuditLogAnalyzer,
    find_invalid_sessions_in,
    find_log_transfer_spikes,
    prioritize_log_alerts,
    reconstruct_session_timeline,
    trace_log_contamination,
)
from .records import LogParseError

logger = logging.getLogger("forensic_audit.cli")


def _source(path: str):
    return sys.stdin if path == "-" else Path(path)


def _print_json(obj) -> None:
    print(json.dumps(obj, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="forensic-audit", description="Forensic audit log analytics")
    parser.add_argument("--config", default=None, help="JSON config (see ForensicsConfig.to_json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("invalid-sessions", help="Sessions with broken LOGIN/LOGOUT nesting")
    p.add_argument("log")

    p = sub.add_parser("timeline", help="Action types of one session, in log order")
    p.add_argument("log")
    p.add_argument("session_id")

    p = sub.add_parser("alerts", help="Most severe events")
    p.add_argument("log")
    p.add_argument("-n", "--top-n", type=int, default=None,
                   help="Number of alerts (default: config alerts.top_n)")

    p = sub.add_parser("spikes", help="Next larger transfer for every event")
    p.add_argument("log")

    p = sub.add_parser("trace", help="Shortest contamination path between two resources")
    p.add_argument("log")
    p.add_argument("start")
    p.add_argument("target")

    p = sub.add_parser("report", help="Run every analysis and write artifacts")
    p.add_argument("log")
    p.add_argument("--output", default=None, help="Output directory (default: config io.output_dir)")
    p.add_argument("--session", default=None, help="Session to reconstruct")
    p.add_argument("-n", "--top-n", type=int, default=None)
    p.add_argument("--trace", nargs=2, metavar=("START", "TARGET"), default=None)
    p.add_argument("--no-plots", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cfg = ForensicsConfig.from_json(args.config) if args.config else ForensicsConfig()
    src = _source(args.log)

    try:
        if args.command == "invalid-sessions":
            _print_json(find_invalid_sessions_in(src, cfg))

        elif args.command == "timeline":
            _print_json(reconstruct_session_timeline(src, args.session_id, cfg))

        elif args.command == "alerts":
            n = cfg.alerts.top_n if args.top_n is None else args.top_n
            alerts = prioritize_log_alerts(src, n, cfg)
            print(alerts_to_frame(alerts).to_string(index=False))

        elif args.command == "spikes":
            spikes = find_log_transfer_spikes(src, cfg)
            _print_json({str(k): v for k, v in spikes.items()})

        elif args.command == "trace":
            path = trace_log_contamination(src, args.start, args.target, cfg)
            if path is None:
                print(f"no path from {args.start} to {args.target}")
                return 1
            print(" -> ".join(path))

        elif args.command == "report":
            if args.no_plots:
                cfg.report.make_plots = False
            art = AuditLogAnalyzer(cfg).run(
                src,
                session_id=args.session,
                top_n=args.top_n,
                trace=tuple(args.trace) if args.trace else None,
            )
            out_dir = Path(args.output) if args.output else Path(cfg.io.output_dir)
            written = art.write(out_dir, cfg)
            _print_json(art.summary())
            print(f"\nAll results written to: {out_dir.resolve()} ({len(written)} files)")

    except (LogParseError, FileNotFoundError) as e:
        parser.exit(2, f"forensic-audit: error: {e}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
