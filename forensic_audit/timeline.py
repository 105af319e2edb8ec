"""Session timeline reconstruction."""
from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from .records import LogRecord, records_to_frame


def reconstruct_timeline(records: Sequence[LogRecord], session_id: str) -> List[str]:
    """
    Action types of every event in `session_id`, in log order.
    Exact, case-sensitive match; [] if the session never appears.
    """
    return [r.action_type for r in records if r.session_id == session_id]


def session_summary(records: Sequence[LogRecord]) -> pd.DataFrame:
    """
    Per-session overview, in order of first appearance:
    session_id, user_id, n_events, first_ts, last_ts, total_bytes, max_severity.

    first_ts / last_ts are the timestamps of the first and last events in log
    order, not the min / max values.
    """
    df = records_to_frame(records)
    cols = ["session_id", "user_id", "n_events", "first_ts", "last_ts",
            "total_bytes", "max_severity"]
    if df.empty:
        return pd.DataFrame(columns=cols)

    agg = (
        df.groupby("session_id", sort=False)
        .agg(
            user_id=("user_id", "first"),
            n_events=("position", "count"),
            first_ts=("timestamp", "first"),
            last_ts=("timestamp", "last"),
            total_bytes=("bytes_transferred", "sum"),
            max_severity=("severity", "max"),
        )
        .reset_index()
    )
    return agg[cols]
