"""
Transfer-spike detection.
==========================
Next-greater-element over bytes_transferred, in log order: for each event,
the first later event that moved strictly more bytes.

The scan runs from the last event backward over a monotonic stack. Entries
with bytes <= the current event can never be the answer for anything earlier,
so they are popped before the current event is pushed; whatever remains on
top is the current event's next greater. Each position is pushed and popped
at most once.

If no event moved a strictly positive number of bytes the log has no spikes
and the result is empty.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .records import LogRecord

logger = logging.getLogger("forensic_audit.transfer")

SPIKE_COLUMNS = [
    "position", "timestamp", "bytes_transferred",
    "spike_position", "spike_timestamp", "spike_bytes",
]


def next_greater_positions(values: Sequence[int]) -> List[Optional[int]]:
    """For each index, the nearest later index with a strictly greater value, or None."""
    result: List[Optional[int]] = [None] * len(values)
    stack: List[int] = []
    for i in range(len(values) - 1, -1, -1):
        while stack and values[stack[-1]] <= values[i]:
            stack.pop()
        if stack:
            result[i] = stack[-1]
        stack.append(i)
    return result


def _has_positive_transfer(records: Sequence[LogRecord]) -> bool:
    return any(r.bytes_transferred > 0 for r in records)


def find_transfer_spikes(records: Sequence[LogRecord]) -> Dict[int, int]:
    """
    {event timestamp: timestamp of its next strictly larger transfer}.

    Events with no later larger transfer are omitted. When several events share
    a timestamp only the first one in log order that has a spike is kept;
    use find_transfer_spike_events() for a per-event view.
    """
    if not _has_positive_transfer(records):
        return {}

    nge = next_greater_positions([r.bytes_transferred for r in records])
    spikes: Dict[int, int] = {}
    collisions = 0
    for rec, j in zip(records, nge):
        if j is None:
            continue
        if rec.timestamp in spikes:
            collisions += 1
            continue
        spikes[rec.timestamp] = records[j].timestamp

    if collisions:
        logger.warning(
            "%d spike mappings dropped: timestamp shared with an earlier event", collisions
        )
    return spikes


def find_transfer_spike_events(records: Sequence[LogRecord]) -> pd.DataFrame:
    """
    Per-event spike table keyed by log position, so shared timestamps are kept.
    Columns: position, timestamp, bytes_transferred,
             spike_position, spike_timestamp, spike_bytes
    """
    if not _has_positive_transfer(records):
        return pd.DataFrame(columns=SPIKE_COLUMNS)

    nge = next_greater_positions([r.bytes_transferred for r in records])
    rows = [
        {
            "position": i,
            "timestamp": rec.timestamp,
            "bytes_transferred": rec.bytes_transferred,
            "spike_position": j,
            "spike_timestamp": records[j].timestamp,
            "spike_bytes": records[j].bytes_transferred,
        }
        for i, (rec, j) in enumerate(zip(records, nge))
        if j is not None
    ]
    return pd.DataFrame(rows, columns=SPIKE_COLUMNS)
