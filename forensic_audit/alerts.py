"""
Alert prioritization.
======================
Every event becomes an Alert; the n most severe are returned, most severe
first. Selection is a heap over severity only. Order among equal severities
is not part of the contract.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import astuple
from operator import attrgetter
from typing import List, Sequence

import pandas as pd

from .records import FIELD_NAMES, Alert, LogRecord

logger = logging.getLogger("forensic_audit.alerts")


def prioritize_alerts(records: Sequence[LogRecord], n: int) -> List[Alert]:
    """Top-n alerts by severity (descending). n <= 0 gives []."""
    if n <= 0:
        return []
    alerts = [Alert.from_record(r) for r in records]
    top = heapq.nlargest(n, alerts, key=attrgetter("severity"))
    logger.debug("Selected %d of %d alerts", len(top), len(alerts))
    return top


def alerts_to_frame(alerts: Sequence[Alert]) -> pd.DataFrame:
    """Alerts as a table with the canonical columns, plus a 1-based rank."""
    df = pd.DataFrame([astuple(a) for a in alerts], columns=list(FIELD_NAMES))
    df.insert(0, "rank", range(1, len(df) + 1))
    return df
