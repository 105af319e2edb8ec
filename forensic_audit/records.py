"""
Record model for the audit log.
================================
One LogRecord per audit event, in the order the events appear in the log.
That order is the canonical event order for every analysis; records are
never re-sorted by timestamp.

Canonical columns (positional in the raw log):
  timestamp, user_id, session_id, action_type, target_resource,
  severity, bytes_transferred
"""
from __future__ import annotations

from dataclasses import dataclass, astuple
from typing import Iterable, Optional, Tuple
import pandas as pd


FIELD_NAMES: Tuple[str, ...] = (
    "timestamp",
    "user_id",
    "session_id",
    "action_type",
    "target_resource",
    "severity",
    "bytes_transferred",
)

LOGIN = "LOGIN"
LOGOUT = "LOGOUT"


class LogParseError(ValueError):
    """A retained log line could not be coerced into a LogRecord."""

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class LogRecord:
    timestamp: int
    user_id: str
    session_id: str
    action_type: str
    target_resource: Optional[str]
    severity: int
    bytes_transferred: int

    @property
    def is_login(self) -> bool:
        return self.action_type.upper() == LOGIN

    @property
    def is_logout(self) -> bool:
        return self.action_type.upper() == LOGOUT


@dataclass(frozen=True)
class Alert:
    """Severity-annotated projection of one event. Created fresh per prioritization."""
    timestamp: int
    user_id: str
    session_id: str
    action_type: str
    target_resource: Optional[str]
    severity: int
    bytes_transferred: int

    @classmethod
    def from_record(cls, record: LogRecord) -> "Alert":
        return cls(*astuple(record))


def records_to_frame(records: Iterable[LogRecord]) -> pd.DataFrame:
    """
    Tidy table of records, one row per event.
    `position` is the 0-based input position and is the sort key to use.
    """
    rows = [astuple(r) for r in records]
    df = pd.DataFrame(rows, columns=list(FIELD_NAMES))
    # Keep absent targets as None rather than NaN
    df["target_resource"] = df["target_resource"].astype(object)
    df.insert(0, "position", range(len(df)))
    return df
