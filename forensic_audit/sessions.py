"""
Session validation.
====================
Classifies sessions as structurally invalid using a per-user stack of open
sessions, consumed strictly in log order:

  LOGIN   - a non-empty stack means another session was still open for the
            user; the session on top is invalid. The new session is pushed.
  LOGOUT  - an empty stack, or a top that is not this session, is an
            unmatched / out-of-order logout; this session is invalid and the
            stack is left alone. Otherwise the top is popped.
  other   - ignored.

Anything still on a stack at end-of-log was never closed and is invalid.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import pandas as pd

from .records import LogRecord

logger = logging.getLogger("forensic_audit.sessions")

NESTED_LOGIN = "nested_login"
UNMATCHED_LOGOUT = "unmatched_logout"
NEVER_CLOSED = "never_closed"


def _scan_sessions(records: Sequence[LogRecord]) -> Dict[str, dict]:
    """
    Run the stack scan. Returns {session_id: {"user_id", "reason", "timestamp"}}
    for invalid sessions, in the order they were first marked.
    """
    stacks: Dict[str, List[str]] = {}
    invalid: Dict[str, dict] = {}

    def _mark(session_id: str, user_id: str, reason: str, ts) -> None:
        if session_id not in invalid:
            invalid[session_id] = {"user_id": user_id, "reason": reason, "timestamp": ts}

    for rec in records:
        if rec.is_login:
            stack = stacks.setdefault(rec.user_id, [])
            if stack:
                _mark(stack[-1], rec.user_id, NESTED_LOGIN, rec.timestamp)
            stack.append(rec.session_id)
        elif rec.is_logout:
            stack = stacks.get(rec.user_id)
            if not stack or stack[-1] != rec.session_id:
                _mark(rec.session_id, rec.user_id, UNMATCHED_LOGOUT, rec.timestamp)
            else:
                stack.pop()

    for user_id, stack in stacks.items():
        for session_id in stack:
            _mark(session_id, user_id, NEVER_CLOSED, None)

    return invalid


def find_invalid_sessions(records: Sequence[LogRecord]) -> List[str]:
    """Unique invalid session ids, in the order they were first marked."""
    invalid = list(_scan_sessions(records))
    logger.debug("Session scan: %d invalid sessions", len(invalid))
    return invalid


def session_stack_report(records: Sequence[LogRecord]) -> pd.DataFrame:
    """
    One row per invalid session with the reason it was first flagged.
    Columns: session_id, user_id, reason, timestamp (None for never_closed).
    """
    invalid = _scan_sessions(records)
    rows = [{"session_id": sid, **info} for sid, info in invalid.items()]
    return pd.DataFrame(rows, columns=["session_id", "user_id", "reason", "timestamp"])
