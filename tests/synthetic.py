"""
Synthetic audit log factories shared by the test modules.
"""
from __future__ import annotations

import io
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

HEADER = "timestamp,user_id,session_id,action_type,target_resource,severity,bytes_transferred"

Row = Tuple[int, str, str, str, Optional[str], int, int]


def log_text(rows: Iterable[Row], header: str = HEADER) -> str:
    lines = [header]
    for ts, user, sess, action, target, sev, nbytes in rows:
        lines.append(f"{ts},{user},{sess},{action},{target or ''},{sev},{nbytes}")
    return "\n".join(lines) + "\n"


def make_log(rows: Iterable[Row]) -> io.StringIO:
    return io.StringIO(log_text(rows))


def make_synthetic_rows(
    n_users: int = 4,
    n_sessions_per_user: int = 5,
    max_actions: int = 6,
    seed: int = 0,
) -> List[Row]:
    """
    Well-nested sessions: every user's sessions are opened and closed in turn,
    with users interleaved at random. No session is left open.
    """
    rng = np.random.default_rng(seed)
    resources = ["db/customers", "db/orders", "share/export", "mail/outbox", "hr/payroll", "tmp/stage"]
    actions = ["READ", "WRITE", "COPY", "DELETE"]

    per_user: List[List[Row]] = []
    for u in range(n_users):
        user = f"user{u:02d}"
        events: List[Row] = []
        for s in range(n_sessions_per_user):
            sess = f"{user}-s{s}"
            events.append((0, user, sess, "LOGIN", None, 1, 0))
            for _ in range(int(rng.integers(0, max_actions + 1))):
                events.append((
                    0, user, sess,
                    str(rng.choice(actions)),
                    str(rng.choice(resources)),
                    int(rng.integers(1, 11)),
                    int(rng.integers(0, 100_000)),
                ))
            events.append((0, user, sess, "LOGOUT", None, 1, 0))
        per_user.append(events)

    # Interleave users while keeping each user's own order
    cursors = [0] * n_users
    rows: List[Row] = []
    ts = 1_700_000_000
    while any(c < len(e) for c, e in zip(cursors, per_user)):
        live = [i for i, (c, e) in enumerate(zip(cursors, per_user)) if c < len(e)]
        i = int(rng.choice(live))
        _, user, sess, action, target, sev, nbytes = per_user[i][cursors[i]]
        cursors[i] += 1
        ts += int(rng.integers(1, 30))
        rows.append((ts, user, sess, action, target, sev, nbytes))
    return rows


def brute_force_next_greater(values: Sequence[int]) -> List[Optional[int]]:
    out: List[Optional[int]] = []
    for i, v in enumerate(values):
        out.append(next((j for j in range(i + 1, len(values)) if values[j] > v), None))
    return out
