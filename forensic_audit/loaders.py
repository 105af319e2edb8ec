"""
Log loader.
============
Reads a raw audit log into an ordered list of LogRecords.

Format
------
    timestamp,user_id,session_id,action_type,target_resource,severity,bytes_transferred
    1000,alice,s1,LOGIN,,1,0
    1005,alice,s1,READ,db/customers,3,5120

- the first line is a header and is always discarded
- lines that are blank after stripping are skipped
- fields are split on the delimiter with no quoting support, then trimmed
- an empty target_resource is read as absent (None)

Any malformed retained line aborts the whole load with LogParseError;
there is no skip-and-continue.

Usage
-----
    from forensic_audit.loaders import load_records

    records = load_records("data/audit.csv")
    records = load_records(io.StringIO(text))
    records = load_records(open("audit.csv", "rb"))
"""
from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Union

from .config import ForensicsConfig
from .records import FIELD_NAMES, LogParseError, LogRecord

logger = logging.getLogger("forensic_audit.loaders")

LogSource = Union[str, Path, IO, Iterable]

_N_FIELDS = len(FIELD_NAMES)

# Plain signed decimal only; no digit separators or whitespace inside
INT_RE = re.compile(r"[+-]?[0-9]+")


# ---------------------------------------------------------------------------
# Per-line coercion
# ---------------------------------------------------------------------------

def _to_int(value: str, name: str, line_number: Optional[int], line: str) -> int:
    if not INT_RE.fullmatch(value):
        raise LogParseError(
            f"field '{name}' is not an integer: {value!r}", line_number, line
        )
    return int(value)


def parse_line(line: str, line_number: Optional[int] = None, delimiter: str = ",") -> LogRecord:
    """Coerce one retained log line into a LogRecord."""
    parts = [p.strip() for p in line.split(delimiter)]
    if len(parts) < _N_FIELDS:
        raise LogParseError(
            f"expected {_N_FIELDS} fields, found {len(parts)}", line_number, line
        )

    ts, user, session, action, target, severity, nbytes = parts[:_N_FIELDS]
    return LogRecord(
        timestamp=_to_int(ts, "timestamp", line_number, line),
        user_id=user,
        session_id=session,
        action_type=action,
        target_resource=target or None,
        severity=_to_int(severity, "severity", line_number, line),
        bytes_transferred=_to_int(nbytes, "bytes_transferred", line_number, line),
    )


# ---------------------------------------------------------------------------
# Source handling
# ---------------------------------------------------------------------------

def _iter_lines(lines: Iterable, encoding: str) -> Iterator[str]:
    for raw in lines:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode(encoding)
        yield raw


def _read_lines(source: LogSource, encoding: str) -> List[str]:
    """Materialize the source as a list of text lines. I/O errors propagate."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Audit log not found: {path}")
        with open(path, "r", encoding=encoding, newline=None) as f:
            return [line.rstrip("\r\n") for line in f]

    if hasattr(source, "read"):
        data = source.read()
        if isinstance(data, (bytes, bytearray)):
            data = data.decode(encoding)
        # Split on \n, \r and \r\n only
        return [line.rstrip("\r\n") for line in io.StringIO(data, newline=None)]

    return [line.rstrip("\r\n") for line in _iter_lines(source, encoding)]


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def load_records(source: LogSource, cfg: Optional[ForensicsConfig] = None) -> List[LogRecord]:
    """
    Load the full log into memory, preserving input order.

    source: a path, a text or binary stream, or an iterable of lines.
    Returns [] for a header-only log.
    """
    icfg = (cfg or ForensicsConfig()).io
    lines = _read_lines(source, icfg.encoding)

    records: List[LogRecord] = []
    for idx, line in enumerate(lines):
        if idx < icfg.header_lines:
            continue
        if not line.strip():
            continue
        records.append(parse_line(line, line_number=idx + 1, delimiter=icfg.delimiter))

    logger.info("Loaded %d records (%d lines read)", len(records), len(lines))
    return records
