from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .schema import SESSIONS, MultiDrawRecord, session_rank

log = logging.getLogger(__name__)

HISTORY_COLUMNS: List[str] = [
    "date",
    "date_iso",
    "draw",
    "time",
    "draw_no",
    "number",
    "meaning",
    "colors",
]


def history_rows(record: Optional[MultiDrawRecord]) -> List[Dict[str, Any]]:
    """Confirmed draws of a record, each tagged with the day it belongs to."""

    if record is None:
        return []
    return [
        {"date": record.date, "date_iso": record.date_iso, **entry.as_dict()}
        for entry in record.draws
        if entry.confirmed
    ]


def _coerce_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"not a whole number: {value!r}")
    return int(value)


def coerce_row(row: Any) -> Dict[str, Any]:
    """
    Normalize one stored history row.

    Raises:
        ValueError: unknown session, missing ISO day, or a field of the wrong type.
    """

    if not isinstance(row, Mapping):
        raise ValueError(f"row is not an object: {row!r}")
    if row.get("draw") not in SESSIONS:
        raise ValueError(f"unknown session {row.get('draw')!r}")
    if not isinstance(row.get("date_iso"), str) or not row["date_iso"]:
        raise ValueError("row has no ISO date")
    colors = row.get("colors") or []
    if not isinstance(colors, (list, tuple)) or not all(isinstance(c, str) for c in colors):
        raise ValueError(f"bad colors {colors!r}")
    for key in ("date", "time", "meaning"):
        if row.get(key) is not None and not isinstance(row[key], str):
            raise ValueError(f"bad {key} {row[key]!r}")

    out = {key: row.get(key) for key in HISTORY_COLUMNS}
    out["draw_no"] = _coerce_int(row.get("draw_no"))
    out["number"] = _coerce_int(row.get("number"))
    out["colors"] = list(colors)
    return out


def _valid_rows(rows: Iterable[Any], where: str) -> List[Dict[str, Any]]:
    kept = []
    for row in rows:
        try:
            kept.append(coerce_row(row))
        except ValueError as exc:
            log.warning("Dropping history row from %s: %s", where, exc)
    return kept


def load_previous_history(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """
    Read the ``history`` block of a previous output file.

    A missing or unreadable file yields no history; individual rows that do not
    look like stored draws are dropped with a warning.
    """

    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        history = raw.get("history") or {}
        return {str(k): _valid_rows(v, f"{path} [{k}]") for k, v in history.items()}
    except (OSError, ValueError, AttributeError, TypeError) as exc:
        log.warning("Ignoring unreadable history in %s: %s", path, exc)
        return {}


def _clean(row: Mapping[str, Any]) -> Dict[str, Any]:
    out = {}
    for key in HISTORY_COLUMNS:
        value = row.get(key)
        if not isinstance(value, (list, tuple)) and pd.isna(value):
            value = None
        out[key] = value
    out["colors"] = list(out["colors"] or [])
    return out


def merge_history(
    previous: Sequence[Mapping[str, Any]],
    record: Optional[MultiDrawRecord],
    limit: int,
) -> List[Dict[str, Any]]:
    """
    Append today's confirmed draws to the rolling history and keep the newest ``limit``.

    Rows are keyed by (ISO day, session); a re-scraped draw replaces the stored one.
    Rows without an ISO day cannot be ordered and are dropped.
    Output is chronological: oldest day first, sessions in canonical order.
    """

    if limit <= 0:
        return []
    rows = _valid_rows(list(previous) + history_rows(record), "merge")
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=HISTORY_COLUMNS, dtype=object)
    df["_rank"] = df["draw"].map(session_rank).astype(int)
    df = df.drop_duplicates(subset=["date_iso", "draw"], keep="last")
    df = df.sort_values(["date_iso", "_rank"], kind="stable").tail(limit)

    return [_clean(row) for row in df[HISTORY_COLUMNS].to_dict(orient="records")]
