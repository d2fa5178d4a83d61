"""
Cash Pot (multi-draw) extraction.

A day's section reads like::

    Sunday | 15 February 2026
    EARLYBIRD 8:30AM #37097 4 Egg + gold + red
    MORNING 10:30AM #37098 ? ? + ? + ?

Each session label opens a short lookahead window (cut at the next label)
that is scanned for clock time, ``#`` draw number, value, meaning and up to
two colors. ``?`` in the value slot is "not drawn yet": the entry is kept
with ``number=None``. A label occurrence without any value slot is not a
draw at all and is dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern, Sequence

from .schema import COLORS, MAX_COLORS, SESSIONS, DrawEntry, FieldExtractionError, MultiDrawRecord
from .sections import find_date

log = logging.getLogger(__name__)

LOOKAHEAD = 80
UNKNOWN = "?"

# Site spelling varies between "EARLYBIRD" and "EARLY BIRD", "MIDAFTERNOON" and "MID-AFTERNOON".
_SESSION_SPELLINGS: Dict[str, str] = {
    "EARLYBIRD": r"EARLY[\s-]?BIRD",
    "MIDDAY": r"MID[\s-]?DAY",
    "MIDAFTERNOON": r"MID[\s-]?AFTERNOON",
    "DRIVETIME": r"DRIVE[\s-]?TIME",
}

TIME_RE = re.compile(r"\s*(\d{1,2}:\d{2}\s?[AP]M)\b", flags=re.I)
DRAW_NO_RE = re.compile(r"\s*#\s*(\d+)")
VALUE_RE = re.compile(r"\s*(\d{1,2}|\?)(?![\w:])")
MEANING_RE = re.compile(r"\s*([A-Za-z][A-Za-z' -]{0,30}?|\?)\s*(?=\+|$)")
COLOR_RE = re.compile(r"\+\s*(" + "|".join(COLORS) + r"|\?)(?![A-Za-z])", flags=re.I)


def session_pattern(sessions: Sequence[str]) -> Pattern[str]:
    """One alternation with a named group per session, in the given order."""

    parts = [
        f"(?P<s{i}>{_SESSION_SPELLINGS.get(name, re.escape(name))})"
        for i, name in enumerate(sessions)
    ]
    return re.compile(r"(?<![A-Za-z])(?:" + "|".join(parts) + r")(?![A-Za-z])", flags=re.I)


def parse_draw_window(session: str, window: str) -> Optional[DrawEntry]:
    """Parse the text after a session label; None when no value slot is present."""

    pos = 0
    clock: Optional[str] = None
    draw_no: Optional[int] = None
    for _ in range(2):
        m = TIME_RE.match(window, pos)
        if m and clock is None:
            clock = re.sub(r"\s+", "", m.group(1)).upper()
            pos = m.end()
            continue
        m = DRAW_NO_RE.match(window, pos)
        if m and draw_no is None:
            draw_no = int(m.group(1))
            pos = m.end()
            continue
        break

    m = VALUE_RE.match(window, pos)
    if not m:
        return None
    number = None if m.group(1) == UNKNOWN else int(m.group(1))
    pos = m.end()

    meaning = None
    m = MEANING_RE.match(window, pos)
    if m:
        pos = m.end()
        if m.group(1) != UNKNOWN:
            meaning = m.group(1).strip() or None

    colors = [c.lower() for c in COLOR_RE.findall(window, pos) if c != UNKNOWN]
    return DrawEntry(
        draw=session,
        time=clock,
        draw_no=draw_no,
        number=number,
        meaning=meaning,
        colors=tuple(colors[:MAX_COLORS]),
    )


def parse_draws(text: str, sessions: Sequence[str] = SESSIONS) -> List[DrawEntry]:
    """Return one entry per session found, in page order (first parse per session wins)."""

    pattern = session_pattern(sessions)
    hits = list(pattern.finditer(text))
    draws: List[DrawEntry] = []
    seen = set()
    for i, m in enumerate(hits):
        session = sessions[int(m.lastgroup[1:])]
        if session in seen:
            continue
        limit = hits[i + 1].start() if i + 1 < len(hits) else len(text)
        window = text[m.end() : min(limit, m.end() + LOOKAHEAD)]
        entry = parse_draw_window(session, window)
        if entry is None:
            log.debug("discarding %s occurrence without a value: %r", session, window[:40])
            continue
        seen.add(session)
        draws.append(entry)
    return draws


def parse_cash_pot(
    section: str, label: str = "Cash Pot", sessions: Sequence[str] = SESSIONS
) -> MultiDrawRecord:
    """
    Extract the day's Cash Pot draws from a located section.

    Only text after the first draw date and before the next one is scanned,
    so an older day listed further down never leaks into today's record.

    Raises:
        FieldExtractionError: the section carries no draw date.
    """

    date = find_date(section)
    if date is None:
        raise FieldExtractionError(f"{label}: no draw date in section")
    following = find_date(section, date.end)
    stop = following.start if following else len(section)

    draws = parse_draws(section[date.end : stop], sessions)
    return MultiDrawRecord(label=label, date=date.text, date_iso=date.iso, draws=tuple(draws))
