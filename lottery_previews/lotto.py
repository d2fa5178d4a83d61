from __future__ import annotations

import re
from typing import List, Optional

from .schema import FieldExtractionError, SingleDrawRecord
from .sections import find_date

JACKPOT_MARKER_RE = re.compile(r"Next\s+Jackpot\b\s*:?", flags=re.I)
JACKPOT_RE = re.compile(
    r"Next\s+Jackpot\b\s*:?\s*"
    r"((?:[A-Z]{3}\s*)?[$€£]?\s*\d[\d,.]*\s*(?:million|billion|[MBK]\b)?)",
    flags=re.I,
)
# 1-2 digit tokens only; keeps draw ids, years, clock times and money out.
# Commas and full stops separate numbers unless they form a decimal ("39.5") or a
# thousands group ("1,250,000").
NUMBER_RE = re.compile(r"(?<![\w#$€£:/])(?<!\d\.)(\d{1,2})(?![\w:/]|\.\d|,\d{3})")


def parse_jackpot(text: str) -> Optional[str]:
    """Return the amount after a "Next Jackpot" label, e.g. ``"$39M"`` or ``"JMD 150 million"``."""

    m = JACKPOT_RE.search(text)
    if not m:
        return None
    return " ".join(m.group(1).split()) or None


def number_tokens(text: str) -> List[int]:
    return [int(m.group(1)) for m in NUMBER_RE.finditer(text)]


def parse_lotto_like(section: str, label: str, arity: int) -> SingleDrawRecord:
    """
    Extract a single-draw result from a located section.

    Numbers are read after the draw date and before the next jackpot marker
    (or the next draw date). The first ``arity`` tokens are the main numbers,
    the following one (if any) is the bonus.

    Raises:
        FieldExtractionError: no draw date, or fewer than ``arity`` numbers.
    """

    date = find_date(section)
    if date is None:
        raise FieldExtractionError(f"{label}: no draw date in section")

    stop = len(section)
    marker = JACKPOT_MARKER_RE.search(section, date.end)
    if marker:
        stop = marker.start()
    following = find_date(section, date.end)
    if following and following.start < stop:
        stop = following.start

    tokens = number_tokens(section[date.end : stop])
    if len(tokens) < arity:
        raise FieldExtractionError(
            f"{label}: expected {arity} numbers after {date.text!r}, found {len(tokens)}"
        )

    return SingleDrawRecord(
        label=label,
        date=date.text,
        date_iso=date.iso,
        numbers=tuple(tokens[:arity]),
        bonus=tokens[arity] if len(tokens) > arity else None,
        next_jackpot=parse_jackpot(section),
    )
