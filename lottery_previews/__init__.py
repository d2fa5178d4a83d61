"""
Lottery results preview for the kiosk.

Stable surface:
- run / main: fetch the Cash Pot, Lotto and Super Lotto pages and write one JSON snapshot.
- find_section / locate_section: isolate one game's block of a results page.
- parse_lotto_like / parse_cash_pot: turn a located block into a record.
- ResultDocument and the record types, with lossless dict (de)serialization.

Everything else in this package should be treated as internal.
"""

from __future__ import annotations

from .cash_pot import parse_cash_pot
from .get_previews import GAMES, ContentTypeError, FetchError, GameSpec, main, run
from .lotto import parse_lotto_like
from .schema import (
    COLORS,
    SESSIONS,
    DocumentValidationError,
    DrawEntry,
    FieldExtractionError,
    Found,
    Malformed,
    MultiDrawRecord,
    NotFound,
    ResultDocument,
    SingleDrawRecord,
)
from .sections import SectionNotFoundError, find_section, locate_section

__all__ = [
    "COLORS",
    "SESSIONS",
    "GAMES",
    "GameSpec",
    "DrawEntry",
    "SingleDrawRecord",
    "MultiDrawRecord",
    "ResultDocument",
    "Found",
    "NotFound",
    "Malformed",
    "FetchError",
    "ContentTypeError",
    "SectionNotFoundError",
    "FieldExtractionError",
    "DocumentValidationError",
    "find_section",
    "locate_section",
    "parse_lotto_like",
    "parse_cash_pot",
    "run",
    "main",
]
