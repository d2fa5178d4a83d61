from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

# Canonical session order; "latest" is decided against this tuple, not page order.
SESSIONS: Tuple[str, ...] = (
    "EARLYBIRD",
    "MORNING",
    "MIDDAY",
    "MIDAFTERNOON",
    "DRIVETIME",
    "EVENING",
)
COLORS: Tuple[str, ...] = ("gold", "red", "white")
MAX_COLORS = 2

T = TypeVar("T")


class FieldExtractionError(ValueError):
    """Raised when a located section lacks a required field (date, enough numbers)."""


class DocumentValidationError(ValueError):
    """Raised when an assembled document violates the output schema."""


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    reason: str


@dataclass(frozen=True)
class Malformed:
    reason: str


ExtractionResult = Union[Found[T], NotFound, Malformed]


def session_rank(session: str) -> int:
    return SESSIONS.index(session)


@dataclass(frozen=True)
class DrawEntry:
    """One Cash Pot session. ``number is None`` means "not drawn yet", never zero."""

    draw: str
    time: Optional[str] = None
    draw_no: Optional[int] = None
    number: Optional[int] = None
    meaning: Optional[str] = None
    colors: Tuple[str, ...] = ()

    @property
    def confirmed(self) -> bool:
        return self.number is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "draw": self.draw,
            "time": self.time,
            "draw_no": self.draw_no,
            "number": self.number,
            "meaning": self.meaning,
            "colors": list(self.colors),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DrawEntry":
        return cls(
            draw=raw["draw"],
            time=raw.get("time"),
            draw_no=raw.get("draw_no"),
            number=raw.get("number"),
            meaning=raw.get("meaning"),
            colors=tuple(raw.get("colors") or ()),
        )


@dataclass(frozen=True)
class SingleDrawRecord:
    """Lotto-style result: fixed-arity main numbers plus an optional bonus."""

    label: str
    date: str
    numbers: Tuple[int, ...]
    bonus: Optional[int] = None
    next_jackpot: Optional[str] = None
    date_iso: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "date": self.date,
            "date_iso": self.date_iso,
            "numbers": list(self.numbers),
            "bonus": self.bonus,
            "next_jackpot": self.next_jackpot,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SingleDrawRecord":
        return cls(
            label=raw["label"],
            date=raw["date"],
            numbers=tuple(int(n) for n in raw["numbers"]),
            bonus=raw.get("bonus"),
            next_jackpot=raw.get("next_jackpot"),
            date_iso=raw.get("date_iso"),
        )


def pick_latest(draws: List[DrawEntry]) -> Optional[DrawEntry]:
    """Return the confirmed draw whose session comes last in canonical order."""

    confirmed = [d for d in draws if d.confirmed]
    if not confirmed:
        return None
    return max(confirmed, key=lambda d: session_rank(d.draw))


@dataclass(frozen=True)
class MultiDrawRecord:
    """Cash Pot-style result: several sessions drawn on the same day."""

    label: str
    date: str
    draws: Tuple[DrawEntry, ...] = ()
    date_iso: Optional[str] = None

    @property
    def latest(self) -> Optional[DrawEntry]:
        return pick_latest(list(self.draws))

    def as_dict(self) -> Dict[str, Any]:
        latest = self.latest
        return {
            "label": self.label,
            "date": self.date,
            "date_iso": self.date_iso,
            "latest": latest.as_dict() if latest else None,
            "draws": [d.as_dict() for d in self.draws],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MultiDrawRecord":
        return cls(
            label=raw["label"],
            date=raw["date"],
            draws=tuple(DrawEntry.from_dict(d) for d in raw.get("draws") or ()),
            date_iso=raw.get("date_iso"),
        )


GameRecord = Union[SingleDrawRecord, MultiDrawRecord]


def record_from_dict(raw: Optional[Mapping[str, Any]]) -> Optional[GameRecord]:
    if raw is None:
        return None
    if "draws" in raw:
        return MultiDrawRecord.from_dict(raw)
    return SingleDrawRecord.from_dict(raw)


@dataclass
class ResultDocument:
    source: Dict[str, str]
    last_updated_utc: str
    games: Dict[str, Optional[GameRecord]]
    status: Dict[str, str] = field(default_factory=dict)
    history: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source": dict(self.source),
            "last_updated_utc": self.last_updated_utc,
            "games": {k: (v.as_dict() if v is not None else None) for k, v in self.games.items()},
            "status": dict(self.status),
        }
        if self.history:
            out["history"] = {k: list(v) for k, v in self.history.items()}
        return out

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ResultDocument":
        return cls(
            source=dict(raw["source"]),
            last_updated_utc=raw["last_updated_utc"],
            games={k: record_from_dict(v) for k, v in raw["games"].items()},
            status=dict(raw.get("status") or {}),
            history={k: list(v) for k, v in (raw.get("history") or {}).items()},
        )


def _validate_entry(game: str, entry: DrawEntry) -> None:
    if entry.draw not in SESSIONS:
        raise DocumentValidationError(f"{game}: unknown session label {entry.draw!r}")
    if len(entry.colors) > MAX_COLORS:
        raise DocumentValidationError(
            f"{game}: {entry.draw} carries {len(entry.colors)} colors (max {MAX_COLORS})"
        )
    bad = [c for c in entry.colors if c not in COLORS]
    if bad:
        raise DocumentValidationError(f"{game}: {entry.draw} has unknown colors {bad}")


def validate_document(doc: ResultDocument, arities: Mapping[str, int]) -> ResultDocument:
    """Check arity and vocabulary constraints before the document is written."""

    for game, record in doc.games.items():
        if record is None:
            continue
        if isinstance(record, SingleDrawRecord):
            expected = arities.get(game)
            if expected is not None and len(record.numbers) != expected:
                raise DocumentValidationError(
                    f"{game}: expected {expected} numbers, got {len(record.numbers)}"
                )
            continue
        for entry in record.draws:
            _validate_entry(game, entry)
    return doc
