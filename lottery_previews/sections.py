"""
Page text normalization and section location.

A results page is reduced to whitespace-squashed text (or walked as a DOM),
then the block belonging to one game is isolated: everything after the game
heading up to the next boundary (another game's heading, a "History" marker,
or the end of the page).

Headings also appear in navigation menus and inside longer headings
("Lotto" inside "Super Lotto"), so every occurrence is tried and the first
span that actually holds a draw date wins.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Pattern, Sequence, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

log = logging.getLogger(__name__)

DATE_RE = re.compile(
    r"\b((?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)[a-z]*)\s*\|\s*(\d{1,2}\s+[A-Za-z]+\s+\d{4})\b",
    flags=re.I,
)
DEFAULT_BOUNDARIES: Tuple[str, ...] = ("History",)
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_SKIP_TAGS = ("script", "style", "noscript", "template")


class SectionNotFoundError(LookupError):
    """Raised when a game heading does not appear in the page."""


@dataclass(frozen=True)
class DateToken:
    text: str  # "Saturday | 14 February 2026"
    iso: Optional[str]
    start: int
    end: int


def squash(text: str) -> str:
    """Collapse every whitespace run (including NBSP) into one space."""

    return " ".join(text.split())


def normalize_text(html: str) -> str:
    """Return the visible body text of a page as a single whitespace-squashed line."""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(_SKIP_TAGS)):
        tag.decompose()
    root = soup.body or soup
    return squash(root.get_text(" "))


def _iso_date(day_month_year: str) -> Optional[str]:
    for fmt in ("%d %B %Y", "%d %b %Y"):
        try:
            return dt.datetime.strptime(day_month_year, fmt).date().isoformat()
        except ValueError:
            pass
    return None


def find_date(text: str, pos: int = 0) -> Optional[DateToken]:
    """Find the first ``<weekday> | <day> <month> <year>`` token at or after ``pos``."""

    m = DATE_RE.search(text, pos)
    if not m:
        return None
    weekday, rest = m.group(1), squash(m.group(2))
    return DateToken(text=f"{weekday} | {rest}", iso=_iso_date(rest), start=m.start(), end=m.end())


def phrase_pattern(phrase: str) -> Pattern[str]:
    """Case-insensitive whole-word pattern tolerant to whitespace between words."""

    words = phrase.split()
    if not words:
        raise ValueError("Empty heading/marker phrase")
    body = r"\s+".join(re.escape(w) for w in words)
    return re.compile(rf"(?<![A-Za-z0-9]){body}(?![A-Za-z0-9])", flags=re.I)


def _occurrences(
    text: str, heading: str, boundaries: Sequence[str], start: int = 0
) -> Iterator[re.Match]:
    """Heading matches that are not merely part of a longer boundary phrase."""

    head_pat = phrase_pattern(heading)
    covering: List[Tuple[int, int]] = []
    for phrase in boundaries:
        if phrase_pattern(phrase).fullmatch(heading):
            continue
        covering.extend(m.span() for m in phrase_pattern(phrase).finditer(text))

    for m in head_pat.finditer(text, start):
        inside = any(lo <= m.start() and m.end() <= hi for lo, hi in covering)
        if not inside:
            yield m


def _boundary_at(text: str, pos: int, boundaries: Sequence[str]) -> int:
    end = len(text)
    for phrase in boundaries:
        m = phrase_pattern(phrase).search(text, pos)
        if m and m.start() < end:
            end = m.start()
    return end


def locate_section(
    text: str,
    heading: str,
    *,
    boundaries: Sequence[str] = DEFAULT_BOUNDARIES,
    anchor: Optional[str] = None,
    must_contain: Optional[Pattern[str]] = DATE_RE,
) -> str:
    """
    Return the text between ``heading`` and the next boundary.

    Args:
        text: page text (squashed internally, so raw multi-line text is fine).
        heading: game heading, matched case-insensitively on word boundaries.
        boundaries: phrases that end a section (other game headings, "History").
        anchor: when given and present, only headings after it are considered.
        must_contain: prefer the first candidate span matching this pattern;
            when none does, the first candidate is returned as-is.

    Raises:
        SectionNotFoundError: the heading does not occur (after the anchor).
    """

    text = squash(text)
    start = 0
    if anchor:
        m = phrase_pattern(anchor).search(text)
        if m:
            start = m.end()
        else:
            log.debug("anchor %r not in page; searching whole text", anchor)

    spans = [
        text[m.end() : _boundary_at(text, m.end(), boundaries)].strip()
        for m in _occurrences(text, heading, boundaries, start)
    ]
    if not spans:
        raise SectionNotFoundError(f"Heading {heading!r} not found in page")
    if must_contain is not None:
        for span in spans:
            if must_contain.search(span):
                return span
        log.debug("no %r span matches %s; using the first", heading, must_contain.pattern)
    return spans[0]


def _text_after_heading(node: Tag) -> str:
    """Visible text following a heading tag up to the next heading of the same or higher rank."""

    level = int(node.name[1])
    parts: List[str] = []
    for el in node.next_elements:
        if isinstance(el, Tag):
            if el.name in HEADING_TAGS and int(el.name[1]) <= level:
                break
            continue
        if isinstance(el, Comment) or not isinstance(el, NavigableString):
            continue
        if el.parent is not None and el.parent.name in _SKIP_TAGS:
            continue
        if any(p is node for p in el.parents):
            continue
        parts.append(str(el))
    return squash(" ".join(parts))


def locate_section_in_html(
    html: str,
    heading: str,
    *,
    boundaries: Sequence[str] = DEFAULT_BOUNDARIES,
    must_contain: Optional[Pattern[str]] = DATE_RE,
) -> str:
    """
    DOM variant of :func:`locate_section`: find a heading *tag* whose text names
    the game, and read its container up to the next heading of equal rank.

    Raises:
        SectionNotFoundError: no heading tag names the game, or (when
            ``must_contain`` is set) none of their spans holds the pattern.
    """

    soup = BeautifulSoup(html, "html.parser")
    for node in soup.find_all(list(HEADING_TAGS)):
        title = squash(node.get_text(" "))
        if next(_occurrences(title, heading, boundaries), None) is None:
            continue
        span = _text_after_heading(node)
        span = span[: _boundary_at(span, 0, boundaries)].strip()
        if must_contain is None or must_contain.search(span):
            return span
    raise SectionNotFoundError(f"No <h1>-<h6> heading for {heading!r} with a usable section")


def find_section(
    html: str,
    heading: str,
    *,
    boundaries: Sequence[str] = DEFAULT_BOUNDARIES,
    anchor: Optional[str] = None,
) -> str:
    """Locate a game's section via heading tags first, then fall back to page text."""

    try:
        return locate_section_in_html(html, heading, boundaries=boundaries)
    except SectionNotFoundError as exc:
        log.debug("%s; falling back to text search", exc)
    return locate_section(normalize_text(html), heading, boundaries=boundaries, anchor=anchor)
