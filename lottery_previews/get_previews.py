from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cash_pot import parse_cash_pot
from .history import load_previous_history, merge_history
from .lotto import parse_lotto_like
from .schema import (
    ExtractionResult,
    FieldExtractionError,
    Found,
    Malformed,
    MultiDrawRecord,
    NotFound,
    ResultDocument,
    SingleDrawRecord,
    validate_document,
)
from .sections import DEFAULT_BOUNDARIES, SectionNotFoundError, find_section

log = logging.getLogger(__name__)

BASE_URL = "https://www.jamaicaindex.com/lottery/results"
OUT_FILE = Path("data/lottery_previews.json")
DEFAULT_TIMEOUT = 20.0
DEFAULT_WORKERS = 3
USER_AGENT = "lottery-previews/0.1 (kiosk results preview)"

SINGLE = "single"
MULTI = "multi"

STATUS_OK = "ok"
STATUS_NOT_FOUND = "not_found"
STATUS_MALFORMED = "malformed"
STATUS_FETCH_FAILED = "fetch_failed"


class FetchError(RuntimeError):
    """Raised when a results page cannot be fetched."""


class ContentTypeError(FetchError):
    """Raised when the remote endpoint does not return a text-like payload."""


@dataclass(frozen=True)
class GameSpec:
    """Where a game lives and how its section is parsed."""

    key: str
    label: str
    url: str
    kind: str
    arity: int = 0
    heading: str = ""

    @property
    def section_heading(self) -> str:
        return self.heading or self.label


GAMES: Tuple[GameSpec, ...] = (
    GameSpec("cash_pot", "Cash Pot", f"{BASE_URL}/cash-pot", MULTI),
    GameSpec("lotto", "Lotto", f"{BASE_URL}/lotto", SINGLE, arity=6),
    GameSpec("super_lotto", "Super Lotto", f"{BASE_URL}/super-lotto", SINGLE, arity=5),
)

Page = Union[str, FetchError]


def _session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=["GET"],
    )
    session.mount("https://", HTTPAdapter(max_retries=retries))
    session.mount("http://", HTTPAdapter(max_retries=retries))
    session.headers.update({"User-Agent": USER_AGENT, "Accept-Language": "en-US,en;q=0.9"})
    return session


def utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def fetch_html(url: str, *, session: requests.Session, timeout: float = DEFAULT_TIMEOUT) -> str:
    """GET one page; every failure (timeout included) surfaces as FetchError."""

    started = time.monotonic()
    try:
        with session.get(url, timeout=timeout) as response:
            response.raise_for_status()
            content_type = response.headers.get("Content-Type", "")
            if "text" not in content_type and "html" not in content_type:
                raise ContentTypeError(f"{url}: unexpected content type {content_type!r}")
            text = response.text
    except requests.RequestException as exc:
        raise FetchError(f"{url}: {exc}") from exc
    log.debug("fetched %s (%d chars) in %.2fs", url, len(text), time.monotonic() - started)
    return text


def _fetch_with_own_session(url: str, *, timeout: float) -> str:
    with _session() as session:
        return fetch_html(url, session=session, timeout=timeout)


def fetch_pages(
    urls: Iterable[str],
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    workers: int = DEFAULT_WORKERS,
) -> Dict[str, Page]:
    """
    Fetch pages concurrently; a failed page maps to its FetchError instead of raising.

    Without ``session`` every page gets its own requests.Session, since one
    Session is not safe to share between threads. A caller-supplied session is
    shared by all workers and must tolerate concurrent ``get`` calls.
    """

    unique = list(dict.fromkeys(urls))
    if not unique:
        return {}

    pages: Dict[str, Page] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(unique)))) as pool:
        if session is None:
            futures = {
                url: pool.submit(_fetch_with_own_session, url, timeout=timeout) for url in unique
            }
        else:
            futures = {
                url: pool.submit(fetch_html, url, session=session, timeout=timeout)
                for url in unique
            }
        for url, future in futures.items():
            try:
                pages[url] = future.result()
            except FetchError as exc:
                pages[url] = exc
    return pages


def section_boundaries(spec: GameSpec, games: Sequence[GameSpec]) -> Tuple[str, ...]:
    """Other games' headings plus the default markers end this game's section."""

    others = tuple(g.section_heading for g in games if g.key != spec.key)
    return others + DEFAULT_BOUNDARIES


def extract_game(
    spec: GameSpec, html: str, *, boundaries: Sequence[str] = DEFAULT_BOUNDARIES
) -> ExtractionResult:
    """Per-game boundary: locate and parse, turning expected failures into result variants."""

    try:
        section = find_section(html, spec.section_heading, boundaries=boundaries)
        if spec.kind == MULTI:
            record = parse_cash_pot(section, label=spec.label)
        else:
            record = parse_lotto_like(section, spec.label, spec.arity)
    except SectionNotFoundError as exc:
        return NotFound(str(exc))
    except FieldExtractionError as exc:
        return Malformed(str(exc))
    except Exception as exc:
        log.exception("%s: unexpected failure while parsing", spec.key)
        return Malformed(f"{type(exc).__name__}: {exc}")
    return Found(record)


def build_document(
    pages: Mapping[str, Page],
    games: Sequence[GameSpec] = GAMES,
    *,
    now: Optional[str] = None,
) -> ResultDocument:
    """Assemble every game's record (or None) into one validated document."""

    records: Dict[str, Optional[Union[SingleDrawRecord, MultiDrawRecord]]] = {}
    status: Dict[str, str] = {}
    for spec in games:
        page = pages.get(spec.url)
        if not isinstance(page, str):
            log.warning("%s: fetch failed (%s)", spec.key, page or "no page")
            records[spec.key], status[spec.key] = None, STATUS_FETCH_FAILED
            continue

        result = extract_game(spec, page, boundaries=section_boundaries(spec, games))
        if isinstance(result, Found):
            records[spec.key], status[spec.key] = result.value, STATUS_OK
        elif isinstance(result, NotFound):
            log.warning("%s: section not found (%s)", spec.key, result.reason)
            records[spec.key], status[spec.key] = None, STATUS_NOT_FOUND
        else:
            log.warning("%s: malformed section (%s)", spec.key, result.reason)
            records[spec.key], status[spec.key] = None, STATUS_MALFORMED

    doc = ResultDocument(
        source={spec.key: spec.url for spec in games},
        last_updated_utc=now or utc_now(),
        games=records,
        status=status,
    )
    return validate_document(doc, {g.key: g.arity for g in games if g.kind == SINGLE})


def write_document(doc: ResultDocument, path: Path) -> Path:
    """Write JSON next to ``path`` then rename over it, so readers never see a partial file."""

    payload = json.dumps(doc.as_dict(), ensure_ascii=False, indent=2) + "\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(path)
    finally:
        if tmp.exists():
            tmp.unlink()
    return path


def read_document(path: Path) -> ResultDocument:
    return ResultDocument.from_dict(json.loads(path.read_text(encoding="utf-8")))


def summarize(doc: ResultDocument) -> List[str]:
    """One operator-facing line per game."""

    lines = []
    for key, record in doc.games.items():
        if record is None:
            lines.append(f"{key}: {doc.status.get(key, 'missing')}")
        elif isinstance(record, MultiDrawRecord):
            latest = record.latest
            tail = f"latest {latest.draw} {latest.number}" if latest else "no draw yet"
            lines.append(f"{key}: {record.date}, {len(record.draws)} draws, {tail}")
        else:
            numbers = " ".join(str(n) for n in record.numbers)
            bonus = f" + {record.bonus}" if record.bonus is not None else ""
            lines.append(f"{key}: {record.date}, {numbers}{bonus}")
    return lines


def run(
    *,
    out_path: Path = OUT_FILE,
    games: Sequence[GameSpec] = GAMES,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    workers: int = DEFAULT_WORKERS,
    history_limit: int = 0,
    now: Optional[str] = None,
) -> ResultDocument:
    """
    Fetch, extract, assemble and write one snapshot.

    Raises:
        FetchError: no page could be fetched at all; the output file is left untouched.
    """

    pages = fetch_pages([g.url for g in games], session=session, timeout=timeout, workers=workers)
    failures = [p for p in pages.values() if isinstance(p, FetchError)]
    if pages and len(failures) == len(pages):
        raise FetchError("No results page fetched; attempts: " + "; ".join(str(e) for e in failures))

    doc = build_document(pages, games, now=now)

    if history_limit > 0:
        previous = load_previous_history(out_path)
        for spec in games:
            if spec.kind != MULTI:
                continue
            record = doc.games.get(spec.key)
            doc.history[spec.key] = merge_history(
                previous.get(spec.key, []),
                record if isinstance(record, MultiDrawRecord) else None,
                history_limit,
            )

    write_document(doc, out_path)
    return doc


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fetch Cash Pot / Lotto / Super Lotto results and write the kiosk preview JSON"
    )
    parser.add_argument(
        "--out", type=Path, default=OUT_FILE, help=f"Output JSON path (default: {OUT_FILE})"
    )
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help="Per-request timeout in seconds"
    )
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Parallel page fetches")
    parser.add_argument(
        "--history-limit",
        type=int,
        default=0,
        help="Keep a rolling Cash Pot history of at most N draws in the output (0 disables)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress the per-game summary")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        doc = run(
            out_path=args.out,
            timeout=args.timeout,
            workers=args.workers,
            history_limit=args.history_limit,
        )
    except KeyboardInterrupt:
        log.error("Aborted.")
        return 130
    except FetchError as exc:
        log.error("update failed: %s", exc)
        return 1
    except Exception:
        log.exception("update failed")
        return 1

    log.info("Wrote %s", args.out)
    for line in summarize(doc):
        log.info(line)
    return 0


__all__ = [
    "FetchError",
    "ContentTypeError",
    "GameSpec",
    "GAMES",
    "fetch_html",
    "fetch_pages",
    "extract_game",
    "build_document",
    "write_document",
    "read_document",
    "summarize",
    "run",
    "main",
]


if __name__ == "__main__":
    sys.exit(main())
