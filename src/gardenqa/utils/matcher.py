import re
from dataclasses import dataclass
from typing import Any, Iterable

from gardenqa.services.garden_db import Database, Record

ALL_CATEGORIES = "all"
MAX_RESULTS = 3

EXACT_KEY_POINTS = 6
PARTIAL_KEY_POINTS = 3
QUESTION_POINTS = 1
FALLBACK_POINTS = 1
FALLBACK_HEAD_LEN = 2

# ァ (U+30A1) .. ン (U+30F3) shift down 0x60 onto ぁ .. ん
_KATAKANA_TO_HIRAGANA = {cp: cp - 0x60 for cp in range(0x30A1, 0x30F4)}

_RE_LONG_VOWEL_HYPHEN = re.compile(r"[ー\-－‐]")
_RE_WHITESPACE = re.compile(r"\s+")
_RE_PUNCTUATION = re.compile(r"[()（）「」『』、。,.]")


@dataclass(frozen=True)
class Match:
    record: Record
    score: int


def normalize(text: Any) -> str:
    """
    Canonicalize text for fuzzy matching: lowercase, katakana folded to
    hiragana, long-vowel marks, hyphens, whitespace and brackets/commas/periods removed.
    """
    if not text:
        return ""
    s = str(text).lower()
    s = s.translate(_KATAKANA_TO_HIRAGANA)
    s = _RE_LONG_VOWEL_HYPHEN.sub("", s)
    s = _RE_WHITESPACE.sub("", s)
    return _RE_PUNCTUATION.sub("", s)


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def _score_normalized(q: str, record: Record) -> int:
    if not q:
        return 0

    total = 0
    for key in record.keys:
        nk = normalize(key)
        if not nk:
            continue
        if nk == q:
            total += EXACT_KEY_POINTS
        elif _overlaps(q, nk):
            total += PARTIAL_KEY_POINTS

    for pair in record.qa:
        nq = normalize(pair.q)
        if not nq:
            continue
        if _overlaps(q, nq):
            total += QUESTION_POINTS

    return total


def score(query: Any, record: Record) -> int:
    return _score_normalized(normalize(query), record)


def in_category(record: Record, category: str) -> bool:
    return category == ALL_CATEGORIES or record.category == category


def _records(database: Database | Iterable[Record]) -> Iterable[Record]:
    if isinstance(database, Database):
        return database.items
    return database


def _prefix_fallback(q: str, records: list[Record]) -> list[Match]:
    head = q[:FALLBACK_HEAD_LEN]
    hits: list[Match] = []
    for record in records:
        if any(normalize(k).startswith(head) for k in record.keys):
            hits.append(Match(record, FALLBACK_POINTS))
    return hits


def search(
    query: Any,
    database: Database | Iterable[Record],
    category: str = ALL_CATEGORIES,
) -> list[Match]:
    """
    Rank records in `category` against `query`, best first, at most MAX_RESULTS.

    Ties keep database order. When nothing scores and the normalized query
    has at least two characters, records whose keys start with its first
    two characters are returned with score 1.
    """
    q = normalize(query)
    candidates = [r for r in _records(database) if in_category(r, category)]

    scored: list[Match] = []
    for record in candidates:
        points = _score_normalized(q, record)
        if points > 0:
            scored.append(Match(record, points))

    # list.sort is stable, equal scores stay in database order
    scored.sort(key=lambda m: m.score, reverse=True)

    if not scored and len(q) >= FALLBACK_HEAD_LEN:
        return _prefix_fallback(q, candidates)[:MAX_RESULTS]

    return scored[:MAX_RESULTS]


def categories(database: Database | Iterable[Record]) -> list[str]:
    seen: dict[str, None] = {}
    for record in _records(database):
        seen.setdefault(record.category, None)
    return list(seen)


def suggestions(
    database: Database | Iterable[Record],
    category: str = ALL_CATEGORIES,
    limit: int = 10,
) -> list[Record]:
    out: list[Record] = []
    for record in _records(database):
        if len(out) >= limit:
            break
        if in_category(record, category):
            out.append(record)
    return out
