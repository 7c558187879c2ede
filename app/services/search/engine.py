from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from app.core.config import settings
from app.services.search.matching import (
    build_context,
    fold,
    is_exact_word_match,
    resolve_page,
    within_distance,
)
from app.services.search.records import FileRecord
from app.services.search.store import DocumentStore

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"\S+")

MatchType = Literal["exact", "partial", "fuzzy"]


@dataclass(frozen=True)
class SearchMatch:
    line: int | None
    page: int | None
    snippet: str
    context: str
    exact_match: bool
    match_type: MatchType


@dataclass(frozen=True)
class SearchResult:
    filename: str
    file_type: str
    matches: list[SearchMatch]
    file_url: str
    file_id: str
    total_matches: int
    exact_matches: int


@dataclass(frozen=True)
class MatchConfig:
    phrase_match_ratio: float = 0.7
    fuzzy_max_distance: int = 2
    max_matches_per_file: int = 20
    context_chars: int = 50
    highlight_open: str = "<mark>"
    highlight_close: str = "</mark>"


def default_match_config() -> MatchConfig:
    return MatchConfig(
        phrase_match_ratio=settings.PHRASE_MATCH_RATIO,
        fuzzy_max_distance=settings.FUZZY_MAX_DISTANCE,
        max_matches_per_file=settings.MAX_MATCHES_PER_FILE,
        context_chars=settings.CONTEXT_CHARS,
        highlight_open=settings.HIGHLIGHT_OPEN_TAG,
        highlight_close=settings.HIGHLIGHT_CLOSE_TAG,
    )


@dataclass(frozen=True)
class _LineHit:
    exact: bool
    match_type: MatchType
    # where the context window is centred, and what gets highlighted in it
    anchor: int
    anchor_len: int
    needles: tuple[str, ...]


class QueryEngine:
    def __init__(self, store: DocumentStore, config: MatchConfig | None = None):
        self.store = store
        self.config = config or MatchConfig()

    def search(self, query: str) -> list[SearchResult]:
        """
        Run `query` against every indexed file.

        Whitespace inside the query makes it a phrase query, otherwise it is a
        single-term query. Files without matches are dropped, the rest are
        ordered by exact match count, then by total match count.
        """
        raw = (query or "").strip()
        if not raw:
            return []

        term = fold(raw)
        results: list[SearchResult] = []

        for record in self.store.all():
            matches = self.find_matches(record, term)
            if not matches:
                continue

            results.append(
                SearchResult(
                    filename=record.filename,
                    file_type=record.file_type,
                    matches=matches,
                    file_url=record.file_url,
                    file_id=record.file_id,
                    total_matches=len(matches),
                    exact_matches=sum(1 for m in matches if m.exact_match),
                )
            )

        # list.sort is stable: equal files keep store order
        results.sort(key=lambda r: (-r.exact_matches, -r.total_matches))

        logger.info('Search for "%s" found %d files with matches', raw, len(results))

        return results

    def find_matches(self, record: FileRecord, term: str) -> list[SearchMatch]:
        """
        Line-level matches for an already folded, non-empty term.
        At most one match per line, capped per file.
        """
        is_phrase = any(ch.isspace() for ch in term)
        matches: list[SearchMatch] = []

        for idx, line in enumerate(record.lines):
            folded_line = fold(line)

            if is_phrase:
                hit = self._match_phrase(folded_line, term)
            else:
                hit = self._match_term(line, folded_line, term)

            if hit is None:
                continue

            matches.append(self._to_match(record, line, idx + 1, hit))

        # counts on the SearchResult are taken from this capped list
        return matches[: self.config.max_matches_per_file]

    def _match_phrase(self, folded_line: str, term: str) -> _LineHit | None:
        pos = folded_line.find(term)
        if pos != -1:
            return _LineHit(
                exact=True, match_type="exact", anchor=pos, anchor_len=len(term), needles=(term,)
            )

        words = term.split()
        present = [w for w in words if w in folded_line]
        if not present:
            return None

        if len(present) / len(words) < self.config.phrase_match_ratio:
            return None

        first = min(present, key=folded_line.find)

        return _LineHit(
            exact=False,
            match_type="partial",
            anchor=folded_line.find(first),
            anchor_len=len(first),
            needles=tuple(present),
        )

    def _match_term(self, line: str, folded_line: str, term: str) -> _LineHit | None:
        pos = folded_line.find(term)
        if pos != -1:
            exact = is_exact_word_match(folded_line, term, pos)
            return _LineHit(
                exact=exact,
                match_type="exact" if exact else "partial",
                anchor=pos,
                anchor_len=len(term),
                needles=(term,),
            )

        # fuzzy fallback: first whitespace token close enough to the term
        for tok in TOKEN_RE.finditer(line):
            folded_tok = fold(tok.group(0))
            if within_distance(folded_tok, term, self.config.fuzzy_max_distance):
                return _LineHit(
                    exact=False,
                    match_type="fuzzy",
                    anchor=tok.start(),
                    anchor_len=len(folded_tok),
                    needles=(folded_tok,),
                )

        return None

    def _to_match(self, record: FileRecord, line: str, line_number: int, hit: _LineHit) -> SearchMatch:
        cfg = self.config
        context = build_context(
            line,
            anchor=hit.anchor,
            anchor_len=hit.anchor_len,
            needles=hit.needles,
            radius=cfg.context_chars,
            open_tag=cfg.highlight_open,
            close_tag=cfg.highlight_close,
        )

        return SearchMatch(
            line=line_number,
            page=resolve_page(record.pages, line_number),
            snippet=line.strip(),
            context=context,
            exact_match=hit.exact,
            match_type=hit.match_type,
        )
