from __future__ import annotations

import string
from collections.abc import Iterable, Sequence

from app.services.search.records import Page

WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")
ELLIPSIS = "..."


def fold(s: str) -> str:
    """
    Lower-case `s` without changing its length.

    Offsets found in the folded string are reused on the original one
    (snippets, context windows, highlighting), so characters whose
    lower-case form is longer than one code point are left untouched.
    """
    low = s.lower()
    if len(low) == len(s):
        return low

    out: list[str] = []
    for ch in s:
        c = ch.lower()
        out.append(c if len(c) == 1 else ch)

    return "".join(out)


def is_word_char(ch: str) -> bool:
    return ch in WORD_CHARS


def is_exact_word_match(text: str, term: str, index: int) -> bool:
    """
    True when text[index:index + len(term)] is not glued to a word character
    on either side. Line start / end count as boundaries.
    """
    end = index + len(term)
    before_ok = index == 0 or not is_word_char(text[index - 1])
    after_ok = end >= len(text) or not is_word_char(text[end])

    return before_ok and after_ok


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance (insert / delete / substitute, unit cost).
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # keep the shorter string in the inner loop
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current

    return previous[-1]


def within_distance(a: str, b: str, max_distance: int) -> bool:
    # length gap is a lower bound of the distance
    if abs(len(a) - len(b)) > max_distance:
        return False

    return edit_distance(a, b) <= max_distance


def highlight(text: str, needles: Iterable[str], open_tag: str, close_tag: str) -> str:
    """
    Wrap every case-insensitive occurrence of any needle in open/close tags.

    Plain left-to-right scan and splice: at each step the earliest occurrence
    wins, the longest needle on a tie, and matches never overlap.
    Needles must already be folded.
    """
    ordered = sorted({n for n in needles if n}, key=len, reverse=True)
    if not ordered:
        return text

    folded = fold(text)
    parts: list[str] = []
    pos = 0

    while pos < len(text):
        best = -1
        best_len = 0
        for needle in ordered:
            i = folded.find(needle, pos)
            if i != -1 and (best == -1 or i < best):
                best, best_len = i, len(needle)

        if best == -1:
            break

        parts.append(text[pos:best])
        parts.append(open_tag)
        parts.append(text[best : best + best_len])
        parts.append(close_tag)
        pos = best + best_len

    parts.append(text[pos:])

    return "".join(parts)


def build_context(
    line: str,
    *,
    anchor: int,
    anchor_len: int,
    needles: Sequence[str],
    radius: int,
    open_tag: str,
    close_tag: str,
) -> str:
    """
    Window of `radius` characters on both sides of line[anchor:anchor + anchor_len].
    Highlighting is applied to the raw window first, ellipses are attached after.
    """
    start = max(0, anchor - radius)
    end = min(len(line), anchor + anchor_len + radius)

    context = highlight(line[start:end], needles, open_tag, close_tag)

    if start > 0:
        context = ELLIPSIS + context
    if end < len(line):
        context = context + ELLIPSIS

    return context


def resolve_page(pages: Sequence[Page] | None, line_number: int) -> int:
    for page in pages or ():
        if page.contains(line_number):
            return page.page_number

    return 1
