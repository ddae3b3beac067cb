"""Term search over a page's reading-order bands.

A term is split on white space into tokens and matched against runs of
consecutive non-white-space words inside one band.  Punctuation words are
content: ``"Hello, world"`` is the four words ``Hello`` ``,`` `` `` ``world``,
so it matches ``"hello ,"`` but not ``"hello world"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import WordText
from .page import PageText

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    """One match: the band it was found in and the words it covers.

    ``words`` runs from the first to the last matched word and includes
    the white-space words in between.
    """

    band_index: int
    words: Tuple[WordText, ...]

    @property
    def text(self) -> str:
        return "".join(w.text for w in self.words)


def _fold(text: str, case_sensitive: bool) -> str:
    return text if case_sensitive else text.casefold()


def _matches(words: Sequence[str], tokens: Sequence[str], whole_word: bool) -> bool:
    if whole_word:
        return list(words) == list(tokens)
    if len(tokens) == 1:
        return tokens[0] in words[0]
    return (
        words[0].endswith(tokens[0])
        and words[-1].startswith(tokens[-1])
        and list(words[1:-1]) == list(tokens[1:-1])
    )


def search_page(
    page: PageText,
    term: str,
    case_sensitive: bool = False,
    whole_word: bool = False,
    clear: bool = True,
) -> List[SearchHit]:
    """Find *term* on *page*, highlight every match and return the hits.

    Parameters
    ----------
    page : PageText
        Page to search; its reading order is built if needed.
    term : str
        Text to look for.  Blank terms match nothing.
    case_sensitive : bool
        Compare exactly instead of case-folded.
    whole_word : bool
        Every token must equal a whole word.  Otherwise a single token may
        occur anywhere in a word, and a multi-token term may start at the
        end of its first word and stop at the start of its last word.
    clear : bool
        Drop highlights and the cursor left by a previous search first.
    """
    tokens = [_fold(t, case_sensitive) for t in term.split()]
    if not tokens:
        return []
    if clear:
        page.clear_highlighted()
        page.clear_highlighted_cursor()

    hits: List[SearchHit] = []
    n = len(tokens)
    for band_index, band in enumerate(page.page_lines):
        # (position in band.words, folded text) of every content word
        content = [
            (i, _fold(w.text, case_sensitive))
            for i, w in enumerate(band.words)
            if not w.is_white_space
        ]
        j = 0
        while j + n <= len(content):
            window = content[j : j + n]
            if not _matches([text for _, text in window], tokens, whole_word):
                j += 1
                continue
            first, last = window[0][0], window[-1][0]
            matched = tuple(band.words[first : last + 1])
            for word in matched:
                word.highlight()
            band.has_highlight = True
            hits.append(SearchHit(band_index, matched))
            j += n

    log.debug("search %r: %d hits", term, len(hits))
    return hits


def mark_cursor(page: PageText, hit: SearchHit) -> None:
    """Make *hit* the page's current hit, replacing any previous one."""
    page.clear_highlighted_cursor()
    for word in hit.words:
        word.set_highlight_cursor()
    page.page_lines[hit.band_index].has_highlight_cursor = True


class SearchCursor:
    """Steps through the hits of one search, marking the current hit.

    ``next()`` and ``previous()`` wrap around at either end and return
    ``None`` only when there are no hits.
    """

    def __init__(self, page: PageText, hits: Iterable[SearchHit]) -> None:
        self.page = page
        self.hits: List[SearchHit] = list(hits)
        self.index = -1

    @property
    def current(self) -> Optional[SearchHit]:
        if 0 <= self.index < len(self.hits):
            return self.hits[self.index]
        return None

    def move_to(self, index: int) -> SearchHit:
        """Mark hit *index* as current; raises ``IndexError`` when out of range."""
        if not 0 <= index < len(self.hits):
            raise IndexError(f"hit {index} out of range (0-{len(self.hits) - 1})")
        self.index = index
        hit = self.hits[index]
        mark_cursor(self.page, hit)
        return hit

    def next(self) -> Optional[SearchHit]:
        if not self.hits:
            return None
        return self.move_to((self.index + 1) % len(self.hits))

    def previous(self) -> Optional[SearchHit]:
        if not self.hits:
            return None
        if self.index <= 0:
            return self.move_to(len(self.hits) - 1)
        return self.move_to(self.index - 1)

    def clear(self) -> None:
        self.index = -1
        self.page.clear_highlighted_cursor()
