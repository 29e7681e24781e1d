"""Snippets and query-word proximity over page plain text."""

import re

SNIPPET_RADIUS = 100
EMPHASIS_OPEN = "<b>"
EMPHASIS_CLOSE = "</b>"


def query_words(query: str) -> list[str]:
    """Original query words, lowercased, split on whitespace, surrounding punctuation stripped."""
    words = []
    for raw in (query or "").lower().split():
        word = raw.strip(".,;:!?\"'«»()[]{}—–-…")
        if word and word not in words:
            words.append(word)
    return words


def _words_pattern(words: list[str]) -> re.Pattern | None:
    if not words:
        return None
    # longest first so a word is not cut by its own prefix
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(f"({alternatives})", re.IGNORECASE)


def build_snippet(text: str, query: str, radius: int = SNIPPET_RADIUS) -> str:
    """
    ±radius characters of text around the first case-insensitive occurrence of any query word,
    with every query word in the window wrapped in <b>...</b>, followed by "...".
    Without an occurrence, the first 2*radius characters are used.
    """
    pattern = _words_pattern(query_words(query))
    match = pattern.search(text) if pattern else None
    if match:
        start = max(match.start() - radius, 0)
        end = min(match.start() + radius, len(text))
    else:
        start, end = 0, min(2 * radius, len(text))
    window = text[start:end]
    if pattern:
        window = pattern.sub(lambda m: f"{EMPHASIS_OPEN}{m.group(1)}{EMPHASIS_CLOSE}", window)
    return window + "..."


def words_in_proximity(text: str, words: list[str], window: int) -> bool:
    """
    True when every word occurs in text (lowercased) and consecutive first occurrences,
    in text order, are at most window + len(word) characters apart.
    """
    lowered = text.lower()
    positions = []
    for word in words:
        pos = lowered.find(word)
        if pos == -1:
            return False
        positions.append((pos, word))
    positions.sort()
    for (pos, word), (next_pos, _) in zip(positions, positions[1:]):
        if next_pos - pos > window + len(word):
            return False
    return True
