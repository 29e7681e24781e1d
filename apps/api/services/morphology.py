"""Lemmatization: text -> {lemma: count}, via a pluggable Morphology backend.

The default backend is pymorphy3 (Russian, OpenCorpora tag set). Any object with
normal_forms(token) and grammatical_tags(token) can replace it.
"""

import logging
import re
import threading
from collections import Counter
from typing import Protocol

logger = logging.getLogger(__name__)

# Prepositions, conjunctions, interjections, pronouns, particles (OpenCorpora grammemes)
FUNCTION_WORD_TAGS = frozenset({"PREP", "CONJ", "INTJ", "NPRO", "PRCL"})
MIN_WORD_LENGTH = 3

# Everything that is not a Cyrillic letter or whitespace is noise
_NOISE_RE = re.compile(r"[^а-яё\s]+")
_GRAMMEME_SPLIT_RE = re.compile(r"[\s,]+")


class Morphology(Protocol):
    def normal_forms(self, token: str) -> list[str]: ...

    def grammatical_tags(self, token: str) -> list[str]: ...


class PymorphyMorphology:
    """Morphology backed by pymorphy3.MorphAnalyzer."""

    def __init__(self, analyzer=None):
        if analyzer is None:
            import pymorphy3

            analyzer = pymorphy3.MorphAnalyzer()
        self._analyzer = analyzer

    def normal_forms(self, token: str) -> list[str]:
        forms: list[str] = []
        for parse in self._analyzer.parse(token):
            if parse.normal_form not in forms:
                forms.append(parse.normal_form)
        return forms

    def grammatical_tags(self, token: str) -> list[str]:
        return [str(parse.tag) for parse in self._analyzer.parse(token)]


_default_morphology: Morphology | None = None
_default_lock = threading.Lock()


def get_morphology() -> Morphology:
    """Process-wide default backend; the dictionaries load once."""
    global _default_morphology
    with _default_lock:
        if _default_morphology is None:
            _default_morphology = PymorphyMorphology()
        return _default_morphology


def clean_text(text: str) -> str:
    """Lowercase and replace noise characters with spaces."""
    return _NOISE_RE.sub(" ", (text or "").lower())


def tokenize(text: str) -> list[str]:
    """Whitespace-delimited Cyrillic tokens of text, lowercased."""
    return clean_text(text).split()


class LemmaExtractor:
    """Turns text into lemma counts, dropping function words and short tokens."""

    def __init__(self, morphology: Morphology | None = None):
        self._morphology = morphology if morphology is not None else get_morphology()

    @property
    def morphology(self) -> Morphology:
        return self._morphology

    def is_function_word(self, token: str) -> bool:
        if len(token) < MIN_WORD_LENGTH:
            return True
        for tag in self._morphology.grammatical_tags(token):
            grammemes = set(_GRAMMEME_SPLIT_RE.split(tag))
            if grammemes & FUNCTION_WORD_TAGS:
                return True
        return False

    def lemmas_for_token(self, token: str) -> list[str]:
        """Normal forms of token, or [] for function words and tokens the backend rejects."""
        if not token:
            return []
        try:
            if self.is_function_word(token):
                return []
            return self._morphology.normal_forms(token)
        except Exception as e:
            logger.warning("Morphology lookup failed token=%r error=%s", token, e)
            return []

    def collect_lemmas(self, text: str) -> Counter:
        """{lemma: occurrences} over all tokens of text."""
        counts: Counter = Counter()
        for token in tokenize(text):
            for lemma in self.lemmas_for_token(token):
                counts[lemma] += 1
        return counts
