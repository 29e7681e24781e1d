"""Pytest fixtures for root-level tests (crawl rules, text processing, ranking math)."""

import os

import pytest

os.environ.setdefault("ENV", "test")
os.environ.setdefault("PYTEST_RUNNING", "1")

from apps.api.services.morphology import LemmaExtractor

# word -> (normal forms, grammatical tags). Unknown words are their own lemma, tagged NOUN.
RUSSIAN_WORDS = {
    "кот": (["кот"], ["NOUN,anim,masc sing,nomn"]),
    "кота": (["кот"], ["NOUN,anim,masc sing,gent", "NOUN,anim,masc sing,accs"]),
    "коты": (["кот"], ["NOUN,anim,masc plur,nomn"]),
    "котов": (["кот"], ["NOUN,anim,masc plur,gent"]),
    "собака": (["собака"], ["NOUN,anim,femn sing,nomn"]),
    "собаки": (["собака"], ["NOUN,anim,femn sing,gent", "NOUN,anim,femn plur,nomn"]),
    "собаку": (["собака"], ["NOUN,anim,femn sing,accs"]),
    "дом": (["дом"], ["NOUN,inan,masc sing,nomn"]),
    "дома": (["дом"], ["NOUN,inan,masc sing,gent", "NOUN,inan,masc plur,nomn"]),
    "стали": (["сталь", "стать"], ["NOUN,inan,femn plur,nomn", "VERB,perf,intr plur,past,indc"]),
    "и": (["и"], ["CONJ"]),
    "но": (["но"], ["CONJ"]),
    "на": (["на"], ["PREP"]),
    "под": (["под"], ["PREP"]),
    "он": (["он"], ["NPRO,masc,3per,Anph sing,nomn"]),
    "они": (["они"], ["NPRO,3per,Anph plur,nomn"]),
    "ой": (["ой"], ["INTJ"]),
    "ура": (["ура"], ["INTJ"]),
    "же": (["же"], ["PRCL"]),
    "вот": (["вот"], ["PRCL"]),
}


class DictMorphology:
    """Deterministic Morphology backed by a dict; no dictionaries to download."""

    def __init__(self, words=None, failing=()):
        self.words = dict(RUSSIAN_WORDS if words is None else words)
        self.failing = set(failing)

    def _entry(self, token):
        if token in self.failing:
            raise ValueError(f"cannot analyze {token!r}")
        return self.words.get(token, ([token], ["NOUN,inan,masc sing,nomn"]))

    def normal_forms(self, token):
        return list(self._entry(token)[0])

    def grammatical_tags(self, token):
        return list(self._entry(token)[1])


@pytest.fixture
def morphology() -> DictMorphology:
    return DictMorphology()


@pytest.fixture
def extractor(morphology) -> LemmaExtractor:
    return LemmaExtractor(morphology)
