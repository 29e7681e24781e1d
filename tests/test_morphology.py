"""Tests for lemmatization: noise stripping, function-word filtering, lemma counts."""

from apps.api.services.morphology import (
    FUNCTION_WORD_TAGS,
    LemmaExtractor,
    PymorphyMorphology,
    clean_text,
    tokenize,
)
from tests.conftest import DictMorphology


def test_clean_text_keeps_only_cyrillic_and_spaces() -> None:
    assert clean_text("Кот, КОТ! cat 123 — «собака»№5").split() == ["кот", "кот", "собака"]


def test_tokenize_keeps_yo() -> None:
    assert tokenize("Ёжик ёлка") == ["ёжик", "ёлка"]


def test_tokenize_empty() -> None:
    assert tokenize("") == []
    assert tokenize("hello world 42") == []


def test_collect_lemmas_counts_occurrences(extractor) -> None:
    counts = extractor.collect_lemmas("кот кот собака")
    assert counts == {"кот": 2, "собака": 1}


def test_collect_lemmas_conflates_inflected_forms(extractor) -> None:
    counts = extractor.collect_lemmas("Коты ловят кота, а собаки ловят котов")
    assert counts["кот"] == 3
    assert counts["собака"] == 1


def test_function_words_are_dropped(extractor) -> None:
    counts = extractor.collect_lemmas("кот и собака на дом, он же ура вот")
    assert set(counts) == {"кот", "собака", "дом"}


def test_short_tokens_are_dropped(extractor) -> None:
    # "ой" is an interjection anyway; "ёж" is a 2-letter noun
    counts = extractor.collect_lemmas("ёж ой кот")
    assert set(counts) == {"кот"}


def test_all_normal_forms_of_an_ambiguous_token_are_counted(extractor) -> None:
    counts = extractor.collect_lemmas("стали")
    assert counts == {"сталь": 1, "стать": 1}


def test_morphology_failure_skips_only_that_token() -> None:
    extractor = LemmaExtractor(DictMorphology(failing={"сломано"}))
    counts = extractor.collect_lemmas("кот сломано собака")
    assert counts == {"кот": 1, "собака": 1}


def test_is_function_word_checks_every_parse() -> None:
    morph = DictMorphology(words={"тест": (["тест"], ["NOUN,inan,masc sing,nomn", "PRCL"])})
    assert LemmaExtractor(morph).is_function_word("тест") is True


def test_function_word_tags_cover_service_parts_of_speech() -> None:
    assert FUNCTION_WORD_TAGS == {"PREP", "CONJ", "INTJ", "NPRO", "PRCL"}


class _Parse:
    def __init__(self, normal_form: str, tag: str):
        self.normal_form = normal_form
        self.tag = tag


class _Analyzer:
    def parse(self, word):
        return {
            "стали": [_Parse("стать", "VERB,perf,intr plur,past,indc"), _Parse("сталь", "NOUN,inan,femn plur,nomn"),
                      _Parse("стать", "VERB,perf,intr plur,past,indc")],
        }.get(word, [_Parse(word, "UNKN")])


def test_pymorphy_backend_dedups_normal_forms_in_parse_order() -> None:
    morph = PymorphyMorphology(analyzer=_Analyzer())
    assert morph.normal_forms("стали") == ["стать", "сталь"]
    assert morph.grammatical_tags("стали")[1] == "NOUN,inan,femn plur,nomn"
