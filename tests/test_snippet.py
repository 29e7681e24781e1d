"""Tests for snippet building and the query-word proximity heuristic."""

from apps.api.services.snippet import build_snippet, query_words, words_in_proximity


def test_query_words_lowercases_and_strips_punctuation() -> None:
    assert query_words("  Кот, собака!  кот ") == ["кот", "собака"]


def test_snippet_highlights_every_query_word_in_window() -> None:
    text = "Жил-был кот. Кот дружил с собакой."
    snippet = build_snippet(text, "кот")
    assert snippet.endswith("...")
    assert snippet.count("<b>") == 2
    assert "<b>кот</b>" in snippet
    assert "<b>Кот</b>" in snippet


def test_snippet_window_is_radius_around_first_match() -> None:
    text = "а" * 300 + " кот " + "б" * 300
    snippet = build_snippet(text, "кот", radius=100)
    body = snippet[: -len("...")]
    assert body.startswith("а" * 99)
    assert "<b>кот</b>" in body
    # 100 chars before the match plus 100 starting at it, plus the markup
    assert len(body) == 200 + len("<b></b>")


def test_snippet_near_start_is_clipped_at_zero() -> None:
    snippet = build_snippet("кот сидит на окне", "кот")
    assert snippet.startswith("<b>кот</b>")


def test_snippet_without_match_uses_text_start() -> None:
    text = "Совсем другой текст " * 20
    snippet = build_snippet(text, "кот", radius=50)
    assert snippet == text[:100] + "..."
    assert "<b>" not in snippet


def test_proximity_all_words_close() -> None:
    assert words_in_proximity("Кот и собака живут дружно", ["кот", "собака"], window=10) is True


def test_proximity_missing_word_fails() -> None:
    assert words_in_proximity("кот живёт один", ["кот", "собака"], window=200) is False


def test_proximity_words_too_far_apart_fail() -> None:
    text = "кот " + "x" * 500 + " собака"
    assert words_in_proximity(text, ["кот", "собака"], window=200) is False
    assert words_in_proximity(text, ["кот", "собака"], window=600) is True


def test_proximity_no_words_passes() -> None:
    assert words_in_proximity("anything", [], window=10) is True
