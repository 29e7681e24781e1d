"""Env parsing helpers behind Settings."""

from apps.api.services.settings import Settings, _bool, _float, _int


def test_int_parses_and_falls_back() -> None:
    assert _int(" 42 ", 1) == 42
    assert _int(None, 7) == 7
    assert _int("", 7) == 7
    assert _int("many", 7) == 7


def test_float_parses_and_falls_back() -> None:
    assert _float("0.25", 1.0) == 0.25
    assert _float("   ", 1.5) == 1.5
    assert _float("slow", 1.5) == 1.5


def test_bool_accepts_common_truthy_values() -> None:
    for value in ("1", "true", "TRUE", "yes", "on"):
        assert _bool(value, False) is True
    for value in ("0", "false", "off", "no"):
        assert _bool(value, True) is False
    assert _bool(None, True) is True


def test_defaults_match_indexing_constants() -> None:
    assert Settings.FREQUENCY_THRESHOLD == 200
    assert Settings.PROXIMITY_WINDOW == 200
    assert Settings.LEMMA_BATCH_SIZE == 1000
    assert Settings.PAGE_BATCH_SIZE == 100
    assert Settings.CRAWL_WORKERS >= 1


def test_test_env_disables_politeness_delay() -> None:
    assert Settings.CRAWL_DELAY == 0.0
