import logging

import pytest

from tutormark.config import get_settings, load_settings


def test_defaults():
    s = load_settings()
    assert s.max_input_chars == 20000
    assert s.max_depth == 16
    assert s.decimal_fractions is False
    assert s.strict is False
    assert s.log_level == "WARNING"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TUTORMARK_MAX_INPUT_CHARS", "500")
    monkeypatch.setenv("TUTORMARK_MAX_DEPTH", "0")
    monkeypatch.setenv("TUTORMARK_STRICT", '"1"')
    monkeypatch.setenv("TUTORMARK_DECIMAL_FRACTIONS", "off")
    monkeypatch.setenv("TUTORMARK_LOG_LEVEL", "debug")
    s = load_settings()
    assert s.max_input_chars == 500
    assert s.max_depth == 1
    assert s.strict is True
    assert s.decimal_fractions is False
    assert s.log_level == "DEBUG"


def test_bad_number_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("TUTORMARK_MAX_DEPTH", "deep")
    monkeypatch.setenv("TUTORMARK_MAX_INPUT_CHARS", "12k")
    with caplog.at_level(logging.WARNING, logger="tutormark.config"):
        s = load_settings()
    assert s.max_depth == 16
    assert s.max_input_chars == 20000
    assert "TUTORMARK_MAX_DEPTH" in caplog.text


@pytest.mark.parametrize("raw", ["verbose", "5", "warn"])
def test_unknown_log_level_falls_back(monkeypatch, raw):
    monkeypatch.setenv("TUTORMARK_LOG_LEVEL", raw)
    assert load_settings().log_level == "WARNING"


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("TUTORMARK_STRICT", "1")
    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().strict is True
