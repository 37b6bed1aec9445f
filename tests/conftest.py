import pytest

from tutormark.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Every test starts from default settings; env changes need a cache reset."""
    for name in (
        "TUTORMARK_MAX_INPUT_CHARS",
        "TUTORMARK_MAX_DEPTH",
        "TUTORMARK_DECIMAL_FRACTIONS",
        "TUTORMARK_STRICT",
        "TUTORMARK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
