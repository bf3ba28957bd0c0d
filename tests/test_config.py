import pytest

from scholar_sync.config import DEFAULT_MODEL, Settings


ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "SCHOLAR_SYNC_MODEL",
    "SCHOLAR_SYNC_SEARCH_MODEL",
    "SCHOLAR_SYNC_SEARCH_TOOL",
    "SCHOLAR_SYNC_METADATA_CHARS",
    "SCHOLAR_SYNC_SUMMARY_CHARS",
    "SCHOLAR_SYNC_EVALUATION_CHARS",
    "SCHOLAR_SYNC_MAX_RELATED",
    "SCHOLAR_SYNC_TIMEOUT",
    "SCHOLAR_SYNC_MAX_RETRIES",
    "SCHOLAR_SYNC_DB",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.api_key is None
    assert settings.model == DEFAULT_MODEL
    assert settings.metadata_prefix_chars == 15000
    assert settings.summary_window_chars == 100000
    assert settings.evaluation_window_chars == 30000
    assert settings.max_related == 5
    assert settings.max_retries == 0
    assert settings.effective_search_model == DEFAULT_MODEL


def test_environment_and_overrides(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SCHOLAR_SYNC_SEARCH_MODEL", "gpt-4o")
    monkeypatch.setenv("SCHOLAR_SYNC_SUMMARY_CHARS", "500")
    monkeypatch.setenv("SCHOLAR_SYNC_DB", "env.db")

    settings = Settings.from_env(db_path="cli.db", model=None)

    assert settings.api_key == "sk-test"
    assert settings.effective_search_model == "gpt-4o"
    assert settings.summary_window_chars == 500
    assert settings.db_path == "cli.db"
    assert settings.model == DEFAULT_MODEL


@pytest.mark.parametrize("value", ["lots", "0", "-1"])
def test_invalid_numbers_raise(monkeypatch, value):
    monkeypatch.setenv("SCHOLAR_SYNC_MAX_RELATED", value)
    with pytest.raises(ValueError):
        Settings.from_env()
