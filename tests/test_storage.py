import pytest

from errors import InvalidCredentialError
from models import StoredSetting
from storage import (
    API_KEY_SETTING,
    DatabaseStore,
    MemoryStore,
    resolve_api_key,
    validate_api_key,
)
from utils import messages


def test_memory_store_set_get_clear():
    store = MemoryStore()
    assert store.get(API_KEY_SETTING) is None
    store.set(API_KEY_SETTING, "sk-one")
    assert store.get(API_KEY_SETTING) == "sk-one"
    store.clear(API_KEY_SETTING)
    assert store.get(API_KEY_SETTING) is None
    # clearing twice is harmless
    store.clear(API_KEY_SETTING)


def test_database_store_overwrites_single_row(app):
    with app.app_context():
        store = DatabaseStore()
        store.set(API_KEY_SETTING, "sk-one")
        store.set(API_KEY_SETTING, "sk-two")
        assert store.get(API_KEY_SETTING) == "sk-two"
        assert StoredSetting.query.filter_by(key=API_KEY_SETTING).count() == 1
        store.clear(API_KEY_SETTING)
        assert store.get(API_KEY_SETTING) is None
        store.clear(API_KEY_SETTING)


@pytest.mark.parametrize("key", ["sk-abc", "  sk-abc  "])
def test_validate_openai_key(key):
    assert validate_api_key(key) == "sk-abc"


@pytest.mark.parametrize("key", ["", None, "abc", "   ", "SK-abc"])
def test_validate_openai_key_rejects(key):
    with pytest.raises(InvalidCredentialError) as exc_info:
        validate_api_key(key)
    assert exc_info.value.message == messages.INVALID_API_KEY


def test_validate_gemini_key():
    assert validate_api_key(" AIza-key ", "gemini") == "AIza-key"
    with pytest.raises(InvalidCredentialError) as exc_info:
        validate_api_key("", "gemini")
    assert exc_info.value.message == messages.INVALID_GEMINI_API_KEY


def test_resolve_prefers_stored_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert resolve_api_key(MemoryStore({API_KEY_SETTING: "sk-stored"})) == "sk-stored"
    assert resolve_api_key(MemoryStore()) == "sk-env"


def test_resolve_gemini_env_fallback(monkeypatch):
    assert resolve_api_key(MemoryStore(), "gemini") is None
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    assert resolve_api_key(MemoryStore(), "gemini") == "gem-key"
