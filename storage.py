"""Key-value storage for the analysis credential."""

import logging
import os
from typing import Dict, Optional

from database import db
from errors import InvalidCredentialError
from models import StoredSetting
from utils import messages

logger = logging.getLogger(__name__)

API_KEY_SETTING = "openai_api_key"

_ENV_KEYS = {
    "openai": ("OPENAI_API_KEY",),
    "gemini": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
}


class KeyValueStore:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class DatabaseStore(KeyValueStore):
    """Store backed by the ``stored_settings`` table; needs an app context."""

    def get(self, key: str) -> Optional[str]:
        row = StoredSetting.query.filter_by(key=key).first()
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        row = StoredSetting.query.filter_by(key=key).first()
        if row:
            row.value = value
        else:
            db.session.add(StoredSetting(key=key, value=value))
        db.session.commit()

    def clear(self, key: str) -> None:
        deleted = StoredSetting.query.filter_by(key=key).delete()
        db.session.commit()
        if not deleted:
            logger.debug("Nothing stored under %s", key)


def validate_api_key(key: Optional[str], provider: str = "openai") -> str:
    cleaned = (key or "").strip()
    if provider == "gemini":
        if not cleaned:
            raise InvalidCredentialError(messages.INVALID_GEMINI_API_KEY)
        return cleaned
    if not cleaned.startswith("sk-"):
        raise InvalidCredentialError()
    return cleaned


def resolve_api_key(store: KeyValueStore, provider: str = "openai") -> Optional[str]:
    stored = store.get(API_KEY_SETTING)
    if stored:
        return stored
    for env_name in _ENV_KEYS.get(provider, ()):
        value = os.getenv(env_name)
        if value:
            return value
    return None
