"""Shared fixtures for the ECG interpreter tests.

The environment is pointed at a scratch directory before ``app`` is imported, so
the module-level application never touches the repository's database or logs.
"""

import os
import tempfile

_SCRATCH = tempfile.mkdtemp(prefix="ecg-interpreter-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_SCRATCH, 'import.db')}")
os.environ.setdefault("LOG_DIR", os.path.join(_SCRATCH, "logs"))

import pytest  # noqa: E402

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from tests.fakes import FakeVisionClient  # noqa: E402


@pytest.fixture(autouse=True)
def clear_key_env(monkeypatch):
    """Keys from the developer's shell must not leak into tests."""
    for name in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        LOG_DIR = str(tmp_path / "logs")
        PROMPT_PATH = str(tmp_path / "prompt.txt")
        ANALYSIS_PROVIDER = "openai"

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_client():
    return FakeVisionClient(reply="## Befund\n- **Sinusrhythmus**")
