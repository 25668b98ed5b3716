import app as app_module
from storage import API_KEY_SETTING, DatabaseStore
from utils import messages

from tests.fakes import PNG_BYTES, FakeVisionClient


def _stored_key(app):
    with app.app_context():
        return DatabaseStore().get(API_KEY_SETTING)


def test_set_and_clear_key(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["set-key", "sk-cli"])
    assert result.exit_code == 0
    assert messages.API_KEY_SAVED in result.output
    assert _stored_key(app) == "sk-cli"

    result = runner.invoke(args=["clear-key"])
    assert result.exit_code == 0
    assert _stored_key(app) is None


def test_set_key_rejects_invalid(app):
    result = app.test_cli_runner().invoke(args=["set-key", "nope"])
    assert result.exit_code == 1
    assert messages.INVALID_API_KEY in result.output


def test_analyze_without_key(app, tmp_path):
    scan = tmp_path / "scan.png"
    scan.write_bytes(PNG_BYTES)
    result = app.test_cli_runner().invoke(args=["analyze-ecg", str(scan)])
    assert result.exit_code == 1
    assert messages.MISSING_API_KEY in result.output


def test_analyze_prints_html(app, tmp_path, monkeypatch, fake_client):
    monkeypatch.setattr(app_module, "build_vision_client", lambda provider, key, config: fake_client)
    scan = tmp_path / "scan.png"
    scan.write_bytes(PNG_BYTES)
    prompt = tmp_path / "custom.txt"
    prompt.write_text("Kurz befunden.", encoding="utf-8")
    runner = app.test_cli_runner()
    runner.invoke(args=["set-key", "sk-cli"])

    result = runner.invoke(args=["analyze-ecg", str(scan), "--prompt", str(prompt), "--html"])
    assert result.exit_code == 0
    assert "<h2>Befund</h2>" in result.output
    assert fake_client.calls[0][0] == "Kurz befunden."


def test_analyze_reports_upstream_error(app, tmp_path, monkeypatch):
    fake = FakeVisionClient(error="quota exceeded")
    monkeypatch.setattr(app_module, "build_vision_client", lambda provider, key, config: fake)
    scan = tmp_path / "scan.png"
    scan.write_bytes(PNG_BYTES)
    runner = app.test_cli_runner()
    runner.invoke(args=["set-key", "sk-cli"])

    result = runner.invoke(args=["analyze-ecg", str(scan)])
    assert result.exit_code == 1
    assert "quota exceeded" in result.output
