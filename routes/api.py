from typing import Any, Dict

from flask import Blueprint, abort, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from analysis import analyze_ecg, load_prompt
from errors import InvalidCredentialError, InvalidImageError, MissingImageError
from storage import API_KEY_SETTING, DatabaseStore, resolve_api_key, validate_api_key
from utils import messages
from vision_client import ImagePayload, build_vision_client

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _provider() -> str:
    return (current_app.config.get("ANALYSIS_PROVIDER") or "openai").lower()


def _security_log(msg: str) -> None:
    logger = current_app.logger
    security_logger = logger.manager.getLogger("security")
    security_logger.info("%s ip=%s provider=%s", msg, request.remote_addr, _provider())


def _require_json() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Invalid or missing JSON payload")
    return payload


@api_bp.errorhandler(HTTPException)
def _json_error(exc: HTTPException):
    return jsonify({"error": exc.description}), exc.code


@api_bp.route("/key", methods=["GET"])
def key_status():
    configured = resolve_api_key(DatabaseStore(), _provider()) is not None
    return jsonify({"configured": configured})


@api_bp.route("/key", methods=["POST"])
def save_key():
    payload = _require_json()
    try:
        key = validate_api_key(payload.get("api_key"), _provider())
    except InvalidCredentialError as exc:
        _security_log("Rejected API key")
        abort(400, description=exc.message)
    DatabaseStore().set(API_KEY_SETTING, key)
    _security_log("API key saved")
    return jsonify({"status": "saved", "message": messages.API_KEY_SAVED})


@api_bp.route("/key", methods=["DELETE"])
def clear_key():
    DatabaseStore().clear(API_KEY_SETTING)
    _security_log("API key cleared")
    return jsonify({"status": "cleared", "message": messages.API_KEY_CLEARED})


@api_bp.route("/analyze", methods=["POST"])
def analyze():
    provider = _provider()
    api_key = resolve_api_key(DatabaseStore(), provider)
    if not api_key:
        abort(400, description=messages.MISSING_API_KEY)

    upload = request.files.get("image")
    try:
        image = ImagePayload.from_upload(
            upload.filename if upload else None,
            upload.read() if upload else None,
            upload.mimetype if upload else None,
        )
    except (MissingImageError, InvalidImageError) as exc:
        abort(400, description=exc.message)

    prompt = load_prompt(current_app.config.get("PROMPT_PATH"))
    client = build_vision_client(provider, api_key, current_app.config)
    result = analyze_ecg(client, image, prompt)
    if not result.ok:
        return jsonify(result.to_dict()), 502
    current_app.logger.info("Analysis rendered (%d chars)", len(result.raw or ""))
    return jsonify(result.to_dict())
