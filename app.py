import logging
import os

import click
from flask import Flask

from analysis import analyze_ecg, load_prompt
from config import Config
from database import db
from errors import EcgInterpreterError
from routes.api import api_bp
from routes.web import web_bp
from storage import API_KEY_SETTING, DatabaseStore, resolve_api_key, validate_api_key
from utils import messages
from vision_client import SUPPORTED_PROVIDERS, ImagePayload, build_vision_client


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    provider = (app.config.get("ANALYSIS_PROVIDER") or "").lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unknown analysis provider: {app.config.get('ANALYSIS_PROVIDER')!r}")
    app.config["ANALYSIS_PROVIDER"] = provider

    _configure_logging(app)

    db.init_app(app)

    with app.app_context():
        db.create_all()

    app.register_blueprint(api_bp)
    app.register_blueprint(web_bp)

    _register_cli(app)

    return app


def _configure_logging(app: Flask) -> None:
    log_dir = app.config.get("LOG_DIR") or os.path.join(app.root_path, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "server.log")
    security_log_path = os.path.join(log_dir, "security.log")

    handler = logging.FileHandler(log_path, delay=True)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    handler.setLevel(logging.INFO)

    app.logger.setLevel(logging.INFO)
    _add_file_handler(app.logger, handler)
    for name in ("analysis", "vision_client", "storage"):
        module_logger = logging.getLogger(name)
        module_logger.setLevel(logging.INFO)
        _add_file_handler(module_logger, handler)

    security_handler = logging.FileHandler(security_log_path, delay=True)
    security_handler.setFormatter(formatter)
    security_handler.setLevel(logging.INFO)
    security_logger = logging.getLogger("security")
    security_logger.setLevel(logging.INFO)
    _add_file_handler(security_logger, security_handler)


def _add_file_handler(logger: logging.Logger, handler: logging.FileHandler) -> None:
    # Loggers are process-global; apps created later reuse the first file handler
    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return
    logger.addHandler(handler)


def _register_cli(app: Flask) -> None:
    @app.cli.command("analyze-ecg")
    @click.argument("image_path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--prompt", "prompt_path", type=click.Path(dir_okay=False), help="Prompt file to send with the image.")
    @click.option("--html/--raw", "as_html", default=False, help="Print rendered HTML instead of the model text.")
    def analyze_ecg_command(image_path, prompt_path, as_html):
        """Analyze an ECG image and print the result."""
        provider = app.config["ANALYSIS_PROVIDER"]
        api_key = resolve_api_key(DatabaseStore(), provider)
        if not api_key:
            raise click.ClickException(messages.MISSING_API_KEY)
        with open(image_path, "rb") as fh:
            data = fh.read()
        try:
            image = ImagePayload.from_upload(os.path.basename(image_path), data)
        except EcgInterpreterError as exc:
            raise click.ClickException(exc.message)

        prompt = load_prompt(prompt_path or app.config.get("PROMPT_PATH"))
        try:
            client = build_vision_client(provider, api_key, app.config)
            result = analyze_ecg(client, image, prompt)
        except Exception as exc:  # noqa: BLE001
            app.logger.exception("CLI analysis failed: %s", exc)
            raise click.ClickException(str(exc) or messages.UNKNOWN_ERROR)
        if not result.ok:
            raise click.ClickException(result.error or messages.UNKNOWN_ERROR)
        click.echo(result.html if as_html else result.raw)

    @app.cli.command("set-key")
    @click.argument("api_key")
    def set_key_command(api_key):
        """Store the API key used for analysis."""
        try:
            key = validate_api_key(api_key, app.config["ANALYSIS_PROVIDER"])
        except EcgInterpreterError as exc:
            raise click.ClickException(exc.message)
        DatabaseStore().set(API_KEY_SETTING, key)
        logging.getLogger("security").info("API key saved via CLI")
        click.echo(messages.API_KEY_SAVED)

    @app.cli.command("clear-key")
    def clear_key_command():
        """Remove the stored API key."""
        DatabaseStore().clear(API_KEY_SETTING)
        logging.getLogger("security").info("API key cleared via CLI")
        click.echo(messages.API_KEY_CLEARED)


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=False, use_reloader=False)
