from flask import Blueprint, current_app, render_template

web_bp = Blueprint("web", __name__)


@web_bp.route("/")
def index():
    return render_template("index.html", provider=current_app.config.get("ANALYSIS_PROVIDER", "openai"))
