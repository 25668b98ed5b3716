import logging
from dataclasses import dataclass
from typing import Optional

from markupsafe import escape

from errors import VisionAPIError
from utils import messages
from utils.markdown_render import render_markdown
from vision_client import ImagePayload, VisionClient

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    ok: bool
    html: str
    raw: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if self.ok:
            return {"analysis": self.raw, "html": self.html}
        return {"error": self.error, "html": self.html}


def load_prompt(path: Optional[str]) -> str:
    """Read the prompt resource; a missing or unreadable file yields an empty prompt."""
    if not path:
        return ""
    try:
        with open(path, encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not load prompt from %s: %s", path, exc)
        return ""


def error_html(message: Optional[str]) -> str:
    return f"<strong>{messages.ERROR_LABEL}</strong> {escape(message or messages.UNKNOWN_ERROR)}"


def analyze_ecg(client: VisionClient, image: ImagePayload, prompt: str) -> AnalysisResult:
    logger.info(
        "Analyzing ECG image provider=%s mime=%s bytes=%d prompt_chars=%d",
        client.provider,
        image.mime_type,
        len(image.data),
        len(prompt),
    )
    try:
        raw = client.analyze(prompt, image)
    except VisionAPIError as exc:
        logger.error("Analysis error (status=%s): %s", exc.status_code, exc.message)
        return AnalysisResult(ok=False, html=error_html(exc.message), error=exc.message)
    return AnalysisResult(ok=True, html=f"<p>{render_markdown(raw)}</p>", raw=raw)
