import base64
import logging
import mimetypes
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from errors import InvalidImageError, MissingImageError, VisionAPIError
from utils import messages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    @classmethod
    def from_upload(cls, filename: Optional[str], data: Optional[bytes], mimetype: Optional[str] = None) -> "ImagePayload":
        if not data:
            raise MissingImageError()
        mime = (mimetype or "").split(";")[0].strip().lower()
        if not mime or mime == "application/octet-stream":
            mime = (mimetypes.guess_type(filename or "")[0] or "").lower()
        if not mime.startswith("image/"):
            raise InvalidImageError()
        return cls(data=data, mime_type=mime)

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


class VisionClient:
    provider = ""

    def analyze(self, prompt: str, image: ImagePayload) -> str:
        raise NotImplementedError


class OpenAIVisionClient(VisionClient):
    """Chat-completion endpoint that accepts text and image parts in one message."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        api_url: str,
        model: str,
        max_completion_tokens: int = 1000,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.max_completion_tokens = max_completion_tokens
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, prompt: str, image: ImagePayload) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image.data_url}},
                    ],
                }
            ],
            "max_completion_tokens": self.max_completion_tokens,
        }

    def analyze(self, prompt: str, image: ImagePayload) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(self.api_url, headers=headers, json=self.build_payload(prompt, image))
        except httpx.HTTPError as exc:
            logger.warning("Vision request to %s failed: %s", self.api_url, exc)
            raise VisionAPIError(str(exc) or messages.UNKNOWN_ERROR) from exc

        if not resp.is_success:
            raise VisionAPIError(_error_message(resp), status_code=resp.status_code)

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise VisionAPIError(messages.UNKNOWN_ERROR, status_code=resp.status_code) from exc
        if not isinstance(content, str):
            raise VisionAPIError(messages.UNKNOWN_ERROR, status_code=resp.status_code)
        return content


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return messages.API_REQUEST_FAILED
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return messages.API_REQUEST_FAILED


class GeminiVisionClient(VisionClient):
    provider = "gemini"

    def __init__(self, api_key: str, model: str, max_output_tokens: int = 1000, timeout: float = 60.0) -> None:
        self.model = model
        self.max_output_tokens = max_output_tokens
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def analyze(self, prompt: str, image: ImagePayload) -> str:
        config = types.GenerateContentConfig(max_output_tokens=self.max_output_tokens)
        try:
            resp = self._client.models.generate_content(
                model=self.model,
                contents=[types.Part.from_bytes(data=image.data, mime_type=image.mime_type), prompt],
                config=config,
            )
        except genai_errors.APIError as exc:
            raise VisionAPIError(exc.message or messages.API_REQUEST_FAILED, status_code=exc.code) from exc
        except httpx.HTTPError as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise VisionAPIError(str(exc) or messages.UNKNOWN_ERROR) from exc
        text = getattr(resp, "text", None)
        if not text:
            raise VisionAPIError(messages.UNKNOWN_ERROR)
        return text


SUPPORTED_PROVIDERS = ("openai", "gemini")


def build_vision_client(provider: str, api_key: str, config: Dict[str, Any]) -> VisionClient:
    if provider == "gemini":
        return GeminiVisionClient(
            api_key=api_key,
            model=config["GEMINI_MODEL"],
            max_output_tokens=config["MAX_COMPLETION_TOKENS"],
            timeout=config["ANALYSIS_TIMEOUT_SECONDS"],
        )
    if provider == "openai":
        return OpenAIVisionClient(
            api_key=api_key,
            api_url=config["OPENAI_API_URL"],
            model=config["OPENAI_MODEL"],
            max_completion_tokens=config["MAX_COMPLETION_TOKENS"],
            timeout=config["ANALYSIS_TIMEOUT_SECONDS"],
        )
    raise ValueError(f"Unknown analysis provider: {provider}")
