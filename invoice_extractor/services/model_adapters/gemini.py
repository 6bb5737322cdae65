from google import genai
from google.genai import types

from ...core.config import settings
from ...core.errors import UpstreamError
from .base import ModelAdapter


class GeminiAdapter(ModelAdapter):
    name = "gemini"
    display_name = "Gemini"

    def __init__(self, client=None, model: str | None = None, api_key: str | None = None,
                 timeout_seconds: float | None = None):
        self.model = model or settings.gemini_model

        if client is None:
            api_key = api_key or settings.gemini_api_key
            if not api_key:
                raise UpstreamError("GEMINI_API_KEY not set")
            timeout_seconds = timeout_seconds or settings.model_timeout_seconds
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
            )
        self.client = client

    def _generate(self, prompt: str) -> str | None:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=0,
            ),
        )
        return response.text
