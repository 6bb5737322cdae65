import openai
from openai import OpenAI

from ...core.config import settings
from ...core.errors import UpstreamError
from .base import ModelAdapter


class GroqAdapter(ModelAdapter):
    """Groq chat completions through its OpenAI-compatible endpoint"""

    name = "groq"
    display_name = "Groq"
    timeout_errors = ModelAdapter.timeout_errors + (openai.APITimeoutError,)

    def __init__(self, client=None, model: str | None = None, api_key: str | None = None,
                 timeout_seconds: float | None = None):
        self.model = model or settings.groq_model

        if client is None:
            api_key = api_key or settings.groq_api_key
            if not api_key:
                raise UpstreamError("GROQ_API_KEY not set")
            client = OpenAI(
                base_url=settings.groq_base_url,
                api_key=api_key,
                timeout=timeout_seconds or settings.model_timeout_seconds,
                max_retries=0,
            )
        self.client = client

    def _generate(self, prompt: str) -> str | None:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            temperature=0,
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content
