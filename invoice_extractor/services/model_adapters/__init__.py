from ...core.errors import UnsupportedModelError
from .base import EXTRACTION_PROMPT, ModelAdapter, parse_model_json
from .gemini import GeminiAdapter
from .groq import GroqAdapter

# Adding a backend means adding an adapter class and one entry here
MODEL_ADAPTERS: dict[str, type[ModelAdapter]] = {
    GeminiAdapter.name: GeminiAdapter,
    GroqAdapter.name: GroqAdapter,
}

SUPPORTED_MODELS = tuple(MODEL_ADAPTERS)


def get_model_adapter(name: str | None) -> ModelAdapter:
    """Build the adapter registered under `name` (no client is created for unknown names)"""
    adapter_cls = MODEL_ADAPTERS.get(name)
    if adapter_cls is None:
        raise UnsupportedModelError(name, SUPPORTED_MODELS)
    return adapter_cls()


__all__ = [
    "EXTRACTION_PROMPT",
    "GeminiAdapter",
    "GroqAdapter",
    "MODEL_ADAPTERS",
    "ModelAdapter",
    "SUPPORTED_MODELS",
    "get_model_adapter",
    "parse_model_json",
]
