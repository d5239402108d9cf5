"""Provider adapters for the shared InferenceClient."""

from .base import ProviderAdapter
from .gemini import GeminiAdapter, gemini_resolver
from .groq import FAST_MODEL, QUALITY_MODEL, GroqAdapter

__all__ = [
    "ProviderAdapter",
    "GeminiAdapter",
    "gemini_resolver",
    "GroqAdapter",
    "FAST_MODEL",
    "QUALITY_MODEL",
]
