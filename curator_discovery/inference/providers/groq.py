"""Groq (OpenAI-compatible chat completions) adapter."""

from typing import Any, Dict, List, Optional, Tuple

from ...errors import EmptyCompletionError
from ..resolver import ResolvedModel
from ..types import CompletionOptions
from .base import ProviderAdapter

BASE_URL = "https://api.groq.com/openai/v1/chat/completions"

FAST_MODEL = "llama-3.1-8b-instant"
QUALITY_MODEL = "llama-3.3-70b-versatile"

SYSTEM_PREAMBLE = (
    "You are a helpful data extraction assistant. You output strict JSON when asked."
)


class GroqAdapter(ProviderAdapter):
    name = "groq"
    max_attempts = 4
    cooldown_seconds = 60.0

    def default_model(self, requested: Optional[str]) -> ResolvedModel:
        return ResolvedModel(self.name, requested or QUALITY_MODEL, "v1")

    def build_request(
        self,
        prompt: str,
        options: CompletionOptions,
        model: ResolvedModel,
        credential: str,
    ) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }
        payload: Dict[str, Any] = {
            "model": model.name,
            "messages": [
                {"role": "system", "content": options.system_preamble or SYSTEM_PREAMBLE},
                {"role": "user", "content": prompt},
            ],
            "temperature": options.effective_temperature(),
        }
        if options.top_p is not None:
            payload["top_p"] = options.top_p
        if options.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return BASE_URL, headers, payload

    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, List[str]]:
        choices = data.get("choices") or []
        if not choices:
            raise EmptyCompletionError("Groq returned no choices")
        content = (choices[0].get("message") or {}).get("content") or ""
        return content, []
