"""Google Gemini (generativelanguage REST API) adapter."""

from typing import Any, Dict, List, Tuple

import httpx

from ...errors import EmptyCompletionError
from ..resolver import ModelResolver, ResolvedModel
from ..types import CompletionOptions
from .base import JSON_ONLY_INSTRUCTION, ProviderAdapter

BASE_URL = "https://generativelanguage.googleapis.com"

MODEL_PRIORITY = [
    "models/gemini-2.5-flash",
    "models/gemini-2.0-flash",
    "models/gemini-1.5-flash",
    "models/gemini-1.5-pro",
]

# Assumed to exist when the key cannot list models
FALLBACK_MODEL = ResolvedModel("gemini", "gemini-1.5-flash", "v1beta")

# Search grounding is only exposed on the beta surface
WEB_TOOL_VERSION = "v1beta"


class GeminiAdapter(ProviderAdapter):
    name = "gemini"
    max_attempts = 3
    cooldown_seconds = 10.0

    def build_request(
        self,
        prompt: str,
        options: CompletionOptions,
        model: ResolvedModel,
        credential: str,
    ) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        url = f"{BASE_URL}/{model.version}/models/{model.name}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": credential,
        }

        use_tool = options.use_web_tool and model.version == WEB_TOOL_VERSION
        generation_config: Dict[str, Any] = {
            "temperature": options.effective_temperature(),
        }
        if options.top_p is not None:
            generation_config["topP"] = options.top_p

        system_parts: List[str] = []
        if options.system_preamble:
            system_parts.append(options.system_preamble)
        if options.json_mode:
            # JSON mime type cannot be combined with the search tool
            if use_tool:
                system_parts.append(JSON_ONLY_INSTRUCTION)
            else:
                generation_config["responseMimeType"] = "application/json"

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}
        if use_tool:
            payload["tools"] = [{"google_search": {}}]
        return url, headers, payload

    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, List[str]]:
        candidates = data.get("candidates") or []
        if not candidates:
            if data.get("promptFeedback"):
                raise EmptyCompletionError(f"Blocked: {data['promptFeedback']}")
            raise EmptyCompletionError("Empty response from AI")

        first = candidates[0]
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)

        sources: List[str] = []
        chunks = (first.get("groundingMetadata") or {}).get("groundingChunks") or []
        for chunk in chunks:
            uri = (chunk.get("web") or {}).get("uri")
            if uri and uri not in sources:
                sources.append(uri)
        return text, sources

    async def list_models(
        self, http: httpx.AsyncClient, credential: str, version: str
    ) -> List[str]:
        response = await http.get(
            f"{BASE_URL}/{version}/models",
            headers={"x-goog-api-key": credential},
        )
        response.raise_for_status()
        return [m.get("name", "") for m in response.json().get("models", [])]


def gemini_resolver(adapter: GeminiAdapter) -> ModelResolver:
    """Resolver preloaded with the Gemini priority list and fallback."""
    return ModelResolver(
        adapter,
        priority=MODEL_PRIORITY,
        fallback=FALLBACK_MODEL,
        marker="flash",
        versions=("v1beta", "v1"),
    )
