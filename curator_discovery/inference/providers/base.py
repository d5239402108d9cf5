"""Provider adapter interface - everything that differs between providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..resolver import ResolvedModel
from ..types import CompletionOptions

JSON_ONLY_INSTRUCTION = (
    "Respond with a single syntactically valid JSON value and nothing else: "
    "no prose, no markdown fences."
)


class ProviderAdapter(ABC):
    """Strategy for one inference provider.

    The shared retry / rotation logic lives in ``InferenceClient``; adapters
    only translate requests and responses.
    """

    name: str = "provider"
    max_attempts: int = 3
    cooldown_seconds: float = 10.0
    base_backoff_seconds: float = 2.0
    max_backoff_seconds: float = 30.0

    @abstractmethod
    def build_request(
        self,
        prompt: str,
        options: CompletionOptions,
        model: ResolvedModel,
        credential: str,
    ) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        """Return (url, headers, json payload) for one completion."""
        pass

    @abstractmethod
    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, List[str]]:
        """Return (generated text, cited source URLs).

        Raises:
            EmptyCompletionError: response carried no usable completion.
        """
        pass

    def default_model(self, requested: Optional[str]) -> ResolvedModel:
        """Model to use when the provider needs no discovery."""
        raise NotImplementedError(f"{self.name} requires a ModelResolver")

    async def list_models(
        self, http: httpx.AsyncClient, credential: str, version: str
    ) -> List[str]:
        """List model identifiers visible to ``credential``."""
        raise NotImplementedError(f"{self.name} has no model listing")
