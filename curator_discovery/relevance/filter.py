"""Two-stage relevance screen: local keyword check, then a yes/no model call."""

import logging
import re
from typing import Callable, Optional, Sequence

from ..errors import InferenceError
from ..inference.client import InferenceClient
from ..inference.providers.groq import FAST_MODEL
from ..inference.types import CompletionOptions
from ..prompts import build_relevance_prompt
from .negative_memory import NegativeMemory

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 200

SIGNAL_WORDS = (
    "apply",
    "application",
    "grant",
    "deadline",
    "submission",
    "submit",
    "fellowship",
    "residency",
    "award",
    "prize",
    "open call",
    "festival",
    "funding",
    "scholarship",
)

_FIRST_WORD_RE = re.compile(r"[A-Za-z]+")


class RelevanceFilter:
    """Decides whether scraped page text is worth a full extraction.

    Model failures fail open: an outage should degrade to scanning
    everything, not to scanning nothing.
    """

    def __init__(
        self,
        client: InferenceClient,
        negative_memory: NegativeMemory,
        geography: str = "India",
        model: str = FAST_MODEL,
        min_length: int = MIN_TEXT_LENGTH,
        signal_words: Sequence[str] = SIGNAL_WORDS,
    ) -> None:
        self._client = client
        self._memory = negative_memory
        self.geography = geography
        self.model = model
        self.min_length = min_length
        self.signal_words = tuple(w.lower() for w in signal_words)
        self.last_prompt: Optional[str] = None

    def passes_local_screen(self, text: str) -> bool:
        if not text or len(text) < self.min_length:
            return False
        lowered = text.lower()
        return any(word in lowered for word in self.signal_words)

    async def is_relevant(self, text: str, log: Optional[Callable[[str], None]] = None) -> bool:
        if not self.passes_local_screen(text):
            logger.debug("relevance stage=local result=reject length=%d", len(text or ""))
            return False

        prompt = build_relevance_prompt(text, self._memory.titles(), self.geography)
        self.last_prompt = prompt
        options = CompletionOptions(temperature=0.0, model=self.model)
        try:
            result = await self._client.complete(prompt, options, log=log)
        except InferenceError as exc:
            logger.warning("relevance stage=model result=fail_open error=%s", exc)
            return True

        match = _FIRST_WORD_RE.search(result.text or "")
        relevant = bool(match) and match.group(0).lower() == "yes"
        logger.debug("relevance stage=model result=%s reply=%r", "accept" if relevant else "reject",
                     (result.text or "")[:20])
        return relevant
