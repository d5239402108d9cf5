"""Request options and results shared by every provider."""

from dataclasses import dataclass, field
from typing import List, Optional

DETERMINISTIC_TEMPERATURE = 0.0
CREATIVE_TEMPERATURE = 0.6


@dataclass
class CompletionOptions:
    json_mode: bool = False
    use_web_tool: bool = False
    temperature: Optional[float] = None
    top_p: Optional[float] = 0.9
    model: Optional[str] = None
    system_preamble: Optional[str] = None

    def effective_temperature(self) -> float:
        """Caller override, else near-zero for JSON work, moderate otherwise."""
        if self.temperature is not None:
            return self.temperature
        return DETERMINISTIC_TEMPERATURE if self.json_mode else CREATIVE_TEMPERATURE


@dataclass
class CompletionResult:
    text: str
    sources: List[str] = field(default_factory=list)
    model_used: str = "unknown"
