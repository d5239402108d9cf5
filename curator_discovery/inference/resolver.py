"""Model discovery for providers that publish a model listing."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

import httpx

if TYPE_CHECKING:
    from .providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedModel:
    """Provider + model name + endpoint version."""

    provider: str
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name} ({self.version})"


class ModelResolver:
    """Picks a model once and remembers it until told the model is gone.

    Walk order: ``priority`` (exact match against the listing), then any
    listed model containing ``marker``, then ``fallback`` when the listing
    fails or matches nothing.
    """

    def __init__(
        self,
        adapter: "ProviderAdapter",
        priority: Sequence[str],
        fallback: ResolvedModel,
        marker: str = "flash",
        versions: Sequence[str] = ("v1beta", "v1"),
    ) -> None:
        self._adapter = adapter
        self._priority = list(priority)
        self._fallback = fallback
        self._marker = marker
        self._versions = list(versions)
        self._resolved: Optional[ResolvedModel] = None

    @property
    def resolved(self) -> Optional[ResolvedModel]:
        return self._resolved

    def invalidate(self) -> None:
        if self._resolved is not None:
            logger.warning("model_invalidated provider=%s model=%s",
                           self._resolved.provider, self._resolved.name)
        self._resolved = None

    async def resolve(
        self,
        http: httpx.AsyncClient,
        credential: str,
        log: Optional[Callable[[str], None]] = None,
    ) -> ResolvedModel:
        if self._resolved is not None:
            return self._resolved

        if log:
            log(f"🔍 Connecting to {self._adapter.name}...")

        for version in self._versions:
            try:
                listed = await self._adapter.list_models(http, credential, version)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("model_listing_failed provider=%s version=%s error=%s",
                               self._adapter.name, version, exc)
                continue
            choice = self._choose(listed)
            if choice:
                self._resolved = ResolvedModel(self._adapter.name, choice, version)
                break

        if self._resolved is None:
            self._resolved = self._fallback
            logger.info("model_fallback provider=%s model=%s", self._adapter.name, self._fallback)
        else:
            logger.info("model_resolved provider=%s model=%s", self._adapter.name, self._resolved)
        return self._resolved

    def _choose(self, listed: List[str]) -> Optional[str]:
        names = [_short_name(m) for m in listed]
        for preferred in self._priority:
            if _short_name(preferred) in names:
                return _short_name(preferred)
        for name in names:
            if self._marker in name:
                return name
        return None


def _short_name(model: str) -> str:
    return model[len("models/"):] if model.startswith("models/") else model
