"""Least-recently-used API key rotation with rate-limit cooldowns."""

import itertools
import logging
import time
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class CredentialRotator:
    """Holds the API keys of one provider.

    ``pick()`` hands out the key used longest ago among those not cooling
    down, so consecutive picks cycle through every healthy key.
    """

    def __init__(
        self,
        credentials: Iterable[str],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credentials: List[str] = []
        for credential in credentials:
            if credential and credential not in self._credentials:
                self._credentials.append(credential)
        self._clock = clock
        self._cooldown_until: Dict[str, float] = {c: 0.0 for c in self._credentials}
        self._uses = itertools.count(1)
        self._last_used: Dict[str, int] = {c: 0 for c in self._credentials}

    @property
    def count(self) -> int:
        return len(self._credentials)

    def pick(self) -> Optional[str]:
        now = self._clock()
        best: Optional[str] = None
        best_use = None
        for credential in self._credentials:
            if self._cooldown_until[credential] > now:
                continue
            if best_use is None or self._last_used[credential] < best_use:
                best_use = self._last_used[credential]
                best = credential
        if best is not None:
            self._last_used[best] = next(self._uses)
        return best

    def mark_cooldown(self, credential: str, seconds: float) -> None:
        if credential not in self._cooldown_until:
            return
        self._cooldown_until[credential] = self._clock() + seconds
        logger.debug("credential_cooldown key=%s seconds=%.1f", mask(credential), seconds)

    def is_cooling_down(self, credential: str) -> bool:
        return self._cooldown_until.get(credential, 0.0) > self._clock()

    def reset_all(self) -> None:
        for credential in self._credentials:
            self._cooldown_until[credential] = 0.0


def mask(credential: str) -> str:
    """Log-safe form of a key."""
    if len(credential) <= 8:
        return "***"
    return f"{credential[:4]}...{credential[-4:]}"
