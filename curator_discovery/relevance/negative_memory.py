"""Bounded memory of rejected opportunity titles."""

import logging
from collections import deque
from typing import Deque, Iterable, List

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


class NegativeMemory:
    """Most recent rejected titles, oldest evicted first once full."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self._titles: Deque[str] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._titles)

    def __contains__(self, title: object) -> bool:
        if not isinstance(title, str):
            return False
        folded = title.strip().casefold()
        return any(t.casefold() == folded for t in self._titles)

    def add(self, title: str) -> None:
        title = title.strip()
        if not title or title in self:
            return
        self._titles.append(title)
        logger.debug("negative_memory_add title=%r size=%d", title, len(self._titles))

    def load(self, titles: Iterable[str]) -> None:
        """Replace contents with ``titles`` (oldest first)."""
        self._titles.clear()
        for title in titles:
            self.add(title)

    def titles(self) -> List[str]:
        return list(self._titles)
