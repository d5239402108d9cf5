"""Search phrase bank for opportunity discovery, with runtime learning."""

import logging
import random
from datetime import date
from typing import Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)

MONTH_PLACEHOLDER = "{month}"
YEAR_PLACEHOLDER = "{year}"

URGENT_KEYWORDS = [
    "film festival submissions closing {month} {year}",
    "arts grant deadline {month} {year} India",
    "artist residency open call {month} {year}",
    "writing fellowship applications {month} {year} India",
    "documentary fund last date {month} {year}",
    "music grant applications open {month} {year}",
    "theatre festival call for entries {month} {year}",
    "photography award deadline {month} {year}",
]

STATIC_KEYWORDS = [
    # Film & video
    "film grants India deadline",
    "documentary funding India open call",
    "short film funding India",
    "NFDC film bazaar application",
    "PSBT documentary grant submission",
    "Mumbai International Film Festival submission",
    "IFFI Goa submission deadline",
    "Dharamshala International Film Festival submit",
    "Kerala State Film Development Corporation grants",
    "screenwriting labs India",
    "women filmmakers grant India",
    "student film festival India submission",
    "animation production grant India",
    "web series funding India pitch",
    "feature film completion fund India",
    "docedge kolkata application",
    "IDSFFK submission",
    "Asian cinema fund submission",
    "Busan film festival asian project market",
    "Rotterdam Hubert Bals Fund India",
    "Sundance documentary fund India eligibility",
    "IDFA Bertha Fund submission",
    "Hot Docs Blue Ice Fund",
    "Tribeca All Access India",
    "VR filmmaking grant India",
    "immersive storytelling funding India",
    "screenplay contest India cash prize",
    # Visual arts
    "artist residency India open call",
    "Kochi Muziris Biennale application",
    "Serendipity Arts Festival grants",
    "Inlaks Shivdasani Foundation art awards",
    "Raza Foundation award for visual arts",
    "Khoj International Artists Association residency",
    "TIFA Working Studios Pune residency",
    "1Shanthiroad Studio Gallery residency",
    "Space118 residency Mumbai application",
    "Pepper House residency Kochi",
    "Sanskriti Museums residency Delhi",
    "Lalit Kala Akademi scholarship",
    "Pollock-Krasner Foundation grant India",
    "curatorial fellowship India",
    "public art grant India",
    "illustration awards India",
    "photography grant India",
    "Alkazi Foundation photography grant",
    "graphic novel grant India",
    "street art festival open call India",
    "ceramic residency India",
    "printmaking workshop funding India",
    "emerging artist award India",
    # Performing arts
    "theatre production grant India",
    "dance residency India",
    "classical music scholarship India",
    "Sangeet Natak Akademi awards application",
    "India Foundation for the Arts grants",
    "Tata Trusts arts grants",
    "Aditya Birla Kala Kiran Puraskar",
    "Mahindra Excellence in Theatre Awards submission",
    "Prithvi Theatre festival submission",
    "NCPA Mumbai experimental theatre open call",
    "Attakkalari festival open call",
    "Gati Dance Forum residency",
    "music production grant India independent",
    "folk arts grant ministry of culture India",
    "travel grant for indian artists",
    "British Council India arts grant",
    "Goethe-Institut India arts funding",
    "Pro Helvetia India residency",
    "contemporary dance funding India",
    "music residency India application",
    "puppetry arts grant India",
    "indie music festival submission India",
    # Literature & writing
    "creative writing residency India",
    "Sangam House residency application",
    "Toto Funds the Arts creative writing",
    "Sahitya Akademi young writer award",
    "poetry chapbook contest India",
    "short story competition India prize",
    "translation grants India",
    "playwriting competition India",
    "publishing grant for indian authors",
    "debut novel prize India",
    "literary translation funding India",
    "writer in residence India",
    # General & government
    "Ministry of Culture India fellowship scheme",
    "CCRT scholarship for young artists",
    "Fulbright-Nehru Academic and Professional Excellence Fellowships",
    "Charles Wallace India Trust Awards",
    "Prince Claus Fund open call",
    "Asian Cultural Council grant",
    "Rockefeller Foundation Bellagio Center residency",
    "social impact art grant India",
    "digital art grant India",
    "arts management fellowship India",
    "heritage preservation grant India",
    "cultural entrepreneurship grant India",
    "museum fellowship India",
    "craft revival grant India",
    "corporate CSR arts grants India",
]


class KeywordGenerator:
    """Hands out shuffled batches of search phrases.

    Urgent phrases are rendered against today's month and year on every
    call; the static pool only ever grows (via ``learn``).
    """

    def __init__(
        self,
        static_keywords: Optional[Iterable[str]] = None,
        urgent_keywords: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._static: List[str] = list(static_keywords if static_keywords is not None else STATIC_KEYWORDS)
        self._urgent: List[str] = list(urgent_keywords if urgent_keywords is not None else URGENT_KEYWORDS)
        self._rng = rng or random.Random()
        self._today = today

    @property
    def count(self) -> int:
        return len(self._static) + len(self._urgent)

    def urgent(self) -> List[str]:
        """Urgent phrases with the date placeholders filled in."""
        today = self._today()
        month = f"{today:%B}"
        return [
            phrase.replace(MONTH_PLACEHOLDER, month).replace(YEAR_PLACEHOLDER, str(today.year))
            for phrase in self._urgent
        ]

    def batch(self, count: int = 3, mode: str = "mixed") -> List[str]:
        """Return up to ``count`` distinct phrases.

        Args:
            count: Batch size.
            mode: ``urgent`` (dated phrases only) or ``mixed`` (all phrases).
        """
        if mode == "urgent":
            pool = self.urgent()
        elif mode == "mixed":
            pool = self.urgent() + self._static
        else:
            raise ValueError(f"Invalid keyword mode: {mode}. Must be 'urgent' or 'mixed'")

        unique: List[str] = []
        seen = set()
        for phrase in pool:
            key = phrase.casefold()
            if key not in seen:
                seen.add(key)
                unique.append(phrase)
        self._rng.shuffle(unique)
        return unique[:max(0, count)]

    def learn(self, phrases: Iterable[str]) -> int:
        """Add novel phrases to the static pool. Returns how many were added."""
        known = {p.casefold() for p in self._static}
        added = 0
        for phrase in phrases:
            clean = phrase.strip().casefold()
            if clean and clean not in known:
                self._static.append(clean)
                known.add(clean)
                added += 1
        if added:
            logger.info("keywords_learned added=%d total=%d", added, self.count)
        return added
