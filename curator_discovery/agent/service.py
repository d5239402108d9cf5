"""Autonomous discovery agent.

Drives one scan end to end:
- seeding: load rejected titles into the negative memory
- searching: keyword batch -> search links, plus curated seed pages
- scraping: fetch each candidate and screen it for relevance
- extracting: structured fields from the quality model, validated and
  de-duplicated against storage, then stored as drafts

Everything is awaited one call at a time; the proxies and providers apply
per-caller rate limits that a single in-flight request stays under.
"""

import asyncio
import logging
import time as timer
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from pydantic import ValidationError

from ..deduplicator import CandidateDeduplicator
from ..errors import (
    ConfigurationError,
    ExtractionError,
    FetchError,
    InferenceError,
    ScanInProgressError,
)
from ..inference.client import InferenceClient
from ..inference.json_repair import parse_json
from ..inference.providers.groq import QUALITY_MODEL
from ..inference.types import CompletionOptions
from ..keywords import KeywordGenerator
from ..models import (
    SCAN_PROFILES,
    AiMetadata,
    CancellationToken,
    Candidate,
    ExtractedOpportunity,
    Opportunity,
    OpportunityStatus,
    OpportunityType,
    ScanMode,
    ScanProfile,
    ScanState,
    Scope,
    compute_days_left,
    format_deadline,
)
from ..prompts import (
    GROUNDED_SEARCH_STRATEGIES,
    NOT_ELIGIBLE_TITLE,
    SURPRISE_STRATEGIES,
    build_extraction_prompt,
    build_grounded_scan_prompt,
)
from ..relevance import NegativeMemory, RelevanceFilter
from ..scraper import PageFetcher, WebSearchAdapter, extract_links

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]
AcceptCallback = Callable[[Opportunity], None]

# Curated directory pages that reliably list open calls
SEED_URLS = [
    "https://filmfreeway.com/festivals",
    "https://www.transartists.org/en/transartists-calls",
    "https://www.artconnect.com/opportunities",
    "https://www.indiaculture.gov.in/scholarships-fellowships",
]

SEED_EXPANSION_LIMIT = 10

# Deadlines the model could not date fall this far ahead
DEADLINE_FALLBACK_DAYS = 90

PLACEHOLDER_TITLES = {
    "", "untitled", "unknown", "n/a", "na", "none", "null", "tbd",
    "title", "name", "opportunity", "opportunity title", "opportunity name",
}

_DEADLINE_FORMATS = ("%B %d, %Y", "%d %B %Y", "%b %d, %Y", "%d %b %Y", "%d/%m/%Y", "%Y/%m/%d")


class OpportunityStore(Protocol):
    """The slice of storage the agent depends on."""

    def exists(self, title: Optional[str] = None, url: Optional[str] = None) -> bool: ...

    def insert_draft(self, opportunity: Opportunity) -> str: ...

    def insert_rejected(self, opportunity: Opportunity) -> str: ...

    def update_status(self, opportunity_id: str, status: OpportunityStatus) -> Any: ...

    def recent_rejected_titles(self, limit: int = 20) -> List[str]: ...


class _Outcome(Enum):
    SKIPPED = "skipped"
    FETCH_FAILED = "fetch_failed"
    EVALUATED = "evaluated"


def parse_deadline(value: str) -> Optional[date]:
    """ISO date first, then a few common human formats."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass
    for fmt in _DEADLINE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _coerce_enum(enum_cls, value: str, default):
    for member in enum_cls:
        if member.value.lower() == (value or "").strip().lower():
            return member
    return default


def _normalize_website(url: str) -> str:
    url = (url or "").strip()
    if url and not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


class ExtractionAgent:
    """Orchestrates discovery scans. All collaborators are injected."""

    def __init__(
        self,
        quality_client: InferenceClient,
        store: OpportunityStore,
        keywords: KeywordGenerator,
        search: WebSearchAdapter,
        fetcher: PageFetcher,
        relevance: RelevanceFilter,
        negative_memory: NegativeMemory,
        grounding_client: Optional[InferenceClient] = None,
        seed_urls: Optional[Sequence[str]] = None,
        geography: str = "India",
        request_delay: float = 1.0,
        extraction_model: str = QUALITY_MODEL,
        on_accept: Optional[AcceptCallback] = None,
        link_extractor: Callable[..., List[str]] = extract_links,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._quality = quality_client
        self._grounding = grounding_client
        self._store = store
        self._keywords = keywords
        self._search = search
        self._fetcher = fetcher
        self._relevance = relevance
        self._memory = negative_memory
        self._seed_urls = list(SEED_URLS if seed_urls is None else seed_urls)
        self.geography = geography
        self.request_delay = request_delay
        self.extraction_model = extraction_model
        self.on_accept = on_accept
        self._link_extractor = link_extractor
        self._sleep = sleep
        self._today = today
        self._lock = asyncio.Lock()
        self.state: Optional[ScanState] = None

    @property
    def negative_memory(self) -> NegativeMemory:
        return self._memory

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def perform_auto_scan(
        self,
        on_log: Optional[LogCallback] = None,
        mode: str = ScanMode.DAILY.value,
        target_count: int = 5,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Opportunity]:
        """Run one discovery scan and return the drafts it stored.

        Per-candidate failures are logged and skipped; a configuration error
        stops the scan early. Either way whatever was accepted is returned.

        Raises:
            ScanInProgressError: another scan is running on this agent.
        """
        if self._lock.locked():
            raise ScanInProgressError("A scan is already running")
        async with self._lock:
            return await self._run_scan(
                self._make_log(on_log),
                SCAN_PROFILES[ScanMode(mode)],
                ScanMode(mode),
                target_count,
                cancel_token or CancellationToken(),
            )

    async def parse_opportunity_text(
        self,
        raw_text: str,
        source_url: Optional[str] = None,
        on_log: Optional[LogCallback] = None,
    ) -> Optional[Opportunity]:
        """Extract an Opportunity from pasted text. Nothing is stored."""
        log = self._make_log(on_log)
        if not raw_text or not raw_text.strip():
            log("Nothing to parse.")
            return None
        log("Parsing pasted text...")
        return await self._extract(raw_text, source_url or "", "manual", log)

    def learn_from_rejection(
        self,
        opportunity: Opportunity,
        on_log: Optional[LogCallback] = None,
    ) -> None:
        """Remember a rejected opportunity so future scans steer clear of it."""
        log = self._make_log(on_log)
        self._memory.add(opportunity.title)
        if opportunity.id:
            self._store.update_status(opportunity.id, OpportunityStatus.REJECTED)
        elif not self._store.exists(title=opportunity.title, url=opportunity.source_url):
            self._store.insert_rejected(opportunity)
        log(f"🧠 Learned to avoid: \"{opportunity.title}\" ({len(self._memory)} remembered)")

    async def grounded_scan(
        self,
        on_log: Optional[LogCallback] = None,
        domain: str = "Surprise Me",
    ) -> List[Opportunity]:
        """One search-grounded model call for a creative domain.

        Raises:
            ConfigurationError: no grounding client was configured.
            ScanInProgressError: another scan is running on this agent.
        """
        if self._grounding is None:
            raise ConfigurationError("Grounded scan needs a grounding-capable client")
        if self._lock.locked():
            raise ScanInProgressError("A scan is already running")
        async with self._lock:
            return await self._run_grounded_scan(self._make_log(on_log), domain)

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    async def _run_scan(
        self,
        log: LogCallback,
        profile: ScanProfile,
        mode: ScanMode,
        target_count: int,
        token: CancellationToken,
    ) -> List[Opportunity]:
        accepted: List[Opportunity] = []
        evaluated = 0
        started = timer.monotonic()
        log(f"Initializing agent ({mode.value} scan, target {target_count})...")

        try:
            self._set_state(ScanState.SEEDING)
            self._seed_memory(log)

            self._set_state(ScanState.SEARCHING)
            dedup = CandidateDeduplicator()
            candidates = dedup.deduplicate(await self._gather_candidates(profile, token, log))
            log(f"📋 {len(candidates)} candidate pages queued.")

            self._set_state(ScanState.SCRAPING)
            for candidate in candidates:
                if token.cancelled:
                    break
                if len(accepted) >= target_count:
                    log(f"🎯 Target of {target_count} reached.")
                    break
                if evaluated >= profile.max_evaluated:
                    log(f"🛑 Scan limit of {profile.max_evaluated} pages reached.")
                    break

                try:
                    outcome, opportunity = await self._process_candidate(candidate, dedup, log)
                except ConfigurationError:
                    raise
                except Exception as exc:
                    logger.exception("candidate_failed url=%s", candidate.url)
                    log(f"⚠️ Skipping {candidate.url}: {exc}")
                    outcome, opportunity = _Outcome.FETCH_FAILED, None

                if outcome is _Outcome.EVALUATED:
                    evaluated += 1
                if opportunity is not None:
                    accepted.append(opportunity)
                if outcome is not _Outcome.SKIPPED:
                    await self._sleep(self.request_delay)
                self._set_state(ScanState.SCRAPING)

            self._set_state(ScanState.CANCELLED if token.cancelled else ScanState.DONE)
            if token.cancelled:
                log("⏹ Scan cancelled.")
        except ConfigurationError as exc:
            self._set_state(ScanState.FAILED)
            log(f"⛔ CRITICAL ERROR: {exc}")

        duration = timer.monotonic() - started
        log(f"Scan complete. {len(accepted)} accepted, {evaluated} pages evaluated in {duration:.1f}s.")
        return accepted

    def _seed_memory(self, log: LogCallback) -> None:
        try:
            titles = self._store.recent_rejected_titles(self._memory.capacity)
        except Exception as exc:
            logger.warning("negative_memory_seed result=failure error=%s", exc)
            log("⚠️ Could not load rejection history.")
            return
        # storage returns newest first; memory evicts from the front
        self._memory.load(reversed(titles))
        log(f"🧠 Loaded {len(self._memory)} negative constraints.")

    async def _gather_candidates(
        self,
        profile: ScanProfile,
        token: CancellationToken,
        log: LogCallback,
    ) -> List[Candidate]:
        candidates: List[Candidate] = []
        for keyword in self._keywords.batch(profile.keyword_count, "mixed"):
            if token.cancelled:
                return candidates
            log(f"🔎 Searching: \"{keyword}\"")
            links = await self._search.search(keyword)
            log(f"   {len(links)} links found.")
            candidates.extend(Candidate(url=link, query=keyword) for link in links)

        for seed in self._seed_urls:
            candidates.append(Candidate(url=seed, query="seed"))
            if profile.expand_seeds and not token.cancelled:
                candidates.extend(await self._expand_seed(seed, log))
        return candidates

    async def _expand_seed(self, seed: str, log: LogCallback) -> List[Candidate]:
        try:
            html = await self._fetcher.fetch_raw(seed)
        except FetchError as exc:
            log(f"⚠️ Seed unavailable: {exc}")
            return []
        links = self._link_extractor(html, seed, kind="page")[:SEED_EXPANSION_LIMIT]
        return [Candidate(url=link, query=f"seed:{seed}") for link in links]

    async def _process_candidate(
        self,
        candidate: Candidate,
        dedup: CandidateDeduplicator,
        log: LogCallback,
    ) -> Tuple[_Outcome, Optional[Opportunity]]:
        url = candidate.url
        if dedup.seen(url):
            return _Outcome.SKIPPED, None
        dedup.mark(url)

        if self._store.exists(url=url):
            log(f"⏭ Already stored: {url}")
            return _Outcome.SKIPPED, None

        log(f"🌐 Scraping {url}")
        try:
            text = await self._fetcher.fetch_text(url)
        except FetchError as exc:
            log(f"⚠️ {exc}")
            return _Outcome.FETCH_FAILED, None

        if not await self._relevance.is_relevant(text, log):
            log("✗ Not relevant.")
            return _Outcome.EVALUATED, None

        self._set_state(ScanState.EXTRACTING)
        opportunity = await self._extract(text, url, candidate.query, log)
        if opportunity is None:
            return _Outcome.EVALUATED, None

        if self._store.exists(title=opportunity.title):
            log(f"♻️ Duplicate discarded: {opportunity.title}")
            return _Outcome.EVALUATED, None

        new_id = self._store.insert_draft(opportunity)
        opportunity = opportunity.model_copy(update={"id": new_id or None})
        log(f"✅ Accepted: {opportunity.title} ({opportunity.days_left} days left)")
        self._after_accept(opportunity)
        return _Outcome.EVALUATED, opportunity

    def _after_accept(self, opportunity: Opportunity) -> None:
        organizer = opportunity.organizer.strip()
        if organizer and organizer.lower() != "unknown":
            self._keywords.learn([f"{organizer} open call"])
        if self.on_accept is not None:
            try:
                self.on_accept(opportunity)
            except Exception:
                logger.exception("on_accept callback failed for %r", opportunity.title)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def _extract(
        self,
        text: str,
        source_url: str,
        query: str,
        log: LogCallback,
    ) -> Optional[Opportunity]:
        prompt = build_extraction_prompt(text, self.geography, self._today(), source_url)
        options = CompletionOptions(json_mode=True, temperature=0.0, model=self.extraction_model)
        try:
            result = await self._quality.complete(prompt, options, log=log)
        except InferenceError as exc:
            log(f"⚠️ Extraction failed: {exc}")
            return None

        data = parse_json(result.text)
        if isinstance(data, list) and data and isinstance(data[0], dict):
            data = data[0]
        if not isinstance(data, dict):
            log("⚠️ Could not parse extraction output.")
            return None

        try:
            return self._build_opportunity(
                data,
                source_url=source_url,
                query=query,
                model_used=result.model_used,
                sources=result.sources,
            )
        except ExtractionError as exc:
            log(str(exc))
            return None

    def _build_opportunity(
        self,
        data: Dict[str, Any],
        source_url: str,
        query: str,
        model_used: str,
        sources: Sequence[str],
        category: Optional[str] = None,
    ) -> Opportunity:
        """Validate one extracted record and map it onto an Opportunity.

        Raises:
            ExtractionError: malformed fields, a placeholder or NOT_ELIGIBLE
                title, or a deadline that has already passed.
        """
        try:
            extracted = ExtractedOpportunity.model_validate(data)
        except ValidationError as exc:
            raise ExtractionError(f"⚠️ Malformed extraction: {exc.error_count()} field error(s).") from exc

        title = extracted.title.strip()
        if title.upper() == NOT_ELIGIBLE_TITLE:
            raise ExtractionError(f"🚫 Not open to applicants from {self.geography}.")
        if title.casefold() in PLACEHOLDER_TITLES:
            raise ExtractionError("⚠️ Extraction produced no usable title.")

        today = self._today()
        deadline_date = parse_deadline(extracted.deadline)
        if deadline_date is None:
            deadline_date = today + timedelta(days=DEADLINE_FALLBACK_DAYS)
            logger.warning("deadline_fallback title=%r raw=%r", title, extracted.deadline)
        days_left = compute_days_left(deadline_date, datetime.combine(today, time.min))
        if days_left < 0:
            raise ExtractionError(f"⌛ Expired: {title} ({deadline_date.isoformat()})")

        website = _normalize_website(extracted.website) or source_url or (sources[0] if sources else "")
        return Opportunity(
            title=title,
            organizer=extracted.organizer or "Unknown",
            deadline=format_deadline(deadline_date),
            deadline_date=deadline_date,
            grant_or_prize=extracted.grantOrPrize or "N/A",
            type=_coerce_enum(OpportunityType, extracted.type, OpportunityType.GRANT),
            scope=_coerce_enum(Scope, extracted.scope, Scope.INTERNATIONAL),
            description=extracted.description or None,
            eligibility=extracted.eligibility or ["General"],
            website=website,
            source_url=source_url or website or None,
            category=category,
            grounding_sources=list(dict.fromkeys(sources)),
            ai_confidence_score=extracted.aiConfidenceScore if extracted.aiConfidenceScore is not None else 80,
            ai_reasoning=extracted.aiReasoning or "AI Discovered",
            instagram_caption=extracted.instagramCaption,
            ai_metadata=AiMetadata(
                model=model_used,
                discovery_query=query,
                discovery_date=datetime.now(timezone.utc),
            ),
        )

    # ------------------------------------------------------------------
    # Grounded scan
    # ------------------------------------------------------------------

    def _grounded_query(self, domain: str) -> str:
        year = self._today().year
        template = GROUNDED_SEARCH_STRATEGIES.get(domain)
        if template is None:
            template = SURPRISE_STRATEGIES[int(timer.time()) % len(SURPRISE_STRATEGIES)]
        return template.format(geography=self.geography, year=year)

    async def _run_grounded_scan(self, log: LogCallback, domain: str) -> List[Opportunity]:
        query = self._grounded_query(domain)
        log(f"Mission Target: [{domain}]")
        log(f"Executing Search Strategy: \"{query}\"")

        prompt = build_grounded_scan_prompt(query, self.geography, self._today())
        options = CompletionOptions(json_mode=True, use_web_tool=True, temperature=0.2)
        try:
            result = await self._grounding.complete(prompt, options, log=log)
        except InferenceError as exc:
            log(f"❌ ERROR: {exc}")
            return []

        sources = list(dict.fromkeys(result.sources))
        log(f"Sources Verified: {len(sources)} references found.")
        data = parse_json(result.text)
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            log("❌ ERROR: could not parse grounded results.")
            return []

        category = "General" if domain not in GROUNDED_SEARCH_STRATEGIES else domain
        accepted: List[Opportunity] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                opportunity = self._build_opportunity(
                    item,
                    source_url="",
                    query=query,
                    model_used=result.model_used,
                    sources=sources,
                    category=category,
                )
            except ExtractionError as exc:
                log(str(exc))
                continue
            if self._store.exists(title=opportunity.title, url=opportunity.source_url):
                log(f"♻️ Duplicate discarded: {opportunity.title}")
                continue
            new_id = self._store.insert_draft(opportunity)
            opportunity = opportunity.model_copy(update={"id": new_id or None})
            accepted.append(opportunity)
            self._after_accept(opportunity)

        log(f"Scan complete. {len(accepted)} active opportunities found.")
        return accepted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: ScanState) -> None:
        if state is not self.state:
            logger.debug("scan_state %s -> %s", self.state.value if self.state else None, state.value)
        self.state = state

    @staticmethod
    def _make_log(on_log: Optional[LogCallback]) -> LogCallback:
        def log(message: str) -> None:
            logger.info(message)
            if on_log is not None:
                on_log(message)
        return log
