"""In-memory fakes for the network-facing collaborators.

Every scan test drives the real agent, relevance filter, keyword generator
and deduplicator; only storage, inference, fetching and search are faked.
"""

import json
import random
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Union

from curator_discovery.agent import ExtractionAgent
from curator_discovery.errors import FetchError
from curator_discovery.inference.types import CompletionOptions, CompletionResult
from curator_discovery.keywords import KeywordGenerator
from curator_discovery.models import Opportunity, OpportunityStatus, VerificationStatus
from curator_discovery.relevance import NegativeMemory, RelevanceFilter

Reply = Union[str, BaseException]


def future_date(days: int = 60) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def opportunity_page(title: str = "Indie Film Grant", extra: str = "") -> str:
    """Scraped page text long enough and keyword-rich enough for stage 1."""
    return (
        f"{title}. Grant applications open now for independent filmmakers. "
        f"Deadline {future_date()}. Eligibility: Indian citizens over 18. "
        "Submit a project synopsis, budget and director statement. Selected "
        "projects receive production funding and mentorship from industry "
        f"professionals over a six month programme. {extra}"
    )


def extraction_json(title: str = "Indie Film Grant", **overrides) -> str:
    data = {
        "title": title,
        "organizer": "Indie Film Collective",
        "deadline": future_date(),
        "grantOrPrize": "INR 5,00,000",
        "type": "Grant",
        "description": "Production funding for first-time directors.",
        "eligibility": ["Indian citizens"],
        "website": "https://indiefilm.example.org/apply",
        "scope": "National",
        "instagramCaption": "Funding for your first film!",
    }
    data.update(overrides)
    return json.dumps(data)


class MockStore:
    """In-memory replacement for SupabaseOpportunityStore."""

    def __init__(self) -> None:
        self.rows: List[Opportunity] = []
        self._next_id = 1

    def exists(self, title: Optional[str] = None, url: Optional[str] = None) -> bool:
        for row in self.rows:
            if url and row.source_url == url:
                return True
            if title and row.title.strip().casefold() == title.strip().casefold():
                return True
        return False

    def _insert(self, opportunity: Opportunity, **status) -> str:
        new_id = str(self._next_id)
        self._next_id += 1
        self.rows.append(opportunity.model_copy(update=dict(status, id=new_id)))
        return new_id

    def insert_draft(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity, status=OpportunityStatus.DRAFT,
                            verification_status=VerificationStatus.DRAFT)

    def insert_published(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity, status=OpportunityStatus.PUBLISHED,
                            verification_status=VerificationStatus.VERIFIED)

    def insert_rejected(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity, status=OpportunityStatus.REJECTED)

    def get_by_id(self, opportunity_id: str) -> Optional[Opportunity]:
        return next((r for r in self.rows if r.id == opportunity_id), None)

    def get_by_status(self, status: OpportunityStatus) -> List[Opportunity]:
        return [r for r in reversed(self.rows) if r.status == status]

    def update_status(self, opportunity_id, status, verification_status=None):
        for i, row in enumerate(self.rows):
            if row.id == opportunity_id:
                changes = {"status": status}
                if verification_status is not None:
                    changes["verification_status"] = verification_status
                self.rows[i] = row.model_copy(update=changes)
                return self.rows[i]
        return None

    def delete_where(self, status: OpportunityStatus) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.status != status]
        return before - len(self.rows)

    def recent_rejected_titles(self, limit: int = 20) -> List[str]:
        rejected = [r.title for r in self.rows if r.status == OpportunityStatus.REJECTED]
        return list(reversed(rejected))[:limit]

    def drafts(self) -> List[Opportunity]:
        return [r for r in self.rows if r.status == OpportunityStatus.DRAFT]


class FakeInferenceClient:
    """Answers prompts from a responder function and records them."""

    def __init__(
        self,
        responder: Union[Reply, Callable[[str, CompletionOptions], Reply]],
        model: str = "fake-model",
        sources: Sequence[str] = (),
    ) -> None:
        self._responder = responder
        self.model = model
        self.sources = list(sources)
        self.prompts: List[str] = []
        self.options: List[CompletionOptions] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt, options=None, log=None) -> CompletionResult:
        options = options or CompletionOptions()
        self.prompts.append(prompt)
        self.options.append(options)
        reply = self._responder(prompt, options) if callable(self._responder) else self._responder
        if isinstance(reply, BaseException):
            raise reply
        return CompletionResult(text=reply, sources=list(self.sources), model_used=options.model or self.model)


class FakeFetcher:
    """Serves canned page text / markup; anything else fails like a dead proxy chain."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, raw: Optional[Dict[str, str]] = None) -> None:
        self.pages = dict(pages or {})
        self.raw = dict(raw or {})
        self.text_calls: List[str] = []
        self.raw_calls: List[str] = []

    async def fetch_raw(self, url: str) -> str:
        self.raw_calls.append(url)
        if url not in self.raw:
            raise FetchError(url)
        return self.raw[url]

    async def fetch_text(self, url: str) -> str:
        self.text_calls.append(url)
        if url not in self.pages:
            raise FetchError(url)
        return self.pages[url]


class FakeSearch:
    def __init__(self, links: Sequence[str] = ()) -> None:
        self.links = list(links)
        self.queries: List[str] = []

    async def search(self, keyword: str) -> List[str]:
        self.queries.append(keyword)
        return list(self.links)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class AgentHarness:
    """An ExtractionAgent plus handles on every fake it was built with."""

    def __init__(
        self,
        links: Sequence[str] = (),
        pages: Optional[Dict[str, str]] = None,
        raw: Optional[Dict[str, str]] = None,
        fast_reply="YES",
        quality_reply=None,
        grounding_client: Optional[FakeInferenceClient] = None,
        seed_urls: Sequence[str] = (),
        keywords: Sequence[str] = ("film grant India",),
        store: Optional[MockStore] = None,
    ) -> None:
        self.store = store or MockStore()
        self.memory = NegativeMemory()
        self.fast = FakeInferenceClient(fast_reply, model="llama-3.1-8b-instant")
        self.quality = FakeInferenceClient(
            quality_reply if quality_reply is not None else extraction_json(),
        )
        self.fetcher = FakeFetcher(pages, raw)
        self.search = FakeSearch(links)
        self.keywords = KeywordGenerator(static_keywords=keywords, urgent_keywords=[], rng=random.Random(7))
        self.sleep = RecordingSleep()
        self.relevance = RelevanceFilter(self.fast, self.memory)
        self.accepted: List[Opportunity] = []
        self.logs: List[str] = []
        self.agent = ExtractionAgent(
            quality_client=self.quality,
            store=self.store,
            keywords=self.keywords,
            search=self.search,
            fetcher=self.fetcher,
            relevance=self.relevance,
            negative_memory=self.memory,
            grounding_client=grounding_client,
            seed_urls=list(seed_urls),
            on_accept=self.accepted.append,
            sleep=self.sleep,
        )

    async def scan(self, **kwargs) -> List[Opportunity]:
        return await self.agent.perform_auto_scan(on_log=self.logs.append, **kwargs)

