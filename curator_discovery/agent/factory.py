"""Wire an ExtractionAgent from configuration."""

import logging
from typing import Optional

from ..config import Config
from ..database import SupabaseOpportunityStore
from ..inference import CredentialRotator, InferenceClient
from ..inference.providers import GeminiAdapter, GroqAdapter, gemini_resolver
from ..keywords import KeywordGenerator
from ..relevance import NegativeMemory, RelevanceFilter
from ..scraper import PageFetcher, WebSearchAdapter
from .service import AcceptCallback, ExtractionAgent

logger = logging.getLogger(__name__)


def build_groq_client(config: Config) -> InferenceClient:
    return InferenceClient(GroqAdapter(), CredentialRotator(config.groq_api_keys))


def build_gemini_client(config: Config) -> InferenceClient:
    adapter = GeminiAdapter()
    return InferenceClient(adapter, CredentialRotator(config.google_api_keys), resolver=gemini_resolver(adapter))


def build_agent(
    config: Config,
    store: Optional[SupabaseOpportunityStore] = None,
    on_accept: Optional[AcceptCallback] = None,
) -> ExtractionAgent:
    """Production wiring: Groq for relevance and extraction, Gemini for grounded scans."""
    store = store or SupabaseOpportunityStore(config.supabase_url, config.supabase_key)
    groq = build_groq_client(config)
    memory = NegativeMemory()
    fetcher = PageFetcher(config.proxy_templates, timeout=config.fetch_timeout_seconds)

    logger.info(
        "agent_config geography=%s groq_keys=%d gemini_keys=%d proxies=%d",
        config.target_geography,
        len(config.groq_api_keys),
        len(config.google_api_keys),
        len(fetcher.proxy_templates),
    )

    return ExtractionAgent(
        quality_client=groq,
        store=store,
        keywords=KeywordGenerator(),
        search=WebSearchAdapter(fetcher),
        fetcher=fetcher,
        relevance=RelevanceFilter(groq, memory, geography=config.target_geography),
        negative_memory=memory,
        grounding_client=build_gemini_client(config) if config.google_api_keys else None,
        geography=config.target_geography,
        request_delay=config.request_delay_seconds,
        on_accept=on_accept,
    )
