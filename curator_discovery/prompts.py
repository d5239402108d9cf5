"""LLM prompt templates for relevance screening and extraction.

Extraction prompts ask the model to:
1. Read scraped page text (or pasted text) about a creative opportunity
2. Fill a fixed set of fields, inferring the deadline if absent
3. Return exactly one JSON object, or the NOT_ELIGIBLE sentinel when the
   opportunity explicitly excludes the target geography
"""

from datetime import date
from typing import Sequence

NOT_ELIGIBLE_TITLE = "NOT_ELIGIBLE"

RELEVANCE_PROMPT = """Does the following web page describe a specific, currently open opportunity (grant, film festival submission, artist residency, fellowship, lab or award) that creators from {geography} can apply to?
{negative_block}
Answer with a single word: YES or NO.

Page text:
{page_text}"""

NEGATIVE_BLOCK = """Answer NO if it describes any of these previously rejected opportunities: {titles}.
"""


EXTRACTION_PROMPT = """You are the curator of an opportunity board for creators from {geography}. Today is {today}.

Extract the single main opportunity described in the text below.

Rules:
- "title": the opportunity name in Title Case.
- "deadline": ISO date (YYYY-MM-DD). If no exact date is given, infer the most likely upcoming one.
- "type": one of "Grant", "Residency", "Festival", "Lab".
- "scope": "National" if organized in {geography} primarily for its residents, otherwise "International".
- "description": at most 3 sentences.
- "eligibility": array of short strings.
- "website": application or info URL, or "" if unknown.
- "instagramCaption": an optional social caption of at most 280 characters.
- If the opportunity explicitly excludes applicants from {geography}, return exactly {{"title": "{not_eligible}"}}.

Return your response as one valid JSON object with exactly these keys:
{{"title": "", "organizer": "", "deadline": "YYYY-MM-DD", "grantOrPrize": "", "type": "Grant|Residency|Festival|Lab", "description": "", "eligibility": [""], "website": "", "scope": "International|National", "instagramCaption": ""}}

Source URL: {source_url}

Text:
{page_text}"""


GROUNDED_SEARCH_STRATEGIES = {
    "Film": "film grants {geography} {year} application open documentary short film funding",
    "Visual Arts": "visual arts residencies {geography} {year} open call painters sculptors",
    "Music": "music production grants {geography} {year} independent musicians funding",
    "Literature": "writing fellowships {geography} {year} poetry fiction publishing grants",
    "Performing Arts": "theatre dance grants {geography} {year} performing arts funding open call",
}

SURPRISE_STRATEGIES = [
    "creative arts grants {geography} {year} application open",
    "film festivals {geography} {year} submission open",
    "artist residencies {geography} {year} open call",
]

GROUNDED_SCAN_PROMPT = """Context: Today is {today}.

Task: Act as the curator for creators from {geography}.
Search query: "{query}".
Find 3-5 high-quality, ACTIVE opportunities with deadlines AFTER {today}.

Classify the SCOPE:
- "National": organized by an entity in {geography} and primarily for its residents.
- "International": a global opportunity open to applicants from {geography}.

Output strictly a JSON array of objects with these keys:
"title", "organizer", "deadline" (YYYY-MM-DD), "grantOrPrize", "type" ("Festival" | "Grant" | "Lab" | "Residency"), "scope" ("National" | "International"), "description", "eligibility" (array of strings), "website", "aiConfidenceScore" (0-100), "aiReasoning"."""


def _today(today: date) -> str:
    return f"{today:%B} {today.day}, {today.year}"


def build_relevance_prompt(
    page_text: str,
    negative_titles: Sequence[str],
    geography: str,
    max_chars: int = 3000,
) -> str:
    negative_block = ""
    if negative_titles:
        titles = ", ".join(f'"{t}"' for t in negative_titles)
        negative_block = NEGATIVE_BLOCK.format(titles=titles)
    return RELEVANCE_PROMPT.format(
        geography=geography,
        negative_block=negative_block,
        page_text=page_text[:max_chars],
    )


def build_extraction_prompt(
    page_text: str,
    geography: str,
    today: date,
    source_url: str = "",
    max_chars: int = 12000,
) -> str:
    return EXTRACTION_PROMPT.format(
        geography=geography,
        today=_today(today),
        not_eligible=NOT_ELIGIBLE_TITLE,
        source_url=source_url or "unknown",
        page_text=page_text[:max_chars],
    )


def build_grounded_scan_prompt(query: str, geography: str, today: date) -> str:
    return GROUNDED_SCAN_PROMPT.format(query=query, geography=geography, today=_today(today))
