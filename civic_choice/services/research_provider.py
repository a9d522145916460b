"""Research provider adapters for ballot lookups and candidate research."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import requests

from .. import config
from ..errors import ProviderUnavailable
from ..metrics import metrics
from ..models import Source, parse_sources


log = logging.getLogger(__name__)

_COORDINATES = re.compile(r"^\s*-?\d{1,3}(?:\.\d+)?\s*,\s*-?\d{1,3}(?:\.\d+)?\s*$")

BALLOT_INSTRUCTION = """You are a neutral election database assistant.
Find the next upcoming official government election (local, state, or federal) for the provided location.
If no election is scheduled in the next 6 months, find the most recent past election results instead.

CRITICAL INSTRUCTIONS:
1. You must return the result as a valid JSON string matching the exact structure below.
2. Output ONLY the JSON object. Do not add any conversational text or markdown formatting.
3. INCLUDE ALL CANDIDATES: list every candidate running, including Independents, Third-Party (Libertarian, Green, etc.), and Unaffiliated candidates. Do not limit results to just Democrats and Republicans.

Expected JSON Structure:
{
  "location": "string (Clean Format, e.g., Austin, TX)",
  "date": "string (YYYY-MM-DD)",
  "races": [
    {
      "id": "string",
      "office": "string",
      "type": "candidate" | "proposition",
      "description": "string (optional)",
      "candidates": [
        {"id": "string", "name": "string", "party": "string", "incumbent": boolean}
      ]
    }
  ]
}

Mark incumbent candidates if known.
Do not invent candidates. Use real data found via search."""

CANDIDATE_INSTRUCTION = """You are an unbiased political researcher.
Research the candidate provided.
Provide a neutral summary of their platform, party affiliation, key issues, and professional background.
Do not use emotive language. Stick to facts found in search results.

CRITICAL: Return valid JSON strictly matching this structure.
Output ONLY the JSON object. Do not include "Here is the JSON" or any other conversational text.

Expected JSON Structure:
{
  "summary": "A 2-3 sentence neutral bio.",
  "party": "string",
  "platform": ["List of platform pillars"],
  "experience": ["Past job titles or political roles"],
  "education": "string",
  "keyIssues": [
    {"topic": "string", "stance": "string"}
  ]
}"""


@dataclass(frozen=True)
class ProviderResponse:
    """Raw provider text plus the grounding citations attached to it."""

    text: str
    citations: Tuple[Source, ...] = ()


class ResearchProvider:
    """Interface for the external research service."""

    def find_ballot(self, location_query: str) -> str:
        raise NotImplementedError

    def research_candidate(self, name: str, office: str, location: str) -> ProviderResponse:
        raise NotImplementedError


class GeminiResearchProvider(ResearchProvider):
    """Calls the Gemini ``generateContent`` REST API with Google Search grounding."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self._model = model or config.GEMINI_MODEL
        self._endpoint = f"{config.GEMINI_API_BASE.rstrip('/')}/models/{self._model}:generateContent"
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Public helpers

    def find_ballot(self, location_query: str) -> str:
        if _COORDINATES.match(location_query or ""):
            target = f"the location at latitude/longitude coordinates {location_query.strip()}"
        else:
            target = location_query.strip()
        prompt = (
            f"Find the complete official ballot for: {target}. "
            "Ensure you find ALL candidates, including Independents."
        )
        text, _ = self._generate(prompt, BALLOT_INSTRUCTION)
        return text

    def research_candidate(self, name: str, office: str, location: str) -> ProviderResponse:
        prompt = f"Research candidate {name} running for {office} in {location}."
        text, citations = self._generate(prompt, CANDIDATE_INSTRUCTION)
        return ProviderResponse(text=text, citations=citations)

    # ------------------------------------------------------------------

    def _generate(self, prompt: str, instruction: str) -> Tuple[str, Tuple[Source, ...]]:
        if not self._api_key:
            raise ProviderUnavailable("Research provider API key is not configured.")

        payload = {
            "systemInstruction": {"parts": [{"text": instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        }
        started = time.perf_counter()
        try:
            response = self._session.post(
                self._endpoint,
                headers={"Content-Type": "application/json", "x-goog-api-key": self._api_key},
                json=payload,
                timeout=config.PROVIDER_REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            detail = ""
            if getattr(exc, "response", None) is not None:
                detail = f" - Response: {exc.response.text[:500]}"
            log.warning("Research provider request failed: %s%s", exc, detail)
            raise ProviderUnavailable(f"Research provider request failed: {exc}{detail}") from exc
        except ValueError as exc:
            raise ProviderUnavailable("Research provider returned a non-JSON body.") from exc
        finally:
            metrics.add_provider_call(time.perf_counter() - started)

        text = self._extract_text(data)
        if not text:
            raise ProviderUnavailable("Research provider response did not include content.")
        return text, self._extract_citations(data)

    def _first_candidate(self, data: Any) -> dict:
        if not isinstance(data, dict):
            return {}
        candidates = data.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            return candidates[0]
        return {}

    def _extract_text(self, data: Any) -> str:
        content = self._first_candidate(data).get("content")
        if not isinstance(content, dict):
            return ""
        texts: List[str] = []
        for part in content.get("parts") or []:
            if isinstance(part, dict) and isinstance(part.get("text"), str):
                texts.append(part["text"])
        return "".join(texts).strip()

    def _extract_citations(self, data: Any) -> Tuple[Source, ...]:
        grounding = self._first_candidate(data).get("groundingMetadata")
        if not isinstance(grounding, dict):
            return ()
        chunks = grounding.get("groundingChunks")
        if not isinstance(chunks, list):
            return ()
        return parse_sources(
            chunk.get("web") for chunk in chunks if isinstance(chunk, dict)
        )
