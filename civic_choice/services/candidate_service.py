"""Cache-aside candidate research."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .. import config
from ..errors import MalformedResponse, ProviderUnavailable, RetrievalFailed
from ..metrics import metrics
from ..models import Candidate, CandidateProfile, Race
from .ballot_service import WriteFailureHandler, normalize_party
from .extractor import extract_json
from .research_provider import ResearchProvider
from .singleflight import InFlightRequests
from .store import PersistentStore


log = logging.getLogger(__name__)

UNRESOLVED_PARTIES = {"", "unknown"}


class CandidateService:
    """Serves candidate profiles keyed by the candidate's id.

    Profiles have no forced refresh; they are re-researched once the cached
    copy outlives the store TTL.
    """

    def __init__(
        self,
        store: PersistentStore,
        provider: ResearchProvider,
        *,
        in_flight: Optional[InFlightRequests] = None,
        namespace: Optional[str] = None,
        on_write_failure: Optional[WriteFailureHandler] = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._in_flight = in_flight
        self._namespace = namespace or config.CANDIDATE_NAMESPACE
        self._on_write_failure = on_write_failure

    def fetch_candidate_profile(self, candidate: Candidate, race: Race, location: str) -> CandidateProfile:
        cached = self.cached_profile(candidate.id)
        if cached is not None:
            log.info("Loaded profile for %s from cache", candidate.name)
            metrics.add_cache_hit()
            return cached
        metrics.add_cache_miss()

        log.info("Researching %s for %s", candidate.name, race.office)
        if self._in_flight is None:
            return self._research(candidate, race, location)
        return self._in_flight.run(
            f"profile:{candidate.id}",
            lambda: self.cached_profile(candidate.id) or self._research(candidate, race, location),
        )

    def cached_profile(self, candidate_id: str) -> Optional[CandidateProfile]:
        record = self._store.get(self._namespace, candidate_id)
        if record is None:
            return None
        try:
            return CandidateProfile.from_dict(record)
        except MalformedResponse as exc:
            log.warning("Ignoring unreadable cached profile %s: %s", candidate_id, exc)
            return None

    def _research(self, candidate: Candidate, race: Race, location: str) -> CandidateProfile:
        try:
            response = self._provider.research_candidate(candidate.name, race.office, location)
            profile = CandidateProfile.from_dict(
                extract_json(response.text),
                id=candidate.id,
                name=candidate.name,
                office=race.office,
                sources=response.citations,
            )
        except (ProviderUnavailable, MalformedResponse) as exc:
            log.error("Candidate research error for %s: %s", candidate.name, exc)
            raise RetrievalFailed("Unable to complete research on this candidate.") from exc

        if profile.party.lower() in UNRESOLVED_PARTIES:
            profile = replace(profile, party=normalize_party(candidate.party))

        outcome = self._store.set(self._namespace, candidate.id, profile.to_dict())
        if not outcome.ok:
            metrics.add_store_write_failure()
            if self._on_write_failure is not None:
                self._on_write_failure(candidate.id, outcome.error)
        return replace(profile, last_updated=outcome.last_updated)
