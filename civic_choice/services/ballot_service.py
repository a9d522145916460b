"""Cache-aside ballot lookups."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from .. import config
from ..errors import MalformedResponse, ProviderUnavailable, RetrievalFailed, StoreWriteFailed
from ..metrics import metrics
from ..models import Ballot
from .extractor import extract_json
from .keys import normalize_location
from .research_provider import ResearchProvider
from .singleflight import InFlightRequests
from .store import PersistentStore


log = logging.getLogger(__name__)

WriteFailureHandler = Callable[[str, StoreWriteFailed], None]


def normalize_party(party: str) -> str:
    """Blank parties become "Nonpartisan"; otherwise only the first letter is upper-cased."""

    if not party or not party.strip():
        return "Nonpartisan"
    return party[0].upper() + party[1:]


class BallotService:
    """Serves ballots from the store, asking the provider only on a miss."""

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
        self._namespace = namespace or config.BALLOT_NAMESPACE
        self._on_write_failure = on_write_failure

    def fetch_ballot(self, location: str, force_refresh: bool = False) -> Ballot:
        key = normalize_location(location)

        if not force_refresh:
            cached = self.cached_ballot(location)
            if cached is not None:
                log.info("Loaded ballot for %s from cache", location)
                metrics.add_cache_hit()
                return cached
            metrics.add_cache_miss()

        log.info("Fetching fresh ballot data for %s (refresh=%s)", location, force_refresh)
        if self._in_flight is None:
            return self._refresh(location, key)
        return self._in_flight.run(
            f"ballot:{key}", lambda: self._load_or_refresh(location, key, force_refresh)
        )

    def _load_or_refresh(self, location: str, key: str, force_refresh: bool) -> Ballot:
        # Another flight may have stored the ballot since the first read.
        if not force_refresh:
            cached = self.cached_ballot(location)
            if cached is not None:
                return cached
        return self._refresh(location, key)

    def cached_ballot(self, location: str) -> Optional[Ballot]:
        """Return the fresh cached ballot for ``location`` without contacting the provider."""

        record = self._store.get(self._namespace, normalize_location(location))
        if record is None:
            return None
        try:
            return Ballot.from_dict(record)
        except MalformedResponse as exc:
            log.warning("Ignoring unreadable cached ballot for %s: %s", location, exc)
            return None

    def _refresh(self, location: str, key: str) -> Ballot:
        try:
            text = self._provider.find_ballot(location)
            ballot = self._normalize(Ballot.from_dict(extract_json(text), default_location=location.strip()))
        except (ProviderUnavailable, MalformedResponse) as exc:
            log.error("Ballot fetch error for %s: %s", location, exc)
            raise RetrievalFailed("Failed to fetch ballot data. Please try again.") from exc

        outcome = self._store.set(self._namespace, key, ballot.to_dict())
        if not outcome.ok:
            metrics.add_store_write_failure()
            if self._on_write_failure is not None:
                self._on_write_failure(key, outcome.error)
        return replace(ballot, last_updated=outcome.last_updated)

    @staticmethod
    def _normalize(ballot: Ballot) -> Ballot:
        races = []
        for race_index, race in enumerate(ballot.races):
            race_id = race.id or f"race-{race_index}"
            candidates = tuple(
                replace(
                    candidate,
                    id=candidate.id or f"{race_id}-cand-{candidate_index}",
                    party=normalize_party(candidate.party),
                )
                for candidate_index, candidate in enumerate(race.candidates)
            )
            races.append(replace(race, id=race_id, candidates=candidates))
        return replace(ballot, races=tuple(races))
