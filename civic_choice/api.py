"""Caller-facing entry points backed by lazily built default services."""

from __future__ import annotations

import threading
from typing import Optional

from . import config
from .models import Ballot, Candidate, CandidateProfile, Race
from .services import (
    BallotService,
    CandidateService,
    GeminiResearchProvider,
    InFlightRequests,
    PersistentStore,
    build_store,
)
from .services.redis_client import reset_client

_lock = threading.Lock()
_store: Optional[PersistentStore] = None
_ballots: Optional[BallotService] = None
_candidates: Optional[CandidateService] = None


def _services() -> tuple[PersistentStore, BallotService, CandidateService]:
    global _store, _ballots, _candidates
    if _store is None or _ballots is None or _candidates is None:
        with _lock:
            if _store is None or _ballots is None or _candidates is None:
                _store = build_store()
                provider = GeminiResearchProvider()
                in_flight = InFlightRequests() if config.COALESCE_IN_FLIGHT else None
                _ballots = BallotService(_store, provider, in_flight=in_flight)
                _candidates = CandidateService(_store, provider, in_flight=in_flight)
    return _store, _ballots, _candidates


def fetch_ballot(location: str, force_refresh: bool = False) -> Ballot:
    _, ballots, _ = _services()
    return ballots.fetch_ballot(location, force_refresh)


def fetch_candidate_profile(candidate: Candidate, race: Race, location: str) -> CandidateProfile:
    _, _, candidates = _services()
    return candidates.fetch_candidate_profile(candidate, race, location)


def clear_cache(namespace: Optional[str] = None) -> None:
    """Drop one namespace, or every namespace when none is given."""

    store, _, _ = _services()
    for name in (namespace,) if namespace else config.namespaces():
        store.clear(name)


def reset() -> None:
    """Forget the default services so the next call rebuilds them from config."""

    global _store, _ballots, _candidates
    with _lock:
        _store = _ballots = _candidates = None
    reset_client()
