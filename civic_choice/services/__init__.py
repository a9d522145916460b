"""Services powering the CivicChoice cache-aside layer."""

from .ballot_service import BallotService, normalize_party
from .candidate_service import CandidateService
from .extractor import extract_json
from .keys import normalize_location
from .research_provider import GeminiResearchProvider, ProviderResponse, ResearchProvider
from .singleflight import InFlightRequests
from .store import JsonFileStore, PersistentStore, RedisStore, WriteResult, build_store

__all__ = [
    "BallotService",
    "CandidateService",
    "GeminiResearchProvider",
    "InFlightRequests",
    "JsonFileStore",
    "PersistentStore",
    "ProviderResponse",
    "RedisStore",
    "ResearchProvider",
    "WriteResult",
    "build_store",
    "extract_json",
    "normalize_location",
    "normalize_party",
]
