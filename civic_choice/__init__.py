"""CivicChoice package: cached ballot and candidate research acquisition."""

from .api import clear_cache, fetch_ballot, fetch_candidate_profile
from .errors import (
    CivicChoiceError,
    MalformedResponse,
    ProviderUnavailable,
    RetrievalFailed,
    StoreWriteFailed,
)
from .models import Ballot, Candidate, CandidateProfile, Race

__all__ = [
    "Ballot",
    "Candidate",
    "CandidateProfile",
    "CivicChoiceError",
    "MalformedResponse",
    "ProviderUnavailable",
    "Race",
    "RetrievalFailed",
    "StoreWriteFailed",
    "clear_cache",
    "fetch_ballot",
    "fetch_candidate_profile",
]
