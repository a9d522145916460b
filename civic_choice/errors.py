"""Exception hierarchy shared by the CivicChoice services."""

from __future__ import annotations


class CivicChoiceError(RuntimeError):
    """Base class for every error raised by the data-acquisition layer."""


class ProviderUnavailable(CivicChoiceError):
    """Raised when the research provider cannot satisfy a request."""


class MalformedResponse(CivicChoiceError):
    """Raised when provider text cannot be turned into a valid record."""


class StoreWriteFailed(CivicChoiceError):
    """Persistence failure: carried in a ``WriteResult`` by ``set``, raised by ``clear``."""


class RetrievalFailed(CivicChoiceError):
    """User-facing failure wrapping a provider or parsing error."""
