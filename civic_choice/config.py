"""Centralised configuration for the CivicChoice data-acquisition layer."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- Research provider (Gemini) -------------------------------------------

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
PROVIDER_REQUEST_TIMEOUT = int(os.getenv("PROVIDER_REQUEST_TIMEOUT", "120"))

# --- Persistence -----------------------------------------------------------

STORE_BACKEND = os.getenv("STORE_BACKEND", "redis").lower()
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "civic-choice")
REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0"))
STORE_DIRECTORY = Path(os.getenv("STORE_DIRECTORY", "./civic_choice_db")).resolve()
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "86400"))  # 24 hours

BALLOT_NAMESPACE = os.getenv("BALLOT_NAMESPACE", "ballots")
CANDIDATE_NAMESPACE = os.getenv("CANDIDATE_NAMESPACE", "candidate-profiles")

# --- Concurrency -----------------------------------------------------------

COALESCE_IN_FLIGHT = _env_flag("COALESCE_IN_FLIGHT", True)

# --- Logging ---------------------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def cache_ttl_ms() -> int:
    """Return the configured cache lifetime in epoch milliseconds."""

    return CACHE_TTL_SECONDS * 1000


def namespaces() -> tuple[str, str]:
    return (BALLOT_NAMESPACE, CANDIDATE_NAMESPACE)
