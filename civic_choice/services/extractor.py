"""Recover a single JSON object from provider free text.

Providers are asked for bare JSON but routinely wrap it in prose or Markdown
code fences. A fenced block is tried first; failing that the text between the
first ``{`` and the last ``}`` is parsed. Truncated payloads, or prose that
contains unrelated braces around the object, are not repaired.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from ..errors import MalformedResponse


_FENCE_PATTERN = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)


def extract_json(text: str) -> dict[str, Any]:
    """Return the JSON object embedded in ``text`` or raise ``MalformedResponse``."""

    fenced = _parse_fenced_block(text or "")
    if fenced is not None:
        return fenced
    return _parse_brace_span(text or "")


def _parse_fenced_block(text: str) -> Optional[dict[str, Any]]:
    for match in _FENCE_PATTERN.finditer(text):
        body = match.group(1).strip()
        if not body.startswith("{"):
            continue
        try:
            value = json.loads(body)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None


def _parse_brace_span(text: str) -> dict[str, Any]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        raise MalformedResponse("Response does not contain a valid JSON object")

    try:
        value = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"Response JSON could not be parsed: {exc}") from exc
    if not isinstance(value, dict):
        raise MalformedResponse("Response JSON is not an object")
    return value
