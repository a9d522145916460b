"""Tests for cache key normalisation and JSON recovery from provider text."""

from __future__ import annotations

import pytest

from civic_choice.errors import MalformedResponse
from civic_choice.services.extractor import extract_json
from civic_choice.services.keys import normalize_location


@pytest.mark.parametrize(
    "raw",
    [" Austin,  TX ", "austin, tx", "AUSTIN,\tTX", "\n Austin, \n tx"],
)
def test_normalize_location_collapses_case_and_whitespace(raw):
    assert normalize_location(raw) == "austin, tx"


def test_normalize_location_is_total():
    assert normalize_location("") == ""
    assert normalize_location("   ") == ""


def test_extract_json_from_fenced_block_with_prose():
    assert extract_json('Sure! ```json\n{"a":1}\n```') == {"a": 1}


def test_extract_json_accepts_bare_object():
    assert extract_json('{"location": "Austin, TX", "races": []}') == {
        "location": "Austin, TX",
        "races": [],
    }


def test_extract_json_slices_object_out_of_commentary():
    text = 'Here is the ballot you asked for: {"date": "2026-11-03", "races": []} Let me know!'
    assert extract_json(text) == {"date": "2026-11-03", "races": []}


def test_extract_json_prefers_fenced_block_over_stray_braces():
    text = 'Note: results {may vary}.\n```json\n{"a": 1}\n```\nSee {sources}.'
    assert extract_json(text) == {"a": 1}


def test_extract_json_falls_back_when_fence_is_not_json():
    text = '```\nno data here\n```\nActual payload: {"a": 2}'
    assert extract_json(text) == {"a": 2}


def test_extract_json_without_braces_is_malformed():
    with pytest.raises(MalformedResponse):
        extract_json("I could not find any elections for that location.")


def test_extract_json_with_reversed_braces_is_malformed():
    with pytest.raises(MalformedResponse):
        extract_json("} nothing useful {")


def test_extract_json_reports_parse_errors():
    with pytest.raises(MalformedResponse) as excinfo:
        extract_json('Truncated: {"races": [ {"office": "Mayor" }')
    assert "could not be parsed" in str(excinfo.value)

    with pytest.raises(MalformedResponse):
        extract_json('{"a": 1} and also {"b": 2}')


def test_extract_json_handles_empty_text():
    with pytest.raises(MalformedResponse):
        extract_json("")
