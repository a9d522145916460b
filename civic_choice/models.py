"""Immutable ballot and candidate records plus their JSON record shape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .errors import MalformedResponse


RACE_TYPES = ("candidate", "proposition")


@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    party: str = ""
    incumbent: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Candidate":
        data = _require_object(data, "candidate")
        name = _text(data.get("name"), "candidate name")
        if not name:
            raise MalformedResponse("Candidate entry is missing a name")
        return cls(
            id=_text(data.get("id"), "candidate id"),
            name=name,
            party=_text(data.get("party"), "candidate party"),
            incumbent=_flag(data.get("incumbent")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "party": self.party,
            "incumbent": self.incumbent,
        }


@dataclass(frozen=True)
class Race:
    id: str
    office: str
    type: str = "candidate"
    description: Optional[str] = None
    candidates: Tuple[Candidate, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "Race":
        data = _require_object(data, "race")
        office = _text(data.get("office"), "race office")
        if not office:
            raise MalformedResponse("Race entry is missing an office")
        race_type = _text(data.get("type"), "race type").lower() or "candidate"
        if race_type not in RACE_TYPES:
            raise MalformedResponse(f"Unsupported race type: {race_type!r}")
        description = data.get("description")
        if description is not None:
            description = _text(description, "race description") or None
        return cls(
            id=_text(data.get("id"), "race id"),
            office=office,
            type=race_type,
            description=description,
            candidates=tuple(
                Candidate.from_dict(item) for item in _list(data.get("candidates"), "candidates")
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "office": self.office,
            "type": self.type,
            "candidates": [candidate.to_dict() for candidate in self.candidates],
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class Ballot:
    location: str
    date: str
    races: Tuple[Race, ...] = ()
    last_updated: int = 0

    @classmethod
    def from_dict(cls, data: Any, *, default_location: str = "") -> "Ballot":
        data = _require_object(data, "ballot")
        if "races" not in data:
            raise MalformedResponse("Ballot payload does not list any races")
        return cls(
            location=_text(data.get("location"), "ballot location") or default_location,
            date=_text(data.get("date"), "ballot date"),
            races=tuple(Race.from_dict(item) for item in _list(data.get("races"), "races")),
            last_updated=_timestamp(data.get("lastUpdated")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "date": self.date,
            "races": [race.to_dict() for race in self.races],
            "lastUpdated": self.last_updated,
        }

    def find_race(self, race_id: str) -> Optional[Race]:
        for race in self.races:
            if race.id == race_id:
                return race
        return None


@dataclass(frozen=True)
class KeyIssue:
    topic: str
    stance: str

    def to_dict(self) -> dict[str, str]:
        return {"topic": self.topic, "stance": self.stance}


@dataclass(frozen=True)
class Source:
    title: str
    uri: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    name: str
    office: str
    party: str
    summary: str
    platform: Tuple[str, ...] = ()
    experience: Tuple[str, ...] = ()
    education: str = ""
    key_issues: Tuple[KeyIssue, ...] = ()
    sources: Tuple[Source, ...] = ()
    last_updated: int = 0

    @classmethod
    def from_dict(cls, data: Any, **overrides: Any) -> "CandidateProfile":
        """Build a profile from a record or provider payload.

        Keyword overrides (``id``, ``name``, ``office``...) take precedence
        over whatever the payload carries.
        """

        data = _require_object(data, "candidate profile")
        summary = data.get("summary")
        if not isinstance(summary, str):
            raise MalformedResponse("Candidate profile is missing a summary")
        values: dict[str, Any] = {
            "id": _text(data.get("id"), "profile id"),
            "name": _text(data.get("name"), "profile name"),
            "office": _text(data.get("office"), "profile office"),
            "party": _text(data.get("party"), "profile party"),
            "summary": summary.strip(),
            "platform": _strings(data.get("platform"), "platform"),
            "experience": _strings(data.get("experience"), "experience"),
            "education": _text(data.get("education"), "education"),
            "key_issues": tuple(_key_issue(item) for item in _list(data.get("keyIssues"), "keyIssues")),
            "sources": parse_sources(_list(data.get("sources"), "sources")),
            "last_updated": _timestamp(data.get("lastUpdated")),
        }
        values.update(overrides)
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "office": self.office,
            "party": self.party,
            "summary": self.summary,
            "platform": list(self.platform),
            "experience": list(self.experience),
            "education": self.education,
            "keyIssues": [issue.to_dict() for issue in self.key_issues],
            "sources": [source.to_dict() for source in self.sources],
            "lastUpdated": self.last_updated,
        }


def parse_sources(items: Iterable[Any]) -> Tuple[Source, ...]:
    sources = []
    for item in items:
        if not isinstance(item, dict):
            continue
        uri = item.get("uri")
        if not isinstance(uri, str) or not uri:
            continue
        title = item.get("title")
        sources.append(Source(title=title if isinstance(title, str) and title else "Source", uri=uri))
    return tuple(sources)


# ----------------------------------------------------------------------
# Field coercion helpers


def _require_object(data: Any, label: str) -> dict:
    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected a JSON object for {label}, got {type(data).__name__}")
    return data


def _text(value: Any, label: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MalformedResponse(f"Expected text for {label}, got {type(value).__name__}")
    return str(value).strip()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def _list(value: Any, label: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponse(f"Expected a list for {label}, got {type(value).__name__}")
    return value


def _strings(value: Any, label: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    items = (_text(item, label) for item in _list(value, label))
    return tuple(item for item in items if item)


def _key_issue(item: Any) -> KeyIssue:
    item = _require_object(item, "key issue")
    return KeyIssue(
        topic=_text(item.get("topic"), "issue topic"),
        stance=_text(item.get("stance"), "issue stance"),
    )


def _timestamp(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0
