"""
Resource Normalizer

Different endpoints of the GameLayer API wrap conceptually similar lists in
different envelopes. This module unwraps them with a fixed, ordered chain of
matchers:

1. BARE       - the payload is the list itself
2. DATA       - ``{"data": [...]}``
3. NAMED      - ``{"<resource>": [...]}``
4. COMPLETED  - ``{"<resource>": {"completed": [...]}}``
5. EMPTY      - anything else; treated as "no data", never as an error

The first matcher that accepts the payload wins.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple


class EnvelopeKind(Enum):
    BARE = "bare"
    DATA = "data"
    NAMED = "named"
    COMPLETED = "completed"
    EMPTY = "empty"


@dataclass
class Envelope:
    """
    Result of unwrapping a payload.

    Attributes:
        kind: Which matcher accepted the payload
        items: The contained list (the same list object, unchanged)
    """
    kind: EnvelopeKind
    items: List[Any] = field(default_factory=list)


Matcher = Callable[[Any, str], Optional[List[Any]]]


def _match_bare(payload: Any, name: str) -> Optional[List[Any]]:
    return payload if isinstance(payload, list) else None


def _match_data(payload: Any, name: str) -> Optional[List[Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return None


def _match_named(payload: Any, name: str) -> Optional[List[Any]]:
    if isinstance(payload, dict) and isinstance(payload.get(name), list):
        return payload[name]
    return None


def _match_completed(payload: Any, name: str) -> Optional[List[Any]]:
    if not isinstance(payload, dict):
        return None
    nested = payload.get(name)
    if isinstance(nested, dict) and isinstance(nested.get("completed"), list):
        return nested["completed"]
    return None


MATCHERS: Tuple[Tuple[EnvelopeKind, Matcher], ...] = (
    (EnvelopeKind.BARE, _match_bare),
    (EnvelopeKind.DATA, _match_data),
    (EnvelopeKind.NAMED, _match_named),
    (EnvelopeKind.COMPLETED, _match_completed),
)


def unwrap(payload: Any, name: str) -> Envelope:
    """Run the matcher chain over `payload` for resource `name`."""
    for kind, matcher in MATCHERS:
        items = matcher(payload, name)
        if items is not None:
            return Envelope(kind=kind, items=items)
    return Envelope(kind=EnvelopeKind.EMPTY)


def normalize(payload: Any, name: str) -> List[Any]:
    """Contained list for resource `name`, or [] when no envelope matches."""
    return unwrap(payload, name).items


def records(items: List[Any]) -> List[dict]:
    """Keep only the dict records of an unwrapped list."""
    return [item for item in items if isinstance(item, dict)]


# ─── One entry point per resource kind ────────────────

def normalize_players(payload: Any) -> List[Any]:
    return normalize(payload, "players")


def normalize_teams(payload: Any) -> List[Any]:
    return normalize(payload, "teams")


def normalize_events(payload: Any) -> List[Any]:
    return normalize(payload, "events")


def normalize_missions(payload: Any) -> List[Any]:
    return normalize(payload, "missions")


def normalize_achievements(payload: Any) -> List[Any]:
    return normalize(payload, "achievements")


def normalize_prizes(payload: Any) -> List[Any]:
    return normalize(payload, "prizes")


def normalize_streaks(payload: Any) -> List[Any]:
    return normalize(payload, "streaks")


def normalize_leaderboard(payload: Any) -> List[Any]:
    return normalize(payload, "leaderboard")


def normalize_quizzes(payload: Any) -> List[Any]:
    return normalize(payload, "quizzes")
