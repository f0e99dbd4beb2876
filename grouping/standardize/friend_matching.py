"""
Friend request parsing and roster matching.

Parents type friend names by hand, so matching is tolerant: names are
normalized, then tried against the roster from strictest to loosest rule.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

logger = logging.getLogger(__name__)

_NON_LETTERS = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[,;\n]+")


class RosterEntry(NamedTuple):
    """The minimal identity needed to match a friend request."""

    athlete_id: str
    first_name: str
    last_name: str


def normalize_friend_name(name: str) -> str:
    """Lower-case, drop everything except letters and spaces, collapse whitespace."""
    cleaned = _NON_LETTERS.sub("", name.lower().strip())
    return _WHITESPACE.sub(" ", cleaned).strip()


def parse_friend_requests(raw: str | list[str] | None) -> list[str]:
    """Split and normalize raw friend request input.

    Accepts comma, semicolon or newline separated text, or a pre-split list.
    Empty entries are dropped.
    """
    if not raw:
        return []

    names = raw if isinstance(raw, list) else _SEPARATORS.split(raw)
    normalized = (normalize_friend_name(name) for name in names)
    return [name for name in normalized if name]


@dataclass
class _IndexedCamper:
    athlete_id: str
    first: str
    last: str
    full: str


@dataclass
class MatchResult:
    """Matched athlete ids (deduplicated, request order) and the names that found nobody."""

    matched_ids: list[str] = field(default_factory=list)
    unmatched_names: list[str] = field(default_factory=list)


class FriendMatcher:
    """Matches normalized friend names against a camp roster.

    The roster is normalized once up front; every camper in a camp reuses
    the same matcher.

    Matching priority for each requested name (first hit wins):
        1. Exact normalized full-name match
        2. First token + last token match
        3. First-name-only match, when the request is a single token and exactly
           one camper has that first name
        4. Substring containment of full names in either direction
    """

    def __init__(self, roster: Iterable[RosterEntry]):
        self._campers: list[_IndexedCamper] = []
        for entry in roster:
            first = normalize_friend_name(entry.first_name)
            last = normalize_friend_name(entry.last_name)
            full = normalize_friend_name(f"{entry.first_name} {entry.last_name}")
            self._campers.append(_IndexedCamper(entry.athlete_id, first, last, full))

    def find_match(self, friend_name: str, exclude_id: str | None = None) -> str | None:
        """Find the athlete id best matching one requested name.

        Args:
            friend_name: Requested name (normalized again here, so raw text is fine)
            exclude_id: The requesting camper, who can never match themselves

        Returns:
            Matched athlete id, or None
        """
        wanted = normalize_friend_name(friend_name)
        if not wanted:
            return None

        candidates = [c for c in self._campers if c.athlete_id != exclude_id]

        for camper in candidates:
            if camper.full == wanted:
                return camper.athlete_id

        parts = wanted.split(" ")
        if len(parts) >= 2:
            first, last = parts[0], parts[-1]
            for camper in candidates:
                if camper.first == first and camper.last == last:
                    return camper.athlete_id

        if len(parts) == 1:
            same_first = [c for c in candidates if c.first == wanted]
            if len(same_first) == 1:
                return same_first[0].athlete_id

        for camper in candidates:
            if camper.full and (wanted in camper.full or camper.full in wanted):
                return camper.athlete_id

        return None

    def match(self, friend_names: list[str], exclude_id: str | None = None) -> MatchResult:
        """Match every requested name for one camper."""
        result = MatchResult()
        for name in friend_names:
            athlete_id = self.find_match(name, exclude_id=exclude_id)
            if athlete_id is None:
                result.unmatched_names.append(name)
                logger.debug(f"No roster match for friend request '{name}' (requested by {exclude_id})")
            elif athlete_id not in result.matched_ids:
                result.matched_ids.append(athlete_id)
        return result


def match_friends_to_campers(
    friend_names: list[str],
    roster: Iterable[RosterEntry],
    exclude_id: str | None = None,
) -> list[str]:
    """One-shot convenience wrapper around FriendMatcher."""
    return FriendMatcher(roster).match(friend_names, exclude_id=exclude_id).matched_ids
