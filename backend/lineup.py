"""Construction of new lineup documents from untrusted organizer input.

Nothing here rejects input: unusable values fall back to defaults so that
creating a lineup always succeeds.
"""

import math
from datetime import datetime
from typing import Any

from constants import (
    LINK_TTL, ROSTER_SIZE, TEAMS,
    PLAYERS_COUNT_DEFAULT, PLAYERS_COUNT_MIN, PLAYERS_COUNT_MAX,
    TEAM_A_NAME_DEFAULT, TEAM_B_NAME_DEFAULT, TEAM_A_COLOR_DEFAULT, TEAM_B_COLOR_DEFAULT,
)
from models import Lineup, LineupCreate, Roster, Slot


def clamp(n, low, high):
    return max(low, min(high, n))


def text_or_default(value: Any, default: str) -> str:
    if not isinstance(value, str) or not value.strip():
        return default
    return value.strip()


def normalize_players_count(value: Any) -> int:
    """Clamp playersCount into [7, 11]; anything that is not a finite number becomes 11."""
    if value is None or isinstance(value, bool):
        return PLAYERS_COUNT_DEFAULT
    if isinstance(value, int):
        return clamp(value, PLAYERS_COUNT_MIN, PLAYERS_COUNT_MAX)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return PLAYERS_COUNT_DEFAULT
    if not math.isfinite(number):
        return PLAYERS_COUNT_DEFAULT
    return clamp(int(number), PLAYERS_COUNT_MIN, PLAYERS_COUNT_MAX)


def make_slots() -> list[Slot]:
    return [Slot(number=i + 1) for i in range(ROSTER_SIZE)]


def empty_roster() -> Roster:
    return Roster(A=make_slots(), B=make_slots())


def normalize_roster(value: Any) -> Roster:
    """Coerce a caller-supplied roster into two 11-slot teams.

    A slot keeps its name only if it also has an owner, and each owner keeps
    only the first slot found for them.
    """
    if not isinstance(value, dict):
        return empty_roster()

    seen_owners = set()
    teams = {}
    for team in TEAMS:
        raw_slots = value.get(team)
        if not isinstance(raw_slots, list):
            raw_slots = []

        slots = []
        for i in range(ROSTER_SIZE):
            raw = raw_slots[i] if i < len(raw_slots) else None
            slot = Slot(number=i + 1)
            if isinstance(raw, dict):
                name = raw.get("name")
                owner = raw.get("claimedBy", raw.get("claimed_by"))
                name = name.strip() if isinstance(name, str) else ""
                if name and isinstance(owner, str) and owner and owner not in seen_owners:
                    seen_owners.add(owner)
                    slot.name = name
                    slot.claimed_by = owner
            slots.append(slot)
        teams[team] = slots

    return Roster(**teams)


def normalize_positions(value: Any) -> Any:
    if value is None:
        return {team: [] for team in TEAMS}
    return value


def normalize_create(payload: LineupCreate, now: datetime) -> Lineup:
    """Build a fresh lineup that expires exactly LINK_TTL after `now`."""
    return Lineup(
        team_a_name=text_or_default(payload.team_a_name, TEAM_A_NAME_DEFAULT),
        team_b_name=text_or_default(payload.team_b_name, TEAM_B_NAME_DEFAULT),
        team_a_color=text_or_default(payload.team_a_color, TEAM_A_COLOR_DEFAULT),
        team_b_color=text_or_default(payload.team_b_color, TEAM_B_COLOR_DEFAULT),
        players_count=normalize_players_count(payload.players_count),
        positions=normalize_positions(payload.positions),
        roster=normalize_roster(payload.players),
        created_at=now,
        expires_at=now + LINK_TTL,
        version=0,
    )
