"""Slot claim/unclaim decisions.

Each slot is either open (empty name, no owner) or claimed (name and owner
set). A claim moves an open slot to claimed; an unclaim by the owner moves it
back. The functions here decide whether a request is allowed against a
snapshot of a lineup and, if so, return the roster that should be stored.
They do no I/O, never modify the snapshot, and take the current time as an
argument so that expiry is deterministic.

The order of checks is part of the contract: when a request breaks several
rules the caller always sees the same reason.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from constants import PLAYER_NAME_MAX_LENGTH, TEAMS
from errors import ErrorCode
from models import ClaimRequest, Lineup, Roster, UnclaimRequest


@dataclass(frozen=True)
class Accepted:
    roster: Roster


@dataclass(frozen=True)
class Rejected:
    reason: ErrorCode


Decision = Union[Accepted, Rejected]


def _is_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_unclaim_request(request: UnclaimRequest) -> Optional[Rejected]:
    """Shape check that needs no lineup; run before the lineup is even loaded."""
    if not request.participant_id or request.team not in TEAMS or not _is_index(request.index):
        return Rejected(ErrorCode.BAD_REQUEST)
    return None


def check_claim_request(request: ClaimRequest) -> Optional[Rejected]:
    rejected = check_unclaim_request(request)
    if rejected is None:
        name = (request.name or "").strip()
        if not name or len(name) > PLAYER_NAME_MAX_LENGTH:
            rejected = Rejected(ErrorCode.BAD_REQUEST)
    return rejected


def decide_claim(lineup: Lineup, now: datetime, request: ClaimRequest) -> Decision:
    rejected = check_claim_request(request)
    if rejected:
        return rejected
    name = request.name.strip()

    if lineup.is_expired(now):
        return Rejected(ErrorCode.LINK_EXPIRED)

    if request.index < 0 or request.index >= lineup.players_count:
        return Rejected(ErrorCode.OUT_OF_RANGE)

    # Checked before occupancy so one participant can never hold two slots
    if lineup.roster.owner_of(request.participant_id) is not None:
        return Rejected(ErrorCode.ALREADY_USED)

    target = lineup.roster.team(request.team)[request.index]
    if not target.is_open:
        return Rejected(ErrorCode.SLOT_TAKEN)

    roster = lineup.roster.model_copy(deep=True)
    slot = roster.team(request.team)[request.index]
    slot.name = name
    slot.claimed_by = request.participant_id
    return Accepted(roster)


def decide_unclaim(lineup: Lineup, now: datetime, request: UnclaimRequest) -> Decision:
    rejected = check_unclaim_request(request)
    if rejected:
        return rejected

    if lineup.is_expired(now):
        return Rejected(ErrorCode.LINK_EXPIRED)

    # Open slots and slots owned by someone else get the same answer
    slots = lineup.roster.team(request.team)
    if not 0 <= request.index < len(slots):
        return Rejected(ErrorCode.NOT_YOUR_SLOT)
    if slots[request.index].claimed_by != request.participant_id:
        return Rejected(ErrorCode.NOT_YOUR_SLOT)

    roster = lineup.roster.model_copy(deep=True)
    slot = roster.team(request.team)[request.index]
    slot.name = ""
    slot.claimed_by = None
    return Accepted(roster)
