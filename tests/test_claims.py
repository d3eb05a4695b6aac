"""Tests for the claim/unclaim decision rules.

Coverage:
- Request shape checks
- Expiry cutoff
- Bounds against playersCount
- One slot per participant, occupied slots, ownership on release
- Check ordering when several rules are broken at once
"""

from datetime import timedelta

import pytest

from claims import Accepted, Rejected, decide_claim, decide_unclaim
from conftest import START
from errors import ErrorCode
from lineup import normalize_create
from models import ClaimRequest, LineupCreate, UnclaimRequest


def make_lineup(players_count=11):
    return normalize_create(LineupCreate(playersCount=players_count), START)


def claim(participant_id="p1", team="A", index=0, name="Ali"):
    return ClaimRequest(participantId=participant_id, team=team, index=index, name=name)


def unclaim(participant_id="p1", team="A", index=0):
    return UnclaimRequest(participantId=participant_id, team=team, index=index)


def accept(lineup, decision):
    """Apply an accepted decision to the snapshot, as the store would."""
    assert isinstance(decision, Accepted)
    return lineup.model_copy(update={"roster": decision.roster})


class TestClaim:

    def test_open_slot_is_claimed(self):
        lineup = make_lineup()

        decision = decide_claim(lineup, START, claim(name="  Ali  "))

        slot = decision.roster.team("A")[0]
        assert slot.name == "Ali"
        assert slot.claimed_by == "p1"

    def test_snapshot_is_not_modified(self):
        lineup = make_lineup()

        decide_claim(lineup, START, claim())

        assert lineup.roster.team("A")[0].is_open

    def test_returns_both_teams(self):
        decision = decide_claim(make_lineup(), START, claim(team="B", index=4))

        assert len(decision.roster.team("A")) == 11
        assert decision.roster.team("B")[4].claimed_by == "p1"

    @pytest.mark.parametrize("request_kwargs", [
        {"participant_id": None},
        {"participant_id": ""},
        {"team": None},
        {"team": "C"},
        {"team": "a"},
        {"index": None},
        {"name": None},
        {"name": ""},
        {"name": "   "},
    ])
    def test_bad_request(self, request_kwargs):
        decision = decide_claim(make_lineup(), START, claim(**request_kwargs))

        assert decision == Rejected(ErrorCode.BAD_REQUEST)

    def test_name_length_is_checked_after_trimming(self):
        decision = decide_claim(make_lineup(), START, claim(name="  " + "x" * 38 + "   "))

        assert decision.roster.team("A")[0].name == "x" * 38

    def test_name_too_long(self):
        decision = decide_claim(make_lineup(), START, claim(name="x" * 41))

        assert decision == Rejected(ErrorCode.BAD_REQUEST)

    def test_bool_index_is_bad_request(self):
        request = ClaimRequest.model_construct(participantId="p1", team="A", index=True, name="Ali")

        assert decide_claim(make_lineup(), START, request) == Rejected(ErrorCode.BAD_REQUEST)

    def test_expired(self):
        lineup = make_lineup()
        later = START + timedelta(hours=48, seconds=1)

        assert decide_claim(lineup, later, claim()) == Rejected(ErrorCode.LINK_EXPIRED)

    def test_still_open_at_exact_expiry(self):
        lineup = make_lineup()

        assert isinstance(decide_claim(lineup, lineup.expires_at, claim()), Accepted)

    def test_scenario_a_bounds_follow_players_count(self):
        lineup = make_lineup(players_count=9)

        assert isinstance(decide_claim(lineup, START, claim(index=8)), Accepted)
        assert decide_claim(lineup, START, claim(index=9)) == Rejected(ErrorCode.OUT_OF_RANGE)

    @pytest.mark.parametrize("index", [-1, 11, 500])
    def test_out_of_range(self, index):
        assert decide_claim(make_lineup(), START, claim(index=index)) == Rejected(ErrorCode.OUT_OF_RANGE)

    def test_scenario_b_second_slot_is_already_used(self):
        lineup = accept(make_lineup(), decide_claim(make_lineup(), START, claim(index=2)))

        decision = decide_claim(lineup, START, claim(team="B", index=5, name="Ali2"))

        assert decision == Rejected(ErrorCode.ALREADY_USED)
        assert lineup.roster.team("B")[5].is_open

    def test_scenario_c_slot_taken(self):
        lineup = make_lineup()
        lineup = accept(lineup, decide_claim(lineup, START, claim("p1")))

        decision = decide_claim(lineup, START, claim("q1", name="Sam"))

        assert decision == Rejected(ErrorCode.SLOT_TAKEN)

    def test_already_used_wins_over_slot_taken(self):
        lineup = make_lineup()
        lineup = accept(lineup, decide_claim(lineup, START, claim("p1", index=0)))
        lineup = accept(lineup, decide_claim(lineup, START, claim("q1", index=1, name="Sam")))

        decision = decide_claim(lineup, START, claim("p1", index=1))

        assert decision == Rejected(ErrorCode.ALREADY_USED)

    def test_owner_in_unaddressable_slot_still_counts(self):
        players = {"A": [{}] * 10 + [{"name": "Ali", "claimedBy": "p1"}], "B": []}
        lineup = normalize_create(LineupCreate(playersCount=7, players=players), START)

        assert decide_claim(lineup, START, claim("p1", team="B", index=0)) == Rejected(ErrorCode.ALREADY_USED)

    def test_expired_wins_over_out_of_range(self):
        later = START + timedelta(days=3)

        assert decide_claim(make_lineup(), later, claim(index=50)) == Rejected(ErrorCode.LINK_EXPIRED)

    def test_bad_request_wins_over_expired(self):
        later = START + timedelta(days=3)

        assert decide_claim(make_lineup(), later, claim(team="Z")) == Rejected(ErrorCode.BAD_REQUEST)


class TestUnclaim:

    def test_round_trip_restores_open_slot(self):
        original = make_lineup()
        claimed = accept(original, decide_claim(original, START, claim()))

        decision = decide_unclaim(claimed, START, unclaim())

        assert decision.roster == original.roster
        assert decision.roster.team("A")[0].name == ""
        assert decision.roster.team("A")[0].claimed_by is None

    def test_scenario_d_not_owner(self):
        lineup = make_lineup()
        lineup = accept(lineup, decide_claim(lineup, START, claim("p1")))

        decision = decide_unclaim(lineup, START, unclaim("q1"))

        assert decision == Rejected(ErrorCode.NOT_YOUR_SLOT)
        assert lineup.roster.team("A")[0].claimed_by == "p1"

    def test_open_slot_is_not_your_slot(self):
        assert decide_unclaim(make_lineup(), START, unclaim()) == Rejected(ErrorCode.NOT_YOUR_SLOT)

    @pytest.mark.parametrize("index", [-1, 11, 99])
    def test_missing_slot_is_not_your_slot(self, index):
        assert decide_unclaim(make_lineup(), START, unclaim(index=index)) == Rejected(ErrorCode.NOT_YOUR_SLOT)

    def test_can_release_slot_beyond_players_count(self):
        players = {"A": [{}] * 10 + [{"name": "Ali", "claimedBy": "p1"}], "B": []}
        lineup = normalize_create(LineupCreate(playersCount=7, players=players), START)

        assert isinstance(decide_unclaim(lineup, START, unclaim(index=10)), Accepted)

    @pytest.mark.parametrize("request_kwargs", [
        {"participant_id": None},
        {"team": "C"},
        {"index": None},
    ])
    def test_bad_request(self, request_kwargs):
        decision = decide_unclaim(make_lineup(), START, unclaim(**request_kwargs))

        assert decision == Rejected(ErrorCode.BAD_REQUEST)

    def test_expired(self):
        lineup = make_lineup()
        lineup = accept(lineup, decide_claim(lineup, START, claim()))
        later = START + timedelta(hours=48, seconds=1)

        assert decide_unclaim(lineup, later, unclaim()) == Rejected(ErrorCode.LINK_EXPIRED)
