from datetime import datetime
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from constants import TEAMS


class CamelModel(BaseModel):
    """Accepts both snake_case names and the camelCase keys used on the wire."""

    model_config = ConfigDict(populate_by_name=True)


# ============ DOCUMENT ============

class Slot(CamelModel):
    number: int
    name: str = ""
    claimed_by: Optional[str] = Field(default=None, alias="claimedBy")

    @property
    def is_open(self) -> bool:
        return not self.name.strip()


class Roster(BaseModel):
    A: list[Slot]
    B: list[Slot]

    def team(self, team: str) -> list[Slot]:
        return getattr(self, team)

    def all_slots(self) -> Iterator[Slot]:
        for team in TEAMS:
            yield from self.team(team)

    def owner_of(self, participant_id: str) -> Optional[Slot]:
        for slot in self.all_slots():
            if slot.claimed_by == participant_id:
                return slot
        return None


class Lineup(CamelModel):
    id: Optional[str] = None
    team_a_name: str = Field(alias="teamAName")
    team_b_name: str = Field(alias="teamBName")
    team_a_color: str = Field(alias="teamAColor")
    team_b_color: str = Field(alias="teamBColor")
    players_count: int = Field(alias="playersCount")
    positions: Any = None
    roster: Roster = Field(alias="players")
    created_at: datetime = Field(alias="createdAt")
    expires_at: datetime = Field(alias="expiresAt")
    version: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


# ============ REQUESTS ============

class LineupCreate(CamelModel):
    """Organizer input. Every field is coerced by lineup.normalize_create, never rejected."""

    team_a_name: Any = Field(default=None, alias="teamAName")
    team_b_name: Any = Field(default=None, alias="teamBName")
    team_a_color: Any = Field(default=None, alias="teamAColor")
    team_b_color: Any = Field(default=None, alias="teamBColor")
    players_count: Any = Field(default=None, alias="playersCount")
    players: Any = None
    positions: Any = None


class UnclaimRequest(CamelModel):
    participant_id: Optional[str] = Field(default=None, alias="participantId")
    team: Optional[str] = None
    index: Optional[StrictInt] = None


class ClaimRequest(UnclaimRequest):
    name: Optional[str] = None


# ============ RESPONSES ============

class LineupCreated(BaseModel):
    id: str


class LineupView(CamelModel):
    team_a_name: str = Field(alias="teamAName")
    team_b_name: str = Field(alias="teamBName")
    team_a_color: str = Field(alias="teamAColor")
    team_b_color: str = Field(alias="teamBColor")
    players: Roster
    positions: Any = None
    players_count: int = Field(alias="playersCount")

    @classmethod
    def from_lineup(cls, lineup: Lineup) -> "LineupView":
        return cls(
            team_a_name=lineup.team_a_name,
            team_b_name=lineup.team_b_name,
            team_a_color=lineup.team_a_color,
            team_b_color=lineup.team_b_color,
            players=lineup.roster,
            positions=lineup.positions,
            players_count=lineup.players_count,
        )


class LineupResponse(BaseModel):
    data: LineupView


class RosterResponse(BaseModel):
    ok: bool = True
    players: Roster
