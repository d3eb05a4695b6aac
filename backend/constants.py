# backend/constants.py
"""Application constants - single source of truth for lineup rules."""

from datetime import timedelta

TEAMS = ("A", "B")

# Every team stores 11 slots; playersCount only limits which ones can be claimed
ROSTER_SIZE = 11

PLAYERS_COUNT_DEFAULT = 11
PLAYERS_COUNT_MIN = 7
PLAYERS_COUNT_MAX = 11

TEAM_A_NAME_DEFAULT = "Team A"
TEAM_B_NAME_DEFAULT = "Team B"
TEAM_A_COLOR_DEFAULT = "#2563eb"
TEAM_B_COLOR_DEFAULT = "#dc2626"

PLAYER_NAME_MAX_LENGTH = 40

# Share links stop working this long after the lineup is created
LINK_TTL_HOURS = 48
LINK_TTL = timedelta(hours=LINK_TTL_HOURS)
