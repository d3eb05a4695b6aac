from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable machine-readable codes returned in the `error` field."""

    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    LINK_EXPIRED = "link_expired"
    OUT_OF_RANGE = "out_of_range"
    ALREADY_USED = "already_used"
    SLOT_TAKEN = "slot_taken"
    NOT_YOUR_SLOT = "not_your_slot"
    LINEUP_BUSY = "lineup_busy"
    DB_ERROR = "db_error"
    INTERNAL_ERROR = "internal_error"


HTTP_STATUS = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.LINK_EXPIRED: 410,
    ErrorCode.OUT_OF_RANGE: 400,
    ErrorCode.ALREADY_USED: 400,
    ErrorCode.SLOT_TAKEN: 400,
    ErrorCode.NOT_YOUR_SLOT: 400,
    ErrorCode.LINEUP_BUSY: 503,
    ErrorCode.DB_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

MESSAGES = {
    ErrorCode.BAD_REQUEST: "Missing or invalid request fields",
    ErrorCode.NOT_FOUND: "Lineup not found",
    ErrorCode.LINK_EXPIRED: "This lineup link has expired",
    ErrorCode.OUT_OF_RANGE: "Slot index is outside this lineup",
    ErrorCode.ALREADY_USED: "You already hold a slot in this lineup",
    ErrorCode.SLOT_TAKEN: "This slot has already been taken",
    ErrorCode.NOT_YOUR_SLOT: "You can only release your own slot",
    ErrorCode.LINEUP_BUSY: "Lineup is busy, please try again",
    ErrorCode.DB_ERROR: "Database error",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


@dataclass
class LineupError(Exception):
    """A rejected lineup operation, carrying its stable error code.

    The HTTP layer maps the code to a status and JSON body; callers inside
    the service compare `code` rather than parsing the message.
    """

    code: ErrorCode
    message: Optional[str] = None

    def __post_init__(self):
        self.code = ErrorCode(self.code)
        if self.message is None:
            self.message = MESSAGES[self.code]

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class StorageError(Exception):
    """The lineup store could not be reached or failed mid-operation."""


class StaleLineupError(Exception):
    """A roster write lost against a concurrent write to the same lineup."""

    def __init__(self, lineup_id: str, expected_version: int):
        super().__init__(f"lineup {lineup_id} changed since version {expected_version}")
        self.lineup_id = lineup_id
        self.expected_version = expected_version
