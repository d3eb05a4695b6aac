import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from claims import Accepted, check_claim_request, check_unclaim_request, decide_claim, decide_unclaim
from errors import ErrorCode, LineupError, StaleLineupError
from lineup import normalize_create
from models import ClaimRequest, Lineup, LineupCreate, Roster, UnclaimRequest
from store import LineupStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LineupService:
    """Create, read, claim and unclaim lineups on top of a LineupStore.

    Claims and unclaims run read-decide-write cycles. The write only lands if
    the lineup is still at the version that was read; otherwise the cycle is
    repeated against fresh state, up to `max_retries` times.
    """

    def __init__(self, store: LineupStore, clock: Callable[[], datetime] = utc_now, max_retries: int = 10):
        self.store = store
        self.clock = clock
        self.max_retries = max(1, max_retries)

    def create(self, payload: Optional[LineupCreate] = None) -> str:
        lineup = normalize_create(payload or LineupCreate(), self.clock())
        lineup_id = self.store.create(lineup)
        logger.info("Created lineup %s (players_count=%s, expires_at=%s)",
                    lineup_id, lineup.players_count, lineup.expires_at.isoformat())
        return lineup_id

    def read(self, lineup_id: str) -> Lineup:
        lineup = self._load(lineup_id)
        if lineup.is_expired(self.clock()):
            raise LineupError(ErrorCode.LINK_EXPIRED)
        return lineup

    def claim(self, lineup_id: str, request: ClaimRequest) -> Roster:
        return self._apply(lineup_id, request, check_claim_request, decide_claim, "claim")

    def unclaim(self, lineup_id: str, request: UnclaimRequest) -> Roster:
        return self._apply(lineup_id, request, check_unclaim_request, decide_unclaim, "unclaim")

    def purge_expired(self) -> int:
        removed = self.store.purge_expired(self.clock())
        if removed:
            logger.info("Purged %d expired lineups", removed)
        return removed

    def _load(self, lineup_id: str) -> Lineup:
        lineup = self.store.get(lineup_id)
        if lineup is None:
            raise LineupError(ErrorCode.NOT_FOUND)
        return lineup

    def _apply(self, lineup_id, request, check, decide, action) -> Roster:
        rejected = check(request)
        if rejected:
            raise LineupError(rejected.reason)

        for attempt in range(1, self.max_retries + 1):
            lineup = self._load(lineup_id)
            decision = decide(lineup, self.clock(), request)
            if not isinstance(decision, Accepted):
                raise LineupError(decision.reason)

            try:
                stored = self.store.replace_roster(lineup_id, decision.roster, lineup.version)
            except StaleLineupError:
                logger.debug("Lineup %s changed during %s (attempt %d), retrying", lineup_id, action, attempt)
                continue

            # Evicted between read and write
            if not stored:
                raise LineupError(ErrorCode.NOT_FOUND)

            logger.debug("Lineup %s: %s %s[%s] by %s", lineup_id, action,
                         request.team, request.index, request.participant_id)
            return decision.roster

        logger.warning("Lineup %s: %s gave up after %d conflicting writes", lineup_id, action, self.max_retries)
        raise LineupError(ErrorCode.LINEUP_BUSY)
