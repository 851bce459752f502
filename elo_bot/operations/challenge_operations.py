"""
Challenge Operations Service

Handles the pairwise challenge state machine: a player proposes a result
against an opponent, and the opponent confirms it by challenging back.
Confirmation applies both precomputed rating changes and removes the
pending challenge in one transaction.

Per unordered pair of players:
    no challenge -> proposed (A->B or B->A) -> resolved by the other side
A repeated proposal in the same direction is rejected and changes nothing.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError

from elo_bot.config import EloSettings
from elo_bot.database.database import Database, DuplicateKeyError, RecordNotFoundError
from elo_bot.database.models import ChallengeOutcome, PendingChallenge, Player, make_pair_key
from elo_bot.utils.elo import EloCalculator
from elo_bot.utils.elo_exceptions import (
    CallerNotRegisteredError, OpponentNotFoundError, SelfChallengeError,
    DuplicateChallengeError, NothingPendingError, StoreUnavailableError
)
from elo_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ChallengeProposed:
    """A new pending challenge was stored and awaits the opponent's confirmation"""
    challenge_id: int
    caller_name: str
    opponent_name: str
    outcome: ChallengeOutcome
    caller_delta: float
    opponent_delta: float


@dataclass(frozen=True)
class ChallengeAccepted:
    """The caller confirmed the opponent's challenge and both ratings changed"""
    challenge_id: int
    caller_name: str
    opponent_name: str
    # Outcome from the confirming caller's point of view
    outcome: ChallengeOutcome
    caller_elo: float
    opponent_elo: float
    caller_delta: float
    opponent_delta: float


ChallengeResult = Union[ChallengeAccepted, ChallengeProposed]


@dataclass(frozen=True)
class PendingEntry:
    challenge_id: int
    challenger_id: str
    challenger_name: str
    opponent_id: str
    opponent_name: str
    outcome: ChallengeOutcome


@dataclass
class PendingSummary:
    """Open challenges involving one player"""
    incoming: List[PendingEntry] = field(default_factory=list)
    outgoing: List[PendingEntry] = field(default_factory=list)


class ChallengeOperations:
    """
    Service class for challenge proposal and confirmation.

    Operations touching the same pair of players are serialised with a
    per-pair lock; across processes the unique pair key and the
    compare-and-delete on confirmation keep the invariants.
    """

    def __init__(self, db: Database, settings: EloSettings):
        """
        Args:
            db: Database instance for persistence
            settings: K-factor and logistic scale for delta computation
        """
        self.db = db
        self.settings = settings
        self.logger = logger
        # Only pairs with an operation in flight hold an entry
        self._pair_locks: Dict[str, asyncio.Lock] = {}
        self._pair_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _locked_pair(self, player_a: str, player_b: str):
        key = make_pair_key(player_a, player_b)
        lock = self._pair_locks.get(key)
        if lock is None:
            lock = self._pair_locks[key] = asyncio.Lock()
        self._pair_users[key] = self._pair_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._pair_users[key] -= 1
            if self._pair_users[key] == 0:
                del self._pair_users[key]
                del self._pair_locks[key]

    async def challenge(self, caller_id: str, opponent_id: str,
                        outcome: ChallengeOutcome) -> ChallengeResult:
        """
        Propose a result against an opponent, or confirm theirs.

        If the opponent already proposed a result against the caller, this
        call confirms it and the declared outcome is ignored in favour of the
        stored one. Otherwise a new pending challenge is stored.

        Args:
            caller_id: Identity of the calling player
            opponent_id: Identity of the opponent
            outcome: Result declared by the caller (used only for new proposals)

        Returns:
            ChallengeAccepted when a pending challenge was confirmed,
            ChallengeProposed when a new one was stored

        Raises:
            CallerNotRegisteredError, OpponentNotFoundError, SelfChallengeError
            DuplicateChallengeError: Caller already has an open challenge against opponent
            NothingPendingError: A concurrent confirmation resolved the challenge first
            StoreUnavailableError: The database failed; nothing was applied
        """
        async with self._locked_pair(caller_id, opponent_id):
            caller, opponent = await self._load_players(caller_id, opponent_id)

            pending = await self.db.find_challenge(opponent_id, caller_id)
            if pending:
                return await self._resolve(pending, caller, opponent)

            existing = await self.db.find_challenge(caller_id, opponent_id)
            if existing:
                raise DuplicateChallengeError(caller.name, opponent.name)

            return await self._propose(caller, opponent, outcome)

    async def confirm(self, caller_id: str, opponent_id: str) -> ChallengeAccepted:
        """
        Confirm the opponent's pending challenge against the caller.

        Unlike challenge(), this never creates a new proposal.

        Raises:
            NothingPendingError: The opponent has no pending challenge against the caller
        """
        async with self._locked_pair(caller_id, opponent_id):
            caller, opponent = await self._load_players(caller_id, opponent_id)

            pending = await self.db.find_challenge(opponent_id, caller_id)
            if not pending:
                raise NothingPendingError(caller.name, opponent.name)

            return await self._resolve(pending, caller, opponent)

    async def pending_for(self, caller_id: str) -> PendingSummary:
        """List the open challenges the caller proposed or has to answer"""
        caller = await self.db.get_player(caller_id)
        if not caller:
            raise CallerNotRegisteredError()

        summary = PendingSummary()
        for challenge in await self.db.list_challenges_for_player(caller_id):
            entry = PendingEntry(
                challenge_id=challenge.id,
                challenger_id=challenge.challenger_id,
                challenger_name=challenge.challenger.name,
                opponent_id=challenge.opponent_id,
                opponent_name=challenge.opponent.name,
                outcome=challenge.outcome,
            )
            if challenge.opponent_id == caller_id:
                summary.incoming.append(entry)
            else:
                summary.outgoing.append(entry)
        return summary

    async def cancel_challenge(self, challenger_id: str, opponent_id: str) -> bool:
        """
        Administrative removal of a pending challenge without touching ratings.

        Returns:
            True if a challenge from challenger to opponent was removed
        """
        async with self._locked_pair(challenger_id, opponent_id):
            pending = await self.db.find_challenge(challenger_id, opponent_id)
            if not pending:
                return False

            removed = await self.db.delete_challenge(
                pending.id, challenger_id=challenger_id, opponent_id=opponent_id
            )
            if removed:
                self.logger.info(
                    f"Challenge {pending.id} ({challenger_id} -> {opponent_id}) cancelled administratively"
                )
            return removed

    async def _load_players(self, caller_id: str, opponent_id: str) -> Tuple[Player, Player]:
        async with self.db.get_session() as session:
            caller = await self.db.get_player(caller_id, session=session)
            opponent = await self.db.get_player(opponent_id, session=session)

        if not caller:
            raise CallerNotRegisteredError()
        if not opponent:
            raise OpponentNotFoundError(opponent_id)
        if caller_id == opponent_id:
            raise SelfChallengeError()
        return caller, opponent

    async def _propose(self, caller: Player, opponent: Player,
                       outcome: ChallengeOutcome) -> ChallengeProposed:
        deltas = EloCalculator.calculate_deltas(
            caller.elo, opponent.elo, outcome is ChallengeOutcome.WIN, self.settings
        )

        try:
            challenge_id = await self.db.create_challenge(
                challenger_id=caller.uid,
                opponent_id=opponent.uid,
                outcome=outcome,
                challenger_delta=deltas.caller_delta,
                opponent_delta=deltas.opponent_delta,
            )
        except DuplicateKeyError:
            # The opponent's opposite proposal was stored first
            self.logger.warning(
                f"Simultaneous proposal {caller.uid} -> {opponent.uid} rejected by pair constraint"
            )
            raise DuplicateChallengeError(caller.name, opponent.name)
        except StoreUnavailableError:
            self.logger.error(
                f"Failed to store challenge {caller.uid} -> {opponent.uid}; caller must re-issue it"
            )
            raise

        self.logger.info(
            f"Challenge {challenge_id} proposed: {caller.uid} -> {opponent.uid} "
            f"({outcome.name}, {deltas.caller_delta:+.2f}/{deltas.opponent_delta:+.2f})"
        )
        return ChallengeProposed(
            challenge_id=challenge_id,
            caller_name=caller.name,
            opponent_name=opponent.name,
            outcome=outcome,
            caller_delta=deltas.caller_delta,
            opponent_delta=deltas.opponent_delta,
        )

    async def _resolve(self, pending: PendingChallenge, caller: Player,
                       opponent: Player) -> ChallengeAccepted:
        """
        Apply a pending challenge confirmed by its opponent (the caller).

        The delete runs first and acts as the commit barrier: a confirmer whose
        delete removes nothing raises NothingPendingError and the transaction
        rolls back without touching ratings.
        """
        # Stored deltas are from the challenger's side; the caller is the stored opponent
        caller_delta = pending.opponent_delta
        opponent_delta = pending.challenger_delta

        try:
            async with self.db.transaction() as session:
                removed = await self.db.delete_challenge(
                    pending.id,
                    challenger_id=pending.challenger_id,
                    opponent_id=pending.opponent_id,
                    session=session,
                )
                if not removed:
                    self.logger.warning(
                        f"Challenge {pending.id} already resolved by a concurrent confirmation"
                    )
                    raise NothingPendingError(caller.name, opponent.name)

                fresh_caller = await self.db.get_player(caller.uid, session=session)
                fresh_opponent = await self.db.get_player(opponent.uid, session=session)
                caller_elo = fresh_caller.elo + caller_delta
                opponent_elo = fresh_opponent.elo + opponent_delta

                await self.db.set_player_rating(caller.uid, caller_elo, session=session)
                await self.db.set_player_rating(opponent.uid, opponent_elo, session=session)
        except (SQLAlchemyError, RecordNotFoundError) as e:
            self.logger.error(f"Update Elo error for challenge {pending.id}, rolled back: {e}")
            raise StoreUnavailableError("challenge confirmation", str(e)) from e
        except StoreUnavailableError:
            self.logger.error(f"Update Elo error for challenge {pending.id}, rolled back")
            raise

        self.logger.info(
            f"Challenge {pending.id} resolved: {caller.uid} {caller_elo:.2f} ({caller_delta:+.2f}), "
            f"{opponent.uid} {opponent_elo:.2f} ({opponent_delta:+.2f})"
        )
        return ChallengeAccepted(
            challenge_id=pending.id,
            caller_name=caller.name,
            opponent_name=opponent.name,
            outcome=pending.outcome.reversed,
            caller_elo=caller_elo,
            opponent_elo=opponent_elo,
            caller_delta=caller_delta,
            opponent_delta=opponent_delta,
        )
