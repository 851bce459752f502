from typing import Optional, List
from contextlib import asynccontextmanager

from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from elo_bot.config import Config
from elo_bot.database.models import (
    Base, Player, PendingChallenge, ChallengeOutcome, make_pair_key
)
from elo_bot.utils.elo_exceptions import StoreUnavailableError
from elo_bot.utils.logger import setup_logger


class DuplicateKeyError(Exception):
    """Raised when an insert collides with an existing primary or unique key"""
    pass


class RecordNotFoundError(Exception):
    """Raised when an update targets a record that does not exist"""
    pass


class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        engine_kwargs = {'echo': Config.DEBUG}
        if ':memory:' in database_url:
            # Every connection to :memory: is a fresh database; share one
            engine_kwargs['connect_args'] = {'check_same_thread': False}
            engine_kwargs['poolclass'] = StaticPool

        self.engine = create_async_engine(database_url, **engine_kwargs)

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context will be committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                await db.delete_challenge(challenge.id, session=session)
                await db.set_player_rating(caller_id, new_elo, session=session)
                # All operations commit together here

        Important: The caller is responsible for passing the yielded session to
        all participating operations. Exceptions must be allowed to propagate
        out of the context for rollback to occur.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def _session_scope(self, session: Optional[AsyncSession], operation: str):
        """
        Use the caller's session when given, otherwise run in a private transaction.
        Storage failures other than key collisions surface as StoreUnavailableError.
        """
        try:
            if session is not None:
                yield session
            else:
                async with self.transaction() as own_session:
                    yield own_session
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Database error during {operation}: {e}")
            raise StoreUnavailableError(operation, str(e)) from e

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Player operations
    async def get_player(self, uid: str, session: Optional[AsyncSession] = None) -> Optional[Player]:
        """Get a player by identity, or None"""
        async with self._session_scope(session, "get_player") as s:
            result = await s.execute(select(Player).where(Player.uid == uid))
            return result.scalar_one_or_none()

    async def create_player(self, uid: str, name: str, elo: float,
                            session: Optional[AsyncSession] = None) -> Player:
        """Create a new player; raises DuplicateKeyError if the identity exists"""
        try:
            async with self._session_scope(session, "create_player") as s:
                player = Player(uid=uid, name=name, elo=elo)
                s.add(player)
                await s.flush()
                return player
        except IntegrityError as e:
            raise DuplicateKeyError(f"Player '{uid}' already exists") from e

    async def set_player_rating(self, uid: str, elo: float,
                                session: Optional[AsyncSession] = None):
        """Overwrite a player's rating; raises RecordNotFoundError if absent"""
        async with self._session_scope(session, "set_player_rating") as s:
            result = await s.execute(
                update(Player)
                .where(Player.uid == uid)
                .values(elo=elo)
            )
            if result.rowcount == 0:
                raise RecordNotFoundError(f"Player '{uid}' not found")

    # Pending challenge operations
    async def find_challenge(self, challenger_id: str, opponent_id: str,
                             session: Optional[AsyncSession] = None) -> Optional[PendingChallenge]:
        """Exact directed lookup; callers check the reverse direction themselves"""
        async with self._session_scope(session, "find_challenge") as s:
            result = await s.execute(
                select(PendingChallenge).where(
                    (PendingChallenge.challenger_id == challenger_id) &
                    (PendingChallenge.opponent_id == opponent_id)
                )
            )
            return result.scalar_one_or_none()

    async def create_challenge(self, challenger_id: str, opponent_id: str,
                               outcome: ChallengeOutcome,
                               challenger_delta: float, opponent_delta: float,
                               session: Optional[AsyncSession] = None) -> int:
        """
        Store a pending challenge and return its id.

        The unique pair key rejects a second open challenge for the same two
        players in either direction with DuplicateKeyError.
        """
        try:
            async with self._session_scope(session, "create_challenge") as s:
                challenge = PendingChallenge(
                    challenger_id=challenger_id,
                    opponent_id=opponent_id,
                    pair_key=make_pair_key(challenger_id, opponent_id),
                    outcome=outcome,
                    challenger_delta=challenger_delta,
                    opponent_delta=opponent_delta,
                )
                s.add(challenge)
                await s.flush()
                return challenge.id
        except IntegrityError as e:
            raise DuplicateKeyError(
                f"Pending challenge between '{challenger_id}' and '{opponent_id}' already exists"
            ) from e

    async def delete_challenge(self, challenge_id: int,
                               challenger_id: Optional[str] = None,
                               opponent_id: Optional[str] = None,
                               session: Optional[AsyncSession] = None) -> bool:
        """
        Remove a pending challenge; returns False when it was already gone.

        When challenger_id/opponent_id are given the row must still match them,
        so a confirmer holding a stale record cannot remove anything else.
        """
        stmt = delete(PendingChallenge).where(PendingChallenge.id == challenge_id)
        if challenger_id is not None:
            stmt = stmt.where(PendingChallenge.challenger_id == challenger_id)
        if opponent_id is not None:
            stmt = stmt.where(PendingChallenge.opponent_id == opponent_id)

        async with self._session_scope(session, "delete_challenge") as s:
            result = await s.execute(stmt)
            return result.rowcount > 0

    async def list_challenges_for_player(self, uid: str,
                                         session: Optional[AsyncSession] = None) -> List[PendingChallenge]:
        """All pending challenges the player is on either side of, oldest first"""
        async with self._session_scope(session, "list_challenges_for_player") as s:
            result = await s.execute(
                select(PendingChallenge)
                .options(
                    selectinload(PendingChallenge.challenger),
                    selectinload(PendingChallenge.opponent)
                )
                .where(or_(
                    PendingChallenge.challenger_id == uid,
                    PendingChallenge.opponent_id == uid
                ))
                .order_by(PendingChallenge.id)
            )
            return list(result.scalars().all())
