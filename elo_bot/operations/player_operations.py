"""
Player Operations Module

Registration and rating lookup for players. Identity resolution happens in
the command layer; this module only sees opaque player ids.

Key functionality:
- register(): one-time creation of a Player with the configured starting Elo
- inspect(): rating lookup for the caller or an explicit target
"""

from dataclasses import dataclass
from typing import Optional

from elo_bot.config import EloSettings
from elo_bot.database.database import Database, DuplicateKeyError
from elo_bot.utils.elo_exceptions import (
    InvalidNameError, AlreadyRegisteredError,
    CallerNotRegisteredError, UserNotFoundError
)
from elo_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class PlayerRating:
    """Name and unrounded rating of a player"""
    uid: str
    name: str
    elo: float


class PlayerOperations:
    """
    Business logic operations for Player registration and lookup.

    State is never cached between calls; every operation re-reads the store.
    """

    def __init__(self, database: Database, settings: EloSettings):
        """
        Args:
            database: Database instance for persistence
            settings: Elo parameters (starting rating is used on registration)
        """
        self.db = database
        self.settings = settings
        self.logger = logger

    async def register(self, caller_id: str, raw_name: Optional[str]) -> PlayerRating:
        """
        Register the caller under a display name.

        Args:
            caller_id: Identity of the calling user
            raw_name: Requested display name, trimmed before use

        Returns:
            PlayerRating with the stored name and starting Elo

        Raises:
            InvalidNameError: If the name is empty after trimming
            AlreadyRegisteredError: If the caller already has a record
            StoreUnavailableError: If the database operation fails
        """
        name = (raw_name or '').strip()
        if not name:
            raise InvalidNameError()

        existing = await self.db.get_player(caller_id)
        if existing:
            raise AlreadyRegisteredError(existing.name)

        try:
            player = await self.db.create_player(caller_id, name, self.settings.initial_elo)
        except DuplicateKeyError:
            # Lost a race against a concurrent registration of the same identity
            existing = await self.db.get_player(caller_id)
            self.logger.warning(f"Concurrent registration for {caller_id} rejected")
            raise AlreadyRegisteredError(existing.name if existing else name)

        self.logger.info(f"Registered player {caller_id} as '{name}' with Elo {player.elo}")
        return PlayerRating(uid=player.uid, name=player.name, elo=player.elo)

    async def inspect(self, caller_id: str, target_id: Optional[str] = None) -> PlayerRating:
        """
        Look up a rating: the explicit target if given, otherwise the caller.

        Raises:
            UserNotFoundError: If an explicit target has no record
            CallerNotRegisteredError: If no target was given and the caller has no record
        """
        player = await self.db.get_player(target_id or caller_id)
        if not player:
            if target_id:
                raise UserNotFoundError(target_id)
            raise CallerNotRegisteredError()

        return PlayerRating(uid=player.uid, name=player.name, elo=player.elo)
