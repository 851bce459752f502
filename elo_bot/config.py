import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class EloSettings:
    """Rating parameters handed to the operations layer at construction"""
    initial_elo: float = 400
    k_factor: float = 32
    # Logistic divisor; falls back to initial_elo when unset
    scale: Optional[float] = None

    @property
    def logistic_scale(self) -> float:
        return self.scale if self.scale else self.initial_elo


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    """Bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///elo.db')

    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    # Empty disables the per-day log file
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Elo settings
    INITIAL_ELO = float(os.getenv('INITIAL_ELO', 400))
    K_FACTOR = float(os.getenv('K_FACTOR', 32))
    ELO_SCALE = _optional_float('ELO_SCALE')

    @classmethod
    def elo_settings(cls) -> EloSettings:
        """Snapshot the Elo parameters into an immutable settings object"""
        return EloSettings(
            initial_elo=cls.INITIAL_ELO,
            k_factor=cls.K_FACTOR,
            scale=cls.ELO_SCALE,
        )

    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if cls.K_FACTOR <= 0:
            raise ValueError("K_FACTOR must be positive")
        if cls.INITIAL_ELO <= 0 and not cls.ELO_SCALE:
            raise ValueError("INITIAL_ELO must be positive when ELO_SCALE is not set")
