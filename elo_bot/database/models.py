from sqlalchemy import (
    Column, Integer, String, DateTime, Float, ForeignKey,
    Enum as SQLEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from enum import Enum

Base = declarative_base()


class ChallengeOutcome(Enum):
    """Result of a challenge from the challenger's point of view"""
    LOSE = 0
    WIN = 1

    @property
    def reversed(self) -> "ChallengeOutcome":
        return ChallengeOutcome.LOSE if self is ChallengeOutcome.WIN else ChallengeOutcome.WIN


def make_pair_key(player_a: str, player_b: str) -> str:
    """Canonical key for the unordered pair {player_a, player_b}"""
    low, high = sorted((player_a, player_b))
    return f"{low}:{high}"


class Player(Base):
    __tablename__ = 'players'

    uid = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    # Unrounded; rounding happens only for display
    elo = Column(Float, nullable=False)

    registered_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Player(uid='{self.uid}', name='{self.name}', elo={self.elo})>"


class PendingChallenge(Base):
    __tablename__ = 'pending_challenges'

    id = Column(Integer, primary_key=True, autoincrement=True)
    challenger_id = Column(String(64), ForeignKey('players.uid'), nullable=False, index=True)
    opponent_id = Column(String(64), ForeignKey('players.uid'), nullable=False, index=True)
    # At most one open challenge per unordered pair, whichever side proposed it
    pair_key = Column(String(130), nullable=False)

    outcome = Column(SQLEnum(ChallengeOutcome), nullable=False)
    challenger_delta = Column(Float, nullable=False)
    opponent_delta = Column(Float, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    challenger = relationship("Player", foreign_keys=[challenger_id])
    opponent = relationship("Player", foreign_keys=[opponent_id])

    __table_args__ = (
        UniqueConstraint('challenger_id', 'opponent_id', name='uq_pending_challenge_direction'),
        UniqueConstraint('pair_key', name='uq_pending_challenge_pair'),
        CheckConstraint('challenger_id <> opponent_id', name='ck_pending_challenge_distinct'),
        # Ids of resolved challenges are never handed out again
        {'sqlite_autoincrement': True},
    )

    def __repr__(self):
        return (
            f"<PendingChallenge(id={self.id}, challenger='{self.challenger_id}', "
            f"opponent='{self.opponent_id}', outcome={self.outcome.name})>"
        )
