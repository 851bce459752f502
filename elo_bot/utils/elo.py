import math
from dataclasses import dataclass

from elo_bot.config import EloSettings


@dataclass(frozen=True)
class EloDeltas:
    """Precomputed rating adjustments for one proposed result"""
    caller_expected: float
    opponent_expected: float
    caller_delta: float
    opponent_delta: float


class EloCalculator:
    """Handles Elo rating calculations for pairwise challenges"""

    @staticmethod
    def calculate_expected_score(rating_a: float, rating_b: float, scale: float) -> float:
        """
        Calculate the expected score for player A against player B

        Args:
            rating_a: Player A's current Elo rating
            rating_b: Player B's current Elo rating
            scale: Logistic divisor (rating gap that shifts the odds tenfold)

        Returns:
            Expected score (0.0 to 1.0) for player A
        """
        try:
            return 1 / (1 + math.pow(10, (rating_b - rating_a) / scale))
        except OverflowError:
            # Gap so large the odds no longer fit in a float
            return 0.0

    @staticmethod
    def calculate_deltas(caller_rating: float, opponent_rating: float,
                         caller_won: bool, settings: EloSettings) -> EloDeltas:
        """
        Calculate both rating changes for a result declared by the caller

        Args:
            caller_rating: Rating of the player declaring the result
            opponent_rating: Rating of the other player
            caller_won: True if the caller declares a win, False for a loss
            settings: K-factor and logistic scale to use

        Returns:
            EloDeltas with unrounded expected scores and deltas
        """
        scale = settings.logistic_scale
        caller_expected = EloCalculator.calculate_expected_score(caller_rating, opponent_rating, scale)
        opponent_expected = EloCalculator.calculate_expected_score(opponent_rating, caller_rating, scale)

        caller_score = 1.0 if caller_won else 0.0
        return EloDeltas(
            caller_expected=caller_expected,
            opponent_expected=opponent_expected,
            caller_delta=settings.k_factor * (caller_score - caller_expected),
            opponent_delta=settings.k_factor * ((1 - caller_score) - opponent_expected),
        )

    @staticmethod
    def format_elo(elo: float) -> str:
        """Ratings are stored unrounded; this is the only place they get rounded"""
        return str(math.floor(elo + 0.5))

    @staticmethod
    def format_elo_change(elo_change: float) -> str:
        """
        Format Elo change for display

        Args:
            elo_change: The unrounded Elo change value

        Returns:
            Rounded change with a leading '+' for gains
        """
        sign = '+' if elo_change > 0 else ''
        return f"{sign}{math.floor(elo_change + 0.5)}"
