"""Dice rolling for hit points and rests.

Rolls go through the d20 library. A roller is always injected into the
transitions that need randomness, so tests can pass a seeded roller or a
scripted subclass instead of relying on global state.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import d20

from aether_sheet.core.exceptions import DiceRollError
from aether_sheet.core.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RollResult:
    """The outcome of a rolled expression.

    Attributes:
        expression: The expression that was rolled.
        total: The total result.
        breakdown: d20's readable rendering of the individual dice.
    """

    expression: str
    total: int
    breakdown: str


class DiceRoller:
    """Dice roller backed by the d20 library.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> 1 <= roller.roll_die(8) <= 8
        True
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
        """
        self._seed = seed
        if seed is not None:
            random.seed(seed)
        logger.debug("DiceRoller initialized", seed=seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def roll(self, expression: str) -> RollResult:
        """Roll a dice expression.

        Args:
            expression: Dice expression (e.g., '1d8', '2d6+3').

        Returns:
            RollResult with the total and a readable breakdown.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        logger.debug("Dice rolled", expression=expression, total=result.total)
        return RollResult(expression=expression, total=result.total, breakdown=str(result))

    def roll_die(self, size: int) -> int:
        """Roll a single die of ``size`` faces.

        Raises:
            DiceRollError: If ``size`` is less than 1.
        """
        if size < 1:
            raise DiceRollError(f"Die size must be positive, got {size}", expression=f"1d{size}")
        return self.roll(f"1d{size}").total

    def roll_dice(self, count: int, size: int) -> list[int]:
        """Roll ``count`` dice of ``size`` faces, one result per die."""
        return [self.roll_die(size) for _ in range(max(0, count))]


__all__ = [
    "RollResult",
    "DiceRoller",
]
