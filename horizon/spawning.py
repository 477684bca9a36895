"""
Creature spawning.

Places a fresh population on the horizon with deterministic positions:
creature i (0-based) starts at i * initial_spacing with ids counting up
from FIRST_ENTITY_ID. The guardian is placed from configuration.
"""

from typing import List

from .constants import FIRST_ENTITY_ID
from .data_types import SimulationConfig
from .entity import CreatureUnit, Guardian
from .errors import InvalidArgumentError


def check_creature_count(count: int, config: SimulationConfig) -> int:
    """
    Validate a requested creature count.

    Raises:
        InvalidArgumentError: if count is not an int within the configured bounds
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidArgumentError(f"Creature count must be an integer, got {count!r}")
    if count < config.min_creatures or count > config.max_creatures:
        raise InvalidArgumentError(
            f"Creature count must be between {config.min_creatures} and "
            f"{config.max_creatures}, got {count}"
        )
    return count


def spawn_creatures(count: int, config: SimulationConfig) -> List[CreatureUnit]:
    """
    Create count creatures in creation order.

    Args:
        count: Number of creatures (validated against config bounds)
        config: Simulation parameters

    Returns:
        List of CreatureUnit with unique ids
    """
    count = check_creature_count(count, config)
    return [
        CreatureUnit(
            id=FIRST_ENTITY_ID + i,
            position=i * config.initial_spacing,
            gold=config.initial_gold,
        )
        for i in range(count)
    ]


def spawn_guardian(config: SimulationConfig) -> Guardian:
    """Create the guardian described by config."""
    return Guardian(
        position=config.guardian_position,
        capture_radius=config.capture_radius,
        moves=config.guardian_moves,
    )
