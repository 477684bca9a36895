"""
Data types mirroring the YAML configuration structure.

These dataclasses are populated by loader.py from YAML files.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .constants import (
    MIN_CREATURES,
    MAX_CREATURES,
    MERGE_DISTANCE_DEFAULT,
    CAPTURE_RADIUS_DEFAULT,
    GUARDIAN_POSITION_DEFAULT,
    GUARDIAN_MOVES_DEFAULT,
    INITIAL_SPACING,
    INITIAL_GOLD,
    DISPLACEMENT_MODE_DEFAULT,
    DISPLACEMENT_MODES,
    DISPLACEMENT_GOLD_SCALED,
    DISPLACEMENT_SCALE_DEFAULT,
    MAX_ITERATIONS_DEFAULT,
)
from .errors import InvalidArgumentError


# ============================================================================
# Simulation Configuration
# ============================================================================

@dataclass
class SimulationConfig:
    """Tunable parameters of a horizon simulation"""
    min_creatures: int = MIN_CREATURES
    max_creatures: int = MAX_CREATURES
    merge_distance: float = MERGE_DISTANCE_DEFAULT  # merge when |a - b| <= merge_distance
    capture_radius: float = CAPTURE_RADIUS_DEFAULT  # eliminate when |e - guardian| < capture_radius
    guardian_position: float = GUARDIAN_POSITION_DEFAULT
    guardian_moves: bool = GUARDIAN_MOVES_DEFAULT
    initial_spacing: float = INITIAL_SPACING
    initial_gold: float = INITIAL_GOLD
    displacement_mode: str = DISPLACEMENT_MODE_DEFAULT  # additive, gold_scaled
    displacement_scale: float = DISPLACEMENT_SCALE_DEFAULT
    max_iterations: int = MAX_ITERATIONS_DEFAULT
    seed: Optional[int] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.min_creatures < 1 or self.max_creatures < self.min_creatures:
            raise InvalidArgumentError(
                f"Invalid creature bounds [{self.min_creatures}, {self.max_creatures}]"
            )
        if self.merge_distance < 0:
            raise InvalidArgumentError(f"merge_distance must be >= 0, got {self.merge_distance}")
        if self.capture_radius < 0:
            raise InvalidArgumentError(f"capture_radius must be >= 0, got {self.capture_radius}")
        if self.initial_spacing <= 0:
            raise InvalidArgumentError(f"initial_spacing must be > 0, got {self.initial_spacing}")
        if self.initial_gold < 0:
            raise InvalidArgumentError(f"initial_gold must be >= 0, got {self.initial_gold}")
        if self.displacement_mode not in DISPLACEMENT_MODES:
            raise InvalidArgumentError(f"Unknown displacement mode '{self.displacement_mode}'")
        if self.displacement_mode == DISPLACEMENT_GOLD_SCALED and self.initial_gold == 0:
            # merges only sum gold, so zero gold stays zero
            raise InvalidArgumentError(
                f"displacement_mode '{DISPLACEMENT_GOLD_SCALED}' needs initial_gold > 0"
            )
        if self.displacement_scale < 0:
            raise InvalidArgumentError(f"displacement_scale must be >= 0, got {self.displacement_scale}")
        if self.max_iterations < 1:
            raise InvalidArgumentError(f"max_iterations must be >= 1, got {self.max_iterations}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
