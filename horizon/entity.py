"""
Entity runtime representation.

Horizon entities come in two variants: CreatureUnit (one creature) and
CreatureCluster (creatures fused by collision). Both carry a unique id,
a position on the horizon, and gold. The variants are plain dataclasses
joined in the HorizonEntity union; functions in this module dispatch on
the variant explicitly so every merge case is spelled out.

The Guardian lives alongside the entities but is never one of them.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import ClassVar, FrozenSet, Union

from .constants import (
    DISPLACEMENT_ADDITIVE,
    DISPLACEMENT_GOLD_SCALED,
    DISPLACEMENT_MODES,
    GUARDIAN_ID,
)
from .errors import InvalidArgumentError
from .rng import check_factor


def _check_gold(gold: float) -> float:
    gold = float(gold)
    if not np.isfinite(gold) or gold < 0.0:
        raise InvalidArgumentError(f"Gold must be a finite non-negative number, got {gold}")
    return gold


def _check_position(position: float) -> float:
    position = float(position)
    if not np.isfinite(position):
        raise InvalidArgumentError(f"Position must be finite, got {position}")
    return position


@dataclass
class CreatureUnit:
    """
    A single, unmerged creature.

    Attributes:
        id: Unique id, stable for the horizon's lifetime
        position: Coordinate on the horizon
        gold: Accumulated gold (non-negative)
    """
    id: int
    position: float
    gold: float = 0.0

    kind: ClassVar[str] = "unit"

    def __post_init__(self):
        self.position = _check_position(self.position)
        self.gold = _check_gold(self.gold)


@dataclass
class CreatureCluster:
    """
    Creatures fused by collision.

    Attributes:
        id: Id of the surviving member (lowest id of the merge)
        position: Position of the surviving member at merge time
        gold: Sum of member gold at merge time
        member_ids: Ids absorbed into this cluster (excludes its own id)
    """
    id: int
    position: float
    gold: float
    member_ids: FrozenSet[int] = field(default_factory=frozenset)

    kind: ClassVar[str] = "cluster"

    def __post_init__(self):
        self.position = _check_position(self.position)
        self.gold = _check_gold(self.gold)
        self.member_ids = frozenset(int(m) for m in self.member_ids)
        if self.id in self.member_ids:
            raise InvalidArgumentError(f"Cluster {self.id} cannot list itself as a member")

    @property
    def size(self) -> int:
        """Number of creatures fused into this cluster, itself included."""
        return len(self.member_ids) + 1


HorizonEntity = Union[CreatureUnit, CreatureCluster]


def absorbed_ids(entity: HorizonEntity) -> FrozenSet[int]:
    """Ids previously absorbed by an entity (empty for a unit)."""
    if isinstance(entity, CreatureCluster):
        return entity.member_ids
    if isinstance(entity, CreatureUnit):
        return frozenset()
    raise TypeError(f"Not a horizon entity: {entity!r}")


def all_ids(entity: HorizonEntity) -> FrozenSet[int]:
    """Every creature id an entity accounts for, its own included."""
    return absorbed_ids(entity) | {entity.id}


def displace(entity: HorizonEntity, factor: float, mode: str = DISPLACEMENT_ADDITIVE,
             scale: float = 1.0) -> float:
    """
    Move an entity by a random factor.

    Args:
        entity: Entity to move (modified in place)
        factor: Random factor in [-1, 1]
        mode: "additive" (position += factor * scale) or
              "gold_scaled" (position += factor * scale * gold)
        scale: Displacement multiplier

    Returns:
        New position
    """
    factor = check_factor(factor)
    if mode == DISPLACEMENT_ADDITIVE:
        step = factor * scale
    elif mode == DISPLACEMENT_GOLD_SCALED:
        step = factor * scale * entity.gold
    else:
        raise InvalidArgumentError(
            f"Unknown displacement mode '{mode}' (expected one of {', '.join(DISPLACEMENT_MODES)})"
        )
    entity.position = _check_position(entity.position + step)
    return entity.position


def merge_entities(a: HorizonEntity, b: HorizonEntity) -> CreatureCluster:
    """
    Fuse two entities into one cluster.

    The lower id survives and keeps its position; gold is the exact sum of
    both; the loser's id (and anything it had absorbed) joins the member set.

    Args:
        a: First entity
        b: Second entity

    Returns:
        New CreatureCluster replacing both inputs

    Raises:
        InvalidArgumentError: if both inputs share an id
    """
    if a.id == b.id:
        raise InvalidArgumentError(f"Cannot merge entity {a.id} with itself")

    survivor, loser = (a, b) if a.id < b.id else (b, a)

    return CreatureCluster(
        id=survivor.id,
        position=survivor.position,
        gold=survivor.gold + loser.gold,
        member_ids=absorbed_ids(survivor) | all_ids(loser),
    )


def entity_to_dict(entity: HorizonEntity) -> dict:
    """
    Serialize entity to JSON-compatible dict.

    Returns:
        Dict with kind, id, position, gold (and member_ids for clusters)
    """
    data = {
        'kind': entity.kind,
        'id': int(entity.id),
        'position': float(entity.position),
        'gold': float(entity.gold),
    }
    if isinstance(entity, CreatureCluster):
        data['member_ids'] = sorted(entity.member_ids)
    return data


def entity_from_dict(data: dict) -> HorizonEntity:
    """Deserialize entity from dict produced by entity_to_dict()."""
    kind = data.get('kind', CreatureUnit.kind)
    if kind == CreatureUnit.kind:
        return CreatureUnit(id=data['id'], position=data['position'], gold=data.get('gold', 0.0))
    if kind == CreatureCluster.kind:
        return CreatureCluster(
            id=data['id'],
            position=data['position'],
            gold=data.get('gold', 0.0),
            member_ids=data.get('member_ids', []),
        )
    raise InvalidArgumentError(f"Unknown entity kind '{kind}'")


@dataclass
class Guardian:
    """
    The single guardian of a horizon.

    Eliminates any active entity strictly closer than capture_radius.
    Never merges and never carries gold.

    Attributes:
        position: Coordinate on the horizon
        capture_radius: Elimination distance (strict)
        moves: Whether the guardian takes a random step each turn
        id: Fixed guardian id, outside the creature id space
    """
    position: float
    capture_radius: float
    moves: bool = False
    id: int = GUARDIAN_ID

    def __post_init__(self):
        self.position = _check_position(self.position)
        self.capture_radius = float(self.capture_radius)
        if not np.isfinite(self.capture_radius) or self.capture_radius < 0.0:
            raise InvalidArgumentError(
                f"Capture radius must be a finite non-negative number, got {self.capture_radius}"
            )

    def captures(self, positions: np.ndarray) -> np.ndarray:
        """
        Boolean mask of positions inside the capture radius.

        Args:
            positions: (N,) array of entity positions

        Returns:
            (N,) bool array
        """
        positions = np.asarray(positions, dtype=np.float64)
        return np.abs(positions - self.position) < self.capture_radius

    def step(self, factor: float, scale: float = 1.0) -> float:
        """Move the guardian additively; returns the new position."""
        factor = check_factor(factor)
        self.position = _check_position(self.position + factor * scale)
        return self.position

    def to_dict(self) -> dict:
        return {
            'id': int(self.id),
            'position': float(self.position),
            'capture_radius': float(self.capture_radius),
            'moves': bool(self.moves),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Guardian':
        return cls(
            position=data['position'],
            capture_radius=data['capture_radius'],
            moves=data.get('moves', False),
            id=data.get('id', GUARDIAN_ID),
        )
