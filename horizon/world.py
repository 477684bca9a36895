"""
Horizon aggregate.

One Horizon holds everything a single run needs: the active entities in
turn order, the entities that left play, the guardian, the iteration
counter and the termination flag. The engine advances it one turn at a
time; callers keep it between turns (see driver.py).
"""

import copy
import numpy as np
from typing import Dict, List, Optional

from .constants import OUTCOME_RUNNING, OUTCOME_SUCCESSFUL, OUTCOME_FAILED, SURVIVOR_LIMIT
from .entity import (
    Guardian,
    HorizonEntity,
    all_ids,
    entity_from_dict,
    entity_to_dict,
)
from .errors import EntityNotFoundError, InsufficientEntitiesError, InvalidArgumentError
from .turn_order import TurnOrder

OUTCOMES = (OUTCOME_RUNNING, OUTCOME_SUCCESSFUL, OUTCOME_FAILED)


class Horizon:
    """
    The one-dimensional world of a single simulation run.

    Attributes:
        guardian: The run's guardian (never part of the entity lists)
        inactive_entities: Entities eliminated by the guardian, in removal order
        iteration_count: Completed turns
        is_finished: Termination flag (monotonic)
        outcome: RUNNING, SUCCESSFUL (survivor condition) or FAILED (cutoff)
        initial_count: Creature count the run was created with
        last_turn: What happened on the latest turn (mover, factor, merged, eliminated)
    """

    def __init__(
        self,
        entities: List[HorizonEntity],
        guardian: Guardian,
        initial_count: Optional[int] = None,
        current_index: int = 0,
        inactive_entities: Optional[List[HorizonEntity]] = None,
        iteration_count: int = 0,
        is_finished: bool = False,
        outcome: str = OUTCOME_RUNNING,
        last_turn: Optional[Dict] = None,
    ):
        self._order = TurnOrder(entities, current_index)
        self.inactive_entities: List[HorizonEntity] = list(inactive_entities or [])
        self.guardian = guardian
        self.initial_count = len(entities) if initial_count is None else initial_count
        self.iteration_count = iteration_count
        self.is_finished = is_finished
        self.outcome = outcome
        self.last_turn = last_turn

    # ------------------------------------------------------------------
    # Turn order
    # ------------------------------------------------------------------

    @property
    def entities(self) -> List[HorizonEntity]:
        """Active entities in turn order (copy)."""
        return self._order.entities

    @property
    def order(self) -> TurnOrder:
        return self._order

    @property
    def current_index(self) -> int:
        return self._order.pointer

    @property
    def active_count(self) -> int:
        return len(self._order)

    def current_entity(self) -> HorizonEntity:
        """
        Entity whose turn it is.

        Raises:
            InsufficientEntitiesError: if no entity is active
        """
        entity = self._order.current()
        if entity is None:
            raise InsufficientEntitiesError("Horizon has no active entities")
        return entity

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_entity(self, entity_id: int) -> HorizonEntity:
        """
        Find an entity by id among active then inactive entities.

        Raises:
            EntityNotFoundError: if no entity has that id
        """
        entity = self._order.get_by_id(entity_id)
        if entity is not None:
            return entity
        for entity in self.inactive_entities:
            if entity.id == entity_id:
                return entity
        raise EntityNotFoundError(f"Entity {entity_id} not found")

    def is_active(self, entity_id: int) -> bool:
        return self._order.index_of(entity_id) >= 0

    def positions(self) -> np.ndarray:
        """(N,) float64 array of active positions in turn order."""
        return np.array([e.position for e in self._order], dtype=np.float64)

    def entities_within(self, center: float, radius: float) -> List[HorizonEntity]:
        """Active entities with |position - center| <= radius, in turn order."""
        if not np.isfinite(center) or not np.isfinite(radius) or radius < 0:
            raise InvalidArgumentError(f"Invalid range query center={center} radius={radius}")
        if len(self._order) == 0:
            return []
        mask = np.abs(self.positions() - center) <= radius
        return [self._order[i] for i in np.flatnonzero(mask)]

    def nearest_within(self, entity_id: int, max_distance: float) -> Optional[HorizonEntity]:
        """
        Nearest other active entity within max_distance (inclusive).

        Ties on distance go to the lower id.

        Returns:
            The nearest eligible entity, or None
        """
        index = self._order.index_of(entity_id)
        if index < 0:
            raise EntityNotFoundError(f"Entity {entity_id} is not active")

        positions = self.positions()
        distances = np.abs(positions - positions[index])
        distances[index] = np.inf

        candidates = np.flatnonzero(distances <= max_distance)
        if len(candidates) == 0:
            return None

        best = min(candidates, key=lambda i: (distances[i], self._order[i].id))
        return self._order[best]

    # ------------------------------------------------------------------
    # Mutation (used by the engine)
    # ------------------------------------------------------------------

    def replace_entity(self, entity_id: int, entity: HorizonEntity):
        self._order.replace(entity_id, entity)

    def absorb(self, entity_id: int) -> HorizonEntity:
        """Drop an entity that was fused into a cluster (it does not go inactive)."""
        removed = self._order.remove_by_id(entity_id)
        if removed is None:
            raise EntityNotFoundError(f"Entity {entity_id} is not active")
        return removed

    def eliminate(self, entity_id: int) -> HorizonEntity:
        """Move an entity from play to inactive_entities."""
        removed = self._order.remove_by_id(entity_id)
        if removed is None:
            raise EntityNotFoundError(f"Entity {entity_id} is not active")
        self.inactive_entities.append(removed)
        return removed

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def total_gold(self) -> float:
        """Gold across active and inactive entities."""
        return float(sum(e.gold for e in self._order) + sum(e.gold for e in self.inactive_entities))

    def invariant_violations(self) -> List[str]:
        """
        Structural rules the horizon breaks, as messages (empty when sound).

        Covers unique creature ids, pointer range, guardian id separation,
        outcome/flag agreement, and a SUCCESSFUL outcome only with at most
        one active entity.
        """
        problems = []
        seen = set()
        for entity in list(self._order) + self.inactive_entities:
            ids = all_ids(entity)
            if ids & seen:
                problems.append(f"Duplicate creature ids {sorted(ids & seen)}")
            seen |= ids
        if len(self._order) > 0 and not 0 <= self._order.pointer < len(self._order):
            problems.append(
                f"current_index {self._order.pointer} out of range for {len(self._order)} entities"
            )
        if self.guardian.id in seen:
            problems.append("Guardian id appears among entities")
        if self.iteration_count < 0:
            problems.append(f"iteration_count must be >= 0, got {self.iteration_count}")
        if self.outcome not in OUTCOMES:
            problems.append(f"Unknown outcome {self.outcome}")
        elif self.is_finished != (self.outcome != OUTCOME_RUNNING):
            problems.append(f"is_finished={self.is_finished} disagrees with outcome={self.outcome}")
        elif self.outcome == OUTCOME_SUCCESSFUL and self.active_count > SURVIVOR_LIMIT:
            problems.append(f"Outcome {self.outcome} with {self.active_count} active entities")
        return problems

    def check_invariants(self):
        """
        Assert structural invariants (used when debug invariants are enabled).

        Raises:
            AssertionError: on the first violated invariant
        """
        problems = self.invariant_violations()
        assert not problems, problems[0]

    def copy(self) -> 'Horizon':
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def to_status(self) -> Dict:
        """
        Externally visible snapshot consumed by presentation layers.

        Returns:
            {activeEntities, inactiveEntities, iterationCount, isFinished}
            where each entity is {id, position, gold}
        """
        def brief(e):
            return {'id': int(e.id), 'position': float(e.position), 'gold': float(e.gold)}

        return {
            'activeEntities': [brief(e) for e in self._order],
            'inactiveEntities': [brief(e) for e in self.inactive_entities],
            'iterationCount': int(self.iteration_count),
            'isFinished': bool(self.is_finished),
        }

    def to_dict(self) -> Dict:
        """Full serialization, restorable with from_dict()."""
        return {
            'entities': [entity_to_dict(e) for e in self._order],
            'inactive_entities': [entity_to_dict(e) for e in self.inactive_entities],
            'current_index': int(self._order.pointer),
            'iteration_count': int(self.iteration_count),
            'is_finished': bool(self.is_finished),
            'outcome': self.outcome,
            'initial_count': int(self.initial_count),
            'guardian': self.guardian.to_dict(),
            'last_turn': copy.deepcopy(self.last_turn),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Horizon':
        """
        Restore a horizon produced by to_dict().

        The survivor condition is re-applied, so a state that should already
        be over comes back finished.

        Raises:
            InvalidArgumentError: if the data is incomplete or describes an
                                  inconsistent horizon
        """
        try:
            entities = [entity_from_dict(e) for e in data['entities']]
            guardian = Guardian.from_dict(data['guardian'])
            inactive = [entity_from_dict(e) for e in data.get('inactive_entities', [])]
        except KeyError as e:
            raise InvalidArgumentError(f"Horizon data is missing field {e}") from e

        current_index = data.get('current_index', 0)
        if entities and not 0 <= current_index < len(entities):
            raise InvalidArgumentError(
                f"current_index {current_index} out of range for {len(entities)} entities"
            )

        horizon = cls(
            entities=entities,
            guardian=guardian,
            initial_count=data.get('initial_count'),
            current_index=current_index,
            inactive_entities=inactive,
            iteration_count=data.get('iteration_count', 0),
            is_finished=data.get('is_finished', False),
            outcome=data.get('outcome', OUTCOME_RUNNING),
            last_turn=data.get('last_turn'),
        )

        problems = horizon.invariant_violations()
        if problems:
            raise InvalidArgumentError(f"Inconsistent horizon data: {'; '.join(problems)}")

        if not horizon.is_finished and horizon.active_count <= SURVIVOR_LIMIT:
            horizon.is_finished = True
            horizon.outcome = OUTCOME_SUCCESSFUL
        return horizon
