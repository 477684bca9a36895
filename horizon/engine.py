"""
Turn engine.

Applies exactly one turn to a Horizon and returns the resulting Horizon.
The input value is never modified, so a caller can keep (or discard) the
previous state freely.

ONE-TURN CONTRACT:

1. Reject finished horizons.
2. The entity at current_index takes one random step (one draw).
3. Collision: it fuses with its nearest entity within merge_distance.
4. Guardian: optionally steps (one more draw), then eliminates every
   active entity strictly inside its capture radius.
5. The pointer moves to the next entity in circular order.
6. iteration_count increments and termination is evaluated.
"""

import os
from typing import Optional

from .constants import (
    DEBUG_INVARIANTS_ENV,
    OUTCOME_FAILED,
    OUTCOME_RUNNING,
    OUTCOME_SUCCESSFUL,
    SURVIVOR_LIMIT,
)
from .data_types import SimulationConfig
from .entity import displace, merge_entities
from .errors import IllegalStateError
from .rng import RandomSource, UniformRandomSource
from .spawning import spawn_creatures, spawn_guardian
from .world import Horizon


class TurnEngine:
    """
    Turn-based state machine over Horizon values.

    Args:
        config: Simulation parameters (defaults from constants.py)
        random_source: Displacement source; defaults to a PCG64 source
                       seeded with config.seed
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 random_source: Optional[RandomSource] = None):
        self.config = config or SimulationConfig()
        self.random_source = random_source or UniformRandomSource(self.config.seed)

    def init_new_simulation(self, count: int) -> Horizon:
        """
        Create a fresh horizon with count creatures and one guardian.

        Raises:
            InvalidArgumentError: if count is outside the configured bounds
        """
        creatures = spawn_creatures(count, self.config)
        horizon = Horizon(
            entities=creatures,
            guardian=spawn_guardian(self.config),
            initial_count=count,
        )
        self._evaluate_termination(horizon)
        return horizon

    def run_next_simulation(self, horizon: Optional[Horizon]) -> Horizon:
        """
        Apply one turn.

        Args:
            horizon: Current state (left untouched)

        Returns:
            New Horizon one turn later

        Raises:
            IllegalStateError: if horizon is None, already finished, or
                               already meets its end condition
        """
        if horizon is None:
            raise IllegalStateError("Simulation has not been initialized")
        if horizon.is_finished:
            raise IllegalStateError("Simulation is already finished")
        if self._termination_outcome(horizon) != OUTCOME_RUNNING:
            raise IllegalStateError(
                f"Simulation already meets its end condition "
                f"({horizon.active_count} active, {horizon.iteration_count} iterations)"
            )

        before_gold = horizon.total_gold()
        nxt = horizon.copy()
        config = self.config

        # Move
        mover = nxt.current_entity()
        factor = self.random_source.next_factor()
        displace(mover, factor, config.displacement_mode, config.displacement_scale)
        turn = {
            'mover': mover.id,
            'factor': factor,
            'merged': None,
            'eliminated': [],
        }

        # Collision; the mover keeps its slot only if it wins the merge
        mover_slot = mover.id
        partner = nxt.nearest_within(mover.id, config.merge_distance)
        if partner is not None:
            cluster = merge_entities(mover, partner)
            loser_id = partner.id if cluster.id == mover.id else mover.id
            nxt.replace_entity(cluster.id, cluster)
            nxt.absorb(loser_id)
            turn['merged'] = {'survivor': cluster.id, 'absorbed': loser_id}
            if loser_id == mover.id:
                mover_slot = None

        # Guardian
        guardian = nxt.guardian
        if guardian.moves:
            guardian.step(self.random_source.next_factor(), config.displacement_scale)
        if nxt.active_count > 0:
            hits = guardian.captures(nxt.positions())
            captured = [e.id for e, hit in zip(nxt.entities, hits) if hit]
            for entity_id in captured:
                nxt.eliminate(entity_id)
                if entity_id == mover_slot:
                    mover_slot = None
            turn['eliminated'] = captured

        # Pointer: removals already left it on the successor when the mover's
        # slot is gone; otherwise step past the mover.
        if mover_slot is not None:
            nxt.order.seek(mover_slot)
            nxt.order.advance()

        nxt.iteration_count += 1
        nxt.last_turn = turn
        self._evaluate_termination(nxt)

        if os.getenv(DEBUG_INVARIANTS_ENV) == '1':
            nxt.check_invariants()
            assert nxt.active_count <= horizon.active_count, \
                f"Active count grew from {horizon.active_count} to {nxt.active_count}"
            assert nxt.total_gold() <= before_gold + 1e-9, \
                f"Total gold grew from {before_gold} to {nxt.total_gold()}"

        return nxt

    def _termination_outcome(self, horizon: Horizon) -> str:
        """Outcome the termination rules assign to horizon as it stands."""
        if horizon.active_count <= SURVIVOR_LIMIT:
            return OUTCOME_SUCCESSFUL
        if horizon.iteration_count >= self.config.max_iterations:
            return OUTCOME_FAILED
        return OUTCOME_RUNNING

    def _evaluate_termination(self, horizon: Horizon):
        """Set is_finished/outcome; a finished horizon never reopens."""
        if horizon.is_finished:
            return
        horizon.outcome = self._termination_outcome(horizon)
        horizon.is_finished = horizon.outcome != OUTCOME_RUNNING
