"""
Simulation service and run driver.

Entry points an adapter (HTTP handler, CLI, notebook) calls. The service
holds no horizon of its own: every call takes the caller's Horizon and
returns the next one. Completed full runs are reported to the UserStats
collaborator after the turn loop ends.
"""

from typing import Optional

from .constants import OUTCOME_SUCCESSFUL
from .data_types import SimulationConfig
from .engine import TurnEngine
from .errors import IllegalStateError
from .rng import RandomSource
from .stats import UserStats
from .world import Horizon


class SimulationService:
    """
    Stateless facade over TurnEngine.

    Args:
        config: Simulation parameters
        random_source: Displacement source (see rng.py)
        user_stats: Statistics collaborator; runs are not reported when None
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        random_source: Optional[RandomSource] = None,
        user_stats: Optional[UserStats] = None,
    ):
        self.engine = TurnEngine(config, random_source)
        self.user_stats = user_stats

    @property
    def config(self) -> SimulationConfig:
        return self.engine.config

    def init_new_simulation(self, count: int) -> Horizon:
        """Create a new horizon with count creatures."""
        horizon = self.engine.init_new_simulation(count)
        print(f"[OK] Simulation initialized: {horizon.active_count} creatures, "
              f"guardian at {horizon.guardian.position:.2f}")
        return horizon

    def run_next_simulation(self, horizon: Optional[Horizon], user_id: Optional[str] = None) -> Horizon:
        """
        Apply one turn.

        When this turn finishes the run and user_id is given, the run is
        reported to the statistics collaborator.
        """
        if user_id is not None:
            self._require_user(user_id)
        nxt = self.engine.run_next_simulation(horizon)
        if nxt.is_finished and user_id is not None:
            self.report_run(nxt, user_id)
        return nxt

    def finish_simulation(self, horizon: Optional[Horizon], user_id: Optional[str] = None) -> Horizon:
        """
        Drive an existing horizon to termination.

        Returns:
            The finished horizon

        Raises:
            IllegalStateError: if horizon is None or already finished
        """
        if horizon is None:
            raise IllegalStateError("Simulation has not been initialized")
        if horizon.is_finished:
            raise IllegalStateError("Simulation is already finished")
        if user_id is not None:
            self._require_user(user_id)

        while not horizon.is_finished:
            horizon = self.engine.run_next_simulation(horizon)

        print(f"[DONE] Simulation finished after {horizon.iteration_count} iterations: "
              f"{horizon.outcome}, {horizon.active_count} active, "
              f"{len(horizon.inactive_entities)} eliminated")

        if user_id is not None:
            self.report_run(horizon, user_id)
        return horizon

    def run_full_simulation(self, count: int, user_id: Optional[str] = None) -> Horizon:
        """
        Create a horizon and run it to termination.

        A horizon that is finished at creation (single creature) is still
        reported as one run.
        """
        if user_id is not None:
            self._require_user(user_id)

        horizon = self.init_new_simulation(count)
        if horizon.is_finished:
            if user_id is not None:
                self.report_run(horizon, user_id)
            return horizon
        return self.finish_simulation(horizon, user_id)

    def reset_simulation(self, horizon: Optional[Horizon]) -> Horizon:
        """
        Discard a horizon and start over with its creature count.

        Raises:
            IllegalStateError: if there is no horizon to reset
        """
        if horizon is None:
            raise IllegalStateError("Simulation has not been initialized")
        return self.init_new_simulation(horizon.initial_count)

    def status(self, horizon: Optional[Horizon]) -> dict:
        """Status projection of a horizon."""
        if horizon is None:
            raise IllegalStateError("Simulation has not been initialized")
        return horizon.to_status()

    def _require_user(self, user_id: str):
        if self.user_stats is not None:
            self.user_stats.find_by_login(user_id)

    def report_run(self, horizon: Horizon, user_id: str):
        """Record one finished run for user_id (score only on success)."""
        if self.user_stats is None:
            return
        self.user_stats.record_simulation(user_id)
        if horizon.outcome == OUTCOME_SUCCESSFUL:
            self.user_stats.increment_score(user_id)


def print_turn_summary(horizon: Horizon):
    """Print turn summary to console (lightweight monitoring)"""
    turn = horizon.last_turn or {}
    merged = turn.get('merged')
    merged_text = f"{merged['absorbed']}->{merged['survivor']}" if merged else "-"
    eliminated = turn.get('eliminated') or []
    print(f"Turn {horizon.iteration_count:5d} | "
          f"Mover: {turn.get('mover', '-')!s:>3} | "
          f"Merge: {merged_text:>7} | "
          f"Eliminated: {len(eliminated)} | "
          f"Active: {horizon.active_count} | "
          f"Gold: {horizon.total_gold():.2f}")
