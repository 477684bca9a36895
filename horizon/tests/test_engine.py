"""
Test turn engine.

Verifies:
- init_new_simulation bounds and initial state
- One-turn contract: move, merge, guardian, pointer, counter, termination
- Merge tie-break and survivor rules
- Guardian elimination (strict radius, optional movement)
- Iteration cutoff
- Determinism and invariants over seeded full runs
"""

import sys
import pytest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from horizon.constants import DEBUG_INVARIANTS_ENV, OUTCOME_FAILED, OUTCOME_RUNNING, OUTCOME_SUCCESSFUL
from horizon.data_types import SimulationConfig
from horizon.engine import TurnEngine
from horizon.entity import CreatureCluster, CreatureUnit, Guardian, all_ids
from horizon.errors import IllegalStateError, InvalidArgumentError
from horizon.rng import FixedRandomSource, SequenceRandomSource, UniformRandomSource
from horizon.world import Horizon


def quiet_config(**overrides) -> SimulationConfig:
    """Config where nothing merges or gets captured unless overridden"""
    params = dict(merge_distance=0.0, capture_radius=0.0)
    params.update(overrides)
    return SimulationConfig(**params)


# ============================================================================
# Initialization
# ============================================================================

@pytest.mark.parametrize("count", list(range(1, 11)))
def test_init_valid_counts(count):
    engine = TurnEngine(SimulationConfig(), FixedRandomSource(0.0))

    horizon = engine.init_new_simulation(count)

    assert horizon.active_count == count
    assert horizon.inactive_entities == []
    assert horizon.iteration_count == 0
    assert horizon.current_index == 0
    assert [e.id for e in horizon.entities] == list(range(1, count + 1))
    assert all(isinstance(e, CreatureUnit) and e.gold == 0.0 for e in horizon.entities)
    assert horizon.is_finished == (count == 1)


@pytest.mark.parametrize("count", [0, 11, -3, "3", True, 2.0])
def test_init_invalid_counts(count):
    engine = TurnEngine(SimulationConfig(), FixedRandomSource(0.0))
    with pytest.raises(InvalidArgumentError):
        engine.init_new_simulation(count)


def test_single_creature_finished_immediately():
    """One creature already satisfies the single-survivor condition"""
    engine = TurnEngine(SimulationConfig(), FixedRandomSource(0.0))

    horizon = engine.init_new_simulation(1)

    assert horizon.is_finished
    assert horizon.outcome == OUTCOME_SUCCESSFUL
    assert horizon.iteration_count == 0
    with pytest.raises(IllegalStateError):
        engine.run_next_simulation(horizon)


# ============================================================================
# One-turn contract
# ============================================================================

def test_quiet_turn_scenario():
    """Factor 0, merge distance 0, radius 0: one turn changes only counter and pointer"""
    print("=" * 60)
    print("Test: Quiet Turn")
    print("=" * 60)

    source = FixedRandomSource(0.0)
    engine = TurnEngine(quiet_config(), source)
    horizon = engine.init_new_simulation(3)

    nxt = engine.run_next_simulation(horizon)

    assert nxt.iteration_count == 1
    assert nxt.active_count == 3
    assert nxt.inactive_entities == []
    assert all(isinstance(e, CreatureUnit) for e in nxt.entities), "No merges expected"
    assert nxt.current_index == 1
    assert not nxt.is_finished
    assert nxt.outcome == OUTCOME_RUNNING
    assert source.calls == 1, "Exactly one draw per turn"
    assert nxt.last_turn == {'mover': 1, 'factor': 0.0, 'merged': None, 'eliminated': []}

    # Input horizon untouched
    assert horizon.iteration_count == 0
    assert horizon.current_index == 0

    print("[OK] Quiet turn leaves population intact\n")


def test_rejects_finished_and_missing_horizon():
    engine = TurnEngine(quiet_config(max_iterations=1), FixedRandomSource(0.0))
    horizon = engine.run_next_simulation(engine.init_new_simulation(3))

    assert horizon.is_finished
    with pytest.raises(IllegalStateError):
        engine.run_next_simulation(horizon)
    with pytest.raises(IllegalStateError):
        engine.run_next_simulation(None)


def test_pointer_cycles_without_removals():
    engine = TurnEngine(quiet_config(), FixedRandomSource(0.0))
    horizon = engine.init_new_simulation(4)

    movers = []
    for _ in range(8):
        movers.append(horizon.current_entity().id)
        horizon = engine.run_next_simulation(horizon)

    assert movers == [1, 2, 3, 4, 1, 2, 3, 4]


def test_gold_scaled_displacement_moves_by_gold():
    config = quiet_config(displacement_mode="gold_scaled", initial_gold=0.5)
    engine = TurnEngine(config, FixedRandomSource(1.0))

    nxt = engine.run_next_simulation(engine.init_new_simulation(2))

    assert nxt.get_entity(1).position == pytest.approx(0.5)
    with pytest.raises(InvalidArgumentError):
        quiet_config(displacement_mode="gold_scaled")  # zero gold would never move


# ============================================================================
# Merging
# ============================================================================

def test_mover_wins_merge():
    """Mover (id 1) lands next to id 2 and absorbs it at its post-move position"""
    print("=" * 60)
    print("Test: Mover Wins Merge")
    print("=" * 60)

    config = SimulationConfig(displacement_scale=2.0, initial_gold=1.5)
    engine = TurnEngine(config, FixedRandomSource(0.9))
    horizon = engine.init_new_simulation(3)

    nxt = engine.run_next_simulation(horizon)

    cluster = nxt.entities[0]
    print(f"  Cluster {cluster.id} at {cluster.position:.3f}, gold {cluster.gold}")
    assert isinstance(cluster, CreatureCluster)
    assert cluster.id == 1
    assert cluster.position == pytest.approx(1.8)
    assert cluster.gold == 3.0
    assert cluster.member_ids == frozenset({2})
    assert [e.id for e in nxt.entities] == [1, 3]
    assert nxt.inactive_entities == [], "Absorbed entities do not go inactive"
    assert nxt.current_entity().id == 3
    assert nxt.last_turn['merged'] == {'survivor': 1, 'absorbed': 2}

    print("[OK] Merge keeps lower id and sums gold\n")


def test_mover_loses_merge():
    """Mover id 2 lands next to id 1; id 1 survives where it stood"""
    config = SimulationConfig(displacement_scale=2.0)
    engine = TurnEngine(config, SequenceRandomSource([0.0, -0.9]))
    horizon = engine.init_new_simulation(3)

    horizon = engine.run_next_simulation(horizon)
    assert horizon.current_entity().id == 2
    horizon = engine.run_next_simulation(horizon)

    assert [e.id for e in horizon.entities] == [1, 3]
    cluster = horizon.get_entity(1)
    assert isinstance(cluster, CreatureCluster)
    assert cluster.position == 0.0
    assert cluster.member_ids == frozenset({2})
    assert horizon.current_entity().id == 3, "Turn passes to the mover's successor"
    assert horizon.iteration_count == 2


def test_merge_tie_prefers_lower_id():
    """Two partners at equal distance: the lower id is chosen"""
    horizon = Horizon(
        entities=[
            CreatureUnit(id=5, position=2.0, gold=1.0),
            CreatureUnit(id=1, position=0.0, gold=2.0),
            CreatureUnit(id=3, position=4.0, gold=4.0),
        ],
        guardian=Guardian(position=-100.0, capture_radius=0.5),
    )
    engine = TurnEngine(SimulationConfig(merge_distance=2.0), FixedRandomSource(0.0))

    nxt = engine.run_next_simulation(horizon)

    assert [e.id for e in nxt.entities] == [1, 3]
    cluster = nxt.get_entity(1)
    assert cluster.member_ids == frozenset({5})
    assert cluster.gold == 3.0
    assert cluster.position == 0.0
    assert nxt.current_entity().id == 1


def test_merge_prefers_nearest():
    horizon = Horizon(
        entities=[
            CreatureUnit(id=1, position=0.0),
            CreatureUnit(id=2, position=0.3),
            CreatureUnit(id=3, position=-0.1),
        ],
        guardian=Guardian(position=-100.0, capture_radius=0.5),
    )
    engine = TurnEngine(SimulationConfig(merge_distance=0.5), FixedRandomSource(0.0))

    nxt = engine.run_next_simulation(horizon)

    assert nxt.get_entity(1).member_ids == frozenset({3})
    assert [e.id for e in nxt.entities] == [1, 2]


def test_merge_distance_is_inclusive():
    """Entities exactly merge_distance apart merge"""
    config = SimulationConfig(merge_distance=2.0, initial_spacing=2.0)
    engine = TurnEngine(config, FixedRandomSource(0.0))

    nxt = engine.run_next_simulation(engine.init_new_simulation(2))

    assert nxt.active_count == 1
    assert nxt.is_finished
    assert nxt.outcome == OUTCOME_SUCCESSFUL


# ============================================================================
# Guardian
# ============================================================================

def test_guardian_eliminates_without_gold_transfer():
    """Mover steps into the capture radius and moves to inactive_entities"""
    print("=" * 60)
    print("Test: Guardian Elimination")
    print("=" * 60)

    config = SimulationConfig(
        guardian_position=-2.0,
        capture_radius=1.0,
        displacement_scale=2.0,
        initial_gold=5.0,
    )
    engine = TurnEngine(config, FixedRandomSource(-0.9))
    horizon = engine.init_new_simulation(3)
    gold_before = horizon.total_gold()

    nxt = engine.run_next_simulation(horizon)

    assert [e.id for e in nxt.inactive_entities] == [1]
    assert nxt.inactive_entities[0].gold == 5.0
    assert [e.id for e in nxt.entities] == [2, 3]
    assert nxt.total_gold() == gold_before
    assert nxt.current_entity().id == 2
    assert nxt.last_turn['eliminated'] == [1]

    print("[OK] Elimination moves entity to inactive with its gold\n")


def test_guardian_radius_boundary_survives():
    config = SimulationConfig(guardian_position=-1.0, capture_radius=1.0)
    engine = TurnEngine(config, FixedRandomSource(0.0))

    nxt = engine.run_next_simulation(engine.init_new_simulation(3))

    assert nxt.active_count == 3
    assert nxt.inactive_entities == []


def test_guardian_leaves_single_survivor():
    config = SimulationConfig(guardian_position=0.9, capture_radius=0.5, displacement_scale=1.0)
    engine = TurnEngine(config, FixedRandomSource(0.5))

    nxt = engine.run_next_simulation(engine.init_new_simulation(2))

    assert [e.id for e in nxt.entities] == [2]
    assert nxt.is_finished
    assert nxt.outcome == OUTCOME_SUCCESSFUL


def test_moving_guardian_draws_once_per_turn():
    config = quiet_config(guardian_moves=True, guardian_position=-5.0)
    source = SequenceRandomSource([0.0, 0.5])
    engine = TurnEngine(config, source)

    nxt = engine.run_next_simulation(engine.init_new_simulation(3))

    assert source.calls == 2
    assert nxt.guardian.position == -4.5


# ============================================================================
# Termination
# ============================================================================

def test_iteration_cutoff_fails_run():
    engine = TurnEngine(quiet_config(max_iterations=3), FixedRandomSource(0.0))
    horizon = engine.init_new_simulation(4)

    while not horizon.is_finished:
        horizon = engine.run_next_simulation(horizon)

    assert horizon.iteration_count == 3
    assert horizon.outcome == OUTCOME_FAILED
    assert horizon.active_count == 4


# ============================================================================
# Seeded full runs
# ============================================================================

def run_to_end(engine: TurnEngine, count: int):
    horizon = engine.init_new_simulation(count)
    history = [horizon]
    while not horizon.is_finished:
        horizon = engine.run_next_simulation(horizon)
        history.append(horizon)
    return history


def test_seeded_runs_are_deterministic():
    config = SimulationConfig(max_iterations=2000)

    history_a = run_to_end(TurnEngine(config, UniformRandomSource(12345)), 6)
    history_b = run_to_end(TurnEngine(config, UniformRandomSource(12345)), 6)

    assert len(history_a) == len(history_b)
    assert history_a[-1].to_dict() == history_b[-1].to_dict()


@pytest.mark.parametrize("seed", [1, 7, 2024])
def test_full_run_properties(seed, monkeypatch):
    """Active count never grows, gold is conserved, ids stay unique"""
    monkeypatch.setenv(DEBUG_INVARIANTS_ENV, '1')
    count = 10
    config = SimulationConfig(initial_gold=2.5, max_iterations=3000)

    history = run_to_end(TurnEngine(config, UniformRandomSource(seed)), count)
    final = history[-1]

    for prev, nxt in zip(history, history[1:]):
        assert nxt.active_count <= prev.active_count
        assert nxt.iteration_count == prev.iteration_count + 1
        assert nxt.total_gold() == pytest.approx(count * 2.5)

    merges = sum(1 for h in history[1:] if h.last_turn["merged"])
    eliminated = [i for h in history[1:] for i in h.last_turn["eliminated"]]
    assert merges + len(eliminated) == count - final.active_count, \
        "Every lost active slot comes from one merge or one elimination"
    assert merges + len(eliminated) <= count
    assert eliminated == [e.id for e in final.inactive_entities]
    accounted = set()
    for entity in final.entities + final.inactive_entities:
        assert not (all_ids(entity) & accounted)
        accounted |= all_ids(entity)
    assert accounted <= set(range(1, count + 1))
    assert final.is_finished
    assert final.iteration_count <= config.max_iterations
    print(f"  seed={seed}: {final.iteration_count} turns, outcome={final.outcome}")
