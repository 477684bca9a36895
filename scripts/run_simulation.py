"""
Run horizon simulations from the command line.

Loads data/simulation.yaml (or --config), runs one or more full
simulations for a demo user and prints per-turn summaries plus the
aggregated statistics at the end.
"""

import argparse
import json
import sys
from pathlib import Path

from horizon.driver import SimulationService, print_turn_summary
from horizon.loader import load_config
from horizon.rng import UniformRandomSource, make_seed
from horizon.stats import InMemoryUserStats

DEFAULT_CONFIG = Path(__file__).parent.parent / "data" / "simulation.yaml"


def run(config_path: Path, count: int, runs: int, verbose: bool) -> int:
    config = load_config(config_path)
    stats = InMemoryUserStats()
    stats.register_new_user("demo")

    for run_index in range(runs):
        seed = make_seed(config.seed, "run", run_index)
        service = SimulationService(config, UniformRandomSource(seed), stats)

        if not verbose:
            service.run_full_simulation(count, user_id="demo")
            continue

        # Step manually so every turn can be printed
        horizon = service.init_new_simulation(count)
        while not horizon.is_finished:
            horizon = service.run_next_simulation(horizon)
            print_turn_summary(horizon)
        service.report_run(horizon, "demo")

    print(json.dumps(stats.global_statistics().to_dict(), indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Run horizon creature simulations")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="YAML configuration file")
    parser.add_argument("--count", type=int, default=10, help="Creatures per simulation")
    parser.add_argument("--runs", type=int, default=1, help="Number of full simulations")
    parser.add_argument("--verbose", action="store_true", help="Print a summary line per turn")
    args = parser.parse_args()

    sys.exit(run(args.config, args.count, args.runs, args.verbose))


if __name__ == "__main__":
    main()
