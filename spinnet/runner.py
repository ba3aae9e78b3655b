"""Compare simulated annealing against exhaustive search on random instances."""
from __future__ import annotations

import argparse
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

import numpy as np
from tqdm import tqdm

from .algorithms.exact import find_all_ground_states
from .algorithms.simulated_annealing import SimulatedAnnealingConfig, SimulatedAnnealingRunner
from .errors import ConfigurationError
from .observables import ObservableEvaluator, SolverObservables
from .problems import BetheProblem, IsingProblem, LatticeProblem

logger = logging.getLogger(__name__)


@dataclass
class RunnerConfig:
    problem: str = "lattice"
    N: int = 12
    rows: int = 3
    cols: int = 4
    degree: int = 2
    field_scale: float = 0.0
    reps: int = 10
    seed0: int = 42
    initial_temperature: float = 10.0
    final_temperature: float = 0.05
    sweeps_per_temperature: int = 1
    temperature_steps: int = 200
    parallel: bool = False
    parallel_workers: Optional[int] = None
    progress: bool = True


@dataclass
class ComparisonResult:
    """Per-instance observables and their aggregates."""

    residual: np.ndarray
    hit_fraction: np.ndarray
    mean_residual: float
    ci95_residual: float
    mean_hit_fraction: float
    output_file: Optional[Path] = None


PROBLEM_CONSTRUCTORS: Dict[str, Callable[[RunnerConfig, int], IsingProblem]] = {
    "lattice": lambda config, seed: LatticeProblem(
        config.rows, config.cols, seed=seed, field_scale=config.field_scale
    ),
    "bethe": lambda config, seed: BetheProblem(config.N, degree=config.degree, seed=seed),
}


def _evaluate_instance(args: tuple[RunnerConfig, int]) -> SolverObservables:
    """Solve one instance both ways; runs inside worker processes as well."""

    config, rep = args
    seed = int(config.seed0 + rep)
    hamiltonian = PROBLEM_CONSTRUCTORS[config.problem](config, seed).build_hamiltonian()

    exact = find_all_ground_states(hamiltonian)
    annealer = SimulatedAnnealingRunner(
        SimulatedAnnealingConfig(
            initial_temperature=config.initial_temperature,
            final_temperature=config.final_temperature,
            sweeps_per_temperature=config.sweeps_per_temperature,
            temperature_steps=config.temperature_steps,
            seed=seed,
        )
    )
    annealed = annealer.run(hamiltonian)
    return ObservableEvaluator().compute(hamiltonian, exact, annealed)


class ComparisonRunner:

    def __init__(self, config: RunnerConfig) -> None:
        if config.problem.lower() not in PROBLEM_CONSTRUCTORS:
            raise ConfigurationError(f"Unknown problem '{config.problem}'")
        if config.reps <= 0:
            raise ConfigurationError("reps must be positive")
        config.problem = config.problem.lower()
        self.config = config

    def run(
        self,
        output_dir: Path | None = None,
        *,
        save: bool = False,
        filename: str | None = None,
    ) -> ComparisonResult:
        """Evaluate ``reps`` instances and optionally persist the observables."""

        cfg = self.config
        tasks = [(cfg, rep) for rep in range(cfg.reps)]

        if cfg.parallel:
            with ProcessPoolExecutor(max_workers=cfg.parallel_workers) as executor:
                results = list(
                    tqdm(
                        executor.map(_evaluate_instance, tasks),
                        total=cfg.reps,
                        desc="instances",
                        disable=not cfg.progress,
                    )
                )
        else:
            results = [
                _evaluate_instance(task)
                for task in tqdm(tasks, desc="instances", disable=not cfg.progress)
            ]

        residual = np.asarray([r.residual_energy for r in results], dtype=float)
        hits = np.asarray([r.hit_fraction for r in results], dtype=float)
        result = ComparisonResult(
            residual=residual,
            hit_fraction=hits,
            mean_residual=float(residual.mean()),
            ci95_residual=float(1.96 * residual.std() / np.sqrt(cfg.reps)),
            mean_hit_fraction=float(hits.mean()),
        )
        logger.info(
            "%s: mean residual %.4g ± %.2g, ground states hit %.1f%%",
            cfg.problem,
            result.mean_residual,
            result.ci95_residual,
            100.0 * result.mean_hit_fraction,
        )

        if save:
            target_dir = (
                output_dir
                if output_dir is not None
                else Path.cwd() / "results" / "comparison"
            )
            target_dir.mkdir(parents=True, exist_ok=True)
            default_filename = (
                f"compare_{cfg.problem}_reps{cfg.reps}_steps{cfg.temperature_steps}_"
                f"T{cfg.initial_temperature}-{cfg.final_temperature}.npz"
            )
            output_path = target_dir / (filename or default_filename)
            np.savez(
                output_path,
                residual=residual,
                hit_fraction=hits,
                problem=cfg.problem,
            )
            result.output_file = output_path

        return result


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    defaults = RunnerConfig()
    for item in fields(RunnerConfig):
        value = getattr(defaults, item.name)
        flag = "--" + item.name.replace("_", "-")
        if isinstance(value, bool):
            parser.add_argument(flag, action=argparse.BooleanOptionalAction, default=value)
        elif item.name == "parallel_workers":
            parser.add_argument(flag, type=int, default=value)
        else:
            parser.add_argument(flag, type=type(value), default=value)
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--save", action="store_true", help="Write an .npz summary.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    config = RunnerConfig(**{item.name: getattr(args, item.name) for item in fields(RunnerConfig)})
    result = ComparisonRunner(config).run(output_dir=args.output_dir, save=args.save)
    print(
        f"residual energy {result.mean_residual:.4g} ± {result.ci95_residual:.2g}, "
        f"ground states hit {100.0 * result.mean_hit_fraction:.1f}%"
    )
    if result.output_file is not None:
        print(f"saved to {result.output_file}")


__all__ = [
    "ComparisonRunner",
    "ComparisonResult",
    "RunnerConfig",
    "PROBLEM_CONSTRUCTORS",
    "main",
]


if __name__ == "__main__":
    main()
