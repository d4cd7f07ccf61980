"""Monte Carlo propagation of parameter uncertainty with quasi-random sampling.

This module provides the Sim class, which draws parameter sets with a
quasi-random engine (Sobol sequence, Latin Hypercube, Halton) or with plain
pseudo-random numbers, runs one forest growth trajectory per set, and
condenses the ensemble into per-time-point statistics.

Failed runs are left out of the statistics; their indices are recorded in
the returned StatsResults.

Typical usage example:

```python
    from forestgrowth_tools import ForestGrowthModel
    from forestgrowth_tools.montecarlo import MonteCarloConfig, Sim

    config = MonteCarloConfig.from_json("mc_config.json")
    sim = Sim(ForestGrowthModel(), config, engine="latin")
    stats = sim.analyze(sim.run(n=1000))
    Sim.plot_ci(stats, "carbon_ci.png")
```
"""

# Model running
from forestgrowth_tools.model import Model
from forestgrowth_tools.utils.results import StatsResults
from .config import MonteCarloConfig

# Data
import pandas as pd
import numpy as np

# Quasi-random engines
from scipy.stats import qmc

# Typing
from typing import Literal

# Plotting and logging
import matplotlib.pyplot as plt
import logging


ENGINES = {
    "sobol": qmc.Sobol,
    "latin": qmc.LatinHypercube,
    "halton": qmc.Halton,
}


def _stddev(v: np.ndarray) -> np.ndarray:
    return np.std(v, axis=0, ddof=1) if len(v) > 1 else np.zeros(v.shape[1])


STATISTICS = {
    "ci_low": lambda v: np.quantile(v, 0.025, axis=0),
    "ci_high": lambda v: np.quantile(v, 0.975, axis=0),
    "mean": lambda v: np.mean(v, axis=0),
    "stddev": _stddev,
    "stderr": lambda v: _stddev(v) / np.sqrt(len(v)),
    "min_val": lambda v: np.min(v, axis=0),
    "max_val": lambda v: np.max(v, axis=0),
}
"""Per-time-point summaries of an ensemble array of shape (members, times)."""


class Sim:
    """Ensemble runner for the forest growth model.

    Attributes:
        space (dict[str, rv_frozen]): Sampled parameters and their frozen
            scipy distributions, in configuration order.
        model (Model): Model executed for every parameter set.
        config (MonteCarloConfig): Scenario of the ensemble.
        run_kwargs (dict): Keyword arguments of every model run (time grid,
            initial stock, fixed parameters, solver settings).
        seed (int): Seed of `rng` and of the sampling engine.
        rng (np.random.Generator): Generator used for sampling.
        engine (qmc.QMCEngine | None): Quasi-random engine, or None when
            sampling pseudo-randomly.
    """

    def __init__(
        self,
        model: Model,
        config: MonteCarloConfig,
        run_kwargs: dict = None,
        engine_kwargs: dict = None,
        engine: Literal['sobol', 'latin', 'halton', 'random'] = 'sobol',
        **kwargs
    ):
        """Set up the sampling engine and the model run arguments.

        Args:
            model (Model): Model providing run() and run_parallel().
            config (MonteCarloConfig): Distributions, time grid, initial
                stock and fixed parameters.
            run_kwargs (dict, optional): Extra keyword arguments of each run,
                e.g. solver settings.
            engine_kwargs (dict, optional): Extra arguments of the engine
                constructor, e.g. {'scramble': False}.
            engine (str, optional): 'sobol', 'latin', 'halton' or 'random'.
                Defaults to 'sobol'.
            **kwargs: `seed` (int, defaults to 42).
        """
        self.space = config.space.get_search_space()
        self.model: Model = model
        self.config: MonteCarloConfig = config

        self.run_kwargs: dict = dict(run_kwargs or {})
        self.run_kwargs["times"] = config.time.to_array()
        self.run_kwargs["c0"] = config.c0
        if config.parameters:
            self.run_kwargs["params"] = dict(config.parameters)

        self.seed: int = kwargs.get("seed", 42)
        self.rng = np.random.default_rng(self.seed)
        self.engine = self._get_engine(
            engine,
            d=len(self.space),
            rng=self.rng,
            **(engine_kwargs or {})
        )

    @staticmethod
    def _get_engine(engine: str, **kwargs) -> qmc.QMCEngine | None:
        """Engine instance for `engine`, None for 'random'.

        Raises:
            ValueError: If the engine name is unknown.
        """
        if engine == 'random':
            return None
        if engine not in ENGINES:
            raise ValueError(f"Unknown sampling engine: {engine}")
        return ENGINES[engine](**kwargs)

    def _sample_from_space(self, n: int, workers: int = 1) -> list[dict[str, float]]:
        """Draw `n` parameter sets.

        Points of the unit hypercube are mapped onto each parameter with the
        inverse CDF (`ppf`) of its distribution.

        Args:
            n (int): Number of parameter sets. A power of 2 for 'sobol'.
            workers (int, optional): Threads for engines that support it.

        Returns:
            list[dict[str, float]]: One parameter dictionary per draw.

        Raises:
            ValueError: If the Sobol engine is asked for a non power of 2.
        """
        names = list(self.space.keys())

        if self.engine is None:
            unit = self.rng.random((n, len(names)))
        elif isinstance(self.engine, qmc.Sobol):
            if n < 1 or np.log2(n) % 1 != 0:
                raise ValueError(f"Sobol sampling needs a power of 2 samples, got {n}")
            unit = self.engine.random_base2(m=int(np.log2(n)))
        else:
            unit = self.engine.random(n, workers=workers)

        columns = np.column_stack([
            self.space[name].ppf(unit[:, j]) for j, name in enumerate(names)
        ])  # (n, d)

        return [dict(zip(names, map(float, row))) for row in columns]

    def run(
        self,
        n: int = None,
        parallel: bool = True,
        workers: int = None,
        X: dict[str, float] = None
    ) -> list[pd.DataFrame | None]:
        """Run the ensemble.

        Args:
            n (int, optional): Ensemble size. Defaults to config.num_samples.
            parallel (bool, optional): Use the model's thread pool. Defaults
                to True.
            workers (int, optional): Pool size. Defaults to config.num_worker.
            X (dict[str, float], optional): Values added to every parameter
                set. Sampled values win on conflicts.

        Returns:
            list[pd.DataFrame | None]: One trajectory per member, None for
                members whose run failed.
        """
        n = n if n is not None else self.config.num_samples
        workers = workers if workers is not None else self.config.num_worker

        members = self._sample_from_space(n, workers)
        if X:
            members = [{**X, **member} for member in members]

        logging.info(f"Running Monte Carlo ensemble of {n} members.")

        if parallel:
            return self.model.run_parallel(
                X=members,
                workers=workers,
                return_on_fail=True,
                **self.run_kwargs
            )

        outputs = []
        for idx, member in enumerate(members):
            try:
                outputs.append(self.model.run(X=member, **self.run_kwargs))
            except Exception as e:
                logging.error(f"Run for index {idx} failed: {e}")
                outputs.append(None)
        return outputs

    def analyze(
        self,
        results: list[pd.DataFrame | None],
        index_columns: list[str] = ("time",)
    ) -> StatsResults:
        """Summarize the ensemble at every time point.

        Args:
            results (list[pd.DataFrame | None]): Output of `run`. None entries
                are excluded and listed in `StatsResults.excluded`.
            index_columns (list[str], optional): Columns shared by all members
                and copied from the first one instead of summarized. Defaults
                to ("time",).

        Returns:
            StatsResults: One DataFrame per statistic (ci_low and ci_high for
                the 2.5% and 97.5% quantiles, mean, stddev, stderr, min_val,
                max_val), one row per time point.

        Raises:
            ValueError: If no member ran successfully.
        """
        excluded = [i for i, result in enumerate(results) if result is None]
        kept = [result for result in results if result is not None]
        if not kept:
            raise ValueError("No successful runs to analyze")
        if excluded:
            logging.warning(f"Excluding {len(excluded)} failed run(s): {excluded}")

        columns = list(kept[0].columns)
        ensemble = np.stack([result.to_numpy(dtype=float) for result in kept])  # (members, times, columns)

        stats = {}
        for stat, reduce in STATISTICS.items():
            table = {}
            for j, column in enumerate(columns):
                if column in index_columns:
                    table[column] = ensemble[0, :, j]
                else:
                    table[column] = reduce(ensemble[:, :, j])
            stats[stat] = pd.DataFrame(table, columns=columns)

        return StatsResults(stats, excluded=excluded)

    @staticmethod
    def plot_ci(stats: StatsResults, outfile: str, output: str = "carbon"):
        """Plot the ensemble mean and its 95% band over time.

        Args:
            stats (StatsResults): Result of `analyze`.
            outfile (str): PNG file to write.
            output (str, optional): Column to plot. Defaults to "carbon".
        """
        t = stats["mean"]["time"]

        fig, ax = plt.subplots()
        ax.fill_between(
            t,
            stats["ci_low"][output],
            stats["ci_high"][output],
            color="lightblue",
            alpha=0.5,
            label="95% interval"
        )
        ax.plot(t, stats["mean"][output], label="Mean")
        ax.set_title(f"Ensemble spread of {output}")
        ax.set_xlabel("Time (years)")
        ax.set_ylabel(output)
        ax.legend()
        plt.savefig(outfile)
        plt.close(fig)


__all__ = ["Sim"]
