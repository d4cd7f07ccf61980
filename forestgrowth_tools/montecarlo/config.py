"""Scenario configuration of the Monte Carlo ensemble.

This module provides the configuration for propagating parameter
uncertainty through the forest growth model: the parameter distributions,
the fixed parameters, the time grid and initial stock, and execution
settings. It supports serialization to and from JSON format.

Typical usage example:

    from forestgrowth_tools.montecarlo import MonteCarloConfig

    config = MonteCarloConfig.from_json("mc_config.json")
    config.num_samples = 2048
    config.to_json("updated_config.json")
"""

from ..config.space import SpaceConfig
from ..config.time import TimeGrid
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS

import json
from dataclasses import dataclass, asdict, field


@dataclass
class MonteCarloConfig:
    """Scenario of a Monte Carlo ensemble.

    Attributes:
        space (SpaceConfig): Distributions of the uncertain parameters.
        time (TimeGrid): Output time points of every simulation.
        c0 (float): Initial carbon stock (kg C). Defaults to 10.0.
        parameters (dict[str, float]): Fixed values for parameters that are
            not sampled. Sampled values take precedence. Defaults to {}.
        num_worker (int): Number of parallel workers to use during simulation
            execution. Defaults to 4.
        num_samples (int): Number of Monte Carlo samples to generate during
            simulation. Defaults to 128.

    Example:
        ```python
        config = MonteCarloConfig(
            space=SpaceConfig.normal_around({'r': 0.01, 'K': 250.0}),
            time=TimeGrid(start=1, end=300, step=1),
            parameters={'g': 2.0, 'threshold': 50.0},
            num_samples=1024
        )
        config.to_json("mc_config.json")
        ```
    """

    space: SpaceConfig = None
    time: TimeGrid = None
    c0: float = 10.0
    parameters: dict[str, float] = field(default_factory=dict)
    num_worker: int = 4
    num_samples: int = 128

    @classmethod
    def from_json(cls, infile: str):
        """Load an ensemble scenario written by `to_json`.

        The "space" entry maps parameter names to [distribution, arguments]
        pairs (see `DISTRIBUTIONS`) and "time" holds the `TimeGrid` fields.

        Raises:
            FileNotFoundError: If `infile` is missing.
            ValueError: If a distribution name is unknown.
        """
        with open(infile, "r") as f:
            data = json.load(f)

        data['space'] = SpaceConfig.from_dict(DISTRIBUTIONS, data['space'])
        data['time'] = TimeGrid(**data['time'])
        return cls(**data)

    def to_json(self, outfile: str):
        """Write the scenario to `outfile`, which must not exist yet.

        Raises:
            FileExistsError: If `outfile` already exists.
        """
        data = {
            "space": self.space.to_dict(),
            "time": asdict(self.time),
            "c0": self.c0,
            "parameters": dict(self.parameters),
            "num_worker": self.num_worker,
            "num_samples": self.num_samples,
        }
        with open(outfile, "+x") as f:
            json.dump(data, f)
