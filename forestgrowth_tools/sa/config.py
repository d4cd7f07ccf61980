"""Configuration classes for sensitivity analysis settings.

This module provides the scenario configuration of a Sobol sensitivity
analysis of the forest growth model: the parameter distributions, the
metrics, the simulation time grid and initial stock, and the sampling and
bootstrap settings. It supports serialization to and from JSON format for
easy persistence and loading of sensitivity analysis configurations.

Typical usage example:

    from forestgrowth_tools.sa import SensitivityAnalysisConfig

    config = SensitivityAnalysisConfig.from_json("sa_config.json")
    config.samples = 2000
    config.to_json("updated_sa_config.json")

A configuration file looks like:

    {
        "space": {
            "r": ["normal", [0.01, 0.001]],
            "g": ["normal", [2.0, 0.2]],
            "K": ["normal", [250.0, 25.0]],
            "threshold": ["normal", [50.0, 5.0]]
        },
        "metric": {"metrics": ["max", "at_time"], "params": [null, 100]},
        "time": {"start": 1, "end": 300, "step": 1},
        "c0": 10.0,
        "samples": 1000,
        "nboot": 300
    }
"""

from dataclasses import dataclass, asdict, field, fields
from ..config.metric import MetricConfig
from ..config.space import SpaceConfig
from ..config.time import TimeGrid
from ..utils.distributions import DISTRIBUTIONS
from .design import SCHEMES
from .sampler import POLICIES
import json


REFERENCE_PARAMETERS = {"r": 0.01, "g": 2.0, "K": 250.0, "threshold": 50.0}
"""Parameter means of the reference forest growth scenario."""


@dataclass
class SensitivityAnalysisConfig:
    """Configuration class for sensitivity analysis execution settings.

    Attributes:
        space (SpaceConfig): Marginal distribution of every sampled parameter.
            Its order is the column order of the design.
        metric (MetricConfig): Scalar metrics whose variance is decomposed.
        time (TimeGrid): Output time points of every simulation.
        c0 (float): Initial carbon stock (kg C).
        samples (int): Base sample size N of each ensemble.
        nboot (int): Bootstrap replicates for confidence intervals (0 to
            disable).
        conf (float): Confidence level of the bootstrap intervals.
        workers (int): Number of parallel workers used to run the model.
        seed (int): Seed of the random generator (sampling and bootstrap).
        scheme (str): Design scheme, "A" (N(p+2) rows) or "B" (N(2p+2) rows).
        policy (str): Handling of non-positive draws ("accept", "resample",
            "clamp").
        parameters (dict[str, float]): Fixed values for model parameters that
            are not in `space`.
        solver (dict): Extra solver settings ('method', 'rtol', 'atol').

    Example:
        ```python
        config = SensitivityAnalysisConfig.reference()
        config.samples = 500
        sa = SensitivityAnalysis(ForestGrowthModel(), config)
        ```
    """

    space: SpaceConfig
    metric: MetricConfig
    time: TimeGrid
    c0: float
    samples: int = 1000
    nboot: int = 0
    conf: float = 0.95
    workers: int = 4
    seed: int = 42
    scheme: str = "A"
    policy: str = "accept"
    parameters: dict[str, float] = field(default_factory=dict)
    solver: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.scheme not in SCHEMES:
            raise ValueError(f"Unknown design scheme: {self.scheme}")
        if self.policy not in POLICIES:
            raise ValueError(f"Unknown sampling policy: {self.policy}")
        if self.samples < 2:
            raise ValueError(f"samples must be at least 2, got {self.samples}")
        if self.nboot < 0:
            raise ValueError(f"nboot must be non-negative, got {self.nboot}")

    @classmethod
    def reference(cls, samples: int = 1000, nboot: int = 300, **kwargs):
        """The reference scenario of the forest growth analysis.

        r = 0.01, g = 2, K = 250, threshold = 50 with a 10% relative standard
        deviation each, C0 = 10, yearly output from t = 1 to 300, and the
        maximum carbon and carbon at t = 100 metrics.

        Args:
            samples (int, optional): Base sample size. Defaults to 1000.
            nboot (int, optional): Bootstrap replicates. Defaults to 300.
            **kwargs: Overrides for any other field.

        Returns:
            SensitivityAnalysisConfig: The reference configuration.
        """
        return cls(
            space=SpaceConfig.normal_around(REFERENCE_PARAMETERS, rel_sd=0.1),
            metric=MetricConfig.from_dict({
                "metrics": ["max", "at_time"],
                "params": [None, 100]
            }),
            time=TimeGrid(start=1, end=300, step=1),
            c0=10.0,
            samples=samples,
            nboot=nboot,
            **kwargs
        )

    @classmethod
    def from_dict(cls, data: dict):
        """Create an instance from its dictionary (JSON) form.

        Converts the nested 'space', 'metric' and 'time' entries into their
        configuration classes.
        """
        data = dict(data)
        data['space'] = SpaceConfig.from_dict(DISTRIBUTIONS, data['space'])
        data['metric'] = MetricConfig.from_dict(data['metric'])
        data['time'] = TimeGrid(**data['time'])
        return cls(**data)

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['space'] = self.space.to_dict()
        data['metric'] = self.metric.to_dict()
        data['time'] = asdict(self.time)
        data['parameters'] = dict(self.parameters)
        data['solver'] = dict(self.solver)
        return data

    @classmethod
    def from_json(cls, infile: str):
        """Create a SensitivityAnalysisConfig instance from a JSON file.

        Args:
            infile (str): Path to the JSON file containing the configuration.

        Returns:
            SensitivityAnalysisConfig: A new instance initialized with data
                from the file.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            KeyError: If required configuration keys are missing from the JSON.
            ValueError: If a distribution, metric, scheme or policy is unknown.
        """

        with open(infile, "r") as f:
            data = json.load(f)

        return cls.from_dict(data)

    def to_json(self, outfile: str):
        """Serialize the configuration to a JSON file.

        Args:
            outfile (str): Path to the output file where the JSON will be saved.

        Raises:
            FileExistsError: If the specified file already exists.

        Note:
            The file is opened in exclusive creation mode ("+x") to prevent
            accidental overwrites.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)
