"""
# Model Interface and Forest Growth Implementation

This module provides the abstract model interface and the two-regime forest
carbon growth model. Forest size is measured in kg of carbon (C). Below the
canopy closure threshold the forest grows exponentially; at or above it
growth slows as the stock approaches the carrying capacity.

## Classes

- `ParameterSet`: One immutable point in parameter space (r, g, K, threshold)
- `Model`: Abstract base class defining the interface for all models
- `ForestGrowthModel`: Concrete implementation integrating the forest growth ODE

## Functions

- `forest_growth`: Instantaneous derivative dC/dt of the forest carbon stock

## Key Features

- **Parallel Execution**: Order-preserving thread pool over many parameter sets
- **Flexible Configuration**: Customizable run and evaluation parameters
- **Metric Evaluation**: Reduction of each trajectory to scalar metrics

## Example Usage

```python
from forestgrowth_tools import ForestGrowthModel
from forestgrowth_tools.config import MetricConfig, TimeGrid

model = ForestGrowthModel(
    run_kwargs={
        'times': TimeGrid(start=1, end=300, step=1).to_array(),
        'c0': 10.0,
    }
)

# Run single simulation
series = model.run(X={'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0},
                   **model.run_kwargs)

# Run parallel simulations
param_sets = [
    {'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0},
    {'r': 0.012, 'g': 1.8, 'K': 240.0, 'threshold': 45.0},
]
results = model.run_parallel(X=param_sets, workers=4, **model.run_kwargs)
```
"""

# Basic data utils
import pandas as pd
import numpy as np
from typing import Callable, Any
from numpy.typing import ArrayLike
from abc import abstractmethod, ABC
from dataclasses import dataclass, asdict, fields
from functools import partial

# Integration
from scipy.integrate import solve_ivp

# Metrics and errors
from forestgrowth_tools.config import MetricConfig
from forestgrowth_tools.utils.results import EvalResults
from forestgrowth_tools.exceptions import (
    ForestGrowthError,
    IntegrationFailure,
    InvalidParameter
)

# Parallel runs
import logging
from tqdm import tqdm
from concurrent.futures import ThreadPoolExecutor, as_completed


@dataclass(frozen=True)
class ParameterSet:
    """
    One sampled point in the forest growth parameter space.

    Attributes:
        r (float): Early exponential growth rate (1/year).
        g (float): Linear growth rate once canopy closure is reached (kg C/year).
        K (float): Carrying capacity (kg C).
        threshold (float): Canopy closure threshold (kg C).

    Example:
        ```python
        params = ParameterSet(r=0.01, g=2.0, K=250.0, threshold=50.0)
        params = ParameterSet.from_dict({'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0})
        ```
    """
    r: float
    g: float
    K: float
    threshold: float

    @classmethod
    def names(cls) -> list[str]:
        """Parameter names in field order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> "ParameterSet":
        """
        Build a ParameterSet from a mapping of parameter values.

        Args:
            data (dict[str, float]): Must contain every parameter name. Extra
                keys are ignored.

        Returns:
            ParameterSet: Values converted to float.

        Raises:
            InvalidParameter: If a parameter is missing.
        """
        missing = [name for name in cls.names() if name not in data]
        if missing:
            raise InvalidParameter(f"Missing parameter(s): {missing}")
        return cls(**{name: float(data[name]) for name in cls.names()})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    def validate(self) -> "ParameterSet":
        """
        Check that the model can be evaluated with this parameter set.

        Non-finite values and non-positive carrying capacities are rejected.
        A non-positive threshold is accepted: the model is then in its
        saturating phase from the first time point.

        Returns:
            ParameterSet: self, for chaining.

        Raises:
            InvalidParameter: If the parameter set is outside the model domain.
        """
        for name, value in self.to_dict().items():
            if not np.isfinite(value):
                raise InvalidParameter(f"Parameter {name} is not finite: {value}")
        if self.K <= 0:
            raise InvalidParameter(f"Carrying capacity K must be positive, got {self.K}")
        return self


def forest_growth(t: float, C: float, params: ParameterSet) -> float:
    """
    Derivative of the forest carbon stock.

    `C < threshold` is the exponential phase, `dC/dt = r * C`. `C >= threshold`
    is the saturating phase, `dC/dt = g * (1 - C / K)`.

    Args:
        t (float): Time since start. Unused, accepted for solver compatibility.
        C (float): Current forest size (kg C).
        params (ParameterSet): Model parameters.

    Returns:
        float: dC/dt (kg C/year).
    """
    if C < params.threshold:
        return params.r * C
    return params.g * (1 - C / params.K)


class Model(ABC):
    """
    Abstract base class for simulation models.

    This class defines the interface that all models must implement, providing
    a standardized way to run simulations and reduce their outputs to metrics.

    Attributes:
        run_kwargs (dict): Keyword arguments passed to model execution methods.
        eval_kwargs (dict): Keyword arguments passed to model evaluation methods.
    """
    def __init__(
            self,
            run_kwargs: dict = None,
            eval_kwargs: dict = None,
    ):
        """
        Initialize the Model instance.

        Args:
            run_kwargs (dict, optional): Keyword arguments for model execution.
                Defaults to None.
            eval_kwargs (dict, optional): Keyword arguments for model evaluation.
                Defaults to None.
        """
        self.run_kwargs = run_kwargs or {}
        self.eval_kwargs = eval_kwargs or {}

    @staticmethod
    @abstractmethod
    def run_parallel(X: list[dict[str, Any]] = None, *args, **kwargs) -> list[ArrayLike | None]:
        """
        Execute the model with multiple parameter sets in parallel.

        Args:
            X (list[dict[str, Any]], optional): List of parameter dictionaries.
            *args: Variable length argument list passed to individual model runs.
            **kwargs: Arbitrary keyword arguments passed to individual model runs.

        Returns:
            list[ArrayLike | None]: List of model outputs, one per parameter set,
                in the same order as `X`.
        """
        pass

    @staticmethod
    @abstractmethod
    def run(X: dict[str, Any] = None, *args, **kwargs) -> ArrayLike | None:
        """
        Execute the model with a single parameter set.

        Args:
            X (dict[str, Any], optional): Dictionary of parameter values.
            *args: Variable length argument list for additional model inputs.
            **kwargs: Arbitrary keyword arguments for model configuration.

        Returns:
            ArrayLike | None: Model output (e.g. a pandas DataFrame time series).
        """
        pass

    @staticmethod
    @abstractmethod
    def integrate(*args, **kwargs) -> ArrayLike:
        """
        Low-level model execution method, called by `run`.

        Returns:
            ArrayLike: Raw model output.
        """
        pass

    @staticmethod
    @abstractmethod
    def evaluate_model(*args, **kwargs) -> EvalResults:
        """
        Reduce a model output to named scalar metrics.

        Returns:
            EvalResults: Dictionary mapping metric names to computed values.
        """
        pass

    def get_objective(
        self
    ) -> Callable:
        """
        Create a partial function for model execution with predefined kwargs.

        Returns:
            Callable: Partial function with run_kwargs applied to the run method.

        Example:
            ```python
            model = ForestGrowthModel(run_kwargs={'times': times, 'c0': 10.0})
            objective = model.get_objective()
            series = objective(X={'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0})
            ```
        """
        return partial(
            self.run,
            **self.run_kwargs
        )


class ForestGrowthModel(Model):
    """
    Two-regime forest carbon growth model integrated with SciPy.

    Each run integrates `forest_growth` from `c0` at `times[0]` over the
    requested time points and returns the trajectory as a DataFrame with
    columns `time` and `carbon`.

    Attributes:
        run_kwargs (dict): Arguments for model execution. Expected keys:
            - 'times': strictly increasing output time points
            - 'c0': initial carbon stock (kg C)
            - 'params': optional base parameter values overridden by X
            - 'method', 'rtol', 'atol': solver settings
        eval_kwargs (dict): Arguments for model evaluation (unused by default).

    Example:
        ```python
        model = ForestGrowthModel(run_kwargs={'times': np.arange(1, 301), 'c0': 10.0})
        series = model.get_objective()(
            X={'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0}
        )
        print(series['carbon'].max())
        ```
    """
    def __init__(
            self,
            run_kwargs: dict = None,
            eval_kwargs: dict = None
    ):
        super().__init__(run_kwargs=run_kwargs, eval_kwargs=eval_kwargs)

    @staticmethod
    def run_parallel(
        times: ArrayLike,
        c0: float,
        workers: int = 4,
        X: list[dict[str, float]] = None,
        return_on_fail: bool = False,
        progress: bool = True,
        **kwargs
    ) -> list[pd.DataFrame | None]:
        """
        Execute forest growth runs in parallel for multiple parameter sets.

        Runs are submitted to a ThreadPoolExecutor and written back into the
        slot of their parameter set, so the output order always matches `X`.
        Progress is tracked with a progress bar.

        Args:
            times (ArrayLike): Output time points, strictly increasing.
            c0 (float): Initial carbon stock (kg C).
            workers (int, optional): Number of concurrent worker threads.
                Defaults to 4.
            X (list[dict[str, float]], optional): List of parameter dictionaries.
            return_on_fail (bool, optional): If True, failed runs are returned
                as None in their slot. If False, the whole batch fails once all
                runs have completed. Defaults to False.
            progress (bool, optional): Show a tqdm progress bar. Defaults to True.
            **kwargs: Additional keyword arguments passed to individual run() calls.

        Returns:
            list[pd.DataFrame | None]: One TimeSeries per parameter set.

        Raises:
            InvalidParameter, IntegrationFailure: The lowest-index failure, when
                any run fails and return_on_fail is False. Every failure is
                logged with its index.
        """

        N = len(X)
        res = [None for _ in range(N)]  # Ensure that we have an accessible index
        failures = {}

        pbar = tqdm(total=N, disable=not progress)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(
                    ForestGrowthModel.run,
                    times,
                    c0,
                    X=X[i],
                    **kwargs
                ):
                i for i in range(N)  # Store corresponding sample number
            }

            for future in as_completed(futures):
                pbar.update(1)
                idx = futures[future]
                try:
                    res[idx] = future.result()
                except ForestGrowthError as e:
                    e.index = idx
                    failures[idx] = e
                except Exception as e:
                    err = IntegrationFailure(str(e), index=idx)
                    err.__cause__ = e
                    failures[idx] = err

        pbar.close()

        for idx in sorted(failures):
            logging.error(f"Run for index {idx} failed: {failures[idx]}")

        if failures and not return_on_fail:
            logging.error(f"{len(failures)} of {N} runs failed, aborting batch.")
            raise failures[min(failures)]

        return res

    @staticmethod
    def run(
        times: ArrayLike,
        c0: float,
        X: dict[str, float] = None,
        params: dict[str, float] = None,
        **kwargs
    ) -> pd.DataFrame:
        """
        Execute a single forest growth run.

        Args:
            times (ArrayLike): Output time points, strictly increasing. The
                initial stock is applied at times[0].
            c0 (float): Initial carbon stock (kg C).
            X (dict[str, float], optional): Sampled parameter values. Take
                precedence over `params`.
            params (dict[str, float], optional): Base parameter values.
            **kwargs: Solver settings passed to integrate() ('method', 'rtol',
                'atol').

        Returns:
            pd.DataFrame: TimeSeries with columns `time` and `carbon`.

        Raises:
            InvalidParameter: If the merged parameters are missing or invalid.
            IntegrationFailure: If the solver fails.
        """
        values = dict(params or {})

        # Overwrite base parameters with sample params if X is provided
        if X is not None:
            values.update(X)

        parameter_set = ParameterSet.from_dict(values).validate()

        carbon = ForestGrowthModel.integrate(
            parameter_set,
            times=times,
            c0=c0,
            **kwargs
        )

        return pd.DataFrame({"time": np.asarray(times, dtype=float), "carbon": carbon})

    @staticmethod
    def integrate(
        params: ParameterSet,
        times: ArrayLike,
        c0: float,
        method: str = "LSODA",
        rtol: float = 1e-6,
        atol: float = 1e-8,
        derivative: Callable = forest_growth
    ) -> np.ndarray:
        """
        Integrate the derivative over the requested time points.

        Args:
            params (ParameterSet): Model parameters, passed explicitly to the
                derivative on every evaluation.
            times (ArrayLike): Strictly increasing output time points.
            c0 (float): State at times[0].
            method (str, optional): solve_ivp method. Defaults to "LSODA".
            rtol (float, optional): Relative tolerance. Defaults to 1e-6.
            atol (float, optional): Absolute tolerance. Defaults to 1e-8.
            derivative (Callable, optional): Function of (t, C, params).
                Defaults to `forest_growth`.

        Returns:
            np.ndarray: Carbon stock at each time point, same length as `times`.

        Raises:
            ValueError: If `times` has fewer than two points or is not
                strictly increasing.
            IntegrationFailure: If the solver reports failure or the state
                is not finite.
        """
        times = np.asarray(times, dtype=float)
        if times.ndim != 1 or times.size < 2:
            raise ValueError("At least two time points are required")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Time points must be strictly increasing")

        sol = solve_ivp(
            fun=lambda t, y: [derivative(t, y[0], params)],
            t_span=(times[0], times[-1]),
            y0=[float(c0)],
            method=method,
            t_eval=times,
            rtol=rtol,
            atol=atol,
        )

        if not sol.success:
            raise IntegrationFailure(f"solve_ivp({method}) failed: {sol.message}")

        carbon = sol.y[0]
        if carbon.shape[0] != times.shape[0]:
            raise IntegrationFailure(
                f"solve_ivp({method}) returned {carbon.shape[0]} of {times.shape[0]} points"
            )
        if not np.all(np.isfinite(carbon)):
            raise IntegrationFailure(f"Non-finite carbon stock for {params}")

        return carbon

    @staticmethod
    def evaluate_model(
        output: pd.DataFrame | None,
        metric_config: MetricConfig
    ) -> EvalResults:
        """
        Reduce a trajectory to the configured scalar metrics.

        Args:
            output (pd.DataFrame | None): TimeSeries returned by run(). None
                (an excluded run) gives NaN for every metric.
            metric_config (MetricConfig): Metrics to compute.

        Returns:
            EvalResults: Dictionary mapping metric names to values.

        Example:
            ```python
            metric_config = MetricConfig.from_dict({
                'metrics': ['max', 'at_time'],
                'params': [None, 100]
            })
            values = ForestGrowthModel.evaluate_model(series, metric_config)
            print(values['max_carbon'], values['carbon_at_100'])
            ```
        """
        values = {}
        for metric in metric_config.metrics:
            if output is None:
                values[metric.name] = np.nan
            else:
                values[metric.name] = metric.func(output)

        return values


__all__ = [
    "ParameterSet",
    "forest_growth",
    "Model",
    "ForestGrowthModel",
]
