"""
# Output Metrics

This module provides the scalar summaries used to reduce a simulated forest
carbon trajectory (a TimeSeries) to the single number whose variance the
Sobol analysis decomposes.

## Functions

- `max_carbon`: Largest carbon stock reached over the trajectory
- `carbon_at_time`: Carbon stock at the time point nearest a target time

## Classes

- `Metric`: Base metric class with name, output column, and reduction function
- `MaxCarbon`, `CarbonAtTime`: Specific metric implementations

## Example Usage

```python
from forestgrowth_tools.utils.metric import Metric, max_carbon

# Create from name
size = Metric.from_name('max')
at_100 = Metric.from_name('at_time', 100)

# Use metric function directly on a model output
series = model.run(times=range(1, 301), c0=10.0, X={...})
peak = max_carbon(series)
value = at_100.func(series)
```
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Callable


def max_carbon(series: pd.DataFrame, output_name: str = "carbon") -> float:
    """
    Maximum carbon stock over the full trajectory.

    Used as a proxy for the asymptotic (maximum) forest size.

    Args:
        series (pd.DataFrame): TimeSeries with `time` and `output_name` columns.
        output_name (str, optional): Column to reduce. Defaults to "carbon".

    Returns:
        float: Largest value of the column.
    """
    return float(series[output_name].max())


def carbon_at_time(
    series: pd.DataFrame,
    target: float,
    output_name: str = "carbon"
) -> float:
    """
    Carbon stock at the time point nearest `target`.

    Nearest is by absolute difference; if two time points are equally close
    the earlier one (first occurrence) is used.

    Args:
        series (pd.DataFrame): TimeSeries with `time` and `output_name` columns.
        target (float): Time of interest (e.g. 100 years).
        output_name (str, optional): Column to read. Defaults to "carbon".

    Returns:
        float: Column value at the nearest time point.

    Example:
        ```python
        series = pd.DataFrame({'time': [1, 2, 3], 'carbon': [10., 11., 12.]})
        carbon_at_time(series, 2.5)  # 11.0, ties go to the earlier point
        ```
    """
    times = series["time"].to_numpy(dtype=float)
    idx = int(np.argmin(np.abs(times - target)))
    return float(series[output_name].iloc[idx])


@dataclass
class Metric:
    """
    Base class for output metrics.

    Attributes:
        name (str): Unique identifier for the metric, used as the key of the
            metric vector and of the sensitivity results.
        output_name (str): Name of the model output column to reduce.
        func (Callable): Function mapping a TimeSeries to a float.

    Example:
        ```python
        final = Metric(
            name='final_carbon',
            output_name='carbon',
            func=lambda s: float(s['carbon'].iloc[-1])
        )
        ```
    """
    name: str
    output_name: str
    func: Callable

    @staticmethod
    def from_name(metric_name: str, param: float = None) -> "Metric":
        """
        Create a Metric instance from a string identifier.

        Args:
            metric_name (str): Type of metric to create. Supported values:
                - 'max': Maximum carbon over the trajectory (no parameter)
                - 'at_time': Carbon at the time nearest `param`
            param (float, optional): Metric parameter. Required for 'at_time'.

        Returns:
            Metric: Appropriate metric subclass instance.

        Raises:
            ValueError: If metric_name is not recognized or a required
                parameter is missing.
        """
        match metric_name.lower():
            case "max":
                return MaxCarbon()
            case "at_time":
                if param is None:
                    raise ValueError("Metric 'at_time' requires a target time")
                return CarbonAtTime(float(param))
            case _:
                raise ValueError(f"Unknown metric name: {metric_name}")


class MaxCarbon(Metric):
    """
    Maximum carbon stock metric.

    Args:
        output_name (str, optional): Output column. Defaults to "carbon".
        name (str, optional): Metric identifier. Defaults to "max_carbon".
    """
    def __init__(self, output_name: str = "carbon", name: str = "max_carbon"):
        super().__init__(
            name=name,
            output_name=output_name,
            func=lambda series: max_carbon(series, output_name)
        )


class CarbonAtTime(Metric):
    """
    Carbon stock at a fixed time metric.

    Args:
        target (float): Time of interest.
        output_name (str, optional): Output column. Defaults to "carbon".
        name (str, optional): Metric identifier. Defaults to
            "carbon_at_<target>" (e.g. "carbon_at_100").
    """
    def __init__(self, target: float, output_name: str = "carbon", name: str = None):
        self.target = target
        if name is None:
            name = f"{output_name}_at_{target:g}"
        super().__init__(
            name=name,
            output_name=output_name,
            func=lambda series: carbon_at_time(series, target, output_name)
        )
