"""
# Metric Configuration

This module provides the configuration class listing the scalar metrics
extracted from every simulated trajectory.

## Classes

- `MetricConfig`: Main configuration class for organizing metrics

## Example Usage

```python
from forestgrowth_tools.config.metric import MetricConfig

# Maximum forest size and carbon stock after 100 years
config = MetricConfig.from_dict({
    'metrics': ['max', 'at_time'],
    'params': [None, 100]
})

for metric in config.metrics:
    print(metric.name)  # max_carbon, carbon_at_100
```
"""

from forestgrowth_tools.utils.metric import Metric, CarbonAtTime
from dataclasses import dataclass


@dataclass
class MetricConfig:
    """
    Configuration for output metrics.

    Attributes:
        metrics (list[Metric]): List of metric instances for evaluation.
    """
    metrics: list[Metric]

    @property
    def names(self) -> list[str]:
        """Metric names in configuration order."""
        return [metric.name for metric in self.metrics]

    @classmethod
    def from_dict(cls, data: dict):
        """
        Create a MetricConfig from a dictionary specification.

        Args:
            data (dict): Configuration dictionary with keys:
                - 'metrics' (list[str]): Metric type names ('max', 'at_time')
                - 'params' (list, optional): Parameter for each metric, None
                  where the metric takes none. Defaults to all None.

        Returns:
            MetricConfig: Configured instance.

        Raises:
            ValueError: If a metric name is unknown or 'params' has the wrong
                length.
        """
        names = data.get("metrics", [])
        params = data.get("params", [None] * len(names))
        if len(params) != len(names):
            raise ValueError(
                f"Got {len(params)} metric params for {len(names)} metrics"
            )
        metrics = [Metric.from_name(m, p) for m, p in zip(names, params)]
        return cls(metrics=metrics)

    def to_dict(self) -> dict:
        """Inverse of `from_dict` for the built-in metrics."""
        names, params = [], []
        for metric in self.metrics:
            if isinstance(metric, CarbonAtTime):
                names.append("at_time")
                params.append(metric.target)
            else:
                names.append("max")
                params.append(None)
        return {"metrics": names, "params": params}
