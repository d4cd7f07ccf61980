"""
# Configuration Management

This module provides configuration classes for managing metrics, parameter
spaces, and time grids used throughout the forestgrowth_tools package.

## Components

- **MetricConfig**: Configuration for the scalar output metrics
- **SpaceConfig**: Configuration for parameter sampling spaces and distributions
- **TimeGrid**: Output time points of a simulation

## Example Usage

```python
from forestgrowth_tools.config import MetricConfig, SpaceConfig, TimeGrid
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS

metric_config = MetricConfig.from_dict({
    'metrics': ['max', 'at_time'],
    'params': [None, 100]
})

space_config = SpaceConfig.from_dict(DISTRIBUTIONS, {
    'r': ['normal', [0.01, 0.001]],
    'g': ['normal', [2.0, 0.2]]
})

times = TimeGrid(start=1, end=300, step=1).to_array()
```
"""

from .metric import *
from .space import *
from .time import *
