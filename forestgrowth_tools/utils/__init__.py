"""
# Utilities

This module provides utility functions and classes for working with output
metrics, parameter distributions, and results management in the
forestgrowth_tools package.

## Components

- **metric**: Reductions of a carbon trajectory to a scalar output
- **distributions**: SciPy distribution factories for parameter uncertainty
- **results**: Data structures for storing and saving analysis results

## Example Usage

```python
from forestgrowth_tools.utils.metric import Metric, max_carbon
from forestgrowth_tools.utils.distributions import normal
from forestgrowth_tools.utils.results import SensitivityResults

peak = max_carbon(series)
r_dist = normal(mean=0.01, sd=0.001)
```
"""
