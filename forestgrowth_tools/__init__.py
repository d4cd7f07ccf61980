"""
# Forest Growth Tools

A toolkit for the two-regime forest carbon growth model and its global
sensitivity analysis, providing functionality for:

- **Model Interface**: The forest growth ODE and a solver-backed model runner
- **Sensitivity Analysis**: Sobol first-order and total-effect indices with
  bootstrap confidence intervals
- **Monte Carlo Simulations**: Propagation of parameter uncertainty into
  carbon trajectories
- **Configuration Management**: Parameter spaces, metrics and time grids
- **Results Analysis**: Data structures for saving and tabulating outputs

## Main Components

- `ParameterSet`, `forest_growth`: Model parameters and derivative
- `ForestGrowthModel`: Runs the model for one or many parameter sets
- `sa`: Sobol sensitivity analysis
- `montecarlo`: Monte Carlo simulation framework
- `config`: Configuration management
- `utils`: Metrics, distributions, and results handling

## Example Usage

```python
from forestgrowth_tools import ForestGrowthModel
from forestgrowth_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

config = SensitivityAnalysisConfig.reference(samples=1000, nboot=300)
sa = SensitivityAnalysis(ForestGrowthModel(), config)
results = sa.run("sa_output/")

print(results['max_carbon'].to_frame())
```
"""

from .exceptions import *
from .model import *
