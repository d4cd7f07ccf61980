"""
# Monte Carlo Simulations

This module provides functionality for propagating parameter uncertainty
through the forest growth model and summarizing the resulting ensemble of
carbon trajectories.

## Components

- `Sim`: Main simulation class for running Monte Carlo experiments
- `MonteCarloConfig`: Configuration for Monte Carlo simulations

## Example Usage

```python
from forestgrowth_tools.montecarlo import Sim, MonteCarloConfig
from forestgrowth_tools import ForestGrowthModel

config = MonteCarloConfig.from_json('mc_config.json')

sim = Sim(
    model=ForestGrowthModel(),
    config=config,
    engine='sobol',  # Quasi-random sampling
    seed=42
)

results = sim.run(n=1024, parallel=True, workers=8)

stats = sim.analyze(results, index_columns=['time'])
stats.save('/path/to/results/')
```
"""

from .sim import *
from .config import *
