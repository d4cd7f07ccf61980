"""
# Sensitivity Analysis

This module provides variance-based (Sobol) global sensitivity analysis of
the forest growth model.

## Components

- `SensitivityAnalysis`: End-to-end driver (sample, simulate, reduce, estimate)
- `SensitivityAnalysisConfig`: Scenario configuration
- `SobolDesign`: Saltelli cross-sampling design and index computation
- `sample_ensembles`: Independent random draws of the two base ensembles
- `sobol_indices`, `bootstrap_indices`: First-order and total-effect estimators

## Example Usage

```python
from forestgrowth_tools import ForestGrowthModel
from forestgrowth_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig

config = SensitivityAnalysisConfig.reference(samples=1000, nboot=300)
sa = SensitivityAnalysis(ForestGrowthModel(), config)
results = sa.run('sa_output/')

first_order = results['max_carbon'].S1
total_order = results['max_carbon'].ST
```
"""

from .sa import SensitivityAnalysis
from .config import SensitivityAnalysisConfig, REFERENCE_PARAMETERS
from .design import SobolDesign
from .sampler import sample_ensembles
from .estimator import sobol_indices, bootstrap_indices
