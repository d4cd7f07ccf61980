"""
# Results Management

This module provides data structures for storing, managing, and serializing
sensitivity analysis and Monte Carlo results from the forestgrowth_tools
package.

## Type Aliases

- `EvalResults`: Dictionary mapping metric names to computed scalar values

## Classes

- `SensitivityResult`: First-order and total-effect Sobol indices for one metric
- `SensitivityResults`: Collection of SensitivityResult instances by metric name
- `StatsResults`: Collection of statistical summaries from Monte Carlo simulations

## Example Usage

```python
from forestgrowth_tools.utils.results import SensitivityResults

results = sa.run("results/")
table = results['max_carbon'].to_frame()
print(table[['S1', 'ST']])

results.to_json('indices.json')
```
"""

from dataclasses import dataclass
import pandas as pd
import numpy as np
import json
import os


EvalResults = dict[str, float]
"""Type alias for evaluation results dictionary mapping metric names to values."""


@dataclass
class SensitivityResult:
    """
    Sobol sensitivity indices for a single output metric.

    Indices are in principle in [0, 1], but the Monte Carlo estimator can
    return small negative values (or values slightly above 1) from sampling
    noise. They are reported as estimated, without clipping.

    Attributes:
        names (list[str]): Parameter names, in design column order.
        S1 (np.ndarray): First-order index per parameter.
        ST (np.ndarray): Total-effect index per parameter.
        S1_conf (np.ndarray | None): Bootstrap interval, shape (2, p) with
            lower bounds in row 0 and upper bounds in row 1. None when no
            bootstrap was requested.
        ST_conf (np.ndarray | None): Same as S1_conf for the total effect.
        S1_se (np.ndarray | None): Bootstrap standard error of S1.
        ST_se (np.ndarray | None): Bootstrap standard error of ST.
        conf (float | None): Confidence level of the intervals.
        nboot (int): Number of bootstrap replicates used (0 for none).

    Example:
        ```python
        result = design.analyze(y, nboot=300, rng=np.random.default_rng(0))
        print(result.to_frame().round(3))
        ```
    """
    names: list[str]
    S1: np.ndarray
    ST: np.ndarray
    S1_conf: np.ndarray = None
    ST_conf: np.ndarray = None
    S1_se: np.ndarray = None
    ST_se: np.ndarray = None
    conf: float = None
    nboot: int = 0

    def __getitem__(self, name: str) -> dict[str, float]:
        """Indices for a single parameter as a dictionary."""
        return self.to_frame().loc[name].to_dict()

    def to_frame(self) -> pd.DataFrame:
        """
        Tabulate the indices, one row per parameter.

        Returns:
            pd.DataFrame: Columns S1 and ST, plus S1_low, S1_high, S1_se,
                ST_low, ST_high, ST_se when bootstrap intervals exist.
        """
        data = {"S1": self.S1, "ST": self.ST}
        if self.S1_conf is not None:
            data["S1_low"], data["S1_high"] = self.S1_conf
            data["S1_se"] = self.S1_se
            data["ST_low"], data["ST_high"] = self.ST_conf
            data["ST_se"] = self.ST_se
        return pd.DataFrame(data, index=pd.Index(self.names, name="parameter"))

    def to_dict(self):
        """
        Convert the result to a JSON-serializable dictionary.

        Returns:
            dict: Parameter names, confidence settings, and one list per
                index column.
        """
        out = {
            "names": list(self.names),
            "conf": self.conf,
            "nboot": self.nboot,
        }
        frame = self.to_frame()
        for column in frame.columns:
            out[column] = frame[column].astype(float).tolist()
        return out


class SensitivityResults(dict[str, SensitivityResult]):
    """
    Collection of SensitivityResult instances keyed by metric name.

    Example:
        ```python
        results = SensitivityResults({'max_carbon': result})
        results.save('/results/sa_results/')
        ```
    """

    def to_dict(self):
        """Convert every SensitivityResult to its dictionary form."""
        return {k: v.to_dict() for k, v in self.items()}

    def to_json(self, outfile: str):
        """
        Save the results to a JSON file.

        Args:
            outfile (str): Path to the output JSON file.

        Note:
            Uses the "+x" mode to create a new file, will fail if file already exists.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)

    def save(self, directory: str):
        """
        Save one CSV table per metric, named `<metric>_indices.csv`.

        Args:
            directory (str): Existing directory to write into.
        """
        for name, result in self.items():
            result.to_frame().to_csv(os.path.join(directory, f"{name}_indices.csv"))


class StatsResults(dict[str, pd.DataFrame]):
    """
    Collection of statistical summary DataFrames from Monte Carlo simulations.

    Each key represents a statistic type (mean, ci_low, ...) and each value is
    a DataFrame with one row per time point.

    Attributes:
        excluded (list[int]): Indices of ensemble members left out because
            their run failed.

    Example:
        ```python
        stats = sim.analyze(results, index_columns=['time'])
        stats.save('/results/monte_carlo/')
        print(stats['mean']['carbon'].iloc[-1], stats.excluded)
        ```
    """

    def __init__(self, data: dict = None, excluded: list[int] = None):
        super().__init__(data or {})
        self.excluded = list(excluded or [])

    def save(self, directory: str):
        """
        Save all statistical DataFrames to CSV files in the specified directory.

        Each statistic is saved as a separate CSV file named after its key.

        Args:
            directory (str): Path to the directory where CSV files will be saved.
                The directory must already exist.

        Note:
            - Files are saved without row indices (index=False)
            - Existing files with the same names will be overwritten
        """
        [
            data.to_csv(
                os.path.join(directory, f"{stat}.csv"),
                index=False
            ) for stat, data in self.items()
        ]
