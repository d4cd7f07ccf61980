"""
# Parameter Distributions

Factories for the probability distributions that describe uncertainty in the
forest growth parameters. Each factory returns a frozen `scipy.stats`
distribution, which provides `rvs` for the random Sobol ensembles and `ppf`
for mapping quasi-random Monte Carlo points onto a parameter.

## Functions

- `normal`: Untruncated normal, the reference choice for every parameter
- `positive_normal`: Normal restricted to an interval, positive by default
- `uniform_between`: Uniform over a closed interval

## Constants

- `DISTRIBUTIONS`: Configuration name to factory, as used in space configs

## Example Usage

```python
from forestgrowth_tools.utils.distributions import normal
import numpy as np

# Growth rate with a 10% relative standard deviation
r_dist = normal(mean=0.01, sd=0.001)
draws = r_dist.rvs(size=1000, random_state=np.random.default_rng(42))
```
"""

from scipy.stats import norm, truncnorm, uniform


def normal(mean=0.0, sd=1.0):
    """Normal distribution with the given mean and standard deviation."""
    return norm(loc=mean, scale=sd)


def positive_normal(mean=0.0, sd=1.0, lower=1e-12, upper=1e12):
    """
    Normal distribution truncated to `[lower, upper]`.

    A drop-in replacement for `normal` on carrying capacity or canopy
    closure threshold when non-positive draws must never reach the model.

    Args:
        mean (float, optional): Mean of the parent normal. Defaults to 0.0.
        sd (float, optional): Standard deviation of the parent normal.
            Defaults to 1.0.
        lower (float, optional): Lower bound. Defaults to 1e-12.
        upper (float, optional): Upper bound. Defaults to 1e12.

    Returns:
        rv_frozen: Frozen `scipy.stats.truncnorm`.

    Example:
        ```python
        K = positive_normal(250.0, 25.0, lower=0.0)
        assert (K.rvs(size=1000) >= 0).all()
        ```
    """
    # truncnorm takes its bounds in standard deviations from the mean
    return truncnorm(
        a=(lower - mean) / sd,
        b=(upper - mean) / sd,
        loc=mean,
        scale=sd
    )


def uniform_between(lower=0.0, upper=1.0):
    """
    Uniform distribution on `[lower, upper]`.

    Returns:
        rv_frozen: Frozen `scipy.stats.uniform` with `loc=lower` and
            `scale=upper - lower`.
    """
    return uniform(loc=lower, scale=upper - lower)


DISTRIBUTIONS = {
    "normal": normal,
    "truncnorm": positive_normal,
    "uniform": uniform_between,
}
"""Distribution names accepted in parameter space configurations."""
