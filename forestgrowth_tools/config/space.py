"""
# Parameter Space Configuration

This module provides configuration classes for defining the parameter
uncertainty space sampled by the Sobol analysis and the Monte Carlo
ensemble.

## Classes

- `SampleSpace`: Container for a distribution and its parameters
- `SpaceConfig`: Configuration for multiple parameter sampling spaces

## Example Usage

```python
from forestgrowth_tools.config.space import SpaceConfig
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS

# Create space configuration
space_config = SpaceConfig.from_dict(DISTRIBUTIONS, {
    'r': ['normal', [0.01, 0.001]],
    'K': ['truncnorm', [250, 25, 0.0]]
})

# Or build the reference scenario (10% relative standard deviation)
space_config = SpaceConfig.normal_around(
    {'r': 0.01, 'g': 2.0, 'K': 250.0, 'threshold': 50.0}
)

# Get frozen scipy distributions for sampling
search_space = space_config.get_search_space()
```
"""

from forestgrowth_tools.utils.distributions import DISTRIBUTIONS
from typing import Callable

from dataclasses import dataclass


@dataclass
class SampleSpace:
    """
    Container for a probability distribution and its parameters.

    Attributes:
        distribution (Callable): Factory returning a frozen scipy distribution.
        parameters (tuple[float]): Positional arguments for the factory.
        name (str): Configuration name of the distribution (e.g. 'normal'),
            kept so the space can be written back to JSON.

    Example:
        ```python
        from forestgrowth_tools.utils.distributions import normal

        space = SampleSpace(
            distribution=normal,
            parameters=(250.0, 25.0),
            name='normal'
        )

        dist_class, params = space.unpack()
        distribution = dist_class(*params)  # norm(loc=250, scale=25)
        ```
    """
    distribution: Callable
    parameters: tuple[float]
    name: str = None

    def unpack(self):
        """
        Unpack the distribution and parameters.

        Returns:
            tuple: (distribution_factory, parameters_tuple) ready for instantiation.
        """
        return (self.distribution, self.parameters)


class SpaceConfig(dict[str, SampleSpace]):
    """
    Configuration for multiple parameter sampling spaces.

    Inherits from dict[str, SampleSpace] where keys are parameter names and
    values are SampleSpace instances. Insertion order is the column order of
    every design matrix built from this space.
    """

    @classmethod
    def from_dict(cls, mapping: dict[str, Callable], data: dict):
        """
        Create a SpaceConfig from a distribution mapping and configuration data.

        Args:
            mapping (dict[str, Callable]): Dictionary mapping distribution names
                to distribution factories (see `DISTRIBUTIONS`).
            data (dict): Configuration data where keys are parameter names and
                values are lists of [distribution_name, parameters].

        Returns:
            SpaceConfig: Configured instance with parameter spaces.

        Raises:
            ValueError: If a distribution type in data is not found in mapping.

        Example:
            ```python
            data = {
                'r': ['normal', [0.01, 0.001]],
                'g': ['uniform', [1.5, 2.5]],
                'K': ['truncnorm', [250.0, 25.0, 0.0, 1e12]]
            }

            config = SpaceConfig.from_dict(DISTRIBUTIONS, data)
            ```
        """
        space_config = {}
        for k, v in data.items():
            dist_type = v[0].lower()
            params = v[1]
            if dist_type not in mapping:
                raise ValueError(f"Unknown distribution type: {dist_type}")
            space_config[k] = SampleSpace(
                distribution=mapping[dist_type],
                parameters=tuple(params),
                name=dist_type
            )
        return cls(space_config)

    @classmethod
    def normal_around(cls, means: dict[str, float], rel_sd: float = 0.1):
        """
        Independent normal distributions centred on `means`.

        Args:
            means (dict[str, float]): Parameter name to mean value.
            rel_sd (float, optional): Standard deviation as a fraction of the
                absolute mean. Defaults to 0.1.

        Returns:
            SpaceConfig: One 'normal' space per parameter.
        """
        return cls.from_dict(
            DISTRIBUTIONS,
            {
                name: ["normal", [mean, abs(mean) * rel_sd]]
                for name, mean in means.items()
            }
        )

    def to_dict(self) -> dict:
        """
        Inverse of `from_dict`.

        Returns:
            dict: Parameter name to [distribution_name, parameters].
        """
        return {
            name: [space.name, list(space.parameters)]
            for name, space in self.items()
        }

    def get_search_space(self):
        """
        Instantiate the configured distributions.

        Returns:
            dict[str, rv_frozen]: Dictionary mapping parameter names to frozen
                scipy distributions, in configuration order.
        """
        space = {}
        for param_name, samplespace in self.items():
            sampler, parameters = samplespace.unpack()
            space[param_name] = sampler(*parameters)

        return space
