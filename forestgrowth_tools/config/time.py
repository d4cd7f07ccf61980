"""
# Time Grid Configuration

The ordered set of time points (years) at which the carbon trajectory is
reported by the integrator.

## Example Usage

```python
from forestgrowth_tools.config.time import TimeGrid

times = TimeGrid(start=1, end=300, step=1).to_array()  # 1, 2, ..., 300
times = TimeGrid(start=0, end=100, count=11).to_array()  # 0, 10, ..., 100
```
"""

from dataclasses import dataclass
import numpy as np


@dataclass
class TimeGrid:
    """
    Strictly increasing grid of output times.

    Exactly one of `step` or `count` must be given.

    Attributes:
        start (float): First time point.
        end (float): Last time point (included).
        step (float, optional): Spacing between points.
        count (int, optional): Number of evenly spaced points.
    """
    start: float
    end: float
    step: float = None
    count: int = None

    def to_array(self) -> np.ndarray:
        """
        Expand the grid into an array of time points.

        Returns:
            np.ndarray: Strictly increasing float array.

        Raises:
            ValueError: If the grid is empty, not increasing, or both/neither
                of `step` and `count` are set.
        """
        if (self.step is None) == (self.count is None):
            raise ValueError("Exactly one of 'step' or 'count' must be set")
        if self.end <= self.start:
            raise ValueError(f"Time grid end ({self.end}) must exceed start ({self.start})")

        if self.step is not None:
            if self.step <= 0:
                raise ValueError(f"Time step must be positive, got {self.step}")
            n = int(np.floor((self.end - self.start) / self.step + 1e-9)) + 1
            times = self.start + self.step * np.arange(n, dtype=float)
        else:
            if self.count < 2:
                raise ValueError(f"Time grid needs at least 2 points, got {self.count}")
            times = np.linspace(self.start, self.end, int(self.count))

        return times
