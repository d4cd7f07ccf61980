"""Saltelli cross-sampling design for Sobol sensitivity analysis.

The design is built from two independent base ensembles X1 (A) and X2 (B)
of N rows and p parameter columns each. Rows are laid out in blocks of N:

    scheme "A":  A, B, AB_1, ..., AB_p                  -> N * (p + 2) rows
    scheme "B":  A, B, AB_1, ..., AB_p, BA_1, ..., BA_p -> N * (2p + 2) rows

where AB_i is A with column i replaced by column i of B, and BA_i is B with
column i replaced by column i of A. Model outputs must be supplied in the
same row order.

Typical usage example:

    X1, X2 = sample_ensembles(space, n=1000, rng=np.random.default_rng(42))
    design = SobolDesign(X1, X2)
    y = [f(**row) for row in design.parameter_sets()]
    result = design.analyze(y, nboot=300, rng=np.random.default_rng(0))
"""

import numpy as np
import pandas as pd

from ..exceptions import DesignMismatch
from ..utils.results import SensitivityResult
from .estimator import sobol_indices, bootstrap_indices


SCHEMES = ("A", "B")


class SobolDesign:
    """Design matrix of a variance-based sensitivity analysis.

    Attributes:
        X1 (pd.DataFrame): Base ensemble A, shape (N, p).
        X2 (pd.DataFrame): Base ensemble B, shape (N, p).
        scheme (str): "A" or "B" (symmetric), see module docstring.
        names (list[str]): Parameter names (column order).
        n (int): Base sample size N.
        p (int): Number of parameters.
        X (pd.DataFrame): The full design matrix, read-only by convention.
    """

    def __init__(self, X1: pd.DataFrame, X2: pd.DataFrame, scheme: str = "A"):
        """Build the design from two base ensembles.

        Args:
            X1 (pd.DataFrame): First base ensemble, one column per parameter.
            X2 (pd.DataFrame): Second, independently drawn ensemble with the
                same columns and number of rows.
            scheme (str, optional): "A" (default) or "B".

        Raises:
            ValueError: If the ensembles have different shapes or columns, are
                empty, or the scheme is unknown.
        """
        if scheme not in SCHEMES:
            raise ValueError(f"Unknown design scheme: {scheme}")
        if list(X1.columns) != list(X2.columns):
            raise ValueError(
                f"Ensembles have different columns: {list(X1.columns)} != {list(X2.columns)}"
            )
        if X1.shape != X2.shape or X1.shape[0] == 0:
            raise ValueError(f"Ensembles must be non-empty with equal shape, got {X1.shape} and {X2.shape}")

        self.X1 = X1.reset_index(drop=True)
        self.X2 = X2.reset_index(drop=True)
        self.scheme = scheme
        self.names = list(X1.columns)
        self.n, self.p = X1.shape
        self.X = self._build()

    def _build(self) -> pd.DataFrame:
        A = self.X1.to_numpy(dtype=float)
        B = self.X2.to_numpy(dtype=float)

        blocks = [A, B]
        for i in range(self.p):
            AB_i = A.copy()
            AB_i[:, i] = B[:, i]
            blocks.append(AB_i)

        if self.scheme == "B":
            for i in range(self.p):
                BA_i = B.copy()
                BA_i[:, i] = A[:, i]
                blocks.append(BA_i)

        return pd.DataFrame(np.vstack(blocks), columns=self.names)

    def __len__(self):
        return len(self.X)

    @property
    def size(self) -> int:
        """Expected number of rows: N(p+2) for scheme A, N(2p+2) for B."""
        blocks = self.p + 2 if self.scheme == "A" else 2 * self.p + 2
        return self.n * blocks

    def parameter_sets(self) -> list[dict[str, float]]:
        """Design rows as parameter dictionaries, in row order."""
        return self.X.to_dict(orient="records")

    def split(self, y) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray | None]:
        """Split an output vector into its design blocks.

        Args:
            y (ArrayLike): One scalar output per design row, in row order.

        Returns:
            tuple: (y_A, y_B, y_AB, y_BA) with y_A and y_B of shape (N,),
                y_AB of shape (p, N), and y_BA of shape (p, N) for scheme "B"
                or None for scheme "A".

        Raises:
            DesignMismatch: If `y` is not one-dimensional with one entry per
                design row.
        """
        y = np.asarray(y, dtype=float)
        if y.ndim != 1 or y.shape[0] != len(self):
            raise DesignMismatch(
                f"Output vector of shape {y.shape} does not match design of {len(self)} rows"
            )

        n, p = self.n, self.p
        y_A = y[:n]
        y_B = y[n:2 * n]
        y_AB = y[2 * n:(2 + p) * n].reshape(p, n)
        y_BA = None
        if self.scheme == "B":
            y_BA = y[(2 + p) * n:].reshape(p, n)

        return y_A, y_B, y_AB, y_BA

    def analyze(
        self,
        y,
        nboot: int = 0,
        conf: float = 0.95,
        rng: np.random.Generator = None
    ) -> SensitivityResult:
        """Compute first-order and total-effect indices from model outputs.

        Args:
            y (ArrayLike): One scalar output per design row, in row order.
            nboot (int, optional): Bootstrap replicates for confidence
                intervals; 0 disables the bootstrap. Defaults to 0.
            conf (float, optional): Confidence level. Defaults to 0.95.
            rng (np.random.Generator, optional): Generator for the bootstrap.

        Returns:
            SensitivityResult: Indices per parameter.

        Raises:
            DesignMismatch: If `y` does not align with the design.
            DegenerateVariance: If the outputs have ~0 variance.
        """
        y_A, y_B, y_AB, y_BA = self.split(y)
        if not np.all(np.isfinite(y)):
            raise DesignMismatch("Output vector contains non-finite values")

        S1, ST = sobol_indices(y_A, y_B, y_AB, y_BA)
        result = SensitivityResult(names=self.names, S1=S1, ST=ST)

        if nboot > 0:
            boot = bootstrap_indices(
                y_A, y_B, y_AB, y_BA,
                nboot=nboot,
                conf=conf,
                rng=rng
            )
            result.S1_conf = boot["S1_conf"]
            result.ST_conf = boot["ST_conf"]
            result.S1_se = boot["S1_se"]
            result.ST_se = boot["ST_se"]
            result.conf = conf
            result.nboot = nboot

        return result
