"""Monte Carlo estimators of first-order and total-effect Sobol indices.

Given model outputs on the base matrices A (= X1) and B (= X2) and on the
cross matrices AB_i (A with column i taken from B), the indices are

    S_i = mean(f(B) * (f(AB_i) - f(A))) / V        (Saltelli 2010)
    T_i = 0.5 * mean((f(A) - f(AB_i)) ** 2) / V    (Jansen 1999)

with V = var([f(A), f(B)]). Outputs are centred on their overall mean first;
this leaves both estimators unbiased but removes the mean^2 term from the
variance of the first-order estimator. The same quantities are produced by
SALib's `sobol.analyze` with `calc_second_order=False`.

All functions work along the last axis, so a stack of bootstrap replicates
with shape (nboot, N) is estimated in one call.

References:
    - Saltelli, A., et al. (2010). Variance based sensitivity analysis of model
      output. Design and estimator for the total sensitivity index.
    - Jansen, M.J.W. (1999). Analysis of variance designs for model output.
"""

import numpy as np

from ..exceptions import DegenerateVariance


VARIANCE_RTOL = 1e-12
"""Variance below VARIANCE_RTOL * max(1, mean(y)^2) is treated as zero."""


def total_variance(y_A: np.ndarray, y_B: np.ndarray) -> np.ndarray:
    """Variance of the pooled base-matrix outputs along the last axis."""
    return np.var(np.concatenate([y_A, y_B], axis=-1), axis=-1)


def first_order(
    y_A: np.ndarray,
    y_B: np.ndarray,
    y_AB: np.ndarray,
    V: np.ndarray
) -> np.ndarray:
    """
    First-order index of one parameter.

    Args:
        y_A (np.ndarray): Outputs on A, shape (..., N).
        y_B (np.ndarray): Outputs on B, shape (..., N).
        y_AB (np.ndarray): Outputs on AB_i, shape (..., N).
        V (np.ndarray): Total variance, shape (...).

    Returns:
        np.ndarray: S_i, shape (...).
    """
    return np.mean(y_B * (y_AB - y_A), axis=-1) / V


def total_order(y_A: np.ndarray, y_AB: np.ndarray, V: np.ndarray) -> np.ndarray:
    """Total-effect index of one parameter, same conventions as `first_order`."""
    return 0.5 * np.mean((y_A - y_AB) ** 2, axis=-1) / V


def _check_variance(V: np.ndarray, scale: float):
    tol = VARIANCE_RTOL * max(1.0, scale)
    if not np.all(np.isfinite(V)) or np.any(V <= tol):
        raise DegenerateVariance(
            f"Total output variance {np.min(V):.3g} is ~0; Sobol indices are undefined"
        )


def sobol_indices(
    y_A: np.ndarray,
    y_B: np.ndarray,
    y_AB: np.ndarray,
    y_BA: np.ndarray = None
) -> tuple[np.ndarray, np.ndarray]:
    """
    First-order and total-effect indices for every parameter.

    Args:
        y_A (np.ndarray): Outputs on A, shape (..., N).
        y_B (np.ndarray): Outputs on B, shape (..., N).
        y_AB (np.ndarray): Outputs on the cross matrices, shape (p, ..., N),
            where y_AB[i] is A with column i from B.
        y_BA (np.ndarray, optional): Outputs on B with column i from A, same
            shape as y_AB. When given, each index is the average of the
            A-based and B-based estimates.

    Returns:
        tuple: (S1, ST), each of shape (p, ...).

    Raises:
        DegenerateVariance: If the total output variance is ~0 (for any
            replicate when estimating a stack).
    """
    y_all = [y_A, y_B, y_AB] + ([y_BA] if y_BA is not None else [])
    f0 = np.mean(np.concatenate([np.ravel(y) for y in y_all]))
    y_A, y_B, y_AB = y_A - f0, y_B - f0, y_AB - f0

    V = total_variance(y_A, y_B)
    _check_variance(V, f0 ** 2)

    p = y_AB.shape[0]
    S1 = np.stack([first_order(y_A, y_B, y_AB[i], V) for i in range(p)])
    ST = np.stack([total_order(y_A, y_AB[i], V) for i in range(p)])

    if y_BA is not None:
        y_BA = y_BA - f0
        S1_B = np.stack([first_order(y_B, y_A, y_BA[i], V) for i in range(p)])
        ST_B = np.stack([total_order(y_B, y_BA[i], V) for i in range(p)])
        S1 = 0.5 * (S1 + S1_B)
        ST = 0.5 * (ST + ST_B)

    return S1, ST


def bootstrap_indices(
    y_A: np.ndarray,
    y_B: np.ndarray,
    y_AB: np.ndarray,
    y_BA: np.ndarray = None,
    nboot: int = 100,
    conf: float = 0.95,
    rng: np.random.Generator = None
) -> dict[str, np.ndarray]:
    """
    Bootstrap confidence intervals for the Sobol indices.

    The N base rows are resampled with replacement `nboot` times; each
    replicate keeps the A / B / AB_i rows of a resampled base row together
    and recomputes both indices.

    Args:
        y_A, y_B, y_AB, y_BA: As in `sobol_indices` (1-D per matrix).
        nboot (int, optional): Number of replicates. Defaults to 100.
        conf (float, optional): Confidence level of the percentile interval.
            Defaults to 0.95.
        rng (np.random.Generator, optional): Random generator. Defaults to a
            fresh unseeded generator.

    Returns:
        dict[str, np.ndarray]: 'S1_conf' and 'ST_conf' of shape (2, p)
            holding lower and upper bounds, 'S1_se' and 'ST_se' of shape (p,).
    """
    if nboot < 1:
        raise ValueError(f"nboot must be positive, got {nboot}")
    if not 0 < conf < 1:
        raise ValueError(f"conf must be in (0, 1), got {conf}")
    rng = rng if rng is not None else np.random.default_rng()

    n = y_A.shape[-1]
    r = rng.integers(0, n, size=(nboot, n))

    S1, ST = sobol_indices(
        y_A[r],
        y_B[r],
        y_AB[:, r],
        y_BA[:, r] if y_BA is not None else None
    )  # (p, nboot)

    alpha = (1 - conf) / 2
    q = [alpha, 1 - alpha]
    return {
        "S1_conf": np.quantile(S1, q, axis=1),
        "ST_conf": np.quantile(ST, q, axis=1),
        "S1_se": np.std(S1, axis=1, ddof=1),
        "ST_se": np.std(ST, axis=1, ddof=1),
    }
