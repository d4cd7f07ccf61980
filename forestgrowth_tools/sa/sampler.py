"""Independent random draws of the two base ensembles.

The Sobol estimators are only unbiased if X1 and X2 are drawn independently
from the same joint distribution. Parameters are independent, so each column
is drawn from its own marginal distribution.

No truncation is applied by default: a normal distribution can produce
negative growth rates, capacities or thresholds. `policy` decides what
happens to such draws for the parameters listed in `positive`:

    "accept"    keep them (reference behaviour)
    "resample"  redraw offending rows from the same distributions
    "clamp"     raise offending values to `eps`
"""

import logging

import numpy as np
import pandas as pd

from ..exceptions import InvalidParameter


POLICIES = ("accept", "resample", "clamp")
POSITIVE_PARAMETERS = ("r", "K", "threshold")


def draw(space: dict, n: int, rng: np.random.Generator) -> pd.DataFrame:
    """Draw `n` rows, one column per distribution in `space` (in order)."""
    return pd.DataFrame({
        name: np.asarray(dist.rvs(size=n, random_state=rng), dtype=float)
        for name, dist in space.items()
    })


def _invalid_rows(X: pd.DataFrame, positive) -> np.ndarray:
    columns = [c for c in positive if c in X.columns]
    if not columns:
        return np.zeros(len(X), dtype=bool)
    return (X[columns] <= 0).any(axis=1).to_numpy()


def apply_policy(
    X: pd.DataFrame,
    space: dict,
    rng: np.random.Generator,
    policy: str = "accept",
    positive=POSITIVE_PARAMETERS,
    eps: float = 1e-8,
    max_tries: int = 100
) -> pd.DataFrame:
    """Enforce the sampling policy on an ensemble.

    Args:
        X (pd.DataFrame): Ensemble drawn from `space`.
        space (dict): Parameter name to frozen scipy distribution.
        rng (np.random.Generator): Generator used for redraws.
        policy (str, optional): "accept", "resample" or "clamp".
        positive (Iterable[str], optional): Parameters that must be > 0.
        eps (float, optional): Clamp value. Defaults to 1e-8.
        max_tries (int, optional): Redraw rounds before giving up.

    Returns:
        pd.DataFrame: The ensemble after the policy is applied.

    Raises:
        ValueError: If the policy is unknown.
        InvalidParameter: If "resample" cannot produce valid rows.
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown sampling policy: {policy}")

    bad = _invalid_rows(X, positive)
    if policy == "accept" or not bad.any():
        return X

    X = X.copy()
    if policy == "clamp":
        logging.warning(f"Clamping {int(bad.sum())} draw(s) with non-positive parameters to {eps}.")
        for column in positive:
            if column in X.columns:
                X[column] = X[column].clip(lower=eps)
        return X

    logging.warning(f"Redrawing {int(bad.sum())} draw(s) with non-positive parameters.")
    for _ in range(max_tries):
        idx = np.flatnonzero(bad)
        redraw = draw(space, len(idx), rng)
        X.iloc[idx] = redraw.to_numpy()
        bad = _invalid_rows(X, positive)
        if not bad.any():
            return X

    raise InvalidParameter(
        f"Could not draw valid parameters after {max_tries} attempts; "
        f"{int(bad.sum())} row(s) still non-positive"
    )


def sample_ensembles(
    space: dict,
    n: int,
    rng: np.random.Generator,
    policy: str = "accept",
    positive=POSITIVE_PARAMETERS
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Draw the two independent base ensembles X1 and X2.

    Args:
        space (dict): Parameter name to frozen scipy distribution, e.g. from
            `SpaceConfig.get_search_space()`.
        n (int): Rows per ensemble (N).
        rng (np.random.Generator): Seeded generator for reproducibility.
        policy (str, optional): Handling of non-positive draws, see module
            docstring. Defaults to "accept".
        positive (Iterable[str], optional): Parameters the policy applies to.

    Returns:
        tuple[pd.DataFrame, pd.DataFrame]: (X1, X2), each of shape (n, p).
    """
    if n < 2:
        raise ValueError(f"Sample size must be at least 2, got {n}")

    X1 = apply_policy(draw(space, n, rng), space, rng, policy, positive)
    X2 = apply_policy(draw(space, n, rng), space, rng, policy, positive)
    return X1, X2
