import numpy as np
import pandas as pd
import pytest
from forestgrowth_tools.sa.design import SobolDesign
from forestgrowth_tools.exceptions import DesignMismatch

NAMES = ['r', 'g', 'K', 'threshold']


def get_ensembles(n=5, seed=0):
    rng = np.random.default_rng(seed)
    X1 = pd.DataFrame(rng.random((n, len(NAMES))), columns=NAMES)
    X2 = pd.DataFrame(rng.random((n, len(NAMES))) + 10.0, columns=NAMES)
    return X1, X2


def test_design_size_scheme_a():
    X1, X2 = get_ensembles(n=5)
    design = SobolDesign(X1, X2)
    assert len(design) == 5 * (4 + 2) == design.size
    assert design.n == 5 and design.p == 4
    assert list(design.X.columns) == NAMES


def test_design_size_scheme_b():
    X1, X2 = get_ensembles(n=5)
    design = SobolDesign(X1, X2, scheme='B')
    assert len(design) == 5 * (2 * 4 + 2) == design.size


def test_design_block_layout():
    X1, X2 = get_ensembles(n=5)
    design = SobolDesign(X1, X2)
    X = design.X.to_numpy()
    A, B = X1.to_numpy(), X2.to_numpy()
    n = design.n

    np.testing.assert_array_equal(X[:n], A)
    np.testing.assert_array_equal(X[n:2 * n], B)
    for i in range(design.p):
        block = X[(2 + i) * n:(3 + i) * n]
        np.testing.assert_array_equal(block[:, i], B[:, i])
        others = [j for j in range(design.p) if j != i]
        np.testing.assert_array_equal(block[:, others], A[:, others])


def test_design_symmetric_blocks():
    X1, X2 = get_ensembles(n=3)
    design = SobolDesign(X1, X2, scheme='B')
    X = design.X.to_numpy()
    A, B = X1.to_numpy(), X2.to_numpy()
    n, p = design.n, design.p

    for i in range(p):
        block = X[(2 + p + i) * n:(3 + p + i) * n]
        np.testing.assert_array_equal(block[:, i], A[:, i])
        others = [j for j in range(p) if j != i]
        np.testing.assert_array_equal(block[:, others], B[:, others])


def test_parameter_sets():
    X1, X2 = get_ensembles(n=4)
    design = SobolDesign(X1, X2)
    rows = design.parameter_sets()
    assert len(rows) == len(design)
    assert set(rows[0].keys()) == set(NAMES)
    assert rows[0]['K'] == X1['K'].iloc[0]


def test_split_shapes():
    X1, X2 = get_ensembles(n=4)
    design = SobolDesign(X1, X2)
    y = np.arange(len(design), dtype=float)
    y_A, y_B, y_AB, y_BA = design.split(y)

    np.testing.assert_array_equal(y_A, [0, 1, 2, 3])
    np.testing.assert_array_equal(y_B, [4, 5, 6, 7])
    assert y_AB.shape == (4, 4)
    np.testing.assert_array_equal(y_AB[1], [12, 13, 14, 15])
    assert y_BA is None


def test_split_rejects_wrong_length():
    X1, X2 = get_ensembles(n=4)
    design = SobolDesign(X1, X2)
    with pytest.raises(DesignMismatch):
        design.split(np.zeros(len(design) - 1))
    with pytest.raises(DesignMismatch):
        design.analyze(np.zeros(len(design) + 4))


def test_analyze_rejects_non_finite():
    X1, X2 = get_ensembles(n=4)
    design = SobolDesign(X1, X2)
    y = np.random.default_rng(1).random(len(design))
    y[3] = np.nan
    with pytest.raises(DesignMismatch):
        design.analyze(y)


def test_mismatched_ensembles():
    X1, X2 = get_ensembles(n=4)
    with pytest.raises(ValueError):
        SobolDesign(X1, X2.iloc[:3])
    with pytest.raises(ValueError):
        SobolDesign(X1, X2[['g', 'r', 'K', 'threshold']])


def test_unknown_scheme():
    X1, X2 = get_ensembles(n=4)
    with pytest.raises(ValueError):
        SobolDesign(X1, X2, scheme='C')
