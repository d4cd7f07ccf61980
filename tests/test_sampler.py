import numpy as np
import pytest
from forestgrowth_tools.config import SpaceConfig
from forestgrowth_tools.sa.sampler import sample_ensembles, apply_policy, draw
from forestgrowth_tools.sa import REFERENCE_PARAMETERS
from forestgrowth_tools.exceptions import InvalidParameter
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS


def get_reference_space():
    return SpaceConfig.normal_around(REFERENCE_PARAMETERS, rel_sd=0.1).get_search_space()


def get_wide_space():
    # Half of the capacity draws are negative
    return SpaceConfig.from_dict(DISTRIBUTIONS, {
        'r': ['normal', [0.01, 0.001]],
        'K': ['normal', [0.0, 1.0]],
    }).get_search_space()


def test_ensemble_shapes():
    X1, X2 = sample_ensembles(get_reference_space(), n=100, rng=np.random.default_rng(0))
    assert X1.shape == X2.shape == (100, 4)
    assert list(X1.columns) == ['r', 'g', 'K', 'threshold']


def test_ensembles_are_independent():
    X1, X2 = sample_ensembles(get_reference_space(), n=100, rng=np.random.default_rng(0))
    assert not np.allclose(X1.to_numpy(), X2.to_numpy())


def test_ensemble_moments():
    X1, _ = sample_ensembles(get_reference_space(), n=5000, rng=np.random.default_rng(1))
    for name, mean in REFERENCE_PARAMETERS.items():
        assert X1[name].mean() == pytest.approx(mean, rel=0.01)
        assert X1[name].std() == pytest.approx(0.1 * mean, rel=0.05)


def test_seed_reproducibility():
    first = sample_ensembles(get_reference_space(), n=50, rng=np.random.default_rng(42))
    second = sample_ensembles(get_reference_space(), n=50, rng=np.random.default_rng(42))
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a.to_numpy(), b.to_numpy())


def test_sample_size_too_small():
    with pytest.raises(ValueError):
        sample_ensembles(get_reference_space(), n=1, rng=np.random.default_rng(0))


def test_accept_keeps_negative_draws():
    X1, X2 = sample_ensembles(get_wide_space(), n=200, rng=np.random.default_rng(0))
    assert (X1['K'] <= 0).any()


def test_resample_policy():
    X1, X2 = sample_ensembles(
        get_wide_space(), n=200, rng=np.random.default_rng(0), policy='resample'
    )
    assert (X1['K'] > 0).all() and (X2['K'] > 0).all()


def test_clamp_policy():
    X1, _ = sample_ensembles(
        get_wide_space(), n=200, rng=np.random.default_rng(0), policy='clamp'
    )
    assert (X1['K'] > 0).all()
    assert (X1['K'] == 1e-8).any()


def test_resample_gives_up():
    space = SpaceConfig.from_dict(DISTRIBUTIONS, {
        'K': ['uniform', [-2.0, -1.0]],
    }).get_search_space()
    rng = np.random.default_rng(0)
    X = draw(space, 10, rng)
    with pytest.raises(InvalidParameter):
        apply_policy(X, space, rng, policy='resample', max_tries=3)


def test_unknown_policy():
    rng = np.random.default_rng(0)
    space = get_reference_space()
    with pytest.raises(ValueError):
        apply_policy(draw(space, 5, rng), space, rng, policy='truncate')
