import numpy as np
import pytest
from forestgrowth_tools.config import SpaceConfig, TimeGrid, MetricConfig
from forestgrowth_tools.sa import SensitivityAnalysisConfig, REFERENCE_PARAMETERS
from forestgrowth_tools.montecarlo import MonteCarloConfig
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS


def test_reference_config():
    config = SensitivityAnalysisConfig.reference()
    assert config.samples == 1000
    assert config.nboot == 300
    assert config.c0 == 10.0
    assert config.scheme == 'A'
    assert config.policy == 'accept'
    assert config.metric.names == ['max_carbon', 'carbon_at_100']
    assert list(config.space.keys()) == ['r', 'g', 'K', 'threshold']

    space = config.space.get_search_space()
    for name, mean in REFERENCE_PARAMETERS.items():
        assert space[name].mean() == pytest.approx(mean)
        assert space[name].std() == pytest.approx(0.1 * mean)

    times = config.time.to_array()
    assert times[0] == 1.0 and times[-1] == 300.0 and len(times) == 300


def test_reference_config_overrides():
    config = SensitivityAnalysisConfig.reference(samples=64, nboot=0, seed=7, scheme='B')
    assert (config.samples, config.nboot, config.seed, config.scheme) == (64, 0, 7, 'B')


def test_config_validation():
    with pytest.raises(ValueError):
        SensitivityAnalysisConfig.reference(scheme='C')
    with pytest.raises(ValueError):
        SensitivityAnalysisConfig.reference(policy='reject')
    with pytest.raises(ValueError):
        SensitivityAnalysisConfig.reference(samples=1)
    with pytest.raises(ValueError):
        SensitivityAnalysisConfig.reference(nboot=-1)


def test_json_round_trip(tmp_path):
    config = SensitivityAnalysisConfig.reference(samples=128, nboot=50, solver={'rtol': 1e-8})
    outfile = tmp_path / "sa_config.json"
    config.to_json(outfile)

    loaded = SensitivityAnalysisConfig.from_json(outfile)
    assert loaded.to_dict() == config.to_dict()
    assert loaded.metric.names == config.metric.names
    assert loaded.solver == {'rtol': 1e-8}


def test_to_json_does_not_overwrite(tmp_path):
    config = SensitivityAnalysisConfig.reference()
    outfile = tmp_path / "sa_config.json"
    config.to_json(outfile)
    with pytest.raises(FileExistsError):
        config.to_json(outfile)


def test_space_from_dict():
    space = SpaceConfig.from_dict(DISTRIBUTIONS, {
        'r': ['normal', [0.01, 0.001]],
        'g': ['Uniform', [1.5, 2.5]],
        'K': ['truncnorm', [250.0, 25.0, 0.0]]
    })
    dists = space.get_search_space()
    assert dists['g'].support() == (1.5, 2.5)
    assert dists['K'].support()[0] == pytest.approx(0.0)
    assert space.to_dict()['g'] == ['uniform', [1.5, 2.5]]


def test_space_unknown_distribution():
    with pytest.raises(ValueError):
        SpaceConfig.from_dict(DISTRIBUTIONS, {'r': ['lognormal', [0.0, 1.0]]})


def test_time_grid_step():
    times = TimeGrid(start=1, end=300, step=1).to_array()
    np.testing.assert_array_equal(times, np.arange(1, 301, dtype=float))

    times = TimeGrid(start=0, end=1, step=0.1).to_array()
    assert len(times) == 11
    assert times[-1] == pytest.approx(1.0)


def test_time_grid_count():
    times = TimeGrid(start=0, end=100, count=11).to_array()
    np.testing.assert_allclose(times, np.arange(0, 101, 10))


def test_time_grid_errors():
    with pytest.raises(ValueError):
        TimeGrid(start=1, end=300).to_array()
    with pytest.raises(ValueError):
        TimeGrid(start=1, end=300, step=1, count=300).to_array()
    with pytest.raises(ValueError):
        TimeGrid(start=10, end=1, step=1).to_array()
    with pytest.raises(ValueError):
        TimeGrid(start=1, end=10, step=-1).to_array()
    with pytest.raises(ValueError):
        TimeGrid(start=1, end=10, count=1).to_array()


def test_monte_carlo_config_round_trip(tmp_path):
    config = MonteCarloConfig(
        space=SpaceConfig.normal_around({'r': 0.01, 'K': 250.0}),
        time=TimeGrid(start=1, end=100, step=1),
        parameters={'g': 2.0, 'threshold': 50.0},
        num_samples=64
    )
    outfile = tmp_path / "mc_config.json"
    config.to_json(outfile)

    loaded = MonteCarloConfig.from_json(outfile)
    assert loaded.space.to_dict() == config.space.to_dict()
    assert loaded.time == config.time
    assert loaded.parameters == config.parameters
    assert loaded.num_samples == 64
    assert loaded.c0 == 10.0

    with pytest.raises(FileExistsError):
        config.to_json(outfile)
