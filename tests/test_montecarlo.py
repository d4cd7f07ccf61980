import numpy as np
import pytest
from forestgrowth_tools import ForestGrowthModel
from forestgrowth_tools.montecarlo import Sim, MonteCarloConfig
from forestgrowth_tools.config import SpaceConfig, TimeGrid


def get_config() -> MonteCarloConfig:
    return MonteCarloConfig(
        space=SpaceConfig.normal_around({'r': 0.01, 'K': 250.0}),
        time=TimeGrid(start=1, end=200, step=1),
        parameters={'g': 2.0, 'threshold': 50.0},
        num_worker=2,
        num_samples=16
    )


def test_run_random_engine():
    sim = Sim(ForestGrowthModel(), get_config(), engine='random', seed=1)
    results = sim.run(n=32)
    assert len(results) == 32
    assert all(list(r.columns) == ['time', 'carbon'] for r in results)


def test_run_sequential_matches_parallel():
    parallel = Sim(ForestGrowthModel(), get_config(), engine='latin', seed=5).run(n=8)
    sequential = Sim(ForestGrowthModel(), get_config(), engine='latin', seed=5).run(n=8, parallel=False)
    for a, b in zip(parallel, sequential):
        np.testing.assert_allclose(a['carbon'], b['carbon'])


def test_analyze():
    sim = Sim(ForestGrowthModel(), get_config(), engine='sobol', seed=2)
    stats = sim.analyze(sim.run())

    assert set(stats.keys()) == {'ci_low', 'ci_high', 'mean', 'stddev', 'stderr', 'min_val', 'max_val'}
    mean = stats['mean']
    assert mean.shape == (200, 2)
    np.testing.assert_array_equal(mean['time'], np.arange(1, 201))
    assert np.all(np.diff(mean['carbon']) > 0)
    assert np.all(stats['ci_low']['carbon'] <= stats['ci_high']['carbon'])
    assert stats.excluded == []


def test_analyze_excludes_failed_runs():
    sim = Sim(ForestGrowthModel(), get_config(), engine='halton', seed=2)
    results = sim.run(n=6)
    results[2] = None
    results[4] = None

    stats = sim.analyze(results)
    assert stats.excluded == [2, 4]
    assert stats['mean'].shape == (200, 2)


def test_analyze_all_failed():
    sim = Sim(ForestGrowthModel(), get_config(), engine='random')
    with pytest.raises(ValueError):
        sim.analyze([None, None])


def test_sobol_needs_power_of_two():
    sim = Sim(ForestGrowthModel(), get_config(), engine='sobol')
    with pytest.raises(ValueError):
        sim.run(n=10)


def test_unknown_engine():
    with pytest.raises(ValueError):
        Sim(ForestGrowthModel(), get_config(), engine='grid')


def test_save_and_plot(tmp_path):
    sim = Sim(ForestGrowthModel(), get_config(), engine='random', seed=4)
    stats = sim.analyze(sim.run(n=8))

    stats.save(str(tmp_path))
    assert (tmp_path / "mean.csv").exists()
    assert (tmp_path / "ci_high.csv").exists()

    outfile = tmp_path / "carbon_ci.png"
    Sim.plot_ci(stats, str(outfile))
    assert outfile.exists()
