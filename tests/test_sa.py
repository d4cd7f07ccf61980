import os
import json
import numpy as np
import pytest
from forestgrowth_tools import ForestGrowthModel
from forestgrowth_tools.sa import SensitivityAnalysis, SensitivityAnalysisConfig
from forestgrowth_tools.config import SpaceConfig, MetricConfig, TimeGrid
from forestgrowth_tools.utils.distributions import DISTRIBUTIONS
from forestgrowth_tools.exceptions import DegenerateVariance, InvalidParameter


def get_small_config(**kwargs) -> SensitivityAnalysisConfig:
    defaults = dict(samples=16, nboot=0, workers=2)
    defaults.update(kwargs)
    return SensitivityAnalysisConfig.reference(**defaults)


def test_reference_max_carbon_indices():
    config = SensitivityAnalysisConfig.reference(samples=1024, nboot=0)
    sa = SensitivityAnalysis(ForestGrowthModel(), config)
    results = sa.run(progress=False)

    assert set(results.keys()) == {'max_carbon', 'carbon_at_100'}

    expected = {'r': 0.34, 'g': 0.22, 'K': 0.36, 'threshold': 0.10}
    max_carbon = results['max_carbon']
    for name, value in expected.items():
        assert max_carbon[name]['S1'] == pytest.approx(value, abs=0.15)

    # The response is close to additive
    np.testing.assert_allclose(max_carbon.ST, max_carbon.S1, atol=0.15)
    assert max_carbon.S1.sum() == pytest.approx(1.0, abs=0.2)

    # Before canopy closure only the exponential growth rate matters
    at_100 = results['carbon_at_100']
    assert at_100['r']['S1'] > 0.8
    assert at_100['K']['ST'] == pytest.approx(0.0, abs=0.05)


def test_run_keeps_design_and_metrics():
    sa = SensitivityAnalysis(ForestGrowthModel(), get_small_config())
    sa.run(progress=False)

    assert len(sa.design) == 16 * 6
    assert set(sa.metrics.keys()) == {'max_carbon', 'carbon_at_100'}
    for values in sa.metrics.values():
        assert values.shape == (len(sa.design),)
        assert np.all(values > 10.0)


def test_run_is_reproducible():
    first = SensitivityAnalysis(ForestGrowthModel(), get_small_config(seed=3)).run(progress=False)
    second = SensitivityAnalysis(ForestGrowthModel(), get_small_config(seed=3)).run(progress=False)
    np.testing.assert_array_equal(first['max_carbon'].S1, second['max_carbon'].S1)
    np.testing.assert_array_equal(first['max_carbon'].ST, second['max_carbon'].ST)


def test_symmetric_scheme_run():
    sa = SensitivityAnalysis(ForestGrowthModel(), get_small_config(scheme='B'))
    results = sa.run(progress=False)
    assert len(sa.design) == 16 * 10
    assert results['max_carbon'].S1.shape == (4,)


def test_run_saves_outputs(tmp_path):
    config = get_small_config(nboot=20)
    sa = SensitivityAnalysis(ForestGrowthModel(), config)
    results = sa.run(out_dir=str(tmp_path), progress=False)

    res_dir = tmp_path / "sa_results"
    plt_dir = tmp_path / "plots"
    for name in ['sample.npy', 'metrics.json', 'max_carbon_indices.csv', 'carbon_at_100_indices.csv']:
        assert (res_dir / name).exists()
    for name in ['indices_max_carbon.png', 'max_carbon_vs_parameters.png',
                 'indices_carbon_at_100.png', 'carbon_at_100_vs_parameters.png']:
        assert (plt_dir / name).exists()

    assert np.load(res_dir / "sample.npy").shape == (16 * 6, 4)
    with open(os.path.join(res_dir, "metrics.json")) as f:
        metrics = json.load(f)
    assert len(metrics['max_carbon']) == 16 * 6

    assert results['max_carbon'].S1_conf.shape == (2, 4)
    assert 'S1_low' in results['max_carbon'].to_frame().columns


def test_constant_metric_is_degenerate():
    # The stock at the first time point is always C0
    config = get_small_config()
    config.metric = MetricConfig.from_dict({'metrics': ['at_time'], 'params': [1]})
    sa = SensitivityAnalysis(ForestGrowthModel(), config)
    with pytest.raises(DegenerateVariance):
        sa.run(progress=False)


def test_invalid_draw_fails_analysis():
    config = SensitivityAnalysisConfig(
        space=SpaceConfig.from_dict(DISTRIBUTIONS, {'K': ['normal', [0.0, 1.0]]}),
        metric=MetricConfig.from_dict({'metrics': ['max']}),
        time=TimeGrid(start=1, end=50, step=1),
        c0=10.0,
        samples=8,
        parameters={'r': 0.01, 'g': 2.0, 'threshold': 50.0}
    )
    sa = SensitivityAnalysis(ForestGrowthModel(), config)
    with pytest.raises(InvalidParameter) as err:
        sa.run(progress=False)
    assert err.value.index is not None
    assert sa.design is None
