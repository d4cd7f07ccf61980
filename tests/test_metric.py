import pandas as pd
import pytest
from forestgrowth_tools.utils.metric import (
    Metric, MaxCarbon, CarbonAtTime, max_carbon, carbon_at_time
)
from forestgrowth_tools.config import MetricConfig


def get_series() -> pd.DataFrame:
    return pd.DataFrame({
        'time': [1.0, 2.0, 3.0, 4.0],
        'carbon': [10.0, 12.0, 15.0, 14.0]
    })


def test_max_carbon():
    assert max_carbon(get_series()) == 15.0


def test_max_carbon_other_column():
    series = get_series().assign(biomass=[1.0, 5.0, 2.0, 3.0])
    assert max_carbon(series, output_name='biomass') == 5.0


def test_carbon_at_time_exact():
    assert carbon_at_time(get_series(), 3.0) == 15.0


def test_carbon_at_time_nearest():
    assert carbon_at_time(get_series(), 3.2) == 15.0
    assert carbon_at_time(get_series(), 100.0) == 14.0
    assert carbon_at_time(get_series(), -5.0) == 10.0


def test_carbon_at_time_tie_takes_first():
    assert carbon_at_time(get_series(), 2.5) == 12.0


def test_metrics_are_idempotent():
    series = get_series()
    metric = Metric.from_name('at_time', 2)
    assert metric.func(series) == metric.func(series)
    assert max_carbon(series) == max_carbon(series)


def test_from_name():
    assert isinstance(Metric.from_name('max'), MaxCarbon)
    assert isinstance(Metric.from_name('MAX'), MaxCarbon)

    at = Metric.from_name('at_time', 100)
    assert isinstance(at, CarbonAtTime)
    assert at.target == 100.0
    assert at.name == 'carbon_at_100'


def test_from_name_errors():
    with pytest.raises(ValueError):
        Metric.from_name('mean')
    with pytest.raises(ValueError):
        Metric.from_name('at_time')


def test_metric_config_names():
    config = MetricConfig.from_dict({'metrics': ['max', 'at_time'], 'params': [None, 100]})
    assert config.names == ['max_carbon', 'carbon_at_100']
    assert config.to_dict() == {'metrics': ['max', 'at_time'], 'params': [None, 100.0]}


def test_metric_config_default_params():
    config = MetricConfig.from_dict({'metrics': ['max']})
    assert config.names == ['max_carbon']


def test_metric_config_params_length_mismatch():
    with pytest.raises(ValueError):
        MetricConfig.from_dict({'metrics': ['max', 'at_time'], 'params': [None]})
