import pytest

from flight_telemetry.model import Quantity, Sample
from flight_telemetry.windowed_series import WindowedSeries


def test_default_capacities():
    assert WindowedSeries(Quantity.ACCELERATION).capacity == 60
    for quantity in Quantity:
        if quantity is not Quantity.ACCELERATION:
            assert WindowedSeries(quantity).capacity == 10000


def test_fifo_eviction_keeps_last_samples_in_order():
    series = WindowedSeries(Quantity.SPEED, capacity=5)
    samples = [Sample(time=float(i), value=i * 2.0, altitude=100.0) for i in range(12)]
    for sample in samples:
        series.append(sample)
    assert len(series) == 5
    assert series.snapshot() == tuple(samples[-5:])
    assert series.latest() == samples[-1]


def test_under_capacity_keeps_everything():
    series = WindowedSeries(Quantity.ACCELERATION)
    for i in range(10):
        series.append(Sample(time=float(i), value=0.0))
    assert len(series) == 10


def test_snapshot_is_not_affected_by_later_appends():
    series = WindowedSeries(Quantity.HUMIDITY, capacity=3)
    series.append(Sample(0.0, 1.0, 10.0))
    snap = series.snapshot()
    series.append(Sample(1.0, 2.0, 20.0))
    assert len(snap) == 1
    assert len(series.snapshot()) == 2


def test_reset():
    series = WindowedSeries(Quantity.TEMPERATURE)
    series.append(Sample(0.0, 1.0, 10.0))
    series.reset()
    assert len(series) == 0
    assert series.latest() is None


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        WindowedSeries(Quantity.SPEED, capacity=0)
