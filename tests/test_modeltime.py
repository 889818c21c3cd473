from __future__ import annotations

import pytest

from config.schema import PeriodIndexSpec
from engine.modeltime import Modeltime, ModeltimeError
from engine.sinks import MemorySink, Tabs


def _modeltime(spec: PeriodIndexSpec) -> Modeltime:
    modeltime = Modeltime()
    modeltime.parse(spec)
    modeltime.set()
    return modeltime


def test_regular_timestep_defines_periods() -> None:
    modeltime = _modeltime(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))

    assert modeltime.max_period == 3
    assert modeltime.years() == [2000, 2005, 2010]
    assert modeltime.start_year == 2000
    assert modeltime.end_year == 2010
    assert modeltime.timestep(0) == 5
    assert modeltime.timestep(2) == 5


def test_explicit_period_years_override_timestep() -> None:
    spec = PeriodIndexSpec(start_year=1990, end_year=2020, timestep=5, period_years=(1990, 2000, 2005, 2020))
    modeltime = _modeltime(spec)

    assert modeltime.max_period == 4
    assert modeltime.period_to_year(3) == 2020
    assert modeltime.timestep(3) == 15
    assert modeltime.timestep(0) == 10


def test_year_to_period_maps_into_the_enclosing_period() -> None:
    modeltime = _modeltime(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))

    assert modeltime.year_to_period(2000) == 0
    assert modeltime.year_to_period(2003) == 1
    assert modeltime.year_to_period(2005) == 1
    assert modeltime.year_to_period(2010) == 2
    with pytest.raises(KeyError):
        modeltime.year_to_period(2011)
    with pytest.raises(KeyError):
        modeltime.year_to_period(1999)


def test_period_to_year_rejects_out_of_range_periods() -> None:
    modeltime = _modeltime(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))

    with pytest.raises(IndexError):
        modeltime.period_to_year(3)
    with pytest.raises(IndexError):
        modeltime.period_to_year(-1)


def test_modeltime_is_frozen_after_set() -> None:
    modeltime = _modeltime(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))

    with pytest.raises(ModeltimeError):
        modeltime.set()
    with pytest.raises(ModeltimeError):
        modeltime.parse(PeriodIndexSpec(start_year=1990, end_year=2000))
    assert modeltime.max_period == 3


def test_lookups_require_set() -> None:
    modeltime = Modeltime()
    modeltime.parse(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))

    assert not modeltime.is_set
    with pytest.raises(ModeltimeError):
        modeltime.max_period


@pytest.mark.parametrize(
    'spec',
    [
        PeriodIndexSpec(start_year=2000, end_year=2010, timestep=0),
        PeriodIndexSpec(start_year=2010, end_year=2000, timestep=5),
        PeriodIndexSpec(start_year=2000, end_year=2010, period_years=(2000, 2010, 2005)),
    ],
)
def test_invalid_period_definitions_raise(spec: PeriodIndexSpec) -> None:
    modeltime = Modeltime()
    modeltime.parse(spec)
    with pytest.raises(ModeltimeError):
        modeltime.set()


def test_debug_xml_reports_period_details() -> None:
    modeltime = _modeltime(PeriodIndexSpec(start_year=2000, end_year=2010, timestep=5))
    sink = MemorySink()
    tabs = Tabs()

    modeltime.to_debug_xml(1, sink, tabs)

    assert sink.lines[0] == '<modeltime>'
    assert '\t<year>2005</year>' in sink.lines
    assert '\t<maxper>3</maxper>' in sink.lines
    assert tabs.depth == 0
