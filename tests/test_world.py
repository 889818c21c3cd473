from __future__ import annotations

import importlib
import logging

import pytest

np = pytest.importorskip("numpy")

from config.scenario_loader import parse_scenario_text
from config.schema import ConfigError, PeriodIndexSpec
from engine.modeltime import Modeltime
from engine.sinks import MemorySink, Tabs
from markets.marketplace import Marketplace
from world.world import World

fixtures = importlib.import_module("tests.fixtures.scenario_minimal")
MINIMAL_XML = fixtures.MINIMAL_XML


def _world(xml: str = MINIMAL_XML) -> tuple[World, Marketplace, Modeltime]:
    spec = parse_scenario_text(xml)
    modeltime = Modeltime()
    modeltime.parse(next(node for node in spec.children if isinstance(node, PeriodIndexSpec)))
    modeltime.set()
    world = World()
    world.build(spec.children[-1])
    marketplace = Marketplace()
    world.complete_init(marketplace, modeltime)
    marketplace.init_prices()
    return world, marketplace, modeltime


def _calc(world: World, marketplace: Marketplace, period: int) -> None:
    marketplace.null_demands(period)
    marketplace.null_supplies(period)
    world.init_calc(period)
    world.calc(period)


def test_complete_init_creates_one_market_per_supplied_good() -> None:
    _, marketplace, _ = _world()

    assert [market.name for market in marketplace] == ['Rcoal', 'Relectricity']
    assert marketplace.market('electricity', 'R').initial_price == pytest.approx(3.0)


def test_calc_posts_supply_and_demand_to_markets() -> None:
    world, marketplace, _ = _world()

    _calc(world, marketplace, 0)

    coal = marketplace.market('coal', 'R')
    electricity = marketplace.market('electricity', 'R')
    # plant output 10 * 3 / (1 + 1 / 0.5)
    assert electricity.supply[0] == pytest.approx(10.0)
    assert coal.demand[0] == pytest.approx(20.0)
    assert coal.supply[0] == pytest.approx(10.0)
    assert electricity.demand[0] == pytest.approx(20.0)


def test_emissions_and_cumulative_totals() -> None:
    world, marketplace, _ = _world()
    for period in range(3):
        _calc(world, marketplace, period)
        world.emiss_ind(period)

    totals = world.calculate_emissions_totals()

    assert world.emissions[0] == pytest.approx(5.0)
    assert world.regions['R'].emissions[1] == pytest.approx(world.emissions[1])
    assert list(totals['global']) == pytest.approx([25.0, 50.0, 75.0])
    assert list(totals['R']) == pytest.approx(list(totals['global']))


def test_demand_grows_with_income_between_periods() -> None:
    xml = MINIMAL_XML.replace('<income-growth>0.0</income-growth>', '<income-growth>0.1</income-growth>')
    world, marketplace, _ = _world(xml)

    _calc(world, marketplace, 1)

    residential = world.regions['R'].demand_sectors['residential']
    assert residential.demand[1] == pytest.approx(20.0 * 1.1 ** 5)


def test_calibration_markets_are_solvable_only_in_target_periods() -> None:
    world, marketplace, _ = _world()

    created = world.setup_calibration_markets()

    assert created == 1
    market = marketplace.market('electricity-plant-calibration', 'R')
    assert market.kind == 'calibration'
    assert list(market.solvable) == [False, True, False]
    plant = world.regions['R'].supply_sectors['electricity'].technologies['plant']
    assert plant.calibration_targets == {1: 8.0}


def test_unsupplied_input_good_raises_config_error() -> None:
    xml = MINIMAL_XML.replace('input="coal"', 'input="gas"')

    with pytest.raises(ConfigError, match='gas'):
        _world(xml)


def test_print_graphs_writes_dot_digraph() -> None:
    world, marketplace, _ = _world()
    _calc(world, marketplace, 0)
    sink = MemorySink()

    world.print_graphs(sink, 0)

    assert sink.lines[0] == 'digraph "period_0" {'
    assert sink.lines[-1] == '}'
    assert '\t"R_coal" -> "R_electricity" [label="20"];' in sink.lines
    assert '\t"R_electricity" -> "R_residential" [label="20"];' in sink.lines


def test_sector_dependencies_are_logged_as_csv(caplog: pytest.LogCaptureFixture) -> None:
    world, _, _ = _world()
    logger = logging.getLogger('tests.sector_dependencies')

    with caplog.at_level(logging.INFO, logger=logger.name):
        world.print_sector_dependencies(logger)

    assert caplog.messages == [
        'Region,Sector,Dependencies',
        'R,coal',
        'R,electricity,coal',
        'R,residential,electricity',
    ]


def test_debug_xml_is_balanced() -> None:
    world, marketplace, _ = _world()
    _calc(world, marketplace, 0)
    world.emiss_ind(0)
    sink = MemorySink()
    tabs = Tabs()

    world.to_debug_xml(0, sink, tabs)

    assert sink.lines[0] == '<world period="0">'
    assert sink.lines[-1] == '</world>'
    assert tabs.depth == 0
