from __future__ import annotations

import importlib
import logging
from datetime import datetime

import pytest

from config.scenario_loader import parse_scenario_text
from engine.scenario import Scenario, ScenarioInitError
from engine.sinks import MemorySink

fixtures = importlib.import_module("tests.fixtures.scenario_minimal")
ADD_ON_XML = fixtures.ADD_ON_XML
build_scenario = fixtures.build_scenario
minimal_spec = fixtures.minimal_spec


def test_build_populates_name_summary_and_period_index() -> None:
    scenario = Scenario()
    scenario.build(minimal_spec())

    assert scenario.name == 'minimal'
    assert scenario.summary == 'Single region test scenario'
    assert scenario.modeltime.is_set
    assert scenario.modeltime.years() == [2000, 2005, 2010]
    assert list(scenario.world.regions) == ['R']


def test_add_on_cannot_change_modeltime(caplog: pytest.LogCaptureFixture) -> None:
    scenario = Scenario()
    scenario.build(minimal_spec())
    modeltime = scenario.modeltime

    with caplog.at_level(logging.WARNING):
        scenario.build(parse_scenario_text(ADD_ON_XML))

    assert 'Modeltime information cannot be modified in a scenario add-on.' in caplog.messages
    assert 'Unrecognized text string: policy found while parsing scenario.' in caplog.messages
    assert scenario.modeltime is modeltime
    assert scenario.modeltime.years() == [2000, 2005, 2010]
    assert scenario.modeltime.max_period == 3
    assert scenario.name == 'add-on'


def test_add_on_augments_existing_world() -> None:
    scenario = Scenario()
    scenario.build(minimal_spec())
    world = scenario.world

    scenario.build(parse_scenario_text(ADD_ON_XML))
    scenario.complete_init()

    assert scenario.world is world
    assert list(world.regions) == ['R', 'S']
    electricity = world.regions['R'].supply_sectors['electricity']
    assert list(electricity.technologies) == ['plant', 'wind']
    assert ('gas', 'S') in scenario.marketplace


def test_complete_init_requires_world_and_modeltime() -> None:
    scenario = Scenario()
    with pytest.raises(ScenarioInitError):
        scenario.complete_init()

    world_only = Scenario()
    world_only.build(parse_scenario_text('<scenario name="x"><world/></scenario>'))
    with pytest.raises(ScenarioInitError, match='modeltime'):
        world_only.complete_init()


def test_cleared_scenario_cannot_run(tmp_path) -> None:
    scenario = build_scenario()
    scenario.clear()

    assert scenario.world is None
    assert scenario.marketplace is None
    with pytest.raises(ScenarioInitError):
        scenario.complete_init()
    with pytest.raises(ScenarioInitError):
        scenario.run(fixtures.make_config(tmp_path))


def test_to_xml_writes_a_parseable_scenario() -> None:
    scenario = build_scenario()
    sink = MemorySink()

    scenario.to_xml(sink, date=datetime(2024, 1, 2, 3, 4, 5))

    assert sink.lines[0] == '<?xml version="1.0" encoding="UTF-8"?>'
    assert sink.lines[1] == '<scenario name="minimal" date="2024-01-02T03:04:05">'
    assert sink.lines[2] == '\t<summary>"Reference scenario"</summary>'
    reparsed = parse_scenario_text(sink.getvalue())
    world = reparsed.children[2]
    plant = world.regions[0].supply_sectors[1].technologies[0]
    assert plant.input_good == 'coal'
    assert plant.calibrated_output == {2005: 8.0}


def test_add_on_sector_keeps_attributes_it_does_not_name() -> None:
    base = """<scenario name="base">
	<modeltime><startyr>2000</startyr><endyr>2010</endyr><timestep>5</timestep></modeltime>
	<world>
		<region name="R">
			<supplysector name="elec" good="power">
				<initial-price>3.0</initial-price>
				<technology name="plant"><base-output>10</base-output></technology>
			</supplysector>
			<demandsector name="residential" good="power">
				<base-demand>10</base-demand>
			</demandsector>
		</region>
	</world>
</scenario>"""
    add_on = """<scenario name="add-on">
	<world>
		<region name="R">
			<supplysector name="elec">
				<technology name="wind"><base-output>2</base-output></technology>
			</supplysector>
		</region>
	</world>
</scenario>"""
    scenario = Scenario()
    scenario.build(parse_scenario_text(base))

    scenario.build(parse_scenario_text(add_on))
    scenario.complete_init()

    sector = scenario.world.regions['R'].supply_sectors['elec']
    assert sector.good == 'power'
    assert sector.market_region == 'R'
    assert sector.initial_price == pytest.approx(3.0)
    assert list(sector.technologies) == ['plant', 'wind']
    assert [market.name for market in scenario.marketplace] == ['Rpower']
    assert scenario.marketplace.market('power', 'R').initial_price == pytest.approx(3.0)
