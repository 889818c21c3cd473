"""Fixtures supporting scenario driver tests."""

from __future__ import annotations

from pathlib import Path

from config.scenario_loader import parse_scenario_text
from config.schema import ScenarioSpec
from config.settings import Configuration
from engine.scenario import Scenario
from markets.marketplace import Marketplace
from world.world import World

YEARS = [2000, 2005, 2010]

MINIMAL_XML = """<?xml version="1.0" encoding="UTF-8"?>
<scenario name="minimal">
	<summary>Single region test scenario</summary>
	<modeltime>
		<startyr>2000</startyr>
		<endyr>2010</endyr>
		<timestep>5</timestep>
	</modeltime>
	<world>
		<region name="R">
			<supplysector name="coal">
				<initial-price>1.0</initial-price>
				<technology name="mining">
					<base-output>10</base-output>
					<non-energy-cost>1.0</non-energy-cost>
					<elasticity>1.0</elasticity>
				</technology>
			</supplysector>
			<supplysector name="electricity">
				<initial-price>3.0</initial-price>
				<technology name="plant" input="coal" efficiency="0.5">
					<base-output>10</base-output>
					<non-energy-cost>1.0</non-energy-cost>
					<elasticity>1.0</elasticity>
					<emissions-coef>0.5</emissions-coef>
					<calibrated-output year="2005">8</calibrated-output>
				</technology>
			</supplysector>
			<demandsector name="residential" good="electricity">
				<base-demand>20</base-demand>
				<price-elasticity>-0.5</price-elasticity>
				<income-growth>0.0</income-growth>
			</demandsector>
		</region>
	</world>
</scenario>
"""

ADD_ON_XML = """<scenario name="add-on">
	<modeltime>
		<startyr>1990</startyr>
		<endyr>2100</endyr>
		<timestep>10</timestep>
	</modeltime>
	<world>
		<region name="R">
			<supplysector name="electricity">
				<initial-price>3.0</initial-price>
				<technology name="wind">
					<base-output>2</base-output>
					<non-energy-cost>4.0</non-energy-cost>
				</technology>
			</supplysector>
		</region>
		<region name="S">
			<supplysector name="gas">
				<technology name="well">
					<base-output>5</base-output>
				</technology>
			</supplysector>
		</region>
	</world>
	<policy/>
</scenario>
"""


def minimal_spec() -> ScenarioSpec:
    return parse_scenario_text(MINIMAL_XML)


def make_config(output_dir: str | Path, **bools: bool) -> Configuration:
    """Return a configuration writing every file to ``output_dir``."""

    return Configuration(
        bools=bools,
        ints={'MaxSolveIterations': 50},
        doubles={'SolutionTolerance': 1e-4},
        output_dir=Path(output_dir),
    )


def build_scenario(
    *,
    world_factory=World,
    marketplace: Marketplace | None = None,
) -> Scenario:
    """Return the minimal scenario, built and initialised."""

    scenario = Scenario(marketplace=marketplace, world_factory=world_factory)
    scenario.build(minimal_spec())
    scenario.complete_init()
    return scenario
