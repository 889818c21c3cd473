"""Period-stepped scenario driver.

The :class:`Scenario` owns the period index, the marketplace and the world
model and is the only component that knows the order in which they are
operated on. Each period runs

    null registers -> carry over last period -> init_calc -> calc -> solve
    -> summaries/emissions -> traces

except period 0, which only initialises prices and evaluates the world once
without solving.
"""
from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping
from xml.sax.saxutils import quoteattr

from common.utilities import SECTOR_DEPENDENCIES_LOGGER
from config.schema import PeriodIndexSpec, ScenarioSpec, SummaryNode, UnknownNode, WorldSpec
from config.settings import Configuration
from engine.climate import run_climate_model, write_climate_data
from engine.modeltime import Modeltime
from engine.outputs import ScenarioOutputs, build_scenario_outputs
from engine.sinks import (
    SUPPLY_DEMAND_GROUPS_PER_ROW,
    FileSink,
    Tabs,
    TraceSink,
    supply_demand_header,
)
from markets.marketplace import Marketplace
from markets.solver import SolveResult
from world.world import World

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Mapping[str, object]], None]

# fixed summary line of the serialized scenario
SERIALIZED_SUMMARY = '"Reference scenario"'


class ScenarioInitError(RuntimeError):
    """Unrecoverable ordering or precondition violation in the driver."""


@dataclass
class RunSinks:
    """Trace outputs of a run; both are closed when the run ends."""

    debug: TraceSink
    supply_demand: TraceSink


def _date_string(when: datetime | None = None) -> str:
    return (when or datetime.now()).strftime('%Y-%m-%dT%H:%M:%S')


class Scenario:
    """A named scenario and the three model components it owns exclusively."""

    def __init__(
        self,
        *,
        marketplace: Marketplace | None = None,
        world_factory: Callable[[], World] = World,
    ) -> None:
        self.name = ''
        self.summary = ''
        self._modeltime: Modeltime | None = None
        self._world: World | None = None
        self._marketplace: Marketplace | None = marketplace if marketplace is not None else Marketplace()
        self._world_factory = world_factory
        self._solve_results: dict[int, SolveResult | None] = {}

    @property
    def modeltime(self) -> Modeltime | None:
        return self._modeltime

    @property
    def world(self) -> World | None:
        return self._world

    @property
    def marketplace(self) -> Marketplace | None:
        return self._marketplace

    @property
    def solve_results(self) -> Mapping[int, SolveResult | None]:
        return dict(self._solve_results)

    def clear(self) -> None:
        """Release the world, period index and marketplace."""

        self._world = None
        self._modeltime = None
        self._marketplace = None
        self._solve_results = {}

    # ------------------------------------------------------------------
    # construction

    def build(self, spec: ScenarioSpec) -> None:
        """Populate the scenario from typed configuration nodes.

        May be called again with an add-on scenario: world nodes augment the
        existing world, a second period index is ignored.
        """

        if spec.name:
            self.name = spec.name
        for node in spec.children:
            if isinstance(node, SummaryNode):
                self.summary = node.text
            elif isinstance(node, PeriodIndexSpec):
                if self._modeltime is None:
                    modeltime = Modeltime()
                    modeltime.parse(node)
                    # needed before the world sizes its period storage
                    modeltime.set()
                    self._modeltime = modeltime
                else:
                    LOGGER.warning('Modeltime information cannot be modified in a scenario add-on.')
            elif isinstance(node, WorldSpec):
                if self._world is None:
                    self._world = self._world_factory()
                self._world.build(node)
            elif isinstance(node, UnknownNode):
                LOGGER.warning('Unrecognized text string: %s found while parsing scenario.', node.tag)
            else:
                LOGGER.warning('Unrecognized node %r found while parsing scenario.', node)

    def complete_init(self) -> None:
        """Finish all initializations needed before the model can run."""

        if self._world is None:
            raise ScenarioInitError('complete_init() requires a world; none was configured')
        if self._modeltime is None:
            raise ScenarioInitError('complete_init() requires modeltime; none was configured')
        if self._marketplace is None:
            raise ScenarioInitError('complete_init() called on a cleared scenario')
        self._world.complete_init(self._marketplace, self._modeltime)

    def _require_ready(self) -> tuple[World, Modeltime, Marketplace]:
        if self._world is None or self._modeltime is None or self._marketplace is None:
            raise ScenarioInitError('run() requires a world, modeltime and marketplace')
        return self._world, self._modeltime, self._marketplace

    # ------------------------------------------------------------------
    # the period loop

    def run(
        self,
        config: Configuration,
        sinks: RunSinks | None = None,
        progress_cb: ProgressCallback | None = None,
    ) -> ScenarioOutputs:
        """Run every period of the scenario and return the collected outputs.

        When ``sinks`` is omitted the debug and supply/demand traces are
        written to the files named by ``xmlDebugFileName`` and
        ``supplyDemandFileName``. Either way the sinks are closed on every
        exit path.
        """

        tol = config.get_double('SolutionTolerance', 1e-3)
        max_iter = config.get_int('MaxSolveIterations', 50)
        print_graphs = config.get_bool('PrintDependencyGraphs')
        self._solve_results = {}

        with ExitStack() as stack:
            if sinks is not None:
                stack.callback(sinks.supply_demand.close)
                stack.callback(sinks.debug.close)
            world, modeltime, marketplace = self._require_ready()
            if sinks is None:
                debug_sink = stack.enter_context(FileSink(config.get_file('xmlDebugFileName')))
                sd_sink = stack.enter_context(FileSink(config.get_file('supplyDemandFileName')))
            else:
                debug_sink, sd_sink = sinks.debug, sinks.supply_demand

            if progress_cb is not None:
                progress_cb(
                    'run_start',
                    {'max_period': modeltime.max_period, 'years': modeltime.years()},
                )
            tabs = Tabs()

            # Start model run for the first period.
            per = 0
            self._report(progress_cb, 'period_start', per)
            if config.get_bool('CalibrationActive'):
                world.setup_calibration_markets()
            marketplace.init_prices()
            marketplace.null_demands(per)
            marketplace.null_supplies(per)

            self.to_debug_xml_open(debug_sink, tabs)

            world.calc(per)
            world.update_summary(per)
            world.emiss_ind(per)

            self.to_debug_xml_period(per, debug_sink, tabs)
            self._write_supply_demand(per, sd_sink)
            LOGGER.info('Period %s: %s', per, modeltime.period_to_year(per))
            LOGGER.info('Period 0 not solved')
            self._solve_results[per] = None
            self._report(progress_cb, 'period_complete', per)

            if config.get_bool('PrintSectorDependencies', False):
                self.print_sector_dependencies()

            for per in range(1, modeltime.max_period):
                LOGGER.info('Period %s: %s', per, modeltime.period_to_year(per))
                self._report(progress_cb, 'period_start', per)

                marketplace.null_demands(per)
                marketplace.null_supplies(per)
                marketplace.storeto_last(per)
                marketplace.init_to_last(per)
                world.init_calc(per)
                world.calc(per)
                result = marketplace.solve(
                    per, self._evaluator(per), tol=tol, max_iter=max_iter
                )
                world.update_summary(per)
                world.emiss_ind(per)

                self._solve_results[per] = result
                self.to_debug_xml_period(per, debug_sink, tabs)
                self._write_supply_demand(per, sd_sink)
                if print_graphs:
                    self.print_graphs(per, config)
                self._report(progress_cb, 'period_complete', per)

            self.to_debug_xml_close(debug_sink, tabs)

        world.calculate_emissions_totals()
        climate_file = write_climate_data(
            world, modeltime, config.get_file('climatFileName'), scenario_name=self.name
        )
        if config.get_bool('RunClimateModel'):
            run_climate_model(config.get_string('climateModelCommand'), climate_file)

        if progress_cb is not None:
            progress_cb('run_complete', {'max_period': modeltime.max_period})

        return build_scenario_outputs(modeltime, marketplace, world, self._solve_results)

    def _evaluator(self, period: int) -> Callable[[], None]:
        world, _, marketplace = self._require_ready()

        def _evaluate() -> None:
            marketplace.null_demands(period)
            marketplace.null_supplies(period)
            world.calc(period)

        return _evaluate

    def _report(self, progress_cb: ProgressCallback | None, stage: str, period: int) -> None:
        if progress_cb is None:
            return
        payload: dict[str, object] = {
            'period': period,
            'year': self._modeltime.period_to_year(period),
        }
        if stage == 'period_complete':
            result = self._solve_results.get(period)
            payload['solved'] = bool(result.solved) if result is not None else False
            payload['iterations'] = int(result.iterations) if result is not None else 0
        progress_cb(stage, payload)

    def _write_supply_demand(self, period: int, out: TraceSink) -> None:
        out.write_line(f'Period {period}: {self._modeltime.period_to_year(period)}')
        out.write_line(supply_demand_header())
        self._marketplace.write_supply_demand_rows(period, out, SUPPLY_DEMAND_GROUPS_PER_ROW)

    # ------------------------------------------------------------------
    # serialisation and diagnostics

    def to_xml(self, out: TraceSink, tabs: Tabs | None = None, *, date: datetime | None = None) -> None:
        """Write the scenario definition as XML."""

        world, modeltime, _ = self._require_ready()
        tabs = tabs or Tabs()
        out.write_line('<?xml version="1.0" encoding="UTF-8"?>')
        tabs.write(out, f'<scenario name={quoteattr(self.name)} date="{_date_string(date)}">')
        tabs.increase()
        tabs.write(out, f'<summary>{SERIALIZED_SUMMARY}</summary>')
        modeltime.to_xml(out, tabs)
        world.to_xml(out, tabs)
        tabs.decrease()
        tabs.write(out, '</scenario>')

    def to_debug_xml_open(self, out: TraceSink, tabs: Tabs, *, date: datetime | None = None) -> None:
        tabs.write(out, f'<scenario name={quoteattr(self.name)} date="{_date_string(date)}">')
        tabs.increase()
        tabs.write(out, '<summary>"Debugging output"</summary>')

    def to_debug_xml_period(self, period: int, out: TraceSink, tabs: Tabs) -> None:
        world, modeltime, marketplace = self._require_ready()
        tabs.write(out, f'<period number="{period}" year="{modeltime.period_to_year(period)}">')
        tabs.increase()
        modeltime.to_debug_xml(period, out, tabs)
        world.to_debug_xml(period, out, tabs)
        marketplace.to_debug_xml(period, out, tabs)
        tabs.decrease()
        tabs.write(out, '</period>')

    def to_debug_xml_close(self, out: TraceSink, tabs: Tabs) -> None:
        tabs.decrease()
        tabs.write(out, '</scenario>')

    def print_graphs(self, period: int, config: Configuration) -> Path | None:
        """Write the dependency graph of ``period`` to ``<dependencyGraphName>_<period>.dot``.

        Convert with ``dot -Tpng graph_8.dot -o graph.png``. A file that
        cannot be opened is reported and skipped.
        """

        world, _, _ = self._require_ready()
        base = config.get_file('dependencyGraphName', 'graph')
        path = base.with_name(f'{base.name}_{period}.dot')
        try:
            sink = FileSink(path)
        except OSError as exc:
            LOGGER.error('Unable to open dependency graph file %s: %s', path, exc)
            return None
        with sink:
            world.print_graphs(sink, period)
        return path

    def print_sector_dependencies(self) -> None:
        world, _, _ = self._require_ready()
        world.print_sector_dependencies(logging.getLogger(SECTOR_DEPENDENCIES_LOGGER))


__all__ = ['RunSinks', 'Scenario', 'ScenarioInitError']
