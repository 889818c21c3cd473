"""The world model: every region of the scenario and the goods they trade."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from config.schema import ConfigError, WorldSpec
from markets.market import CALIBRATION
from world.region import Region

if TYPE_CHECKING:  # pragma: no cover
    from engine.modeltime import Modeltime
    from engine.sinks import Tabs, TraceSink
    from markets.marketplace import Marketplace

LOGGER = logging.getLogger(__name__)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '\\"') + '"'


class World:
    """Region -> sector -> technology graph evaluated period by period.

    The world is bound to a marketplace and period index by
    :meth:`complete_init`; all period operations read and write the market
    registers of that marketplace.
    """

    def __init__(self) -> None:
        self.regions: dict[str, Region] = {}
        self._marketplace: Marketplace | None = None
        self._modeltime: Modeltime | None = None
        self.emissions = np.zeros(0)
        self.cumulative_emissions: dict[str, np.ndarray] = {}

    def build(self, spec: WorldSpec) -> None:
        """Add the regions of ``spec``; regions that already exist are augmented."""

        for region_spec in spec.regions:
            existing = self.regions.get(region_spec.name)
            if existing is None:
                self.regions[region_spec.name] = Region(region_spec)
            else:
                existing.merge(region_spec)

    def _require_init(self) -> tuple[Marketplace, Modeltime]:
        if self._marketplace is None or self._modeltime is None:
            raise RuntimeError('World.complete_init() has not been called')
        return self._marketplace, self._modeltime

    def _resolve_market(self, good: str, preferred_region: str) -> tuple[str, str]:
        marketplace, _ = self._require_init()
        if (good, preferred_region) in marketplace:
            return (good, preferred_region)
        candidates = [market for market in marketplace if market.good == good]
        if len(candidates) == 1:
            return (good, candidates[0].region)
        if not candidates:
            raise ConfigError(f'No sector supplies good {good!r} required in {preferred_region}')
        raise ConfigError(
            f'Good {good!r} is traded in several markets; '
            f'{preferred_region} must name one of {[market.region for market in candidates]}'
        )

    def complete_init(self, marketplace: Marketplace, modeltime: Modeltime) -> None:
        """Create one market per supplied good and size period storage."""

        self._marketplace = marketplace
        self._modeltime = modeltime
        max_period = modeltime.max_period
        for region in self.regions.values():
            for sector in region.supply_sectors.values():
                good, market_region = sector.market
                marketplace.create_market(
                    good, market_region, max_period, initial_price=sector.initial_price
                )
        for region in self.regions.values():
            region.complete_init(max_period, self._resolve_market)
            region.init_calc(0, 0)
        self.emissions = np.zeros(max_period)
        LOGGER.info(
            'World initialized with %s regions and %s markets', len(self.regions), len(marketplace)
        )

    def setup_calibration_markets(self) -> int:
        """Add a calibration market for every technology with calibrated output.

        The market price acts as the technology's output scaler; it is only
        solved in periods that have a calibration value and carries over
        into later periods otherwise.
        """

        marketplace, modeltime = self._require_init()
        created = 0
        for region in self.regions.values():
            for sector in region.supply_sectors.values():
                for tech in sector.technologies.values():
                    if not tech.spec.calibrated_output:
                        continue
                    good = f'{sector.name}-{tech.name}-calibration'
                    marketplace.create_market(
                        good, region.name, modeltime.max_period, initial_price=1.0, kind=CALIBRATION
                    )
                    tech.calibration_market = (good, region.name)
                    tech.calibration_targets = {}
                    for year, value in tech.spec.calibrated_output.items():
                        try:
                            period = modeltime.year_to_period(year)
                        except KeyError:
                            LOGGER.warning(
                                'Calibration year %s of %s/%s is outside the model horizon',
                                year,
                                region.name,
                                tech.name,
                            )
                            continue
                        tech.calibration_targets[period] = float(value)
                        marketplace.set_solvable(good, region.name, period, True)
                    created += 1
        LOGGER.info('Created %s calibration markets', created)
        return created

    def init_calc(self, period: int) -> None:
        _, modeltime = self._require_init()
        elapsed = modeltime.period_to_year(period) - modeltime.start_year
        for region in self.regions.values():
            region.init_calc(period, elapsed)

    def calc(self, period: int) -> None:
        marketplace, _ = self._require_init()
        for region in self.regions.values():
            region.calc(marketplace, period)

    def update_summary(self, period: int) -> None:
        for region in self.regions.values():
            region.update_summary(period)

    def emiss_ind(self, period: int) -> float:
        self.emissions[period] = sum(region.emiss_ind(period) for region in self.regions.values())
        return float(self.emissions[period])

    def calculate_emissions_totals(self) -> dict[str, np.ndarray]:
        """Integrate period emissions over time for every region and the globe."""

        _, modeltime = self._require_init()
        steps = np.array([modeltime.timestep(period) for period in range(modeltime.max_period)])
        totals = {
            name: np.cumsum(region.emissions * steps) for name, region in self.regions.items()
        }
        totals['global'] = np.cumsum(self.emissions * steps)
        self.cumulative_emissions = totals
        return totals

    def to_xml(self, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, '<world>')
        tabs.increase()
        for region in self.regions.values():
            region.to_xml(out, tabs)
        tabs.decrease()
        tabs.write(out, '</world>')

    def to_debug_xml(self, period: int, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, f'<world period="{period}">')
        tabs.increase()
        for region in self.regions.values():
            region.to_debug_xml(period, out, tabs)
        tabs.write(out, f'<emissions>{self.emissions[period]:.6g}</emissions>')
        tabs.decrease()
        tabs.write(out, '</world>')

    def print_graphs(self, out: TraceSink, period: int) -> None:
        """Write the fuel dependency graph of ``period`` in the dot language.

        Render with ``dot -Tpng graph_8.dot -o graph.png``.
        """

        suppliers: dict[str, list[str]] = {}
        for region in self.regions.values():
            for sector in region.supply_sectors.values():
                suppliers.setdefault(sector.good, []).append(f'{region.name}_{sector.name}')

        out.write_line(f'digraph {_quote(f"period_{period}")} {{')
        for region in self.regions.values():
            out.write_line(f'\tsubgraph {_quote("cluster_" + region.name)} {{')
            out.write_line(f'\t\tlabel={_quote(region.name)};')
            for name in list(region.supply_sectors) + list(region.demand_sectors):
                out.write_line(f'\t\t{_quote(region.name + "_" + name)} [label={_quote(name)}];')
            out.write_line('\t}')
        for region in self.regions.values():
            for sector in region.supply_sectors.values():
                target = _quote(f'{region.name}_{sector.name}')
                for good, quantity in sector.input_use(period).items():
                    for source in suppliers.get(good, []):
                        out.write_line(f'\t{_quote(source)} -> {target} [label="{quantity:.4g}"];')
            for sector in region.demand_sectors.values():
                target = _quote(f'{region.name}_{sector.name}')
                for source in suppliers.get(sector.good, []):
                    out.write_line(
                        f'\t{_quote(source)} -> {target} [label="{sector.demand[period]:.4g}"];'
                    )
        out.write_line('}')

    def print_sector_dependencies(self, logger: logging.Logger) -> None:
        """Log one csv line per sector listing the goods it depends on."""

        logger.info('Region,Sector,Dependencies')
        for region in self.regions.values():
            for sector, goods in region.dependencies().items():
                logger.info(','.join([region.name, sector, *goods]))


__all__ = ['World']
