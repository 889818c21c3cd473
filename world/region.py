"""A region groups the supply and demand sectors located in it."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

import numpy as np

from config.schema import RegionSpec
from world.sector import DemandSector, SupplySector

if TYPE_CHECKING:  # pragma: no cover
    from engine.sinks import Tabs, TraceSink
    from markets.marketplace import Marketplace


@dataclass(frozen=True)
class RegionSummary:
    """Reporting totals of one region for one period.

    Attributes
    ----------
    output_by_sector:
        Mapping of supply sector name to the quantity produced.
    input_by_good:
        Mapping of input good to the quantity consumed by technologies.
    demand_by_sector:
        Mapping of demand sector name to the quantity consumed.
    """

    output_by_sector: dict[str, float] = field(default_factory=dict)
    input_by_good: dict[str, float] = field(default_factory=dict)
    demand_by_sector: dict[str, float] = field(default_factory=dict)


class Region:
    def __init__(self, spec: RegionSpec) -> None:
        self.name = spec.name
        self.supply_sectors: dict[str, SupplySector] = {}
        self.demand_sectors: dict[str, DemandSector] = {}
        self.emissions = np.zeros(0)
        self.summaries: dict[int, RegionSummary] = {}
        self.merge(spec)

    def merge(self, spec: RegionSpec) -> None:
        for sector_spec in spec.supply_sectors:
            existing = self.supply_sectors.get(sector_spec.name)
            if existing is None:
                self.supply_sectors[sector_spec.name] = SupplySector(sector_spec, self.name)
            else:
                existing.merge(sector_spec)
        for sector_spec in spec.demand_sectors:
            self.demand_sectors[sector_spec.name] = DemandSector(sector_spec)

    def complete_init(
        self,
        max_period: int,
        resolve_market: Callable[[str, str], tuple[str, str]],
    ) -> None:
        self.emissions = np.zeros(max_period)
        self.summaries = {}
        for sector in self.supply_sectors.values():
            sector.complete_init(max_period, lambda good: resolve_market(good, self.name))
        for sector in self.demand_sectors.values():
            sector.complete_init(max_period, resolve_market(sector.good, sector.spec.market_region))

    def init_calc(self, period: int, years_elapsed: int) -> None:
        for sector in self.demand_sectors.values():
            sector.init_calc(period, years_elapsed)

    def calc(self, marketplace: Marketplace, period: int) -> None:
        for sector in self.supply_sectors.values():
            sector.calc(marketplace, period)
        for sector in self.demand_sectors.values():
            good, region = sector.market
            reference = marketplace.market(good, region).initial_price
            sector.calc(marketplace, period, reference)

    def update_summary(self, period: int) -> RegionSummary:
        inputs: dict[str, float] = {}
        for sector in self.supply_sectors.values():
            for good, value in sector.input_use(period).items():
                inputs[good] = inputs.get(good, 0.0) + value
        summary = RegionSummary(
            output_by_sector={
                name: float(sector.output[period]) for name, sector in self.supply_sectors.items()
            },
            input_by_good=inputs,
            demand_by_sector={
                name: float(sector.demand[period]) for name, sector in self.demand_sectors.items()
            },
        )
        self.summaries[period] = summary
        return summary

    def emiss_ind(self, period: int) -> float:
        self.emissions[period] = sum(
            sector.emiss_ind(period) for sector in self.supply_sectors.values()
        )
        return float(self.emissions[period])

    def dependencies(self) -> dict[str, list[str]]:
        """Return the goods each sector of the region consumes."""

        deps: dict[str, list[str]] = {}
        for name, sector in self.supply_sectors.items():
            deps[name] = sector.input_goods()
        for name, sector in self.demand_sectors.items():
            deps[name] = [sector.good]
        return deps

    def to_xml(self, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, f'<region name="{self.name}">')
        tabs.increase()
        for sector in self.supply_sectors.values():
            tabs.write(
                out,
                f'<supplysector name="{sector.name}" good="{sector.good}" '
                f'market="{sector.market_region}">',
            )
            tabs.increase()
            tabs.write(out, f'<initial-price>{sector.initial_price}</initial-price>')
            for tech in sector.technologies.values():
                spec = tech.spec
                attrs = f'name="{spec.name}"'
                if spec.input_good is not None:
                    attrs += f' input="{spec.input_good}" efficiency="{spec.efficiency}"'
                tabs.write(out, f'<technology {attrs}>')
                tabs.increase()
                tabs.write(out, f'<base-output>{spec.base_output}</base-output>')
                tabs.write(out, f'<non-energy-cost>{spec.non_energy_cost}</non-energy-cost>')
                tabs.write(out, f'<elasticity>{spec.elasticity}</elasticity>')
                tabs.write(out, f'<emissions-coef>{spec.emissions_coef}</emissions-coef>')
                for year, value in sorted(spec.calibrated_output.items()):
                    tabs.write(out, f'<calibrated-output year="{year}">{value}</calibrated-output>')
                tabs.decrease()
                tabs.write(out, '</technology>')
            tabs.decrease()
            tabs.write(out, '</supplysector>')
        for sector in self.demand_sectors.values():
            spec = sector.spec
            tabs.write(
                out,
                f'<demandsector name="{spec.name}" good="{spec.good}" market="{spec.market_region}">',
            )
            tabs.increase()
            tabs.write(out, f'<base-demand>{spec.base_demand}</base-demand>')
            tabs.write(out, f'<price-elasticity>{spec.price_elasticity}</price-elasticity>')
            tabs.write(out, f'<income-growth>{spec.income_growth}</income-growth>')
            tabs.decrease()
            tabs.write(out, '</demandsector>')
        tabs.decrease()
        tabs.write(out, '</region>')

    def to_debug_xml(self, period: int, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, f'<region name="{self.name}">')
        tabs.increase()
        for sector in self.supply_sectors.values():
            tabs.write(out, f'<supplysector name="{sector.name}">')
            tabs.increase()
            tabs.write(out, f'<output>{sector.output[period]:.6g}</output>')
            for tech in sector.technologies.values():
                tabs.write(
                    out,
                    f'<technology name="{tech.name}" output="{tech.output[period]:.6g}" '
                    f'input="{tech.input_use[period]:.6g}"/>',
                )
            tabs.decrease()
            tabs.write(out, '</supplysector>')
        for sector in self.demand_sectors.values():
            tabs.write(
                out,
                f'<demandsector name="{sector.name}" demand="{sector.demand[period]:.6g}"/>',
            )
        tabs.write(out, f'<emissions>{self.emissions[period]:.6g}</emissions>')
        tabs.decrease()
        tabs.write(out, '</region>')


__all__ = ['Region', 'RegionSummary']
