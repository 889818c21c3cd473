"""Supply and demand sectors of a region."""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from config.schema import DemandSectorSpec, SupplySectorSpec
from world.technology import Technology

if TYPE_CHECKING:  # pragma: no cover
    from markets.marketplace import Marketplace

_MIN_PRICE = 1e-12


class SupplySector:
    """Group of technologies supplying one good to one market."""

    def __init__(self, spec: SupplySectorSpec, region: str) -> None:
        self.name = spec.name
        self.good = spec.good or spec.name
        self.market_region = spec.market_region or region
        self.initial_price = spec.initial_price if spec.initial_price is not None else 1.0
        self.technologies: dict[str, Technology] = {}
        self.output = np.zeros(0)
        self.merge(spec)

    def merge(self, spec: SupplySectorSpec) -> None:
        """Apply a later definition of the same sector.

        Only attributes present in ``spec`` are updated; technologies are
        replaced by name.
        """

        if spec.good is not None:
            self.good = spec.good
        if spec.market_region is not None:
            self.market_region = spec.market_region
        if spec.initial_price is not None:
            self.initial_price = spec.initial_price
        for tech_spec in spec.technologies:
            self.technologies[tech_spec.name] = Technology(tech_spec)

    @property
    def market(self) -> tuple[str, str]:
        return (self.good, self.market_region)

    def input_goods(self) -> list[str]:
        goods: list[str] = []
        for tech in self.technologies.values():
            good = tech.spec.input_good
            if good is not None and good not in goods:
                goods.append(good)
        return goods

    def complete_init(self, max_period: int, resolve_market) -> None:
        self.output = np.zeros(max_period)
        for tech in self.technologies.values():
            good = tech.spec.input_good
            tech.complete_init(max_period, resolve_market(good) if good is not None else None)

    def calc(self, marketplace: Marketplace, period: int) -> None:
        price = marketplace.get_price(self.good, self.market_region, period)
        total = 0.0
        for tech in self.technologies.values():
            total += tech.calc(marketplace, price, period)
        self.output[period] = total
        marketplace.add_to_supply(self.good, self.market_region, total, period)

    def input_use(self, period: int) -> dict[str, float]:
        use: dict[str, float] = {}
        for tech in self.technologies.values():
            good = tech.spec.input_good
            if good is not None:
                use[good] = use.get(good, 0.0) + float(tech.input_use[period])
        return use

    def emiss_ind(self, period: int) -> float:
        return sum(tech.emiss_ind(period) for tech in self.technologies.values())


class DemandSector:
    """Final demand for a good growing with income and responding to price."""

    def __init__(self, spec: DemandSectorSpec) -> None:
        self.spec = spec
        self.market: tuple[str, str] | None = None
        self.demand = np.zeros(0)
        self._base = np.zeros(0)
        self._prepared = np.zeros(0, dtype=bool)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def good(self) -> str:
        return self.spec.good

    def complete_init(self, max_period: int, market: tuple[str, str]) -> None:
        self.market = market
        self.demand = np.zeros(max_period)
        self._base = np.zeros(max_period)
        self._prepared = np.zeros(max_period, dtype=bool)

    def init_calc(self, period: int, years_elapsed: int) -> None:
        self._base[period] = self.spec.base_demand * (1.0 + self.spec.income_growth) ** years_elapsed
        self._prepared[period] = True

    def calc(self, marketplace: Marketplace, period: int, reference_price: float) -> None:
        if not self._prepared[period]:
            raise RuntimeError(f'demand sector {self.name} calculated before init_calc({period})')
        good, region = self.market
        price = max(marketplace.get_price(good, region, period), _MIN_PRICE)
        ratio = price / max(reference_price, _MIN_PRICE)
        self.demand[period] = self._base[period] * ratio ** self.spec.price_elasticity
        marketplace.add_to_demand(good, region, self.demand[period], period)


__all__ = ['DemandSector', 'SupplySector']
