"""Production technologies inside a supply sector."""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from config.schema import TechnologySpec

if TYPE_CHECKING:  # pragma: no cover
    from markets.marketplace import Marketplace

_MIN_COST = 1e-12


class Technology:
    """A technology turning an optional input good into its sector's good.

    Output responds to the ratio between the sector price and the levelised
    cost ``non_energy_cost + input_price / efficiency`` with a constant
    elasticity. When a calibration market is attached, its price scales the
    output so the solver can match the calibrated quantity.
    """

    def __init__(self, spec: TechnologySpec) -> None:
        if spec.efficiency <= 0.0:
            raise ValueError(f'technology {spec.name} efficiency must be positive')
        self.spec = spec
        self.input_market: tuple[str, str] | None = None
        self.calibration_market: tuple[str, str] | None = None
        self.calibration_targets: dict[int, float] = {}
        self.output = np.zeros(0)
        self.input_use = np.zeros(0)
        self.emissions = np.zeros(0)

    @property
    def name(self) -> str:
        return self.spec.name

    def complete_init(self, max_period: int, input_market: tuple[str, str] | None) -> None:
        self.input_market = input_market
        self.output = np.zeros(max_period)
        self.input_use = np.zeros(max_period)
        self.emissions = np.zeros(max_period)

    def cost(self, marketplace: Marketplace, period: int) -> float:
        cost = float(self.spec.non_energy_cost)
        if self.input_market is not None:
            good, region = self.input_market
            cost += marketplace.get_price(good, region, period) / self.spec.efficiency
        return max(cost, _MIN_COST)

    def calc(self, marketplace: Marketplace, price: float, period: int) -> float:
        scaler = 1.0
        if self.calibration_market is not None:
            good, region = self.calibration_market
            scaler = marketplace.get_price(good, region, period)

        if price <= 0.0 or scaler <= 0.0:
            output = 0.0
        else:
            ratio = price / self.cost(marketplace, period)
            output = scaler * self.spec.base_output * ratio ** self.spec.elasticity

        self.output[period] = output
        self.input_use[period] = output / self.spec.efficiency if self.input_market else 0.0
        if self.input_market is not None:
            good, region = self.input_market
            marketplace.add_to_demand(good, region, self.input_use[period], period)
        if self.calibration_market is not None:
            good, region = self.calibration_market
            marketplace.add_to_supply(good, region, output, period)
            marketplace.add_to_demand(good, region, self.calibration_targets.get(period, 0.0), period)
        return output

    def emiss_ind(self, period: int) -> float:
        self.emissions[period] = self.output[period] * self.spec.emissions_coef
        return float(self.emissions[period])


__all__ = ['Technology']
