"""Per-good market registers indexed by model period."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

NORMAL = 'normal'
CALIBRATION = 'calibration'


@dataclass
class Market:
    """Price, supply and demand of one good in one market region.

    Registers are numpy arrays sized from the model period count. The
    ``stored_*`` scalars hold the converged state of the previous period and
    are only written by :meth:`store_to_last`.
    """

    good: str
    region: str
    max_period: int
    initial_price: float = 1.0
    kind: str = NORMAL
    price: np.ndarray = field(init=False, repr=False)
    supply: np.ndarray = field(init=False, repr=False)
    demand: np.ndarray = field(init=False, repr=False)
    solvable: np.ndarray = field(init=False, repr=False)
    stored_price: float = field(init=False, default=0.0)
    stored_supply: float = field(init=False, default=0.0)
    stored_demand: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        if self.max_period <= 0:
            raise ValueError(f'market {self.name} needs at least one period')
        self.price = np.zeros(self.max_period, dtype=float)
        self.supply = np.zeros(self.max_period, dtype=float)
        self.demand = np.zeros(self.max_period, dtype=float)
        self.solvable = np.full(self.max_period, self.kind == NORMAL, dtype=bool)

    @property
    def name(self) -> str:
        return f'{self.region}{self.good}'

    def init_price(self) -> None:
        self.price[:] = float(self.initial_price)

    def null_demand(self, period: int) -> None:
        self.demand[period] = 0.0

    def null_supply(self, period: int) -> None:
        self.supply[period] = 0.0

    def store_to_last(self, period: int) -> None:
        """Copy the state of ``period - 1`` into the stored registers."""

        last = period - 1
        self.stored_price = float(self.price[last])
        self.stored_supply = float(self.supply[last])
        self.stored_demand = float(self.demand[last])

    def init_to_last(self, period: int) -> None:
        # supply and demand stay nulled; only the price seeds the period
        self.price[period] = self.stored_price

    def excess_demand(self, period: int) -> float:
        return float(self.demand[period] - self.supply[period])

    def is_solved(self, period: int, tol: float) -> bool:
        scale = max(abs(float(self.demand[period])), abs(float(self.supply[period])), 1.0)
        return abs(self.excess_demand(period)) <= tol * scale


__all__ = ['CALIBRATION', 'Market', 'NORMAL']
