"""The collection of all markets traded in a scenario."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterator

from markets.market import NORMAL, Market
from markets.solver import SolveResult, solve_period

if TYPE_CHECKING:  # pragma: no cover
    from engine.sinks import Tabs, TraceSink

LOGGER = logging.getLogger(__name__)


class Marketplace:
    """Owns the per-period registers of every market.

    Markets are keyed by ``(good, region)`` and kept in creation order so
    that solving and reporting are deterministic.
    """

    def __init__(self) -> None:
        self._markets: dict[tuple[str, str], Market] = {}

    def __len__(self) -> int:
        return len(self._markets)

    def __iter__(self) -> Iterator[Market]:
        return iter(self._markets.values())

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._markets

    def create_market(
        self,
        good: str,
        region: str,
        max_period: int,
        *,
        initial_price: float = 1.0,
        kind: str = NORMAL,
    ) -> Market:
        """Return the market for ``good`` in ``region``, creating it when missing."""

        key = (good, region)
        existing = self._markets.get(key)
        if existing is not None:
            return existing
        market = Market(
            good=good,
            region=region,
            max_period=int(max_period),
            initial_price=float(initial_price),
            kind=kind,
        )
        self._markets[key] = market
        LOGGER.debug('Created %s market %s', kind, market.name)
        return market

    def market(self, good: str, region: str) -> Market:
        try:
            return self._markets[(good, region)]
        except KeyError:
            raise KeyError(f'No market for good {good!r} in region {region!r}') from None

    def init_prices(self) -> None:
        for market in self._markets.values():
            market.init_price()

    def null_demands(self, period: int) -> None:
        for market in self._markets.values():
            market.null_demand(period)

    def null_supplies(self, period: int) -> None:
        for market in self._markets.values():
            market.null_supply(period)

    def storeto_last(self, period: int) -> None:
        """Save the converged state of ``period - 1`` into every market's shadow registers."""

        if period < 1:
            raise ValueError('storeto_last requires a period after the first')
        for market in self._markets.values():
            market.store_to_last(period)

    def init_to_last(self, period: int) -> None:
        """Seed the prices of ``period`` from the shadow registers."""

        if period < 1:
            raise ValueError('init_to_last requires a period after the first')
        for market in self._markets.values():
            market.init_to_last(period)

    def get_price(self, good: str, region: str, period: int) -> float:
        return float(self.market(good, region).price[period])

    def add_to_supply(self, good: str, region: str, value: float, period: int) -> None:
        self.market(good, region).supply[period] += float(value)

    def add_to_demand(self, good: str, region: str, value: float, period: int) -> None:
        self.market(good, region).demand[period] += float(value)

    def set_solvable(self, good: str, region: str, period: int, solvable: bool) -> None:
        self.market(good, region).solvable[period] = bool(solvable)

    def solve(
        self,
        period: int,
        evaluate: Callable[[], None],
        *,
        tol: float = 1e-3,
        max_iter: int = 50,
    ) -> SolveResult:
        """Clear the markets of ``period``; ``evaluate`` recalculates supplies and demands."""

        return solve_period(
            list(self._markets.values()), period, evaluate, tol=tol, max_iter=max_iter
        )

    def write_supply_demand_rows(self, period: int, out: TraceSink, per_row: int = 5) -> None:
        """Write ``Market,Name,Price,Supply,Demand`` groups packed ``per_row`` to a line."""

        cells: list[str] = []
        for market in self._markets.values():
            cells.append(
                f'{market.region},{market.good},{market.price[period]:.6g},'
                f'{market.supply[period]:.6g},{market.demand[period]:.6g}'
            )
        out.write_block(
            ','.join(cells[start:start + per_row]) + ','
            for start in range(0, len(cells), per_row)
        )

    def to_debug_xml(self, period: int, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, '<Marketplace>')
        tabs.increase()
        for market in self._markets.values():
            tabs.write(
                out,
                f'<market name="{market.name}" type="{market.kind}">'
                f'<price>{market.price[period]:.6g}</price>'
                f'<supply>{market.supply[period]:.6g}</supply>'
                f'<demand>{market.demand[period]:.6g}</demand>'
                '</market>',
            )
        tabs.decrease()
        tabs.write(out, '</Marketplace>')


__all__ = ['Marketplace']
