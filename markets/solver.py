"""Clear the markets of one period by sweeping a bisection over each good."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from markets.market import Market

LOGGER = logging.getLogger(__name__)

_PRICE_SOLVER_LOW = 1e-8
_PRICE_SOLVER_HIGH = 1e6
_PRICE_SOLVER_MAX_ITER = 100
_BRACKET_FACTOR = 2.0
# single-market target as a fraction of the period tolerance
_INNER_TOL_FACTOR = 0.01


@dataclass(frozen=True)
class SolveResult:
    """Outcome of clearing the markets of one period."""

    period: int
    solved: bool
    iterations: int
    sweeps: int
    unsolved: tuple[str, ...] = ()


def _bisect_market(
    market: Market,
    period: int,
    evaluate: Callable[[], None],
    tol: float,
) -> bool:
    """Bisect the price of ``market`` until its excess demand is within ``tol``.

    Every probe writes the trial price into the market register and calls
    ``evaluate`` so the whole world is recalculated at that price.
    """

    def _excess(price: float) -> float:
        market.price[period] = price
        evaluate()
        return market.excess_demand(period)

    start = max(float(market.price[period]), _PRICE_SOLVER_LOW)
    low_bound = high_bound = start
    excess = _excess(start)
    if market.is_solved(period, tol):
        return True

    # positive excess demand means the price is too low
    if excess > 0.0:
        while excess > 0.0 and high_bound < _PRICE_SOLVER_HIGH:
            low_bound = high_bound
            high_bound = min(high_bound * _BRACKET_FACTOR, _PRICE_SOLVER_HIGH)
            excess = _excess(high_bound)
        if excess > 0.0:
            return False
    else:
        while excess < 0.0 and low_bound > _PRICE_SOLVER_LOW:
            high_bound = low_bound
            low_bound = max(low_bound / _BRACKET_FACTOR, _PRICE_SOLVER_LOW)
            excess = _excess(low_bound)
        if excess < 0.0:
            return False
    if market.is_solved(period, tol):
        return True

    for _ in range(_PRICE_SOLVER_MAX_ITER):
        mid = 0.5 * (low_bound + high_bound)
        excess_mid = _excess(mid)
        if market.is_solved(period, tol):
            return True
        if excess_mid > 0.0:
            low_bound = mid
        else:
            high_bound = mid
        if abs(high_bound - low_bound) <= 1e-12 * max(high_bound, 1.0):
            break
    return market.is_solved(period, tol)


def solve_period(
    markets: Sequence[Market],
    period: int,
    evaluate: Callable[[], None],
    *,
    tol: float = 1e-3,
    max_iter: int = 50,
) -> SolveResult:
    """Drive every solvable market of ``period`` to equilibrium.

    Each sweep bisects every solvable market in turn (Gauss-Seidel) to a
    target tighter than ``tol``. Sweeps repeat until a full sweep leaves all
    of them within ``tol`` or ``max_iter`` sweeps have run. Failing to
    converge is reported in the result, never raised.
    """

    tol = max(float(tol), 0.0)
    inner_tol = tol * _INNER_TOL_FACTOR
    max_iter_int = max(int(max_iter), 0)
    calls = 0

    def _counted() -> None:
        nonlocal calls
        calls += 1
        evaluate()

    active = [market for market in markets if bool(market.solvable[period])]
    _counted()

    sweeps = 0
    unsolved = [market for market in active if not market.is_solved(period, tol)]
    while unsolved and sweeps < max_iter_int:
        sweeps += 1
        for market in active:
            _bisect_market(market, period, _counted, inner_tol)
        unsolved = [market for market in active if not market.is_solved(period, tol)]
        LOGGER.debug(
            'Period %s sweep %s: %s of %s markets unsolved', period, sweeps, len(unsolved), len(active)
        )

    if unsolved:
        LOGGER.warning(
            'Period %s failed to solve after %s sweeps; unsolved markets: %s',
            period,
            sweeps,
            ', '.join(market.name for market in unsolved),
        )
    return SolveResult(
        period=period,
        solved=not unsolved,
        iterations=calls,
        sweeps=sweeps,
        unsolved=tuple(market.name for market in unsolved),
    )


__all__ = ['SolveResult', 'solve_period']
