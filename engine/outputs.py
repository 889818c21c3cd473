"""Structured containers for storing scenario outputs and serialising to CSV."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

import pandas as pd

if TYPE_CHECKING:  # pragma: no cover
    from engine.modeltime import Modeltime
    from markets.marketplace import Marketplace
    from markets.solver import SolveResult
    from world.world import World

MARKET_COLUMNS = ['period', 'year', 'region', 'good', 'kind', 'price', 'supply', 'demand']
EMISSIONS_COLUMNS = ['period', 'year', 'region', 'emissions', 'cumulative_emissions']
SOLVE_COLUMNS = ['period', 'year', 'solved', 'iterations', 'sweeps', 'unsolved']
OUTPUT_COLUMNS = ['period', 'year', 'region', 'sector', 'output']


@dataclass(frozen=True)
class ScenarioOutputs:
    """Container bundling the primary outputs of a scenario run."""

    markets: pd.DataFrame
    emissions_by_region: pd.DataFrame
    solve_status: pd.DataFrame
    sector_output: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=OUTPUT_COLUMNS)
    )
    emissions_total: Mapping[int, float] = field(default_factory=dict)

    def to_csv(
        self,
        outdir: str | Path,
        *,
        markets_filename: str = 'markets.csv',
        emissions_filename: str = 'emissions_by_region.csv',
        solve_filename: str = 'solve_status.csv',
        output_filename: str = 'sector_output.csv',
    ) -> None:
        """Persist the stored DataFrames to ``outdir`` as CSV files."""

        output_dir = Path(outdir)
        output_dir.mkdir(parents=True, exist_ok=True)

        self.markets.to_csv(output_dir / markets_filename, index=False)
        self.emissions_by_region.to_csv(output_dir / emissions_filename, index=False)
        self.solve_status.to_csv(output_dir / solve_filename, index=False)
        if not self.sector_output.empty:
            self.sector_output.to_csv(output_dir / output_filename, index=False)

    def unsolved_periods(self) -> list[int]:
        """Return the periods whose markets were not cleared."""

        frame = self.solve_status
        if frame.empty:
            return []
        return [int(period) for period in frame.loc[~frame['solved'].astype(bool), 'period']]


def build_scenario_outputs(
    modeltime: Modeltime,
    marketplace: Marketplace,
    world: World,
    solve_results: Mapping[int, SolveResult | None],
) -> ScenarioOutputs:
    """Collect the per-period registers of a finished run into DataFrames."""

    market_rows: list[dict[str, object]] = []
    emissions_rows: list[dict[str, object]] = []
    solve_rows: list[dict[str, object]] = []
    output_rows: list[dict[str, object]] = []

    cumulative = world.cumulative_emissions
    for period in range(modeltime.max_period):
        year = modeltime.period_to_year(period)
        for market in marketplace:
            market_rows.append(
                {
                    'period': period,
                    'year': year,
                    'region': market.region,
                    'good': market.good,
                    'kind': market.kind,
                    'price': float(market.price[period]),
                    'supply': float(market.supply[period]),
                    'demand': float(market.demand[period]),
                }
            )
        for name, region in world.regions.items():
            series = cumulative.get(name)
            emissions_rows.append(
                {
                    'period': period,
                    'year': year,
                    'region': name,
                    'emissions': float(region.emissions[period]),
                    'cumulative_emissions': float(series[period]) if series is not None else 0.0,
                }
            )
            summary = region.summaries.get(period)
            if summary is None:
                continue
            for sector, value in summary.output_by_sector.items():
                output_rows.append(
                    {'period': period, 'year': year, 'region': name, 'sector': sector, 'output': value}
                )

        result = solve_results.get(period)
        solve_rows.append(
            {
                'period': period,
                'year': year,
                'solved': bool(result.solved) if result is not None else False,
                'iterations': int(result.iterations) if result is not None else 0,
                'sweeps': int(result.sweeps) if result is not None else 0,
                'unsolved': ';'.join(result.unsolved) if result is not None else '',
            }
        )

    markets_df = pd.DataFrame(market_rows, columns=MARKET_COLUMNS)
    emissions_df = pd.DataFrame(emissions_rows, columns=EMISSIONS_COLUMNS)
    if not emissions_df.empty:
        emissions_df = emissions_df.sort_values(['period', 'region']).reset_index(drop=True)
    solve_df = pd.DataFrame(solve_rows, columns=SOLVE_COLUMNS)
    output_df = pd.DataFrame(output_rows, columns=OUTPUT_COLUMNS)

    emissions_total = {
        modeltime.period_to_year(period): float(world.emissions[period])
        for period in range(modeltime.max_period)
    }

    return ScenarioOutputs(
        markets=markets_df,
        emissions_by_region=emissions_df,
        solve_status=solve_df,
        sector_output=output_df,
        emissions_total=emissions_total,
    )


__all__ = ['ScenarioOutputs', 'build_scenario_outputs']
