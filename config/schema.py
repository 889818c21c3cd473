"""Typed scenario configuration nodes produced by the parsing stage."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


class ConfigError(ValueError):
    """Configuration error raised when scenario or run inputs are invalid."""


@dataclass(frozen=True)
class SummaryNode:
    """Free-text description of the scenario."""

    text: str


@dataclass(frozen=True)
class PeriodIndexSpec:
    """Inputs describing the model periods.

    Attributes
    ----------
    start_year:
        Calendar year of period 0.
    end_year:
        Calendar year of the last period.
    timestep:
        Default number of years between consecutive periods.
    period_years:
        Optional explicit period years overriding ``timestep`` spacing.
    """

    start_year: int
    end_year: int
    timestep: int = 1
    period_years: Tuple[int, ...] = ()


@dataclass(frozen=True)
class TechnologySpec:
    """A single production technology inside a supply sector."""

    name: str
    base_output: float = 0.0
    non_energy_cost: float = 1.0
    elasticity: float = 1.0
    input_good: Optional[str] = None
    efficiency: float = 1.0
    emissions_coef: float = 0.0
    calibrated_output: Dict[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SupplySectorSpec:
    """A sector supplying ``good`` into the market of ``market_region``.

    Fields left ``None`` were absent from the input; the world model fills
    them when the sector is first created and keeps them on later merges.
    """

    name: str
    good: Optional[str] = None
    market_region: Optional[str] = None
    initial_price: Optional[float] = None
    technologies: Tuple[TechnologySpec, ...] = ()


@dataclass(frozen=True)
class DemandSectorSpec:
    """A final demand sector consuming ``good``."""

    name: str
    good: str
    market_region: str
    base_demand: float = 0.0
    price_elasticity: float = 0.0
    income_growth: float = 0.0


@dataclass(frozen=True)
class RegionSpec:
    name: str
    supply_sectors: Tuple[SupplySectorSpec, ...] = ()
    demand_sectors: Tuple[DemandSectorSpec, ...] = ()


@dataclass(frozen=True)
class WorldSpec:
    """The region/sector/technology graph of the world model."""

    regions: Tuple[RegionSpec, ...] = ()


@dataclass(frozen=True)
class UnknownNode:
    """A scenario child node the parser did not recognise."""

    tag: str


ScenarioNode = Union[SummaryNode, PeriodIndexSpec, WorldSpec, UnknownNode]


@dataclass(frozen=True)
class ScenarioSpec:
    """Typed representation of a ``<scenario>`` document in document order."""

    name: str
    children: List[ScenarioNode] = field(default_factory=list)


__all__ = [
    'ConfigError',
    'DemandSectorSpec',
    'PeriodIndexSpec',
    'RegionSpec',
    'ScenarioNode',
    'ScenarioSpec',
    'SummaryNode',
    'SupplySectorSpec',
    'TechnologySpec',
    'UnknownNode',
    'WorldSpec',
]
