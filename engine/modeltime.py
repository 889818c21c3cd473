"""Lookup table between model periods and calendar years."""
from __future__ import annotations

from bisect import bisect_left
from typing import TYPE_CHECKING

from config.schema import PeriodIndexSpec

if TYPE_CHECKING:  # pragma: no cover
    from engine.sinks import Tabs, TraceSink


class ModeltimeError(ValueError):
    """Raised for an invalid period definition or a change after :meth:`Modeltime.set`."""


class Modeltime:
    """Period index mapping zero-based periods to calendar years.

    The instance is populated from a :class:`PeriodIndexSpec` and frozen by
    :meth:`set`; every lookup is a pure read afterwards.
    """

    def __init__(self) -> None:
        self._spec: PeriodIndexSpec | None = None
        self._years: tuple[int, ...] = ()
        self._finalized = False

    def parse(self, spec: PeriodIndexSpec) -> None:
        if self._finalized:
            raise ModeltimeError('Modeltime cannot be modified after set()')
        self._spec = spec

    def set(self) -> None:
        """Build the period table and freeze the instance."""

        if self._finalized:
            raise ModeltimeError('Modeltime has already been set')
        if self._spec is None:
            raise ModeltimeError('Modeltime has no period definition to set')
        spec = self._spec
        if spec.period_years:
            years = tuple(int(year) for year in spec.period_years)
        else:
            if spec.timestep <= 0:
                raise ModeltimeError(f'timestep must be positive, got {spec.timestep}')
            if spec.end_year < spec.start_year:
                raise ModeltimeError(
                    f'endyr {spec.end_year} precedes startyr {spec.start_year}'
                )
            years = tuple(range(spec.start_year, spec.end_year + 1, spec.timestep))
        if not years:
            raise ModeltimeError('Modeltime defines no periods')
        if any(later <= earlier for earlier, later in zip(years, years[1:])):
            raise ModeltimeError(f'period years must strictly increase: {list(years)}')
        self._years = years
        self._finalized = True

    @property
    def is_set(self) -> bool:
        return self._finalized

    def _require_set(self) -> None:
        if not self._finalized:
            raise ModeltimeError('Modeltime must be set() before use')

    @property
    def max_period(self) -> int:
        self._require_set()
        return len(self._years)

    @property
    def start_year(self) -> int:
        self._require_set()
        return self._years[0]

    @property
    def end_year(self) -> int:
        self._require_set()
        return self._years[-1]

    def period_to_year(self, period: int) -> int:
        self._require_set()
        if not 0 <= period < len(self._years):
            raise IndexError(f'period {period} outside [0, {len(self._years)})')
        return self._years[period]

    def year_to_period(self, year: int) -> int:
        """Return the period whose interval ends at or after ``year``."""

        self._require_set()
        if year < self._years[0] or year > self._years[-1]:
            raise KeyError(f'year {year} outside {self._years[0]}-{self._years[-1]}')
        return bisect_left(self._years, year)

    def timestep(self, period: int) -> int:
        """Number of years represented by ``period``."""

        self._require_set()
        if period == 0:
            if len(self._years) > 1:
                return self._years[1] - self._years[0]
            return self._spec.timestep if self._spec is not None else 1
        return self.period_to_year(period) - self.period_to_year(period - 1)

    def years(self) -> list[int]:
        self._require_set()
        return list(self._years)

    def to_xml(self, out: TraceSink, tabs: Tabs) -> None:
        spec = self._spec
        tabs.write(out, '<modeltime>')
        tabs.increase()
        tabs.write(out, f'<startyr>{self.start_year}</startyr>')
        tabs.write(out, f'<endyr>{self.end_year}</endyr>')
        if spec is not None and spec.period_years:
            for year in self._years:
                tabs.write(out, f'<period year="{year}"/>')
        elif spec is not None:
            tabs.write(out, f'<timestep>{spec.timestep}</timestep>')
        tabs.decrease()
        tabs.write(out, '</modeltime>')

    def to_debug_xml(self, period: int, out: TraceSink, tabs: Tabs) -> None:
        tabs.write(out, '<modeltime>')
        tabs.increase()
        tabs.write(out, f'<period>{period}</period>')
        tabs.write(out, f'<year>{self.period_to_year(period)}</year>')
        tabs.write(out, f'<timestep>{self.timestep(period)}</timestep>')
        tabs.write(out, f'<maxper>{self.max_period}</maxper>')
        tabs.decrease()
        tabs.write(out, '</modeltime>')


__all__ = ['Modeltime', 'ModeltimeError']
