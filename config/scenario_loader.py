"""Parse scenario XML documents into typed configuration nodes."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, TypeVar

from config.schema import (
    ConfigError,
    DemandSectorSpec,
    PeriodIndexSpec,
    RegionSpec,
    ScenarioNode,
    ScenarioSpec,
    SummaryNode,
    SupplySectorSpec,
    TechnologySpec,
    UnknownNode,
    WorldSpec,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar('T')


def _child_text(node: ET.Element, tag: str) -> str | None:
    child = node.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _convert(raw: str | None, cast: Callable[[str], T], where: str, default: T) -> T:
    if raw is None:
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'{where} has invalid value {raw!r}') from exc


def _float_child(node: ET.Element, tag: str, where: str, default: float) -> float:
    return _convert(_child_text(node, tag), float, f'{where}/{tag}', default)


def _int_child(node: ET.Element, tag: str, where: str, default: int) -> int:
    return _convert(_child_text(node, tag), int, f'{where}/{tag}', default)


def _float_attr(node: ET.Element, name: str, where: str, default: float) -> float:
    return _convert(node.get(name), float, f'{where}@{name}', default)


def _required_name(node: ET.Element, where: str) -> str:
    name = (node.get('name') or '').strip()
    if not name:
        raise ConfigError(f'{where} <{node.tag}> requires a name attribute')
    return name


def parse_modeltime(node: ET.Element) -> PeriodIndexSpec:
    """Return the :class:`PeriodIndexSpec` described by a ``<modeltime>`` node."""

    start = _child_text(node, 'startyr')
    end = _child_text(node, 'endyr')
    if start is None or end is None:
        raise ConfigError('modeltime requires both <startyr> and <endyr>')
    years = []
    for child in node.findall('period'):
        years.append(_convert(child.get('year'), int, 'modeltime/period@year', 0))
    return PeriodIndexSpec(
        start_year=_convert(start, int, 'modeltime/startyr', 0),
        end_year=_convert(end, int, 'modeltime/endyr', 0),
        timestep=_int_child(node, 'timestep', 'modeltime', 1),
        period_years=tuple(years),
    )


def _parse_technology(node: ET.Element, where: str) -> TechnologySpec:
    name = _required_name(node, where)
    where = f'{where}/technology[{name}]'
    calibrated: dict[int, float] = {}
    for child in node.findall('calibrated-output'):
        year = _convert(child.get('year'), int, f'{where}/calibrated-output@year', 0)
        calibrated[year] = _convert(
            (child.text or '').strip() or None, float, f'{where}/calibrated-output', 0.0
        )
    input_good = (node.get('input') or '').strip() or None
    return TechnologySpec(
        name=name,
        base_output=_float_child(node, 'base-output', where, 0.0),
        non_energy_cost=_float_child(node, 'non-energy-cost', where, 1.0),
        elasticity=_float_child(node, 'elasticity', where, 1.0),
        input_good=input_good,
        efficiency=_float_attr(node, 'efficiency', where, 1.0),
        emissions_coef=_float_child(node, 'emissions-coef', where, 0.0),
        calibrated_output=calibrated,
    )


def _parse_supply_sector(node: ET.Element, region: str) -> SupplySectorSpec:
    name = _required_name(node, region)
    where = f'{region}/supplysector[{name}]'
    technologies = []
    for child in node:
        if child.tag == 'technology':
            technologies.append(_parse_technology(child, where))
        elif child.tag != 'initial-price':
            LOGGER.warning('Unrecognized text string: %s found while parsing %s.', child.tag, where)
    return SupplySectorSpec(
        name=name,
        good=(node.get('good') or '').strip() or None,
        market_region=(node.get('market') or '').strip() or None,
        initial_price=_convert(_child_text(node, 'initial-price'), float, f'{where}/initial-price', None),
        technologies=tuple(technologies),
    )


def _parse_demand_sector(node: ET.Element, region: str) -> DemandSectorSpec:
    name = _required_name(node, region)
    where = f'{region}/demandsector[{name}]'
    return DemandSectorSpec(
        name=name,
        good=(node.get('good') or name).strip(),
        market_region=(node.get('market') or region).strip(),
        base_demand=_float_child(node, 'base-demand', where, 0.0),
        price_elasticity=_float_child(node, 'price-elasticity', where, 0.0),
        income_growth=_float_child(node, 'income-growth', where, 0.0),
    )


def _parse_region(node: ET.Element) -> RegionSpec:
    name = _required_name(node, 'world')
    supply: list[SupplySectorSpec] = []
    demand: list[DemandSectorSpec] = []
    for child in node:
        if child.tag == 'supplysector':
            supply.append(_parse_supply_sector(child, name))
        elif child.tag == 'demandsector':
            demand.append(_parse_demand_sector(child, name))
        else:
            LOGGER.warning('Unrecognized text string: %s found while parsing region %s.', child.tag, name)
    return RegionSpec(name=name, supply_sectors=tuple(supply), demand_sectors=tuple(demand))


def parse_world(node: ET.Element) -> WorldSpec:
    regions = []
    for child in node:
        if child.tag == 'region':
            regions.append(_parse_region(child))
        else:
            LOGGER.warning('Unrecognized text string: %s found while parsing world.', child.tag)
    return WorldSpec(regions=tuple(regions))


def parse_scenario_element(root: ET.Element) -> ScenarioSpec:
    """Translate a ``<scenario>`` element into a :class:`ScenarioSpec`."""

    if root.tag != 'scenario':
        raise ConfigError(f'Expected a <scenario> root node, found <{root.tag}>')

    children: list[ScenarioNode] = []
    for child in root:
        if not isinstance(child.tag, str):
            # comments and processing instructions
            continue
        if child.tag == 'summary':
            children.append(SummaryNode(text=(child.text or '').strip()))
        elif child.tag == 'modeltime':
            children.append(parse_modeltime(child))
        elif child.tag == 'world':
            children.append(parse_world(child))
        else:
            children.append(UnknownNode(tag=child.tag))
    return ScenarioSpec(name=root.get('name', ''), children=children)


def parse_scenario(source: str | Path) -> ScenarioSpec:
    """Parse a scenario XML file path."""

    try:
        tree = ET.parse(source)
    except ET.ParseError as exc:
        raise ConfigError(f'Malformed scenario XML in {source}: {exc}') from exc
    return parse_scenario_element(tree.getroot())


def parse_scenario_text(text: str) -> ScenarioSpec:
    """Parse scenario XML held in a string."""

    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ConfigError(f'Malformed scenario XML: {exc}') from exc
    return parse_scenario_element(root)


__all__ = [
    'parse_modeltime',
    'parse_scenario',
    'parse_scenario_element',
    'parse_scenario_text',
    'parse_world',
]
