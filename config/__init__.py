"""Run configuration and the scenario parsing stage."""

from .schema import ConfigError, PeriodIndexSpec, ScenarioSpec, SummaryNode, UnknownNode, WorldSpec
from .settings import Configuration

__all__ = [
    'ConfigError',
    'Configuration',
    'PeriodIndexSpec',
    'ScenarioSpec',
    'SummaryNode',
    'UnknownNode',
    'WorldSpec',
]
