"""Scenario driver: period index, trace sinks and the period loop."""

from .modeltime import Modeltime, ModeltimeError
from .outputs import ScenarioOutputs, build_scenario_outputs
from .scenario import RunSinks, Scenario, ScenarioInitError
from .sinks import FileSink, MemorySink, Tabs, TraceSink

__all__ = [
    "FileSink",
    "MemorySink",
    "Modeltime",
    "ModeltimeError",
    "RunSinks",
    "Scenario",
    "ScenarioInitError",
    "ScenarioOutputs",
    "Tabs",
    "TraceSink",
    "build_scenario_outputs",
]
