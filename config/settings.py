"""Run configuration loaded from a TOML file.

The file is organised in typed sections, e.g.::

    [Files]
    xmlInputFileName = "scenario.xml"
    xmlDebugFileName = "debug.xml"
    dependencyGraphName = "graph"

    [Bools]
    CalibrationActive = false
    PrintDependencyGraphs = true

    [Doubles]
    SolutionTolerance = 0.001

    [Ints]
    MaxSolveIterations = 50

A :class:`Configuration` is a read-only value handed to the scenario driver;
nothing in the package reads settings from module-level state.
"""
from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any

from config.schema import ConfigError

_SECTIONS = ('Files', 'Bools', 'Ints', 'Doubles', 'Strings')

DEFAULT_FILES: Mapping[str, str] = MappingProxyType(
    {
        'xmlOutputFileName': 'scenario_output.xml',
        'xmlDebugFileName': 'debug.xml',
        'supplyDemandFileName': 'sdcurves.csv',
        'dependencyGraphName': 'graph',
        'climatFileName': 'climat_input.csv',
        'sectorDependencyFileName': 'sector_dependencies.csv',
    }
)


def _coerce_bool(value: Any, *, default: bool = False) -> bool:
    """Interpret booleans from common TOML representations."""

    if value in (None, ''):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(int(value))
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {'true', 't', 'yes', 'y', '1', 'on'}:
            return True
        if normalized in {'false', 'f', 'no', 'n', '0', 'off'}:
            return False
    return default


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    raw = data.get(name, {})
    if not isinstance(raw, Mapping):
        raise ConfigError(f'[{name}] must be a table of key/value pairs')
    return dict(raw)


@dataclass(frozen=True)
class Configuration:
    """Read-only key/value settings resolved once at the start of a run."""

    files: Mapping[str, str] = field(default_factory=dict)
    bools: Mapping[str, Any] = field(default_factory=dict)
    ints: Mapping[str, Any] = field(default_factory=dict)
    doubles: Mapping[str, Any] = field(default_factory=dict)
    strings: Mapping[str, Any] = field(default_factory=dict)
    input_dir: Path = Path('.')
    output_dir: Path = Path('.')

    def __post_init__(self) -> None:
        for name in ('files', 'bools', 'ints', 'doubles', 'strings'):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(self, 'input_dir', Path(self.input_dir))
        object.__setattr__(self, 'output_dir', Path(self.output_dir))

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        input_dir: str | Path = '.',
        output_dir: str | Path | None = None,
    ) -> 'Configuration':
        """Build a configuration from a parsed TOML mapping."""

        unknown = sorted(key for key in data if key not in _SECTIONS)
        if unknown:
            raise ConfigError(f'Unrecognized configuration sections: {", ".join(unknown)}')
        sections = {name: _section(data, name) for name in _SECTIONS}
        return cls(
            files=sections['Files'],
            bools=sections['Bools'],
            ints=sections['Ints'],
            doubles=sections['Doubles'],
            strings=sections['Strings'],
            input_dir=Path(input_dir),
            output_dir=Path(output_dir) if output_dir is not None else Path(input_dir),
        )

    @classmethod
    def load(cls, config_path: str | Path, *, output_dir: str | Path | None = None) -> 'Configuration':
        """Read ``config_path`` and return the resulting configuration."""

        path = Path(config_path)
        with open(path, 'rb') as src:
            try:
                data = tomllib.load(src)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f'Invalid TOML in {path}: {exc}') from exc
        return cls.from_mapping(data, input_dir=path.parent, output_dir=output_dir)

    def with_output_dir(self, output_dir: str | Path) -> 'Configuration':
        return replace(self, output_dir=Path(output_dir))

    def get_bool(self, key: str, default: bool = False) -> bool:
        return _coerce_bool(self.bools.get(key), default=default)

    def get_int(self, key: str, default: int = 0) -> int:
        raw = self.ints.get(key)
        if raw in (None, ''):
            return int(default)
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f'[Ints] {key} must be an integer, got {raw!r}') from exc

    def get_double(self, key: str, default: float = 0.0) -> float:
        raw = self.doubles.get(key)
        if raw in (None, ''):
            return float(default)
        try:
            return float(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f'[Doubles] {key} must be numeric, got {raw!r}') from exc

    def get_string(self, key: str, default: str = '') -> str:
        raw = self.strings.get(key)
        if raw is None:
            return default
        return str(raw)

    def get_file(self, key: str, default: str | None = None) -> Path:
        """Return the output path configured for ``key``.

        Relative names are resolved against :attr:`output_dir`.
        """

        name = self.files.get(key)
        if name in (None, ''):
            name = default if default is not None else DEFAULT_FILES.get(key)
        if name in (None, ''):
            raise ConfigError(f'No file configured for {key!r}')
        path = Path(str(name))
        if not path.is_absolute():
            path = self.output_dir / path
        return path

    def get_input_file(self, key: str, default: str | None = None) -> Path:
        """Return the input path configured for ``key`` relative to :attr:`input_dir`."""

        name = self.files.get(key, default)
        if name in (None, ''):
            raise ConfigError(f'No input file configured for {key!r}')
        path = Path(str(name))
        if not path.is_absolute():
            path = self.input_dir / path
        return path


__all__ = ['Configuration', 'DEFAULT_FILES']
