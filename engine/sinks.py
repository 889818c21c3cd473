"""Write-only output sinks used for the debug and supply/demand traces."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol, TextIO


class TraceSink(Protocol):
    """Anything accepting whole lines of text."""

    def write_line(self, line: str) -> None:  # pragma: no cover - protocol
        ...

    def write_block(self, lines: Iterable[str]) -> None:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...


class FileSink:
    """Line sink backed by a text file opened for writing."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle: TextIO | None = open(self.path, 'w', encoding='utf-8')

    @property
    def closed(self) -> bool:
        return self._handle is None

    def write_line(self, line: str) -> None:
        if self._handle is None:
            raise ValueError(f'write to closed sink {self.path}')
        self._handle.write(line + '\n')

    def write_block(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write_line(line)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> 'FileSink':
        return self

    def __exit__(self, *_exc) -> None:
        self.close()


class MemorySink:
    """Line sink collecting output in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.closed = False

    def write_line(self, line: str) -> None:
        if self.closed:
            raise ValueError('write to closed sink')
        self.lines.append(line)

    def write_block(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write_line(line)

    def close(self) -> None:
        self.closed = True

    def getvalue(self) -> str:
        return '\n'.join(self.lines) + ('\n' if self.lines else '')


class Tabs:
    """Indentation depth shared by every writer of one XML document."""

    def __init__(self) -> None:
        self.depth = 0

    def increase(self) -> None:
        self.depth += 1

    def decrease(self) -> None:
        if self.depth == 0:
            raise ValueError('indentation decreased below zero')
        self.depth -= 1

    def write(self, out: TraceSink, text: str) -> None:
        out.write_line('\t' * self.depth + text)


SUPPLY_DEMAND_GROUP = 'Market,Name,Price,Supply,Demand'
SUPPLY_DEMAND_GROUPS_PER_ROW = 5


def supply_demand_header() -> str:
    return ','.join([SUPPLY_DEMAND_GROUP] * SUPPLY_DEMAND_GROUPS_PER_ROW) + ','


__all__ = [
    'FileSink',
    'MemorySink',
    'SUPPLY_DEMAND_GROUPS_PER_ROW',
    'Tabs',
    'TraceSink',
    'supply_demand_header',
]
