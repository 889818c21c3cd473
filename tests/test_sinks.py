from __future__ import annotations

from pathlib import Path

import pytest

from engine.sinks import FileSink, MemorySink, Tabs


def test_file_sink_writes_blocks_and_closes(tmp_path: Path) -> None:
    path = tmp_path / 'trace' / 'rows.csv'

    with FileSink(path) as sink:
        sink.write_line('Period 0: 2000')
        sink.write_block(['a,b,', 'c,d,'])

    assert sink.closed
    assert path.read_text(encoding='utf-8') == 'Period 0: 2000\na,b,\nc,d,\n'
    with pytest.raises(ValueError):
        sink.write_line('late')


def test_memory_sink_write_block_accepts_generators() -> None:
    sink = MemorySink()

    sink.write_block(f'row{idx}' for idx in range(3))

    assert sink.getvalue() == 'row0\nrow1\nrow2\n'


def test_tabs_never_go_negative() -> None:
    tabs = Tabs()
    sink = MemorySink()
    tabs.increase()
    tabs.write(sink, '<a/>')
    tabs.decrease()

    assert sink.lines == ['\t<a/>']
    with pytest.raises(ValueError):
        tabs.decrease()
