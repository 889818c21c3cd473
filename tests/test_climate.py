from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from engine.climate import run_climate_model


def test_climate_model_receives_the_data_file(tmp_path: Path) -> None:
    data_file = tmp_path / 'climat_input.csv'
    data_file.write_text('year,period\n', encoding='utf-8')
    script = 'import pathlib, sys; pathlib.Path(sys.argv[1] + ".done").write_text("ok")'

    run_climate_model([sys.executable, '-c', script], data_file)

    assert Path(str(data_file) + '.done').read_text() == 'ok'


def test_climate_model_exit_status_is_ignored(tmp_path: Path) -> None:
    run_climate_model([sys.executable, '-c', 'raise SystemExit(3)'], tmp_path / 'data.csv')


def test_missing_climate_model_is_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR):
        run_climate_model(str(tmp_path / 'no-such-model'), tmp_path / 'data.csv')

    assert 'Climate model could not be started' in caplog.text


def test_empty_command_is_a_no_op(tmp_path: Path) -> None:
    run_climate_model('', tmp_path / 'data.csv')
