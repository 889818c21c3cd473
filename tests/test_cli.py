from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from definitions import PROJECT_ROOT


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    cmd = [sys.executable, '-m', 'cli.run', *args]
    return subprocess.run(
        cmd,
        cwd=PROJECT_ROOT,
        check=False,
        capture_output=True,
        text=True,
    )


def test_cli_smoke(tmp_path: Path) -> None:
    output_dir = tmp_path / 'outputs'

    result = _run_cli('--out', str(output_dir))

    assert result.returncode == 0, f"stdout:\n{result.stdout}\nstderr:\n{result.stderr}"
    expected_files = [
        'markets.csv',
        'emissions_by_region.csv',
        'solve_status.csv',
        'sector_output.csv',
        'debug.xml',
        'sdcurves.csv',
        'climat_input.csv',
        'scenario_output.xml',
        'run.log',
    ]
    for name in expected_files:
        path = output_dir / name
        assert path.exists(), (
            f"Expected {name} to be generated.\n"
            f"stdout:\n{result.stdout}\n"
            f"stderr:\n{result.stderr}"
        )
        assert path.stat().st_size > 0, f'{name} should not be empty'


def test_cli_reports_missing_configuration(tmp_path: Path) -> None:
    result = _run_cli('--config', str(tmp_path / 'missing.toml'), '--out', str(tmp_path))

    assert result.returncode == 1
    assert 'Failed to load configuration' in result.stderr


def test_cli_reports_invalid_scenario(tmp_path: Path) -> None:
    scenario = tmp_path / 'broken.xml'
    scenario.write_text('<scenario name="broken"><world>', encoding='utf-8')

    result = _run_cli('--scenario', str(scenario), '--out', str(tmp_path / 'outputs'))

    assert result.returncode == 2
    assert 'Invalid scenario input' in result.stderr
