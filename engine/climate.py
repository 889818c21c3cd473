"""Hand-off of accumulated emissions to an external climate model."""
from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import pandas as pd

if TYPE_CHECKING:  # pragma: no cover
    from engine.modeltime import Modeltime
    from world.world import World

LOGGER = logging.getLogger(__name__)

CLIMATE_COLUMNS = ['year', 'period', 'co2_emissions', 'cumulative_co2']


def climate_frame(world: World, modeltime: Modeltime) -> pd.DataFrame:
    """Return global emissions by period in the layout read by the climate model."""

    cumulative = world.cumulative_emissions.get('global')
    rows = []
    for period in range(modeltime.max_period):
        rows.append(
            {
                'year': modeltime.period_to_year(period),
                'period': period,
                'co2_emissions': float(world.emissions[period]),
                'cumulative_co2': float(cumulative[period]) if cumulative is not None else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=CLIMATE_COLUMNS)


def write_climate_data(
    world: World, modeltime: Modeltime, path: str | Path, *, scenario_name: str = ''
) -> Path:
    """Write the climate model input file and return its path."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    frame = climate_frame(world, modeltime)
    with open(target, 'w', encoding='utf-8', newline='') as handle:
        handle.write(f'# climate model input for scenario {scenario_name}\n')
        frame.to_csv(handle, index=False)
    LOGGER.info('Wrote climate model input to %s', target)
    return target


def run_climate_model(command: str | Sequence[str], data_file: Path) -> None:
    """Run the external climate model synchronously.

    The exit status of the process is not inspected.
    """

    if isinstance(command, str):
        args = shlex.split(command)
    else:
        args = list(command)
    if not args:
        LOGGER.info('No climate model command configured')
        return
    args.append(str(data_file))
    LOGGER.info('Calling climate model: %s', ' '.join(args))
    try:
        subprocess.run(args, check=False)
    except OSError as exc:
        LOGGER.error('Climate model could not be started: %s', exc)
        return
    LOGGER.info('Finished with climate model')


__all__ = ['CLIMATE_COLUMNS', 'climate_frame', 'run_climate_model', 'write_climate_data']
