from __future__ import annotations

import logging
from pathlib import Path

import typer

from common.utilities import make_dir, setup_logger
from config.scenario_loader import parse_scenario
from config.settings import Configuration
from definitions import DEFAULT_CONFIG_PATH
from engine.outputs import ScenarioOutputs
from engine.scenario import Scenario
from engine.sinks import FileSink

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help='Run a multi-period scenario through the market-clearing driver.')


def _build_scenario(config: Configuration, scenario_path: Path | None, add_ons: list[Path]) -> Scenario:
    """Parse the base scenario and any add-ons into a ready-to-run scenario."""

    base = scenario_path if scenario_path is not None else config.get_input_file('xmlInputFileName')
    scenario = Scenario()
    for path in [base, *add_ons]:
        LOGGER.info('Parsing scenario input %s', path)
        scenario.build(parse_scenario(path))
    scenario.complete_init()
    return scenario


def _write_outputs(scenario: Scenario, outputs: ScenarioOutputs, config: Configuration) -> None:
    """Persist model outputs to the configured output directory."""

    outputs.to_csv(config.output_dir)
    with FileSink(config.get_file('xmlOutputFileName')) as sink:
        scenario.to_xml(sink)


@app.command()
def main(
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        '--config',
        '-c',
        help='Path to the TOML run configuration (defaults to config/run_config.toml).',
    ),
    scenario: Path | None = typer.Option(
        None,
        '--scenario',
        '-s',
        help='Scenario XML to run; overrides xmlInputFileName from the configuration.',
    ),
    add_on: list[Path] | None = typer.Option(
        None,
        '--add-on',
        help='Scenario add-on XML applied after the base scenario. May be repeated.',
    ),
    out: Path = typer.Option(
        Path('output'),
        '--out',
        '-o',
        help='Directory where traces and CSV outputs will be written.',
    ),
    debug: bool = typer.Option(False, '--debug', help='Set logging level to DEBUG.'),
) -> None:
    """Run the scenario across every period and export its outputs."""

    try:
        settings = Configuration.load(config, output_dir=out)
    except Exception as exc:
        typer.secho(f'Failed to load configuration: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    make_dir(out)
    setup_logger(out, debug=debug, sector_dependency_file=settings.get_file('sectorDependencyFileName'))
    LOGGER.info('Starting Logging')
    LOGGER.debug('Logging level set to DEBUG')

    try:
        model = _build_scenario(settings, scenario, list(add_on or []))
    except Exception as exc:
        typer.secho(f'Invalid scenario input: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(2)

    try:
        outputs = model.run(settings)
    except Exception as exc:  # pragma: no cover
        LOGGER.exception('Model execution failed')
        typer.secho(f'Model execution failed: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(3)

    try:
        _write_outputs(model, outputs, settings)
    except Exception as exc:  # pragma: no cover
        typer.secho(f'Failed to write outputs: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(4)

    # period 0 is never solved
    unsolved = [period for period in outputs.unsolved_periods() if period > 0]
    if unsolved:
        typer.secho(f'Periods without equilibrium: {unsolved}', fg=typer.colors.YELLOW)
    typer.secho(
        f'Saved results of scenario {model.name!r} to {out.resolve()}',
        fg=typer.colors.GREEN,
    )


if __name__ == '__main__':  # pragma: no cover - CLI entry point
    app()
