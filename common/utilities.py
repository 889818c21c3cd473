"""
A gathering of utility functions shared by the driver, the CLI and the tests
"""

# Import packages
from logging import getLogger
from pathlib import Path
import logging
import os

# Establish logger
logger = getLogger(__name__)

SECTOR_DEPENDENCIES_LOGGER = 'SectorDependenciesLogger'


def make_dir(dir_name):
    """Ensure the provided directory exists."""
    if not os.path.exists(dir_name):
        os.makedirs(dir_name)
    else:
        logger.info('Asked to make dir that already exists:' + str(dir_name))


# Logger Setup
def setup_logger(output_dir, debug=False, sector_dependency_file=None):
    """initiates logging, sets up logger in the output directory specified

    Parameters
    ----------
    output_dir : path
        output directory path
    debug : bool, optional
        set the root logger level to DEBUG, by default False
    sector_dependency_file : path, optional
        file receiving the sector dependency report, by default
        ``sector_dependencies.csv`` in ``output_dir``
    """
    # set up root logger
    log_path = Path(output_dir)
    if not Path.is_dir(log_path):
        Path.mkdir(log_path, parents=True)

    # logger level
    if debug:
        loglevel = logging.DEBUG
    else:
        loglevel = logging.INFO

    # logger configs
    logging.basicConfig(
        filename=f'{output_dir}/run.log',
        encoding='utf-8',
        filemode='w',
        format='%(asctime)s | %(name)s | %(levelname)s :: %(message)s',
        datefmt='%d-%b-%y %H:%M:%S',
        level=loglevel,
        force=True,
    )
    logging.getLogger('pandas').setLevel(logging.WARNING)

    # the sector dependency report is written as bare csv lines
    if sector_dependency_file is None:
        sector_dependency_file = log_path / 'sector_dependencies.csv'
    dependency_logger = logging.getLogger(SECTOR_DEPENDENCIES_LOGGER)
    for handler in list(dependency_logger.handlers):
        dependency_logger.removeHandler(handler)
        handler.close()
    handler = logging.FileHandler(sector_dependency_file, mode='w', encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(message)s'))
    dependency_logger.addHandler(handler)
    dependency_logger.setLevel(logging.INFO)
    dependency_logger.propagate = False

    return logging.getLogger()
