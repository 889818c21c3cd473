"""Shared helpers for logging and filesystem setup."""

from .utilities import SECTOR_DEPENDENCIES_LOGGER, make_dir, setup_logger

__all__ = ['SECTOR_DEPENDENCIES_LOGGER', 'make_dir', 'setup_logger']
