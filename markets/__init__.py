"""Market registers, the marketplace and its equilibrium solver."""

from .market import CALIBRATION, NORMAL, Market
from .marketplace import Marketplace
from .solver import SolveResult, solve_period

__all__ = ['CALIBRATION', 'Market', 'Marketplace', 'NORMAL', 'SolveResult', 'solve_period']
