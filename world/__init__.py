"""World model: regions, sectors and technologies."""

from .region import Region, RegionSummary
from .sector import DemandSector, SupplySector
from .technology import Technology
from .world import World

__all__ = ['DemandSector', 'Region', 'RegionSummary', 'SupplySector', 'Technology', 'World']
