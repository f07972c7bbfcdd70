"""
Region covering capability.

Wraps s2sphere's RegionCoverer behind a narrow ``cover(region)`` interface
so the query orchestrator can be given any covering implementation (a
coarser or finer coverer, or a fixed list in tests). The covering is
always conservative: the leaf descendants of the returned cells contain
every point of the region.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

import s2sphere

from geoindex.exceptions import InvalidInputError
from geoindex.s2.cells import to_signed

logger = logging.getLogger(__name__)

MAX_LEVEL = 30


@dataclass
class CoveringParameters:
    """
    Tuning parameters for region covering.

    Fewer cells means fewer range scans but a looser fit around the
    region, so more records are scanned and then filtered out.

    Attributes:
        max_cells: Upper bound on the number of cells returned
        min_level: Coarsest cell level that may be used
        max_level: Finest cell level that may be used
        level_mod: Only use levels where (level - min_level) % level_mod == 0
    """

    max_cells: int = 8
    min_level: int = 0
    max_level: int = MAX_LEVEL
    level_mod: int = 1

    def __post_init__(self):
        """Validate parameters."""
        if self.max_cells < 1:
            raise InvalidInputError(
                f"max_cells must be >= 1, got {self.max_cells}"
            )
        if not 0 <= self.min_level <= self.max_level <= MAX_LEVEL:
            raise InvalidInputError(
                f"levels must satisfy 0 <= min_level <= max_level <= {MAX_LEVEL}",
                {"min_level": self.min_level, "max_level": self.max_level},
            )
        if not 1 <= self.level_mod <= 3:
            raise InvalidInputError(
                f"level_mod must be between 1 and 3, got {self.level_mod}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "max_cells": self.max_cells,
            "min_level": self.min_level,
            "max_level": self.max_level,
            "level_mod": self.level_mod,
        }


class RegionCoverer:
    """
    Conservative region coverer backed by s2sphere.

    Example:
        coverer = RegionCoverer(CoveringParameters(max_cells=12))
        cells = coverer.cover(rect_from_corners(sw, ne))
    """

    def __init__(self, parameters: CoveringParameters = None):
        self.parameters = parameters or CoveringParameters()

    def _build(self) -> s2sphere.RegionCoverer:
        coverer = s2sphere.RegionCoverer()
        coverer.min_level = self.parameters.min_level
        coverer.max_level = self.parameters.max_level
        coverer.level_mod = self.parameters.level_mod
        coverer.max_cells = self.parameters.max_cells
        return coverer

    def cover(self, region: s2sphere.LatLngRect) -> List[int]:
        """
        Cover a region with cells.

        Args:
            region: Region to cover

        Returns:
            Signed cell ids in the order returned by the coverer
        """
        if region is None or region.is_empty():
            return []

        cells = [to_signed(cell.id()) for cell in self._build().get_covering(region)]
        logger.debug(
            f"Covered region with {len(cells)} cells "
            f"(max_cells={self.parameters.max_cells})"
        )
        return cells
