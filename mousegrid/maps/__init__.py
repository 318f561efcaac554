"""Map reshaping, interpolation, anchoring and grid construction."""

from .anchor import add_anchor, anchor_and_shift, check_assembly_order, drop_known_inversions, shift_to_zero
from .grid import add_pseudomarkers, build_grid, nearest_index, reindex_genes
from .gmap import GeneticMap, chromosome_maps
from .interpolate import interpolate, interpolate_array, interpolate_column
from .reshape import PositionSeries, join, split

__all__ = [
    "GeneticMap",
    "chromosome_maps",
    "PositionSeries",
    "split",
    "join",
    "interpolate",
    "interpolate_array",
    "interpolate_column",
    "add_anchor",
    "anchor_and_shift",
    "check_assembly_order",
    "drop_known_inversions",
    "shift_to_zero",
    "build_grid",
    "add_pseudomarkers",
    "nearest_index",
    "reindex_genes",
]
