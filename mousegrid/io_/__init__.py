"""Input/Output helpers for mousegrid."""

from . import arrays, fetch, liftover, maps, tables
from .arrays import annotate_array, read_array_markers
from .fetch import extract_members, fetch as fetch_source
from .liftover import apply_liftover, read_regions, write_liftover_input
from .maps import CM_COLUMNS, SEXES, combine_sex_maps, read_sex_map
from .tables import read_table, write_outputs, write_table

__all__ = [
    "annotate_array",
    "read_array_markers",
    "extract_members",
    "fetch_source",
    "apply_liftover",
    "read_regions",
    "write_liftover_input",
    "CM_COLUMNS",
    "SEXES",
    "combine_sex_maps",
    "read_sex_map",
    "read_table",
    "write_outputs",
    "write_table",
    "arrays",
    "fetch",
    "liftover",
    "maps",
    "tables",
]
