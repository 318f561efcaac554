"""End-to-end preparation of the shifted mouse map, marker grids and array positions.

Each stage takes the previous stage's value and returns a new one; nothing is
written to the output directory until every table has been computed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import pandas as pd

from .chroms import BUILD38_LENGTHS, read_lengths
from .config import ArrayConfig, GenesConfig, LiftoverConfig, MapSourceConfig, PipelineConfig
from .errors import FetchError
from .io_.arrays import annotate_array, read_array_markers
from .io_.fetch import extract_members, fetch
from .io_.liftover import apply_liftover, write_liftover_input
from .io_.maps import CM_COLUMNS, SEXES, combine_sex_maps, read_sex_map
from .io_.tables import write_outputs
from .logging_ import get_logger
from .maps.anchor import anchor_and_shift, check_assembly_order, drop_known_inversions, parse_positions
from .maps.grid import add_pseudomarkers, build_grid, reindex_genes

LOGGER = get_logger(__name__)

MAP_COLUMNS = ["marker", "chr", "bp37", "pos", "bp", "cM", "cM_female", "cM_male"]
LIFTOVER_INPUT = "map_build37_regions.txt"


def load_sex_maps(cfg: MapSourceConfig, cache_dir: Path) -> Dict[str, pd.DataFrame]:
    """Fetch and read the average, female and male map tables."""

    names = {sex: getattr(cfg, sex) for sex in SEXES}
    if cfg.archive:
        archive = fetch(cfg.archive, cache_dir)
        extracted = extract_members(archive, names.values(), cache_dir / "map")
        paths = {sex: extracted[name] for sex, name in names.items()}
    else:
        paths = {sex: fetch(name, cache_dir) for sex, name in names.items()}

    maps = {sex: read_sex_map(path, cfg) for sex, path in paths.items()}
    for sex, table in maps.items():
        LOGGER.info("Loaded %s map: %s positions on %s chromosomes", sex, len(table), table["chr"].nunique())
    return maps


def lift_to_build38(combined: pd.DataFrame, cfg: LiftoverConfig, cache_dir: Path) -> pd.DataFrame:
    """Write liftOver input for ``combined`` and attach the converted positions."""

    regions = write_liftover_input(combined, cache_dir / LIFTOVER_INPUT)
    if not cfg.converted:
        raise FetchError(
            f"No liftOver output configured; convert {regions} to build 38 and set liftover.converted"
        )
    converted = fetch(cfg.converted, cache_dir)
    failed = fetch(cfg.failed, cache_dir) if cfg.failed else None
    return apply_liftover(combined, converted, failed)


def shift_map(lifted: pd.DataFrame, cfg: MapSourceConfig, lengths: Mapping[str, int]) -> pd.DataFrame:
    """Drop known inversions, validate order, anchor and shift to 0 cM."""

    columns = list(CM_COLUMNS.values())
    cleaned = drop_known_inversions(lifted, parse_positions(cfg.drop_inversions))
    check_assembly_order(cleaned, cm_columns=columns)

    cleaned = cleaned.copy()
    cleaned["bp37"] = cleaned["bp37"].astype("Int64")
    shifted = anchor_and_shift(cleaned, lengths, columns)
    shifted["pos"] = shifted["bp"] / 1e6
    return shifted[MAP_COLUMNS]


def annotate_arrays(arrays: Mapping[str, ArrayConfig], genetic_map: pd.DataFrame, cache_dir: Path) -> Dict[str, pd.DataFrame]:
    out = {}
    for name, acfg in arrays.items():
        markers = read_array_markers(fetch(acfg.source, cache_dir), acfg)
        out[name] = annotate_array(markers, genetic_map)
        LOGGER.info(
            "%s: %s markers, %s with genetic positions",
            name,
            len(markers),
            int(out[name]["cM"].notna().sum()),
        )
    return out


def reindex_gene_table(cfg: GenesConfig, grid: pd.DataFrame, cache_dir: Path) -> pd.DataFrame:
    genes = pd.read_csv(fetch(cfg.source, cache_dir), sep=cfg.sep, dtype={cfg.chr_column: str})
    return reindex_genes(genes, grid, cfg)


def run_pipeline(cfg: PipelineConfig, out_dir: str | Path, cache_dir: str | Path) -> dict[str, Any]:
    """Run every stage and write the output tables plus ``manifest.json``.

    Returns the manifest that was written.
    """

    cache_dir = Path(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)

    lengths = read_lengths(str(fetch(cfg.chrom_lengths, cache_dir))) if cfg.chrom_lengths else dict(BUILD38_LENGTHS)

    sex_maps = load_sex_maps(cfg.map, cache_dir)
    combined = combine_sex_maps(sex_maps)
    lifted = lift_to_build38(combined, cfg.liftover, cache_dir)
    genetic_map = shift_map(lifted, cfg.map, lengths)
    LOGGER.info("Shifted map has %s positions", len(genetic_map))

    tables: Dict[str, pd.DataFrame] = {"genetic_map": genetic_map}
    tables.update(annotate_arrays(cfg.arrays, genetic_map, cache_dir))

    grid = build_grid(genetic_map, cfg.grid)
    grid_plus = add_pseudomarkers(grid, cfg.grid.max_gap_mbp)
    tables["grid"] = grid
    tables["grid_plus"] = grid_plus

    if cfg.genes is not None:
        tables["genes"] = reindex_gene_table(cfg.genes, grid_plus, cache_dir)

    manifest = write_outputs(out_dir, tables, cfg)
    LOGGER.info("Wrote %s tables to %s", len(tables), out_dir)
    return manifest


__all__ = [
    "MAP_COLUMNS",
    "load_sex_maps",
    "lift_to_build38",
    "shift_map",
    "annotate_arrays",
    "reindex_gene_table",
    "run_pipeline",
]
