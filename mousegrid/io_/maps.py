"""Genetic map IO utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd

from ..chroms import CHROM_DTYPE, marker_ids, normalize_chromosomes, to_bp
from ..config import MapSourceConfig
from ..errors import SchemaError
from ..logging_ import get_logger
from ..maps.interpolate import interpolate_column

LOGGER = get_logger(__name__)

SEXES = ("average", "female", "male")
CM_COLUMNS = {"average": "cM", "female": "cM_female", "male": "cM_male"}


def read_sex_map(path: str | Path, cfg: MapSourceConfig) -> pd.DataFrame:
    """Read one per-sex map table as ``marker``, ``chr``, ``bp37``, ``cM`` columns.

    Physical positions are converted from ``cfg.pos_unit`` to basepairs and the
    numeric X code is recoded to ``"X"``. Unknown chromosome labels raise
    :class:`SchemaError`.
    """

    df = pd.read_csv(path, sep=cfg.sep)
    if df.empty:
        raise SchemaError(f"Map file '{path}' is empty")
    missing = [col for col in (cfg.chr_column, cfg.pos_column, cfg.cm_column) if col not in df.columns]
    if missing:
        raise SchemaError(f"Map file '{path}' missing columns: {missing}")

    chrom = normalize_chromosomes(df[cfg.chr_column], x_code=cfg.x_code)
    bp = to_bp(df[cfg.pos_column], cfg.pos_unit)
    out = pd.DataFrame(
        {
            "marker": marker_ids(chrom, bp),
            "chr": chrom.to_numpy(),
            "bp37": bp,
            "cM": df[cfg.cm_column].to_numpy(dtype=float),
        }
    )
    out["chr"] = out["chr"].astype(CHROM_DTYPE)
    out = out.sort_values(["chr", "bp37"], kind="mergesort").reset_index(drop=True)
    if out["marker"].duplicated().any():
        dups = out.loc[out["marker"].duplicated(), "marker"].tolist()
        raise SchemaError(f"Map file '{path}' repeats positions: {dups[:5]}")
    LOGGER.debug("Read %s positions from %s", len(out), path)
    return out


def combine_sex_maps(maps: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Merge average/female/male maps into one table keyed by marker.

    A position missing from one sex map gets that map's value interpolated on
    the same chromosome; chromosomes a map lacks entirely (male X) stay missing.
    """

    absent = [sex for sex in SEXES if sex not in maps]
    if absent:
        raise SchemaError(f"Missing sex-specific maps: {absent}")

    positions = pd.concat([maps[sex][["marker", "chr", "bp37"]] for sex in SEXES], ignore_index=True)
    combined = positions.drop_duplicates("marker").copy()
    combined["chr"] = combined["chr"].astype(CHROM_DTYPE)
    combined = combined.sort_values(["chr", "bp37"], kind="mergesort").reset_index(drop=True)

    for sex in SEXES:
        column = CM_COLUMNS[sex]
        values = maps[sex].set_index("marker")["cM"]
        combined[column] = combined["marker"].map(values).astype(float)
        gaps = combined[column].isna()
        if gaps.any():
            filled = interpolate_column(
                maps[sex], combined[gaps], "bp37", "cM"
            )
            combined.loc[gaps, column] = filled.to_numpy()
            n_filled = int(filled.notna().sum())
            if n_filled:
                LOGGER.info("Interpolated %s positions absent from the %s map", n_filled, sex)
    return combined


__all__ = ["SEXES", "CM_COLUMNS", "read_sex_map", "combine_sex_maps"]
