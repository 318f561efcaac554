"""Genotyping-array marker files (GigaMUGA, MegaMUGA)."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ..chroms import to_bp
from ..config import ArrayConfig
from ..errors import SchemaError
from ..maps.interpolate import interpolate_column
from .maps import CM_COLUMNS, SEXES

# array chromosomes without a genetic map; their markers get missing cM values
NON_MAP_CHROMOSOMES = ("Y", "M", "MT", "PAR", "0", "Un")


def read_array_markers(path: str | Path, cfg: ArrayConfig) -> pd.DataFrame:
    """Read array markers as ``marker``, ``chr``, ``bp`` columns plus any extras."""

    df = pd.read_csv(path, sep=cfg.sep, dtype={cfg.chr_column: str})
    missing = [col for col in (cfg.marker_column, cfg.chr_column, cfg.pos_column) if col not in df.columns]
    if missing:
        raise SchemaError(f"Array file '{path}' missing columns: {missing}")

    chrom = df[cfg.chr_column].fillna("Un").astype(str).str.strip().str.replace(r"^chr", "", regex=True)
    known = set(str(i) for i in range(1, 20)) | {"X"} | set(NON_MAP_CHROMOSOMES)
    unknown = sorted(set(chrom) - known)
    if unknown:
        raise SchemaError(f"Array file '{path}' has unrecognised chromosomes: {unknown}")

    # unplaced markers have no position; keep them with a missing bp
    placed = df[cfg.pos_column].notna()
    bp = pd.Series(pd.NA, index=df.index, dtype="Int64")
    bp[placed] = to_bp(df.loc[placed, cfg.pos_column], cfg.pos_unit)

    out = pd.DataFrame({"marker": df[cfg.marker_column].astype(str), "chr": chrom, "bp": bp})
    extras = [col for col in df.columns if col not in (cfg.marker_column, cfg.chr_column, cfg.pos_column)]
    return pd.concat([out, df[extras]], axis=1)


def annotate_array(markers: pd.DataFrame, genetic_map: pd.DataFrame) -> pd.DataFrame:
    """Add sex-averaged and sex-specific cM positions interpolated from ``genetic_map``."""

    out = markers.copy()
    target = pd.DataFrame({"chr": out["chr"].astype(str), "bp": out["bp"].to_numpy(dtype=float, na_value=np.nan)})
    for sex in SEXES:
        column = CM_COLUMNS[sex]
        out[column] = interpolate_column(genetic_map, target, "bp", column).to_numpy()
    return out


__all__ = ["NON_MAP_CHROMOSOMES", "read_array_markers", "annotate_array"]
