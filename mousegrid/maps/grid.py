"""Evenly spaced genetic grid, pseudomarker densification and nearest-point lookup."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

import numpy as np
import pandas as pd

from ..chroms import CHROM_DTYPE, CHROMOSOMES, marker_ids
from ..config import GenesConfig, GridConfig
from ..errors import MissingMapDataError, SchemaError
from ..logging_ import get_logger
from .anchor import add_anchor
from .gmap import chromosome_maps
from .interpolate import interpolate_column

LOGGER = get_logger(__name__)

GRID_COLUMNS = ["marker", "chr", "pos", "bp", "cM"]


def _grid_frame(chroms: list[str], bp: np.ndarray, cm: np.ndarray) -> pd.DataFrame:
    bp = np.asarray(bp, dtype=np.int64)
    out = pd.DataFrame(
        {
            "marker": marker_ids(chroms, bp),
            "chr": pd.Categorical(chroms, dtype=CHROM_DTYPE),
            "pos": bp / 1e6,
            "bp": bp,
            "cM": np.asarray(cm, dtype=float),
        }
    )
    return out[GRID_COLUMNS]


def cm_sequence(start: float, stop: float, step: float) -> np.ndarray:
    """Values ``start, start + step, ...`` not exceeding ``stop``."""

    if step <= 0:
        raise ValueError("step must be positive")
    if stop < start:
        return np.array([], dtype=float)
    # tolerate rounding so that an exact multiple of step reaches stop
    n = int(np.floor((stop - start) / step + 1e-9)) + 1
    return start + step * np.arange(n, dtype=float)


def build_grid(genetic_map: pd.DataFrame, cfg: GridConfig | None = None, column: str = "cM") -> pd.DataFrame:
    """Build an evenly spaced grid in genetic distance.

    A row at ``cfg.start_bp`` is added to each chromosome of ``genetic_map``;
    the grid then runs from its genetic position to the chromosome's last
    genetic position in ``cfg.step_cm`` increments. Physical positions come
    from reverse interpolation and are rounded to the nearest basepair.
    """

    cfg = cfg or GridConfig()
    anchored = add_anchor(genetic_map, {c: cfg.start_bp for c in CHROMOSOMES}, [column])

    chroms: list[str] = []
    bp_parts = []
    cm_parts = []
    for chrom, gmap in chromosome_maps(anchored, column).items():
        if gmap.positions_bp.size < 2:
            raise MissingMapDataError(chrom, int(gmap.positions_bp.size))
        start = gmap.interpolate(np.array([cfg.start_bp]))[0]
        cm = cm_sequence(start, gmap.positions_cm[-1], cfg.step_cm)
        bp = np.rint(gmap.to_bp(cm)).astype(np.int64)
        chroms.extend([chrom] * cm.size)
        bp_parts.append(bp)
        cm_parts.append(cm)

    if not bp_parts:
        return _grid_frame([], np.array([], dtype=np.int64), np.array([], dtype=float))
    grid = _grid_frame(chroms, np.concatenate(bp_parts), np.concatenate(cm_parts))
    LOGGER.info("Built grid with %s points at %s cM spacing", len(grid), cfg.step_cm)
    return grid


def _fill_positions(bp: np.ndarray, max_gap: int) -> np.ndarray:
    """Positions to insert between consecutive ``bp`` so no gap exceeds ``max_gap``."""

    new = []
    for left, right in zip(bp[:-1], bp[1:]):
        gap = int(right) - int(left)
        if gap <= max_gap:
            continue
        k = -(-gap // max_gap)  # ceil
        new.extend(int(left) + (gap * j) // k for j in range(1, k))
    return np.array(new, dtype=np.int64)


def add_pseudomarkers(grid: pd.DataFrame, max_gap_mbp: float = 0.5) -> pd.DataFrame:
    """Insert pseudomarkers so adjacent grid points are at most ``max_gap_mbp`` apart.

    Inserted points split each long gap evenly; their genetic positions are
    interpolated from the grid itself. Original rows are kept in order.
    """

    max_gap = int(round(max_gap_mbp * 1e6))
    if max_gap < 1:
        raise ValueError("max_gap_mbp must be at least 1 bp")

    chroms: list[str] = []
    parts = []
    for chrom, rows in grid.groupby("chr", observed=True, sort=True):
        inserted = _fill_positions(rows["bp"].to_numpy(dtype=np.int64), max_gap)
        chroms.extend([str(chrom)] * inserted.size)
        parts.append(inserted)

    bp = np.concatenate(parts) if parts else np.array([], dtype=np.int64)
    if bp.size == 0:
        return grid.copy()

    new = _grid_frame(chroms, bp, np.full(bp.size, np.nan))
    new["cM"] = interpolate_column(grid, new, "bp", "cM").to_numpy()

    # stable sort keeps original grid rows ahead of pseudomarkers at equal bp
    out = pd.concat([grid, new], ignore_index=True)
    out = out.sort_values(["chr", "bp"], kind="mergesort").reset_index(drop=True)
    LOGGER.info("Added %s pseudomarkers (max gap %s Mbp)", bp.size, max_gap_mbp)
    return out


def _grid_positions(grid: pd.DataFrame) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    out = {}
    chroms = grid["chr"].astype(str).to_numpy()
    bp = grid["bp"].to_numpy(dtype=float)
    for chrom in CHROMOSOMES:
        rows = np.flatnonzero(chroms == chrom)
        if rows.size:
            order = np.argsort(bp[rows], kind="stable")
            out[chrom] = (bp[rows][order], rows[order])
    return out


def nearest_index(chroms: Iterable[object], bp: Iterable[float], grid: pd.DataFrame) -> pd.Series:
    """Row number in ``grid`` of the closest grid point on the same chromosome.

    Ties go to the grid point with the smaller position (the earlier row when
    the grid is sorted). Queries on a chromosome without grid points, or with a
    missing position, give ``<NA>``.
    """

    positions = _grid_positions(grid)
    chroms = pd.Series(list(chroms), dtype=object).astype(str).str.replace(r"^chr", "", regex=True)
    query = np.asarray(list(bp), dtype=float)
    out = pd.array([pd.NA] * len(query), dtype="Int64")

    for chrom, (grid_bp, rows) in positions.items():
        sel = np.flatnonzero((chroms == chrom).to_numpy() & ~np.isnan(query))
        if sel.size == 0:
            continue
        q = query[sel]
        right = np.clip(np.searchsorted(grid_bp, q, side="left"), 0, grid_bp.size - 1)
        left = np.clip(right - 1, 0, grid_bp.size - 1)
        take_left = np.abs(q - grid_bp[left]) <= np.abs(grid_bp[right] - q)
        best = np.where(take_left, left, right)
        out[sel] = rows[best]
    return pd.Series(out, name="grid_index")


def reindex_genes(genes: pd.DataFrame, grid: pd.DataFrame, cfg: GenesConfig) -> pd.DataFrame:
    """Overwrite the gene table's grid index with the nearest point of ``grid``.

    Gene midpoints are computed from start and end when no ``mid`` column is
    present. Positions are read in ``cfg.pos_unit``.
    """

    missing = [col for col in (cfg.chr_column, cfg.start_column, cfg.end_column) if col not in genes.columns]
    if missing:
        raise SchemaError(f"Gene table missing columns: {missing}")

    out = genes.copy()
    if "mid" not in out.columns:
        out["mid"] = (out[cfg.start_column].astype(float) + out[cfg.end_column].astype(float)) / 2
    scale = 1e6 if cfg.pos_unit == "Mbp" else 1.0
    mid_bp = out["mid"].to_numpy(dtype=float) * scale
    out[cfg.index_column] = nearest_index(out[cfg.chr_column], mid_bp, grid).array
    n_missing = int(out[cfg.index_column].isna().sum())
    if n_missing:
        LOGGER.info("%s genes lie on chromosomes without grid points", n_missing)
    return out


__all__ = [
    "GRID_COLUMNS",
    "cm_sequence",
    "build_grid",
    "add_pseudomarkers",
    "nearest_index",
    "reindex_genes",
]
