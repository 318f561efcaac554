"""Anchoring genetic maps at chromosome ends and shifting them to start at 0 cM."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from ..chroms import CHROM_DTYPE, marker_ids
from ..errors import AssemblyOrderError, SchemaError
from ..logging_ import get_logger
from .interpolate import interpolate_column

LOGGER = get_logger(__name__)


def parse_positions(values: Iterable[str]) -> list[Tuple[str, int]]:
    """Parse ``"4:123456"`` style chromosome/position strings."""

    out = []
    for value in values:
        chrom, _, pos = str(value).partition(":")
        if not pos:
            raise SchemaError(f"Expected 'chr:bp', got '{value}'")
        out.append((chrom.removeprefix("chr"), int(pos)))
    return out


def drop_known_inversions(table: pd.DataFrame, positions: Sequence[Tuple[str, int]], column: str = "bp37") -> pd.DataFrame:
    """Remove listed positions known to be inverted between assemblies.

    This is a patch for a specific map release (a chr 4 position present on a
    single sex-specific map); pass an empty list to disable it. Positions that
    are not in the table are logged and skipped.
    """

    if not positions:
        return table
    chroms = table["chr"].astype(str)
    drop = np.zeros(len(table), dtype=bool)
    for chrom, bp in positions:
        hit = ((chroms == chrom) & (table[column] == bp)).to_numpy()
        if not hit.any():
            LOGGER.warning("Known inversion %s:%s not found in map; nothing dropped", chrom, bp)
        drop |= hit
    if drop.any():
        LOGGER.info("Dropping %s known inverted position(s)", int(drop.sum()))
    return table.loc[~drop].reset_index(drop=True)


def check_assembly_order(
    table: pd.DataFrame,
    order_column: str = "bp37",
    pos_column: str = "bp",
    cm_columns: Sequence[str] = ("cM",),
) -> None:
    """Raise :class:`AssemblyOrderError` on out-of-order positions.

    Within each chromosome, rows ordered by ``order_column`` must have strictly
    increasing ``pos_column`` and non-decreasing genetic positions.
    """

    problems = []
    for chrom, rows in table.groupby("chr", observed=True, sort=True):
        rows = rows.sort_values(order_column, kind="mergesort")
        bp = rows[pos_column].to_numpy(dtype=float)
        bad = np.flatnonzero(np.diff(bp) <= 0)
        problems.extend(f"{chrom}: {rows['marker'].iloc[i + 1]} ({pos_column})" for i in bad)
        for column in cm_columns:
            if column not in rows:
                continue
            cm = rows[column].dropna()
            bad = np.flatnonzero(np.diff(cm.to_numpy(dtype=float)) < 0)
            problems.extend(f"{chrom}: {rows.loc[cm.index[i + 1], 'marker']} ({column})" for i in bad)
    if problems:
        raise AssemblyOrderError(
            f"{len(problems)} out-of-order position(s): {problems[:10]}; "
            "list known inversions under map.drop_inversions"
        )


def add_anchor(
    table: pd.DataFrame,
    anchors: Mapping[str, int],
    columns: Sequence[str],
    pos_column: str = "bp",
) -> pd.DataFrame:
    """Return ``table`` with one extra row per chromosome at ``anchors[chr]``.

    Genetic positions of the new rows are interpolated (or extrapolated) from
    the existing rows of each column. Anchors that coincide with an existing
    position are not duplicated.
    """

    chroms = [c for c in table["chr"].astype(str).unique() if c in anchors]
    existing = set(zip(table["chr"].astype(str), table[pos_column].astype(np.int64)))
    chroms = [c for c in chroms if (c, int(anchors[c])) not in existing]
    if not chroms:
        return table

    bp = np.array([int(anchors[c]) for c in chroms], dtype=np.int64)
    new = pd.DataFrame({"marker": marker_ids(chroms, bp), "chr": chroms, pos_column: bp})
    for column in columns:
        new[column] = interpolate_column(table, new, pos_column, column).to_numpy()

    out = pd.concat([table, new], ignore_index=True)
    out["chr"] = out["chr"].astype(CHROM_DTYPE)
    return out.sort_values(["chr", pos_column], kind="mergesort").reset_index(drop=True)


def shift_to_zero(table: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Subtract each chromosome's minimum from each genetic column."""

    out = table.copy()
    for column in columns:
        minimum = out.groupby("chr", observed=True)[column].transform("min")
        out[column] = out[column] - minimum
    return out


def anchor_and_shift(
    table: pd.DataFrame,
    lengths: Mapping[str, int],
    columns: Sequence[str],
    pos_column: str = "bp",
) -> pd.DataFrame:
    """Anchor every chromosome at bp 0 and at its length, then shift to 0 cM."""

    chroms = [str(c) for c in table["chr"].astype(str).unique()]
    missing = [c for c in chroms if c not in lengths]
    if missing:
        raise SchemaError(f"No chromosome length for {missing}")

    ends = table.groupby(table["chr"].astype(str))[pos_column].max()
    beyond = [c for c in chroms if ends[c] > lengths[c]]
    if beyond:
        raise AssemblyOrderError(f"Map positions beyond chromosome end on {beyond}")

    anchored = add_anchor(table, {c: 0 for c in chroms}, columns, pos_column)
    anchored = add_anchor(anchored, {c: int(lengths[c]) for c in chroms}, columns, pos_column)
    LOGGER.info("Anchored %s chromosomes at 0 and telomere", len(chroms))
    return shift_to_zero(anchored, columns)


__all__ = [
    "parse_positions",
    "drop_known_inversions",
    "check_assembly_order",
    "add_anchor",
    "shift_to_zero",
    "anchor_and_shift",
]
