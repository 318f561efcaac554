"""Piecewise-linear interpolation between physical and genetic positions.

The routines here are axis-agnostic: they map one increasing sequence onto a
paired sequence, so bp -> cM and cM -> bp share the same code with the
arguments swapped.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from ..chroms import CHROMOSOMES
from ..errors import MissingMapDataError
from .reshape import PositionSeries, join, split


def interpolate_array(x: np.ndarray, y: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Interpolate ``y`` at ``target`` given paired, sorted ``x``.

    Targets outside ``[x[0], x[-1]]`` are extrapolated along the end segment.
    Targets equal to a source point return its paired value exactly. A
    zero-width segment (repeated ``x``) evaluates to its left value.
    """

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    target = np.asarray(target, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same shape")
    if x.size < 2:
        raise ValueError("at least two source points are needed")

    idx = np.searchsorted(x, target, side="right") - 1
    idx = np.clip(idx, 0, x.size - 2)
    x0, x1 = x[idx], x[idx + 1]
    y0, y1 = y[idx], y[idx + 1]
    dx = x1 - x0

    with np.errstate(divide="ignore", invalid="ignore"):
        out = y0 + (target - x0) * (y1 - y0) / dx
    out = np.where(dx == 0, y0, out)
    out = np.where(target == x1, y1, out)
    return out


def interpolate(
    source_x: PositionSeries,
    source_y: PositionSeries,
    target_x: PositionSeries,
) -> PositionSeries:
    """Interpolate per-chromosome target positions onto the paired axis.

    ``source_x`` and ``source_y`` must share chromosomes and markers. Each output
    series has the index, length and order of the matching ``target_x`` series.
    Targets on a chromosome missing from the source come back as NaN; a
    source chromosome with fewer than two points raises
    :class:`MissingMapDataError`.
    """

    out: PositionSeries = {}
    for chrom, targets in target_x.items():
        if chrom not in source_x:
            out[chrom] = pd.Series(np.nan, index=targets.index, dtype=float)
            continue
        xs = source_x[chrom]
        ys = source_y.get(chrom)
        if ys is None or not xs.index.equals(ys.index):
            raise ValueError(f"source series on chromosome {chrom} are not paired")
        if len(xs) < 2:
            raise MissingMapDataError(chrom, len(xs))
        values = interpolate_array(xs.to_numpy(dtype=float), ys.to_numpy(dtype=float), targets.to_numpy(dtype=float))
        out[chrom] = pd.Series(values, index=targets.index, dtype=float)
    return out


def interpolate_column(
    source: pd.DataFrame,
    target: pd.DataFrame,
    from_col: str,
    to_col: str,
    target_col: Optional[str] = None,
) -> pd.Series:
    """Interpolate ``source[to_col]`` at ``target[target_col or from_col]``.

    The result is aligned to ``target.index``. Source rows with a missing
    value or a chromosome outside ``1..19, X`` are ignored. Target rows with a
    missing position, on such a chromosome, or on one with no usable source
    rows yield NaN.
    """

    target_col = target_col or from_col
    on_map = source["chr"].astype(str).isin(CHROMOSOMES)
    usable = source[on_map & source[from_col].notna() & source[to_col].notna()]
    src_x = split(usable, from_col)
    src_y = split(usable, to_col)

    # key target rows by row number so results can be scattered back in place
    keyed = pd.DataFrame(
        {
            "chr": target["chr"].astype(str).to_numpy(),
            "marker": np.arange(len(target)),
            target_col: target[target_col].to_numpy(dtype=float),
        }
    )
    keyed = keyed[keyed["chr"].isin(CHROMOSOMES) & keyed[target_col].notna()]
    result = join(interpolate(src_x, src_y, split(keyed, target_col)), to_col, n_expected=len(keyed))

    values = np.full(len(target), np.nan)
    values[result["marker"].to_numpy(dtype=int)] = result[to_col].to_numpy(dtype=float)
    return pd.Series(values, index=target.index, name=to_col)


__all__ = ["interpolate_array", "interpolate", "interpolate_column"]
