"""Conversion between flat map tables and per-chromosome position series."""

from __future__ import annotations

from typing import Dict, Optional

import pandas as pd

from ..chroms import CHROM_DTYPE, CHROMOSOMES
from ..errors import SchemaError

PositionSeries = Dict[str, pd.Series]


def split(table: pd.DataFrame, column: str) -> PositionSeries:
    """Group ``table[column]`` by chromosome.

    Chromosomes come out in :data:`CHROMOSOMES` order and rows keep their
    table order within a chromosome. Each series is indexed by the ``marker``
    column. Every row lands in exactly one series: a chromosome outside
    ``1..19, X`` raises :class:`SchemaError` and a missing value raises
    ``ValueError``, so callers filter first.
    """

    for required in ("chr", "marker", column):
        if required not in table.columns:
            raise ValueError(f"table has no '{required}' column")

    chroms = table["chr"].astype(str)
    unknown = sorted(set(chroms) - set(CHROMOSOMES))
    if unknown:
        raise SchemaError(f"Unrecognised chromosome labels: {unknown}")
    n_missing = int(table[column].isna().sum())
    if n_missing:
        raise ValueError(f"column '{column}' has {n_missing} missing value(s)")

    out: PositionSeries = {}
    for chrom in CHROMOSOMES:
        rows = table[(chroms == chrom).to_numpy()]
        if not rows.empty:
            out[chrom] = pd.Series(rows[column].to_numpy(), index=rows["marker"].to_numpy(), name=column)
    return out


def join(mapping: PositionSeries, column: str, n_expected: Optional[int] = None) -> pd.DataFrame:
    """Rebuild a flat ``chr``/``marker``/``column`` table from per-chromosome series."""

    unknown = set(mapping) - set(CHROMOSOMES)
    if unknown:
        raise ValueError(f"mapping has unrecognised chromosomes: {sorted(unknown)}")

    frames = []
    for chrom in CHROMOSOMES:
        if chrom not in mapping:
            continue
        series = mapping[chrom]
        frames.append(
            pd.DataFrame(
                {
                    "chr": [chrom] * len(series),
                    "marker": series.index.to_numpy(),
                    column: series.to_numpy(),
                }
            )
        )
    if frames:
        out = pd.concat(frames, ignore_index=True)
    else:
        out = pd.DataFrame({"chr": [], "marker": [], column: []})
    out["chr"] = out["chr"].astype(CHROM_DTYPE)

    n_given = sum(len(series) for series in mapping.values())
    if len(out) != n_given:
        raise ValueError(f"rebuilt table has {len(out)} rows from {n_given} positions")
    if n_expected is not None and len(out) != n_expected:
        raise ValueError(f"rebuilt table has {len(out)} rows, expected {n_expected}")
    return out


__all__ = ["PositionSeries", "split", "join"]
