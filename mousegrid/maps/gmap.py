"""Per-chromosome genetic map records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from .interpolate import interpolate_array


@dataclass(slots=True)
class GeneticMap:
    chrom: str
    positions_bp: np.ndarray
    positions_cm: np.ndarray

    def interpolate(self, bp: np.ndarray) -> np.ndarray:
        """Interpolate cM values for base-pair coordinates, extrapolating at the ends."""

        return interpolate_array(self.positions_bp, self.positions_cm, bp)

    def to_bp(self, cm: np.ndarray) -> np.ndarray:
        """Inverse of :meth:`interpolate`: basepair coordinates for cM values."""

        return interpolate_array(self.positions_cm, self.positions_bp, cm)


def chromosome_maps(table: pd.DataFrame, column: str = "cM", pos_column: str = "bp") -> Dict[str, GeneticMap]:
    """Per-chromosome :class:`GeneticMap` views of a map table, in chromosome order."""

    out: Dict[str, GeneticMap] = {}
    usable = table[table[column].notna()]
    for chrom, rows in usable.groupby("chr", observed=True, sort=True):
        out[str(chrom)] = GeneticMap(
            chrom=str(chrom),
            positions_bp=rows[pos_column].to_numpy(dtype=float),
            positions_cm=rows[column].to_numpy(dtype=float),
        )
    return out


__all__ = ["GeneticMap", "chromosome_maps"]
