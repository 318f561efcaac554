"""Mouse chromosome vocabulary and build-38 reference lengths.

References
----------
Genome Reference Consortium, GRCm38 (mm10) primary assembly,
https://www.ncbi.nlm.nih.gov/grc/mouse/data?asm=GRCm38
"""

from __future__ import annotations

from typing import Dict, Final, Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import SchemaError

CHROMOSOMES: Final[Tuple[str, ...]] = tuple(str(i) for i in range(1, 20)) + ("X",)

CHROM_DTYPE: Final = pd.CategoricalDtype(categories=list(CHROMOSOMES), ordered=True)

MARKER_SEP: Final[str] = "_"

# GRCm38 chromosome lengths in basepairs
BUILD38_LENGTHS: Final[Dict[str, int]] = {
    "1": 195471971,
    "2": 182113224,
    "3": 160039680,
    "4": 156508116,
    "5": 151834684,
    "6": 149736546,
    "7": 145441459,
    "8": 129401213,
    "9": 124595110,
    "10": 130694993,
    "11": 122082543,
    "12": 120129022,
    "13": 120421639,
    "14": 124902244,
    "15": 104043685,
    "16": 98207768,
    "17": 94987271,
    "18": 90702639,
    "19": 61431566,
    "X": 171031299,
}


def _clean_label(value: object, x_code: str) -> str:
    label = str(value).strip()
    if label.lower().startswith("chr"):
        label = label[3:]
    # numeric labels read from CSV can arrive as floats ("20.0")
    if label.endswith(".0") and label[:-2].isdigit():
        label = label[:-2]
    if label == x_code:
        return "X"
    return label


def normalize_chromosomes(
    values: Iterable[object],
    x_code: str = "20",
    extra: Sequence[str] = (),
) -> pd.Series:
    """Return chromosome labels recoded to ``1..19, X``.

    Labels listed in ``extra`` (for example ``Y`` or ``M`` on genotyping arrays)
    are passed through as plain strings; anything else outside the recognised
    set raises :class:`SchemaError`. When ``extra`` is empty the result has the
    ordered :data:`CHROM_DTYPE`.
    """

    x_code = str(x_code)
    labels = pd.Series([_clean_label(v, x_code) for v in values], dtype=object)
    allowed = set(CHROMOSOMES) | set(extra)
    unknown = sorted(set(labels) - allowed)
    if unknown:
        raise SchemaError(f"Unrecognised chromosome labels: {unknown}")
    if extra:
        return labels
    return labels.astype(CHROM_DTYPE)


def marker_ids(chroms: Iterable[object], positions: Iterable[int], sep: str = MARKER_SEP) -> list[str]:
    """Synthetic marker identifiers built from chromosome and basepair position."""

    return [f"{c}{sep}{int(p)}" for c, p in zip(chroms, positions)]


def to_bp(values: pd.Series, unit: str) -> np.ndarray:
    """Convert a physical position column to integer basepairs."""

    if unit == "bp":
        arr = values.to_numpy(dtype=float)
    elif unit == "Mbp":
        arr = values.to_numpy(dtype=float) * 1e6
    else:
        raise SchemaError(f"Unknown physical position unit '{unit}' (expected 'bp' or 'Mbp')")
    if np.isnan(arr).any():
        raise SchemaError("Physical position column contains missing values")
    return np.rint(arr).astype(np.int64)


def read_lengths(path: str) -> Dict[str, int]:
    """Read a two-column (chromosome, length) table, tab or comma separated."""

    df = pd.read_csv(path, sep=None, engine="python", header=None, comment="#")
    if df.shape[1] < 2:
        raise SchemaError(f"Length table '{path}' needs chromosome and length columns")
    # drop a header row if present
    df = df[pd.to_numeric(df.iloc[:, 1], errors="coerce").notna()]
    labels = [_clean_label(v, "20") for v in df.iloc[:, 0]]
    lengths = {
        label: int(length)
        for label, length in zip(labels, pd.to_numeric(df.iloc[:, 1]))
        if label in CHROMOSOMES
    }
    missing = [c for c in CHROMOSOMES if c not in lengths]
    if missing:
        raise SchemaError(f"Length table '{path}' lacks chromosomes {missing}")
    return lengths


__all__ = [
    "CHROMOSOMES",
    "CHROM_DTYPE",
    "MARKER_SEP",
    "BUILD38_LENGTHS",
    "normalize_chromosomes",
    "marker_ids",
    "to_bp",
    "read_lengths",
]
