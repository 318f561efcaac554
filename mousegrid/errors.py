"""Exception types raised by the map preparation pipeline."""

from __future__ import annotations


class MissingMapDataError(ValueError):
    """A chromosome has too few map points to interpolate."""

    def __init__(self, chrom: str, n_points: int) -> None:
        super().__init__(
            f"chromosome {chrom} has {n_points} map point(s); at least 2 are needed to interpolate"
        )
        self.chrom = chrom
        self.n_points = n_points


class AssemblyOrderError(ValueError):
    """Physical or genetic positions are out of order on a chromosome."""


class SchemaError(ValueError):
    """An input table lacks a column or carries an unrecognised chromosome."""


class FetchError(RuntimeError):
    """An external input could not be obtained."""


__all__ = ["MissingMapDataError", "AssemblyOrderError", "SchemaError", "FetchError"]
