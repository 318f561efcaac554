"""Build-37 to build-38 coordinate conversion via UCSC liftOver region files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from ..errors import AssemblyOrderError, SchemaError
from ..logging_ import get_logger

LOGGER = get_logger(__name__)

REGION_RE = re.compile(r"^(?:chr)?(?P<chrom>[^:\s]+):(?P<start>\d+)-(?P<end>\d+)$")

Region = Tuple[str, int, int]


def format_region(chrom: str, start: int, end: int) -> str:
    return f"chr{chrom}:{start}-{end}"


def parse_region(line: str) -> Region:
    """Parse a ``chr1:3000000-3000000`` region line."""

    match = REGION_RE.match(line.strip())
    if match is None:
        raise SchemaError(f"Malformed region line: '{line.strip()}'")
    return match["chrom"], int(match["start"]), int(match["end"])


def read_regions(path: str | Path) -> List[Region]:
    """Read region lines, skipping blanks and ``#`` comment lines."""

    regions: List[Region] = []
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            if not line.strip() or line.startswith("#"):
                continue
            regions.append(parse_region(line))
    return regions


def write_liftover_input(table: pd.DataFrame, path: str | Path) -> Path:
    """Write one build-37 region line per map position for liftOver."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        for chrom, bp in zip(table["chr"].astype(str), table["bp37"]):
            handle.write(format_region(chrom, int(bp), int(bp)) + "\n")
    return path


def apply_liftover(
    table: pd.DataFrame,
    converted_path: str | Path,
    failed_path: Optional[str | Path] = None,
) -> pd.DataFrame:
    """Add build-38 ``bp`` positions to ``table`` from liftOver output.

    Converted regions correspond, in order, to the table rows not listed in the
    failure file. Failed rows are dropped with a warning. A region that lands on
    another chromosome, or a count that does not line up, raises
    :class:`AssemblyOrderError`.
    """

    converted = read_regions(converted_path)
    failed = set(read_regions(failed_path)) if failed_path else set()

    chroms = table["chr"].astype(str).to_numpy()
    bp37 = table["bp37"].to_numpy(dtype=np.int64)
    keep = np.array([(c, int(p), int(p)) not in failed for c, p in zip(chroms, bp37)], dtype=bool)

    if int(keep.sum()) != len(converted):
        raise AssemblyOrderError(
            f"liftOver output has {len(converted)} regions but {int(keep.sum())} positions were expected"
        )

    moved = [
        f"{c}:{p} -> {region[0]}:{region[1]}"
        for c, p, region in zip(chroms[keep], bp37[keep], converted)
        if region[0] != c
    ]
    if moved:
        raise AssemblyOrderError(f"liftOver moved positions across chromosomes: {moved[:5]}")

    n_failed = int((~keep).sum())
    if n_failed:
        LOGGER.warning("Dropping %s positions that failed liftOver", n_failed)

    out = table.loc[keep].copy()
    out["bp"] = np.array([region[1] for region in converted], dtype=np.int64)
    return out.reset_index(drop=True)


__all__ = ["format_region", "parse_region", "read_regions", "write_liftover_input", "apply_liftover"]
