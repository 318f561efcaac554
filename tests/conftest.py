import numpy as np
import pandas as pd
import pytest


def _write_map(path, chroms, scale, male=False):
    rows = []
    for chrom in chroms:
        if male and chrom == 20:
            continue
        for i, mbp in enumerate((5.0, 20.0, 40.0, 60.0)):
            rows.append({"chr": chrom, "pos": int(mbp * 1e6), "cM": scale * (i + 1) * 10.0})
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def sex_map_files(tmp_path):
    """Average, female and male maps on chr 1, 2 and X (coded 20); male lacks X."""

    chroms = [1, 2, 20]
    return {
        "average": _write_map(tmp_path / "average.csv", chroms, 1.0),
        "female": _write_map(tmp_path / "female.csv", chroms, 1.2),
        "male": _write_map(tmp_path / "male.csv", chroms, 0.8, male=True),
    }
