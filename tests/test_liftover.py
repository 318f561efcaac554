import pandas as pd
import pytest

from mousegrid.chroms import CHROM_DTYPE
from mousegrid.errors import AssemblyOrderError, SchemaError
from mousegrid.io_.liftover import apply_liftover, parse_region, read_regions, write_liftover_input


def _table():
    return pd.DataFrame(
        {
            "marker": ["1_100", "1_200", "X_50"],
            "chr": pd.Categorical(["1", "1", "X"], dtype=CHROM_DTYPE),
            "bp37": [100, 200, 50],
            "cM": [0.1, 0.2, 0.05],
        }
    )


def test_parse_region():
    assert parse_region("chr4:123-123\n") == ("4", 123, 123)
    assert parse_region("X:5-9") == ("X", 5, 9)
    with pytest.raises(SchemaError):
        parse_region("chr4 123 123")


def test_write_and_read_regions(tmp_path):
    path = write_liftover_input(_table(), tmp_path / "sub" / "regions.txt")
    assert path.read_text().splitlines() == ["chr1:100-100", "chr1:200-200", "chrX:50-50"]
    assert read_regions(path)[2] == ("X", 50, 50)


def test_apply_liftover_with_failures(tmp_path):
    converted = tmp_path / "converted.txt"
    converted.write_text("chr1:1100-1100\nchrX:70-70\n")
    failed = tmp_path / "failed.txt"
    failed.write_text("#Deleted in new\nchr1:200-200\n")

    out = apply_liftover(_table(), converted, failed)
    assert out["marker"].tolist() == ["1_100", "X_50"]
    assert out["bp"].tolist() == [1100, 70]


def test_apply_liftover_count_mismatch(tmp_path):
    converted = tmp_path / "converted.txt"
    converted.write_text("chr1:1100-1100\n")
    with pytest.raises(AssemblyOrderError):
        apply_liftover(_table(), converted)


def test_apply_liftover_chromosome_change(tmp_path):
    converted = tmp_path / "converted.txt"
    converted.write_text("chr1:1100-1100\nchr2:1200-1200\nchrX:70-70\n")
    with pytest.raises(AssemblyOrderError, match="across chromosomes"):
        apply_liftover(_table(), converted)
