import numpy as np
import pandas as pd
import pytest

from mousegrid.errors import MissingMapDataError
from mousegrid.maps.interpolate import interpolate, interpolate_array, interpolate_column


def _series(values, prefix="m"):
    return pd.Series(values, index=[f"{prefix}{i}" for i in range(len(values))], dtype=float)


def test_passes_through_source_points():
    x = np.array([0, 1_000_000, 2_000_000])
    y = np.array([0.0, 1.0, 2.5])
    out = interpolate_array(x, y, np.array([0, 1_000_000, 2_000_000]))
    assert out.tolist() == [0.0, 1.0, 2.5]


def test_midpoint_and_extrapolation():
    x = np.array([0, 2_000_000])
    y = np.array([0.0, 4.0])
    out = interpolate_array(x, y, np.array([1_000_000, 3_000_000, -1_000_000]))
    assert out[0] == 2.0
    assert out[1] == 6.0
    assert out[2] == -2.0


def test_degenerate_segment_is_flat():
    x = np.array([0.0, 1.0, 1.0, 2.0])
    y = np.array([0.0, 5.0, 5.0, 6.0])
    out = interpolate_array(x, y, np.array([1.0, 1.5]))
    np.testing.assert_allclose(out, [5.0, 5.5])


def test_reverse_direction_swaps_axes():
    bp = np.array([0.0, 1e6, 3e6])
    cm = np.array([0.0, 1.0, 2.0])
    assert interpolate_array(cm, bp, np.array([1.5]))[0] == 2e6


def test_interpolate_preserves_target_shape_and_order():
    src_x = {"1": _series([0, 100, 200]), "2": _series([0, 10], "n")}
    src_y = {"1": _series([0.0, 1.0, 2.0]), "2": _series([0.0, 1.0], "n")}
    targets = {
        "2": pd.Series([5.0], index=["t0"]),
        "1": pd.Series([150.0, 50.0, 250.0], index=["a", "b", "c"]),
    }
    out = interpolate(src_x, src_y, targets)
    assert list(out) == ["2", "1"]
    assert out["1"].index.tolist() == ["a", "b", "c"]
    np.testing.assert_allclose(out["1"].to_numpy(), [1.5, 0.5, 2.5])
    np.testing.assert_allclose(out["2"].to_numpy(), [0.5])


def test_unknown_chromosome_gives_missing():
    src_x = {"1": _series([0, 100])}
    src_y = {"1": _series([0.0, 1.0])}
    out = interpolate(src_x, src_y, {"X": pd.Series([5.0], index=["t"])})
    assert np.isnan(out["X"].iloc[0])


def test_single_point_raises_missing_map_data():
    src_x = {"7": _series([100])}
    src_y = {"7": _series([1.0])}
    with pytest.raises(MissingMapDataError) as excinfo:
        interpolate(src_x, src_y, {"7": pd.Series([5.0], index=["t"])})
    assert excinfo.value.chrom == "7"


def test_interpolate_column_aligns_to_target_rows():
    source = pd.DataFrame(
        {
            "marker": ["a", "b", "c", "d"],
            "chr": ["1", "1", "2", "2"],
            "bp": [0, 100, 0, 1000],
            "cM": [0.0, 1.0, 0.0, 10.0],
        }
    )
    target = pd.DataFrame(
        {"chr": ["2", "Y", "1", "2"], "bp": [500.0, 10.0, 50.0, np.nan]},
        index=[10, 11, 12, 13],
    )
    out = interpolate_column(source, target, "bp", "cM")
    assert out.index.tolist() == [10, 11, 12, 13]
    assert out.loc[10] == 5.0
    assert np.isnan(out.loc[11])
    assert out.loc[12] == 0.5
    assert np.isnan(out.loc[13])


def test_interpolate_column_ignores_unusable_source_rows():
    source = pd.DataFrame(
        {
            "marker": ["a", "b", "y", "c"],
            "chr": ["1", "1", "Y", "1"],
            "bp": [0, 100, 50, 200],
            "cM": [0.0, 1.0, 7.0, np.nan],
        }
    )
    target = pd.DataFrame({"chr": ["1", "Y"], "bp": [150.0, 50.0]})
    out = interpolate_column(source, target, "bp", "cM")
    assert out.iloc[0] == pytest.approx(1.5)
    assert np.isnan(out.iloc[1])
