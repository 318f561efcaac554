import json

import numpy as np
import pandas as pd
import pytest

from mousegrid.config import ArrayConfig, GenesConfig, GridConfig, LiftoverConfig, MapSourceConfig, PipelineConfig
from mousegrid.errors import AssemblyOrderError, FetchError
from mousegrid.io_.tables import read_table
from mousegrid.pipeline import MAP_COLUMNS, run_pipeline

SHIFT_BP = 1_000


def _converted(tmp_path, skip=()):
    lines = []
    for chrom in ("1", "2", "X"):
        for mbp in (5, 20, 40, 60):
            bp = mbp * 1_000_000
            if (chrom, bp) in skip:
                continue
            lines.append(f"chr{chrom}:{bp + SHIFT_BP}-{bp + SHIFT_BP}")
    path = tmp_path / "converted.txt"
    path.write_text("\n".join(lines) + "\n")
    return path


def _config(tmp_path, sex_map_files, **overrides):
    array = tmp_path / "gigamuga.csv"
    array.write_text("marker,chr,pos\ng1,1,10.0\ng2,X,30.5\ng3,Y,2.0\ng4,2,100.0\n")
    genes = tmp_path / "genes.tsv"
    genes.write_text("gene\tchr\tstart\tend\tgrid_index\nA\t1\t10.0\t10.2\t0\nB\tMT\t0.001\t0.002\t5\n")

    cfg = PipelineConfig(
        map=MapSourceConfig(
            average=str(sex_map_files["average"]),
            female=str(sex_map_files["female"]),
            male=str(sex_map_files["male"]),
        ),
        liftover=LiftoverConfig(converted=str(_converted(tmp_path))),
        grid=GridConfig(step_cm=0.5),
        arrays={"gigamuga": ArrayConfig(source=str(array))},
        genes=GenesConfig(source=str(genes)),
    )
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


def test_run_pipeline_end_to_end(tmp_path, sex_map_files):
    out_dir = tmp_path / "results"
    manifest = run_pipeline(_config(tmp_path, sex_map_files), out_dir, tmp_path / "cache")

    assert set(manifest["tables"]) == {"genetic_map", "gigamuga", "grid", "grid_plus", "genes"}
    assert (tmp_path / "cache" / "map_build37_regions.txt").exists()
    stored = json.loads((out_dir / "manifest.json").read_text(encoding="utf-8"))
    assert stored["config"]["grid"]["step_cm"] == 0.5
    assert "pandas" in stored["session"]["packages"]

    gmap = read_table(out_dir / "genetic_map.tsv")
    assert gmap.columns.tolist() == MAP_COLUMNS
    autosomes = gmap["chr"] != "X"
    assert gmap.loc[autosomes, "cM_male"].notna().all()
    assert gmap.loc[~autosomes, "cM_male"].isna().all()
    for _, rows in gmap.groupby("chr"):
        assert rows["bp"].iloc[0] == 0
        for column in ("cM", "cM_female"):
            assert rows[column].min() == 0.0
    assert (gmap.loc[gmap["bp37"].notna(), "bp"] - gmap.loc[gmap["bp37"].notna(), "bp37"] == SHIFT_BP).all()

    plus = read_table(out_dir / "grid_plus.tsv")
    for _, rows in plus.groupby("chr"):
        assert np.all(np.diff(rows["bp"].to_numpy()) <= 500_000)
    grid = read_table(out_dir / "grid.tsv")
    assert len(plus) > len(grid)

    arrays = read_table(out_dir / "gigamuga.tsv")
    assert arrays["cM"].notna().tolist() == [True, True, False, True]

    genes = read_table(out_dir / "genes.tsv")
    nearest = plus.loc[int(genes["grid_index"].iloc[0])]
    assert nearest["chr"] == "1"
    assert abs(nearest["bp"] - 10_100_000) <= 250_000
    assert pd.isna(genes["grid_index"].iloc[1])


def test_run_pipeline_without_liftover_writes_nothing(tmp_path, sex_map_files):
    cfg = _config(tmp_path, sex_map_files, liftover=LiftoverConfig())
    out_dir = tmp_path / "results"
    with pytest.raises(FetchError):
        run_pipeline(cfg, out_dir, tmp_path / "cache")
    assert not out_dir.exists()


def test_run_pipeline_flags_unlisted_inversion(tmp_path, sex_map_files):
    converted = tmp_path / "inverted.txt"
    lines = _converted(tmp_path).read_text().splitlines()
    lines[1], lines[2] = lines[2], lines[1]
    converted.write_text("\n".join(lines) + "\n")

    cfg = _config(tmp_path, sex_map_files, liftover=LiftoverConfig(converted=str(converted)))
    with pytest.raises(AssemblyOrderError):
        run_pipeline(cfg, tmp_path / "results", tmp_path / "cache")
    assert not (tmp_path / "results").exists()


def test_run_pipeline_drops_listed_inversion(tmp_path, sex_map_files):
    cfg = _config(
        tmp_path,
        sex_map_files,
        map=MapSourceConfig(
            average=str(sex_map_files["average"]),
            female=str(sex_map_files["female"]),
            male=str(sex_map_files["male"]),
            drop_inversions=["1:20000000"],
        ),
    )
    manifest = run_pipeline(cfg, tmp_path / "results", tmp_path / "cache")
    gmap = read_table(tmp_path / "results" / "genetic_map.tsv")
    assert "1_20000000" not in set(gmap["marker"])
    assert manifest["tables"]["genetic_map"]["rows"] == len(gmap)
