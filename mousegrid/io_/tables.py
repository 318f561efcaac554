"""Writing pipeline output tables and the provenance manifest."""

from __future__ import annotations

import json
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Dict, Mapping

import pandas as pd

from ..config import PipelineConfig, to_dict

SESSION_PACKAGES = ("mousegrid", "numpy", "pandas", "requests", "PyYAML", "click")


def read_table(path: str | Path) -> pd.DataFrame:
    """Read a table written by :func:`write_table`."""

    return pd.read_csv(path, sep="\t", dtype={"chr": str, "marker": str})


def write_table(path: str | Path, df: pd.DataFrame) -> Path:
    """Write ``df`` as a tab-separated table without the index."""

    path = Path(path)
    df.to_csv(path, sep="\t", index=False, na_rep="NA")
    return path


def session_info() -> Dict[str, Any]:
    """Interpreter, platform and package versions for the manifest."""

    packages: Dict[str, str | None] = {}
    for name in SESSION_PACKAGES:
        try:
            packages[name] = version(name)
        except PackageNotFoundError:
            packages[name] = None
    return {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "packages": packages,
    }


def write_outputs(out_dir: str | Path, tables: Mapping[str, pd.DataFrame], cfg: PipelineConfig) -> dict[str, Any]:
    """Persist each table to ``<name>.tsv`` and write ``manifest.json``.

    Returns
    -------
    dict
        Manifest dictionary that was written to disk.
    """

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    entries = {}
    for name, df in tables.items():
        path = write_table(out_dir / f"{name}.tsv", df)
        entries[name] = {"path": path.name, "rows": int(len(df)), "columns": [str(c) for c in df.columns]}

    manifest = {
        "tables": entries,
        "config": to_dict(cfg),
        "session": session_info(),
    }
    manifest_path = out_dir / "manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as handle:
        json.dump(manifest, handle, indent=2)
    return manifest


__all__ = ["read_table", "write_table", "session_info", "write_outputs"]
