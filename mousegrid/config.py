"""Configuration schemas and helpers for mousegrid."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, MutableMapping, Optional, Type, TypeVar, Union

import yaml


@dataclass(slots=True)
class MapSourceConfig:
    """Location and layout of the per-sex genetic map tables."""

    archive: Optional[str] = None
    average: str = "average.csv"
    female: str = "female.csv"
    male: str = "male.csv"
    sep: str = ","
    chr_column: str = "chr"
    pos_column: str = "pos"
    cm_column: str = "cM"
    pos_unit: Literal["bp", "Mbp"] = "bp"
    x_code: str = "20"
    # chr:bp (build 37); the Liu map needs its chr 4 inversion listed
    drop_inversions: List[str] = field(default_factory=list)


@dataclass(slots=True)
class LiftoverConfig:
    """Lift-over output converting build-37 positions to build 38."""

    converted: Optional[str] = None
    failed: Optional[str] = None


@dataclass(slots=True)
class ArrayConfig:
    """A genotyping-array marker file needing genetic positions."""

    source: str
    marker_column: str = "marker"
    chr_column: str = "chr"
    pos_column: str = "pos"
    pos_unit: Literal["bp", "Mbp"] = "Mbp"
    sep: str = ","


@dataclass(slots=True)
class GenesConfig:
    """Gene annotation table whose nearest-grid index is recomputed."""

    source: str
    chr_column: str = "chr"
    start_column: str = "start"
    end_column: str = "end"
    index_column: str = "grid_index"
    pos_unit: Literal["bp", "Mbp"] = "Mbp"
    sep: str = "\t"


@dataclass(slots=True)
class GridConfig:
    """Parameters for the evenly spaced genetic grid."""

    step_cm: float = 0.02
    start_bp: int = 3_000_000
    max_gap_mbp: float = 0.5


@dataclass(slots=True)
class PipelineConfig:
    """Top-level configuration container."""

    map: MapSourceConfig = field(default_factory=MapSourceConfig)
    liftover: LiftoverConfig = field(default_factory=LiftoverConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    arrays: Dict[str, ArrayConfig] = field(default_factory=dict)
    genes: Optional[GenesConfig] = None
    chrom_lengths: Optional[str] = None


T = TypeVar("T")


def _asdict_dataclass(obj: Any) -> Dict[str, Any]:
    if hasattr(obj, "__dataclass_fields__"):
        return {k: _asdict_dataclass(v) for k, v in asdict(obj).items()}
    return obj


def to_dict(cfg: PipelineConfig) -> Dict[str, Any]:
    """Convert a config object into a dict for logging/serialization."""

    return _asdict_dataclass(cfg)


def _merge_dict(base: MutableMapping[str, Any], override: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), MutableMapping):
            _merge_dict(base[key], value)  # type: ignore[index]
        else:
            base[key] = value
    return base


def _build_dataclass(cls: Type[T], payload: Mapping[str, Any]) -> T:
    field_names = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    kwargs = {k: v for k, v in payload.items() if k in field_names}
    return cls(**kwargs)  # type: ignore[arg-type]


def load_yaml_config(path: Union[str, Path]) -> PipelineConfig:
    """Load a :class:`PipelineConfig` from a YAML file."""

    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    base = to_dict(PipelineConfig())
    merged = _merge_dict(base, raw)

    arrays = {
        name: _build_dataclass(ArrayConfig, payload)
        for name, payload in (merged.get("arrays") or {}).items()
    }
    return PipelineConfig(
        map=_build_dataclass(MapSourceConfig, merged.get("map", {})),
        liftover=_build_dataclass(LiftoverConfig, merged.get("liftover", {})),
        grid=_build_dataclass(GridConfig, merged.get("grid", {})),
        arrays=arrays,
        genes=_build_dataclass(GenesConfig, merged["genes"]) if merged.get("genes") else None,
        chrom_lengths=merged.get("chrom_lengths"),
    )


__all__ = [
    "MapSourceConfig",
    "LiftoverConfig",
    "ArrayConfig",
    "GenesConfig",
    "GridConfig",
    "PipelineConfig",
    "load_yaml_config",
    "to_dict",
]
