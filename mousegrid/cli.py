"""Command line entry point for the map preparation pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import PipelineConfig, load_yaml_config
from .logging_ import configure_logging, get_logger
from .pipeline import run_pipeline

LOGGER = get_logger(__name__)


@click.command()
@click.option("--config", "config_path", type=click.Path(exists=True), required=False)
@click.option("--out", "out_dir", type=click.Path(), default="results", show_default=True)
@click.option("--cache", "cache_dir", type=click.Path(), default="files", show_default=True)
@click.option("--verbose", is_flag=True, help="Log debug messages.")
def cli_run(config_path: str | None, out_dir: str, cache_dir: str, verbose: bool) -> None:
    """Build the shifted mouse genetic map, marker grids and array positions."""

    configure_logging(logging.DEBUG if verbose else logging.INFO)
    cfg = load_yaml_config(config_path) if config_path else PipelineConfig()
    LOGGER.info("Grid step %s cM from %s bp, max gap %s Mbp", cfg.grid.step_cm, cfg.grid.start_bp, cfg.grid.max_gap_mbp)

    manifest = run_pipeline(cfg, Path(out_dir), Path(cache_dir))
    for name, entry in manifest["tables"].items():
        LOGGER.info("%s: %s rows -> %s/%s", name, entry["rows"], out_dir, entry["path"])


if __name__ == "__main__":
    cli_run()
