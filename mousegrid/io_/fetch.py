"""Download and cache external inputs."""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path
from typing import Dict, Iterable
from urllib.parse import urlparse

import requests

from ..errors import FetchError
from ..logging_ import get_logger

LOGGER = get_logger(__name__)

CHUNK_SIZE = 1 << 16


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def download(url: str, dest: Path, timeout: float | None = None) -> Path:
    """Stream ``url`` into ``dest``; a partial file never takes the final name."""

    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".part")
    LOGGER.info("Downloading %s", url)
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(partial, "wb") as handle:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)
    except (requests.RequestException, OSError) as exc:
        partial.unlink(missing_ok=True)
        raise FetchError(f"Failed to download {url}: {exc}") from exc
    partial.replace(dest)
    return dest


def fetch(source: str, cache_dir: str | Path, name: str | None = None) -> Path:
    """Resolve ``source`` to a local file.

    Local paths are returned as-is. URLs are downloaded into ``cache_dir`` once;
    an existing cached file is reused without verification.
    """

    if not is_url(source):
        path = Path(source).expanduser()
        if not path.exists():
            raise FetchError(f"Input file '{path}' does not exist")
        return path

    name = name or Path(urlparse(source).path).name or "download"
    dest = Path(cache_dir) / name
    if dest.exists():
        LOGGER.debug("Using cached %s", dest)
        return dest
    return download(source, dest)


def extract_members(archive: str | Path, names: Iterable[str], dest: str | Path) -> Dict[str, Path]:
    """Extract ``names`` from a zip ``archive`` into ``dest``, skipping files already there.

    Members are matched by basename so archives with a leading directory work.
    """

    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    wanted = list(names)
    out: Dict[str, Path] = {}
    pending = []
    for name in wanted:
        target = dest / Path(name).name
        if target.exists():
            out[name] = target
        else:
            pending.append(name)
    if not pending:
        return out

    try:
        with zipfile.ZipFile(archive) as zf:
            members = {Path(info.filename).name: info for info in zf.infolist() if not info.is_dir()}
            for name in pending:
                info = members.get(Path(name).name)
                if info is None:
                    raise FetchError(f"Archive '{archive}' has no member '{name}'")
                target = dest / Path(name).name
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                out[name] = target
    except zipfile.BadZipFile as exc:
        raise FetchError(f"'{archive}' is not a zip archive") from exc
    return out


__all__ = ["is_url", "download", "fetch", "extract_members"]
