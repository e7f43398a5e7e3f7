"""
Directory traversal.

Walks the input tree, filters out files that are not images, look like output of
a previous run, or are too small, and hands everything else to the pipeline. A
failing file or unreadable directory is reported and the walk carries on.
"""

import re
import sys
from pathlib import Path

from srcset.codec import Codec
from srcset.config import RunConfig
from srcset.pipeline import RunMetrics, process_image

# 320w, 1440w, legacy: names this tool writes
GENERATED_RE = re.compile(r"^(?:\d{3,4}w|legacy)$")

# Transient and editor artefacts to ignore
TRANSIENT_SUFFIXES = {".swp", ".tmp", ".bak"}


def is_transient(p: Path) -> bool:
    n = p.name
    return (
        n.startswith(".#")         # Emacs lockfiles
        or n.endswith("~")         # backup files
        or n == ".DS_Store"
        or p.suffix.lower() in TRANSIENT_SUFFIXES
    )


def is_generated(stem: str) -> bool:
    return GENERATED_RE.match(stem) is not None


def warn(config: RunConfig, msg: str) -> None:
    if not config.quiet:
        print(msg, file=sys.stderr)


def dispatch(path: Path, config: RunConfig, metrics: RunMetrics, codec: Codec) -> None:
    try:
        process_image(path, config, metrics, codec)
    except Exception as e:
        metrics.failed += 1
        warn(config, f"ERR   {path}: {e}")


def digest_path(path: Path, config: RunConfig, metrics: RunMetrics, codec: Codec) -> None:
    ext = path.suffix
    if not ext or is_transient(path) or not codec.can_read(ext):
        return
    if is_generated(path.stem):
        return
    try:
        size = path.stat().st_size
    except OSError as e:
        metrics.failed += 1
        warn(config, f"ERR   {path}: {e}")
        return
    if size <= config.min_size:
        metrics.skipped += 1
        warn(config, f"WARN  Skipping {path} ({size} bytes, minimum {config.min_size + 1})")
        return
    dispatch(path, config, metrics, codec)


def walk_path(directory: Path, config: RunConfig, metrics: RunMetrics, codec: Codec) -> None:
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        warn(config, f"WARN  Cannot list {directory}: {e}")
        return

    for entry in entries:
        metrics.traversed += 1
        if entry.is_dir():
            if config.recurse:
                walk_path(entry, config, metrics, codec)
            continue
        digest_path(entry, config, metrics, codec)


def run(config: RunConfig, codec: Codec) -> RunMetrics:
    metrics = RunMetrics()
    if config.is_file:
        # a file asked for by name skips the size and naming filters
        dispatch(config.input_path, config, metrics, codec)
    else:
        walk_path(config.input_path, config, metrics, codec)
    return metrics
