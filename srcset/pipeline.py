"""
Per-image pipeline: open, plan, render legacy, render each width (optionally in
parallel), then write the markup sidecar. Metrics are only touched once every
step for the image has succeeded.
"""

import concurrent.futures as cf
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

from srcset.codec import Codec
from srcset.config import RunConfig
from srcset.markup import build_tag, find_sizes_for
from srcset.paths import (
    LEGACY_LABEL,
    ensure_parent_dirs,
    resolve_extension,
    sidecar_path,
    url_prefix,
    variant_path,
    width_label,
    write_text_atomic,
)
from srcset.sizes import aspect_ratio, select_widths, target_height


@dataclass
class RunMetrics:
    count: int = 0
    resized: int = 0
    traversed: int = 0
    skipped: int = 0
    failed: int = 0
    started: float = 0.0

    def __post_init__(self):
        if not self.started:
            self.started = time.perf_counter()

    def summary(self) -> str:
        elapsed = time.perf_counter() - self.started
        return (
            f"Processed {self.count} image(s): {self.resized} resized, {self.traversed} traversed, "
            f"{self.skipped} skipped, {self.failed} failed in {elapsed:.2f}s"
        )


@dataclass(frozen=True)
class ImageDescriptor:
    path: Path
    relative: Path
    stem: str
    extension: str
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return aspect_ratio(self.width, self.height)


def describe(path: Path, config: RunConfig, width: int, height: int) -> ImageDescriptor:
    try:
        relative = path.relative_to(config.input_root)
    except ValueError:
        relative = Path(path.name)
    return ImageDescriptor(
        path=path,
        relative=relative,
        stem=path.stem,
        extension=resolve_extension(path, config.extension),
        width=width,
        height=height,
    )


def format_size(n: int) -> str:
    size = float(n)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def render_variant(
    codec: Codec,
    picture: Any,
    width: int,
    aspect: float,
    dst: Path,
    config: RunConfig,
) -> Path:
    height = target_height(width, aspect)
    if config.dry_run:
        if config.verbose:
            print(f">> {dst} [{width}x{height}]")
        return dst
    scaled = codec.resize(picture, width, height)
    ensure_parent_dirs(dst)
    codec.save(scaled, dst)
    if config.verbose:
        print(f"{dst} Width={width}: Height={height}; Size={format_size(dst.stat().st_size)}")
    return dst


def process_image(path: Path, config: RunConfig, metrics: RunMetrics, codec: Codec) -> bool:
    """
    Generate the variant set and markup for one image.

    Returns True when the image was processed, False when it was skipped (no
    configured width fits). Multi-frame images use their first frame. Codec and
    write failures propagate.
    """
    decoded = codec.open(path)
    image = describe(path, config, decoded.width, decoded.height)
    label = image.relative.as_posix()
    print(label)

    plan = select_widths(image.width, config.widths)
    if plan is None:
        if config.verbose:
            print(f"SKIP  {label} [{image.width}x{image.height}] narrower than every breakpoint")
        return False

    if config.verbose:
        print(f"{path} Width={image.width}: Height={image.height}; "
              f"Size={format_size(path.stat().st_size)}; Color={decoded.mode}")

    ext = image.extension
    aspect = image.aspect
    out, root, nested = config.output_root, config.input_root, config.nested

    # Legacy first: the widest planned width, never the source width
    legacy_dst = variant_path(out, root, path, LEGACY_LABEL, ext, nested)
    render_variant(codec, decoded.picture, plan.legacy, aspect, legacy_dst, config)

    work: List[Tuple[int, Path]] = [
        (w, variant_path(out, root, path, width_label(w), ext, nested)) for w in plan.widths
    ]
    if config.jobs and len(work) > 1:
        with cf.ThreadPoolExecutor(max_workers=min(config.threads, len(work))) as ex:
            futures = [ex.submit(render_variant, codec, decoded.picture, w, aspect, dst, config) for w, dst in work]
            for fut in cf.as_completed(futures):
                fut.result()
    else:
        for w, dst in work:
            render_variant(codec, decoded.picture, w, aspect, dst, config)

    sizes = find_sizes_for(path.name, config.sizes_map, config.sizes_attr)
    prefix = url_prefix(config.prefix, root, path, nested)
    tag = build_tag(plan.legacy, prefix, ext, image.stem, plan.widths, sizes=sizes)

    sidecar = sidecar_path(out, root, path, nested)
    if config.verbose:
        print(sidecar)
    print(f"\n{tag}\n")
    if not config.dry_run:
        ensure_parent_dirs(sidecar)
        write_text_atomic(sidecar, tag)

    metrics.count += 1
    metrics.resized += 1 + len(plan.widths)
    print(f"{'DRY   ' if config.dry_run else 'DONE  '}{label} -> {[width_label(w) for w in plan.widths]} (legacy={plan.legacy})")
    return True
