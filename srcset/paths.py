"""
Output layout.

    flat:   {out}/{stem}/{label}.{ext}
    nested: {out}/{relative dir of source}/{stem}/{label}.{ext}

The markup URLs use the same shape rooted at the prefix instead of the output
directory, so both are built from `image_parts`.
"""

import os
from pathlib import Path, PurePosixPath
from typing import Tuple

LEGACY_LABEL = "legacy"
SIDECAR_NAME = "srcset.txt"


def width_label(width: int) -> str:
    return f"{width}w"


def resolve_extension(path: Path, override: str) -> str:
    """Use the override type if one was given, otherwise keep the source extension."""
    ext = override.strip().lstrip(".")
    if ext:
        return ext
    return path.suffix.lstrip(".")


def image_parts(input_root: Path, path: Path, nested: bool) -> Tuple[str, ...]:
    if not nested:
        return (path.stem,)
    rel_parent = path.relative_to(input_root).parent
    return tuple(p for p in rel_parent.parts if p != ".") + (path.stem,)


def image_dir(output_root: Path, input_root: Path, path: Path, nested: bool) -> Path:
    return Path(output_root).joinpath(*image_parts(input_root, path, nested))


def variant_path(output_root: Path, input_root: Path, path: Path, label: str, ext: str, nested: bool) -> Path:
    return image_dir(output_root, input_root, path, nested) / f"{label}.{ext}"


def sidecar_path(output_root: Path, input_root: Path, path: Path, nested: bool) -> Path:
    return image_dir(output_root, input_root, path, nested) / SIDECAR_NAME


def url_prefix(prefix: str, input_root: Path, path: Path, nested: bool) -> str:
    parts = image_parts(input_root, path, nested)
    if not prefix:
        return str(PurePosixPath(*parts))
    return prefix.rstrip("/") + "/" + "/".join(parts)


def ensure_parent_dirs(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def write_text_atomic(target: Path, text: str) -> None:
    tmp = target.with_suffix(target.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    os.replace(tmp, target)
