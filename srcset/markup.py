"""
<img> markup for a generated variant set.

    <img src="{prefix}/legacy.{ext}" srcset="{prefix}/{w}w.{ext} {w}w, ..." sizes="..." alt="A file named {stem}">

Names and prefixes are written as given; only a double quote, which would end the
attribute, becomes &quot;.
"""

import fnmatch
from typing import List, Optional, Sequence, Tuple

from srcset.paths import LEGACY_LABEL, width_label

# (legacy width strictly below, sizes value). A small image with only one or two
# variants gets a proportionate hint, not one written for the full set.
SIZES_TIERS: Tuple[Tuple[int, str], ...] = (
    (480, "(max-width:480px) 100vw, (min-width:481px) 25vw"),
    (640, "(max-width:640px) 100vw, (min-width:641px) 33vw"),
    (768, "(max-width:320px) 50vw, (max-width:768px) 100vw, (min-width:769px) 50vw"),
    (960, "(max-width:320px) 50vw, (max-width:960px) 75vw, (min-width:961px) 95vw"),
    (1024, "(max-width:320px) 50vw, (max-width:960px) 75vw, (min-width:961px) 95vw"),
    (1366, "(max-width:320px) 50vw, (max-width:960px) 75vw, (min-width:961px) 95vw"),
    (1660, "(max-width:320px) 25vw, (min-width: 960px) 75vw, 100vw"),
)
LARGE_SIZES = "(min-width: 1024px) 50vw, 100vw"


def quote_attr(value: str) -> str:
    return value.replace('"', "&quot;")


def sizes_for_width(legacy_width: int) -> str:
    for limit, sizes in SIZES_TIERS:
        if legacy_width < limit:
            return sizes
    return LARGE_SIZES


def find_sizes_for(basename: str, sizes_map: Sequence[Tuple[str, str]], default_sizes: str) -> str:
    for pattern, sizes in sizes_map:
        if fnmatch.fnmatch(basename, pattern):
            return sizes
    return default_sizes


def build_srcset(prefix: str, ext: str, widths: Sequence[int]) -> str:
    entries: List[str] = []
    for w in widths:
        label = width_label(w)
        entries.append(f"{prefix}/{label}.{ext} {label}")
    return ", ".join(entries)


def build_tag(
    legacy_width: int,
    prefix: str,
    ext: str,
    alt_name: str,
    widths: Sequence[int],
    sizes: Optional[str] = None,
) -> str:
    """
    Build the <img> tag. `sizes` passes straight through when given; otherwise the
    tier for `legacy_width` is used.
    """
    if not sizes:
        sizes = sizes_for_width(legacy_width)
    src = f"{prefix}/{LEGACY_LABEL}.{ext}"
    srcset = build_srcset(prefix, ext, widths)
    return (
        f'<img src="{quote_attr(src)}" srcset="{quote_attr(srcset)}" '
        f'sizes="{quote_attr(sizes)}" alt="A file named {quote_attr(alt_name)}">'
    )
