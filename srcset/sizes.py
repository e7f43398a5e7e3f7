"""
Breakpoint selection.

Given the pixel width of a source image and the ascending list of candidate
widths, pick the widths worth generating. Images are never upscaled: only
candidates no wider than the source survive, and the widest survivor becomes
the legacy (fallback) width rather than the source width itself, so the
fallback is always re-encoded and bounded in size.
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple

from srcset.config import DEFAULT_WIDTHS


class BreakpointPlan(NamedTuple):
    widths: Tuple[int, ...]
    legacy: int


def select_widths(original_width: int, candidates: Optional[Sequence[int]] = None) -> Optional[BreakpointPlan]:
    """
    Returns the plan for an image `original_width` pixels wide, or None when every
    candidate is wider than the image. Candidates must already be ascending and unique.
    """
    if not candidates:
        candidates = DEFAULT_WIDTHS
    widths = tuple(w for w in candidates if w <= original_width)
    if not widths:
        return None
    return BreakpointPlan(widths, widths[-1])


def aspect_ratio(width: int, height: int) -> float:
    return width / height


def target_height(target_width: int, aspect: float) -> int:
    # half-up, and never collapse a very wide image to zero rows
    return max(1, int(math.floor(target_width / aspect + 0.5)))
