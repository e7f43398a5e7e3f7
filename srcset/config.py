import argparse
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

# 320,480,640,768,960,1024,1280,1440 match common mobile and widescreen viewports
DEFAULT_WIDTHS: Tuple[int, ...] = (320, 480, 640, 768, 960, 1024, 1280, 1440)
DEFAULT_OUT = "/tmp/srcset/"
DEFAULT_MIN_KB = 100
DEFAULT_QUALITY = 82
DEFAULT_UNSHARPEN = "0.25,8"
CODECS = ("pillow", "imagemagick")


class ConfigError(ValueError):
    """Configuration that makes the whole run impossible."""


@dataclass(frozen=True)
class RunConfig:
    input_path: Path
    output_root: Path
    prefix: str = ""
    extension: str = ""
    widths: Tuple[int, ...] = DEFAULT_WIDTHS
    min_size: int = DEFAULT_MIN_KB * 1024
    quality: int = DEFAULT_QUALITY
    sigma: float = 0.25
    threshold: int = 8
    nested: bool = False
    recurse: bool = False
    jobs: bool = False
    threads: int = os.cpu_count() or 4
    dry_run: bool = False
    verbose: bool = False
    quiet: bool = False
    sizes_attr: str = ""
    sizes_map: Tuple[Tuple[str, str], ...] = ()
    codec: str = "pillow"
    imagemagick_bin: str = ""

    @property
    def is_file(self) -> bool:
        return self.input_path.is_file()

    @property
    def input_root(self) -> Path:
        return self.input_path.parent if self.is_file else self.input_path

    def validate(self) -> "RunConfig":
        if not self.input_path.exists():
            raise ConfigError(f"Input path not found: {self.input_path}")
        if self.output_root.is_file():
            raise ConfigError(f"Output path cannot be a file: {self.output_root}")
        if self.codec not in CODECS:
            raise ConfigError(f"Unknown codec {self.codec!r}; choose from {', '.join(CODECS)}")
        if self.threads < 1:
            raise ConfigError("--threads must be at least 1")
        if not 1 <= self.quality <= 100:
            raise ConfigError("--quality must be between 1 and 100")
        return self


# ---------- Option parsing ----------

def parse_widths(s: str) -> Tuple[int, ...]:
    try:
        widths = sorted({int(x.strip()) for x in s.split(",") if x.strip()})
    except ValueError:
        raise argparse.ArgumentTypeError("Invalid --sizes. Example: 320,640,1024")
    widths = [w for w in widths if w > 0]
    if not widths:
        raise argparse.ArgumentTypeError("--sizes needs at least one positive width")
    return tuple(widths)


def parse_unsharpen(s: str) -> Tuple[float, int]:
    parts = [x.strip() for x in s.split(",")]
    try:
        if len(parts) != 2:
            raise ValueError(s)
        return float(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError("Invalid --unsharpen. Example: 0.25,8 (sigma,threshold)")


def load_sizes_map(json_path: Path) -> List[Tuple[str, str]]:
    """
    Returns list of (pattern, sizes_value) pairs. Patterns are glob-style and match the basename.
    Example JSON:
      {
        "hero_*": "(max-width: 768px) 100vw, 1200px",
        "thumb_*": "160px"
      }
    """
    if not json_path.exists():
        return []
    try:
        data = json.loads(json_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return []
    if not isinstance(data, dict):
        return []
    items = []
    for pattern, sizes in data.items():
        if isinstance(pattern, str) and isinstance(sizes, str) and pattern and sizes:
            items.append((pattern, sizes))
    return items
