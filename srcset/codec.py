"""
Image codecs.

The pipeline only needs three operations: open (dimensions plus something to
resize), resize to an exact size, and save with the format taken from the
destination extension. Pillow is the default; ImageMagick is available for
formats or filters Pillow handles poorly.
"""

import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, FrozenSet, NamedTuple, Optional, Tuple

from PIL import Image, ImageFilter

from srcset.config import RunConfig

# Extensions ImageMagick is trusted with here. Pillow reports its own set.
MAGICK_EXTS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".tif", ".tiff", ".bmp"})
UNSHARP_PERCENT = 150
FILTER_MODES = ("RGB", "RGBA", "L")


class CodecError(RuntimeError):
    pass


class Decoded(NamedTuple):
    picture: Any
    width: int
    height: int
    mode: str


class Codec:
    """Interface every codec implements."""

    name = "codec"
    extensions: FrozenSet[str] = frozenset()

    def open(self, path: Path) -> Decoded:
        raise NotImplementedError

    def resize(self, picture: Any, width: int, height: int) -> Any:
        raise NotImplementedError

    def save(self, picture: Any, path: Path) -> None:
        raise NotImplementedError

    def can_read(self, ext: str) -> bool:
        return ("." + ext.lstrip(".").lower()) in self.extensions


# ---------- Pillow ----------

def to_filterable(im: Image.Image) -> Image.Image:
    """
    Return an 8-bit copy of `im` that LANCZOS and UnsharpMask accept. Wide samples
    are rescaled, not clipped: 16-bit integers divide by 256 and floats (0..1)
    multiply by 255.
    """
    if im.mode == "I" or im.mode.startswith("I;16"):
        return im.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if im.mode == "F":
        return im.point(lambda v: v * 255).convert("L")
    # Palette and bilevel images cannot be unsharpened
    if im.mode not in FILTER_MODES:
        return im.convert("RGBA" if "transparency" in im.info or "A" in im.mode else "RGB")
    return im.copy()


class PillowCodec(Codec):
    name = "pillow"

    def __init__(self, quality: int = 82, sigma: float = 0.25, threshold: int = 8):
        self.quality = quality
        self.sigma = sigma
        self.threshold = threshold
        registered = Image.registered_extensions()
        self.extensions = frozenset(ext for ext, fmt in registered.items() if fmt in Image.OPEN)
        self._save_formats = {ext: fmt for ext, fmt in registered.items() if fmt in Image.SAVE}

    def open(self, path: Path) -> Decoded:
        with Image.open(path) as im:
            mode = im.mode
            picture = to_filterable(im)
        w, h = picture.size
        return Decoded(picture, w, h, mode)

    def resize(self, picture: Image.Image, width: int, height: int) -> Image.Image:
        scaled = picture.resize((width, height), Image.Resampling.LANCZOS)
        if self.sigma > 0:
            scaled = scaled.filter(
                ImageFilter.UnsharpMask(radius=self.sigma, percent=UNSHARP_PERCENT, threshold=self.threshold)
            )
        return scaled

    def save(self, picture: Image.Image, path: Path) -> None:
        fmt = self._save_formats.get(path.suffix.lower())
        if fmt is None:
            raise CodecError(f"Pillow cannot write {path.suffix or 'extensionless'} files")
        kwargs = {}
        if fmt == "JPEG":
            if picture.mode not in ("RGB", "L"):
                picture = picture.convert("RGB")
            kwargs = {"quality": self.quality, "optimize": True, "progressive": True}
        elif fmt == "WEBP":
            kwargs = {"quality": self.quality, "method": 6}
        elif fmt == "PNG":
            kwargs = {"optimize": True}
        picture.save(path, format=fmt, **kwargs)


# ---------- ImageMagick ----------

@dataclass(frozen=True)
class MagickPicture:
    source: Path
    width: int
    height: int
    target: Optional[Tuple[int, int]] = None


def find_imagemagick_bin(explicit: Optional[str] = None) -> Tuple[str, bool]:
    candidates = []
    if explicit:
        candidates.append(explicit)
    candidates += ["convert", "magick"]
    for exe in candidates:
        try:
            out = subprocess.run([exe, "-version"], capture_output=True, text=True)
        except FileNotFoundError:
            continue
        if out.returncode == 0 and ("ImageMagick" in out.stdout or "ImageMagick" in out.stderr):
            requires_wrapper = Path(exe).name.startswith("magick")
            return exe, requires_wrapper
    raise CodecError("Could not find ImageMagick. Install it or pass --imagemagick-bin")


class ImageMagickCodec(Codec):
    name = "imagemagick"
    extensions = MAGICK_EXTS

    def __init__(self, im_bin: str, requires_wrapper: bool, quality: int = 82, sigma: float = 0.25, threshold: int = 8):
        self.im_bin = im_bin
        self.requires_wrapper = requires_wrapper
        self.quality = quality
        self.sigma = sigma
        self.threshold = threshold

    def _tool(self, tool: str) -> list:
        if self.requires_wrapper:
            return [self.im_bin, tool]
        if tool == "convert":
            return [self.im_bin]
        return [tool]

    def _run(self, cmd: list) -> str:
        proc = subprocess.run(cmd, capture_output=True, text=True)
        if proc.returncode != 0:
            raise CodecError(proc.stderr.strip() or proc.stdout.strip() or f"{cmd[0]} exited {proc.returncode}")
        return proc.stdout

    def open(self, path: Path) -> Decoded:
        # [0] reads the first frame only, as Pillow does
        out = self._run(self._tool("identify") + ["-format", "%w %h %[colorspace]", f"{path}[0]"])
        parts = out.strip().split()
        if len(parts) < 2 or not (parts[0].isdigit() and parts[1].isdigit()):
            raise CodecError(f"Could not read size of {path.name}: {out.strip()!r}")
        w, h = int(parts[0]), int(parts[1])
        mode = parts[2] if len(parts) > 2 else ""
        return Decoded(MagickPicture(path, w, h), w, h, mode)

    def resize(self, picture: MagickPicture, width: int, height: int) -> MagickPicture:
        return replace(picture, target=(width, height))

    def build_convert_cmd(self, picture: MagickPicture, dst: Path) -> list:
        width, height = picture.target or (picture.width, picture.height)
        cmd = self._tool("convert")
        # "!" forces the exact geometry; the caller already preserved the aspect ratio
        cmd += [f"{picture.source}[0]", "-resize", f"{width}x{height}!", "-strip"]
        if self.sigma > 0:
            cmd += ["-unsharp", f"0x{self.sigma}+1+{self.threshold / 255:.4f}"]
        cmd += ["-quality", str(self.quality), str(dst)]
        return cmd

    def save(self, picture: MagickPicture, path: Path) -> None:
        if not self.can_read(path.suffix):
            raise CodecError(f"ImageMagick output type {path.suffix or 'extensionless'} not enabled")
        self._run(self.build_convert_cmd(picture, path))


def make_codec(config: RunConfig) -> Codec:
    if config.codec == "imagemagick":
        im_bin, requires_wrapper = find_imagemagick_bin(config.imagemagick_bin or None)
        return ImageMagickCodec(im_bin, requires_wrapper, config.quality, config.sigma, config.threshold)
    return PillowCodec(config.quality, config.sigma, config.threshold)
