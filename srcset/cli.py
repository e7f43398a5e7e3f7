"""
srcset -- generate multiple responsive images for web and mobile.

For each image, eight scaled versions are written at the common breakpoints
320,480,640,768,960,1024,1280,1440 (those no wider than the source), plus a
`legacy` fallback, under a directory named after the image:

    my_image/
        legacy.jpg
        320w.jpg ... 1440w.jpg
        srcset.txt

srcset.txt holds the <img> tag, which is also printed. Files named `legacy`
or a 3 or 4 digit label ending in `w` (`100w`, `1440w`) are skipped on later
runs so an output tree inside the input tree is not reprocessed.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from srcset import __version__
from srcset.codec import CodecError, make_codec
from srcset.config import (
    CODECS,
    DEFAULT_MIN_KB,
    DEFAULT_OUT,
    DEFAULT_QUALITY,
    DEFAULT_UNSHARPEN,
    DEFAULT_WIDTHS,
    ConfigError,
    RunConfig,
    load_sizes_map,
    parse_unsharpen,
    parse_widths,
)
from srcset.walk import run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="srcset",
        description="Generate responsive image variants and their <img srcset> markup.",
    )
    parser.add_argument("path", help="Image file or directory of images")
    parser.add_argument("-o", "--out", default=DEFAULT_OUT, help="Output directory (default: %(default)s)")
    parser.add_argument("-r", "--recurse", action="store_true", help="Recurse into subdirectories")
    parser.add_argument("-t", "--type", default="", help="Output file type (jpg, png, webp...); default keeps the source type")
    parser.add_argument("-s", "--sizes", type=parse_widths, default=DEFAULT_WIDTHS,
                        help="Comma-separated breakpoint widths (default: 320,480,640,768,960,1024,1280,1440)")
    parser.add_argument("-m", "--min", type=int, default=DEFAULT_MIN_KB,
                        help="Skip images of this many KB or less; ignored for a single file (default: %(default)s)")
    parser.add_argument("-q", "--quality", type=int, default=DEFAULT_QUALITY,
                        help="JPEG/WebP quality (default: %(default)s)")
    parser.add_argument("-u", "--unsharpen", type=parse_unsharpen, default=DEFAULT_UNSHARPEN,
                        help="Unsharpen sigma,threshold applied after resizing; sigma 0 disables (default: %(default)s)")
    parser.add_argument("-j", "--jobs", action="store_true", help="Resize the widths of each image in parallel")
    parser.add_argument("--threads", type=int, default=os.cpu_count() or 4, help="Worker threads for --jobs")
    parser.add_argument("-n", "--nested", action="store_true",
                        help="Mirror the input subdirectories in the output; ignored for a single file")
    parser.add_argument("-p", "--prefix", default="", help="URL prefix used in the generated markup")
    parser.add_argument("-z", "--dry-run", "--test", dest="dry_run", action="store_true",
                        help="Walk and plan but write nothing; markup is still printed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-e", "--quiet", action="store_true", help="Suppress warnings and per-file errors")
    parser.add_argument("--sizes-attr", default="",
                        help='Fixed "sizes" attribute, e.g. "(min-width: 768px) 50vw, 100vw"; default picks one by width')
    parser.add_argument("--sizes-map", default=None,
                        help='JSON file mapping filename globs to "sizes" values, e.g. {"hero_*": "100vw"}')
    parser.add_argument("--codec", choices=CODECS, default="pillow", help="Image codec (default: %(default)s)")
    parser.add_argument("--imagemagick-bin", default="", help='ImageMagick binary, for example "convert" or "magick"')
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    inpath = Path(args.path)
    is_file = inpath.is_file()
    # argparse runs `type` on the string default too
    sigma, threshold = args.unsharpen
    sizes_map = tuple(load_sizes_map(Path(args.sizes_map))) if args.sizes_map else ()
    config = RunConfig(
        input_path=inpath,
        output_root=Path(args.out),
        prefix=args.prefix,
        extension=args.type,
        widths=tuple(args.sizes),
        min_size=max(0, args.min) * 1024,
        quality=args.quality,
        sigma=sigma,
        threshold=threshold,
        nested=args.nested and not is_file,
        recurse=args.recurse and not is_file,
        jobs=args.jobs,
        threads=args.threads,
        dry_run=args.dry_run,
        verbose=args.verbose,
        quiet=args.quiet,
        sizes_attr=args.sizes_attr,
        sizes_map=sizes_map,
        codec=args.codec,
        imagemagick_bin=args.imagemagick_bin,
    )
    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = build_config(args)
        codec = make_codec(config)
    except (ConfigError, CodecError) as e:
        print(str(e), file=sys.stderr)
        return 1

    if config.verbose:
        print(f"Input: {config.input_path}  Output: {config.output_root}  Codec: {codec.name}")
        print(f"Widths: {list(config.widths)} px, quality={config.quality}, "
              f"unsharpen={config.sigma},{config.threshold}")
        print(f"Jobs={'on' if config.jobs else 'off'} (threads={config.threads}), nested={'on' if config.nested else 'off'}, "
              f"recurse={'on' if config.recurse else 'off'}, dry-run={'on' if config.dry_run else 'off'}")

    metrics = run(config, codec)
    print(metrics.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
