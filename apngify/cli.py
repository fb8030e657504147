"""
Convert an image to a single-frame APNG under a size limit.

Usage:
  apngify <image>                        Convert, write converted-<ms>.png next to it
  apngify <image> --out still.png        Choose the output path
  apngify <image> --max-mb 2.5           Size limit in MB (default 5)
  apngify <image> --format image/jpeg    Override the format guessed from the extension
  apngify <image> --backend opencv       Decode/resize with OpenCV instead of Pillow
  apngify --info still.png               Show chunk layout and animation fields

Exit status is 1 on any conversion failure.
"""

import argparse
import sys
from pathlib import Path

from .apng import read_animation
from .constants import COMPRESS_LEVEL, DEFAULT_BYTE_BUDGET
from .backends import BACKENDS
from .converter import convert_file
from .errors import ConversionError


def format_file_size(num_bytes: int) -> str:
    return f"{num_bytes / 1024 / 1024:.2f} MB"


def cmd_info(path: Path):
    info = read_animation(path.read_bytes())
    print(f"{path} ({format_file_size(path.stat().st_size)})")
    print(f"  Chunks: {', '.join(info.chunk_types)}")
    print(f"  Canvas: {info.width}x{info.height}")
    print(f"  acTL:   frames={info.num_frames} plays={info.num_plays}")
    print(f"  fcTL:   seq={info.sequence_number} {info.frame_width}x{info.frame_height}"
          f"+{info.x_offset}+{info.y_offset} delay={info.delay_num}/{info.delay_den}"
          f" dispose={info.dispose_op} blend={info.blend_op}")


def cmd_convert(args):
    byte_budget = int(args.max_mb * 1024 * 1024)
    out = convert_file(
        args.image,
        args.out,
        fmt=args.format,
        byte_budget=byte_budget,
        backend=args.backend,
        compress_level=args.compress_level,
        verbose=not args.quiet,
    )
    print(f"Saved: {out} ({format_file_size(out.stat().st_size)})")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Convert an image to a single-frame animated PNG"
    )
    parser.add_argument("image", help="Input image (JPEG, PNG, WebP, GIF, BMP, TIFF)")
    parser.add_argument("--out", default=None, help="Output APNG path")
    parser.add_argument("--max-mb", type=float, default=DEFAULT_BYTE_BUDGET / 1024 / 1024,
                        help="Max output size in MB")
    parser.add_argument("--format", default=None, help="Input format (MIME type or name)")
    parser.add_argument("--backend", choices=sorted(BACKENDS), default="pillow",
                        help="Decode/resize library")
    parser.add_argument("--compress-level", type=int, choices=range(10), default=COMPRESS_LEVEL,
                        metavar="0-9", help="zlib level for IDAT data")
    parser.add_argument("--quiet", action="store_true", help="Only print the result")
    parser.add_argument("--info", action="store_true",
                        help="Inspect an APNG written by this tool instead of converting")

    args = parser.parse_args(argv)
    path = Path(args.image)
    if not path.exists():
        print(f"Error: Input file not found: {path}")
        return 1

    try:
        if args.info:
            cmd_info(path)
        else:
            cmd_convert(args)
    except (ConversionError, OSError) as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
