# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for dpichanger

Reads the DPI of JPEG/PNG files and writes re-tagged copies.
Pixel data is never touched.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dpichanger import __version__
from dpichanger.config import DPIChangerConfig
from dpichanger.exceptions import DPIChangerError
from dpichanger.file_utils import default_output_path, get_pixel_dimensions, read_dpi, write_dpi
from dpichanger.format_detector import FormatDetector, ImageFormat
from dpichanger.print_size import (
    PAPER_FORMATS,
    find_paper_format,
    fits_on_paper,
    might_appear_pixelated,
    print_dimensions,
)
from dpichanger.results import DecodeStatus, DpiValue

logger = logging.getLogger(__name__)


def format_output(metadata: Any, format_type: str = "text") -> str:
    """
    Format file information for printing.

    Args:
        metadata: Dictionary of tag names to values
        format_type: Output format ('text' or 'json')

    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps(metadata, indent=2, ensure_ascii=False)
    lines = []
    for tag, value in metadata.items():
        lines.append(f"{tag}: {value}")
    return "\n".join(lines)


def describe_file(file_path: Path, config: DPIChangerConfig) -> Dict[str, Any]:
    """
    Collect format, DPI and print-size information for one file.

    Files without DPI metadata report the configured fallback DPI with
    source "Default".
    """
    with open(file_path, 'rb') as f:
        head = f.read(8)

    image_format = FormatDetector.identify(head)
    suffix_format = FormatDetector.from_extension(file_path)
    if ImageFormat.UNKNOWN not in (image_format, suffix_format) and image_format is not suffix_format:
        print(
            f"Warning: {file_path.name} has a {suffix_format.value} extension "
            f"but contains {image_format.value} data",
            file=sys.stderr,
        )

    info: Dict[str, Any] = {
        'File:FileName': file_path.name,
        'File:Format': image_format.value,
    }

    result = read_dpi(file_path, verify_crc=config.verify_crc)
    if result.status is DecodeStatus.UNSUPPORTED:
        info['DPI:Status'] = 'Unsupported format'
        return info

    dpi = result.dpi_or(config.fallback_dpi)
    info['DPI:XResolution'] = dpi.x
    info['DPI:YResolution'] = dpi.y
    info['DPI:Source'] = result.source if result.found else 'Default'
    if result.found:
        info['DPI:RawDensity'] = list(result.raw_density)

    try:
        width, height = get_pixel_dimensions(file_path)
    except DPIChangerError as e:
        logger.debug("No pixel dimensions for %s: %s", file_path, e)
        return info
    info['Image:Width'] = width
    info['Image:Height'] = height
    for key, value in print_dimensions(width, height, dpi).as_dict().items():
        info[f'Print:{key}'] = value
    return info


def cmd_info(args: argparse.Namespace, config: DPIChangerConfig) -> int:
    status = 0
    outputs = []
    for name in args.files:
        path = Path(name)
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            status = 1
            continue
        try:
            outputs.append(describe_file(path, config))
        except DPIChangerError as e:
            print(f"Error: {path}: {e.message}", file=sys.stderr)
            status = 1
        except OSError as e:
            print(f"Error: {path}: {e.strerror or e}", file=sys.stderr)
            status = 1

    if args.json:
        print(format_output(outputs, "json"))
    else:
        print("\n\n".join(format_output(info) for info in outputs))
    return status


def cmd_set(args: argparse.Namespace, config: DPIChangerConfig) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    paper = None
    if args.paper:
        try:
            paper = find_paper_format(args.paper)
        except KeyError:
            names = ", ".join(p.name for p in PAPER_FORMATS)
            print(f"Error: Unknown paper format '{args.paper}'. Choose one of: {names}", file=sys.stderr)
            return 1

    dpi_x = args.dpi if args.dpi is not None else (paper.recommended_dpi if paper else None)
    if dpi_x is None:
        print("Error: --dpi or --paper is required", file=sys.stderr)
        return 1

    try:
        dpi = DpiValue(dpi_x, args.dpi_y if args.dpi_y is not None else dpi_x)
        before = read_dpi(path, verify_crc=config.verify_crc).dpi_or(config.fallback_dpi)
        if args.overwrite:
            output_path = path
        elif args.output:
            output_path = Path(args.output)
        else:
            output_path = default_output_path(path, dpi, paper)
        written = write_dpi(path, dpi, output_path)
    except DPIChangerError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e.filename or path}: {e.strerror or e}", file=sys.stderr)
        return 1

    print(f"DPI metadata changed from {before} to {dpi}: {written}")

    if paper is not None:
        try:
            width, height = get_pixel_dimensions(written)
        except DPIChangerError as e:
            logger.debug("Skipping paper fit check: %s", e)
        else:
            size = print_dimensions(width, height, dpi)
            if not fits_on_paper(size, paper):
                print(
                    f"Warning: {size.width_in:.2f} x {size.height_in:.2f} in will not fit on "
                    f"{paper.name} ({paper.width_in} x {paper.height_in} in)",
                    file=sys.stderr,
                )
    if might_appear_pixelated(dpi, config.pixelation_threshold):
        print(
            f"Warning: prints at {dpi} DPI may appear pixelated; "
            f"use {config.pixelation_threshold} DPI or higher for print",
            file=sys.stderr,
        )
    return 0


def cmd_papers(args: argparse.Namespace, config: DPIChangerConfig) -> int:
    for paper in PAPER_FORMATS:
        print(
            f"{paper.name}: {paper.width_in} x {paper.height_in} in, "
            f"{paper.recommended_dpi} DPI - {paper.description}"
        )
    print(f"Common DPI values: {', '.join(str(dpi) for dpi in config.presets)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpichanger",
        description="Read and change the DPI/PPI metadata of JPEG and PNG files without touching pixel data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the stored DPI and print size
  dpichanger info photo.jpg

  # Write a 300 DPI copy (photo_300dpi.jpg)
  dpichanger set photo.jpg --dpi 300

  # Use the recommended DPI of a paper preset
  dpichanger set photo.jpg --paper "A4 Photo"
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--fallback-dpi', type=int, default=DPIChangerConfig.DEFAULT_FALLBACK_DPI,
                        help='DPI reported for files without DPI metadata (default: 72)')
    parser.add_argument('--verify-crc', action='store_true', help='Ignore PNG pHYs chunks with a bad CRC')

    subparsers = parser.add_subparsers(dest='command', required=True)

    info_parser = subparsers.add_parser('info', help='Show DPI and print size of image files')
    info_parser.add_argument('files', nargs='+', help='JPEG or PNG file(s)')
    info_parser.add_argument('-j', '--json', action='store_true', help='Output in JSON format')
    info_parser.set_defaults(func=cmd_info)

    set_parser = subparsers.add_parser('set', help='Write a copy of an image with a new DPI')
    set_parser.add_argument('file', help='JPEG or PNG file')
    set_parser.add_argument('--dpi', type=int, help='Target DPI (horizontal, and vertical unless --dpi-y)')
    set_parser.add_argument('--dpi-y', type=int, help='Target vertical DPI')
    set_parser.add_argument('--paper', help='Paper preset; sets the DPI when --dpi is omitted')
    output_group = set_parser.add_mutually_exclusive_group()
    output_group.add_argument('-o', '--output', help='Output file (default: <name>_<dpi>dpi.<ext>)')
    output_group.add_argument('--overwrite', action='store_true', help='Replace the input file')
    set_parser.set_defaults(func=cmd_set)

    papers_parser = subparsers.add_parser('papers', help='List paper format presets and common DPI values')
    papers_parser.set_defaults(func=cmd_papers)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DPIChangerConfig(fallback_dpi=args.fallback_dpi, verify_crc=args.verify_crc)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
