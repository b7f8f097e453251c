"""
GAF Extractor
Inspects GAF sprite containers and renders their entries to images.

Examples
========
  # List entries and frames
  gafkit info units.gaf

  # Also export the frame table to CSV
  gafkit info units.gaf --csv -o out

  # Render every entry to an animated WebP using a palette
  gafkit extract units.gaf --palette PALETTE.PAL -o out

  # One PNG per frame of a single entry, scaled up
  gafkit extract units.gaf --entry armcom --format png --scale 4
"""

import argparse
import logging
import os
import re
import sys
from datetime import datetime
from typing import Dict, List, Optional, Union

import pandas as pd
from tqdm import tqdm

from .config import Config
from .decoder import GafDecoder
from .errors import GafError
from .gaf_file import GafFile
from .palette import Palette, load_palette


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def append_timestamp(filename: str) -> str:
    """
    Append current timestamp to filename.

    Args:
        filename: Original filename with extension

    Returns:
        Filename with timestamp appended before extension
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    file_name, file_extension = os.path.splitext(filename)
    return f"{file_name}_{timestamp}{file_extension}"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing or replacing invalid characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for Windows/Unix filesystems
    """
    # Replace invalid Windows filename characters: < > : " / \ | ? *
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, '_', filename)

    # Remove leading/trailing spaces and dots
    sanitized = sanitized.strip('. ')

    return sanitized or 'unnamed'


# ============================================================================
# DATA PROCESSORS
# ============================================================================

class DataProcessor:
    """Turns decoded GAF files into tables."""

    @staticmethod
    def frame_rows(gaf: GafFile) -> List[Dict]:
        """
        Flatten a decoded file into one row per frame.

        Args:
            gaf: Decoded GAF file

        Returns:
            List of dictionaries keyed like Config.FIELD_MAPPINGS
        """
        rows = []
        for entry_index, entry in enumerate(gaf):
            for frame_index, frame in enumerate(entry.frames):
                rows.append({
                    "entry": entry_index,
                    "name": entry.name,
                    "frame": frame_index + 1,
                    "kind": "multi" if frame.is_composite else "single",
                    "layers": len(frame.layers) if frame.is_composite else 1,
                    "width": frame.width,
                    "height": frame.height,
                    "x_offset": frame.x_offset,
                    "y_offset": frame.y_offset,
                    "compression": "" if frame.is_composite else frame.compression,
                    "transparency_index": frame.transparency_index,
                    "duration": frame.duration,
                    "offset": f"0x{frame.offset:X}" if frame.offset is not None else "",
                })
        return rows

    @staticmethod
    def process_frames(gaf: GafFile) -> pd.DataFrame:
        """
        Build a DataFrame of all frames with mapped column titles.

        Args:
            gaf: Decoded GAF file

        Returns:
            DataFrame with one row per frame
        """
        rows = DataProcessor.frame_rows(gaf)
        df = pd.DataFrame(rows, columns=list(Config.FIELD_MAPPINGS.keys()))
        return df.rename(columns=Config.FIELD_MAPPINGS)


# ============================================================================
# DATA EXPORTER
# ============================================================================

class DataExporter:
    """Handles exporting data to CSV files."""

    @staticmethod
    def export_to_csv(df: pd.DataFrame, base_filename: str, output_dir: str = None) -> str:
        """
        Export DataFrame to CSV with timestamp.

        Args:
            df: DataFrame to export
            base_filename: Base filename (timestamp will be appended)
            output_dir: Output directory (default: Config.OUTPUT_DIR)

        Returns:
            Full path of exported file
        """
        if output_dir is None:
            output_dir = Config.OUTPUT_DIR

        os.makedirs(output_dir, exist_ok=True)

        filename = append_timestamp(base_filename)
        filepath = os.path.join(output_dir, filename)

        df.to_csv(filepath, index=False)
        print(f"[OK] Exported {len(df)} rows to {filepath}")
        return filepath


# ============================================================================
# GAF COMMANDS
# ============================================================================

def print_summary(gaf: GafFile, gaf_path: str) -> None:
    """Print header, entries and frames of a decoded file."""
    print("=" * 70)
    print(f"{os.path.basename(gaf_path)}: version 0x{gaf.version_id:08X}, {len(gaf)} entries")
    print("=" * 70)

    for i, entry in enumerate(gaf, 1):
        print(f"  [{i}/{len(gaf)}] {entry.name} ({entry.frame_count} frames)")
        for number, frame in enumerate(entry.frames, 1):
            if frame.is_composite:
                kind = f"multi x{len(frame.layers)}"
            else:
                kind = f"compression {frame.compression}"
            print(
                f"      #{number:<3} {frame.width}x{frame.height} "
                f"offset ({frame.x_offset}, {frame.y_offset}) {kind}"
            )

    for anomaly in gaf.anomalies:
        print(f"  [WARN] {anomaly}")


def extract_gaf_file(
    gaf_path: str,
    output_dir: str = None,
    palette: Optional[Palette] = None,
    entry_name: str = None,
    image_format: str = 'webp',
    scale: Union[int, float] = 1,
) -> List[str]:
    """
    Decode a GAF file and render its entries.

    Args:
        gaf_path: Path to the .gaf file
        output_dir: Directory for the images (default: Config.OUTPUT_DIR)
        palette: Palette for palette-index layers (default: grayscale)
        entry_name: Only render the entry with this name
        image_format: 'webp' (one animation per entry) or 'png' (one file per frame)
        scale: Optional scale factor

    Returns:
        List of written image paths

    Raises:
        GafError: If the file cannot be decoded
        KeyError: If entry_name does not exist in the file
        ValueError: If image_format is not supported
    """
    if image_format not in Config.IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format: {image_format}")

    if output_dir is None:
        output_dir = Config.OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)

    gaf = GafDecoder.decode_file(gaf_path)
    entries = [gaf.get_entry(entry_name)] if entry_name else gaf.entries
    base = sanitize_filename(os.path.splitext(os.path.basename(gaf_path))[0])

    outputs: List[str] = []
    for entry in tqdm(entries, desc=os.path.basename(gaf_path), unit="entry"):
        if not entry.frames:
            tqdm.write(f"  [SKIP] {entry.name}: no frames")
            continue

        safe_name = f"{base}_{sanitize_filename(entry.name)}"
        if image_format == 'webp':
            out_path = os.path.join(output_dir, f"{safe_name}.webp")
            entry.save_to_webp(out_path, palette=palette, scale=scale)
            outputs.append(out_path)
        else:
            outputs.extend(entry.save_frames(output_dir, safe_name, palette=palette, scale=scale))

    for anomaly in gaf.anomalies:
        tqdm.write(f"  [WARN] {anomaly}")

    return outputs


def cmd_info(args: argparse.Namespace) -> int:
    failures = 0
    for gaf_path in args.files:
        try:
            gaf = GafDecoder.decode_file(gaf_path)
        except (GafError, OSError) as e:
            print(f"[ERROR] Decode failed ({gaf_path}): {e}")
            failures += 1
            continue

        print_summary(gaf, gaf_path)

        if args.csv:
            print("\n" + "-" * 70)
            df = DataProcessor.process_frames(gaf)
            base = sanitize_filename(os.path.splitext(os.path.basename(gaf_path))[0])
            DataExporter.export_to_csv(df, f"{base}_frames.csv", output_dir=args.output)

    return 1 if failures else 0


def cmd_extract(args: argparse.Namespace) -> int:
    palette = None
    if args.palette:
        try:
            palette = load_palette(args.palette)
        except (OSError, ValueError) as e:
            print(f"[ERROR] Cannot load palette {args.palette}: {e}")
            return 1

    failures = 0
    total = 0
    for i, gaf_path in enumerate(args.files, 1):
        print(f"  [{i}/{len(args.files)}] {gaf_path}")
        try:
            outputs = extract_gaf_file(
                gaf_path,
                output_dir=args.output,
                palette=palette,
                entry_name=args.entry,
                image_format=args.format,
                scale=args.scale,
            )
        except KeyError:
            print(f"  [ERROR] No entry named '{args.entry}' in {gaf_path}")
            failures += 1
            continue
        except (GafError, OSError) as e:
            print(f"  [ERROR] Decode failed: {e}")
            failures += 1
            continue

        total += len(outputs)
        print(f"  [OK] Wrote {len(outputs)} file(s)")

    print(f"\n[OK] Extracted {len(args.files) - failures}/{len(args.files)} files ({total} images)")
    return 1 if failures else 0


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gafkit",
        description="Inspect and extract GAF sprite containers.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_info = sub.add_parser("info", help="List entries and frames")
    p_info.add_argument("files", nargs="+", help="GAF file(s)")
    p_info.add_argument("--csv", action="store_true", help="Export the frame table to CSV")
    p_info.add_argument("-o", "--output", default=Config.OUTPUT_DIR, help="Output directory")
    p_info.set_defaults(func=cmd_info)

    p_extract = sub.add_parser("extract", help="Render entries to images")
    p_extract.add_argument("files", nargs="+", help="GAF file(s)")
    p_extract.add_argument("-o", "--output", default=Config.OUTPUT_DIR, help="Output directory")
    p_extract.add_argument("--palette", help="Palette file (1024-byte RGBX or 768-byte RGB)")
    p_extract.add_argument("--entry", help="Only extract the entry with this name")
    p_extract.add_argument("--format", choices=Config.IMAGE_FORMATS, default="webp")
    p_extract.add_argument("--scale", type=float, default=1, help="Scale factor")
    p_extract.set_defaults(func=cmd_extract)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug or Config.DEBUG_MODE:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
