"""
Lap Table Generator
Draws a track's navigation field over its rendered tile map and saves a PNG.

Usage:
    python run.py tracks/race.tmx tracks/race-field.npz
    python run.py tracks/race.tmx tracks/race-field.npz --output race-table.png
    python run.py tracks/race.tmx tracks/race-field.npz --config configs/overlay.yaml --show
"""

import argparse
import sys
from pathlib import Path

from rendering.pipeline import generate_table
from utils.config import load_config
from utils.errors import TrackEditorError


def default_output_path(tmx_path):
    """<tmx stem>-table.png next to the tmx file."""
    tmx_path = Path(tmx_path)
    return tmx_path.with_name(f"{tmx_path.stem}-table.png")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="lap-table",
        description="Overlay a track's lap position table on its rendered tile map"
    )

    parser.add_argument("tmxfile", help="Path to the track .tmx file")
    parser.add_argument("fieldfile", help="Path to the navigation field .npz file")

    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Output PNG path (default: <tmxfile stem>-table.png)")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to an overlay YAML config")
    parser.add_argument("--show", action="store_true",
                        help="Open a preview window once the image is saved")

    return parser.parse_args(argv)


def main(argv=None):
    """Generate the lap table image."""
    args = parse_args(argv)
    output_path = Path(args.output) if args.output else default_output_path(args.tmxfile)

    try:
        config = load_config(args.config)
    except TrackEditorError as e:
        print(f"✗ {e}")
        sys.exit(1)

    print("Lap Table Generator")
    print(f"Map: {args.tmxfile}")
    print(f"Field: {args.fieldfile}")
    print(f"Output: {output_path}")
    print(f"Blend factor: {config.blend_factor}")
    print(f"Clamp channels: {'ON' if config.clamp_channels else 'OFF'}")
    print("-" * 40)

    try:
        buffer = generate_table(args.tmxfile, args.fieldfile, output_path, config)
    except TrackEditorError as e:
        print(f"✗ {e}")
        sys.exit(1)

    print(f"✓ Saved lap table to: {output_path}")

    if args.show:
        from tools.preview_table import show_preview
        show_preview(buffer.to_top_down(), title=str(output_path))

    return 0


if __name__ == "__main__":
    main()
