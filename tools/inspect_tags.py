#!/usr/bin/env python3
"""
Dump every tag exiftool reports for an image, to find where licensing info lives.

Usage:
  python tools/inspect_tags.py <image_file>

Example:
  python tools/inspect_tags.py "LinkedFiles/Pictures/map.png"
"""

import sys
from pathlib import Path

from license_tagger import config
from license_tagger.exceptions import LicenseTaggerError
from license_tagger.metadata.engine import ExifToolEngine, normalize_raw_tags


def inspect_file(image_path):
    """Print licensing-related tags first, then everything else."""
    path = Path(image_path)
    if not path.exists():
        print(f"Error: File not found: {image_path}")
        sys.exit(1)

    print(f"Inspecting: {path.name}\n")

    try:
        with ExifToolEngine() as engine:
            print(f"ExifTool v{engine.version()}\n")
            tags = normalize_raw_tags(engine.read_all(path, config.READ_FILTER))
    except LicenseTaggerError as e:
        print(f"Error reading tags: {e}")
        sys.exit(1)

    print("=" * 70)
    print("LICENSING-RELATED TAGS (if present)")
    print("=" * 70)
    keywords = {'creator', 'license', 'rights', 'author', 'copyright', 'artist', 'owner', 'usage'}
    found_any = False
    for name, val in tags.items():
        if any(kw in name.lower() for kw in keywords):
            print(f"  {name}: {val}")
            found_any = True
    if not found_any:
        print("  (no licensing metadata found)")

    print("\n" + "=" * 70)
    print("ALL TAGS")
    print("=" * 70)
    for name in sorted(tags):
        val_str = str(tags[name])
        # Truncate long values for readability
        if len(val_str) > 60:
            val_str = val_str[:57] + "..."
        print(f"  {name}: {val_str}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python tools/inspect_tags.py <image_file>")
        sys.exit(1)
    inspect_file(sys.argv[1])
