import os
import logging
from pathlib import Path
from typing import Iterator, List

from .. import config
from ..exceptions import ConfigurationError


class ImageScanner:
    """Finds the image files of a project directory."""

    def __init__(self, extensions=None):
        self.extensions = {e.lower() for e in (extensions or config.IMAGE_EXTS)}

    def scan(self, root: Path) -> List[Path]:
        if not root.is_dir():
            raise ConfigurationError(f"Can't open project directory {root}")

        images = [p for p in self._iter_files(root) if self.is_image(p)]
        logging.info(f"Found {len(images)} images in {root}")
        return images

    def is_image(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
