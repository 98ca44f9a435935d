import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from tqdm.asyncio import tqdm_asyncio

from .. import config
from ..exceptions import TagReadError
from ..models import TagRecord
from .engine import MetadataEngine, normalize_raw_tags, tag_text


class TagReader:
    """
    Reads licensing tags for a batch of files.

    Every file gets its own engine read and all reads are issued at once,
    then joined. With isolate_failures=False the first failing file aborts
    the whole batch; otherwise the failure is recorded on that file's
    TagRecord and the rest of the batch continues.
    """

    def __init__(self,
                 engine: MetadataEngine,
                 keep_raw: bool = False,
                 isolate_failures: bool = True,
                 show_progress: bool = False):
        self.engine = engine
        self.keep_raw = keep_raw
        self.isolate_failures = isolate_failures
        self.show_progress = show_progress

    async def read_tags(self, files: Sequence[Path]) -> List[TagRecord]:
        if not files:
            return []

        logging.debug(f"Reading tags from {len(files)} files...")
        return await tqdm_asyncio.gather(
            *(self._read_guarded(Path(f)) for f in files),
            desc="Reading tags",
            disable=not self.show_progress,
        )

    async def read_one(self, path: Path) -> TagRecord:
        """Reads a single file. Always raises on failure."""
        # Blocking pyexiftool call on the default thread pool; the engine lock
        # still lets only one command reach exiftool at a time.
        raw = await asyncio.to_thread(self.engine.read_all, Path(path), config.READ_FILTER)
        return self._to_record(Path(path), normalize_raw_tags(raw))

    async def _read_guarded(self, path: Path) -> TagRecord:
        try:
            return await self.read_one(path)
        except TagReadError as e:
            if not self.isolate_failures:
                raise
            logging.error(f"Failed to read tags from {path}: {e.message}")
            return TagRecord.from_source(str(path), error=e.message)

    def _to_record(self, path: Path, tags: Dict[str, Any]) -> TagRecord:
        if tags.get("Error"):
            raise TagReadError(path, str(tags["Error"]))
        if tags.get("Warning"):
            logging.debug(f"exiftool warning for {path}: {tags['Warning']}")

        source = tags.get("SourceFile") or str(path)
        values = {name: tag_text(tags.get(policy.tag))
                  for name, policy in config.FIELD_POLICIES.items()}

        return TagRecord.from_source(
            str(source),
            raw_tags=tags if self.keep_raw else None,
            **values,
        )
