import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from . import config
from .exceptions import OperationDeclined
from .metadata.engine import MetadataEngine
from .metadata.reader import TagReader
from .metadata.sync import TagSynchronizer
from .models import TagPatch, TagRecord
from .reporting import SummaryReporter


class LicenseTaggerApp:
    def __init__(self,
                 engine: MetadataEngine,
                 keep_raw: bool = False,
                 isolate_read_failures: bool = True,
                 warn_on_new_value: bool = False,
                 show_progress: bool = True,
                 reporter: Optional[SummaryReporter] = None):
        self.engine = engine
        self.reader = TagReader(
            engine,
            keep_raw=keep_raw,
            isolate_failures=isolate_read_failures,
            show_progress=show_progress,
        )
        self.synchronizer = TagSynchronizer(
            engine,
            reader=self.reader,
            warn_on_new_value=warn_on_new_value,
            show_progress=show_progress,
        )
        self.reporter = reporter or SummaryReporter()

    def run(self,
            files: Sequence[Path],
            patch: Optional[TagPatch] = None,
            confirm: Optional[Callable[[TagPatch], bool]] = None,
            log_path: Path = Path(config.LOG_FILENAME),
            keyed_log: bool = False) -> List[TagRecord]:
        """
        Executes one read (and optionally write) pass.
        1. Read current tags
        2. Confirm and write the patch (if any)
        3. Re-read, print the summary and write the JSON log

        The engine is opened for the whole run and closed afterwards.
        confirm() is called between the read and write phases, outside the
        event loop. If it rejects the patch the log holds the tags as they were
        before any write, and OperationDeclined is raised.
        """
        files = list(files)
        log_path = Path(log_path)

        with self.engine:
            records = asyncio.run(self.reader.read_tags(files))

            if patch is not None and not patch.is_empty():
                if confirm is not None and not confirm(patch):
                    self.reporter.write_log(records, log_path, keyed=keyed_log)
                    raise OperationDeclined("Tag update cancelled by user.")

                logging.info(f"Writing tag info: {patch.to_dict()}")
                records = asyncio.run(self._write_and_reread(files, patch))

        self.reporter.print_summary(records)
        self.reporter.write_log(records, log_path, keyed=keyed_log)
        logging.info("All done processing")
        return records

    async def _write_and_reread(self, files: List[Path], patch: TagPatch) -> List[TagRecord]:
        await self.synchronizer.write_tags(files, patch)
        return await self.reader.read_tags(files)
