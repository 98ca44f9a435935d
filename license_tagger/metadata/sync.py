import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from tqdm.asyncio import tqdm_asyncio

from .. import config
from ..models import FieldChange, FieldPolicy, TagPatch, TagRecord, WriteResult, WriteStatus
from .engine import MetadataEngine
from .reader import TagReader


def diff_record(record: TagRecord,
                patch: TagPatch,
                policies: Mapping[str, FieldPolicy] = config.FIELD_POLICIES,
                warn_on_new_value: bool = False) -> List[FieldChange]:
    """
    One FieldChange per field present in the patch.

    A change warns when its value differs from the stored one. A field that
    is absent from the file only warns if warn_on_new_value is set.
    """
    changes = []
    for name, new_value in patch.items():
        policy = policies[name]
        old_value = record.value_of(name)
        differs = old_value != new_value
        conflicting = old_value is not None or warn_on_new_value
        changes.append(FieldChange(
            source_file=record.source_file,
            field=name,
            old=old_value,
            new=new_value,
            warn=policy.warnable and differs and conflicting,
        ))
    return changes


class TagSynchronizer:
    """
    Applies a TagPatch to a batch of files.

    Current tags are always re-read first so warnings reflect what is on disk.
    Only fields present in the patch are written, each with its own engine
    call; warn-only fields are reported but never written. Write failures
    are logged and the batch carries on.
    """

    def __init__(self,
                 engine: MetadataEngine,
                 reader: Optional[TagReader] = None,
                 policies: Mapping[str, FieldPolicy] = config.FIELD_POLICIES,
                 warn_on_new_value: bool = False,
                 show_progress: bool = False):
        self.engine = engine
        self.reader = reader or TagReader(engine)
        self.policies = policies
        self.warn_on_new_value = warn_on_new_value
        self.show_progress = show_progress

    async def write_tags(self, files: Sequence[Path], patch: TagPatch) -> List[WriteResult]:
        if patch.is_empty() or not files:
            logging.info("No tags to write.")
            return []

        records = await self.reader.read_tags(files)

        batches = await tqdm_asyncio.gather(
            *(self._sync_file(rec, patch) for rec in records),
            desc="Writing tags",
            disable=not self.show_progress,
        )
        results = [r for batch in batches for r in batch]

        counts: Dict[WriteStatus, int] = {s: 0 for s in WriteStatus}
        for r in results:
            counts[r.status] += 1
        logging.info(
            f"Tag writes: {counts[WriteStatus.WRITTEN]} written, "
            f"{counts[WriteStatus.SKIPPED]} skipped, {counts[WriteStatus.FAILED]} failed."
        )
        return results

    async def _sync_file(self, record: TagRecord, patch: TagPatch) -> List[WriteResult]:
        if record.error is not None:
            logging.error(f"Not writing {record.file_name}: {record.error}")
            return [WriteResult(record.source_file, name, WriteStatus.FAILED, record.error)
                    if self.policies[name].writable
                    else WriteResult(record.source_file, name, WriteStatus.SKIPPED)
                    for name, _ in patch.items()]

        results = []
        for change in diff_record(record, patch, self.policies, self.warn_on_new_value):
            if change.warn:
                logging.warning(
                    f"Overwriting {record.file_name} existing {change.field}: "
                    f"{change.old} with {change.new}"
                )
            results.append(await self._apply(change))
        return results

    async def _apply(self, change: FieldChange) -> WriteResult:
        policy = self.policies[change.field]
        if not policy.writable:
            logging.info(f"{change.field} is warn-only; not written to {change.source_file}")
            return WriteResult(change.source_file, change.field, WriteStatus.SKIPPED)

        try:
            await asyncio.to_thread(
                self.engine.write,
                Path(change.source_file),
                {policy.tag: change.new},
                overwrite_original=True,
            )
        except Exception as e:
            logging.error(f"Failed to write {change.field} to {change.source_file}: {e}")
            return WriteResult(change.source_file, change.field, WriteStatus.FAILED, str(e))

        logging.debug(f"Wrote {policy.tag}={change.new!r} to {change.source_file}")
        return WriteResult(change.source_file, change.field, WriteStatus.WRITTEN)
