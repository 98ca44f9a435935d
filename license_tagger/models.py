import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


class FileType(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"  # reserved, scans only ever produce images


@dataclass(frozen=True)
class FieldPolicy:
    """What the synchronizer may do with one recognized field."""
    tag: str                # engine tag name
    warnable: bool = True
    writable: bool = True


@dataclass(frozen=True)
class TagRecord:
    """
    Licensing tags of a single file, as read from the engine.
    None means the tag is absent from the file, not empty.
    """
    file_name: str
    file_type: FileType
    source_file: str

    creator: Optional[str] = None
    license: Optional[str] = None
    rights: Optional[str] = None
    author: Optional[str] = None
    copyright: Optional[str] = None

    # Full normalized tag set, only kept for verbose output
    raw_tags: Optional[Dict[str, Any]] = None
    # Set when the file could not be read
    error: Optional[str] = None

    @classmethod
    def from_source(cls, source_file: str, **values) -> "TagRecord":
        return cls(
            file_name=os.path.basename(source_file),
            file_type=FileType.IMAGE,
            source_file=source_file,
            **values,
        )

    def value_of(self, name: str) -> Optional[str]:
        return getattr(self, name)

    def to_log_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "fileName": self.file_name,
            "fileType": self.file_type.value,
            "sourceFile": self.source_file,
            "creator": self.creator,
            "license": self.license,
            "rights": self.rights,
            "author": self.author,
            "copyright": self.copyright,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.raw_tags is not None:
            data["rawTags"] = self.raw_tags
        return data


@dataclass(frozen=True)
class TagPatch:
    """
    Sparse set of new tag values. A field left at None is not touched;
    any string, including "", is written.
    """
    creator: Optional[str] = None
    license: Optional[str] = None
    rights: Optional[str] = None
    author: Optional[str] = None
    copyright: Optional[str] = None

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def items(self) -> Iterator[Tuple[str, str]]:
        for name in self.field_names():
            value = getattr(self, name)
            if value is not None:
                yield name, value

    def is_empty(self) -> bool:
        return not any(True for _ in self.items())

    def to_dict(self) -> Dict[str, str]:
        return dict(self.items())


@dataclass(frozen=True)
class FieldChange:
    source_file: str
    field: str
    old: Optional[str]
    new: str
    warn: bool


class WriteStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"   # warn-only field
    FAILED = "failed"


@dataclass(frozen=True)
class WriteResult:
    source_file: str
    field: str
    status: WriteStatus
    error: Optional[str] = None
