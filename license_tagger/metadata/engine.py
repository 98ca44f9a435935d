"""
Metadata engine connection management.
"""
import logging
import threading
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import exiftool
from exiftool.exceptions import ExifToolException

from ..exceptions import EngineError, TagReadError, TagWriteError


class MetadataEngine:
    """
    Process-wide handle to a metadata reader/writer.

    Opened once per run and closed at the end (use as a context manager).
    Subclasses implement the actual read/write calls.
    """

    def start(self):
        pass

    def close(self):
        pass

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def version(self) -> str:
        raise NotImplementedError

    def read_all(self, path: Path, filter_spec: Sequence[str]) -> Dict[str, Any]:
        """Returns the raw tag dict for a single file."""
        raise NotImplementedError

    def write(self, path: Path, fields: Mapping[str, str], overwrite_original: bool = True):
        raise NotImplementedError


class ExifToolEngine(MetadataEngine):
    """
    Wraps one long-lived 'exiftool -stay_open' process via pyexiftool.
    ExifTool must be installed and on the system PATH (or passed explicitly).
    """

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable
        self._helper: Optional[exiftool.ExifToolHelper] = None
        # The stay_open process answers one command at a time
        self._lock = threading.Lock()

    def start(self):
        if self._helper is not None:
            return

        kwargs: Dict[str, Any] = {"common_args": [], "auto_start": False}
        if self.executable:
            kwargs["executable"] = self.executable

        try:
            helper = exiftool.ExifToolHelper(**kwargs)
            helper.run()
        except (OSError, ExifToolException) as e:
            raise EngineError(f"Could not start exiftool: {e}") from e

        self._helper = helper
        logging.debug(f"exiftool started (v{helper.version})")

    def close(self):
        if self._helper is None:
            return
        try:
            if self._helper.running:
                self._helper.terminate()
        finally:
            self._helper = None

    @property
    def helper(self) -> exiftool.ExifToolHelper:
        if self._helper is None:
            raise EngineError("exiftool is not running")
        return self._helper

    def version(self) -> str:
        with self._lock:
            return str(self.helper.version)

    def read_all(self, path: Path, filter_spec: Sequence[str]) -> Dict[str, Any]:
        with self._lock:
            try:
                results = self.helper.get_tags(str(path), tags=list(filter_spec))
            except ExifToolException as e:
                raise TagReadError(path, _engine_message(e)) from e

        if not results:
            raise TagReadError(path, "exiftool returned no data")
        return results[0]

    def write(self, path: Path, fields: Mapping[str, str], overwrite_original: bool = True):
        params = ["-overwrite_original"] if overwrite_original else []
        with self._lock:
            try:
                self.helper.set_tags(str(path), tags=dict(fields), params=params)
            except ExifToolException as e:
                raise TagWriteError(path, _engine_message(e)) from e


def _engine_message(err: ExifToolException) -> str:
    # Execute errors carry exiftool's stderr; other pyexiftool errors only a message
    msg = (getattr(err, "stderr", None) or "").strip()
    return msg or str(err)


def normalize_raw_tags(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flattens an engine record into plain JSON-compatible values.

    Dates and times become ISO strings, bytes are decoded, exceptions become
    their message. Containers are normalized recursively.
    """
    return {str(k): _normalize_value(v) for k, v in raw.items()}


def _normalize_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, Mapping):
        return normalize_raw_tags(value)
    if isinstance(value, (list, tuple, set)):
        return [_normalize_value(v) for v in value]
    return str(value)


def tag_text(value: Any) -> Optional[str]:
    """
    Projects a normalized tag value onto a text field.
    Lists (e.g. an XMP bag with several creators) are joined with ', '.
    """
    if value is None:
        return None
    if isinstance(value, list):
        parts = [tag_text(v) for v in value]
        return ", ".join(p for p in parts if p is not None)
    if isinstance(value, dict):
        return ", ".join(f"{k}: {v}" for k, v in value.items())
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)
