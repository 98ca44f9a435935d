import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO, Union

from colorama import Fore, Style

from . import config
from .exceptions import ReportError
from .models import TagRecord


class SummaryReporter:
    """
    Renders the licensing summary to the console and to the JSON log.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    @property
    def out(self) -> TextIO:
        # Resolved per call so a redirected sys.stdout is honored
        return self.stream or sys.stdout

    def print_summary(self, records: Sequence[TagRecord]):
        print(f"{Fore.BLUE}\n------------------------", file=self.out)
        print(f"Licensing Info Summary:{Style.RESET_ALL}", file=self.out)

        for rec in records:
            color = Fore.GREEN if self.is_licensed(rec) else Fore.RED
            print(f"{color}{self.format_record(rec)}{Style.RESET_ALL}", file=self.out)

    @staticmethod
    def is_licensed(record: TagRecord) -> bool:
        return record.error is None and bool(record.license or record.copyright)

    @staticmethod
    def format_record(record: TagRecord) -> str:
        lines = [f"{record.file_type.value} file {record.file_name} has"]
        if record.error is not None:
            lines.append(f"\tError: {record.error}")
        else:
            for name, label in config.FIELD_LABELS.items():
                lines.append(f"\t{label}: {record.value_of(name)}")
        return "\n".join(lines) + "\n"

    def write_log(self, records: Sequence[TagRecord], path: Path, keyed: bool = False):
        """
        Writes the summary as JSON. Absent tags are written as null.
        Any existing file is replaced. Raises ReportError if it can't be written.
        """
        payload: Union[List[Dict[str, Any]], Dict[str, Dict[str, Any]]]
        if keyed:
            payload = {rec.source_file: rec.to_log_dict() for rec in records}
            indent = config.KEYED_LOG_INDENT
        else:
            payload = [rec.to_log_dict() for rec in records]
            indent = config.LOG_INDENT

        path = Path(path)
        try:
            path.write_text(json.dumps(payload, indent=indent, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            raise ReportError(f"Can't write metadata log {path}: {e.strerror or e}") from e
        logging.info(f"metadata log written to {path}")

    @staticmethod
    def load_log(path: Path) -> List[Dict[str, Any]]:
        """Reads a log back; keyed logs are flattened to their records."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return list(data.values())
        return data
