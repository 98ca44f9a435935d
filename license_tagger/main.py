import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from colorama import just_fix_windows_console

from . import config
from .core import LicenseTaggerApp
from .exceptions import ConfigurationError, LicenseTaggerError, OperationDeclined
from .metadata.engine import ExifToolEngine
from .models import TagPatch
from .patch import load_patch, parse_patch
from .scanning.filesystem import ImageScanner


def setup_logging(verbose: bool):
    """Sets up console logging on stderr; stdout is kept for the summary."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exiftool").setLevel(logging.WARNING)


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        description="Read/write licensing metadata for images (jpg's or png's). "
                    "If no tags are given, metadata is only read."
    )

    p.add_argument("-f", "--files", type=Path, nargs="+", default=None, help="Paths to image files")
    p.add_argument("-p", "--projectPath", "--project-path", dest="project_path", type=Path,
                   default=config.DEFAULT_PROJECT_PATH,
                   help="Project directory to scan for images (default: current directory)")

    p.add_argument("-t", "--tags", default=None, help="JSON object of metadata tags to write")
    p.add_argument("-j", "--json", dest="json_file", type=Path, default=None,
                   help="JSON file containing metadata tags to write")

    p.add_argument("-y", "--yes", action="store_true", help="Write tags without asking for confirmation")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging and keep all tags in the log")
    p.add_argument("--strict", action="store_true", help="Abort if any file can't be read")
    p.add_argument("--warn-new", action="store_true",
                   help="Also warn when a tag is added to a file that doesn't have it yet")
    p.add_argument("--keyed-log", action="store_true", help="Write the log as an object keyed by source file")
    p.add_argument("--log-file", type=Path, default=Path(config.LOG_FILENAME), help="Output path for the JSON log")
    p.add_argument("--exiftool", default=None, help="Path to the exiftool executable")

    return p.parse_args(argv)


def validate_args(args):
    """Fails fast on input problems, before exiftool is started."""
    if args.tags is not None and args.json_file is not None:
        raise ConfigurationError("--tags and --json can't be used together")
    if args.files and args.project_path is not None:
        raise ConfigurationError("--files and --projectPath can't be used together")

    if args.files:
        for f in args.files:
            if not f.exists():
                raise ConfigurationError(f"{f} does not exist")

    if args.project_path is not None and not args.project_path.is_dir():
        raise ConfigurationError(f"Can't open project directory {args.project_path}. Exiting")

    if args.json_file is not None and not args.json_file.is_file():
        raise ConfigurationError(f"Tag file {args.json_file} does not exist")


def load_args_patch(args) -> Optional[TagPatch]:
    if args.tags is not None:
        return parse_patch(args.tags)
    if args.json_file is not None:
        return load_patch(args.json_file)
    return None


def resolve_files(args) -> List[Path]:
    if args.files:
        return list(args.files)

    project_path = args.project_path if args.project_path is not None else Path.cwd()
    logging.info(f"Searching for images in project {project_path}")
    return ImageScanner().scan(project_path)


def confirm_patch(patch: TagPatch, file_count: int) -> bool:
    print(f"Tags to write:\n{json.dumps(patch.to_dict(), indent=2)}")
    try:
        answer = input(f"Are you sure you want to modify the metadata for {file_count} image(s)? (y/n) ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    just_fix_windows_console()

    logging.debug(f"Parameters: {vars(args)}")

    try:
        validate_args(args)
        patch = load_args_patch(args)
        files = resolve_files(args)
    except LicenseTaggerError as e:
        logging.error(str(e))
        sys.exit(1)

    if not files:
        logging.warning("No image files found.")

    if patch is not None and patch.is_empty():
        logging.warning("Tag JSON has no tags; nothing will be written.")

    engine = ExifToolEngine(executable=args.exiftool)
    app = LicenseTaggerApp(
        engine,
        keep_raw=args.verbose,
        isolate_read_failures=not args.strict,
        warn_on_new_value=args.warn_new,
    )

    confirm = None if args.yes else (lambda p: confirm_patch(p, len(files)))

    try:
        app.run(files, patch=patch, confirm=confirm, log_path=args.log_file, keyed_log=args.keyed_log)
    except OperationDeclined as e:
        logging.warning(str(e))
        sys.exit(1)
    except LicenseTaggerError as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
