"""
contextor — Turn a project folder into a single context document for an LLM.

Overview
--------
The document starts with an ASCII tree of the project structure, followed by
the content of every file, each block introduced by its relative path:

    ├── assets
    │   └── logo.png
    └── src
        ├── app.py
        └── main.py

    assets/logo.png:
    [Binary file]

    src/app.py:
    ...

`.gitignore`/`.ignore` rules are honored and `.git` is skipped. Files larger
than `--max-file-size` bytes are replaced by a size placeholder, binary files
by `[Binary file]`.

Usage
-----
    contextor path/to/project --output context.txt
    contextor . --max-file-size 250000 --preview
    contextor --config contextor.yaml --log-file scan.log
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from contextor import __version__
from contextor.exceptions import ConfigFileError, InvalidMaxFileSizeError, ScanFailedError
from contextor.logging import logger, setup_logging
from contextor.output_construction import preview, render
from contextor.scanner import start_scan, validate_max_file_size, wait_for_scan
from contextor.settings import Settings, load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

EXIT_OK = 0
EXIT_SCAN_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="contextor",
        description="Export a project folder as a tree plus file contents for LLM prompts.",
    )
    p.add_argument("root", nargs="?", default=None, help="Folder to scan (default: cwd).")
    p.add_argument(
        "--max-file-size",
        type=str,
        default=None,
        help="Max file size to scan, in bytes (default: 1000000).",
    )
    p.add_argument("--output", type=str, default=None, help="Output file (default: stdout).")
    p.add_argument(
        "--preview",
        action="store_true",
        default=None,
        help="Print the first lines of the document to stderr.",
    )
    p.add_argument("--config", type=str, default=None, help="YAML settings file.")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("--log-level", type=str, default=None, help="Minimum log level.")
    p.add_argument("--max-workers", type=int, default=None, help="Reader thread pool size.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into Settings.

    Raises:
        InvalidMaxFileSizeError: if `--max-file-size` is not a positive integer
        ConfigFileError: if `--config` points to an invalid YAML file
    """
    args = build_parser().parse_args(argv)
    overrides = {
        "root": args.root,
        "max_file_size": None if args.max_file_size is None else validate_max_file_size(args.max_file_size),
        "output": args.output,
        "preview": args.preview,
        "log_file": args.log_file,
        "log_level": args.log_level,
        "max_workers": args.max_workers,
    }
    config_file = Path(args.config) if args.config else None
    return load_settings(overrides, config_file=config_file)


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except InvalidMaxFileSizeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_USAGE
    except ConfigFileError as e:
        print(f"Error: {e.message} {e.path}: {e.reason}", file=sys.stderr)
        return EXIT_USAGE
    except ValidationError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(settings.log_file or None, level=settings.log_level)

    root = settings.root
    if not root.is_dir():
        print(f"Error: No folder selected ({root} is not a directory).", file=sys.stderr)
        return EXIT_USAGE

    future = start_scan(root, settings.max_file_size, max_workers=settings.max_workers)
    try:
        records = wait_for_scan(future, root)
    except ScanFailedError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_SCAN_FAILED

    document = render(records)
    if settings.output is not None:
        settings.output.write_text(document, encoding="utf-8")
        logger.info("document_written", output=str(settings.output), files=len(records))
    else:
        sys.stdout.write(document)

    if settings.preview:
        print(preview(document), file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
