"""Parallel project scanning.

`scan` walks the tree sequentially, then reads and classifies every file on a
thread pool. `start_scan`/`wait_for_scan` run a whole scan on a dedicated
thread and hand the records back through a single `Future`.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from contextor.config import TRUNCATION_LIMIT, FileRecord
from contextor.exceptions import InvalidMaxFileSizeError, ScanFailedError
from contextor.file_manipulation import read_file_record, relpath, resolve_root, walk_files
from contextor.logging import logger


def validate_max_file_size(value: object) -> int:
    """Coerce a user-supplied size limit into a positive byte count.

    Args:
        value (object): an int, or a string of decimal digits

    Raises:
        InvalidMaxFileSizeError: if the value is not numeric or not strictly positive

    Returns:
        int: the validated limit in bytes
    """
    if isinstance(value, bool):
        raise InvalidMaxFileSizeError(value=value)
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidMaxFileSizeError(value=value) from None
    if size <= 0:
        raise InvalidMaxFileSizeError(value=value)
    return size


def scan(
    root: str | Path,
    max_file_size: int,
    *,
    max_workers: int | None = None,
    truncate_at: int = TRUNCATION_LIMIT,
) -> list[FileRecord]:
    """Scan a project directory into one FileRecord per discovered file.

    Args:
        root (str | Path): the project directory to scan
        max_file_size (int): files larger than this many bytes get a size placeholder
        max_workers (int | None): size of the reader pool; None lets the executor decide
        truncate_at (int): maximum size in bytes of the text kept per file

    Raises:
        InvalidMaxFileSizeError: if `max_file_size` is not strictly positive

    Returns:
        list[FileRecord]: records sorted by relative path; empty for a missing root
    """
    limit = validate_max_file_size(max_file_size)
    resolved = resolve_root(root)
    if resolved is None:
        return []
    files = walk_files(resolved)
    rels = [relpath(f, resolved) for f in files]
    logger.info("scan_started", root=str(resolved), files=len(rels), max_file_size=limit)
    if not rels:
        return []

    records: list[FileRecord] = []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="contextor-reader") as executor:
        futures = {
            executor.submit(read_file_record, resolved, rel, limit, truncate_at): rel for rel in rels
        }
        for future in as_completed(futures):
            rel = futures[future]
            try:
                records.append(future.result())
            except Exception as e:  # noqa: BLE001
                logger.warning("file_record_failed", path=rel, error=str(e))
                records.append(FileRecord(path=rel, content=None, is_binary=True))

    records.sort(key=lambda r: r.path)
    logger.info(
        "scan_finished",
        root=str(resolved),
        files=len(records),
        binary=sum(1 for r in records if r.is_binary),
    )
    return records


def start_scan(
    root: str | Path,
    max_file_size: int,
    *,
    max_workers: int | None = None,
) -> Future[list[FileRecord]]:
    """Run `scan` on a dedicated background thread.

    The returned future is resolved exactly once: with the records, or with the
    exception that stopped the scan.

    Args:
        root (str | Path): the project directory to scan
        max_file_size (int): files larger than this many bytes get a size placeholder
        max_workers (int | None): size of the reader pool

    Returns:
        Future[list[FileRecord]]: the pending result of the scan
    """
    future: Future[list[FileRecord]] = Future()
    future.set_running_or_notify_cancel()

    def produce() -> None:
        try:
            records = scan(root, max_file_size, max_workers=max_workers)
        except Exception as e:  # noqa: BLE001
            future.set_exception(e)
        except BaseException as e:
            # SystemExit/KeyboardInterrupt in the producer still fail the scan.
            future.set_exception(ScanFailedError(root=Path(root), reason=repr(e)))
            raise
        else:
            future.set_result(records)

    threading.Thread(target=produce, name="contextor-scan", daemon=True).start()
    return future


def wait_for_scan(
    future: Future[list[FileRecord]],
    root: str | Path,
    timeout: float | None = None,
) -> list[FileRecord]:
    """Block until a background scan delivers its records.

    Args:
        future (Future[list[FileRecord]]): the future returned by `start_scan`
        root (str | Path): the scanned directory, for error reporting
        timeout (float | None): seconds to wait; None waits for completion

    Raises:
        ScanFailedError: if the scan terminated without producing a result

    Returns:
        list[FileRecord]: the scanned records
    """
    try:
        return future.result(timeout=timeout)
    except ScanFailedError as e:
        logger.error("scan_failed", root=str(root), error=e.reason)
        raise
    except Exception as e:
        logger.error("scan_failed", root=str(root), error=repr(e))
        raise ScanFailedError(root=Path(root), reason=repr(e)) from e
