from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from contextor.config import (
    OVERSIZED_TEMPLATE,
    TRUNCATED_MARKER,
    TRUNCATION_LIMIT,
    VCS_DIR_NAME,
    FileRecord,
)
from contextor.ignore_rules import IgnoreRules
from contextor.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator

BYTES_PER_MB = 1_000_000


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def is_regular_file(path: Path) -> bool:
    """Check if a path resolves to a regular file, following symlinks.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise (including broken links
            and entries whose metadata cannot be read).
    """
    try:
        st = path.stat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode)


def _iter_walk(root: Path, rules: IgnoreRules) -> Iterator[Path]:
    entries: list[os.DirEntry[str]]
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("directory_unreadable", path=str(root), error=str(e))
        return

    for entry in entries:
        if entry.name == VCS_DIR_NAME:
            continue
        path = root / entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if rules.is_ignored(path, is_dir=is_dir):
            continue
        if is_dir:
            yield from _iter_walk(path, rules.descend(path))
        elif is_regular_file(path):
            yield path
        else:
            logger.debug("entry_skipped", path=str(path))


def resolve_root(root: str | Path) -> Path | None:
    """Resolve `root` to a canonical absolute directory, or None if it is not one."""
    try:
        resolved = Path(root).resolve()
    except (OSError, RuntimeError) as e:
        logger.warning("root_unresolvable", root=str(root), error=str(e))
        return None
    if not resolved.is_dir():
        logger.warning("root_not_a_directory", root=str(resolved))
        return None
    return resolved


def walk_files(root: str | Path) -> list[Path]:
    """Collect every regular file under `root` that is not ignored.

    The root is resolved first so that every returned path is under it. Ignore
    files (`.gitignore`, `.ignore`) found in the root, its parents and any walked
    directory are honored; `.git` directories are always skipped; hidden entries
    are kept. Symlinked directories are not descended.

    Args:
        root (str | Path): the directory to walk

    Returns:
        list[Path]: absolute file paths in walk order; empty when `root` is not a directory
    """
    resolved = resolve_root(root)
    if resolved is None:
        return []
    return list(_iter_walk(resolved, IgnoreRules.for_root(resolved)))


def is_binary(data: bytes) -> bool:
    """Classify raw bytes as binary when they contain at least one NUL byte."""
    return b"\x00" in data


def truncate_text(text: str, max_bytes: int) -> str:
    """Cut `text` to at most `max_bytes` UTF-8 bytes and mark it as truncated.

    The cut never splits a code point: a trailing partial sequence is dropped.

    Args:
        text (str): the decoded file content
        max_bytes (int): the byte offset at which to cut

    Returns:
        str: `text` unchanged if it fits, otherwise the cut text followed by a
            newline and the truncation marker
    """
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    head = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return f"{head}\n{TRUNCATED_MARKER}"


def oversized_placeholder(size: int, limit: int) -> str:
    """Describe a file that exceeds the size limit, both values in MB with one decimal."""
    return OVERSIZED_TEMPLATE.format(size=size / BYTES_PER_MB, limit=limit / BYTES_PER_MB)


def read_file_record(
    root: Path,
    rel: str,
    max_file_size: int,
    truncate_at: int = TRUNCATION_LIMIT,
) -> FileRecord:
    """Read and classify one file into a FileRecord.

    Never raises for a bad file: oversized files get a placeholder, unreadable
    files are recorded as binary, and invalid UTF-8 is decoded with replacement
    characters.

    Args:
        root (Path): the resolved scan root
        rel (str): the file path relative to `root`, with POSIX separators
        max_file_size (int): files strictly larger than this many bytes are not read
        truncate_at (int): maximum size in bytes of the decoded text kept

    Returns:
        FileRecord: the record for the file
    """
    path = root / rel
    try:
        size = path.stat().st_size
        if size > max_file_size:
            return FileRecord(path=rel, content=oversized_placeholder(size, max_file_size))
        data = path.read_bytes()
    except OSError as e:
        logger.debug("file_unreadable", path=rel, error=str(e))
        return FileRecord(path=rel, content=None, is_binary=True)

    if is_binary(data):
        return FileRecord(path=rel, content=None, is_binary=True)

    text = data.decode("utf-8", errors="replace")
    return FileRecord(path=rel, content=truncate_text(text, truncate_at))
