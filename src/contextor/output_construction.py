from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contextor.config import (
    BINARY_PLACEHOLDER,
    BRANCH,
    EMPTY_PLACEHOLDER,
    LAST_BRANCH,
    PIPE_EXTENSION,
    PREVIEW_LINES,
    SPACE_EXTENSION,
    FileRecord,
    TreeLine,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


@dataclass
class TreeNode:
    """One directory level: sub-directories by name and the files directly inside."""

    children: dict[str, TreeNode] = field(default_factory=dict)
    files: set[str] = field(default_factory=set)

    def insert(self, parts: Sequence[str]) -> None:
        """Insert a path given as segments, the last one being the file name."""
        if not parts:
            return
        if len(parts) == 1:
            self.files.add(parts[0])
            return
        self.children.setdefault(parts[0], TreeNode()).insert(parts[1:])


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _render_node(
    name: str,
    full_path: str,
    node: TreeNode,
    prefix: str,
    *,
    is_last: bool,
    lines: list[TreeLine],
) -> None:
    lines.append(TreeLine(display=f"{prefix}{LAST_BRANCH if is_last else BRANCH}{name}", path=full_path))
    child_prefix = prefix + (SPACE_EXTENSION if is_last else PIPE_EXTENSION)
    _render_entries(full_path, node, child_prefix, lines)


def _render_entries(full_path: str, node: TreeNode, prefix: str, lines: list[TreeLine]) -> None:
    # Sub-directories first, then files; "last" spans both groups.
    dirs = sorted(node.children)
    files = sorted(node.files)
    total = len(dirs) + len(files)
    for idx, name in enumerate(dirs, start=1):
        _render_node(
            name,
            _join(full_path, name),
            node.children[name],
            prefix,
            is_last=idx == total,
            lines=lines,
        )
    for idx, name in enumerate(files, start=len(dirs) + 1):
        connector = LAST_BRANCH if idx == total else BRANCH
        lines.append(TreeLine(display=f"{prefix}{connector}{name}", path=_join(full_path, name)))


def build_tree(records: Iterable[FileRecord]) -> list[TreeLine]:
    """Render the directory structure of the scanned files as box-drawing lines.

    Files directly under the scan root come first, without indentation, then each
    top-level directory in lexicographic order. The synthetic root itself is never
    emitted. Inside a directory, sub-directories are listed before files, each
    group sorted, and only the final entry of the combined list uses `└── `.

    Args:
        records (Iterable[FileRecord]): the scanned files, in any order

    Returns:
        list[TreeLine]: the rendered rows paired with the relative path they denote;
            empty when there are no records
    """
    root = TreeNode()
    top_level: dict[str, TreeNode] = {}
    for rec in records:
        parts = rec.parts
        if len(parts) == 1:
            root.insert(parts)
        else:
            top_level.setdefault(parts[0], TreeNode()).insert(parts[1:])

    lines: list[TreeLine] = []
    if root.files:
        _render_entries("", root, "", lines)

    top_dirs = sorted(top_level)
    for idx, name in enumerate(top_dirs, start=1):
        _render_node(name, name, top_level[name], "", is_last=idx == len(top_dirs), lines=lines)
    return lines


def format_file_contents(records: Iterable[FileRecord]) -> dict[str, str]:
    """Render one `"<path>:\\n<body>"` block per file, keyed by relative path.

    The body is the binary placeholder for binary files, the text content when
    there is some, and the empty placeholder otherwise.
    """
    blocks: dict[str, str] = {}
    for rec in sorted(records, key=lambda r: r.path):
        if rec.is_binary:
            body = BINARY_PLACEHOLDER
        else:
            body = rec.content or EMPTY_PLACEHOLDER
        blocks[rec.path] = f"{rec.path}:\n{body}"
    return blocks


def format_project_summary(tree: Sequence[TreeLine], file_contents: Mapping[str, str]) -> str:
    """Assemble the final document: tree rows, a blank line, then the content blocks.

    Every tree row ends with a newline, and every content block (sorted by path)
    is followed by a blank line.

    Args:
        tree (Sequence[TreeLine]): the rows produced by `build_tree`
        file_contents (Mapping[str, str]): the blocks produced by `format_file_contents`

    Returns:
        str: the project context document
    """
    out = io.StringIO()
    for line in tree:
        out.write(line.display)
        out.write("\n")
    out.write("\n")
    for path in sorted(file_contents):
        out.write(file_contents[path])
        out.write("\n\n")
    return out.getvalue()


def render(records: Iterable[FileRecord]) -> str:
    """Render scanned records into the project context document."""
    recs = list(records)
    return format_project_summary(build_tree(recs), format_file_contents(recs))


def preview(document: str, lines: int = PREVIEW_LINES) -> str:
    """Return the first `lines` lines of a document, as shown in a collapsed view."""
    return "\n".join(document.splitlines()[: max(0, lines)])
