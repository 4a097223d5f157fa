"""Ignore-file handling for the project walker.

Rules are collected per directory from `.gitignore` and `.ignore` files and
stacked from the outermost directory inward, the way git layers them: the
last rule that matches a path decides, so deeper files override broader ones
and `!pattern` re-includes a path excluded earlier.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from gitignore_parser import rule_from_pattern

from contextor.config import IGNORE_FILE_NAMES, VCS_DIR_NAME
from contextor.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gitignore_parser import IgnoreRule


def load_ignore_file(ignore_file: Path, base_path: Path | None = None) -> list[IgnoreRule]:
    """Parse one ignore file into rules anchored at the file's directory.

    Args:
        ignore_file (Path): the `.gitignore`/`.ignore` file to parse
        base_path (Path | None): directory the patterns are relative to; defaults
            to the directory holding `ignore_file`

    Returns:
        list[IgnoreRule]: the parsed rules, in file order; empty if the file cannot be read
    """
    try:
        text = ignore_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("ignore_file_unreadable", path=str(ignore_file), error=str(e))
        return []

    if base_path is None:
        base_path = ignore_file.parent
    rules: list[IgnoreRule] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        rule = rule_from_pattern(line, base_path=base_path, source=(str(ignore_file), lineno))
        if rule:
            rules.append(rule)
    return rules


def load_directory_rules(directory: Path) -> list[IgnoreRule]:
    """Collect the rules declared directly inside `directory`.

    Args:
        directory (Path): the directory whose ignore files are read

    Returns:
        list[IgnoreRule]: rules from `.gitignore` followed by rules from `.ignore`
    """
    rules: list[IgnoreRule] = []
    for name in IGNORE_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            rules.extend(load_ignore_file(candidate))
    return rules


def load_repository_excludes(root: Path) -> list[IgnoreRule]:
    """Read `.git/info/exclude` of the repository containing `root`, if any.

    The nearest directory at or above `root` holding a `.git` directory is the
    repository; its exclude patterns are relative to that directory.
    """
    for directory in (root, *root.parents):
        if (directory / VCS_DIR_NAME).is_dir():
            exclude = directory / VCS_DIR_NAME / "info" / "exclude"
            return load_ignore_file(exclude, base_path=directory) if exclude.is_file() else []
    return []


class IgnoreRules:
    """Immutable stack of ignore rules applying to one directory level."""

    def __init__(self, rules: Sequence[IgnoreRule] = ()) -> None:
        self._rules: tuple[IgnoreRule, ...] = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    @classmethod
    def for_root(cls, root: Path) -> IgnoreRules:
        """Build the rules in force at `root`.

        Repository excludes come first (lowest precedence), then the ignore files
        of parent directories, outermost first, then the root's own.
        """
        rules = load_repository_excludes(root)
        for directory in reversed(root.parents):
            rules.extend(load_directory_rules(directory))
        rules.extend(load_directory_rules(root))
        return cls(rules)

    def descend(self, directory: Path) -> IgnoreRules:
        """Return the rules in force inside `directory`, a child of the current level."""
        own = load_directory_rules(directory)
        if not own:
            return self
        return IgnoreRules((*self._rules, *own))

    def is_ignored(self, path: Path, *, is_dir: bool = False) -> bool:
        """Check whether `path` is excluded by the stacked rules.

        Directory-only patterns (`cache/`) never match a file. A directory is
        matched with a trailing slash against them, so `!*/` re-includes it.

        Args:
            path (Path): absolute path of a file or directory under the scan root
            is_dir (bool): whether `path` is a directory

        Returns:
            bool: True if the last matching rule excludes the path, False if it
                re-includes it or no rule matches
        """
        target = str(path)
        for rule in reversed(self._rules):
            if rule.directory_only and not is_dir:
                continue
            try:
                matched = rule.match(f"{target}/" if rule.directory_only else target)
            except ValueError:
                # Rule anchored outside the path (e.g. a symlink resolving elsewhere).
                continue
            if matched:
                return not rule.negation
        return False
