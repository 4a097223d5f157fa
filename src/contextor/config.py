from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_MAX_FILE_SIZE = 1_000_000
TRUNCATION_LIMIT = 10_000_000
PREVIEW_LINES = 10

BINARY_PLACEHOLDER = "[Binary file]"
EMPTY_PLACEHOLDER = "[Empty file]"
TRUNCATED_MARKER = "[Truncated: File too large]"
OVERSIZED_TEMPLATE = "[File size > {size:.1f}MB (max: {limit:.1f}MB)]"

VCS_DIR_NAME = ".git"
# Order matters: within one directory, later files take precedence.
IGNORE_FILE_NAMES = (".gitignore", ".ignore")

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_EXTENSION = "│   "
SPACE_EXTENSION = "    "
ROOT_LABEL = "."


class FileRecord(BaseModel):
    """Result of scanning one regular file.

    Attributes:
        path: Path relative to the scan root, with POSIX separators (e.g. "src/main.py").
        content: Decoded text, a size placeholder for oversized files, or None
            for binary and unreadable files.
        is_binary: True when a NUL byte was found or the file could not be read.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="File path relative to the scan root")
    content: str | None = Field(default=None, description="Text content or placeholder")
    is_binary: bool = Field(default=False, description="Binary or unreadable file")

    @model_validator(mode="after")
    def _binary_has_no_content(self) -> FileRecord:
        if self.is_binary and self.content is not None:
            msg = "binary records cannot carry content"
            raise ValueError(msg)
        return self

    @property
    def parts(self) -> tuple[str, ...]:
        """Path segments relative to the scan root."""
        return tuple(self.path.split("/"))


class TreeLine(BaseModel):
    """One rendered row of the project tree and the relative path it denotes."""

    model_config = ConfigDict(frozen=True)

    display: str
    path: str

    def as_tuple(self) -> tuple[str, str]:
        return (self.display, self.path)
