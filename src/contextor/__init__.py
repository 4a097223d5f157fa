"""contextor — turn a project folder into a single context document for LLM prompts."""

from contextor.config import FileRecord, TreeLine
from contextor.output_construction import render
from contextor.scanner import scan

__version__ = "0.1.0"

__all__ = ["FileRecord", "TreeLine", "__version__", "render", "scan"]
