"""Sandbox tool implementations."""

from .files import CreateOrUpdateFilesInput, FileEntry, create_files_tool
from .read import ReadFilesInput, create_read_files_tool
from .terminal import TerminalInput, create_terminal_tool

__all__ = [
    "CreateOrUpdateFilesInput",
    "FileEntry",
    "ReadFilesInput",
    "TerminalInput",
    "create_files_tool",
    "create_read_files_tool",
    "create_terminal_tool",
]
