"""Append entries to JSON array files without rewriting them."""

from .api import jappend, new_writer
from .contracts import FileHandle, FileStat, TailScan, WriterOptions
from .errors import ArrayFileNotFoundError, ConfigError, JappendError, MalformedArrayError
from .writer import JsonArrayWriter

__all__ = [
    "ArrayFileNotFoundError",
    "ConfigError",
    "FileHandle",
    "FileStat",
    "JappendError",
    "JsonArrayWriter",
    "MalformedArrayError",
    "TailScan",
    "WriterOptions",
    "jappend",
    "new_writer",
]
