"""Shared file I/O helpers."""

from .files import file_sha256, text_sha256
from .json_io import dump_json_text, load_json_file, write_json_atomic

__all__ = ["dump_json_text", "file_sha256", "load_json_file", "text_sha256", "write_json_atomic"]
