"""Export package for writing converted documents to the filesystem.

Package Structure:
- markdown_exporter: Batch driver converting HTML files to Markdown files
- file_store: Filesystem reads, asset copies and output writes

Key Features:
- Mirrors the input directory layout under the output folder
- Names each output by the slugified input file name
- Copies local assets into one shared asset folder
- Reports per-document outcomes; a failing document never stops the batch
"""

from .file_store import FileSystemStore
from .markdown_exporter import MarkdownExporter

__all__ = [
    'MarkdownExporter',
    'FileSystemStore',
]
