"""Filesystem store: reading sources, copying assets and writing Markdown files."""

import logging
import shutil
from pathlib import Path
from typing import List, Optional, Union

from converters.errors import DocumentReadError, DocumentWriteError

PathLike = Union[str, Path]


class FileSystemStore:
    """
    Local filesystem implementation of the pipeline's I/O collaborators.

    Read failures raise DocumentReadError; copy and write failures are logged
    and reported through a False return value so callers decide how fatal
    they are.
    """

    def __init__(self, encoding: str = 'utf-8', logger: Optional[logging.Logger] = None):
        self.encoding = encoding
        self.logger = logger or logging.getLogger('html_markdown_porter.exporters.file_store')

    def find_documents(self, root: PathLike, extension: str = '.html') -> List[Path]:
        """Recursively find documents under root, sorted for a stable processing order."""
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Input directory not found: {root}")
        return sorted(path for path in root.rglob(f'*{extension}') if path.is_file())

    def load_document(self, path: PathLike) -> str:
        """Read a source document."""
        try:
            return Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(f"Error reading file {path}: {e}", path=path) from e

    def exists(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def ensure_directory(self, path: PathLike) -> Path:
        """Create a directory (and parents) if needed."""
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def copy_asset(self, source: PathLike, destination_dir: PathLike, file_name: Optional[str] = None) -> bool:
        """
        Copy an asset into destination_dir.

        Args:
            source: Resolved path of the asset
            destination_dir: Shared asset directory
            file_name: Target name; defaults to the source name

        Returns:
            True on success, False on failure
        """
        source = Path(source)
        destination = Path(destination_dir) / (file_name or source.name)
        try:
            self.ensure_directory(destination.parent)
            shutil.copyfile(source, destination)
        except OSError as e:
            self.logger.error(f"Error copying file {source}: {e}")
            return False

        self.logger.info(f"Copied: {source} -> {destination}")
        return True

    def save(self, path: PathLike, content: str) -> Path:
        """Write content, creating parent directories. Raises DocumentWriteError."""
        path = Path(path)
        try:
            self.ensure_directory(path.parent)
            path.write_text(content, encoding=self.encoding)
        except OSError as e:
            raise DocumentWriteError(f"Error writing file {path}: {e}", path=path) from e
        return path

    def write_output(self, path: PathLike, content: str) -> bool:
        """Write a converted document; False on failure."""
        try:
            self.save(path, content)
        except DocumentWriteError as e:
            self.logger.error(str(e))
            return False
        return True


__all__ = ['FileSystemStore']
