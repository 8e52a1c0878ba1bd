"""Batch exporter: converts HTML documents to Markdown files and relocates their assets."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from tqdm import tqdm

from converters.document_converter import DocumentConverter
from converters.errors import DocumentReadError
from logger import ConversionTracker
from models import (
    ConversionStatus,
    ConversionWarning,
    ConverterConfig,
    DocumentOutcome,
    ExportReport,
    WarningKind,
)
from .file_store import FileSystemStore


class MarkdownExporter:
    """
    Orchestrates conversion of HTML files to local Markdown files.

    This exporter:
    1. Discovers HTML files under the input folder (or takes explicit paths)
    2. Converts each document independently
    3. Writes <slug>.md mirroring the input directory layout
    4. Copies referenced assets into the shared image folder
    5. Reports a per-document outcome; one failure never stops the batch
    """

    def __init__(
        self,
        config: ConverterConfig,
        store: Optional[FileSystemStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
        show_progress: bool = False
    ):
        """
        Initialize the markdown exporter.

        Args:
            config: Conversion and layout settings
            store: Filesystem collaborator (defaults to FileSystemStore)
            clock: Clock for metadata timestamp fallbacks
            logger: Logger instance
            show_progress: Display a tqdm progress bar
        """
        self.config = config
        self.logger = logger or logging.getLogger('html_markdown_porter.exporters.markdown_exporter')
        self.store = store or FileSystemStore(logger=self.logger.getChild('store'))
        self.clock = clock
        self.show_progress = show_progress

        self.input_folder = Path(config.input_folder)
        self.output_folder = Path(config.output_folder)
        self.image_folder = Path(config.image_folder)

    def export_all(self) -> ExportReport:
        """Convert every HTML file found under the input folder."""
        self.logger.info(f"Processing all HTML files in {self.input_folder}...")
        paths = self.store.find_documents(self.input_folder)

        if not paths:
            self.logger.info(f"No HTML files found in {self.input_folder}")
            return ExportReport()

        self.logger.info(f"Found {len(paths)} HTML files to process")
        return self.export_files(paths)

    def export_files(self, paths: Iterable[Union[str, Path]]) -> ExportReport:
        """
        Convert the given HTML files.

        Args:
            paths: Source documents

        Returns:
            ExportReport with outcomes sorted by source path
        """
        paths = [Path(path) for path in paths]
        report = ExportReport()

        self.store.ensure_directory(self.output_folder)
        self.store.ensure_directory(self.image_folder)

        workers = max(1, self.config.max_workers)
        progress = tqdm(total=len(paths), desc="Converting", unit="doc", disable=not self.show_progress)

        with ConversionTracker(len(paths)) as tracker:
            if workers > 1 and len(paths) > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    future_to_path = {
                        executor.submit(self.export_file, path): path
                        for path in paths
                    }

                    for future in as_completed(future_to_path):
                        outcome = future.result()
                        report.add(outcome)
                        tracker.record(outcome)
                        progress.update(1)
            else:
                for path in paths:
                    outcome = self.export_file(path)
                    report.add(outcome)
                    tracker.record(outcome)
                    progress.update(1)

        progress.close()
        report.sort()
        return report

    def export_file(self, source_path: Union[str, Path]) -> DocumentOutcome:
        """
        Convert one document end to end. Never raises for per-document failures.

        Args:
            source_path: HTML file to convert

        Returns:
            DocumentOutcome describing what happened
        """
        source_path = Path(source_path)

        try:
            html_content = self.store.load_document(source_path)
        except DocumentReadError as e:
            self.logger.error(str(e))
            return DocumentOutcome(source_path, ConversionStatus.READ_FAILED, error=str(e))

        converter = DocumentConverter(
            config=self.config,
            asset_store=self.store,
            clock=self.clock,
            logger=self.logger.getChild('converter')
        )

        try:
            result = converter.convert(html_content, source_path)
        except Exception as e:
            self.logger.error(f"Conversion failed for {source_path}: {e}", exc_info=True)
            return DocumentOutcome(source_path, ConversionStatus.CONVERSION_FAILED, error=str(e))

        warnings: List[ConversionWarning] = list(result.warnings)
        assets_copied = 0
        for asset in result.assets:
            if self.store.copy_asset(asset.resolved_path, self.image_folder, asset.file_name):
                assets_copied += 1
            else:
                warnings.append(ConversionWarning(
                    WarningKind.ASSET_COPY_FAILED,
                    f"Error copying file {asset.resolved_path}",
                    str(asset.resolved_path)
                ))

        output_path = self.output_path_for(source_path)
        if not self.store.write_output(output_path, result.document.to_text()):
            return DocumentOutcome(
                source_path,
                ConversionStatus.WRITE_FAILED,
                assets_copied=assets_copied,
                warnings=warnings,
                error=f"Error writing file {output_path}"
            )

        self.logger.info(f"Converted {source_path} to {output_path}")
        return DocumentOutcome(
            source_path,
            ConversionStatus.SUCCESS,
            output_path=output_path,
            assets_copied=assets_copied,
            warnings=warnings
        )

    def output_path_for(self, source_path: Union[str, Path]) -> Path:
        """Mirror the source's directory under the output folder, named by its slug."""
        source_path = Path(source_path)
        try:
            relative_dir = source_path.resolve().parent.relative_to(self.input_folder.resolve())
        except ValueError:
            # Files outside the input folder land at the output root
            relative_dir = Path()
        return self.output_folder / relative_dir / DocumentConverter.output_name(source_path)

    def write_report(self, report: ExportReport, report_path: Union[str, Path]) -> bool:
        """Save the report as JSON."""
        content = json.dumps(report.to_dict(), indent=2)
        return self.store.write_output(report_path, content)


__all__ = ['MarkdownExporter']
