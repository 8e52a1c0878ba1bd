"""Data models for the HTML to Markdown conversion pipeline."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger('html_markdown_porter')


class ConversionStatus(Enum):
    """Outcome of converting a single document."""
    SUCCESS = "success"
    READ_FAILED = "read_failed"
    CONVERSION_FAILED = "conversion_failed"
    WRITE_FAILED = "write_failed"


class WarningKind(Enum):
    """Recoverable problems reported while converting a document."""
    MISSING_ASSET = "missing_asset"
    ASSET_COPY_FAILED = "asset_copy_failed"


@dataclass
class ConverterConfig:
    """Behavioral and layout settings threaded through every pipeline stage."""

    input_folder: str = "input"
    output_folder: str = "output"
    image_folder: str = "output/images"
    link_prefix: str = ""
    asset_prefix: str = ""
    ignore_tags: List[str] = field(default_factory=list)
    ignore_meta: List[str] = field(default_factory=list)
    organizing_tag: Optional[str] = None
    unnest_tags: bool = False
    italics_to_alt: bool = False
    max_workers: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            'input_folder': self.input_folder,
            'output_folder': self.output_folder,
            'image_folder': self.image_folder,
            'link_prefix': self.link_prefix,
            'asset_prefix': self.asset_prefix,
            'ignore_tags': list(self.ignore_tags),
            'ignore_meta': list(self.ignore_meta),
            'organizing_tag': self.organizing_tag,
            'unnest_tags': self.unnest_tags,
            'italics_to_alt': self.italics_to_alt,
            'max_workers': self.max_workers,
        }


@dataclass
class ExtractedMetadata:
    """Document-level metadata captured before the head is removed."""

    metadata: Dict[str, str]
    title: str
    description: str
    first_image_path: str = ""


@dataclass(frozen=True)
class AssetReference:
    """A local file referenced by the document that must travel with it."""

    original_path: str
    resolved_path: Path
    public_path: str

    @property
    def file_name(self) -> str:
        """Decoded base name used for the copied file."""
        return self.resolved_path.name


@dataclass(frozen=True)
class ConversionWarning:
    """A recoverable problem; conversion continues with a fallback."""

    kind: WarningKind
    message: str
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind.value, 'message': self.message, 'path': self.path}


@dataclass(frozen=True)
class RenderedDocument:
    """Front matter plus Markdown body, ready to be written verbatim."""

    front_matter: Tuple[Tuple[str, str], ...]
    tags: Tuple[str, ...]
    body: str

    @property
    def header(self) -> str:
        lines = ["---"]
        lines.extend(f"{key}: {value}" for key, value in self.front_matter)
        lines.append("---")
        return "\n".join(lines)

    def to_text(self) -> str:
        """Header, a blank line, then the body."""
        return f"{self.header}\n\n{self.body}\n"


@dataclass
class ConversionResult:
    """Everything one pipeline invocation produces for a single input."""

    source_path: Path
    document: RenderedDocument
    assets: List[AssetReference] = field(default_factory=list)
    warnings: List[ConversionWarning] = field(default_factory=list)


@dataclass
class DocumentOutcome:
    """Per-document result reported by the batch exporter."""

    source_path: Path
    status: ConversionStatus
    output_path: Optional[Path] = None
    assets_copied: int = 0
    warnings: List[ConversionWarning] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ConversionStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Serialize outcome to dictionary."""
        return {
            'source_path': str(self.source_path),
            'status': self.status.value,
            'output_path': str(self.output_path) if self.output_path else None,
            'assets_copied': self.assets_copied,
            'warnings': [w.to_dict() for w in self.warnings],
            'error': self.error,
        }


@dataclass
class ExportReport:
    """Aggregated outcomes of a batch run."""

    outcomes: List[DocumentOutcome] = field(default_factory=list)

    def add(self, outcome: DocumentOutcome) -> None:
        self.outcomes.append(outcome)

    def sort(self) -> None:
        """Order outcomes by source path so reports do not depend on completion order."""
        self.outcomes.sort(key=lambda outcome: str(outcome.source_path))

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def warning_count(self) -> int:
        return sum(len(outcome.warnings) for outcome in self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': {
                'total': self.total,
                'succeeded': self.succeeded,
                'failed': self.failed,
                'warnings': self.warning_count,
            },
            'documents': [outcome.to_dict() for outcome in self.outcomes],
        }
