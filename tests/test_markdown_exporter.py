"""Tests for the batch exporter and the filesystem store."""

import json

import pytest

from exporters import FileSystemStore, MarkdownExporter
from converters.errors import ConfigurationError, ConversionError, DocumentReadError, DocumentWriteError
from models import ConversionStatus, ConverterConfig, WarningKind


def page(title, body):
    return f'<html><head><title>{title}</title></head><body>{body}</body></html>'


@pytest.fixture
def workspace(tmp_path):
    input_dir = tmp_path / "input"
    (input_dir / "sub").mkdir(parents=True)
    (input_dir / "images").mkdir()
    (input_dir / "images" / "cover.png").write_bytes(b"png-bytes")

    (input_dir / "My Page.html").write_text(
        page('My Page', '<p>See <a href="sub/Other Note.html">other</a></p><img src="images/cover.png">'),
        encoding='utf-8'
    )
    (input_dir / "sub" / "Other Note.html").write_text(
        page('Other', '<p>Nested</p><a href="../files/missing.pdf">gone</a>'),
        encoding='utf-8'
    )
    (input_dir / "notes.txt").write_text('not html', encoding='utf-8')
    return tmp_path


@pytest.fixture
def make_config(workspace):
    def _make(**overrides):
        values = dict(
            input_folder=str(workspace / "input"),
            output_folder=str(workspace / "output"),
            image_folder=str(workspace / "output" / "assets"),
            link_prefix='/notes/',
            asset_prefix='/assets/',
        )
        values.update(overrides)
        return ConverterConfig(**values)
    return _make


class TestMarkdownExporter:

    def test_export_all_mirrors_layout(self, workspace, make_config, fixed_clock):
        """Test that batch export mirrors the input layout."""
        report = MarkdownExporter(make_config(), clock=fixed_clock).export_all()

        output = workspace / "output"
        assert report.total == 2
        assert report.succeeded == 2
        assert (output / "my-page.md").is_file()
        assert (output / "sub" / "other-note.md").is_file()
        assert not (output / "notes.md").exists()

        content = (output / "my-page.md").read_text(encoding='utf-8')
        assert content.startswith('---\ntitle: "My Page"\n')
        assert '[other](/notes/other-note)' in content
        assert '![](/assets/cover.png)' in content

    def test_assets_copied_to_image_folder(self, workspace, make_config, fixed_clock):
        """Test that assets are copied to the image folder."""
        report = MarkdownExporter(make_config(), clock=fixed_clock).export_all()

        copied = workspace / "output" / "assets" / "cover.png"
        assert copied.read_bytes() == b"png-bytes"
        outcome = next(o for o in report.outcomes if o.source_path.name == "My Page.html")
        assert outcome.assets_copied == 1

    def test_missing_asset_is_a_warning_not_a_failure(self, workspace, make_config, fixed_clock):
        """Test that a missing asset is a warning, not a failure."""
        report = MarkdownExporter(make_config(), clock=fixed_clock).export_all()

        outcome = next(o for o in report.outcomes if o.source_path.name == "Other Note.html")
        assert outcome.status == ConversionStatus.SUCCESS
        assert [w.kind for w in outcome.warnings] == [WarningKind.MISSING_ASSET]
        assert report.warning_count == 1

    def test_unreadable_document_does_not_stop_batch(self, workspace, make_config, fixed_clock):
        """Test that an unreadable document does not stop the batch."""
        (workspace / "input" / "Broken.html").write_bytes(b'\xff\xfe\xfa broken')

        report = MarkdownExporter(make_config(), clock=fixed_clock).export_all()

        statuses = {o.source_path.name: o.status for o in report.outcomes}
        assert statuses["Broken.html"] == ConversionStatus.READ_FAILED
        assert statuses["My Page.html"] == ConversionStatus.SUCCESS
        assert statuses["Other Note.html"] == ConversionStatus.SUCCESS
        assert report.failed == 1

    def test_conversion_error_does_not_stop_batch(self, workspace, make_config, fixed_clock, monkeypatch):
        """Test that a conversion error does not stop the batch."""
        from converters.document_converter import DocumentConverter

        original_convert = DocumentConverter.convert

        def flaky_convert(self, html_content, source_path):
            if 'Other' in str(source_path):
                raise RuntimeError("boom")
            return original_convert(self, html_content, source_path)

        monkeypatch.setattr(DocumentConverter, 'convert', flaky_convert)

        report = MarkdownExporter(make_config(), clock=fixed_clock).export_all()

        statuses = {o.source_path.name: o.status for o in report.outcomes}
        assert statuses["Other Note.html"] == ConversionStatus.CONVERSION_FAILED
        assert statuses["My Page.html"] == ConversionStatus.SUCCESS

    def test_write_failure_reported(self, workspace, make_config, fixed_clock):
        """Test that a write failure is reported."""
        class ReadOnlyStore(FileSystemStore):
            def write_output(self, path, content):
                return False

        report = MarkdownExporter(make_config(), store=ReadOnlyStore(), clock=fixed_clock).export_all()

        assert {o.status for o in report.outcomes} == {ConversionStatus.WRITE_FAILED}
        assert report.succeeded == 0

    def test_failed_copy_becomes_warning(self, workspace, make_config, fixed_clock):
        """Test that a failed copy becomes a warning."""
        class NoCopyStore(FileSystemStore):
            def copy_asset(self, source, destination_dir, file_name=None):
                return False

        report = MarkdownExporter(make_config(), store=NoCopyStore(), clock=fixed_clock).export_all()

        outcome = next(o for o in report.outcomes if o.source_path.name == "My Page.html")
        assert outcome.status == ConversionStatus.SUCCESS
        assert [w.kind for w in outcome.warnings] == [WarningKind.ASSET_COPY_FAILED]

    def test_parallel_run_matches_sequential(self, workspace, make_config, fixed_clock):
        """Test that a parallel run matches a sequential one."""
        for index in range(6):
            (workspace / "input" / f"Page {index}.html").write_text(page(f'P{index}', f'<p>{index}</p>'), encoding='utf-8')

        sequential = MarkdownExporter(make_config(), clock=fixed_clock).export_all()
        seq_outputs = {
            path.name: path.read_text(encoding='utf-8')
            for path in (workspace / "output").rglob('*.md')
        }

        parallel = MarkdownExporter(
            make_config(output_folder=str(workspace / "parallel"), max_workers=4),
            clock=fixed_clock
        ).export_all()
        par_outputs = {
            path.name: path.read_text(encoding='utf-8')
            for path in (workspace / "parallel").rglob('*.md')
        }

        assert [str(o.source_path) for o in parallel.outcomes] == [str(o.source_path) for o in sequential.outcomes]
        assert par_outputs == seq_outputs
        assert parallel.succeeded == 8

    def test_export_single_file(self, workspace, make_config, fixed_clock):
        """Test exporting a single file."""
        exporter = MarkdownExporter(make_config(), clock=fixed_clock)

        report = exporter.export_files([workspace / "input" / "sub" / "Other Note.html"])

        assert report.total == 1
        assert (workspace / "output" / "sub" / "other-note.md").is_file()

    def test_file_outside_input_lands_at_output_root(self, tmp_path, make_config):
        """Test that a file outside the input folder lands at the output root."""
        exporter = MarkdownExporter(make_config())

        assert exporter.output_path_for(tmp_path / "elsewhere" / "Loose File.html") == \
            tmp_path / "output" / "loose-file.md"

    def test_missing_input_folder(self, tmp_path):
        """Test export with a missing input folder."""
        config = ConverterConfig(input_folder=str(tmp_path / "nope"), output_folder=str(tmp_path / "out"))

        with pytest.raises(FileNotFoundError):
            MarkdownExporter(config).export_all()

    def test_write_report(self, workspace, make_config, fixed_clock):
        """Test writing the JSON report."""
        exporter = MarkdownExporter(make_config(), clock=fixed_clock)
        report = exporter.export_all()
        report_path = workspace / "report.json"

        assert exporter.write_report(report, report_path)

        data = json.loads(report_path.read_text(encoding='utf-8'))
        assert data['summary'] == {'total': 2, 'succeeded': 2, 'failed': 0, 'warnings': 1}
        assert [d['status'] for d in data['documents']] == ['success', 'success']


class TestFileSystemStore:

    def test_find_documents_sorted(self, workspace):
        """Test that found documents are sorted."""
        found = FileSystemStore().find_documents(workspace / "input")

        assert [path.name for path in found] == ["My Page.html", "Other Note.html"]

    def test_load_document_error(self, tmp_path):
        """Test the error for an unreadable document."""
        with pytest.raises(DocumentReadError):
            FileSystemStore().load_document(tmp_path / "absent.html")

    def test_copy_asset_with_new_name(self, tmp_path):
        """Test copying an asset under a new name."""
        source = tmp_path / "a.png"
        source.write_bytes(b"x")

        assert FileSystemStore().copy_asset(source, tmp_path / "dest", "b.png")
        assert (tmp_path / "dest" / "b.png").read_bytes() == b"x"

    def test_copy_missing_asset_returns_false(self, tmp_path):
        """Test that copying a missing asset returns False."""
        assert not FileSystemStore().copy_asset(tmp_path / "missing.png", tmp_path / "dest")

    def test_save_raises_write_error(self, tmp_path):
        """Test that save raises DocumentWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text('file, not a directory', encoding='utf-8')

        with pytest.raises(DocumentWriteError):
            FileSystemStore().save(blocker / "note.md", 'content')

        assert not FileSystemStore().write_output(blocker / "note.md", 'content')

    def test_errors_share_a_base_class(self):
        """Test the error class hierarchy."""
        assert issubclass(DocumentReadError, ConversionError)
        assert issubclass(DocumentWriteError, ConversionError)
        assert issubclass(ConfigurationError, ConversionError)
        assert issubclass(ConfigurationError, ValueError)
