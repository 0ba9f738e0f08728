"""
Tests for the summary PDF exporter.
"""
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

import pytest
from unittest.mock import patch
from pdf_digest.core.exceptions import ExportError
from pdf_digest.core.models import Section, SubSection
from pdf_digest.publishing import PdfExporter, render_markdown


@pytest.fixture
def exporter(tmp_path):
    return PdfExporter(output_dir=tmp_path / "out")


@pytest.fixture
def sections():
    return [
        Section(
            number=1,
            title="Unit 1",
            sub_sections=[SubSection(number=1, title="Lesson 1", content="Hello")],
            summary="**Lesson 1**\n\nA short *summary*.\n\n---\n\n**Lesson 2**\n\n- point"
        ),
        Section(number=2, title="Unit 2"),
    ]


class TestPdfExporter:
    """Test suite for PdfExporter"""
    
    def test_export_writes_pdf(self, exporter, sections):
        path = exporter.export(sections, "summary.pdf", "Course Summary")
        
        assert path == exporter.output_dir / "summary.pdf"
        assert path.read_bytes().startswith(b"%PDF")
    
    def test_export_appends_extension_and_strips_directories(self, exporter, sections):
        path = exporter.export(sections, "../elsewhere/summary", "Course Summary")
        
        assert path == exporter.output_dir / "summary.pdf"
        assert path.is_file()
    
    def test_export_failure_raises_export_error(self, exporter, sections):
        with patch("pdf_digest.publishing.pdf_exporter.MarkdownPdf") as mock_pdf:
            mock_pdf.return_value.save.side_effect = OSError("disk full")
            
            with pytest.raises(ExportError) as exc_info:
                exporter.export(sections, "summary.pdf", "Title")
        
        assert "disk full" in str(exc_info.value)
    
    def test_list_files_newest_first(self, exporter, sections):
        exporter.export(sections, "first.pdf", "A")
        exporter.export(sections, "second.pdf", "B")
        (exporter.output_dir / "notes.txt").write_text("ignored")
        
        files = exporter.list_files()
        
        assert {f.filename for f in files} == {"first.pdf", "second.pdf"}
        assert all(f.size > 0 for f in files)
        assert files[0].created >= files[1].created
    
    def test_list_files_without_output_dir(self, tmp_path):
        assert PdfExporter(output_dir=tmp_path / "absent").list_files() == []
    
    def test_resolve_file(self, exporter, sections):
        exporter.export(sections, "summary.pdf", "Title")
        
        assert exporter.resolve_file("summary.pdf") == (exporter.output_dir / "summary.pdf").resolve()
        
        with pytest.raises(FileNotFoundError):
            exporter.resolve_file("missing.pdf")
        with pytest.raises(PermissionError):
            exporter.resolve_file("../outside.pdf")
    
    def test_health_check(self, exporter):
        assert exporter.health_check() is True
        assert exporter.output_dir.is_dir()


def test_render_markdown(sections):
    assert render_markdown(sections[0]).startswith("## Unit 1\n\n**Lesson 1**")
    assert "No summary available" in render_markdown(sections[1])
