"""PDF exporter for summarized section hierarchies."""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

import structlog
from markdown_pdf import MarkdownPdf, Section as PdfSection

from ..core.config import settings
from ..core.exceptions import ExportError
from ..core.models import FileInfo, Section

logger = structlog.get_logger(__name__)

MISSING_SUMMARY_TEXT = "_No summary available for this section._"


def render_markdown(section: Section) -> str:
    """Render one summarized section as a markdown page."""
    body = section.summary.strip() if section.summary else MISSING_SUMMARY_TEXT
    return f"## {section.title}\n\n{body}\n"


class PdfExporter:
    """Exporter that writes summarized sections to a PDF file."""
    
    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        """Initialize the PDF exporter.
        
        Args:
            output_dir: Directory to save PDF files (default: settings.output_dir)
        """
        self.output_dir = Path(output_dir) if output_dir is not None else settings.output_path
    
    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            test_file = self.output_dir / ".test_write"
            test_file.write_text("test")
            test_file.unlink()
            logger.info("PDF exporter health check passed", output_dir=str(self.output_dir))
            return True
        except OSError as e:
            logger.error("PDF exporter health check failed", error=str(e))
            return False
    
    def export(self, sections: Sequence[Section], filename: str, title: str) -> Path:
        """Export sections as a PDF, one page per section after a title page.
        
        Args:
            sections: Sections with their summaries
            filename: Name of the file inside the output directory
            title: Document title shown on the first page and in metadata
            
        Returns:
            Path of the written PDF
            
        Raises:
            ExportError: If the PDF could not be rendered or written
        """
        name = Path(filename).name
        if not name.lower().endswith(".pdf"):
            name += ".pdf"
        filepath = self.output_dir / name
        
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            
            pdf = MarkdownPdf(toc_level=2)
            pdf.add_section(PdfSection(f"# {title}\n\n{self._overview(sections)}\n"))
            for section in sections:
                pdf.add_section(PdfSection(render_markdown(section)))
            
            pdf.meta["title"] = title
            pdf.save(str(filepath))
        except Exception as e:
            logger.error("Failed to export PDF", filepath=str(filepath), error=str(e))
            raise ExportError(f"Failed to export PDF {name}: {e}") from e
        
        logger.info("PDF exported successfully",
                   filepath=str(filepath),
                   sections=len(sections))
        return filepath
    
    def list_files(self) -> List[FileInfo]:
        """List exported PDFs, newest first."""
        if not self.output_dir.is_dir():
            return []
        
        files = []
        for path in self.output_dir.iterdir():
            if not path.is_file() or path.suffix.lower() != ".pdf":
                continue
            stats = path.stat()
            files.append(FileInfo(
                filename=path.name,
                size=stats.st_size,
                created=datetime.fromtimestamp(stats.st_ctime),
                modified=datetime.fromtimestamp(stats.st_mtime)
            ))
        
        files.sort(key=lambda info: info.created, reverse=True)
        return files
    
    def resolve_file(self, filename: str) -> Path:
        """Return the path of an exported file.
        
        Raises:
            PermissionError: If ``filename`` points outside the output directory
            FileNotFoundError: If the file does not exist
        """
        root = self.output_dir.resolve()
        path = (self.output_dir / filename).resolve()
        
        if path != root and root not in path.parents:
            logger.warning("Rejected file outside output directory", filename=filename)
            raise PermissionError(f"Access denied: {filename}")
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {filename}")
        return path
    
    def _overview(self, sections: Sequence[Section]) -> str:
        lines = [f"- {section.title} ({len(section.sub_sections)} subsections)" for section in sections]
        return "\n".join(lines)
