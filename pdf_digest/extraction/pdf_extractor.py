"""
Plain text extraction from PDF files using PyMuPDF.
"""

from pathlib import Path
from typing import Union
import fitz  # PyMuPDF
import structlog

from ..core.exceptions import ExtractionError

logger = structlog.get_logger(__name__)


class PdfTextExtractor:
    """Extracts the full text of a PDF, page by page."""
    
    def extract_text(self, input_path: Union[str, Path]) -> str:
        """
        Extract the text of every page, in page order.
        
        Args:
            input_path: Path of the PDF to read
            
        Returns:
            Page texts joined with newlines
            
        Raises:
            ExtractionError: If the file is missing, unreadable or not a PDF
        """
        path = Path(input_path)
        if not path.is_file():
            raise ExtractionError(f"Failed to extract text from PDF: file not found: {path}")
        
        try:
            with fitz.open(str(path)) as doc:
                pages = [page.get_text("text") for page in doc]
        except Exception as e:
            logger.error("PDF text extraction failed", path=str(path), error=str(e))
            raise ExtractionError(f"Failed to extract text from PDF: {e}") from e
        
        text = "\n".join(pages)
        logger.info("Extracted PDF text",
                   path=str(path),
                   pages=len(pages),
                   characters=len(text))
        return text
