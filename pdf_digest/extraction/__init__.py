"""
PDF text extraction module.
"""

from .pdf_extractor import PdfTextExtractor

__all__ = ["PdfTextExtractor"]
