"""
Publishing module for summarized documents.
"""

from .pdf_exporter import PdfExporter, render_markdown

__all__ = ["PdfExporter", "render_markdown"]
