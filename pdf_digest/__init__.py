"""
PDF Section Digest

Splits a PDF into sections and subsections using configurable marker
keywords, summarizes every subsection with a local Ollama model and
exports the summarized hierarchy as a new PDF.
"""

__version__ = "1.0.0"
__author__ = "PDF Section Digest"
