"""
Pipeline orchestration module for PDF section digests.
"""

from .pipeline import DocumentProcessingPipeline

__all__ = ["DocumentProcessingPipeline"]
