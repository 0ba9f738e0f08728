"""
Hierarchical section detection for extracted document text.
"""

from .section_detector import SectionDetector, compile_marker, detect_sections

__all__ = ["SectionDetector", "compile_marker", "detect_sections"]
