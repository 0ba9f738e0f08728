"""
Data models for the PDF section digest system.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class SubSection(BaseModel):
    """Unit nested within a section, delimited by a subsection marker line."""
    number: int
    title: str
    content: str = ""


class Section(BaseModel):
    """Top-level document unit delimited by a section marker line."""
    number: int
    title: str
    sub_sections: List[SubSection] = Field(default_factory=list)
    summary: Optional[str] = None


class ProcessingRequest(BaseModel):
    """Options for a single document processing run."""
    section_pattern: str = "Unit"
    sub_section_pattern: str = "Lesson"
    document_title: Optional[str] = None
    filename: Optional[str] = None
    subject: str = "academic content"
    language: Optional[str] = None


class ProcessingStatistics(BaseModel):
    """Aggregate counts for a processing run."""
    total_sections: int = 0
    total_sub_sections: int = 0
    successful_summaries: int = 0
    processing_time_ms: int = 0


class ProcessingResult(BaseModel):
    """Outcome of a processing run."""
    success: bool
    message: str
    output_path: Optional[str] = None
    statistics: Optional[ProcessingStatistics] = None
    error: Optional[str] = None


class SummaryResult(BaseModel):
    """Outcome of a standalone content summary."""
    success: bool
    summary: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: int = 0


class FileInfo(BaseModel):
    """Metadata of an exported summary PDF."""
    filename: str
    size: int
    created: datetime
    modified: datetime


class SummarizationOutcome(BaseModel):
    """Summarized sections together with the counts gathered on the way."""
    sections: List[Section]
    statistics: ProcessingStatistics
    
    @property
    def failed_summaries(self) -> int:
        return self.statistics.total_sub_sections - self.statistics.successful_summaries
