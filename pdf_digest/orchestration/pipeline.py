"""
Main pipeline orchestrator: extract, detect, summarize, export.
"""

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
import structlog

from ..core.config import settings
from ..core.exceptions import (
    ConnectionCheckError, ExportError, ExtractionError, ProcessingCancelled
)
from ..core.models import (
    ProcessingRequest, ProcessingResult, ProcessingStatistics,
    Section, SummarizationOutcome, SummaryResult
)
from ..detection import SectionDetector
from ..extraction import PdfTextExtractor
from ..publishing import PdfExporter
from ..summarization import OllamaSummarizer

logger = structlog.get_logger(__name__)

SECTION_SEPARATOR = "\n\n---\n\n"
FAILED_SUMMARY_NOTICE = "Error generating summary for this subsection after multiple attempts"
DEFAULT_DOCUMENT_TITLE = "Document Summary"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def default_filename(now: Optional[datetime] = None) -> str:
    """UTC-timestamped output filename used when the request names none."""
    now = now or datetime.now(timezone.utc)
    return f"document-summary-{now.strftime('%Y-%m-%dT%H-%M-%S')}.pdf"


def format_summary_block(title: str, text: str) -> str:
    """Markdown block for one subsection summary or failure notice."""
    return f"**{title}**\n\n{text}"


class DocumentProcessingPipeline:
    """Orchestrates a complete document run from PDF to summary PDF."""
    
    def __init__(self,
                 extractor: Optional[PdfTextExtractor] = None,
                 summarizer: Optional[OllamaSummarizer] = None,
                 exporter: Optional[PdfExporter] = None):
        self.extractor = extractor or PdfTextExtractor()
        self.summarizer = summarizer or OllamaSummarizer()
        self.exporter = exporter or PdfExporter()
    
    async def process(
        self,
        input_path: Union[str, Path],
        request: Optional[ProcessingRequest] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> ProcessingResult:
        """
        Run the complete pipeline for one PDF.
        
        Args:
            input_path: PDF to summarize
            request: Marker keywords and output options
            cancel_event: Checked between subsections; when set the run stops
            
        Returns:
            ProcessingResult: Never raises, failures are reported in the result.
        """
        request = request or ProcessingRequest(
            section_pattern=settings.section_pattern,
            sub_section_pattern=settings.sub_section_pattern,
            subject=settings.default_subject
        )
        start = time.monotonic()
        statistics = ProcessingStatistics()
        
        logger.info("Starting document processing",
                   input_path=str(input_path),
                   section_pattern=request.section_pattern,
                   sub_section_pattern=request.sub_section_pattern)
        
        try:
            # Step 1: Preflight, never retried
            await self.summarizer.test_connection()
            
            # Step 2: Extract text
            text = await asyncio.to_thread(self.extractor.extract_text, input_path)
            
            # Step 3: Detect structure
            detector = SectionDetector(request.section_pattern, request.sub_section_pattern)
            sections = detector.detect_sections(text)
            
            if not sections:
                logger.warning("No sections detected",
                              section_pattern=request.section_pattern,
                              sub_section_pattern=request.sub_section_pattern)
                return ProcessingResult(
                    success=False,
                    message=f"No sections found using patterns: {request.section_pattern}/{request.sub_section_pattern}",
                    error="No document structure detected"
                )
            
            # Step 4: Summarize every subsection
            outcome = await self.summarize_sections(
                sections,
                subject=request.subject or settings.default_subject,
                language=request.language,
                statistics=statistics,
                cancel_event=cancel_event
            )
            
            # Step 5: Export
            filename = request.filename or default_filename()
            title = request.document_title or DEFAULT_DOCUMENT_TITLE
            output_path = await asyncio.to_thread(self.exporter.export, outcome.sections, filename, title)
            
            statistics.processing_time_ms = _elapsed_ms(start)
            logger.info("Document processing completed",
                       output_path=str(output_path),
                       total_sections=statistics.total_sections,
                       total_sub_sections=statistics.total_sub_sections,
                       successful_summaries=statistics.successful_summaries,
                       processing_time_ms=statistics.processing_time_ms)
            
            return ProcessingResult(
                success=True,
                message="Processing completed successfully",
                output_path=str(output_path),
                statistics=statistics
            )
        
        except ConnectionCheckError as e:
            return self._failure("LLM connection failed", e, statistics, start)
        except ExtractionError as e:
            return self._failure("Failed to extract text from PDF", e, statistics, start)
        except ProcessingCancelled as e:
            return self._failure("Document processing cancelled", e, statistics, start)
        except ExportError as e:
            return self._failure("Failed to export summary PDF", e, statistics, start)
        except Exception as e:
            return self._failure("Document processing failed", e, statistics, start)
    
    async def summarize_sections(
        self,
        sections: Sequence[Section],
        subject: str,
        language: Optional[str] = None,
        statistics: Optional[ProcessingStatistics] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> SummarizationOutcome:
        """
        Summarize every subsection in document order, one call at a time.
        
        A subsection whose retries are exhausted gets a failure notice in
        place of its summary; the run continues. Each section summary is the
        concatenation of its subsection blocks, never a summary of summaries.
        
        Args:
            sections: Detected sections, left unmodified
            subject: Subject passed to the model prompt
            language: Answer language, None for the content's language
            statistics: Counters updated in place as the run progresses
            cancel_event: Checked before each subsection
            
        Raises:
            ProcessingCancelled: If ``cancel_event`` was set
        """
        statistics = statistics if statistics is not None else ProcessingStatistics()
        statistics.total_sections = len(sections)
        statistics.total_sub_sections = sum(len(s.sub_sections) for s in sections)
        
        summarized: List[Section] = []
        for section_index, section in enumerate(sections, start=1):
            logger.info("Processing section",
                       position=f"{section_index}/{len(sections)}",
                       title=section.title)
            
            blocks = []
            for index, sub_section in enumerate(section.sub_sections, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning("Processing cancelled", section=section.title, sub_section=sub_section.title)
                    raise ProcessingCancelled(f"Cancelled before {sub_section.title}")
                
                logger.info("Processing subsection",
                           position=f"{index}/{len(section.sub_sections)}",
                           title=sub_section.title)
                try:
                    summary = await self.summarizer.generate_sub_section_summary(
                        sub_section.title,
                        sub_section.content,
                        subject,
                        language
                    )
                except Exception as e:
                    logger.error("Failed to summarize subsection",
                                title=sub_section.title,
                                error=str(e))
                    blocks.append(format_summary_block(sub_section.title, FAILED_SUMMARY_NOTICE))
                else:
                    blocks.append(format_summary_block(sub_section.title, summary))
                    statistics.successful_summaries += 1
            
            summarized.append(section.model_copy(update={"summary": SECTION_SEPARATOR.join(blocks)}))
            logger.info("Section completed", title=section.title, sub_sections=len(blocks))
        
        return SummarizationOutcome(sections=summarized, statistics=statistics)
    
    async def summarize_content(self, content: str, language: Optional[str] = None) -> SummaryResult:
        """Summarize free-standing content (text or HTML) in one retried call."""
        start = time.monotonic()
        
        if not content or not content.strip():
            return SummaryResult(success=False, error="Content is required")
        
        logger.info("Summarizing content", content_length=len(content), language=language)
        try:
            summary = await self.summarizer.generate_simple_summary(content, language)
        except Exception as e:
            logger.error("Summary generation failed", error=str(e))
            return SummaryResult(
                success=False,
                error=f"Summary generation failed: {e}",
                processing_time_ms=_elapsed_ms(start)
            )
        
        return SummaryResult(success=True, summary=summary, processing_time_ms=_elapsed_ms(start))
    
    async def health_check(self) -> Dict[str, bool]:
        """Check health of all pipeline components."""
        health_status = {
            "ollama_summarization": await self.summarizer.health_check(),
            "pdf_export": self.exporter.health_check()
        }
        
        logger.info("Pipeline health check",
                   overall_healthy=all(health_status.values()),
                   component_status=health_status)
        return health_status
    
    def _failure(self, message: str, error: Exception, statistics: ProcessingStatistics, start: float) -> ProcessingResult:
        statistics.processing_time_ms = _elapsed_ms(start)
        logger.error(message, error=str(error), error_type=type(error).__name__)
        return ProcessingResult(
            success=False,
            message=message,
            error=str(error),
            statistics=statistics
        )
