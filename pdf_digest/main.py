"""
Main entry point for the PDF section digest system.
"""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
import structlog

from .core.config import settings
from .core.models import ProcessingRequest
from .orchestration import DocumentProcessingPipeline


def setup_logging():
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level.upper(), logging.INFO)
    )
    
    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-digest",
        description="Summarize a PDF section by section with a local Ollama model"
    )
    
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    
    # Process command
    process_parser = subparsers.add_parser('process', help='Summarize a PDF into a new PDF')
    process_parser.add_argument('input', type=Path, help='PDF file to process')
    process_parser.add_argument(
        '--section-pattern',
        default=settings.section_pattern,
        help=f'Section marker keyword (default: {settings.section_pattern})'
    )
    process_parser.add_argument(
        '--sub-section-pattern',
        default=settings.sub_section_pattern,
        help=f'Subsection marker keyword (default: {settings.sub_section_pattern})'
    )
    process_parser.add_argument('--title', help='Title of the exported document')
    process_parser.add_argument('--filename', help='Output filename inside the output directory')
    process_parser.add_argument(
        '--subject',
        default=settings.default_subject,
        help='Subject of the document, used in the prompt'
    )
    process_parser.add_argument('--language', help='Language of the summaries')
    
    # Summarize command
    summarize_parser = subparsers.add_parser('summarize', help='Summarize a text or HTML file')
    summarize_parser.add_argument('input', type=Path, help='File whose content is summarized')
    summarize_parser.add_argument('--language', help='Language of the summary')
    
    # Files command
    files_parser = subparsers.add_parser('files', help='List exported PDF files')
    files_parser.add_argument(
        '--path',
        metavar='NAME',
        help='Print the full path of one exported file instead of listing'
    )
    
    # Health check command
    subparsers.add_parser('health', help='Check system health')
    
    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    # Setup logging
    setup_logging()
    logger = structlog.get_logger(__name__)
    
    if args.command is None:
        parser.print_help()
        sys.exit(1)
    
    # Initialize pipeline
    pipeline = DocumentProcessingPipeline()
    
    if args.command == 'process':
        request = ProcessingRequest(
            section_pattern=args.section_pattern,
            sub_section_pattern=args.sub_section_pattern,
            document_title=args.title,
            filename=args.filename,
            subject=args.subject,
            language=args.language
        )
        result = asyncio.run(pipeline.process(args.input, request))
        
        print(f"\n=== {result.message} ===")
        if result.output_path:
            print(f"Output: {result.output_path}")
        if result.statistics:
            stats = result.statistics
            print(f"Sections: {stats.total_sections}")
            print(f"Subsections: {stats.total_sub_sections}")
            print(f"Successful summaries: {stats.successful_summaries}")
            print(f"Processing time: {stats.processing_time_ms} ms")
        if result.error:
            print(f"Error: {result.error}")
        
        sys.exit(0 if result.success else 1)
    
    elif args.command == 'summarize':
        try:
            content = args.input.read_text(encoding='utf-8')
        except OSError as e:
            logger.error("Failed to read input file", path=str(args.input), error=str(e))
            sys.exit(1)
        
        result = asyncio.run(pipeline.summarize_content(content, args.language))
        if result.success:
            print(result.summary)
            sys.exit(0)
        
        print(f"❌ {result.error}")
        sys.exit(1)
    
    elif args.command == 'files':
        if args.path:
            try:
                print(pipeline.exporter.resolve_file(args.path))
            except (FileNotFoundError, PermissionError) as e:
                logger.error("File lookup failed", filename=args.path, error=str(e))
                print(f"❌ {e}")
                sys.exit(1)
            sys.exit(0)
        
        files = pipeline.exporter.list_files()
        
        print(f"\n=== Exported Files ({len(files)}) ===")
        for info in files:
            print(f"• {info.filename}  {info.size} bytes  {info.created.isoformat(timespec='seconds')}")
    
    elif args.command == 'health':
        logger.info("Running health checks")
        health_status = asyncio.run(pipeline.health_check())
        
        print("\n=== System Health Check ===")
        for component, status in health_status.items():
            status_icon = "✅" if status else "❌"
            print(f"{status_icon} {component.replace('_', ' ').title()}: {'OK' if status else 'FAILED'}")
        
        all_healthy = all(health_status.values())
        print(f"\nOverall Status: {'✅ HEALTHY' if all_healthy else '❌ ISSUES DETECTED'}")
        
        sys.exit(0 if all_healthy else 1)


if __name__ == "__main__":
    main()
