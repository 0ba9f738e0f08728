"""
Two-level section detection driven by marker keywords.

A marker line starts with a keyword (case-insensitive), whitespace and a
run of digits, e.g. ``Unit 3`` or ``lesson 12: Vectors``. Detection is a
single fold over the lines of the text; every step returns a new
``_ParseState`` instead of mutating parser fields.
"""

import re
from functools import reduce
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple
import structlog

from ..core.models import Section, SubSection

logger = structlog.get_logger(__name__)


def compile_marker(keyword: str) -> "re.Pattern[str]":
    """Compile ``keyword`` into a line-start marker matcher capturing the number."""
    if not keyword or not keyword.strip():
        raise ValueError("Marker keyword must not be empty")
    return re.compile(rf"^{re.escape(keyword.strip())}\s+(\d+)", re.IGNORECASE)


# Finished items as (item, previous) pairs, newest first
_Chain = Optional[Tuple[Any, Any]]


def _unwind(chain: _Chain) -> list:
    """Turn a chain into a list in insertion order."""
    items = []
    while chain is not None:
        item, chain = chain
        items.append(item)
    items.reverse()
    return items


class _OpenSection(NamedTuple):
    number: int
    title: str
    sub_sections: _Chain = None


class _OpenSubSection(NamedTuple):
    number: int
    title: str
    # Body is the contiguous line range [body_start, body_end)
    body_start: int
    body_end: int


class _ParseState(NamedTuple):
    sections: _Chain = None
    section: Optional[_OpenSection] = None
    sub_section: Optional[_OpenSubSection] = None
    orphan_markers: int = 0


class SectionDetector:
    """Splits text into sections and subsections using two marker keywords."""
    
    def __init__(self, section_keyword: str = "Unit", sub_section_keyword: str = "Lesson"):
        """
        Initialize the detector.
        
        Args:
            section_keyword: Keyword opening a top-level section
            sub_section_keyword: Keyword opening a subsection
        """
        self.section_keyword = section_keyword
        self.sub_section_keyword = sub_section_keyword
        self.section_pattern = compile_marker(section_keyword)
        self.sub_section_pattern = compile_marker(sub_section_keyword)
    
    def detect_sections(self, text: str) -> List[Section]:
        """
        Detect the section hierarchy of ``text`` in document order.
        
        Lines before the first subsection of a section, and subsection
        markers seen before any section marker, are discarded.
        
        Args:
            text: Full extracted document text
            
        Returns:
            Ordered list of sections with their subsections
        """
        if not text:
            return []
        
        lines = text.split("\n")
        
        def step(state: _ParseState, indexed_line: Tuple[int, str]) -> _ParseState:
            return self._step(state, indexed_line, lines)
        
        final_state = reduce(step, enumerate(lines), _ParseState())
        final_state = self._close_section(self._close_sub_section(final_state, lines))
        
        if final_state.orphan_markers:
            logger.warning("Ignored subsection markers before any section",
                          count=final_state.orphan_markers,
                          sub_section_keyword=self.sub_section_keyword)
        
        sections = _unwind(final_state.sections)
        logger.info("Detected document structure",
                   sections=len(sections),
                   sub_sections=sum(len(s.sub_sections) for s in sections))
        
        return sections
    
    def _step(self, state: _ParseState, indexed_line: Tuple[int, str], lines: Sequence[str]) -> _ParseState:
        """Advance the parse by one line."""
        index, line = indexed_line
        
        section_match = self.section_pattern.match(line)
        if section_match:
            state = self._close_section(self._close_sub_section(state, lines))
            return state._replace(
                section=_OpenSection(int(section_match.group(1)), line.strip()),
                sub_section=None
            )
        
        sub_section_match = self.sub_section_pattern.match(line)
        if sub_section_match:
            if state.section is None:
                logger.debug("Subsection marker without section", line=line.strip())
                return state._replace(orphan_markers=state.orphan_markers + 1)
            
            state = self._close_sub_section(state, lines)
            return state._replace(
                sub_section=_OpenSubSection(
                    int(sub_section_match.group(1)),
                    line.strip(),
                    index + 1,
                    index + 1
                )
            )
        
        if state.sub_section is not None:
            return state._replace(sub_section=state.sub_section._replace(body_end=index + 1))
        
        return state
    
    def _close_sub_section(self, state: _ParseState, lines: Sequence[str]) -> _ParseState:
        """Finalize the open subsection into the open section."""
        if state.sub_section is None or state.section is None:
            return state
        
        open_sub = state.sub_section
        content = "\n".join(lines[open_sub.body_start:open_sub.body_end]).strip()
        finished = SubSection(number=open_sub.number, title=open_sub.title, content=content)
        
        return state._replace(
            section=state.section._replace(
                sub_sections=(finished, state.section.sub_sections)
            ),
            sub_section=None
        )
    
    def _close_section(self, state: _ParseState) -> _ParseState:
        """Append the open section to the detected sections."""
        if state.section is None:
            return state
        
        open_section = state.section
        finished = Section(
            number=open_section.number,
            title=open_section.title,
            sub_sections=_unwind(open_section.sub_sections)
        )
        return state._replace(sections=(finished, state.sections), section=None)


def detect_sections(text: str, section_pattern: str, sub_section_pattern: str) -> List[Section]:
    """Detect sections in ``text`` using the given marker keywords."""
    return SectionDetector(section_pattern, sub_section_pattern).detect_sections(text)
