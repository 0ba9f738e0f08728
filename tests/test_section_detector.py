"""
Tests for hierarchical section detection.
"""
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

import time
import pytest
from pdf_digest.detection import SectionDetector, compile_marker, detect_sections


class TestSectionDetector:
    """Test suite for SectionDetector"""
    
    @pytest.fixture
    def detector(self):
        """Detector using the default Unit/Lesson keywords"""
        return SectionDetector("Unit", "Lesson")
    
    @pytest.fixture
    def sample_text(self):
        return "Unit 1\nLesson 1\nHello\nLesson 2\nWorld\nUnit 2\nLesson 1\nBye"
    
    def test_detects_two_level_hierarchy(self, detector, sample_text):
        sections = detector.detect_sections(sample_text)
        
        assert len(sections) == 2, "Should detect two sections"
        assert [s.number for s in sections] == [1, 2]
        assert [sub.content for sub in sections[0].sub_sections] == ["Hello", "World"]
        assert [sub.content for sub in sections[1].sub_sections] == ["Bye"]
        assert all(s.summary is None for s in sections), "Summaries are filled later"
    
    def test_titles_are_trimmed_marker_lines(self, detector):
        sections = detector.detect_sections("Unit 3: Vectors  \n  \nLesson 7 - Dot product\nbody")
        
        assert sections[0].title == "Unit 3: Vectors"
        assert sections[0].number == 3
        assert sections[0].sub_sections[0].title == "Lesson 7 - Dot product"
        assert sections[0].sub_sections[0].number == 7
    
    def test_empty_text_yields_no_sections(self, detector):
        assert detector.detect_sections("") == []
    
    def test_section_without_sub_sections(self, detector):
        sections = detector.detect_sections("Intro text\nUnit 1\nsome text\nmore text")
        
        assert len(sections) == 1
        assert sections[0].sub_sections == []
    
    def test_sub_section_before_any_section_is_ignored(self, detector):
        sections = detector.detect_sections("Lesson 1\norphan content\nmore orphan")
        
        assert sections == [], "Orphan subsection markers must not create sections"
    
    def test_orphan_sub_section_content_is_discarded(self, detector):
        sections = detector.detect_sections("Lesson 1\norphan\nUnit 1\nLesson 2\nkept")
        
        assert len(sections) == 1
        assert len(sections[0].sub_sections) == 1
        assert sections[0].sub_sections[0].number == 2
        assert sections[0].sub_sections[0].content == "kept"
    
    def test_content_before_first_sub_section_is_discarded(self, detector):
        sections = detector.detect_sections("Unit 1\npreamble\nLesson 1\nbody")
        
        assert sections[0].sub_sections[0].content == "body"
    
    def test_content_is_trimmed_newline_join(self, detector):
        text = "Unit 1\nLesson 1\n\n  first line\n\nsecond line  \n\nLesson 2\n"
        sections = detector.detect_sections(text)
        
        first, second = sections[0].sub_sections
        assert first.content == "first line\n\nsecond line"
        assert second.content == "", "Marker at end of input yields empty content"
    
    def test_markers_are_case_insensitive(self, detector):
        sections = detector.detect_sections("UNIT 1\nlesson 1\nx\nLeSsOn 2\ny")
        
        assert len(sections) == 1
        assert len(sections[0].sub_sections) == 2
    
    def test_marker_requires_whitespace_and_digits(self, detector):
        text = "Unit 1\nLesson 1\nLessons learned\nLesson one\nLesson\t4\nbody"
        sections = detector.detect_sections(text)
        
        subs = sections[0].sub_sections
        assert [s.number for s in subs] == [1, 4]
        assert subs[0].content == "Lessons learned\nLesson one"
    
    def test_marker_must_start_the_line(self, detector):
        sections = detector.detect_sections("Unit 1\nLesson 1\nsee Lesson 2 below\n  Lesson 3")
        
        subs = sections[0].sub_sections
        assert len(subs) == 1
        assert subs[0].content == "see Lesson 2 below\n  Lesson 3"
    
    def test_section_marker_takes_precedence(self):
        detector = SectionDetector("Part", "Part")
        sections = detector.detect_sections("Part 1\nPart 2\ntext")
        
        assert len(sections) == 2
        assert all(s.sub_sections == [] for s in sections)
    
    def test_duplicate_and_unordered_numbers_are_kept(self, detector):
        text = "Unit 2\nLesson 5\na\nLesson 5\nb\nUnit 1\nLesson 3\nc"
        sections = detector.detect_sections(text)
        
        assert [s.number for s in sections] == [2, 1]
        assert [sub.number for sub in sections[0].sub_sections] == [5, 5]
    
    def test_sub_section_titles_follow_document_order(self, detector):
        text = "Unit 1\n" + "\n".join(f"Lesson {n}\nbody {n}" for n in (4, 1, 3, 2))
        sections = detector.detect_sections(text)
        
        titles = [sub.title for sub in sections[0].sub_sections]
        assert titles == ["Lesson 4", "Lesson 1", "Lesson 3", "Lesson 2"]
    
    def test_sub_section_count_matches_markers_after_first_section(self, detector):
        text = "\n".join([
            "Lesson 1", "x",
            "Unit 1", "Lesson 1", "a", "Lesson 2",
            "Unit 2",
            "Unit 3", "Lesson 1", "b", "Lesson 2", "c", "Lesson 3",
        ])
        sections = detector.detect_sections(text)
        
        assert sum(len(s.sub_sections) for s in sections) == 5
        assert [len(s.sub_sections) for s in sections] == [2, 0, 3]
    
    def test_custom_keywords_are_matched_literally(self):
        detector = SectionDetector("Chapter", "Sec.")
        sections = detector.detect_sections("Chapter 1\nSec. 1\nbody\nSecX 2\nmore")
        
        assert len(sections[0].sub_sections) == 1
        assert sections[0].sub_sections[0].content == "body\nSecX 2\nmore"
    
    def test_detection_time_grows_linearly_with_markers(self, detector):
        def best_time(count):
            text = "Unit 1\n" + "".join(f"Lesson {i}\nbody {i}\n" for i in range(count))
            timings = []
            for _ in range(2):
                start = time.perf_counter()
                sections = detector.detect_sections(text)
                timings.append(time.perf_counter() - start)
            assert len(sections[0].sub_sections) == count
            return min(timings)
        
        small = best_time(10000)
        large = best_time(40000)
        
        # Four times the markers; quadratic growth would be about sixteen times slower
        assert large < small * 8, f"10k markers: {small:.3f}s, 40k markers: {large:.3f}s"
    
    def test_detect_sections_function(self, sample_text):
        sections = detect_sections(sample_text, "Unit", "Lesson")
        
        assert len(sections) == 2
        assert sections[1].sub_sections[0].title == "Lesson 1"


class TestCompileMarker:
    """Test suite for marker compilation"""
    
    def test_captures_number(self):
        match = compile_marker("Unit").match("unit   42 Introduction")
        
        assert match is not None
        assert match.group(1) == "42"
    
    def test_rejects_empty_keyword(self):
        with pytest.raises(ValueError):
            compile_marker("  ")
