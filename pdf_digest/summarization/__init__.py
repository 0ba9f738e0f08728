"""
Subsection summarization with a local Ollama model.
"""

from .ollama_summarizer import OllamaSummarizer

__all__ = ["OllamaSummarizer"]
