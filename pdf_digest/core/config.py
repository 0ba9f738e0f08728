"""
Configuration management for the PDF section digest system.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings

from .retry import RetryPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Ollama Configuration
    ollama_host: str = Field("http://localhost:11434", alias="OLLAMA_HOST")
    summary_model: str = Field("granite3.3", alias="SUMMARY_MODEL")
    # No request timeout unless configured; a hung call stalls the run
    ollama_timeout: Optional[float] = Field(None, alias="OLLAMA_TIMEOUT")
    output_language: Optional[str] = Field(None, alias="OUTPUT_LANGUAGE")
    
    # Retry Configuration
    max_retries: int = Field(3, ge=1, alias="MAX_RETRIES")
    retry_base_delay_ms: float = Field(1000, ge=0, alias="RETRY_BASE_DELAY")
    
    # Processing defaults
    default_subject: str = Field("academic content", alias="DEFAULT_SUBJECT")
    section_pattern: str = Field("Unit", alias="SECTION_PATTERN")
    sub_section_pattern: str = Field("Lesson", alias="SUB_SECTION_PATTERN")
    
    # Directory paths
    output_dir: str = Field("pdf-output", alias="OUTPUT_DIRECTORY")
    prompt_dir: str = Field("prompts", alias="PROMPT_DIR")
    
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    
    class Config:
        env_file = ".env"
        extra = "ignore"
    
    @property
    def output_path(self) -> Path:
        """Get the directory exported PDFs are written to."""
        return Path(self.output_dir)
    
    @property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy applied to every remote summarization call."""
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_ms=self.retry_base_delay_ms
        )


# Global settings instance
settings = Settings()
