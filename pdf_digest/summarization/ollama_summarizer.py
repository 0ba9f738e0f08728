"""
Summarization of document subsections using the Ollama Python library.
"""

import re
from pathlib import Path
from typing import Optional
import ollama
import structlog

from ..core.config import settings
from ..core.exceptions import ConnectionCheckError, SummarizationError
from ..core.retry import RetryPolicy, SleepFunction, retry_with_policy, sleep_ms

logger = structlog.get_logger(__name__)


DEFAULT_SUB_SECTION_PROMPT = """I have several academic texts related to {subject}.

Your role is to act as an AI assistant that excels in understanding and summarizing academic content. Please generate a concise summary, or abstract, of each text. The summary should encapsulate the main points, arguments, and findings of the text, ideally not exceeding 200 words for each. Ensure that the summaries maintain the original text's tone and academic integrity while being accessible for quick review.

SUBJECT: {subject}
TITLE: {title}
CONTENT: {content}

{language_instruction}, adhering to the following guidelines:

1. Retain the key arguments and findings of the original text.
2. Ensure the summaries are free from personal interpretations or biases.
3. Maintain an objective and neutral language.
4. Each summary should be self-contained, understandable without the original text.
5. Preserve important concepts and technical terms.
6. Organize the summary in a clear and structured way.
7. **IMPORTANT: Format your response using Markdown syntax** (use ### for headings, **bold**, *italic*, numbered lists, bullet points, etc.).

Start by signaling the structure with headings for each main point or argument in the original text, followed by a brief paragraph explaining each.

I aim to use these summaries to efficiently review and prepare for an upcoming exam, so clarity and accuracy are paramount.
"""

DEFAULT_SIMPLE_PROMPT = """Your role is to act as an AI assistant that excels in understanding and summarizing content. Please generate a concise summary of the content below. The summary should encapsulate the main points, arguments, and findings, ideally not exceeding 200 words. Ensure that the summary maintains the original content's tone while being accessible for quick review.

CONTENT: {content}

{language_instruction}, adhering to the following guidelines:

1. Retain the key arguments and findings of the original content.
2. Ensure the summary is free from personal interpretations or biases.
3. Maintain an objective and neutral language.
4. The summary should be self-contained, understandable without the original content.
5. Preserve important concepts and technical terms.
6. Organize the summary in a clear and structured way.
7. **IMPORTANT: Format your response using Markdown syntax** (use ### for headings, **bold**, *italic*, numbered lists, bullet points, etc.).

I aim to use this summary to efficiently review content, so clarity and accuracy are paramount.
"""


def fill_prompt(template: str, **values: str) -> str:
    """Fill the named ``{placeholder}`` fields, leaving every other brace untouched."""
    pattern = re.compile(r"\{(" + "|".join(re.escape(name) for name in values) + r")\}")
    return pattern.sub(lambda match: values[match.group(1)], template)


def language_instruction(language: Optional[str]) -> str:
    """Instruction telling the model which language to answer in."""
    if language:
        return f"Please respond in {language}"
    return "Please respond in the same language as the content"


class OllamaSummarizer:
    """Subsection summarization through an Ollama endpoint, with retries."""
    
    def __init__(self, 
                 host: Optional[str] = None, 
                 model: Optional[str] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 client: Optional[ollama.AsyncClient] = None,
                 sleep: Optional[SleepFunction] = None):
        self.host = host or settings.ollama_host
        self.model = model or settings.summary_model
        self.retry_policy = retry_policy or settings.retry_policy
        self.sleep = sleep or sleep_ms
        
        # Configure Ollama client
        self.client = client or ollama.AsyncClient(host=self.host, timeout=settings.ollama_timeout)
        
        # Load prompt templates
        self.sub_section_prompt = self._load_prompt("sub_section_summary.md", DEFAULT_SUB_SECTION_PROMPT)
        self.simple_prompt = self._load_prompt("simple_summary.md", DEFAULT_SIMPLE_PROMPT)
    
    def _load_prompt(self, filename: str, default: str) -> str:
        """Load a prompt template override from the prompt directory."""
        prompt_path = Path(settings.prompt_dir) / filename
        if not prompt_path.is_file():
            return default
        
        try:
            return prompt_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to load prompt template", path=str(prompt_path), error=str(e))
            return default
    
    async def test_connection(self, prompt: Optional[str] = None) -> str:
        """
        Send a single probe prompt to the model.
        
        Args:
            prompt: Probe prompt, defaults to a short greeting
            
        Returns:
            The model's answer
            
        Raises:
            ConnectionCheckError: If the endpoint or model is unreachable
        """
        if prompt is None:
            if settings.output_language:
                prompt = f"Answer in {settings.output_language}: Hello!"
            else:
                prompt = "Hello!"
        
        logger.info("Testing Ollama connection", host=self.host, model=self.model)
        
        try:
            answer = await self._generate(prompt)
        except Exception as e:
            logger.error("Ollama connection failed", host=self.host, model=self.model, error=str(e))
            raise ConnectionCheckError(f"Ollama connection failed: {e}") from e
        
        logger.info("Ollama connection successful", response_length=len(answer))
        return answer
    
    async def generate_sub_section_summary(
        self, 
        title: str, 
        content: str, 
        subject: str, 
        language: Optional[str] = None
    ) -> str:
        """
        Summarize one subsection, retrying with exponential backoff.
        
        Raises:
            RetryExhaustedError: If every attempt failed
        """
        prompt = fill_prompt(
            self.sub_section_prompt,
            subject=subject,
            title=title,
            content=content,
            language_instruction=language_instruction(language)
        )
        return await self._generate_with_retry(prompt, f"generate subsection summary for {title}")
    
    async def generate_simple_summary(self, content: str, language: Optional[str] = None) -> str:
        """Summarize free-standing content, retrying with exponential backoff."""
        prompt = fill_prompt(
            self.simple_prompt,
            content=content,
            language_instruction=language_instruction(language)
        )
        logger.info("Generating simple summary", content_length=len(content))
        return await self._generate_with_retry(prompt, "generate simple summary")
    
    async def health_check(self) -> bool:
        """Check if the Ollama model answers a probe prompt."""
        try:
            await self.test_connection()
            return True
        except ConnectionCheckError:
            return False
    
    async def _generate_with_retry(self, prompt: str, operation_name: str) -> str:
        return await retry_with_policy(
            lambda: self._generate(prompt),
            operation_name,
            self.retry_policy,
            sleep=self.sleep
        )
    
    async def _generate(self, prompt: str) -> str:
        """Single non-streaming generate call."""
        response = await self.client.generate(
            model=self.model,
            prompt=prompt,
            stream=False
        )
        
        text = (response["response"] or "").strip()
        if not text:
            raise SummarizationError("Empty response from Ollama")
        return text
