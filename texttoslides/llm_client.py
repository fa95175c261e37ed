import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, Type, TypeVar

import anthropic
from google import genai
from openai import OpenAI
from pydantic import BaseModel, ValidationError

from texttoslides.config import DEFAULT_MODELS
from texttoslides.errors import ProviderError, UnsupportedProviderError
from texttoslides.schemas import ContentAnalysis, ProviderConfig, SlideStructure
from texttoslides.utils import strip_code_fence

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ANALYSIS_PROMPT = """Analyze the following text and extract key information for creating a presentation.

Text: {text}
Guidance: {guidance}

Provide a structured analysis with:
1. A working title for the presentation
2. Main themes and topics (maximum 5)
3. Key supporting points for each theme
4. Important data, statistics, or examples
5. Natural content flow and logical structure
6. Conclusion or call-to-action elements
7. A recommended number of slides

Return ONLY a JSON object with this structure:
{{
    "title": "string",
    "themes": ["string"],
    "keyPoints": {{"<theme>": ["string"]}},
    "dataPoints": ["string"],
    "slideCount": number,
    "structure": "string",
    "conclusion": "string"
}}"""

STRUCTURE_PROMPT = """Based on the content analysis, create a detailed slide-by-slide outline.

Content Analysis: {analysis}
Guidance: {guidance}

Create an optimal slide structure with:
1. Recommended number of slides (3-15)
2. Slide titles and content hierarchy
3. Slide types (title, content, comparison, conclusion)
4. Content distribution for visual balance

Return ONLY a JSON object with this structure:
{{
    "totalSlides": number,
    "slides": [
        {{
            "slideNumber": number,
            "type": "title" | "content" | "comparison" | "conclusion",
            "title": "string",
            "content": ["bullet point"],
            "notes": "string"
        }}
    ]
}}"""


def parse_response(provider: str, raw: str, model_cls: Type[M]) -> M:
    """Parse a provider's text response into ``model_cls``, raising ProviderError on any failure."""
    if not raw or not raw.strip():
        raise ProviderError(provider, "Empty response body")
    try:
        payload = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise ProviderError(provider, f"Response is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ProviderError(provider, f"Expected a JSON object, got {type(payload).__name__}")
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        raise ProviderError(provider, f"Response does not match {model_cls.__name__}: {e}") from e


class ContentPlanner(ABC):
    """Turns raw text into a ContentAnalysis, then into a SlideStructure, via one LLM provider."""

    name = "base"

    def __init__(self, config: ProviderConfig):
        self.api_key = config.api_key
        self.model = config.model or DEFAULT_MODELS[self.name]

    @abstractmethod
    def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Send a single user prompt and return the response text."""

    def _call(self, prompt: str, temperature: float, max_tokens: int) -> str:
        logger.info(f"Calling {self.name} model {self.model}")
        try:
            return self.complete(prompt, temperature, max_tokens)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.name, f"Request failed: {e}") from e

    def analyze_text(self, text: str, guidance: str = "") -> ContentAnalysis:
        prompt = ANALYSIS_PROMPT.format(text=text, guidance=guidance or "")
        raw = self._call(prompt, temperature=0.3, max_tokens=2000)
        return parse_response(self.name, raw, ContentAnalysis)

    def generate_slide_structure(self, analysis: ContentAnalysis, guidance: str = "") -> SlideStructure:
        prompt = STRUCTURE_PROMPT.format(analysis=analysis.model_dump_json(by_alias=True), guidance=guidance or "")
        raw = self._call(prompt, temperature=0.2, max_tokens=3000)
        return parse_response(self.name, raw, SlideStructure)


class OpenAIPlanner(ContentPlanner):
    name = "openai"

    def __init__(self, config: ProviderConfig, client=None):
        super().__init__(config)
        self.client = client or OpenAI(api_key=self.api_key)

    def complete(self, prompt, temperature, max_tokens):
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content


class AnthropicPlanner(ContentPlanner):
    name = "anthropic"

    def __init__(self, config: ProviderConfig, client=None):
        super().__init__(config)
        self.client = client or anthropic.Anthropic(api_key=self.api_key)

    def complete(self, prompt, temperature, max_tokens):
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(block.text for block in response.content if getattr(block, "type", "text") == "text")


class GeminiPlanner(ContentPlanner):
    name = "gemini"

    def __init__(self, config: ProviderConfig, client=None):
        super().__init__(config)
        self.client = client or genai.Client(api_key=self.api_key)

    def complete(self, prompt, temperature, max_tokens):
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config={"temperature": temperature, "max_output_tokens": max_tokens},
        )
        return response.text


PROVIDERS: Dict[str, Type[ContentPlanner]] = {
    "openai": OpenAIPlanner,
    "anthropic": AnthropicPlanner,
    "gemini": GeminiPlanner,
}


def create_planner(config: ProviderConfig) -> ContentPlanner:
    try:
        planner_cls = PROVIDERS[config.provider]
    except KeyError:
        raise UnsupportedProviderError(config.provider) from None
    try:
        return planner_cls(config)
    except Exception as e:
        raise ProviderError(config.provider, f"Could not create client: {e}") from e
