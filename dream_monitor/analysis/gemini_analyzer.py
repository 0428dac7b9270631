"""
Gemini AI Analyzer for AI-and-Labor News

Uses Google's Gemini API to turn a batch of news articles into a structured
assessment of AI's impact on American workers.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..config import MAX_TEMPERATURE
from ..errors import ConfigurationError, ParseError, UpstreamError
from ..models import Article
from .prompts import build_system_prompt, build_user_prompt
from .schema import DEFAULT_SCHEMA, Assessment, SchemaVersion, parse_assessment

logger = logging.getLogger(__name__)


def _finish_reason(response: Any) -> Optional[str]:
    """Name of the first candidate's finish reason, e.g. STOP or MAX_TOKENS."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return getattr(reason, "name", str(reason))


class GeminiReportAnalyzer:
    """Requests and validates assessments from Gemini."""

    SOURCE_NAME = "Gemini API"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.3,
        max_output_tokens: int = 32_768,
        logs_dir: Optional[Path] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name
            temperature: Sampling temperature, at most 0.4
            max_output_tokens: Upper bound on response length
            logs_dir: Directory to save input/output logs (None disables them)
            client: Object exposing `generate_content(prompt, generation_config=...)`;
                built from `api_key` when omitted
        """
        if temperature > MAX_TEMPERATURE:
            raise ConfigurationError(f"temperature must be <= {MAX_TEMPERATURE}")

        self.model_name = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.logs_dir = logs_dir
        self.call_counter = 0

        if self.logs_dir is not None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)

        if client is not None:
            self.model = client
        elif api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model)
        else:
            self.model = None

    def _save_io_log(self, prompt: str, response: str, call_type: str) -> Optional[Path]:
        """Save input/output to a log file."""
        if self.logs_dir is None:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.call_counter += 1

        log_file = self.logs_dir / f"{timestamp}_{self.call_counter:03d}_{call_type}.json"

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "call_type": call_type,
            "model": self.model_name,
            "temperature": self.temperature,
            "input_prompt": prompt,
            "input_length_chars": len(prompt),
            "output_response": response,
            "output_length_chars": len(response),
        }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)

        return log_file

    def generation_config(self) -> genai.GenerationConfig:
        return genai.GenerationConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
        )

    def _call_gemini(self, prompt: str, call_type: str = "assessment") -> str:
        """
        Make a call to Gemini API with logging.

        Raises:
            ConfigurationError: If no API key/client is configured.
            UpstreamError: If the API rejects the call.
            ParseError: If the response carries no text.
        """
        if self.model is None:
            raise ConfigurationError("GEMINI_API_KEY not configured")

        logger.info(f"Sending prompt: {len(prompt):,} chars to {self.model_name}")

        try:
            response = self.model.generate_content(
                prompt,
                generation_config=self.generation_config(),
            )
        except google_exceptions.GoogleAPICallError as e:
            raise UpstreamError(self.SOURCE_NAME, int(e.code) if e.code is not None else None) from e
        except google_exceptions.GoogleAPIError as e:
            raise UpstreamError(self.SOURCE_NAME, None, f"{self.SOURCE_NAME} error: {e}") from e

        finish_reason = _finish_reason(response)
        try:
            response_text = response.text
        except ValueError as e:
            # Blocked or empty candidates
            logger.warning(f"Gemini returned no text (finish_reason={finish_reason})")
            raise ParseError(
                f"AI response contained no text (finish_reason={finish_reason}): {e}", ""
            ) from e

        logger.info(f"Received response: {len(response_text):,} chars (finish_reason={finish_reason})")
        if finish_reason not in (None, "STOP"):
            logger.warning(f"Gemini response may be truncated: finish_reason={finish_reason}")
        logger.debug(f"Raw Gemini response: {response_text}")

        log_file = self._save_io_log(prompt, response_text, call_type)
        if log_file is not None:
            logger.debug(f"Saved to: {log_file.name}")

        return response_text

    def complete(self, prompt: str, version: SchemaVersion = DEFAULT_SCHEMA) -> str:
        """Send a fully built prompt and return the raw model text."""
        return self._call_gemini(prompt, call_type=f"assessment_{version.value}")

    def build_prompt(self, articles: Sequence[Article], version: SchemaVersion = DEFAULT_SCHEMA) -> str:
        return f"{build_system_prompt(version)}\n\n{build_user_prompt(articles)}"

    def request_assessment(
        self,
        articles: Sequence[Article],
        version: SchemaVersion = DEFAULT_SCHEMA,
    ) -> str:
        """Send the article excerpt and return the raw model text."""
        return self.complete(self.build_prompt(articles, version), version)

    def assess(
        self,
        articles: Sequence[Article],
        version: SchemaVersion = DEFAULT_SCHEMA,
    ) -> Assessment:
        """Request and validate in one step."""
        return parse_assessment(self.request_assessment(articles, version), version)
