# prpromptbuilder/core/token_counter.py
"""
Token counts for an assembled prompt.

Two backends: a local tiktoken encoding (downloaded on first use) and the
Gemini `count_tokens` API from the optional `gemini` extra. Both fall back to
a length estimate when the backend cannot be reached.
"""

from typing import Optional, Union

import tiktoken
from loguru import logger

from .models import TokenBackend

DEFAULT_ENCODING = "cl100k_base"


def estimate_tokens(text: str) -> int:
    """Rough size used when no real encoder can be reached."""
    return max(1, len(text) // 4)


class TiktokenCounter:
    """
    Counts with a tiktoken encoding.

    `name` may be a model ("gpt-4o") or an encoding ("cl100k_base"); unknown
    names use `fallback_encoding`. The encoding is resolved once per counter.
    """

    def __init__(self, name: str, fallback_encoding: str = DEFAULT_ENCODING):
        self.name = name
        self.fallback_encoding = fallback_encoding
        self._encoding: Optional[tiktoken.Encoding] = None

    def _resolve_encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self.name)
            except KeyError:
                self._encoding = self._encoding_by_name()
        return self._encoding

    def _encoding_by_name(self) -> tiktoken.Encoding:
        try:
            return tiktoken.get_encoding(self.name)
        except ValueError:
            logger.warning(f"{self.name!r} is neither a model nor an encoding; using {self.fallback_encoding!r}")
            return tiktoken.get_encoding(self.fallback_encoding)

    def count(self, text: str) -> int:
        if not isinstance(text, str):
            raise TypeError("prompt text must be a string")
        try:
            encoding = self._resolve_encoding()
        except OSError as e:
            logger.warning(f"tiktoken encoding unavailable ({e}); estimating from length")
            return estimate_tokens(text)
        return len(encoding.encode(text))


class GeminiCounter:
    """Asks the Gemini API for the prompt's token count."""

    def __init__(self, model_name: str = "gemini-1.5-flash"):
        try:
            import google.generativeai as genai
        except ImportError as e:
            raise RuntimeError("Gemini token counting needs the 'gemini' extra (google-generativeai)") from e
        self._model = genai.GenerativeModel(model_name)

    def count(self, text: str) -> int:
        from google.api_core import exceptions as gexc
        try:
            return self._model.count_tokens(text).total_tokens
        except gexc.GoogleAPICallError as e:
            logger.warning(f"Gemini token count failed ({e}); estimating from length")
            return estimate_tokens(text)


def make_counter(backend: TokenBackend, model_name: str) -> Union[TiktokenCounter, GeminiCounter]:
    """Counter for the configured backend; raises ValueError for an unknown one."""
    if backend == "openai":
        return TiktokenCounter(model_name)
    if backend == "gemini":
        return GeminiCounter(model_name)
    raise ValueError(f"unknown token counter backend {backend!r}")
