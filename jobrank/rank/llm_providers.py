"""
Rerank LLM clients.

The rerank stage talks to a model through :class:`LLMProvider`:
:meth:`LLMProvider.judge` builds the recruiter prompt for a batch of
jobs, sends it with :meth:`LLMProvider.complete` and parses the JSON
reply.  Subclasses only implement ``complete`` for their API (OpenAI
chat completions or Gemini).  :class:`PlaceholderProvider` judges
nothing, which leaves every heuristic score as it was.

Providers are chosen from settings by
:func:`jobrank.config.build_llm_provider`; keys and model names are
passed in explicitly.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from .llm_schema import LLMJudgement, parse_judgements

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You return only valid JSON. No prose."
DEFAULT_TIMEOUT = 30.0
MAX_OUTPUT_TOKENS = 800


def build_rerank_prompt(resume_preview: str, jobs: Sequence[Dict[str, str]]) -> str:
    """Build the recruiter prompt for a batch of jobs.

    Args:
        resume_preview: Whitespace-collapsed résumé excerpt.
        jobs: Dicts with ``url``, ``title``, ``companyName`` and
            ``description`` keys.
    """
    lines = "\n".join(
        f"- {j['url']} | {j.get('title', '')} @ {j.get('companyName', '')} | {j.get('description', '')}"
        for j in jobs
    )
    return (
        "You are a senior recruiter. Score each job (0-100) for fit to the resume. "
        "Return STRICT JSON array of objects: "
        "{url, refineScore, fitReasons: string[1-3], fixSuggestions: string[1-3]}.\n\n"
        f"Resume:\n{resume_preview}\n\n"
        f"Jobs:\n{lines}"
    )


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def judge(self, resume_preview: str, jobs: Sequence[Dict[str, str]]) -> List[LLMJudgement]:
        """Judge the fit of a résumé to each job in one batched call.

        Returns:
            One :class:`LLMJudgement` per job the model scored.  Jobs the
            model skipped, or scored without a numeric ``refineScore``,
            are absent.

        Raises:
            Exception: Whatever the API client raises, or ``ValueError``
                when the reply is not a JSON array.  The rerank stage
                treats any exception as "keep the heuristic scores".
        """
        content = self.complete(SYSTEM_PROMPT, build_rerank_prompt(resume_preview, jobs))
        judgements = parse_judgements(content)
        logger.debug("%s judged %d of %d jobs", self.__class__.__name__, len(judgements), len(jobs))
        return judgements

    @abstractmethod
    def complete(self, system: str, prompt: str) -> str:
        """Send one system + user prompt and return the raw reply text."""
        raise NotImplementedError


class PlaceholderProvider(LLMProvider):
    """Fallback provider that does not call any external API."""

    def judge(self, resume_preview: str, jobs: Sequence[Dict[str, str]]) -> List[LLMJudgement]:
        return []

    def complete(self, system: str, prompt: str) -> str:
        return "[]"


class OpenAIProvider(LLMProvider):
    """Chat Completions client (``openai>=1``)."""

    def __init__(self, api_key: str | None, model: str = "gpt-4o-mini", timeout: float = DEFAULT_TIMEOUT) -> None:
        if not api_key:
            raise ValueError("OpenAI API key not configured")
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as exc:
            raise RuntimeError("the openai package is needed for LLM rerank with OpenAI") from exc
        self.model = model
        # single attempt
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, system: str, prompt: str) -> str:
        logger.debug("OpenAI %s rerank prompt (%d chars)", self.model, len(prompt))
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=0.2,
            max_tokens=MAX_OUTPUT_TOKENS,
        )
        return (response.choices[0].message.content or "").strip()


class GeminiProvider(LLMProvider):
    """Gemini client (``google-generativeai``)."""

    def __init__(self, api_key: str | None, model: str = "gemini-1.5-pro", timeout: float = DEFAULT_TIMEOUT) -> None:
        if not api_key:
            raise ValueError("Gemini API key not configured")
        try:
            import google.generativeai as genai  # type: ignore
        except ImportError as exc:
            raise RuntimeError("the google-generativeai package is needed for LLM rerank with Gemini") from exc
        genai.configure(api_key=api_key)
        self.genai = genai
        self.model = model
        self.timeout = timeout

    def complete(self, system: str, prompt: str) -> str:
        logger.debug("Gemini %s rerank prompt (%d chars)", self.model, len(prompt))
        model = self.genai.GenerativeModel(self.model, system_instruction=system)
        response = model.generate_content(
            prompt,
            generation_config={"temperature": 0.2, "max_output_tokens": MAX_OUTPUT_TOKENS},
            request_options={"timeout": self.timeout},
        )
        return (response.text or "").strip()
