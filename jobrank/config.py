"""
Settings and pipeline assembly.

Settings are layered: dataclass defaults, then an optional YAML file,
then environment variables (a ``.env`` file in the working directory is
loaded first).  :func:`build_pipeline` turns settings into a
:class:`~jobrank.rank.pipeline.RankingPipeline`, choosing a real client
or a null implementation for every collaborator.

Recognised environment variables::

    REDIS_URL                  Redis connection URL; in-process cache if unset
    JOBRANK_CACHE_TTL          cache TTL in seconds (600)
    JOBRANK_CACHE_MAX_ENTRIES  size of the in-process cache (1024)
    JOBRANK_EMBEDDINGS         none | hashing | openai
    JOBRANK_BACKFILL           fetch details for thin postings (true)
    JOBRANK_FETCH_TIMEOUT      detail fetch timeout in seconds (10)
    JOBRANK_LLM_TIMEOUT        LLM call timeout in seconds (30)
    LLM_PROVIDER               openai | gemini | placeholder
    OPENAI_API_KEY, OPENAI_MODEL
    GEMINI_API_KEY / GOOGLE_API_KEY, GEMINI_MODEL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Callable, Dict, Optional

import yaml  # type: ignore
from dotenv import load_dotenv

from .ingest.detail_fetcher import HttpDetailFetcher, JobDetailFetcher, NullDetailFetcher
from .rank.cache import DEFAULT_TTL_SECONDS, ResultCache, build_cache_store
from .rank.llm_providers import GeminiProvider, LLMProvider, OpenAIProvider, PlaceholderProvider
from .rank.pipeline import MAX_JOBS, RankingPipeline
from .rank.scorer import HybridScorer
from .resume.embed import get_embedding_provider

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    redis_url: Optional[str] = None
    cache_ttl: int = DEFAULT_TTL_SECONDS
    cache_max_entries: int = 1024
    embeddings: str = "none"
    backfill: bool = True
    fetch_timeout: float = 10.0
    llm_timeout: float = 30.0
    llm_provider: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-pro"
    max_jobs: int = MAX_JOBS


_ENV_VARS: Dict[str, tuple] = {
    "redis_url": ("REDIS_URL",),
    "cache_ttl": ("JOBRANK_CACHE_TTL",),
    "cache_max_entries": ("JOBRANK_CACHE_MAX_ENTRIES",),
    "embeddings": ("JOBRANK_EMBEDDINGS",),
    "backfill": ("JOBRANK_BACKFILL",),
    "fetch_timeout": ("JOBRANK_FETCH_TIMEOUT",),
    "llm_timeout": ("JOBRANK_LLM_TIMEOUT",),
    "llm_provider": ("LLM_PROVIDER",),
    "openai_api_key": ("OPENAI_API_KEY",),
    "openai_model": ("OPENAI_MODEL",),
    "gemini_api_key": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "gemini_model": ("GEMINI_MODEL",),
}

_CONVERTERS: Dict[str, Callable[[object], object]] = {
    "cache_ttl": int,
    "cache_max_entries": int,
    "max_jobs": int,
    "fetch_timeout": float,
    "llm_timeout": float,
    "backfill": lambda v: v if isinstance(v, bool) else str(v).strip().lower() in _TRUE,
}


def _apply(settings: Settings, name: str, value: object, source: str) -> None:
    convert = _CONVERTERS.get(name, lambda v: str(v).strip() or None)
    try:
        setattr(settings, name, convert(value))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s=%r from %s", name, value, source)


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML file whose top-level keys are :class:`Settings`
            field names.  Unknown keys are ignored with a warning.

    Returns:
        The merged settings; environment variables win over the file.
    """
    load_dotenv()
    settings = Settings()
    known = {f.name for f in fields(Settings)}

    if path:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        for key, value in data.items():
            if key not in known:
                logger.warning("Unknown config key '%s' in %s", key, path)
                continue
            if value is not None:
                _apply(settings, key, value, path)

    for name, env_names in _ENV_VARS.items():
        for env_name in env_names:
            value = os.getenv(env_name)
            if value is not None and value.strip():
                _apply(settings, name, value, env_name)
                break
    return settings


def build_llm_provider(settings: Settings) -> LLMProvider:
    """Pick the rerank provider from settings, falling back to the placeholder.

    An explicit ``llm_provider`` wins; otherwise the first provider with an
    API key is used (OpenAI before Gemini).
    """
    preferred = (settings.llm_provider or "").lower()
    candidates = []
    if preferred == "placeholder":
        return PlaceholderProvider()
    if preferred == "openai" or (not preferred and settings.openai_api_key):
        candidates.append("openai")
    if preferred == "gemini" or (not preferred and settings.gemini_api_key):
        candidates.append("gemini")
    if preferred and preferred not in ("openai", "gemini"):
        logger.warning("Unknown LLM provider '%s'; LLM rerank disabled", preferred)

    for name in candidates:
        try:
            if name == "openai":
                return OpenAIProvider(
                    api_key=settings.openai_api_key,
                    model=settings.openai_model,
                    timeout=settings.llm_timeout,
                )
            return GeminiProvider(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                timeout=settings.llm_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise %s provider: %s", name, exc)
    logger.info("No LLM provider configured; LLM rerank disabled")
    return PlaceholderProvider()


def build_pipeline(settings: Optional[Settings] = None) -> RankingPipeline:
    """Assemble a :class:`RankingPipeline` with collaborators chosen by ``settings``."""
    if settings is None:
        settings = load_settings()
    cache = ResultCache(
        build_cache_store(settings.redis_url, max_entries=settings.cache_max_entries),
        ttl_seconds=settings.cache_ttl,
    )
    fetcher: JobDetailFetcher = (
        HttpDetailFetcher(timeout=settings.fetch_timeout) if settings.backfill else NullDetailFetcher()
    )
    embedder = get_embedding_provider(
        settings.embeddings, api_key=settings.openai_api_key, timeout=settings.llm_timeout
    )
    scorer = HybridScorer(detail_fetcher=fetcher, embedder=embedder, cache=cache)
    provider = build_llm_provider(settings)
    logger.debug(
        "Pipeline: cache=%s fetcher=%s embedder=%s llm=%s",
        type(cache.store).__name__,
        type(fetcher).__name__,
        type(embedder).__name__,
        type(provider).__name__,
    )
    return RankingPipeline(scorer=scorer, llm_provider=provider, cache=cache, max_jobs=settings.max_jobs)
