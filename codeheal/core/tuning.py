"""Healing loop tuning passed explicitly into each session."""

from dataclasses import dataclass, replace
from typing import Any

from codeheal.core.config import settings

__all__ = ("HealingConfig", "get_healing_config")


@dataclass(frozen=True)
class HealingConfig:
    max_iterations: int = 5
    oracle_timeout_seconds: float = 30.0
    generator_timeout_seconds: float = 90.0
    # Schema-based generator
    similarity_threshold: float = 0.5  # strictly above this to be proposed
    max_schema_suggestions: int = 3
    # Rule-based generator
    binding_template: str = "import {name}"
    # AI-based generator
    use_ai: bool = True
    ai_model: str = "gemini-3-flash-preview"
    ai_context_lines: int = 20
    ai_timeout_seconds: float = 60.0
    ai_max_retries: int = 3
    # Analyzer
    repeated_pattern_threshold: int = 3
    many_errors_threshold: int = 5


def get_healing_config(**overrides: Any) -> HealingConfig:
    """Build a HealingConfig from settings, with keyword overrides on top."""
    config = HealingConfig(
        max_iterations=settings.MAX_HEALING_ITERATIONS,
        oracle_timeout_seconds=settings.ORACLE_TIMEOUT_SECONDS,
        generator_timeout_seconds=settings.GENERATOR_TIMEOUT_SECONDS,
        similarity_threshold=settings.SIMILARITY_THRESHOLD,
        max_schema_suggestions=settings.MAX_SCHEMA_SUGGESTIONS,
        binding_template=settings.BINDING_TEMPLATE,
        use_ai=settings.GOOGLE_API_KEY is not None,
        ai_model=settings.AI_MODEL,
        ai_context_lines=settings.AI_CONTEXT_LINES,
        ai_timeout_seconds=settings.AI_API_TIMEOUT_SECONDS,
        ai_max_retries=settings.AI_API_MAX_RETRIES,
        repeated_pattern_threshold=settings.REPEATED_PATTERN_THRESHOLD,
    )
    return replace(config, **overrides)
