"""Fix generators: rule-based, schema-based and AI-based strategies."""

from __future__ import annotations

from codeheal.core.ai import get_ai_client
from codeheal.core.tuning import HealingConfig
from codeheal.fixes.ai import AIFixGenerator
from codeheal.fixes.base import FixGenerator
from codeheal.fixes.rules import RuleBasedGenerator
from codeheal.fixes.schema import SchemaBasedGenerator, SchemaRegistry, StaticSchemaRegistry

__all__ = (
    "AIFixGenerator",
    "FixGenerator",
    "RuleBasedGenerator",
    "SchemaBasedGenerator",
    "SchemaRegistry",
    "StaticSchemaRegistry",
    "build_generators",
)


def build_generators(
    config: HealingConfig,
    registry: SchemaRegistry | None = None,
    ai_client=None,
) -> list[FixGenerator]:
    """
    The fixed generator list for one session: rule-based, then schema-based,
    then AI-based. The AI generator is included only when ``config.use_ai``
    is set and a client is available.
    """
    generators: list[FixGenerator] = [
        RuleBasedGenerator(binding_template=config.binding_template),
        SchemaBasedGenerator(
            registry,
            threshold=config.similarity_threshold,
            max_suggestions=config.max_schema_suggestions,
        ),
    ]
    if config.use_ai:
        client = ai_client if ai_client is not None else get_ai_client()
        if client is not None:
            generators.append(
                AIFixGenerator(
                    client,
                    model=config.ai_model,
                    context_lines=config.ai_context_lines,
                    timeout_seconds=config.ai_timeout_seconds,
                    max_retries=config.ai_max_retries,
                )
            )
    return generators
