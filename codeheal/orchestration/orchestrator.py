"""
Healing orchestrator: the main analyze→generate→apply→assess loop.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Sequence

from asgi_correlation_id.context import correlation_id
from ulid import ULID

from codeheal.core.config import settings
from codeheal.core.log import logger
from codeheal.core.tuning import HealingConfig, get_healing_config
from codeheal.diagnosis.analyzer import prioritize_defects
from codeheal.diagnosis.oracle import DefectOracle, OracleError, as_oracle
from codeheal.fixes import FixGenerator, SchemaRegistry, build_generators
from codeheal.orchestration.assessor import ImprovementAssessor
from codeheal.orchestration.convergence import healing_confidence, should_stop
from codeheal.orchestration.mutator import EditError, apply_fix
from codeheal.orchestration.ranker import rank_fixes
from codeheal.schema.defect import Defect
from codeheal.schema.fix import CandidateFix
from codeheal.schema.healing import Assessment, HealingResult, HealingStep, OracleResult, StopReason

__all__ = ("apply_fixes", "auto_heal", "get_fix_suggestions", "heal_batch")

OracleLike = DefectOracle | Callable[[str], Any]


async def auto_heal(
    text: str,
    oracle: OracleLike,
    *,
    config: HealingConfig | None = None,
    registry: SchemaRegistry | None = None,
    ai_client=None,
    generators: Sequence[FixGenerator] | None = None,
    cancel_event: asyncio.Event | None = None,
    session_id: str | None = None,
) -> HealingResult:
    """
    Heal ``text`` until the oracle reports no defects, no fix helps, or
    the iteration budget runs out.

    Never raises; oracle, generator and other failures end up in the
    returned result.
    """
    session_id = session_id or str(ULID())
    token = correlation_id.set(session_id)
    try:
        return await _run_session(
            session_id,
            text,
            as_oracle(oracle),
            config or get_healing_config(),
            registry,
            ai_client,
            generators,
            cancel_event,
        )
    finally:
        correlation_id.reset(token)


async def _run_session(
    session_id: str,
    text: str,
    oracle: DefectOracle,
    config: HealingConfig,
    registry: SchemaRegistry | None,
    ai_client,
    generators: Sequence[FixGenerator] | None,
    cancel_event: asyncio.Event | None,
) -> HealingResult:
    started = time.monotonic()
    assessor = ImprovementAssessor(oracle, timeout=config.oracle_timeout_seconds)

    current = text
    steps: list[HealingStep] = []
    stop_reason = StopReason.max_iterations
    iterations = 0
    # state of the iteration in progress, recorded as a partial step on failure
    defects: list[Defect] = []
    applied: list[CandidateFix] = []

    try:
        if generators is None:
            generators = build_generators(config, registry=registry, ai_client=ai_client)

        logger.info(
            f"Session {session_id}: starting auto-heal — "
            f"{len(text)} chars, generators={[g.name for g in generators]}, "
            f"max_iterations={config.max_iterations}"
        )

        for iteration in range(1, config.max_iterations + 1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Session {session_id}: cancelled before iteration {iteration}")
                stop_reason = StopReason.cancelled
                break
            iterations = iteration
            applied = []

            # 1. Analyze
            defects = await assessor.defects(current)
            if not defects:
                logger.info(f"Session {session_id}: no defects at iteration {iteration}")
                stop_reason = StopReason.converged
                break
            defects = prioritize_defects(defects)
            logger.info(
                f"Session {session_id}: iteration {iteration}/{config.max_iterations} — "
                f"{len(defects)} defects"
            )

            # 2-3. Generate, rank, apply and assess; regenerate after every accepted fix
            remaining = defects
            while remaining:
                ranked = rank_fixes(
                    await _generate(generators, remaining, current, config.generator_timeout_seconds)
                )
                accepted, healed, assessment = await _first_improving(ranked, current, assessor)
                if accepted is None:
                    break
                current = healed
                applied.append(accepted)
                remaining = prioritize_defects(assessment.remaining)
                logger.info(
                    f"Session {session_id}: accepted '{accepted.title}' ({accepted.source}) — "
                    f"{assessment.defects_before} → {assessment.defects_after} defects"
                )
                if _has_fresh_defects(remaining, defects):
                    # newly surfaced defects wait for the next Analyzing pass
                    logger.info(f"Session {session_id}: new defects surfaced, ending iteration {iteration}")
                    break

            # 4. Record and check stopping condition
            steps.append(_record_step(iteration, defects, applied))
            applied = []
            stop, reason = should_stop(steps, config.max_iterations, len(remaining))
            if stop:
                stop_reason = reason
                logger.info(f"Session {session_id}: stopping — {reason}")
                break

        final_defects = await assessor.defects(current)

    except OracleError as e:
        logger.error(f"Session {session_id}: oracle failure — {e}")
        if applied:
            steps.append(_record_step(iterations, defects, applied))
        return _failed_result(session_id, text, current, iterations, steps, StopReason.oracle_failure, str(e), started)
    except Exception as e:
        logger.exception(f"Session {session_id}: unexpected failure — {type(e).__name__}: {e}")
        if applied:
            steps.append(_record_step(iterations, defects, applied))
        return _failed_result(
            session_id, text, current, iterations, steps, StopReason.error, f"{type(e).__name__}: {e}", started
        )

    final = OracleResult(defects=final_defects)
    total_defects = sum(s.defects_found for s in steps)
    total_fixes = sum(s.fixes_applied for s in steps)
    result = HealingResult(
        session_id=session_id,
        success=final.success,
        original_text=text,
        healed_text=current,
        iterations=iterations,
        total_defects=total_defects,
        total_fixes_applied=total_fixes,
        steps=steps,
        final_oracle_result=final,
        confidence=healing_confidence(final.success, total_defects, total_fixes, len(steps)),
        stop_reason=stop_reason,
        duration_seconds=time.monotonic() - started,
    )
    logger.info(
        f"Session {session_id}: finished — success={result.success}, "
        f"iterations={result.iterations}, fixes={total_fixes}, "
        f"remaining={len(final_defects)}, reason={stop_reason}, confidence={result.confidence:.2f}"
    )
    return result


def _record_step(iteration: int, defects: list[Defect], applied: list[CandidateFix]) -> HealingStep:
    return HealingStep(
        iteration=iteration,
        defects_found=len(defects),
        fixes_applied=len(applied),
        text_changed=bool(applied),
        defects=defects,
        applied_fixes=applied,
    )


def _failed_result(
    session_id: str,
    text: str,
    current: str,
    iterations: int,
    steps: list[HealingStep],
    reason: StopReason,
    error: str,
    started: float,
) -> HealingResult:
    """A session that could not finish: keeps the last accepted text, zero confidence."""
    return HealingResult(
        session_id=session_id,
        success=False,
        original_text=text,
        healed_text=current,
        iterations=iterations,
        total_defects=sum(s.defects_found for s in steps),
        total_fixes_applied=sum(s.fixes_applied for s in steps),
        steps=steps,
        final_oracle_result=None,
        confidence=0.0,
        stop_reason=reason,
        duration_seconds=time.monotonic() - started,
        error=error,
    )


def _defect_key(defect: Defect) -> tuple:
    # positions shift as earlier lines are edited, so they are not part of the identity
    return defect.rule, defect.message, defect.severity


def _has_fresh_defects(remaining: list[Defect], reported: list[Defect]) -> bool:
    """True if ``remaining`` holds a defect the Analyzing pass did not report."""
    known = {_defect_key(d) for d in reported}
    return any(_defect_key(d) not in known for d in remaining)


async def _run_generator(generator: FixGenerator, defect: Defect, text: str, timeout: float) -> list[CandidateFix]:
    try:
        result = await asyncio.wait_for(generator.generate(defect, text), timeout=timeout)
        fixes = list(result or [])
    except Exception as e:
        logger.warning(f"Generator {generator.name} failed on '{defect.message}': {type(e).__name__}: {e}")
        return []

    valid = [fix for fix in fixes if isinstance(fix, CandidateFix)]
    if len(valid) != len(fixes):
        logger.warning(
            f"Generator {generator.name} returned {len(fixes) - len(valid)} invalid candidate(s) "
            f"for '{defect.message}', dropped"
        )
    return valid


async def _generate(
    generators: Sequence[FixGenerator],
    defects: list[Defect],
    text: str,
    timeout: float,
) -> list[CandidateFix]:
    """
    All generators for every defect, concatenated in defect then generator order.

    Generators are awaited one at a time; a session has no internal parallelism.
    """
    candidates: list[CandidateFix] = []
    for defect in defects:
        for generator in generators:
            candidates.extend(await _run_generator(generator, defect, text, timeout))
    return candidates


async def _first_improving(
    ranked: list[CandidateFix],
    text: str,
    assessor: ImprovementAssessor,
) -> tuple[CandidateFix | None, str, Assessment | None]:
    """Walk ranked fixes and return the first one that lowers the defect count."""
    for fix in ranked:
        try:
            candidate = apply_fix(text, fix)
        except EditError as e:
            logger.debug(f"Rejected '{fix.title}': {e}")
            continue
        if candidate == text:
            logger.debug(f"Rejected '{fix.title}': no change")
            continue
        assessment = await assessor.assess(text, candidate)
        if assessment.improved:
            return fix, candidate, assessment
        logger.debug(
            f"Rejected '{fix.title}': {assessment.defects_before} → {assessment.defects_after} defects"
        )
    return None, text, None


async def get_fix_suggestions(
    text: str,
    defects: list[Defect],
    *,
    config: HealingConfig | None = None,
    registry: SchemaRegistry | None = None,
    ai_client=None,
    generators: Sequence[FixGenerator] | None = None,
) -> list[CandidateFix]:
    """Ranked candidate fixes for ``defects`` against ``text``, without applying any."""
    config = config or get_healing_config()
    if generators is None:
        generators = build_generators(config, registry=registry, ai_client=ai_client)
    candidates = await _generate(generators, prioritize_defects(defects), text, config.generator_timeout_seconds)
    return rank_fixes(candidates)


async def apply_fixes(
    text: str,
    fixes: list[CandidateFix],
    oracle: OracleLike,
    *,
    timeout: float | None = None,
) -> str:
    """
    Apply ``fixes`` greedily in confidence order, keeping each one only if
    it lowers the defect count of the text so far.

    Oracle failures propagate as ``OracleError``.
    """
    assessor = ImprovementAssessor(as_oracle(oracle), timeout=timeout)
    current = text
    for fix in rank_fixes(fixes):
        try:
            candidate = apply_fix(current, fix)
        except EditError as e:
            logger.warning(f"Failed to apply fix '{fix.title}': {e}")
            continue
        assessment = await assessor.assess(current, candidate)
        if assessment.improved:
            current = candidate
            logger.debug(f"Applied fix '{fix.title}'")
        else:
            logger.debug(f"Skipped fix '{fix.title}' (no improvement)")
    return current


async def heal_batch(
    texts: Sequence[str],
    oracle: OracleLike,
    workers: int | None = None,
    **kwargs: Any,
) -> list[HealingResult]:
    """
    Heal independent texts concurrently, at most ``workers`` at a time.

    Results are returned in input order. Each session gets its own oracle memo.
    """
    semaphore = asyncio.Semaphore(workers or settings.BATCH_WORKERS)

    async def _heal_one(text: str) -> HealingResult:
        async with semaphore:
            return await auto_heal(text, oracle, **kwargs)

    return list(await asyncio.gather(*(_heal_one(t) for t in texts)))
