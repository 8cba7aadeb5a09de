"""
Defect oracle adapters.

An oracle is anything exposing ``validate(text)`` that returns a defect
list, synchronously or as an awaitable. Oracles must be side-effect free
and deterministic for a fixed input; the improvement assessment relies on it.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterable, Protocol, runtime_checkable

from codeheal.core.cache import make_cache_key
from codeheal.core.log import logger
from codeheal.schema.defect import Defect

__all__ = (
    "CallableOracle",
    "CompositeOracle",
    "DefectOracle",
    "MemoizedOracle",
    "OracleError",
    "as_oracle",
    "run_oracle",
)


class OracleError(RuntimeError):
    """The oracle crashed, timed out or returned something that is not a defect list."""


@runtime_checkable
class DefectOracle(Protocol):
    def validate(self, text: str) -> list[Defect] | Awaitable[list[Defect]]: ...


class CallableOracle:
    """Adapt a plain ``fn(text) -> defects`` (sync or async) to the oracle contract."""

    def __init__(self, fn: Callable[[str], Any], name: str | None = None):
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "oracle")

    def validate(self, text: str) -> Any:
        return self._fn(text)


class CompositeOracle:
    """Concatenate the defects of several oracles, in oracle order."""

    def __init__(self, *oracles: DefectOracle | Callable[[str], Any]):
        self.oracles = [as_oracle(o) for o in oracles]

    async def validate(self, text: str) -> list[Defect]:
        defects: list[Defect] = []
        for oracle in self.oracles:
            defects.extend(await _call(oracle, text))
        return defects


class MemoizedOracle:
    """
    Per-session memo over a deterministic oracle.

    Must not be shared between sessions; each ``auto_heal`` call wraps
    its oracle in a fresh instance.
    """

    def __init__(self, oracle: DefectOracle):
        self.oracle = oracle
        self._memo: dict[str, list[Defect]] = {}
        self.calls = 0

    async def validate(self, text: str) -> list[Defect]:
        key = make_cache_key(text)
        cached = self._memo.get(key)
        if cached is not None:
            return list(cached)
        self.calls += 1
        defects = await _call(self.oracle, text)
        self._memo[key] = defects
        return list(defects)


def as_oracle(oracle: DefectOracle | Callable[[str], Any]) -> DefectOracle:
    if isinstance(oracle, DefectOracle):
        return oracle
    if callable(oracle):
        return CallableOracle(oracle)
    raise TypeError(f"Not a defect oracle: {oracle!r}")


async def run_oracle(oracle: DefectOracle, text: str, timeout: float | None = None) -> list[Defect]:
    """
    Invoke an oracle under a timeout.

    Any failure surfaces as ``OracleError``.
    """
    try:
        if timeout:
            return await asyncio.wait_for(_call(oracle, text), timeout=timeout)
        return await _call(oracle, text)
    except OracleError:
        raise
    except asyncio.TimeoutError as exc:
        raise OracleError(f"oracle timed out after {timeout}s") from exc
    except Exception as exc:
        logger.error(f"Oracle raised {type(exc).__name__}: {exc}")
        raise OracleError(f"oracle failed: {type(exc).__name__}: {exc}") from exc


async def _call(oracle: DefectOracle, text: str) -> list[Defect]:
    result = oracle.validate(text)
    if inspect.isawaitable(result):
        result = await result
    return _coerce(result)


def _coerce(result: Iterable[Any] | None) -> list[Defect]:
    if result is None:
        return []
    try:
        return [d if isinstance(d, Defect) else Defect.model_validate(d) for d in result]
    except Exception as exc:
        raise OracleError(f"oracle returned an invalid defect list: {exc}") from exc
