"""
Rule-based fix generator: deterministic edit templates keyed by rule id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from codeheal.core.log import logger
from codeheal.fixes.base import FixGenerator
from codeheal.schema.defect import Defect, Position
from codeheal.schema.fix import CandidateFix, EditKind, GeneratorKind, TextEdit
from codeheal.util.text import extract_quoted_name, split_lines

__all__ = ("RULES", "RULE_ALIASES", "RuleBasedGenerator", "canonical_rule")

_MISSING_NAME_RE = r"(?:Cannot find name|undefined name)\s+['\"`]([^'\"`]+)['\"`]"

_BRACKETS = {"(": ")", "[": "]", "{": "}"}


@dataclass(frozen=True)
class RuleTemplate:
    title: str
    confidence: float
    build: Callable[["RuleBasedGenerator", Defect, list[str]], list[TextEdit] | None]
    needs_position: bool = True


RULE_ALIASES: dict[str, str] = {
    "no-unused-vars": "unused-binding",
    "@typescript-eslint/no-unused-vars": "unused-binding",
    "F401": "unused-binding",
    "unused-import": "unused-binding",
    "TS2304": "missing-binding",
    "F821": "missing-binding",
    "undefined-name": "missing-binding",
    "W291": "trailing-whitespace",
    "no-trailing-spaces": "trailing-whitespace",
}


def canonical_rule(rule: str | None) -> str | None:
    if rule is None:
        return None
    return RULE_ALIASES.get(rule, rule)


def _remove_line(gen: "RuleBasedGenerator", defect: Defect, lines: list[str]) -> list[TextEdit] | None:
    return [TextEdit(kind=EditKind.delete, start=Position(line=defect.line, column=1))]


def _add_binding(gen: "RuleBasedGenerator", defect: Defect, lines: list[str]) -> list[TextEdit] | None:
    name = extract_quoted_name(defect.message, _MISSING_NAME_RE) or extract_quoted_name(defect.message)
    if not name:
        return None
    binding = gen.binding_template.format(name=name)
    if binding in lines:
        return None
    return [TextEdit(kind=EditKind.insert, start=Position(line=1, column=1), text=f"{binding}\n")]


def _strip_trailing(gen: "RuleBasedGenerator", defect: Defect, lines: list[str]) -> list[TextEdit] | None:
    line = lines[defect.line - 1]
    stripped = line.rstrip()
    if stripped == line:
        return None
    return [TextEdit(kind=EditKind.replace, start=Position(line=defect.line, column=1), text=stripped)]


def _append_colon(gen: "RuleBasedGenerator", defect: Defect, lines: list[str]) -> list[TextEdit] | None:
    stripped = lines[defect.line - 1].rstrip()
    if not stripped or stripped.endswith(":"):
        return None
    return [TextEdit(kind=EditKind.replace, start=Position(line=defect.line, column=1), text=f"{stripped}:")]


def _close_brackets(gen: "RuleBasedGenerator", defect: Defect, lines: list[str]) -> list[TextEdit] | None:
    line = lines[defect.line - 1]
    closers = missing_closers(line)
    if not closers:
        return None
    return [TextEdit(kind=EditKind.replace, start=Position(line=defect.line, column=1), text=line.rstrip() + closers)]


RULES: dict[str, RuleTemplate] = {
    "unused-binding": RuleTemplate("Remove unused binding", 0.9, _remove_line),
    "missing-binding": RuleTemplate("Add missing binding", 0.8, _add_binding, needs_position=False),
    "trailing-whitespace": RuleTemplate("Strip trailing whitespace", 0.9, _strip_trailing),
    "missing-colon": RuleTemplate("Add missing colon", 0.7, _append_colon),
    "unclosed-bracket": RuleTemplate("Close open brackets", 0.6, _close_brackets),
}


def missing_closers(line: str) -> str:
    """Closing brackets needed to balance ``line``, innermost first. Quoted text is skipped."""
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in line:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "'\"`":
            quote = ch
        elif ch == "#":
            break
        elif ch in _BRACKETS:
            stack.append(_BRACKETS[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
    return "".join(reversed(stack))


class RuleBasedGenerator(FixGenerator):
    kind = GeneratorKind.rule_based

    def __init__(self, binding_template: str = "import {name}", rules: dict[str, RuleTemplate] | None = None):
        self.binding_template = binding_template
        self.rules = rules if rules is not None else RULES

    async def generate(self, defect: Defect, text: str) -> list[CandidateFix]:
        rule = canonical_rule(defect.rule)
        template = self.rules.get(rule) if rule else None
        if template is None:
            return []

        lines = split_lines(text)
        if template.needs_position and (defect.line is None or defect.line > len(lines)):
            logger.debug(f"Rule {rule}: no usable position in defect '{defect.message}'")
            return []

        edits = template.build(self, defect, lines)
        if not edits:
            return []

        where = f" on line {defect.line}" if defect.line else ""
        return [
            CandidateFix(
                title=f"{template.title}{where}",
                description=f"{rule}: {defect.message}",
                edits=edits,
                confidence=template.confidence,
                source=self.kind,
            )
        ]
