"""
Reference oracle for Python source.

A small stand-in for a real type checker / linter pair, so the engine can
run end to end. It reports syntax errors, unused imports, undefined names
and trailing whitespace, using rule ids the rule-based generator knows.
"""

from __future__ import annotations

import ast
import builtins

from codeheal.schema.defect import Defect, Position, Severity
from codeheal.util.text import split_lines

__all__ = ("PythonSourceOracle",)

_BUILTIN_NAMES = frozenset(dir(builtins)) | {"__file__", "__name__", "__doc__", "__spec__", "__builtins__"}


class PythonSourceOracle:
    """Deterministic, side-effect free checks over one Python module."""

    def __init__(self, check_whitespace: bool = True):
        self.check_whitespace = check_whitespace

    def validate(self, text: str) -> list[Defect]:
        defects: list[Defect] = []
        try:
            tree = ast.parse(text)
        except SyntaxError as e:
            defects.append(_syntax_defect(e))
        else:
            defects.extend(_unused_imports(tree))
            defects.extend(_undefined_names(tree))

        if self.check_whitespace:
            defects.extend(_trailing_whitespace(text))

        return sorted(defects, key=lambda d: (d.line or 0, d.column or 0))


def _syntax_defect(e: SyntaxError) -> Defect:
    message = e.msg or "invalid syntax"
    lowered = message.lower()
    if "expected ':'" in lowered:
        rule = "missing-colon"
    elif "was never closed" in lowered or "unexpected eof" in lowered:
        rule = "unclosed-bracket"
    else:
        rule = "syntax-error"
    return Defect(
        message=message,
        severity=Severity.error,
        position=Position(line=max(e.lineno or 1, 1), column=max(e.offset or 1, 1)),
        rule=rule,
        fixable=rule != "syntax-error",
    )


def _loaded_names(tree: ast.AST) -> set[str]:
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Load, ast.Del)):
            names.add(node.id)
        elif isinstance(node, ast.Assign) and any(
            isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets
        ):
            # re-exports listed in __all__ count as used
            names.update(
                elt.value
                for elt in ast.walk(node.value)
                if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
            )
    return names


def _unused_imports(tree: ast.Module) -> list[Defect]:
    used = _loaded_names(tree)
    defects = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for alias in node.names:
            if alias.name == "*":
                continue
            bound = alias.asname or alias.name.split(".")[0]
            if bound in used:
                continue
            defects.append(
                Defect(
                    message=f"'{bound}' imported but unused",
                    severity=Severity.warning,
                    position=Position(line=node.lineno, column=node.col_offset + 1),
                    rule="unused-binding",
                    fixable=True,
                )
            )
    return defects


def _bound_names(tree: ast.AST) -> set[str]:
    bound: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
            bound.add(node.id)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            bound.add(node.name)
        elif isinstance(node, ast.arg):
            bound.add(node.arg)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                bound.add(alias.asname or alias.name.split(".")[0])
        elif isinstance(node, ast.ExceptHandler) and node.name:
            bound.add(node.name)
        elif isinstance(node, (ast.Global, ast.Nonlocal)):
            bound.update(node.names)
        elif isinstance(node, (ast.MatchAs, ast.MatchStar)) and node.name:
            bound.add(node.name)
    return bound


def _undefined_names(tree: ast.Module) -> list[Defect]:
    bound = _bound_names(tree) | _BUILTIN_NAMES
    seen: set[str] = set()
    defects = []
    for node in ast.walk(tree):
        if not (isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load)):
            continue
        if node.id in bound or node.id in seen:
            continue
        seen.add(node.id)
        defects.append(
            Defect(
                message=f"Cannot find name '{node.id}'",
                severity=Severity.error,
                position=Position(line=node.lineno, column=node.col_offset + 1),
                rule="missing-binding",
                fixable=True,
            )
        )
    return defects


def _trailing_whitespace(text: str) -> list[Defect]:
    defects = []
    for number, line in enumerate(split_lines(text), 1):
        stripped = line.rstrip()
        if stripped != line:
            defects.append(
                Defect(
                    message="Trailing whitespace",
                    severity=Severity.info,
                    position=Position(line=number, column=len(stripped) + 1),
                    rule="trailing-whitespace",
                    fixable=True,
                )
            )
    return defects
