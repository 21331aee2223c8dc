"""Expression evaluation on top of asteval."""

from __future__ import annotations

import ast
import logging
import math
from typing import Iterable, Mapping

import numpy as np
from asteval import Interpreter

from ploteq.functions import CONSTANTS, FunctionLibrary

logger = logging.getLogger(__name__)


def to_python_syntax(expression: str) -> str:
    """Translate calculator notation to Python syntax (``^`` means power)."""
    return expression.replace("^", "**")


class Evaluator:
    """One asteval interpreter with the function library installed.

    An evaluator is not thread-safe; give each worker thread its own.
    """

    def __init__(
        self,
        expression: str,
        *,
        rng: np.random.Generator | None = None,
        constants: Mapping[str, float] | None = None,
    ) -> None:
        self.expression = expression
        self.source = to_python_syntax(expression)
        self.library = FunctionLibrary(rng)
        self._interpreter = Interpreter(use_numpy=False)
        self.library.install(self._interpreter.symtable)
        self._constants = dict(constants or {})
        self._interpreter.symtable.update(self._constants)

    @property
    def rng(self) -> np.random.Generator:
        return self.library.rng

    @rng.setter
    def rng(self, value: np.random.Generator) -> None:
        self.library.rng = value

    def evaluate(self, bindings: Mapping[str, float]) -> float:
        """Evaluate with the given variable values.

        Arithmetic follows IEEE rules: division by zero gives an infinity and
        invalid operations give NaN. Any evaluator error also gives NaN.
        """
        interp = self._interpreter
        for name, value in bindings.items():
            interp.symtable[name] = np.float64(value)
        with np.errstate(all="ignore"):
            result = interp.eval(self.source, show_errors=False)
        if interp.error:
            logger.debug(f"Evaluation of {self.expression!r} failed at {dict(bindings)}")
            return math.nan
        if result is None or isinstance(result, (str, bytes)):
            return math.nan
        try:
            return float(result)
        except (TypeError, ValueError):
            return math.nan

    def syntax_errors(self) -> list[str]:
        """Parse without evaluating; return error messages, empty when valid."""
        _, errors = self._parse()
        return errors

    def unknown_names(self, variables: Iterable[str] = ()) -> list[str]:
        """Names that are neither a library function, a constant nor one of ``variables``.

        Such a name would fail at every sample, so the expression is rejected
        up front. An expression that does not parse has no unknown names;
        ``syntax_errors`` reports it instead.
        """
        tree, errors = self._parse()
        if errors:
            return []
        known = set(CONSTANTS) | set(self.library.functions()) | set(self._constants)
        known.update(variables)
        found = {node.id for node in ast.walk(tree) if isinstance(node, ast.Name)}
        return sorted(found - known)

    def _parse(self) -> tuple[ast.Module | None, list[str]]:
        interp = self._interpreter
        interp.error = []
        try:
            tree = interp.parse(self.source)
        except Exception as e:
            messages = [_error_message(err) for err in interp.error]
            return None, messages or [str(e) or type(e).__name__]
        if interp.error:
            return None, [_error_message(err) for err in interp.error]
        if tree is None:
            return None, [f"Cannot parse {self.expression!r}"]
        body = getattr(tree, "body", None)
        if not body or len(body) != 1 or not isinstance(body[0], ast.Expr):
            return None, [f"{self.expression!r} is not a single expression"]
        return tree, []


def _error_message(err: object) -> str:
    msg = getattr(err, "msg", None)
    return str(msg) if msg else str(err)
