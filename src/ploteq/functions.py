"""Named scalar functions and constants available inside expressions."""

from __future__ import annotations

import re

import numpy as np

NAN = float("nan")
TWO_PI = 2.0 * np.pi

CONSTANTS: dict[str, float] = {"pi": float(np.pi), "e": float(np.e)}

# Stripped in this order before variable detection; longer names come first
# so that e.g. "asin(" is not left behind as "a" by removing "sin(".
FUNCTION_TOKENS: tuple[str, ...] = (
    "ieeeremainder(",
    "remainder(",
    "truncate(",
    "randdec(",
    "randint(",
    "ceiling(",
    "random(",
    "round(",
    "floor(",
    "log10(",
    "asin(",
    "acos(",
    "atan(",
    "sinh(",
    "cosh(",
    "tanh(",
    "csch(",
    "sech(",
    "coth(",
    "sinc(",
    "sign(",
    "sqrt(",
    "rand",
    "abs(",
    "pow(",
    "min(",
    "max(",
    "exp(",
    "log(",
    "sin(",
    "cos(",
    "tan(",
    "csc(",
    "sec(",
    "cot(",
    "ln(",
    "pi",
)

RANDOM_FUNCTIONS: frozenset[str] = frozenset({"random", "randint", "randdec"})

_LONE_E = re.compile(r"(?<![a-z])e(?![a-z(])")


def strip_function_names(text: str) -> str:
    """Remove function names and named constants from expression text."""
    for token in FUNCTION_TOKENS:
        text = text.replace(token, "")
    return _LONE_E.sub("", text)


def uses_random(text: str) -> bool:
    return any(f"{name}(" in text for name in RANDOM_FUNCTIONS)


def _reduce(d):
    # Truncated remainder: keeps the sign of the argument
    return np.fmod(d, TWO_PI)


def _sign(d):
    if d > 0:
        return 1.0
    if d < 0:
        return -1.0
    return 0.0


def _round(d, digits=0):
    return np.round(d, int(digits))


def _ieee_remainder(d, e=NAN):
    return d - e * np.round(d / e)


def _log(d, e=NAN):
    if np.isnan(e):
        return np.log10(d)
    return np.log10(e) / np.log10(d)


def _sinc(d):
    if d == 0:
        return 1.0
    return np.sin(_reduce(d)) / d


class FunctionLibrary:
    """Function catalogue bound to one random generator.

    ``rng`` may be replaced between evaluations; the random functions look it
    up on every call.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()

    def functions(self) -> dict[str, object]:
        return {
            "abs": np.abs,
            "pow": lambda d, e=NAN: np.power(d, e),
            "sqrt": np.sqrt,
            "round": _round,
            "sign": _sign,
            "min": lambda d, e=NAN: np.minimum(d, e),
            "max": lambda d, e=NAN: np.maximum(d, e),
            "ceiling": np.ceil,
            "truncate": np.trunc,
            "exp": np.exp,
            "floor": np.floor,
            "remainder": _ieee_remainder,
            "ieeeremainder": _ieee_remainder,
            "ln": np.log,
            "log": _log,
            "log10": np.log10,
            "sin": lambda d: np.sin(_reduce(d)),
            "cos": lambda d: np.cos(_reduce(d)),
            "tan": lambda d: np.tan(_reduce(d)),
            "csc": lambda d: 1.0 / np.sin(_reduce(d)),
            "sec": lambda d: 1.0 / np.cos(_reduce(d)),
            "cot": lambda d: 1.0 / np.tan(_reduce(d)),
            "asin": lambda d: np.arcsin(_reduce(d)),
            "acos": lambda d: np.arccos(_reduce(d)),
            "atan": lambda d: np.arctan(_reduce(d)),
            "sinh": np.sinh,
            "cosh": np.cosh,
            "tanh": np.tanh,
            "csch": lambda d: 1.0 / np.sinh(d),
            "sech": lambda d: 1.0 / np.cosh(d),
            "coth": lambda d: 1.0 / np.tanh(d),
            "sinc": _sinc,
            "random": self.random,
            "randint": self.randint,
            "randdec": self.randdec,
        }

    def random(self, d=1.0):
        return self.rng.random() * d

    def randint(self, d, e):
        lo, hi = (d, e) if d < e else (e, d)
        return float(int(lo) + int((hi - lo + 1) * self.rng.random()))

    def randdec(self, d, e):
        lo, hi = (d, e) if d < e else (e, d)
        return lo + (hi - lo + 1) * self.rng.random()

    def install(self, symtable: dict) -> None:
        """Register constants and functions into an evaluator symbol table."""
        symtable.update(CONSTANTS)
        symtable.update(self.functions())
