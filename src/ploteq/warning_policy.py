"""Coded diagnostics raised while generating a plot.

W01 and W02 summarise per-sample events: each is reported at most once per
sampling call and carries the number of samples it covers. W03 is reported
once per ``Equation.generate`` call.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Literal

from ploteq.errors import SamplingError

logger = logging.getLogger(__name__)

WARNING_CODES: dict[str, str] = {
    "W01": "non-finite surface samples replaced by finite values",
    "W02": "samples clamped to max_values",
    "W03": "random functions used without a seed",
}
KNOWN_CODES: frozenset[str] = frozenset(WARNING_CODES)

Action = Literal["warn", "error", "ignore"]


class PlotEqWarning(UserWarning):
    """Warning with a machine-readable code and, for per-sample codes, a count."""

    def __init__(self, code: str, message: str, count: int | None = None) -> None:
        self.code = code
        self.count = count
        super().__init__(f"[{code}] {message}")

    @property
    def description(self) -> str:
        return WARNING_CODES[self.code]


@dataclass(frozen=True)
class WarningPolicy:
    """Which codes are raised as errors and which are dropped.

    A code cannot be both; everything else is issued as a ``PlotEqWarning``.
    """

    warn_as_error: frozenset[str] = frozenset()
    suppress: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        unknown = (self.warn_as_error | self.suppress) - KNOWN_CODES
        if unknown:
            raise ValueError(_unknown_codes_message(unknown))
        both = self.warn_as_error & self.suppress
        if both:
            raise ValueError(
                f"Warning code(s) both suppressed and treated as errors: {', '.join(sorted(both))}"
            )

    @classmethod
    def from_options(
        cls, warn_as_error: str | None = None, suppress: str | None = None
    ) -> WarningPolicy | None:
        """Build a policy from comma-separated code lists; None when both are unset."""
        if not warn_as_error and not suppress:
            return None
        return cls(
            warn_as_error=parse_code_list(warn_as_error or ""),
            suppress=parse_code_list(suppress or ""),
        )

    def action(self, code: str) -> Action:
        if code in self.suppress:
            return "ignore"
        if code in self.warn_as_error:
            return "error"
        return "warn"


def emit_warning(
    code: str,
    message: str,
    *,
    count: int | None = None,
    policy: WarningPolicy | None = None,
) -> None:
    """Report ``code`` according to ``policy``.

    Suppressed codes are only logged at debug level. Codes treated as errors
    raise ``SamplingError``, which aborts the generation that produced them.
    """
    if code not in KNOWN_CODES:
        raise ValueError(_unknown_codes_message({code}))
    action = policy.action(code) if policy is not None else "warn"
    if action == "ignore":
        logger.debug(f"Suppressed [{code}] {message}")
        return
    if action == "error":
        raise SamplingError(f"[{code}] {message}")
    warnings.warn(PlotEqWarning(code, message, count), stacklevel=2)


def parse_code_list(raw: str) -> frozenset[str]:
    """Parse ``"W01, w03"`` into a set of known codes (case-insensitive).

    Raises ``ValueError`` naming every unknown code.
    """
    codes = frozenset(token.strip().upper() for token in raw.split(",") if token.strip())
    unknown = codes - KNOWN_CODES
    if unknown:
        raise ValueError(_unknown_codes_message(unknown))
    return codes


def _unknown_codes_message(codes: set[str] | frozenset[str]) -> str:
    known = ", ".join(f"{c} ({d})" for c, d in sorted(WARNING_CODES.items()))
    return f"Unknown warning code(s): {', '.join(sorted(codes))} (known: {known})"
