"""Step result types.

Every diagnosis step returns ``Ok(value)`` or ``Err(diagnostic)``;
the pipeline stops at the first ``Err``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sourcemap_doctor.constants import DiagnosticKind, Severity


@dataclass(frozen=True)
class Diagnostic:
    """Terminal outcome of a failed step: reason plus remediation tips."""

    kind: DiagnosticKind
    reason: str
    tips: tuple[str, ...] = ()
    severity: Severity = Severity.ERROR


@dataclass(frozen=True)
class Ok[T]:
    value: T


@dataclass(frozen=True)
class Err:
    diagnostic: Diagnostic


type StepResult[T] = Ok[T] | Err


def fail(
    kind: DiagnosticKind,
    reason: str,
    *tips: str,
    severity: Severity = Severity.ERROR,
) -> Err:
    """Shorthand for building an ``Err`` around a new Diagnostic."""
    return Err(Diagnostic(kind=kind, reason=reason, tips=tips, severity=severity))
