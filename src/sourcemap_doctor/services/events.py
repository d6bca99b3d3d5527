"""Shared event types for pipeline progress reporting."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sourcemap_doctor.constants import STEP_LABELS, StepProgress


@dataclass(frozen=True)
class StepEvent:
    """Typed event emitted during pipeline progress."""

    name: str
    status: StepProgress
    message: str = ""
    duration_ms: float = 0.0

    @property
    def label(self) -> str:
        """User-friendly display label from STEP_LABELS."""
        return STEP_LABELS.get(self.name, self.name)


type ProgressCallback = Callable[[StepEvent], None]
