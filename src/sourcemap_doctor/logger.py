"""Structured JSON-lines log of diagnosis runs."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sourcemap_doctor.constants import ERROR_TRUNCATION_CHARS

if TYPE_CHECKING:
    from sourcemap_doctor.diagnosis.result import Diagnostic

__all__ = ["RunLogger"]


class RunLogger:
    """Structured JSON logger with event_id correlation."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("sourcemap_doctor.runs")
        self._logger.setLevel(getattr(logging, level.upper()))
        self._logger.propagate = False

        log_file = (log_dir / "diagnosis.log").resolve()
        for existing in list(self._logger.handlers):
            if getattr(existing, "baseFilename", None) != str(log_file):
                self._logger.removeHandler(existing)
                existing.close()

        if not self._logger.handlers:
            handler = logging.FileHandler(log_file)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def log_step(
        self,
        event_id: str,
        step_name: str,
        status: str,
        duration_ms: float,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "step",
                "timestamp": datetime.now(UTC).isoformat(),
                "event_id": event_id,
                "step": step_name,
                "status": status,
                "duration_ms": duration_ms,
            })
        )

    def log_diagnostic(
        self,
        event_id: str,
        step_name: str,
        diagnostic: Diagnostic,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "diagnostic",
                "timestamp": datetime.now(UTC).isoformat(),
                "event_id": event_id,
                "step": step_name,
                "kind": diagnostic.kind,
                "severity": diagnostic.severity,
                "reason": diagnostic.reason[:ERROR_TRUNCATION_CHARS],
            })
        )

    def log_resolved(
        self,
        event_id: str,
        source: str,
        line: int,
        column: int,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "resolved",
                "timestamp": datetime.now(UTC).isoformat(),
                "event_id": event_id,
                "source": source,
                "line": line,
                "column": column,
            })
        )
