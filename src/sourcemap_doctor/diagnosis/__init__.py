"""Diagnosis steps and the pipeline that sequences them."""

from sourcemap_doctor.diagnosis.pipeline import (
    PipelineOutcome,
    StepStatus,
    run_diagnosis,
)
from sourcemap_doctor.diagnosis.result import Diagnostic, Err, Ok, StepResult

__all__ = [
    "Diagnostic",
    "Err",
    "Ok",
    "PipelineOutcome",
    "StepResult",
    "StepStatus",
    "run_diagnosis",
]
