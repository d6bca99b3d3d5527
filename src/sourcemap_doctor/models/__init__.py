"""Pydantic models for platform API payloads."""

from sourcemap_doctor.models.artifact import Artifact, ArtifactMetadata
from sourcemap_doctor.models.event import (
    Event,
    ExceptionInterface,
    ExceptionValue,
    StackFrame,
    Stacktrace,
)

__all__ = [
    "Artifact",
    "ArtifactMetadata",
    "Event",
    "ExceptionInterface",
    "ExceptionValue",
    "StackFrame",
    "Stacktrace",
]
