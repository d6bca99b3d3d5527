"""Event payload as returned by the event JSON endpoint.

Only the fields the diagnosis reads are modelled; everything else
in the payload is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StackFrame(BaseModel):
    """A single frame of a captured stack trace."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    abs_path: str | None = None
    lineno: int | None = None
    colno: int | None = None
    in_app: bool = False

    @field_validator("in_app", mode="before")
    @classmethod
    def _null_is_not_in_app(cls, v: Any) -> Any:
        return False if v is None else v


class Stacktrace(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    frames: list[StackFrame] = Field(
        default_factory=lambda: list[StackFrame]()
    )

    def in_app_frames(self) -> list[StackFrame]:
        """Frames attributed to application code, in stack order."""
        return [f for f in self.frames if f.in_app]


class ExceptionValue(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str | None = None
    value: str | None = None
    stacktrace: Stacktrace | None = None
    raw_stacktrace: Stacktrace | None = None


class ExceptionInterface(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    values: list[ExceptionValue] = Field(
        default_factory=lambda: list[ExceptionValue]()
    )


class Event(BaseModel):
    """A captured error event. Immutable once fetched."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    event_id: str | None = None
    release: str | None = None
    dist: str | None = None
    exception: ExceptionInterface | None = None

    @property
    def first_exception(self) -> ExceptionValue | None:
        """The single exception value the diagnosis examines."""
        if self.exception is None or not self.exception.values:
            return None
        return self.exception.values[0]
