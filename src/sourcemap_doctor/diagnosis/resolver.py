"""Resolve a generated position and render the original source context."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sourcemap_doctor.constants import (
    CONTEXT_LINES_AFTER,
    CONTEXT_LINES_BEFORE,
    DiagnosticKind,
)
from sourcemap_doctor.diagnosis.result import Ok, StepResult, fail
from sourcemap_doctor.sourcemaps.decoder import Decoder, DecodeError, parse

logger = logging.getLogger(__name__)

type DecoderFactory = Callable[[str], Decoder]


@dataclass(frozen=True)
class ResolvedPosition:
    """Original location; line is 1-based, column 0-based."""

    source: str
    line: int
    column: int
    source_text: str


def resolve(
    sourcemap_text: str,
    line: int | None,
    column: int | None,
    decoder_factory: DecoderFactory = parse,
) -> StepResult[ResolvedPosition]:
    """Map a generated position back to its original source."""
    if line is None or column is None:
        return fail(
            DiagnosticKind.RESOLUTION_FAILURE,
            "Could not resolve source maps position: frame has no "
            f"line/column (lineno={line}, colno={column})",
        )
    try:
        decoder = decoder_factory(sourcemap_text)
        position = decoder.original_position_for(line, column)
        text = decoder.source_content_for(position.source)
    except DecodeError as exc:
        logger.info("event=resolution_failed error=%s", exc)
        return fail(
            DiagnosticKind.RESOLUTION_FAILURE,
            f"Could not resolve source maps position: {exc}",
        )
    return Ok(
        ResolvedPosition(
            source=position.source,
            line=position.line,
            column=position.column,
            source_text=text,
        )
    )


def render_context(source_text: str, line: int, column: int) -> str:
    """Lines around ``line`` with a caret marker under ``column``.

    The window runs from four lines above the target to two below,
    clipped to the file. The marker goes directly beneath the target.
    """
    lines = source_text.split("\n")
    begin = max(0, line - CONTEXT_LINES_BEFORE)
    end = min(line + CONTEXT_LINES_AFTER, len(lines) - 1)
    window = lines[begin:end + 1]
    window.insert(line - begin, "^".rjust(column + 1))
    return "\n".join(window)
