"""Discover where a generated file declares its source map.

Precedence is fixed: ``Sourcemap`` header, then ``X-SourceMap``
header, then the last ``sourceMappingURL`` comment in the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sourcemap_doctor.constants import (
    INLINE_SOURCEMAP_PREFIX,
    PREAMBLE_LENGTH,
    SOURCE_MAPPING_PREAMBLES,
    DiagnosticKind,
    ReferenceOrigin,
    Severity,
)
from sourcemap_doctor.diagnosis.result import Ok, StepResult, fail
from sourcemap_doctor.models import ArtifactMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    source: str
    origin: ReferenceOrigin


@dataclass(frozen=True)
class NotFound:
    pass


type Discovery = Found | NotFound


def find_comment_reference(text: str) -> str | None:
    """Reference from the last ``sourceMappingURL`` comment, if any."""
    for line in reversed(text.split("\n")):
        if line[:PREAMBLE_LENGTH] in SOURCE_MAPPING_PREAMBLES:
            return line[PREAMBLE_LENGTH:].strip()
    return None


def find_reference(text: str, metadata: ArtifactMetadata) -> Discovery:
    """Apply the discovery rules in order; first hit wins."""
    for origin in (
        ReferenceOrigin.SOURCEMAP_HEADER,
        ReferenceOrigin.X_SOURCEMAP_HEADER,
    ):
        value = metadata.header(origin.value)
        if value:
            return Found(source=value, origin=origin)

    comment = find_comment_reference(text)
    if comment:
        return Found(source=comment, origin=ReferenceOrigin.COMMENT)
    return NotFound()


def locate(text: str, metadata: ArtifactMetadata) -> StepResult[str]:
    """Resolve the source map location declared for a file."""
    match find_reference(text, metadata):
        case Found(source=source, origin=origin):
            if source.startswith(INLINE_SOURCEMAP_PREFIX):
                return fail(
                    DiagnosticKind.UNSUPPORTED_INLINE_SOURCEMAP,
                    "Found inlined source maps, further verification "
                    "is not supported for this scenario",
                    severity=Severity.WARNING,
                )
            logger.debug(
                "event=sourcemap_reference origin=%s source=%s",
                origin,
                source,
            )
            return Ok(source)
        case _:
            return fail(
                DiagnosticKind.SOURCEMAP_UNDISCOVERABLE,
                "Failed to discover source maps url: no Sourcemap or "
                "X-SourceMap header and no sourceMappingURL comment",
            )
