"""Event and artifact verification steps.

Each check owns exactly one failure and returns ``Ok`` or ``Err``.
"""

from __future__ import annotations

import posixpath
from collections.abc import Sequence

from sourcemap_doctor.constants import (
    DOCS_RELEASE_OPTION,
    DOCS_VERIFY_ARTIFACTS,
    DOCS_VERIFY_DIST,
    DOCS_VERIFY_RELEASE,
    DiagnosticKind,
    Severity,
)
from sourcemap_doctor.diagnosis.path_matcher import parse_absolute_url
from sourcemap_doctor.diagnosis.result import Ok, StepResult, fail
from sourcemap_doctor.models import (
    Artifact,
    Event,
    ExceptionValue,
    StackFrame,
    Stacktrace,
)


def verify_release(event: Event) -> StepResult[str]:
    if not event.release:
        return fail(
            DiagnosticKind.MISSING_FIELD,
            "Event is missing a release name",
            "Configure 'release' option in the SDK.",
            DOCS_RELEASE_OPTION,
            DOCS_VERIFY_RELEASE,
        )
    return Ok(event.release)


def verify_exception(event: Event) -> StepResult[ExceptionValue]:
    exception = event.first_exception
    if exception is None:
        return fail(
            DiagnosticKind.MISSING_FIELD,
            "Event has no exception captured, there is no use for "
            "source maps",
            severity=Severity.WARNING,
        )
    return Ok(exception)


def verify_not_already_mapped(
    exception: ExceptionValue,
) -> StepResult[ExceptionValue]:
    """Fail when the platform already applied source maps to the event."""
    if exception.raw_stacktrace is not None:
        return fail(
            DiagnosticKind.ALREADY_MAPPED,
            "Event is already source mapped",
            severity=Severity.WARNING,
        )
    return Ok(exception)


def verify_stacktrace(exception: ExceptionValue) -> StepResult[Stacktrace]:
    if exception.stacktrace is None:
        return fail(
            DiagnosticKind.MISSING_FIELD,
            "Event exception has no stacktrace available",
        )
    return Ok(exception.stacktrace)


def verify_frame_path(stacktrace: Stacktrace) -> StepResult[StackFrame]:
    """Select the deepest in-app frame and check its ``abs_path``.

    The path must be an absolute URL with a file extension; frames
    without one come from inline ``<script>`` tags and have no
    artifact to map.
    """
    frames = stacktrace.in_app_frames()
    if not frames:
        return fail(
            DiagnosticKind.MISSING_FIELD,
            "Event exception stacktrace has no in_app frames",
        )

    frame = frames[-1]
    url = parse_absolute_url(frame.abs_path)
    if url is None:
        return fail(
            DiagnosticKind.MALFORMED_FRAME,
            "Event exception stacktrace top frame has incorrect "
            "abs_path (valid url is required). "
            f"Found {frame.abs_path}",
        )

    if not posixpath.splitext(url.path)[1]:
        return fail(
            DiagnosticKind.MALFORMED_FRAME,
            "Top frame of event exception originates from the <script> "
            "tag, it is not possible to resolve source maps",
            severity=Severity.WARNING,
        )
    return Ok(frame)


def verify_artifacts(
    artifacts: Sequence[Artifact],
) -> StepResult[Sequence[Artifact]]:
    if not artifacts:
        return fail(
            DiagnosticKind.ARTIFACT_NOT_FOUND,
            "Release has no artifacts uploaded",
            DOCS_VERIFY_ARTIFACTS,
        )
    return Ok(artifacts)


def verify_dist(artifact: Artifact, dist: str | None) -> StepResult[Artifact]:
    """Strict equality; an absent dist only matches another absent dist."""
    if artifact.dist != dist:
        return fail(
            DiagnosticKind.DIST_MISMATCH,
            "Release artifact distribution mismatch. "
            f"Event: {dist}, Artifact: {artifact.dist}",
            "Configure 'dist' option in the SDK to match the one used "
            "during artifacts upload.",
            DOCS_VERIFY_DIST,
        )
    return Ok(artifact)
