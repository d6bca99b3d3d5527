"""Shared constants, the single source of truth for cross-module values.

StrEnum members are str-compatible, so they print and compare as
plain strings in CLI output and JSON run logs.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class StepProgress(StrEnum):
    """Progress status for pipeline step events."""

    RUNNING = "running"
    DONE = "done"
    WARNING = "warning"
    ERROR = "error"


class Severity(StrEnum):
    """How a terminating diagnostic is presented. Both halt the run."""

    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(StrEnum):
    """Failure taxonomy for a halted diagnosis."""

    MISSING_FIELD = "missing_field"
    MALFORMED_FRAME = "malformed_frame"
    ARTIFACT_NOT_FOUND = "artifact_not_found"
    DIST_MISMATCH = "dist_mismatch"
    SOURCEMAP_UNDISCOVERABLE = "sourcemap_undiscoverable"
    UNSUPPORTED_INLINE_SOURCEMAP = "unsupported_inline_sourcemap"
    RESOLUTION_FAILURE = "resolution_failure"
    TRANSPORT_ERROR = "transport_error"
    ALREADY_MAPPED = "already_mapped"


class ReferenceOrigin(StrEnum):
    """Where a source map reference was declared."""

    SOURCEMAP_HEADER = "Sourcemap"
    X_SOURCEMAP_HEADER = "X-SourceMap"
    COMMENT = "comment"


# ── Artifact Naming ──────────────────────────────────────

VIRTUAL_ROOT = "~"

# ── Source Map Discovery ─────────────────────────────────

SOURCE_MAPPING_PREAMBLES = (
    "//# sourceMappingURL=",
    "//@ sourceMappingURL=",
)
PREAMBLE_LENGTH = 21
INLINE_SOURCEMAP_PREFIX = "data:application/json"

# Schemes that require a host to count as an absolute URL
HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

# ── Context Rendering ────────────────────────────────────

CONTEXT_LINES_BEFORE = 4
CONTEXT_LINES_AFTER = 2
CONTEXT_RULE = "-" * 48

# ── HTTP Retry Strategy ──────────────────────────────────

RETRY_INITIAL_WAIT = 1
RETRY_MAX_WAIT = 10

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200

# ── Documentation Links (remediation tips) ───────────────

DOCS_RELEASE_OPTION = (
    "https://docs.sentry.io/platforms/javascript/configuration/options/#release"
)
DOCS_VERIFY_RELEASE = (
    "https://docs.sentry.io/platforms/javascript/sourcemaps/"
    "troubleshooting_js/#verify-a-release-is-configured-in-your-sdk"
)
DOCS_VERIFY_ARTIFACTS = (
    "https://docs.sentry.io/platforms/javascript/sourcemaps/"
    "troubleshooting_js/#verify-artifacts-are-uploaded"
)
DOCS_ARTIFACT_NAMES = (
    "https://docs.sentry.io/platforms/javascript/sourcemaps/"
    "troubleshooting_js/#verify-artifact-names-match-stack-trace-frames"
)
DOCS_URL_PREFIX = (
    "https://docs.sentry.io/product/cli/releases/#sentry-cli-sourcemaps"
)
DOCS_VERIFY_DIST = (
    "https://docs.sentry.io/platforms/javascript/sourcemaps/"
    "troubleshooting_js/"
    "#verify-artifact-distribution-value-matches-value-configured-in-your-sdk"
)

# ── Step Labels (user-facing) ────────────────────────────

STEP_LABELS: dict[str, str] = {
    "fetch_event": "Fetching event",
    "verify_release": "Verifying release name",
    "verify_exception": "Verifying event exception",
    "verify_not_mapped": "Verifying event is not already source mapped",
    "verify_stacktrace": "Verifying exception stacktrace",
    "verify_frame_path": "Verifying exception stacktrace frames",
    "fetch_artifacts": "Fetching release artifacts",
    "verify_artifacts": "Verifying artifacts",
    "match_source_artifact": "Verifying frame artifact",
    "verify_source_dist": "Verifying release artifact distribution",
    "fetch_source_file": "Fetching release file",
    "fetch_source_metadata": "Fetching release file metadata",
    "locate_sourcemap": "Discovering source maps url",
    "match_sourcemap_artifact": "Verifying source map artifact",
    "verify_sourcemap_dist": "Verifying source map artifact distribution",
    "fetch_sourcemap_file": "Fetching source map file",
    "resolve_position": "Resolving source maps position",
}
