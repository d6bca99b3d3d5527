"""Match frame URLs and source map references against release artifacts.

Artifacts are addressed by virtual names rooted at ``~`` (for example
``~/assets/app.js``). A reference is turned into the same canonical
form before lookup: absolute URLs contribute only their path, anything
else is joined onto the root verbatim.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Sequence
from urllib.parse import SplitResult, urlsplit

from sourcemap_doctor.constants import (
    DOCS_ARTIFACT_NAMES,
    DOCS_URL_PREFIX,
    HOST_REQUIRED_SCHEMES,
    VIRTUAL_ROOT,
    DiagnosticKind,
)
from sourcemap_doctor.diagnosis.result import Ok, StepResult, fail
from sourcemap_doctor.models import Artifact

logger = logging.getLogger(__name__)


def parse_absolute_url(value: str | None) -> SplitResult | None:
    """Split ``value`` if it is an absolute URL, else return None."""
    if not value:
        return None
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if parts.scheme in HOST_REQUIRED_SCHEMES and not parts.hostname:
        return None
    return parts


def join_root(path: str) -> str:
    """Join ``path`` onto the virtual root.

    Empty and ``.`` segments are dropped; ``..`` removes the previous
    segment but never climbs above the root.
    """
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return "/".join([VIRTUAL_ROOT, *segments])


def canonical_key(reference: str) -> str:
    """Canonical artifact name for a frame URL or source map reference."""
    parts = parse_absolute_url(reference)
    path = parts.path if parts is not None else reference
    return join_root(path)


def find_partial_match(
    artifacts: Sequence[Artifact], key: str
) -> Artifact | None:
    """First artifact whose name ends with the key's basename."""
    basename = posixpath.basename(key)
    if not basename:
        return None
    return next(
        (a for a in artifacts if a.name.endswith(basename)), None
    )


def match_artifact(
    artifacts: Sequence[Artifact], reference: str
) -> StepResult[Artifact]:
    """Find the artifact whose name equals the reference's canonical key.

    A basename-only match is never returned; it only feeds the hint
    about a misconfigured URL prefix.
    """
    key = canonical_key(reference)
    exact = next((a for a in artifacts if a.name == key), None)
    if exact is not None:
        logger.debug(
            "event=artifact_matched key=%s artifact_id=%s", key, exact.id
        )
        return Ok(exact)

    tips: list[str] = []
    partial = find_partial_match(artifacts, key)
    if partial is not None:
        logger.info(
            "event=artifact_partial_match key=%s candidate=%s",
            key,
            partial.name,
        )
        tips.append(
            f"Found entry with matching filename: {partial.name}\n"
            f"Make sure that --url-prefix is set to: "
            f"{posixpath.dirname(key)} and not "
            f"{posixpath.dirname(partial.name)}\n"
            f"{DOCS_URL_PREFIX}"
        )
    tips.append(DOCS_ARTIFACT_NAMES)
    return fail(
        DiagnosticKind.ARTIFACT_NOT_FOUND,
        f"Artifacts do not include entry: {key}",
        *tips,
    )
