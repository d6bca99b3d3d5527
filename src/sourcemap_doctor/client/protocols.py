"""Protocol-based release source interface.

The HTTP client satisfies this protocol structurally (no inheritance).
Test doubles can be plain classes matching the same signatures.
"""

from typing import Protocol

from sourcemap_doctor.models import Artifact, ArtifactMetadata, Event


class ReleaseSource(Protocol):
    async def fetch_event(self, event_id: str) -> Event: ...
    async def fetch_release_artifacts(self, release: str) -> list[Artifact]: ...
    async def fetch_release_artifact_file(
        self, release: str, artifact: Artifact
    ) -> str: ...
    async def fetch_release_artifact_file_metadata(
        self, release: str, artifact: Artifact
    ) -> ArtifactMetadata: ...
