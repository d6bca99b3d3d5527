"""In-memory release source for testing.

Dict-backed implementation of the ReleaseSource protocol that records
every fetch it serves. No HTTP, no I/O.
"""

from __future__ import annotations

from sourcemap_doctor.client.errors import NotFoundError
from sourcemap_doctor.models import Artifact, ArtifactMetadata, Event


class FakeReleaseSource:
    """Dict-backed ReleaseSource for testing."""

    def __init__(
        self,
        events: dict[str, Event] | None = None,
        artifacts: dict[str, list[Artifact]] | None = None,
        files: dict[str, str] | None = None,
        metadata: dict[str, ArtifactMetadata] | None = None,
    ) -> None:
        self.events = events or {}
        self.artifacts = artifacts or {}
        self.files = files or {}  # keyed by artifact name
        self.metadata = metadata or {}  # keyed by artifact name
        self.calls: list[tuple[str, str]] = []

    async def fetch_event(self, event_id: str) -> Event:
        self.calls.append(("event", event_id))
        try:
            return self.events[event_id]
        except KeyError:
            raise NotFoundError(
                f"Event {event_id} not found", status_code=404
            ) from None

    async def fetch_release_artifacts(self, release: str) -> list[Artifact]:
        self.calls.append(("artifacts", release))
        return list(self.artifacts.get(release, []))

    async def fetch_release_artifact_file(
        self, release: str, artifact: Artifact
    ) -> str:
        self.calls.append(("file", artifact.name))
        try:
            return self.files[artifact.name]
        except KeyError:
            raise NotFoundError(
                f"File {artifact.name} not found in release {release}",
                status_code=404,
            ) from None

    async def fetch_release_artifact_file_metadata(
        self, release: str, artifact: Artifact
    ) -> ArtifactMetadata:
        self.calls.append(("metadata", artifact.name))
        return self.metadata.get(artifact.name, ArtifactMetadata())
