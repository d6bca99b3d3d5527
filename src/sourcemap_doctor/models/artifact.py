"""Release artifact records and their file metadata."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """An uploaded release file, addressed by a ``~``-rooted name."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    id: str | int
    dist: str | None = None


class ArtifactMetadata(BaseModel):
    """Per-file metadata; headers may declare a source map location."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return httpx.Headers(self.headers).get(name)
