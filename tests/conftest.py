"""Shared test fixtures: in-memory release source and fake decoder."""

import os

# Keep a developer's real credentials out of every Settings() built by tests.
for _name in ("AUTH_TOKEN", "ORGANIZATION", "PROJECT", "EVENT_ID", "LOG_DIR"):
    os.environ.pop(_name, None)

from typing import Any

import pytest

from sourcemap_doctor.client.fakes import FakeReleaseSource
from sourcemap_doctor.models import Artifact, ArtifactMetadata, Event
from sourcemap_doctor.sourcemaps.decoder import DecodeError, OriginalPosition

EVENT_ID = "d2ffe01827d243a8bc7da05f701b0ef5"


def make_event(
    *,
    release: str | None = "R",
    dist: str | None = "D",
    frames: list[dict[str, Any]] | None = None,
    exception: bool = True,
    stacktrace: bool = True,
    raw_stacktrace: bool = False,
) -> Event:
    """Build an Event from the same JSON shape the API returns."""
    if frames is None:
        frames = [
            {
                "abs_path": "https://cdn.x/app.js",
                "lineno": 10,
                "colno": 4,
                "in_app": True,
            }
        ]
    payload: dict[str, Any] = {
        "event_id": EVENT_ID,
        "release": release,
        "dist": dist,
    }
    if exception:
        value: dict[str, Any] = {"type": "TypeError", "value": "boom"}
        if stacktrace:
            value["stacktrace"] = {"frames": frames}
        if raw_stacktrace:
            value["raw_stacktrace"] = {"frames": frames}
        payload["exception"] = {"values": [value]}
    return Event.model_validate(payload)


class FakeDecoder:
    """Decoder returning a fixed position and content, or raising."""

    def __init__(
        self,
        position: OriginalPosition | None = None,
        content: str | None = None,
        error: str | None = None,
    ) -> None:
        self.position = position
        self.content = content
        self.error = error
        self.lookups: list[tuple[int, int]] = []

    def original_position_for(
        self, line: int, column: int
    ) -> OriginalPosition:
        self.lookups.append((line, column))
        if self.error or self.position is None:
            raise DecodeError(self.error or "no mapping")
        return self.position

    def source_content_for(self, source: str) -> str:
        if self.content is None:
            raise DecodeError(f"no content for {source}")
        return self.content


@pytest.fixture
def decoder() -> FakeDecoder:
    return FakeDecoder(
        position=OriginalPosition(source="app.ts", line=3, column=1),
        content="a\nb\nc\n",
    )


@pytest.fixture
def healthy_source() -> FakeReleaseSource:
    """Release where the deepest frame resolves cleanly."""
    return FakeReleaseSource(
        events={EVENT_ID: make_event()},
        artifacts={
            "R": [
                Artifact(name="~/app.js", id=1, dist="D"),
                Artifact(name="~/app.js.map", id=2, dist="D"),
            ]
        },
        files={
            "~/app.js": "console.log(1);\n//# sourceMappingURL=app.js.map",
            "~/app.js.map": '{"version": 3}',
        },
        metadata={"~/app.js": ArtifactMetadata(headers={})},
    )
