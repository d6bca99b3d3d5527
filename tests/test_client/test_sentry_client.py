"""Tests for the Sentry API client using httpx.MockTransport."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from tenacity import wait_none

from sourcemap_doctor.client.errors import NotFoundError, TransportError
from sourcemap_doctor.client.sentry import SentryClient
from sourcemap_doctor.config import Settings
from sourcemap_doctor.models import Artifact

PROJECT_PREFIX = "/api/0/projects/acme/web"


@pytest.fixture(autouse=True)
def _no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable tenacity wait time for fast tests."""
    monkeypatch.setattr(SentryClient, "retry_wait", wait_none())


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    **overrides: object,
) -> SentryClient:
    settings = Settings(
        auth_token="secret",
        organization="acme",
        project="web",
        **overrides,  # type: ignore[arg-type]
    )
    return SentryClient(settings, transport=httpx.MockTransport(handler))


class TestRequests:
    @pytest.mark.asyncio
    async def test_fetch_event(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "event_id": "abc",
                    "release": "R",
                    "dist": None,
                    "platform": "javascript",
                    "exception": {"values": [{"stacktrace": {"frames": []}}]},
                },
            )

        async with _client(handler) as client:
            event = await client.fetch_event("abc")

        assert event.release == "R"
        assert event.first_exception is not None
        assert seen[0].url.path == f"{PROJECT_PREFIX}/events/abc/json/"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_fetch_release_artifacts_quotes_release(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json=[
                    {"name": "~/app.js", "id": "11", "dist": None},
                    {"name": "~/app.js.map", "id": "12", "dist": "D"},
                ],
            )

        async with _client(handler) as client:
            artifacts = await client.fetch_release_artifacts("web@1.0/beta")

        assert [a.name for a in artifacts] == ["~/app.js", "~/app.js.map"]
        assert artifacts[1].dist == "D"
        assert seen[0].url.raw_path.decode() == (
            f"{PROJECT_PREFIX}/releases/web%401.0%2Fbeta/files/"
        )

    @pytest.mark.asyncio
    async def test_fetch_file_downloads_text(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="var a;\n")

        async with _client(handler) as client:
            text = await client.fetch_release_artifact_file(
                "R", Artifact(name="~/app.js", id="11")
            )

        assert text == "var a;\n"
        assert seen[0].url.path == f"{PROJECT_PREFIX}/releases/R/files/11/"
        assert seen[0].url.params["download"] == "1"

    @pytest.mark.asyncio
    async def test_fetch_file_metadata(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "id": "11",
                    "name": "~/app.js",
                    "headers": {"Sourcemap": "app.js.map"},
                },
            )

        async with _client(handler) as client:
            metadata = await client.fetch_release_artifact_file_metadata(
                "R", Artifact(name="~/app.js", id="11")
            )

        assert metadata.header("sourcemap") == "app.js.map"

    @pytest.mark.asyncio
    async def test_self_hosted_base_url(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        async with _client(
            handler, api_base_url="https://errors.internal/api/0"
        ) as client:
            await client.fetch_release_artifacts("R")

        assert seen[0].url.host == "errors.internal"
        assert seen[0].url.path.startswith(PROJECT_PREFIX)


class TestFailures:
    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Event not found"})

        async with _client(handler) as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.fetch_event("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(502)

        async with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.fetch_event("abc")
        assert exc_info.value.status_code == 502
        assert calls == 1

    @pytest.mark.asyncio
    async def test_rate_limit_retried_then_succeeds(self) -> None:
        responses = [
            httpx.Response(429),
            httpx.Response(200, json=[]),
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        async with _client(handler) as client:
            assert await client.fetch_release_artifacts("R") == []
        assert responses == []

    @pytest.mark.asyncio
    async def test_rate_limit_gives_up_after_max_attempts(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(429)

        async with _client(handler, http_max_attempts=2) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.fetch_event("abc")
        assert exc_info.value.status_code == 429
        assert calls == 2

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError, match="connection refused"):
                await client.fetch_event("abc")

    @pytest.mark.asyncio
    async def test_malformed_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"unexpected": True}])

        async with _client(handler) as client:
            with pytest.raises(TransportError, match="Unexpected payload"):
                await client.fetch_release_artifacts("R")
