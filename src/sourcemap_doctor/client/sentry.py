"""Async HTTP client for the Sentry web API.

Implements the ReleaseSource protocol. Rate-limited responses (429)
are retried with jittered exponential backoff; every other failure
surfaces immediately as a TransportError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Self
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from sourcemap_doctor import __version__
from sourcemap_doctor.client.errors import NotFoundError, TransportError
from sourcemap_doctor.config import Settings
from sourcemap_doctor.constants import RETRY_INITIAL_WAIT, RETRY_MAX_WAIT
from sourcemap_doctor.models import Artifact, ArtifactMetadata, Event

logger = logging.getLogger(__name__)

_ARTIFACT_LIST = TypeAdapter(list[Artifact])


def _is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.status_code == 429


class SentryClient:
    """ReleaseSource backed by ``/api/0/projects/{org}/{project}/``."""

    retry_wait: wait_base = wait_exponential_jitter(
        initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
    )

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._project_path = (
            f"projects/{quote(settings.organization, safe='')}/"
            f"{quote(settings.project, safe='')}"
        )
        self._max_attempts = settings.http_max_attempts
        self._http = httpx.AsyncClient(
            base_url=settings.api_base_url,
            headers={
                "Authorization": f"Bearer {settings.auth_token}",
                "User-Agent": f"sourcemap-doctor/{__version__}",
            },
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── ReleaseSource ────────────────────────────────────

    async def fetch_event(self, event_id: str) -> Event:
        response = await self._get(
            f"{self._project_path}/events/{quote(event_id, safe='')}/json/"
        )
        return self._parse(response, Event.model_validate)

    async def fetch_release_artifacts(self, release: str) -> list[Artifact]:
        response = await self._get(f"{self._release_path(release)}/files/")
        return self._parse(response, _ARTIFACT_LIST.validate_python)

    async def fetch_release_artifact_file(
        self, release: str, artifact: Artifact
    ) -> str:
        response = await self._get(
            f"{self._release_path(release)}/files/{artifact.id}/",
            params={"download": "1"},
        )
        return response.text

    async def fetch_release_artifact_file_metadata(
        self, release: str, artifact: Artifact
    ) -> ArtifactMetadata:
        response = await self._get(
            f"{self._release_path(release)}/files/{artifact.id}/"
        )
        return self._parse(response, ArtifactMetadata.model_validate)

    # ── Internals ────────────────────────────────────────

    def _release_path(self, release: str) -> str:
        return f"{self._project_path}/releases/{quote(release, safe='')}"

    async def _get(
        self, path: str, params: dict[str, str] | None = None
    ) -> httpx.Response:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(_is_rate_limited),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "event=http_retry path=%s attempt=%d",
                        path,
                        attempt.retry_state.attempt_number,
                    )
                return await self._request(path, params)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _request(
        self, path: str, params: dict[str, str] | None
    ) -> httpx.Response:
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("event=http_failed path=%s error=%s", path, exc)
            raise TransportError(f"Request to {path} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(
                f"Not found: {path}", status_code=response.status_code
            )
        if not response.is_success:
            raise TransportError(
                f"Request to {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse[T](
        response: httpx.Response, validate: Callable[[Any], T]
    ) -> T:
        try:
            return validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TransportError(
                f"Unexpected payload from {response.url.path}: {exc}",
                status_code=response.status_code,
            ) from exc
