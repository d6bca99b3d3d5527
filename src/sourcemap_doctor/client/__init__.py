"""Platform API access for release and event data."""

from sourcemap_doctor.client.errors import NotFoundError, TransportError
from sourcemap_doctor.client.protocols import ReleaseSource
from sourcemap_doctor.client.sentry import SentryClient

__all__ = ["NotFoundError", "ReleaseSource", "SentryClient", "TransportError"]
