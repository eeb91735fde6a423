"""Version index served over HTTP as static JSON documents.

Layout, relative to the index base URL::

    {name}/versions.json              -> ["1.0.0", "1.1.0", ...]
    {name}/{version}/manifest.json    -> {"dependencies": {"z": "== 2.0.0"}}

A 404 for ``versions.json`` means the package has no versions; a 404 for
``manifest.json`` means that version declares no dependencies. Every other
HTTP or transport error raises ``CollaboratorError``.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator
from urllib.parse import quote

from cartograph import __version__
from cartograph.core.dependency.constraints import SemanticVersion
from cartograph.core.dependency.models import (
    DependencyIdentifier,
    DependencyVersion,
    Manifest,
)
from cartograph.exceptions import CollaboratorError, ManifestError
from cartograph.index.base import VersionIndex
from cartograph.manifest import parse_manifest, scalar_text

logger = logging.getLogger(__name__)

# Timeout for all index HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = f"Cartograph-Index/{__version__}"


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Lazily import httpx and raise a friendly error if missing.

    Raises:
        CollaboratorError: If httpx is not installed.
    """
    try:
        import httpx

        return httpx
    except ImportError as exc:
        raise CollaboratorError(
            "httpx is required for HTTP indexes.\n"
            "Install it with: pip install cartograph[http]"
        ) from exc


class HttpIndex(VersionIndex):
    """Version index reading JSON documents below *base_url*.

    Args:
        base_url: Root URL of the index.
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Any = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._transport = transport

    @property
    def index_name(self) -> str:
        return self._base_url

    async def _get_json(self, path: str) -> Any:
        """GET *path* and decode it as JSON; None when the server answers 404."""
        httpx = _ensure_httpx()
        url = self._base_url + path
        logger.debug("GET %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.get(url)
                if resp.status_code == 404:
                    return None
                resp.raise_for_status()
                return resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s", url)
            raise CollaboratorError(f"Timeout fetching {url}") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("HTTP %d from %s", exc.response.status_code, url)
            raise CollaboratorError(
                f"HTTP {exc.response.status_code} from {url}"
            ) from exc
        except (httpx.RequestError, ValueError) as exc:
            logger.warning("Request error for %s: %s", url, exc)
            raise CollaboratorError(f"Request error for {url}: {exc}") from exc

    async def list_versions(
        self, identifier: DependencyIdentifier
    ) -> AsyncIterator[SemanticVersion]:
        data = await self._get_json(f"{quote(identifier.name, safe='')}/versions.json")
        if data is None:
            return
        if not isinstance(data, list):
            raise ManifestError(f"{identifier}: versions.json must be a list")
        for raw in data:
            yield SemanticVersion.parse(scalar_text(raw, f"{identifier}: versions.json"))

    async def fetch_manifest(
        self, pinned: DependencyVersion[SemanticVersion]
    ) -> AsyncIterator[Manifest]:
        name = quote(pinned.identifier.name, safe="")
        data = await self._get_json(f"{name}/{pinned.version}/manifest.json")
        if data is not None:
            yield parse_manifest(data, source=str(pinned))
