"""Source retrieval: inline text, local files, and remote URLs.

Loading happens before the pipeline runs, so the pipeline itself never
touches the filesystem or network. Remote fetches use a plain HTTP GET;
retries and authentication are out of scope.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import httpx

from ontoctl.domain.errors import SourceError

logger = logging.getLogger(__name__)

_TURTLE_TYPES = ("text/turtle", "application/x-turtle", "text/plain", "application/octet-stream")


@dataclass(frozen=True)
class LoadedSource:
    """Source text plus where it came from (used as the base IRI for relative IRIs)."""

    text: str
    location: str
    base_iri: str | None = None


class SourceLoader:
    """Resolves the three source forms to Turtle text."""

    def __init__(
        self,
        *,
        root: Path,
        allow_remote: bool = True,
        timeout: float = 10.0,
        max_bytes: int = 5_000_000,
        client_factory: Callable[[], httpx.Client] | None = None,
    ) -> None:
        self._root = root
        self._allow_remote = allow_remote
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._client_factory = client_factory or (lambda: httpx.Client(timeout=self._timeout, follow_redirects=True))

    def load(self, *, text: str | None = None, path: str | None = None, url: str | None = None) -> LoadedSource:
        if text is not None:
            return LoadedSource(text=text, location="<inline>")
        if path is not None:
            return self.load_file(path)
        if url is not None:
            return self.load_url(url)
        msg = "one of text, path or url is required"
        raise SourceError("<none>", msg)

    def load_file(self, path: str) -> LoadedSource:
        target = Path(path)
        if not target.is_absolute():
            target = self._root / target
        try:
            size = target.stat().st_size
            if size > self._max_bytes:
                raise SourceError(path, f"file is {size} bytes, limit is {self._max_bytes}")
            text = target.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise SourceError(path, "file not found") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceError(path, str(exc)) from exc
        logger.debug("Loaded %d bytes from %s", len(text), target)
        return LoadedSource(text=text, location=str(target), base_iri=target.resolve().as_uri())

    def load_url(self, url: str) -> LoadedSource:
        if not self._allow_remote:
            raise SourceError(url, "remote sources are disabled ([sources] allow_remote = false)")
        if not url.startswith(("http://", "https://")):
            raise SourceError(url, "only http and https URLs are supported")
        try:
            with self._client_factory() as client:
                response = client.get(url, headers={"Accept": "text/turtle, */*;q=0.1"})
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SourceError(url, str(exc) or type(exc).__name__) from exc
        if len(response.content) > self._max_bytes:
            raise SourceError(url, f"response is {len(response.content)} bytes, limit is {self._max_bytes}")
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if content_type and content_type not in _TURTLE_TYPES:
            logger.warning("Unexpected content type %s for %s", content_type, url)
        logger.debug("Fetched %d bytes from %s", len(response.content), url)
        return LoadedSource(text=response.text, location=url, base_iri=str(response.url))
