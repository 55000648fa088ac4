"""Fragment loading from the remote store with a session-scoped cache."""

from __future__ import annotations

import asyncio
from types import TracebackType

import httpx

from .exceptions import TemplateLoadError
from .logging import get_logger
from .models import DeploymentContext, GeneratorConfig
from .resolver import resolve_base_url

logger = get_logger("loader")


class TemplateCache:
    """Fetched fragment text keyed by absolute URL.

    One instance lives for a session. Entries are never evicted; only
    successful fetches are stored, so failures are retried on the next load.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, url: str) -> str | None:
        return self._entries.get(url)

    def put(self, url: str, content: str) -> None:
        self._entries[url] = content

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class TemplateLoader:
    """Fetches fragment text and degrades failures to inline diagnostics."""

    def __init__(
        self,
        context: DeploymentContext,
        config: GeneratorConfig | None = None,
        cache: TemplateCache | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize loader for a deployment.

        Args:
            context: Host name and path the store location derives from
            config: Generator configuration, defaults to built-in settings
            cache: Session cache, a fresh one is created when omitted
            client: HTTP client; the loader closes only clients it creates
        """
        self.context = context
        self.config = config or GeneratorConfig()
        self.cache = cache if cache is not None else TemplateCache()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=True,
        )
        self._base_url: str | None = None
        self._in_flight: dict[str, asyncio.Future[str]] = {}

    @property
    def base_url(self) -> str:
        if self._base_url is None:
            self._base_url = resolve_base_url(self.context, self.config)
        return self._base_url

    def url_for(self, relative_path: str) -> str:
        """Absolute URL of a fragment, also used as its cache key."""
        return self.base_url + relative_path.lstrip("/")

    async def load_template(self, relative_path: str) -> str:
        """Load fragment text, never raising on fetch failures.

        Concurrent loads of the same URL share one request.

        Args:
            relative_path: Fragment path relative to the store root

        Returns:
            Fragment text, or a Markdown comment describing the failure
        """
        full_url = self.url_for(relative_path)
        logger.debug(
            "Loading template %s (base=%s, host=%s, path=%s)",
            relative_path,
            self.base_url,
            self.context.hostname,
            self.context.pathname,
        )

        cached = self.cache.get(full_url)
        if cached is not None:
            return cached

        task = self._in_flight.get(full_url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(full_url, relative_path))
            self._in_flight[full_url] = task
            task.add_done_callback(lambda done: self._forget(full_url, done))

        try:
            return await asyncio.shield(task)
        except (httpx.HTTPError, httpx.InvalidURL, TemplateLoadError) as e:
            logger.error("Template loading error: %s", e)
            return self._failure_comment(full_url, e)

    async def _fetch(self, full_url: str, relative_path: str) -> str:
        response = await self._client.get(full_url)
        if not response.is_success:
            msg = f"Failed to load template: {full_url} ({response.status_code})"
            raise TemplateLoadError(
                msg,
                details={"url": full_url, "status": response.status_code},
            )
        content = response.text
        self.cache.put(full_url, content)
        logger.info("Successfully loaded template: %s", relative_path)
        return content

    def _forget(self, full_url: str, task: asyncio.Future[str]) -> None:
        if self._in_flight.get(full_url) is task:
            del self._in_flight[full_url]

    def _troubleshooting(self, full_url: str) -> str:
        if self.context.hostname in self.config.local_hosts:
            return (
                "Troubleshooting for local development:\n"
                f"1. Check that the {self.config.fragment_root}/ directory exists\n"
                "2. Check that the local server runs from the project root\n"
                f"3. Path: {full_url}"
            )
        return (
            "Troubleshooting for hosted pages:\n"
            "1. Check that the repository is public\n"
            f"2. Check that the branch is {self.config.branch}\n"
            f"3. Check that the file exists: {full_url}\n"
            f"4. Current URL: {self.context.page_url}"
        )

    def _failure_comment(self, full_url: str, error: Exception) -> str:
        return (
            f"<!-- Template loading error: {full_url}\n\n"
            f"{self._troubleshooting(full_url)}\n\n"
            f"Error details: {error}\n"
            "-->"
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> TemplateLoader:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
