"""Shared fixtures: an in-memory fragment store served through httpx."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

from instructkit.loader import TemplateCache, TemplateLoader
from instructkit.models import DeploymentContext, GeneratorConfig

COMMON_GUIDELINES = """\
# Common Guidelines

## 汎用ガイドライン（全プロジェクト共通）
- Prefer readable code over clever code
### Reviews
- Keep pull requests small

## ドメイン駆動設計の基本原則
- Model the domain with entities and value objects

## ドキュメント作成ルール
- Keep the README current
"""

FRAGMENTS: dict[str, str] = {
    "core/common-guidelines.md": COMMON_GUIDELINES,
    "core/environment-info.md": "## Environment\n- Fetched environment notes\n",
    "languages/python-addon.md": "## Python\n- Follow PEP 8",
    "languages/javascript-typescript-addon.md": "## JavaScript / TypeScript\n- Use strict mode",
    "languages/java-addon.md": "## Java\n- Prefer immutable objects",
    "languages/html-css-addon.md": "## HTML / CSS\n- Use semantic markup",
    "languages/generic-addon.md": "## Generic\n- Follow the language's style guide",
    "languages/scss-addon.md": "## SCSS\n- Nest at most three levels",
}


class FragmentStore:
    """Serves fragments by path suffix and records every request."""

    def __init__(
        self,
        files: dict[str, str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.files = dict(FRAGMENTS if files is None else files)
        self.delays = delays or {}
        self.requests: list[str] = []

    def _match(self, url: str) -> str | None:
        for path in self.files:
            if url.endswith("/" + path):
                return path
        return None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        path = self._match(url)
        if path is None:
            return httpx.Response(404, text="Not Found")
        delay = self.delays.get(path, 0)
        if delay:
            await asyncio.sleep(delay)
        return httpx.Response(200, text=self.files[path])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def store() -> FragmentStore:
    """Fragment store serving every default fragment."""
    return FragmentStore()


@pytest.fixture
def make_loader(
    store: FragmentStore,
) -> Callable[..., TemplateLoader]:
    """Build loaders backed by the in-memory store."""

    def _make(
        context: DeploymentContext | None = None,
        config: GeneratorConfig | None = None,
        cache: TemplateCache | None = None,
        fragment_store: FragmentStore | None = None,
    ) -> TemplateLoader:
        backing = fragment_store or store
        return TemplateLoader(
            context or DeploymentContext(),
            config,
            cache=cache,
            client=backing.client(),
        )

    return _make
