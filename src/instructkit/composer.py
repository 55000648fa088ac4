"""Document composer assembling instruction files from fragments."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .loader import TemplateLoader
from .logging import get_logger
from .models import (
    Feature,
    GeneratorConfig,
    Language,
    OperatingSystem,
    OsProfile,
    Selection,
)
from .sections import extract_section

logger = get_logger("composer")

BLOCK_SEPARATOR = "\n\n"

GENERATION_ERROR_MESSAGE = (
    "An error occurred while generating the template. "
    "Reload and try again."
)

OS_PROFILES: dict[OperatingSystem, OsProfile] = {
    OperatingSystem.LINUX: OsProfile(
        name="Linux (bash shell)",
        shell="bash",
        path_separator="/",
        venv_activate="source venv/bin/activate",
    ),
    OperatingSystem.MACOS: OsProfile(
        name="macOS (zsh/bash shell)",
        shell="zsh",
        path_separator="/",
        venv_activate="source venv/bin/activate",
    ),
    OperatingSystem.WINDOWS: OsProfile(
        name="Windows (PowerShell/cmd)",
        shell="PowerShell",
        path_separator="\\",
        venv_activate="venv\\Scripts\\activate",
    ),
    OperatingSystem.MULTI_PLATFORM: OsProfile(
        name="Multi-platform",
        shell="bash/zsh/PowerShell",
        path_separator="/ or \\",
        venv_activate=(
            "source venv/bin/activate (Unix) or venv\\Scripts\\activate (Windows)"
        ),
    ),
}

DEFAULT_OS = OperatingSystem.LINUX

CODE_QUALITY_RULES = """\
### Code Quality Rules
- **Consistent naming**: use meaningful names and avoid abbreviations
- **Single responsibility**: each function does one thing only
- **Useful comments**: explain the "why" of the code, not the "what"
- **No magic numbers or strings**: use constants or enums
- **Error handling**: raise appropriate exceptions with clear messages
- **Testability**: structure code so it is easy to test"""

TEST_DRIVEN_DEVELOPMENT_RULES = """\
### Test-Driven Development
- **Red, green, refactor**: write a failing test before the implementation
- **Small steps**: add one behavior per test and keep each cycle short
- **Fast feedback**: run the affected tests after every change
- **Readable tests**: name tests after the behavior they verify
- **Refactor with a green suite**: never restructure code while tests fail"""

# Language addon keys in FragmentCatalog; unlisted languages use "generic".
LANGUAGE_FRAGMENTS: dict[Language, str] = {
    Language.PYTHON: "python",
    Language.JAVASCRIPT: "javascript",
    Language.TYPESCRIPT: "javascript",
    Language.JAVA: "java",
    Language.HTML_CSS: "html_css",
}

FeatureHandler = Callable[[Selection], Awaitable[str | None]]


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation request."""

    content: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TemplateComposer:
    """Assembles the instruction document in a fixed block order."""

    def __init__(
        self,
        loader: TemplateLoader,
        config: GeneratorConfig | None = None,
    ) -> None:
        """Initialize composer.

        Args:
            loader: Fragment loader used for every remote block
            config: Generator configuration, defaults to the loader's
        """
        self.loader = loader
        self.config = config or loader.config
        self._feature_handlers: dict[Feature, FeatureHandler] = {
            Feature.DOMAIN_DRIVEN_DESIGN: self._domain_driven_design,
            Feature.TEST_DRIVEN_DEVELOPMENT: self._test_driven_development,
            Feature.DOCUMENTATION_RULES: self._documentation_rules,
            Feature.CODE_QUALITY: self._code_quality,
            Feature.SCSS_SUPPORT: self._scss_support,
        }

    @staticmethod
    def header(project_name: str, project_description: str) -> str:
        return f"""\
# AI Coding Assistant Instructions

You are the dedicated development assistant for {project_name}. Follow the instructions below when generating or modifying code and when writing or revising documentation.

## Project Overview
{project_description}

## Instruction Improvement Rule
- When a request starts with "**Improve instructions**", improve the content of this instruction file itself.
- While improving it, keep following every other rule in this file."""

    @staticmethod
    def environment_info(operating_system: OperatingSystem | str) -> str:
        """Render the development environment block for an operating system.

        Unrecognized values fall back to the Linux profile.
        """
        try:
            profile = OS_PROFILES[OperatingSystem(operating_system)]
        except ValueError:
            profile = OS_PROFILES[DEFAULT_OS]

        return f"""\
## Development Environment
- **OS**: {profile.name}
- **Editor**: Visual Studio Code
- **Terminal**: {profile.shell}

### Environment Notes
- Use absolute paths to avoid directory navigation problems
- Run terminal commands from the appropriate directory
- Path separator: `{profile.path_separator}`
- Virtual environment activation: `{profile.venv_activate}`"""

    async def _guideline_section(self, section_name: str) -> str:
        content = await self.loader.load_template(self.config.fragments.common_guidelines)
        return extract_section(content, section_name)

    async def core_guidelines(self) -> str:
        return await self._guideline_section(self.config.sections.core_guidelines)

    def language_fragment(self, language: Language | str) -> str:
        """Relative fragment path of a language addon."""
        try:
            key = LANGUAGE_FRAGMENTS.get(Language(language), "generic")
        except ValueError:
            key = "generic"
        return getattr(self.config.fragments, key)

    async def language_template(self, language: Language | str) -> str:
        return await self.loader.load_template(self.language_fragment(language))

    async def _domain_driven_design(self, selection: Selection) -> str | None:
        return await self._guideline_section(self.config.sections.domain_driven_design)

    async def _documentation_rules(self, selection: Selection) -> str | None:
        return await self._guideline_section(self.config.sections.documentation_rules)

    async def _test_driven_development(self, selection: Selection) -> str | None:
        return TEST_DRIVEN_DEVELOPMENT_RULES

    async def _code_quality(self, selection: Selection) -> str | None:
        return CODE_QUALITY_RULES

    async def _scss_support(self, selection: Selection) -> str | None:
        if not selection.uses_script_language():
            logger.debug("Skipping SCSS support: no JavaScript or TypeScript selected")
            return None
        return await self.loader.load_template(self.config.fragments.scss)

    async def feature_section(
        self,
        feature: Feature | str,
        selection: Selection,
    ) -> str | None:
        """Render one feature block, or None when it does not apply."""
        try:
            handler = self._feature_handlers.get(Feature(feature))
        except ValueError:
            handler = None
        if handler is None:
            logger.debug("Skipping unknown feature %r", feature)
            return None
        return await handler(selection)

    async def compose(self, selection: Selection) -> str:
        """Assemble the full document for a selection.

        Header, environment and core guidelines come first. Feature blocks
        follow, then language addons, each batch fetched concurrently and
        kept in selection order.

        Args:
            selection: Validated user choices

        Returns:
            Markdown document with blocks separated by blank lines
        """
        parts: list[str] = [
            self.header(selection.project_name, selection.project_description),
            self.environment_info(selection.operating_system),
            await self.core_guidelines(),
        ]

        feature_results = await asyncio.gather(
            *(self.feature_section(feature, selection) for feature in selection.features),
        )
        parts.extend(result for result in feature_results if result is not None)

        language_results = await asyncio.gather(
            *(self.language_template(language) for language in selection.languages),
        )
        parts.extend(result for result in language_results if result and result.strip())

        return BLOCK_SEPARATOR.join(part for part in parts if part)

    async def generate(self, selection: Selection) -> GenerationResult:
        """Compose a document, reporting unexpected failures as a message.

        Args:
            selection: Validated user choices

        Returns:
            Result holding either the document or a user-facing error
        """
        try:
            content = await self.compose(selection)
        except Exception:
            logger.exception("Template generation error")
            return GenerationResult(error=GENERATION_ERROR_MESSAGE)
        return GenerationResult(content=content)
