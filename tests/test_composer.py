"""Tests for TemplateComposer document assembly."""

from collections.abc import Callable

import pytest

from conftest import FRAGMENTS, FragmentStore
from instructkit.composer import (
    BLOCK_SEPARATOR,
    CODE_QUALITY_RULES,
    GENERATION_ERROR_MESSAGE,
    TEST_DRIVEN_DEVELOPMENT_RULES,
    TemplateComposer,
)
from instructkit.loader import TemplateLoader
from instructkit.models import (
    Feature,
    GeneratorConfig,
    Language,
    OperatingSystem,
    ProjectType,
    SectionNames,
    Selection,
)

PYTHON_ADDON = FRAGMENTS["languages/python-addon.md"]
JAVA_ADDON = FRAGMENTS["languages/java-addon.md"]
SCRIPT_ADDON = FRAGMENTS["languages/javascript-typescript-addon.md"]
GENERIC_ADDON = FRAGMENTS["languages/generic-addon.md"]
SCSS_ADDON = FRAGMENTS["languages/scss-addon.md"]


def make_selection(
    languages: tuple[Language, ...] = (Language.PYTHON,),
    features: tuple[Feature, ...] = (),
    operating_system: OperatingSystem = OperatingSystem.LINUX,
) -> Selection:
    return Selection(
        project_name="Shop",
        project_description="Online store backend",
        project_type=ProjectType.API_BACKEND,
        operating_system=operating_system,
        languages=languages,
        features=features,
    )


class TestStaticBlocks:
    """Test locally templated blocks."""

    def test_header(self) -> None:
        """Test the header names the project and includes its description."""
        header = TemplateComposer.header("Shop", "Online store backend")

        assert header.startswith("# AI Coding Assistant Instructions")
        assert "development assistant for Shop" in header
        assert "## Project Overview\nOnline store backend" in header

    @pytest.mark.parametrize(
        ("operating_system", "shell", "activate"),
        [
            (OperatingSystem.LINUX, "bash", "source venv/bin/activate"),
            (OperatingSystem.MACOS, "zsh", "source venv/bin/activate"),
            (OperatingSystem.WINDOWS, "PowerShell", "venv\\Scripts\\activate"),
            (OperatingSystem.MULTI_PLATFORM, "bash/zsh/PowerShell", "(Unix) or"),
        ],
    )
    def test_environment_profiles(
        self,
        operating_system: OperatingSystem,
        shell: str,
        activate: str,
    ) -> None:
        """Test each operating system renders its own shell conventions."""
        block = TemplateComposer.environment_info(operating_system)

        assert block.startswith("## Development Environment")
        assert f"- **Terminal**: {shell}" in block
        assert activate in block

    def test_windows_path_separator(self) -> None:
        """Test Windows uses a backslash separator."""
        block = TemplateComposer.environment_info(OperatingSystem.WINDOWS)
        assert "Path separator: `\\`" in block

    def test_unknown_os_falls_back_to_linux(self) -> None:
        """Test unrecognized operating systems use the Linux profile."""
        assert TemplateComposer.environment_info("BEOS") == (
            TemplateComposer.environment_info(OperatingSystem.LINUX)
        )


class TestLanguageMapping:
    """Test language to addon mapping."""

    @pytest.mark.parametrize(
        ("language", "path"),
        [
            (Language.PYTHON, "/languages/python-addon.md"),
            (Language.JAVASCRIPT, "/languages/javascript-typescript-addon.md"),
            (Language.TYPESCRIPT, "/languages/javascript-typescript-addon.md"),
            (Language.JAVA, "/languages/java-addon.md"),
            (Language.HTML_CSS, "/languages/html-css-addon.md"),
            (Language.GO, "/languages/generic-addon.md"),
            (Language.RUST, "/languages/generic-addon.md"),
            (Language.OTHER, "/languages/generic-addon.md"),
            ("COBOL", "/languages/generic-addon.md"),
        ],
    )
    def test_language_fragment(
        self,
        make_loader: Callable[..., TemplateLoader],
        language: Language | str,
        path: str,
    ) -> None:
        """Test each language maps to its addon, unknown ones to generic."""
        composer = TemplateComposer(make_loader())
        assert composer.language_fragment(language) == path


class TestCompose:
    """Test full document assembly."""

    @pytest.mark.asyncio
    async def test_block_order_follows_selection(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test blocks appear in fixed order regardless of fetch completion."""
        slow_python = FragmentStore(delays={"languages/python-addon.md": 0.05})
        composer = TemplateComposer(make_loader(fragment_store=slow_python))
        selection = make_selection(
            languages=(Language.PYTHON, Language.JAVA),
            features=(Feature.CODE_QUALITY,),
        )

        document = await composer.compose(selection)

        assert document == BLOCK_SEPARATOR.join(
            [
                TemplateComposer.header("Shop", "Online store backend"),
                TemplateComposer.environment_info(OperatingSystem.LINUX),
                await composer.core_guidelines(),
                CODE_QUALITY_RULES,
                PYTHON_ADDON,
                JAVA_ADDON,
            ],
        )

    @pytest.mark.asyncio
    async def test_core_guidelines_exclude_following_sections(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test the core block stops before the next guideline section."""
        composer = TemplateComposer(make_loader())
        core = await composer.core_guidelines()

        assert "### Reviews" in core
        assert "ドメイン駆動設計" not in core

    @pytest.mark.asyncio
    async def test_guideline_features_extract_sections(
        self,
        make_loader: Callable[..., TemplateLoader],
        store: FragmentStore,
    ) -> None:
        """Test guideline features reuse the cached common document."""
        composer = TemplateComposer(make_loader())
        selection = make_selection(
            features=(Feature.DOMAIN_DRIVEN_DESIGN, Feature.DOCUMENTATION_RULES),
        )

        document = await composer.compose(selection)

        assert "## ドメイン駆動設計の基本原則\n- Model the domain" in document
        assert "## ドキュメント作成ルール\n- Keep the README current" in document
        guideline_requests = [url for url in store.requests if "common-guidelines" in url]
        assert len(guideline_requests) == 1

    @pytest.mark.asyncio
    async def test_section_names_follow_config(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test configured headings select sections from an English store."""
        files = dict(FRAGMENTS)
        files["core/common-guidelines.md"] = (
            "## General Guidelines\n- Prefer readable code\n\n"
            "## Documentation Rules\n- Keep the README current\n"
        )
        config = GeneratorConfig(
            sections=SectionNames(
                core_guidelines="General Guidelines",
                documentation_rules="Documentation Rules",
            ),
        )
        loader = make_loader(config=config, fragment_store=FragmentStore(files))
        composer = TemplateComposer(loader, config)

        document = await composer.compose(
            make_selection(features=(Feature.DOCUMENTATION_RULES,)),
        )

        assert "## General Guidelines\n- Prefer readable code" in document
        assert "## Documentation Rules\n- Keep the README current" in document
        assert document.startswith("# AI Coding Assistant Instructions")

    @pytest.mark.asyncio
    async def test_scss_skipped_without_script_language(
        self,
        make_loader: Callable[..., TemplateLoader],
        store: FragmentStore,
    ) -> None:
        """Test SCSS support needs JavaScript or TypeScript."""
        composer = TemplateComposer(make_loader())
        selection = make_selection(
            languages=(Language.PYTHON,),
            features=(Feature.SCSS_SUPPORT,),
        )

        document = await composer.compose(selection)

        assert SCSS_ADDON not in document
        assert not any("scss-addon" in url for url in store.requests)

    @pytest.mark.parametrize("language", [Language.JAVASCRIPT, Language.TYPESCRIPT])
    @pytest.mark.asyncio
    async def test_scss_included_with_script_language(
        self,
        make_loader: Callable[..., TemplateLoader],
        language: Language,
    ) -> None:
        """Test SCSS support is added next to a script language."""
        composer = TemplateComposer(make_loader())
        selection = make_selection(
            languages=(language,),
            features=(Feature.SCSS_SUPPORT,),
        )

        document = await composer.compose(selection)

        assert document.endswith(BLOCK_SEPARATOR.join([SCSS_ADDON, SCRIPT_ADDON]))

    @pytest.mark.asyncio
    async def test_shared_addon_fetched_once(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test JavaScript and TypeScript together fetch their shared addon once."""
        slow = FragmentStore(delays={"languages/javascript-typescript-addon.md": 0.02})
        composer = TemplateComposer(make_loader(fragment_store=slow))
        selection = make_selection(languages=(Language.JAVASCRIPT, Language.TYPESCRIPT))

        document = await composer.compose(selection)

        assert document.endswith(BLOCK_SEPARATOR.join([SCRIPT_ADDON, SCRIPT_ADDON]))
        addon_requests = [url for url in slow.requests if "javascript-typescript" in url]
        assert len(addon_requests) == 1

    @pytest.mark.asyncio
    async def test_test_driven_development_block(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test the TDD feature contributes its local rules."""
        composer = TemplateComposer(make_loader())
        selection = make_selection(features=(Feature.TEST_DRIVEN_DEVELOPMENT,))

        document = await composer.compose(selection)

        assert TEST_DRIVEN_DEVELOPMENT_RULES in document

    @pytest.mark.asyncio
    async def test_unknown_feature_skipped(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test unknown features render nothing."""
        composer = TemplateComposer(make_loader())
        assert await composer.feature_section("TIME_TRAVEL", make_selection()) is None

    @pytest.mark.asyncio
    async def test_whitespace_language_results_dropped(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test blank addons leave no empty block behind."""
        files = dict(FRAGMENTS)
        files["languages/java-addon.md"] = "  \n\n "
        composer = TemplateComposer(make_loader(fragment_store=FragmentStore(files)))
        selection = make_selection(languages=(Language.JAVA, Language.GO))

        document = await composer.compose(selection)

        core = await composer.core_guidelines()
        assert document.endswith(core + BLOCK_SEPARATOR + GENERIC_ADDON)

    @pytest.mark.asyncio
    async def test_missing_fragment_degrades(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test a 404 addon becomes a diagnostic block and generation completes."""
        files = dict(FRAGMENTS)
        del files["languages/java-addon.md"]
        loader = make_loader(fragment_store=FragmentStore(files))
        composer = TemplateComposer(loader)
        selection = make_selection(languages=(Language.PYTHON, Language.JAVA))

        result = await composer.generate(selection)
        failed_url = loader.url_for("/languages/java-addon.md")

        assert result.ok
        assert result.content.index(PYTHON_ADDON) < result.content.index(
            f"<!-- Template loading error: {failed_url}",
        )
        assert result.content.endswith("-->")

    @pytest.mark.asyncio
    async def test_missing_guidelines_leave_no_empty_block(
        self,
        make_loader: Callable[..., TemplateLoader],
    ) -> None:
        """Test an absent core section is filtered from the output."""
        files = dict(FRAGMENTS)
        files["core/common-guidelines.md"] = "# Nothing here"
        composer = TemplateComposer(make_loader(fragment_store=FragmentStore(files)))

        document = await composer.compose(make_selection())

        assert document == BLOCK_SEPARATOR.join(
            [
                TemplateComposer.header("Shop", "Online store backend"),
                TemplateComposer.environment_info(OperatingSystem.LINUX),
                PYTHON_ADDON,
            ],
        )


class TestGenerate:
    """Test the top-level generation boundary."""

    @pytest.mark.asyncio
    async def test_success(self, make_loader: Callable[..., TemplateLoader]) -> None:
        """Test successful generation returns the composed document."""
        composer = TemplateComposer(make_loader())
        result = await composer.generate(make_selection())

        assert result.ok
        assert result.error is None
        assert result.content.endswith(PYTHON_ADDON)

    @pytest.mark.asyncio
    async def test_unexpected_failure_reported(
        self,
        make_loader: Callable[..., TemplateLoader],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test unexpected errors become a generic message without partial output."""
        composer = TemplateComposer(make_loader())

        async def broken() -> str:
            msg = "boom"
            raise RuntimeError(msg)

        monkeypatch.setattr(composer, "core_guidelines", broken)
        result = await composer.generate(make_selection())

        assert not result.ok
        assert result.error == GENERATION_ERROR_MESSAGE
        assert result.content == ""
