"""Core data models for InstructKit document generation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectType(str, Enum):
    """Kind of project the instructions are written for."""

    SIMPLE_SCRIPT = "SIMPLE_SCRIPT"
    WEB_APPLICATION = "WEB_APPLICATION"
    API_BACKEND = "API_BACKEND"
    DATA_ANALYSIS = "DATA_ANALYSIS"
    CUSTOM = "CUSTOM"


class OperatingSystem(str, Enum):
    """Development operating system."""

    LINUX = "LINUX"
    MACOS = "MACOS"
    WINDOWS = "WINDOWS"
    MULTI_PLATFORM = "MULTI_PLATFORM"


class Language(str, Enum):
    """Target programming languages."""

    PYTHON = "PYTHON"
    JAVASCRIPT = "JAVASCRIPT"
    TYPESCRIPT = "TYPESCRIPT"
    JAVA = "JAVA"
    HTML_CSS = "HTML_CSS"
    CSHARP = "CSHARP"
    GO = "GO"
    RUST = "RUST"
    OTHER = "OTHER"


class Feature(str, Enum):
    """Optional guideline features."""

    DOMAIN_DRIVEN_DESIGN = "DOMAIN_DRIVEN_DESIGN"
    TEST_DRIVEN_DEVELOPMENT = "TEST_DRIVEN_DEVELOPMENT"
    DOCUMENTATION_RULES = "DOCUMENTATION_RULES"
    CODE_QUALITY = "CODE_QUALITY"
    SCSS_SUPPORT = "SCSS_SUPPORT"


# Languages that unlock the SCSS addon.
SCRIPT_LANGUAGES = frozenset({Language.JAVASCRIPT, Language.TYPESCRIPT})


class Selection(BaseModel):
    """User choices driving one generation run."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Project name used in the header")
    project_description: str = Field(..., description="Free-form project overview")
    project_type: ProjectType = Field(..., description="Kind of project")
    operating_system: OperatingSystem = Field(..., description="Development OS")
    languages: tuple[Language, ...] = Field(
        ...,
        min_length=1,
        description="Target languages in selection order",
    )
    features: tuple[Feature, ...] = Field(
        default=(),
        description="Optional features in selection order",
    )

    @field_validator("project_name", "project_description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only text."""
        if not v.strip():
            msg = "Value must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("languages", "features")
    @classmethod
    def drop_duplicates(cls, v: tuple[Enum, ...]) -> tuple[Enum, ...]:
        """Keep the first occurrence of each choice, preserving order."""
        return tuple(dict.fromkeys(v))

    def uses_script_language(self) -> bool:
        """Whether JavaScript or TypeScript is among the selected languages."""
        return any(lang in SCRIPT_LANGUAGES for lang in self.languages)


class DeploymentContext(BaseModel):
    """Host name and path the fragment store location is derived from."""

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(default="localhost", description="Page host name")
    pathname: str = Field(default="/", description="Page path")
    href: str | None = Field(default=None, description="Full page URL, if known")

    @property
    def page_url(self) -> str:
        """Full page URL, reconstructed when not given."""
        return self.href or f"https://{self.hostname}{self.pathname}"


class OsProfile(BaseModel):
    """Shell conventions for one operating system."""

    name: str
    shell: str
    path_separator: str
    venv_activate: str


class FragmentCatalog(BaseModel):
    """Relative paths of the documents in the fragment store."""

    common_guidelines: str = "/core/common-guidelines.md"
    environment_info: str = "/core/environment-info.md"
    python: str = "/languages/python-addon.md"
    javascript: str = "/languages/javascript-typescript-addon.md"
    java: str = "/languages/java-addon.md"
    html_css: str = "/languages/html-css-addon.md"
    generic: str = "/languages/generic-addon.md"
    scss: str = "/languages/scss-addon.md"


class SectionNames(BaseModel):
    """Headings pulled out of the common-guidelines document."""

    core_guidelines: str = "汎用ガイドライン（全プロジェクト共通）"
    domain_driven_design: str = "ドメイン駆動設計の基本原則"
    documentation_rules: str = "ドキュメント作成ルール"


class GeneratorConfig(BaseModel):
    """Fragment store location and document generation settings."""

    default_repository: str = Field(
        default="ai-coding-assistant-instructions-generator",
        description="Repository used when none can be derived from the path",
    )
    default_account: str = Field(
        default="Yulikepython",
        description="Account owning the repository on custom domains",
    )
    branch: str = Field(default="main", description="Branch to read fragments from")
    fragment_root: str = Field(
        default="copilot-instructions-templates",
        description="Directory holding the fragments inside the repository",
    )
    raw_host: str = Field(
        default="https://raw.githubusercontent.com",
        description="Origin serving raw repository files",
    )
    hosting_suffix: str = Field(
        default=".github.io",
        description="Host name suffix of the hosted-pages platform",
    )
    docs_marker: str = Field(
        default="docs",
        description="Path segment of a site published from a docs/ folder",
    )
    local_hosts: list[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1"],
        description="Hosts that get local troubleshooting hints",
    )
    timeout: float | None = Field(
        default=None,
        description="HTTP timeout in seconds; None waits indefinitely",
    )
    output_filename: str = Field(
        default="copilot-instructions.md",
        description="Default file name for the generated document",
    )
    fragments: FragmentCatalog = Field(default_factory=FragmentCatalog)
    sections: SectionNames = Field(default_factory=SectionNames)

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            msg = "Timeout must be a positive number of seconds"
            raise ValueError(msg)
        return v
