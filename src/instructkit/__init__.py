"""InstructKit: instruction file generator for AI coding assistants."""

__version__ = "0.1.0"
__author__ = "InstructKit Contributors"
__description__ = "Instruction file generator for AI coding assistants"

from .composer import GenerationResult, TemplateComposer
from .loader import TemplateCache, TemplateLoader
from .models import DeploymentContext, GeneratorConfig, Selection
from .resolver import resolve_base_url
from .sections import extract_section

__all__ = [
    "DeploymentContext",
    "GenerationResult",
    "GeneratorConfig",
    "Selection",
    "TemplateCache",
    "TemplateComposer",
    "TemplateLoader",
    "extract_section",
    "resolve_base_url",
]
