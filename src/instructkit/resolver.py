"""Fragment store location resolution."""

from __future__ import annotations

from .models import DeploymentContext, GeneratorConfig


def _path_segments(pathname: str) -> list[str]:
    return [segment for segment in pathname.split("/") if segment]


def resolve_repository(context: DeploymentContext, config: GeneratorConfig) -> str:
    """Derive the repository name from the page path.

    On the hosting platform the first path segment names the repository,
    unless the page sits in a ``docs/`` folder, in which case the segment
    in front of that folder does.

    Args:
        context: Host name and path of the page
        config: Generator configuration holding the fallbacks

    Returns:
        Repository name, never empty
    """
    segments = _path_segments(context.pathname)

    if not context.hostname.endswith(config.hosting_suffix):
        return segments[0] if segments else config.default_repository

    repo_name = segments[0] if segments else ""
    if len(segments) >= 2 and segments[-2] == config.docs_marker:
        repo_name = segments[-3] if len(segments) >= 3 else segments[0]

    if not repo_name or repo_name == config.docs_marker:
        repo_name = config.default_repository
    return repo_name


def resolve_account(context: DeploymentContext, config: GeneratorConfig) -> str:
    """Account owning the repository: the first host label on hosted pages."""
    if context.hostname.endswith(config.hosting_suffix):
        return context.hostname.split(".")[0]
    return config.default_account


def resolve_base_url(context: DeploymentContext, config: GeneratorConfig) -> str:
    """Build the absolute fragment root URL for a deployment.

    Args:
        context: Host name and path of the page
        config: Generator configuration

    Returns:
        Absolute URL ending with the fragment root and a trailing slash
    """
    account = resolve_account(context, config)
    repo_name = resolve_repository(context, config)
    root = config.fragment_root.strip("/")
    return f"{config.raw_host.rstrip('/')}/{account}/{repo_name}/{config.branch}/{root}/"
