"""Heading-delimited section extraction from Markdown fragments."""

from __future__ import annotations

SECTION_MARKER = "## "
SUBSECTION_MARKER = "### "


def _is_section_heading(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(SECTION_MARKER) and not stripped.startswith(
        SUBSECTION_MARKER,
    )


def extract_section(content: str, section_name: str) -> str:
    """Return the second-level section titled ``section_name``.

    The slice starts at the first matching heading and stops before the
    next second-level heading, so nested ``###`` subsections stay inside.
    Only the first matching heading is used.

    Args:
        content: Markdown text to search
        section_name: Heading text following the ``## `` marker

    Returns:
        Section lines joined by newlines, or an empty string when absent
    """
    lines = content.split("\n")
    start_marker = f"{SECTION_MARKER}{section_name}"

    start_index = next(
        (i for i, line in enumerate(lines) if line.strip().startswith(start_marker)),
        None,
    )
    if start_index is None:
        return ""

    end_index = next(
        (
            i
            for i in range(start_index + 1, len(lines))
            if _is_section_heading(lines[i])
        ),
        len(lines),
    )
    return "\n".join(lines[start_index:end_index])


def list_sections(content: str) -> list[str]:
    """List second-level heading names in document order."""
    return [
        line.strip()[len(SECTION_MARKER):].strip()
        for line in content.split("\n")
        if _is_section_heading(line)
    ]
