"""Validation gate between raw form input and generation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .exceptions import SelectionError
from .models import Selection

REQUIRED_FIELDS = (
    "project_name",
    "project_description",
    "project_type",
    "operating_system",
)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields."
LANGUAGE_REQUIRED_MESSAGE = "Please select at least one programming language."


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_form(data: Mapping[str, Any]) -> Selection:
    """Check raw form input and build a selection from it.

    Args:
        data: Form values keyed by Selection field name

    Returns:
        Immutable selection ready for generation

    Raises:
        SelectionError: If a required field is missing or no language is chosen
    """
    missing = [name for name in REQUIRED_FIELDS if _is_blank(data.get(name))]
    if missing:
        raise SelectionError(REQUIRED_FIELDS_MESSAGE, details={"missing": missing})

    languages = list(data.get("languages") or [])
    if not languages:
        raise SelectionError(LANGUAGE_REQUIRED_MESSAGE)

    try:
        return Selection.model_validate(
            {
                **{name: data[name] for name in REQUIRED_FIELDS},
                "languages": languages,
                "features": list(data.get("features") or []),
            },
        )
    except ValidationError as e:
        msg = f"Invalid selection: {e}"
        raise SelectionError(msg, details={"errors": e.errors()}) from e
