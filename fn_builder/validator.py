"""Schema validation for project files."""

from __future__ import annotations

import json
from importlib import resources

from jsonschema import Draft202012Validator

# --- Schema loaders ---------------------------------------------------------


def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _project_schema() -> dict:
    return _load_schema("fn_builder.schema", "project.schema.json")


# --- Public validators ------------------------------------------------------


def validate_project(data: dict) -> None:
    """Raise `jsonschema.ValidationError` if *data* is not a valid project file."""
    Draft202012Validator(_project_schema()).validate(data)
