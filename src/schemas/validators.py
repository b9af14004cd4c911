"""Loading and validation of size chart payloads."""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator, ValidationError

from pattern_maker.piece_model import Size

SIZE_CHART_SCHEMA_NAME = "size_chart.yaml"

__all__ = [
    "SIZE_CHART_SCHEMA_NAME",
    "SchemaValidationError",
    "load_payload",
    "load_schema",
    "load_size_chart",
    "sizes_from_chart",
    "validate_size_chart",
]


class SchemaValidationError(RuntimeError):
    """Raised when an instance fails schema validation."""

    def __init__(self, errors: Iterable[ValidationError]):
        self.errors = tuple(errors)
        message = "Schema validation failed:\n" + "\n".join(_format_error(e) for e in self.errors)
        super().__init__(message)


def _schema_dir() -> Path:
    return Path(__file__).resolve().parent


@lru_cache(maxsize=4)
def load_schema(name: str = SIZE_CHART_SCHEMA_NAME) -> Mapping[str, Any]:
    """Load and cache a bundled schema definition by name."""

    schema_path = _schema_dir() / name
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema '{name}' not found at {schema_path}")

    with schema_path.open("r", encoding="utf-8") as handle:
        schema = yaml.safe_load(handle)

    if not isinstance(schema, Mapping):
        raise TypeError(f"Schema '{name}' must decode to a mapping, received {type(schema)!r}")

    return schema


def load_payload(path: Path) -> Any:
    """Load a JSON or YAML payload from disk."""

    if not path.exists():
        raise FileNotFoundError(f"Payload not found at {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as handle:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(handle)
        if suffix == ".json":
            return json.load(handle)
    raise ValueError(f"Unsupported payload extension '{suffix}' for {path}")


def validate_size_chart(instance: Any, *, schema_name: str = SIZE_CHART_SCHEMA_NAME) -> None:
    """Validate *instance* against the size chart schema.

    Besides the schema, size names must be unique and the base size must be
    one of the listed sizes at grade 0.
    """

    schema = load_schema(schema_name)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda exc: list(exc.path))
    if errors:
        raise SchemaValidationError(errors)

    names = [entry["name"] for entry in instance["sizes"]]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Size chart lists duplicate size names: {duplicates}")

    grades = {entry["name"]: entry["grade"] for entry in instance["sizes"]}
    base_size = instance["base_size"]
    if base_size not in grades:
        raise ValueError(f"Base size {base_size!r} is not listed in the size chart.")
    if grades[base_size] != 0:
        raise ValueError(f"Base size {base_size!r} must have grade 0, found {grades[base_size]}.")


def sizes_from_chart(instance: Mapping[str, Any]) -> list[Size]:
    """Convert a validated chart into :class:`Size` values in file order."""

    return [Size.from_mapping(entry) for entry in instance["sizes"]]


def load_size_chart(path: Path | str) -> list[Size]:
    """Load, validate and convert the size chart stored at *path*."""

    instance = load_payload(Path(path))
    if not isinstance(instance, Mapping):
        raise TypeError("Size chart payload must be a mapping.")

    validate_size_chart(instance)
    return sizes_from_chart(instance)


def _format_error(error: ValidationError) -> str:
    location = " / ".join(str(component) for component in error.absolute_path)
    prefix = f"[{location}] " if location else ""
    return f"{prefix}{error.message}"
