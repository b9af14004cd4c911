"""Size chart schemas and validators."""

from .validators import (
    SIZE_CHART_SCHEMA_NAME,
    SchemaValidationError,
    load_payload,
    load_schema,
    load_size_chart,
    sizes_from_chart,
    validate_size_chart,
)

__all__ = [
    "SIZE_CHART_SCHEMA_NAME",
    "SchemaValidationError",
    "load_payload",
    "load_schema",
    "load_size_chart",
    "sizes_from_chart",
    "validate_size_chart",
]
