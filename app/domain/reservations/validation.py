"""
Detail validation for reservation payloads.

A reservation's ``details`` map has no fixed shape; its structure comes from
the tenant's ReservationTypeSchema. ``validate_details`` walks the schema in
field order and collects every problem so the caller sees all of them at
once. Keys that the schema does not mention are ignored because details may
carry system or legacy fields.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .schemas import ReservationTypeSchema, SchemaFieldDefinition


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _stringify(value: Any) -> str:
    """Render a value the way a JSON client prints it (true, 3, not True, 3.0)"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "number": _is_number,
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, Mapping),
}


def _has_value(details: Mapping[str, Any], name: str) -> bool:
    return name in details and details[name] is not None and details[name] != ""


def _check_field(field_def: SchemaFieldDefinition, value: Any) -> list[str]:
    errors = []

    if not _TYPE_CHECKS[field_def.type](value):
        return [f"Field '{field_def.name}' must be a {field_def.type}"]

    if field_def.type == "number":
        if field_def.min is not None and value < field_def.min:
            errors.append(f"Field '{field_def.name}' must be at least {_stringify(field_def.min)}")
        if field_def.max is not None and value > field_def.max:
            errors.append(f"Field '{field_def.name}' must be at most {_stringify(field_def.max)}")

    if field_def.options:
        if field_def.type == "array":
            for item in value:
                if _stringify(item) not in field_def.options:
                    errors.append(
                        f"Field '{field_def.name}' contains invalid option '{_stringify(item)}'"
                    )
        elif _stringify(value) not in field_def.options:
            errors.append(f"Field '{field_def.name}' must be one of: {', '.join(field_def.options)}")

    return errors


def validate_details(
    details: Mapping[str, Any], schema: ReservationTypeSchema
) -> ValidationResult:
    """Check a details map against a reservation type schema"""
    errors: list[str] = []

    for field_def in schema.fields:
        if not _has_value(details, field_def.name):
            if field_def.required:
                errors.append(f"Field '{field_def.name}' is required")
            continue
        errors.extend(_check_field(field_def, details[field_def.name]))

    return ValidationResult(is_valid=not errors, errors=errors)

