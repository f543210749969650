"""Compile field descriptors into per-field validation rules."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Annotated, Any, Iterable, Literal, Mapping

from pydantic import Field, StringConstraints, TypeAdapter, ValidationError

from dynform.model.field import FieldDescriptor, FieldKind, FieldValue, FormValues

_STRICT_BOOLEAN = TypeAdapter(Annotated[bool, Field(strict=True)])
_NUMBER = TypeAdapter(Annotated[float, Field(ge=0, allow_inf_nan=False)])
_TEXT = TypeAdapter(Annotated[str, StringConstraints(min_length=1)])
_ANYTHING = TypeAdapter(Any)


@dataclass(slots=True, frozen=True)
class ValidationRule:
    field_name: str
    label: str
    kind: FieldKind
    adapter: TypeAdapter
    empty_message: str | None = None

    def coerce(self, raw: Any) -> FieldValue:
        if self.kind is FieldKind.NUMBER_INPUT:
            return coerce_number(raw)
        if self.kind is FieldKind.CHECKBOX:
            if raw is None or raw == "":
                return False
            return raw
        if self.kind in (FieldKind.TEXT_INPUT, FieldKind.SELECT):
            return "" if raw is None else str(raw)
        return raw

    def check(self, value: Any) -> str | None:
        """Return the error message for ``value`` or ``None`` when it passes."""
        if self.empty_message is not None and isinstance(value, str) and value == "":
            return self.empty_message
        try:
            self.adapter.validate_python(value)
        except ValidationError as exc:
            errors = exc.errors()
            return str(errors[0]["msg"]) if errors else f"{self.label} is invalid"
        return None


ValidationSchema = dict[str, ValidationRule]


def coerce_number(raw: Any) -> int | float:
    """Convert raw input to a number; unparsable input becomes NaN."""
    if isinstance(raw, bool) or raw is None:
        return math.nan
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return math.nan


def compile_rule(descriptor: FieldDescriptor) -> ValidationRule:
    kind = descriptor.kind
    required_message = f"{descriptor.label} is required"

    if kind is FieldKind.CHECKBOX:
        return ValidationRule(descriptor.name, descriptor.label, kind, _STRICT_BOOLEAN)
    if kind is FieldKind.NUMBER_INPUT:
        return ValidationRule(descriptor.name, descriptor.label, kind, _NUMBER)
    if kind is FieldKind.TEXT_INPUT:
        return ValidationRule(descriptor.name, descriptor.label, kind, _TEXT, required_message)
    if kind is FieldKind.SELECT:
        allowed = tuple(descriptor.options)
        if not descriptor.required:
            allowed += ("",)
        adapter = TypeAdapter(Literal[allowed]) if allowed else TypeAdapter(str)
        message = required_message if descriptor.required else None
        return ValidationRule(descriptor.name, descriptor.label, kind, adapter, message)
    return ValidationRule(descriptor.name, descriptor.label, kind, _ANYTHING)


def compile_schema(descriptors: Iterable[FieldDescriptor] | None) -> ValidationSchema:
    if not descriptors:
        return {}
    return {descriptor.name: compile_rule(descriptor) for descriptor in descriptors}


def validate_values(schema: Mapping[str, ValidationRule], values: Mapping[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for name, rule in schema.items():
        message = rule.check(rule.coerce(values.get(name, "")))
        if message is not None:
            errors[name] = message
    return errors


def coerce_values(schema: Mapping[str, ValidationRule], values: Mapping[str, Any]) -> FormValues:
    return {name: rule.coerce(values.get(name, "")) for name, rule in schema.items()}
