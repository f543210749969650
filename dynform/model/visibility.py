"""Conditional field visibility derived from current form values."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from dynform.model.field import FieldDescriptor, FieldKind, FieldType, FieldVariant
from dynform.model.schema import coerce_number

AGE_FIELD_NAME = "age"
CONTACT_AGE_THRESHOLD = 18

CONTACT_METHOD_FIELD = FieldDescriptor(
    name="contact_method",
    label="Preferred Contact Method",
    field_type=FieldType.SELECT.value,
    variant=FieldVariant.SELECT.value,
    placeholder="Select contact method",
    order=10_000,
    options=("email", "phone"),
)


def find_age_field(descriptors: Iterable[FieldDescriptor]) -> str | None:
    for descriptor in descriptors:
        if descriptor.kind is not FieldKind.NUMBER_INPUT:
            continue
        if descriptor.name == AGE_FIELD_NAME or descriptor.name.startswith(f"{AGE_FIELD_NAME}_"):
            return descriptor.name
    return None


def numeric_age(values: Mapping[str, Any], age_field: str | None) -> float | None:
    if age_field is None:
        return None
    age = coerce_number(values.get(age_field))
    if math.isnan(age):
        return None
    return float(age)


def extra_fields(
    descriptors: Iterable[FieldDescriptor],
    values: Mapping[str, Any],
) -> list[FieldDescriptor]:
    """Fields shown on top of the configured list for the given values.

    A configured field named like the contact selector takes its place.
    """
    descriptors = list(descriptors)
    if any(descriptor.name == CONTACT_METHOD_FIELD.name for descriptor in descriptors):
        return []
    age = numeric_age(values, find_age_field(descriptors))
    if age is not None and age > CONTACT_AGE_THRESHOLD:
        return [CONTACT_METHOD_FIELD]
    return []


def visible_fields(
    descriptors: Iterable[FieldDescriptor],
    values: Mapping[str, Any],
) -> list[FieldDescriptor]:
    base = list(descriptors)
    return base + extra_fields(base, values)
