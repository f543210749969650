"""Form field descriptor model definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Union

FieldValue = Union[str, int, float, bool]
FormValues = dict[str, FieldValue]


class FieldConfigError(ValueError):
    """Raised when a field configuration cannot be turned into descriptors."""


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    SELECT = "select"


class FieldVariant(str, Enum):
    INPUT = "Input"
    CHECKBOX = "Checkbox"
    SELECT = "Select"


class FieldKind(str, Enum):
    TEXT_INPUT = "text_input"
    NUMBER_INPUT = "number_input"
    CHECKBOX = "checkbox"
    SELECT = "select"
    UNSUPPORTED = "unsupported"


_KIND_BY_PAIR: dict[tuple[str, str], FieldKind] = {
    (FieldType.TEXT.value, FieldVariant.INPUT.value): FieldKind.TEXT_INPUT,
    (FieldType.NUMBER.value, FieldVariant.INPUT.value): FieldKind.NUMBER_INPUT,
    (FieldType.CHECKBOX.value, FieldVariant.CHECKBOX.value): FieldKind.CHECKBOX,
    (FieldType.SELECT.value, FieldVariant.SELECT.value): FieldKind.SELECT,
}


def resolve_kind(field_type: str, variant: str) -> FieldKind:
    return _KIND_BY_PAIR.get((str(field_type), str(variant)), FieldKind.UNSUPPORTED)


@dataclass(slots=True, frozen=True)
class FieldDescriptor:
    name: str
    label: str
    field_type: str
    variant: str
    required: bool = False
    default_value: str | bool | None = None
    checked: bool | None = None
    placeholder: str | None = None
    disabled: bool = False
    description: str | None = None
    order: int = 0
    options: tuple[str, ...] = ()

    @property
    def kind(self) -> FieldKind:
        return resolve_kind(self.field_type, self.variant)

    def default(self) -> FieldValue:
        """Initial value: ``default_value``, then ``checked``, then empty string."""
        if self.default_value is not None and self.default_value != "":
            return self.default_value
        if self.checked is not None:
            return self.checked
        return ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], order: int = 0) -> "FieldDescriptor":
        try:
            name = str(data["name"])
            field_type = str(data["type"])
            variant = str(data["variant"])
        except KeyError as exc:
            raise FieldConfigError(f"Field is missing key: {exc.args[0]}") from exc
        if not name:
            raise FieldConfigError("Field name must not be empty")

        checked = data.get("checked")
        return cls(
            name=name,
            label=str(data.get("label") or name),
            field_type=field_type,
            variant=variant,
            required=bool(data.get("required", False)),
            default_value=data.get("defaultValue", data.get("default_value")),
            checked=None if checked is None else bool(checked),
            placeholder=data.get("placeholder"),
            disabled=bool(data.get("disabled", False)),
            description=data.get("description"),
            order=int(data.get("order", order)),
            options=tuple(str(option) for option in data.get("options") or ()),
        )


def parse_descriptors(items: Iterable[Mapping[str, Any]]) -> list[FieldDescriptor]:
    descriptors = [FieldDescriptor.from_dict(item, order=index) for index, item in enumerate(items)]
    return order_descriptors(descriptors)


def order_descriptors(descriptors: Iterable[FieldDescriptor]) -> list[FieldDescriptor]:
    ordered = sorted(descriptors, key=lambda descriptor: descriptor.order)
    seen: set[str] = set()
    for descriptor in ordered:
        if descriptor.name in seen:
            raise FieldConfigError(f"Duplicate field name: {descriptor.name}")
        seen.add(descriptor.name)
    return ordered


def default_values(descriptors: Iterable[FieldDescriptor]) -> FormValues:
    return {descriptor.name: descriptor.default() for descriptor in descriptors}
