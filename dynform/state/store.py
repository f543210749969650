"""Current form values, per-field errors and change notification."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from dynform.model.field import FieldValue, FormValues
from dynform.model.schema import ValidationRule
from dynform.state.counter import InteractionCounter

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str | None], None]


class UnknownFieldError(KeyError):
    """Raised when a value is set for a field with no validation rule."""


class FormStore:
    def __init__(self, counter: InteractionCounter | None = None) -> None:
        self.counter = counter or InteractionCounter()
        self.values: FormValues = {}
        self.errors: dict[str, str | None] = {}
        self.dirty = False
        self._rules: dict[str, ValidationRule] = {}
        self._defaults: FormValues = {}
        self._listeners: list[ChangeListener] = []

    @property
    def interaction_count(self) -> int:
        return self.counter.value

    def bind(self, rules: Mapping[str, ValidationRule], defaults: Mapping[str, FieldValue]) -> None:
        self._rules = dict(rules)
        self._defaults = {
            name: self._rules[name].coerce(value) if name in self._rules and value != "" else value
            for name, value in defaults.items()
        }
        self.initialize(self._defaults)

    def initialize(self, defaults: Mapping[str, FieldValue]) -> None:
        self.values = dict(defaults)
        self.errors = {}
        self.dirty = False
        self.counter.reset()
        self._notify(None)

    def reset(self) -> None:
        self.initialize(self._defaults)

    def set_value(self, name: str, raw: Any) -> FieldValue:
        """Store ``raw`` for ``name`` and validate that single field before returning."""
        rule = self._rules.get(name)
        if rule is None:
            raise UnknownFieldError(name)

        value = rule.coerce(raw)
        self.values[name] = value
        self.errors[name] = rule.check(value)
        self.dirty = True
        self.counter.increment()
        logger.debug("Set %s=%r (error=%r)", name, value, self.errors[name])
        self._notify(name)
        return value

    def set_errors(self, errors: Mapping[str, str | None]) -> None:
        self.errors.update(errors)
        self._notify(None)

    def error_for(self, name: str) -> str | None:
        return self.errors.get(name)

    def snapshot(self) -> FormValues:
        return dict(self.values)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, name: str | None) -> None:
        for listener in list(self._listeners):
            listener(name)
