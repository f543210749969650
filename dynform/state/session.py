"""In-memory session aggregate for one dynamic form."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Callable, Iterable, Sequence

from dynform.model.field import FieldDescriptor, FieldKind, FormValues, default_values, order_descriptors
from dynform.model.schema import ValidationRule, ValidationSchema, compile_rule, compile_schema
from dynform.model.visibility import CONTACT_METHOD_FIELD, visible_fields
from dynform.runtime.runner import TaskRunner
from dynform.runtime.scheduler import Scheduler
from dynform.state.autosave import DEFAULT_AUTOSAVE_DELAY_MS, AutosaveScheduler
from dynform.state.counter import InteractionCounter
from dynform.state.store import FormStore
from dynform.state.submission import SubmissionController, SubmitOutcome, SubmitResult

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class HiddenFieldError(RuntimeError):
    """Raised when a value is set for a conditional field that is not shown."""


class FormSession:
    """Owns the store, visibility, autosave and submission state of one form.

    All mutation happens on one thread; network calls go through ``runner``
    and time-based work through ``scheduler``.
    """

    def __init__(
        self,
        runner: TaskRunner,
        scheduler: Scheduler,
        submit_form: Callable[[FormValues], Any],
        autosave: Callable[[FormValues], Any],
        autosave_delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
    ) -> None:
        self._runner = runner
        self.counter = InteractionCounter()
        self.store = FormStore(self.counter)
        self.autosave = AutosaveScheduler(scheduler, runner, autosave, delay_ms=autosave_delay_ms)
        self.submission = SubmissionController(runner, submit_form)
        self.descriptors: list[FieldDescriptor] = []
        self.schema: ValidationSchema = {}
        self.load_state = LoadState.LOADING
        self.load_error: str | None = None
        self._load_generation = 0
        self._closed = False
        self._listeners: list[Callable[[], None]] = []

        self.store.subscribe(lambda name: self._notify())
        self.submission.subscribe(lambda state: self._notify())

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def load(self, fetch_field_config: Callable[[], Sequence[FieldDescriptor]]) -> None:
        """Fetch descriptors through the runner and apply them when they arrive."""
        self._load_generation += 1
        generation = self._load_generation
        self.autosave.cancel()
        self.load_state = LoadState.LOADING
        self.load_error = None
        self._notify()

        def on_done(result: Any, error: BaseException | None) -> None:
            if self._closed or generation != self._load_generation:
                return
            if error is not None:
                self.fail_load(error)
            else:
                self.apply_descriptors(result)

        self._runner.submit(fetch_field_config, on_done=on_done)

    def apply_descriptors(self, descriptors: Iterable[FieldDescriptor] | None) -> None:
        try:
            ordered = order_descriptors(descriptors or [])
        except ValueError as exc:
            self.fail_load(exc)
            return

        self.descriptors = ordered
        self.schema = compile_schema(ordered)
        rules = dict(self.schema)
        rules.setdefault(CONTACT_METHOD_FIELD.name, compile_rule(CONTACT_METHOD_FIELD))
        self.load_state = LoadState.READY
        self.load_error = None
        self.submission.reset()
        logger.info("Loaded form with %d field(s)", len(ordered))
        for descriptor in self.unsupported_fields():
            logger.warning("Unsupported field variant %r for field %s", descriptor.variant, descriptor.name)
        self.store.bind(rules, default_values(ordered))

    def fail_load(self, error: BaseException) -> None:
        logger.error("Failed to load form configuration: %s", error)
        self.descriptors = []
        self.schema = {}
        self.load_state = LoadState.ERROR
        self.load_error = str(error)
        self._notify()

    @property
    def values(self) -> FormValues:
        return self.store.values

    @property
    def interaction_count(self) -> int:
        return self.counter.value

    def visible_fields(self) -> list[FieldDescriptor]:
        return visible_fields(self.descriptors, self.store.values)

    def is_visible(self, name: str) -> bool:
        return any(descriptor.name == name for descriptor in self.visible_fields())

    def unsupported_fields(self) -> list[FieldDescriptor]:
        return [descriptor for descriptor in self.descriptors if descriptor.kind is FieldKind.UNSUPPORTED]

    def set_value(self, name: str, raw: Any) -> None:
        if not self.is_visible(name):
            raise HiddenFieldError(f"Field is not visible: {name}")
        self.store.set_value(name, raw)
        self.autosave.notify(self.store.snapshot())

    def active_schema(self) -> ValidationSchema:
        """Rules for the fields currently shown; hidden fields are never required."""
        return {
            descriptor.name: self._rule_for(descriptor)
            for descriptor in self.visible_fields()
        }

    def _rule_for(self, descriptor: FieldDescriptor) -> ValidationRule:
        return self.schema.get(descriptor.name) or compile_rule(descriptor)

    def submit(self) -> SubmitResult:
        if self.load_state is not LoadState.READY:
            return SubmitResult(SubmitOutcome.NOT_READY)
        result = self.submission.submit(self.store.values, self.active_schema())
        if result.errors:
            self.store.set_errors(result.errors)
        return result

    def reset(self) -> None:
        self.autosave.cancel()
        self.submission.reset()
        self.store.reset()

    def close(self) -> None:
        self._closed = True
        self.autosave.close()
        self.submission.close()
        self._listeners.clear()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
