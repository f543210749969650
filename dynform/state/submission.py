"""Optimistic submission state machine with a single in-flight request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Callable, Mapping

from dynform.model.field import FormValues
from dynform.model.schema import ValidationRule, coerce_values, validate_values
from dynform.runtime.runner import TaskRunner

logger = logging.getLogger(__name__)

SUBMIT_LABEL = "Submit"
PENDING_LABEL = "Submitted, awaiting confirmation"


class SubmitError(RuntimeError):
    """Raised when a submission is rejected or its response is unusable."""


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class SubmissionState:
    status: SubmissionStatus = SubmissionStatus.IDLE
    submission_id: Any = None
    error: str | None = None


class SubmitOutcome(str, Enum):
    ACCEPTED = "accepted"
    INVALID = "invalid"
    BUSY = "busy"
    NOT_READY = "not_ready"


@dataclass(slots=True)
class SubmitResult:
    outcome: SubmitOutcome
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return self.outcome is SubmitOutcome.ACCEPTED


class SubmissionController:
    def __init__(self, runner: TaskRunner, submit_form: Callable[[FormValues], Mapping[str, Any]]) -> None:
        self._runner = runner
        self._submit_form = submit_form
        self._state = SubmissionState()
        self._generation = 0
        self._closed = False
        self._listeners: list[Callable[[SubmissionState], None]] = []

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def can_submit(self) -> bool:
        return not self._closed and self._state.status is not SubmissionStatus.OPTIMISTIC

    @property
    def submit_label(self) -> str:
        if self._state.status is SubmissionStatus.OPTIMISTIC:
            return PENDING_LABEL
        return SUBMIT_LABEL

    @property
    def status_message(self) -> str:
        status = self._state.status
        if status is SubmissionStatus.OPTIMISTIC:
            return PENDING_LABEL
        if status is SubmissionStatus.CONFIRMED:
            return f"Form submitted successfully! Submission ID: {self._state.submission_id}"
        if status is SubmissionStatus.FAILED:
            return f"Submission failed: {self._state.error}. Please try again."
        return ""

    def subscribe(self, listener: Callable[[SubmissionState], None]) -> None:
        self._listeners.append(listener)

    def submit(self, values: Mapping[str, Any], schema: Mapping[str, ValidationRule]) -> SubmitResult:
        if not self.can_submit:
            logger.warning("Submit rejected: a submission is already in flight")
            return SubmitResult(SubmitOutcome.BUSY)

        errors = validate_values(schema, values)
        if errors:
            logger.info("Submit blocked by %d validation error(s)", len(errors))
            return SubmitResult(SubmitOutcome.INVALID, errors)

        payload = coerce_values(schema, values)
        generation = self._generation
        self._transition(SubmissionState(SubmissionStatus.OPTIMISTIC))
        self._runner.submit(
            self._submit_form,
            payload,
            on_done=lambda result, error: self._on_response(generation, result, error),
        )
        return SubmitResult(SubmitOutcome.ACCEPTED)

    def reset(self) -> None:
        self._generation += 1
        self._transition(SubmissionState())

    def close(self) -> None:
        self._generation += 1
        self._closed = True

    def _on_response(self, generation: int, result: Any, error: BaseException | None) -> None:
        if self._closed or generation != self._generation:
            logger.debug("Ignoring stale submission response")
            return

        if error is None:
            try:
                submission_id = _response_id(result)
            except SubmitError as exc:
                error = exc
            else:
                logger.info("Submission confirmed with id %s", submission_id)
                self._transition(SubmissionState(SubmissionStatus.CONFIRMED, submission_id))
                return

        logger.error("Submission failed: %s", error)
        self._transition(SubmissionState(SubmissionStatus.FAILED, error=str(error)))

    def _transition(self, state: SubmissionState) -> None:
        logger.debug("Submission %s -> %s", self._state.status.value, state.status.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def _response_id(result: Any) -> Any:
    if not isinstance(result, Mapping) or "id" not in result:
        raise SubmitError("Submission response has no id")
    return result["id"]
