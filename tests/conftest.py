"""
Pytest fixtures for the dynamic form tests.
Provides a virtual-clock scheduler, controllable task runners and sample fields.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from dynform.model.field import FieldDescriptor


class ManualScheduler:
    """Scheduler driven by an explicit virtual clock."""

    def __init__(self):
        self.now = 0
        self._tasks = {}
        self._next_handle = 0
        self.scheduled = 0
        self.cancelled = 0

    def schedule(self, delay_ms, fn):
        self._next_handle += 1
        self._tasks[self._next_handle] = (self.now + delay_ms, fn)
        self.scheduled += 1
        return self._next_handle

    def cancel(self, handle):
        if self._tasks.pop(handle, None) is not None:
            self.cancelled += 1

    @property
    def pending(self):
        return len(self._tasks)

    def advance(self, ms):
        self.now += ms
        due = sorted(
            (deadline, handle) for handle, (deadline, _) in self._tasks.items() if deadline <= self.now
        )
        for _, handle in due:
            task = self._tasks.pop(handle, None)
            if task is not None:
                task[1]()


class ImmediateRunner:
    """Runs each call synchronously and reports the outcome straight away."""

    def __init__(self):
        self.calls = []

    def submit(self, fn, *args, on_done):
        self.calls.append((fn, args))
        try:
            result = fn(*args)
        except Exception as exc:
            on_done(None, exc)
        else:
            on_done(result, None)


class DeferredRunner:
    """Holds calls in flight until the test resolves them."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, on_done):
        self.pending.append((fn, args, on_done))

    def resolve_next(self):
        fn, args, on_done = self.pending.pop(0)
        try:
            result = fn(*args)
        except Exception as exc:
            on_done(None, exc)
        else:
            on_done(result, None)

    def resolve_all(self):
        while self.pending:
            self.resolve_next()


class RecordingService:
    """Stand-in for the remote form service that records every call."""

    def __init__(self, submission_id=101, fields=None):
        self.submission_id = submission_id
        self.fields = fields or []
        self.submitted = []
        self.autosaved = []
        self.fail_submit = False
        self.fail_autosave = False
        self.fail_fetch = False

    def fetch_field_config(self):
        if self.fail_fetch:
            raise RuntimeError("Failed to fetch form configuration")
        return list(self.fields)

    def submit_form(self, values):
        self.submitted.append(dict(values))
        if self.fail_submit:
            raise RuntimeError("Failed to submit form data")
        return {"id": self.submission_id, **values}

    def autosave(self, values):
        self.autosaved.append(dict(values))
        if self.fail_autosave:
            raise RuntimeError("autosave endpoint unavailable")
        return values


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def immediate_runner():
    return ImmediateRunner()


@pytest.fixture
def deferred_runner():
    return DeferredRunner()


@pytest.fixture
def sample_fields():
    return [
        FieldDescriptor(
            name="name_8066616423",
            label="Name",
            field_type="text",
            variant="Input",
            required=True,
            placeholder="Enter your name",
            description="Your full name",
            order=0,
        ),
        FieldDescriptor(
            name="age_12345",
            label="Age",
            field_type="number",
            variant="Input",
            required=True,
            placeholder="Enter your age",
            order=1,
        ),
        FieldDescriptor(
            name="terms_001",
            label="Agree to terms",
            field_type="checkbox",
            variant="Checkbox",
            required=True,
            checked=False,
            order=2,
        ),
    ]


@pytest.fixture
def service(sample_fields):
    return RecordingService(fields=sample_fields)


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
