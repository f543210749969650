"""Input surface built from the session's field descriptors."""

from __future__ import annotations

import math
from typing import Any

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from dynform.model.field import FieldDescriptor, FieldKind
from dynform.model.schema import coerce_number
from dynform.model.visibility import CONTACT_METHOD_FIELD
from dynform.state.session import FormSession, LoadState
from dynform.state.submission import SubmissionStatus, SubmitOutcome

LOADING_TEXT = "Loading form..."
LOAD_ERROR_TEXT = "Error loading form"

_ERROR_STYLE = "color: #c62828;"
_DESCRIPTION_STYLE = "color: #616161;"
_SUCCESS_STYLE = "color: #2e7d32;"


class FormView(QWidget):
    def __init__(self, session: FormSession) -> None:
        super().__init__()
        self._session = session
        self._built_for: list[FieldDescriptor] | None = None
        self._rows: dict[str, QWidget] = {}
        self._editors: dict[str, QWidget] = {}
        self._error_labels: dict[str, QLabel] = {}

        self.state_label = QLabel(LOADING_TEXT)

        self.fields_box = QWidget()
        self._fields_layout = QVBoxLayout(self.fields_box)
        self._fields_layout.setContentsMargins(0, 0, 0, 0)

        self.submit_button = QPushButton("Submit")
        self.submit_button.clicked.connect(self.submit)
        self.reset_button = QPushButton("Reset Form")
        self.reset_button.clicked.connect(self.reset)

        buttons = QHBoxLayout()
        buttons.addWidget(self.submit_button)
        buttons.addWidget(self.reset_button)
        buttons.addStretch(1)

        self.interaction_label = QLabel("Interaction count: 0")
        self.submission_label = QLabel("")
        self.submission_label.setWordWrap(True)

        self.controls_box = QWidget()
        controls = QVBoxLayout(self.controls_box)
        controls.setContentsMargins(0, 0, 0, 0)
        controls.addLayout(buttons)
        controls.addWidget(self.interaction_label)
        controls.addWidget(self.submission_label)

        layout = QVBoxLayout(self)
        layout.addWidget(self.state_label)
        layout.addWidget(self.fields_box)
        layout.addWidget(self.controls_box)
        layout.addStretch(1)

        session.subscribe(self.refresh)
        self.refresh()

    def editor(self, name: str) -> QWidget | None:
        return self._editors.get(name)

    def row(self, name: str) -> QWidget | None:
        return self._rows.get(name)

    def error_text(self, name: str) -> str:
        label = self._error_labels.get(name)
        return label.text() if label is not None else ""

    def submit(self) -> None:
        result = self._session.submit()
        if result.outcome is SubmitOutcome.INVALID:
            self.submission_label.setStyleSheet(_ERROR_STYLE)
            self.submission_label.setText("Please fix the highlighted fields.")

    def reset(self) -> None:
        self._session.reset()

    def refresh(self) -> None:
        state = self._session.load_state
        ready = state is LoadState.READY
        self.state_label.setVisible(not ready)
        self.fields_box.setVisible(ready)
        self.controls_box.setVisible(ready)

        if state is LoadState.LOADING:
            self.state_label.setStyleSheet("")
            self.state_label.setText(LOADING_TEXT)
            return
        if state is LoadState.ERROR:
            self.state_label.setStyleSheet(_ERROR_STYLE)
            self.state_label.setText(LOAD_ERROR_TEXT)
            return

        if self._built_for is not self._session.descriptors:
            self._rebuild()

        visible = {descriptor.name for descriptor in self._session.visible_fields()}
        for name, row in self._rows.items():
            row.setVisible(name in visible)

        store = self._session.store
        for name, editor in self._editors.items():
            self._sync_editor(editor, store.values.get(name, ""))
            error = store.error_for(name) or ""
            label = self._error_labels[name]
            label.setText(error)
            label.setVisible(bool(error))

        controller = self._session.submission
        self.submit_button.setEnabled(controller.can_submit)
        self.submit_button.setText(controller.submit_label)
        self.interaction_label.setText(f"Interaction count: {self._session.interaction_count}")

        status = controller.state.status
        if status is SubmissionStatus.IDLE:
            if not any(store.errors.values()):
                self.submission_label.setText("")
            return
        style = {
            SubmissionStatus.CONFIRMED: _SUCCESS_STYLE,
            SubmissionStatus.FAILED: _ERROR_STYLE,
        }.get(status, "")
        self.submission_label.setStyleSheet(style)
        self.submission_label.setText(controller.status_message)

    def _rebuild(self) -> None:
        while self._fields_layout.count():
            item = self._fields_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self._rows.clear()
        self._editors.clear()
        self._error_labels.clear()

        descriptors = list(self._session.descriptors)
        if all(descriptor.name != CONTACT_METHOD_FIELD.name for descriptor in descriptors):
            descriptors.append(CONTACT_METHOD_FIELD)
        for descriptor in descriptors:
            row = self._build_row(descriptor)
            self._rows[descriptor.name] = row
            self._fields_layout.addWidget(row)
        self._built_for = self._session.descriptors

    def _build_row(self, descriptor: FieldDescriptor) -> QWidget:
        row = QWidget()
        layout = QVBoxLayout(row)
        layout.setContentsMargins(0, 4, 0, 4)
        layout.addWidget(QLabel(descriptor.label))

        editor = self._build_editor(descriptor)
        layout.addWidget(editor)
        if descriptor.kind is not FieldKind.UNSUPPORTED:
            self._editors[descriptor.name] = editor
            error_label = QLabel("")
            error_label.setStyleSheet(_ERROR_STYLE)
            error_label.setVisible(False)
            self._error_labels[descriptor.name] = error_label
            layout.addWidget(error_label)

        if descriptor.description:
            description = QLabel(descriptor.description)
            description.setWordWrap(True)
            description.setStyleSheet(_DESCRIPTION_STYLE)
            layout.addWidget(description)
        return row

    def _build_editor(self, descriptor: FieldDescriptor) -> QWidget:
        name = descriptor.name
        kind = descriptor.kind

        if kind in (FieldKind.TEXT_INPUT, FieldKind.NUMBER_INPUT):
            line_edit = QLineEdit()
            line_edit.setObjectName(name)
            line_edit.setPlaceholderText(descriptor.placeholder or "")
            line_edit.setEnabled(not descriptor.disabled)
            line_edit.textEdited.connect(lambda text: self._session.set_value(name, text))
            return line_edit

        if kind is FieldKind.CHECKBOX:
            checkbox = QCheckBox()
            checkbox.setObjectName(name)
            checkbox.setEnabled(not descriptor.disabled)
            checkbox.clicked.connect(lambda checked: self._session.set_value(name, bool(checked)))
            return checkbox

        if kind is FieldKind.SELECT:
            combo = QComboBox()
            combo.setObjectName(name)
            combo.addItem(descriptor.placeholder or "", "")
            for option in descriptor.options:
                combo.addItem(option.capitalize(), option)
            combo.setEnabled(not descriptor.disabled)
            combo.activated.connect(lambda index: self._session.set_value(name, combo.itemData(index)))
            return combo

        return QLabel(f"Unsupported field variant: {descriptor.variant}")

    def _sync_editor(self, editor: QWidget, value: Any) -> None:
        if isinstance(editor, QLineEdit):
            if isinstance(value, float) and math.isnan(value):
                return
            if _same_value(editor.text(), value):
                return
            editor.setText("" if isinstance(value, bool) else str(value))
        elif isinstance(editor, QCheckBox):
            editor.setChecked(bool(value))
        elif isinstance(editor, QComboBox):
            index = editor.findData(value if isinstance(value, str) else "")
            editor.setCurrentIndex(max(index, 0))


def _same_value(text: str, value: Any) -> bool:
    if isinstance(value, str):
        return text == value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return coerce_number(text) == value
    return False
