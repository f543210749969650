"""Main application window hosting the dynamic form."""

from __future__ import annotations

import logging

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QMainWindow, QScrollArea, QToolBar

from dynform.config import Settings
from dynform.net.client import FormServiceClient
from dynform.runtime.runner import QtTaskRunner, TaskRunner
from dynform.runtime.scheduler import QtScheduler, Scheduler
from dynform.state.session import FormSession, LoadState
from dynform.state.submission import SubmissionStatus
from dynform.ui.form_view import FormView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: Settings,
        client: FormServiceClient | None = None,
        runner: TaskRunner | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Dynamic Form")
        self.resize(640, 720)

        self._client = client or FormServiceClient(settings)
        self._runner = runner or QtTaskRunner()
        self._scheduler = scheduler or QtScheduler()
        self.session = FormSession(
            runner=self._runner,
            scheduler=self._scheduler,
            submit_form=self._client.submit_form,
            autosave=self._client.autosave,
            autosave_delay_ms=settings.autosave_delay_ms,
        )

        self.form_view = FormView(self.session)
        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setWidget(self.form_view)
        self.setCentralWidget(scroll_area)

        self._build_toolbar()
        self.session.subscribe(self._update_status)
        self.statusBar().showMessage("Ready")

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        reload_action = QAction("Reload Form", self)
        reload_action.setShortcut("Ctrl+R")
        reload_action.triggered.connect(self.reload_form)
        toolbar.addAction(reload_action)

        reset_action = QAction("Reset Form", self)
        reset_action.triggered.connect(self.reset_form)
        toolbar.addAction(reset_action)

    def reload_form(self) -> None:
        self.statusBar().showMessage("Loading form configuration...")
        self.session.load(self._client.fetch_field_config)

    def reset_form(self) -> None:
        self.session.reset()
        self.statusBar().showMessage("Form reset")

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.teardown()
        super().closeEvent(event)

    def _update_status(self) -> None:
        session = self.session
        if session.load_state is LoadState.LOADING:
            return
        if session.load_state is LoadState.ERROR:
            self.statusBar().showMessage(f"Load failed: {session.load_error}")
            return

        status = session.submission.state.status
        if status is SubmissionStatus.OPTIMISTIC:
            self.statusBar().showMessage("Submitting...")
        elif status is SubmissionStatus.FAILED:
            self.statusBar().showMessage("Submission failed")
        elif session.store.dirty:
            self.statusBar().showMessage(f"{len(session.visible_fields())} field(s), unsaved edits")
        else:
            message = f"{len(session.descriptors)} field(s) loaded"
            unsupported = session.unsupported_fields()
            if unsupported:
                message += f", {len(unsupported)} unsupported"
            self.statusBar().showMessage(message)

    def teardown(self) -> None:
        logger.debug("Tearing down form window")
        self.session.close()
        if isinstance(self._scheduler, QtScheduler):
            self._scheduler.cancel_all()
        if isinstance(self._runner, QtTaskRunner):
            self._runner.shutdown()
        self._client.close()
