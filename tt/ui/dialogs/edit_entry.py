"""Edit dialog for one saved entry. Produces a full replacement record."""

from PySide6.QtCore import QDate, QDateTime, QTime
from PySide6.QtWidgets import (
    QComboBox,
    QDateTimeEdit,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
)
from tt.core.duration import seconds_to_decimal_hours_string
from tt.core.entries import EntryValidationError, apply_edit

# The hours field is free text in the "H.MM" shape. Whatever is typed there becomes the
# new duration, independent of start/end.
class EditEntryDialog(QDialog):

    def __init__(self, parent, entry, clients, tasks):
        super().__init__(parent)
        self.setWindowTitle("Edit entry")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._entry = entry
        # Output attribute, read by MainWindow after the dialog closes
        self.updated_entry = None

        outer = QVBoxLayout(self)
        form = QFormLayout()

        self._client = QComboBox()
        self._client.addItems(_with_current(clients, entry.client))
        self._client.setCurrentText(entry.client)
        self._task = QComboBox()
        self._task.addItems(_with_current(tasks, entry.task))
        self._task.setCurrentText(entry.task)

        self._description = QPlainTextEdit(entry.description)
        self._description.setFixedHeight(80)

        self._start = QDateTimeEdit(_to_qdatetime(entry.start))
        self._start.setDisplayFormat("dd/MM/yyyy HH:mm")
        self._start.setCalendarPopup(True)
        self._end = QDateTimeEdit(_to_qdatetime(entry.end))
        self._end.setDisplayFormat("dd/MM/yyyy HH:mm")
        self._end.setCalendarPopup(True)

        self._hours = QLineEdit(seconds_to_decimal_hours_string(entry.duration))
        self._hours.setPlaceholderText("0.00")

        form.addRow("Client", self._client)
        form.addRow("Task", self._task)
        form.addRow("Description", self._description)
        form.addRow("Start", self._start)
        form.addRow("End", self._end)
        form.addRow("Duration (hours)", self._hours)
        outer.addLayout(form)

        self._error = QLabel("")
        self._error.setObjectName("error")
        self._error.setVisible(False)
        outer.addWidget(self._error)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        save_btn = QPushButton("Save")
        save_btn.setObjectName("primary")
        save_btn.clicked.connect(self._apply)
        btn_row.addWidget(cancel_btn)
        btn_row.addWidget(save_btn)
        outer.addLayout(btn_row)

    def _apply(self):
        try:
            self.updated_entry = apply_edit(
                self._entry,
                client=self._client.currentText(),
                task=self._task.currentText(),
                description=self._description.toPlainText(),
                start=self._start.dateTime().toPython(),
                end=self._end.dateTime().toPython(),
                hours_text=self._hours.text(),
            )
        except EntryValidationError as e:
            self._error.setText(str(e))
            self._error.setVisible(True)
            return
        self.accept()


# Keeps an entry's old client/task selectable even after an admin removed it from the list.
def _with_current(names, current):
    return list(names) if current in names else [current] + list(names)


def _to_qdatetime(dt):
    return QDateTime(QDate(dt.year, dt.month, dt.day), QTime(dt.hour, dt.minute))
