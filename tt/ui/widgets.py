"""Panel builders for the main window tabs.

Each builder returns a (container, widget_dict) tuple. The widget_dict maps
logical names to sub-widgets so MainWindow can refresh them later without
rebuilding the panel.
"""

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QFrame,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)
from tt.core.duration import format_clock, format_hours_minutes
from tt.util import format_datetime


def _muted(text):
    lbl = QLabel(text)
    lbl.setObjectName("muted")
    return lbl


def build_reminder_banner(on_dismiss):
    """Dismissible banner nagging the user to track time. Hidden by default."""
    frame = QFrame()
    frame.setObjectName("reminder")
    lay = QHBoxLayout(frame)
    lay.setContentsMargins(10, 6, 6, 6)
    lbl = QLabel("Reminder: don't forget to track the time you're working")
    lay.addWidget(lbl, 1)
    close_btn = QPushButton("X")
    close_btn.setFixedWidth(28)
    close_btn.clicked.connect(on_dismiss)
    lay.addWidget(close_btn)
    frame.setVisible(False)
    return frame, {"label": lbl, "close": close_btn}


def build_stopwatch_panel(on_start, on_pause, on_finalize, on_stop, on_reset, on_add_manual):
    """Clock display, the control buttons, and the manual time inputs."""
    box = QGroupBox("Stopwatch")
    lay = QVBoxLayout(box)

    status_lbl = _muted("Idle")
    status_lbl.setAlignment(Qt.AlignCenter)
    lay.addWidget(status_lbl)

    clock_lbl = QLabel(format_clock(0))
    clock_lbl.setObjectName("clock")
    clock_lbl.setAlignment(Qt.AlignCenter)
    lay.addWidget(clock_lbl)

    btn_row = QHBoxLayout()
    start_btn = QPushButton("Start")
    start_btn.setObjectName("primary")
    start_btn.clicked.connect(on_start)
    pause_btn = QPushButton("Pause")
    pause_btn.clicked.connect(on_pause)
    finalize_btn = QPushButton("Finish")
    finalize_btn.setObjectName("danger")
    finalize_btn.setToolTip("Stop the stopwatch and hand the time to the entry form")
    finalize_btn.clicked.connect(on_finalize)
    stop_btn = QPushButton("Stop")
    stop_btn.setToolTip("Stop and clear the stopwatch, keeping its time and real start for the entry form")
    stop_btn.clicked.connect(on_stop)
    reset_btn = QPushButton("Reset")
    reset_btn.clicked.connect(on_reset)
    for btn in (start_btn, pause_btn, finalize_btn, stop_btn, reset_btn):
        btn_row.addWidget(btn)
    lay.addLayout(btn_row)

    # Manual time
    manual = QGroupBox("Add time manually")
    grid = QGridLayout(manual)
    spins = []
    for col, (label, maximum) in enumerate((("Hours", 999), ("Min", 59), ("Sec", 59))):
        grid.addWidget(_muted(label), 0, col)
        spin = QSpinBox()
        spin.setRange(0, maximum)
        grid.addWidget(spin, 1, col)
        spins.append(spin)
    add_btn = QPushButton("+ Add time")
    add_btn.clicked.connect(on_add_manual)
    grid.addWidget(add_btn, 2, 0, 1, 3)
    lay.addWidget(manual)
    lay.addStretch()

    widget_dict = {
        "status": status_lbl, "clock": clock_lbl,
        "start": start_btn, "pause": pause_btn,
        "finalize": finalize_btn, "stop": stop_btn, "reset": reset_btn,
        "hours": spins[0], "minutes": spins[1], "seconds": spins[2],
        "add": add_btn,
    }
    return box, widget_dict


def build_entry_form(on_submit):
    """Client/task pickers and description for the pending duration."""
    box = QGroupBox("New entry")
    lay = QVBoxLayout(box)

    duration_lbl = _muted("")
    lay.addWidget(duration_lbl)

    form = QFormLayout()
    client_cb = QComboBox()
    client_cb.setPlaceholderText("Select a client")
    task_cb = QComboBox()
    task_cb.setPlaceholderText("Select a task")
    desc_edit = QPlainTextEdit()
    desc_edit.setPlaceholderText("Describe the work done... (optional)")
    desc_edit.setFixedHeight(90)
    form.addRow("Client", client_cb)
    form.addRow("Task", task_cb)
    form.addRow("Description", desc_edit)
    lay.addLayout(form)

    error_lbl = QLabel("")
    error_lbl.setObjectName("error")
    error_lbl.setVisible(False)
    lay.addWidget(error_lbl)

    save_btn = QPushButton("Save entry")
    save_btn.setObjectName("primary")
    save_btn.clicked.connect(on_submit)
    lay.addWidget(save_btn)
    lay.addStretch()

    widget_dict = {
        "duration": duration_lbl, "client": client_cb, "task": task_cb,
        "description": desc_edit, "error": error_lbl, "save": save_btn,
    }
    return box, widget_dict


def set_combo_items(combo, names):
    """Replace a picker's items, keeping the current selection when it still exists."""
    current = combo.currentText()
    combo.blockSignals(True)
    combo.clear()
    combo.addItems(names)
    combo.setCurrentIndex(names.index(current) if current in names else -1)
    combo.blockSignals(False)


def build_history_panel(on_edit, on_export):
    """Summary row plus the entry list. Double click or Edit opens the edit dialog."""
    page = QWidget()
    lay = QVBoxLayout(page)

    summary = QHBoxLayout()
    count_lbl = QLabel("0")
    total_lbl = QLabel("0h 0m")
    clients_lbl = QLabel("0")
    for caption, lbl in (("Entries", count_lbl), ("Total time", total_lbl), ("Clients", clients_lbl)):
        col = QVBoxLayout()
        col.addWidget(_muted(caption))
        col.addWidget(lbl)
        summary.addLayout(col)
    summary.addStretch()
    export_btn = QPushButton("Export XLSX")
    export_btn.clicked.connect(on_export)
    summary.addWidget(export_btn)
    lay.addLayout(summary)

    entry_list = QListWidget()
    entry_list.itemDoubleClicked.connect(lambda item: on_edit(item.data(Qt.UserRole)))
    lay.addWidget(entry_list, 1)

    empty_lbl = _muted("No entries yet. Use the stopwatch to record your first one.")
    empty_lbl.setAlignment(Qt.AlignCenter)
    lay.addWidget(empty_lbl)

    edit_btn = QPushButton("Edit selected")
    edit_btn.clicked.connect(
        lambda _=False: entry_list.currentItem() and on_edit(entry_list.currentItem().data(Qt.UserRole)))
    lay.addWidget(edit_btn)

    widget_dict = {
        "count": count_lbl, "total": total_lbl, "clients": clients_lbl,
        "export": export_btn, "list": entry_list, "empty": empty_lbl, "edit": edit_btn,
    }
    return page, widget_dict


def fill_history(widget_dict, entries, summary):
    widget_dict["count"].setText(str(summary.count))
    widget_dict["total"].setText(summary.total_display)
    widget_dict["clients"].setText(str(summary.distinct_clients))
    widget_dict["export"].setEnabled(summary.count > 0)
    widget_dict["edit"].setEnabled(summary.count > 0)
    widget_dict["empty"].setVisible(summary.count == 0)

    entry_list = widget_dict["list"]
    entry_list.clear()
    for e in entries:
        text = f"{e.client}  |  {e.task}  |  {format_hours_minutes(e.duration)}\n" \
               f"{format_datetime(e.start)} -> {format_datetime(e.end)}"
        if e.description:
            text += f"\n{e.description}"
        item = QListWidgetItem(text)
        item.setData(Qt.UserRole, e.id)
        entry_list.addItem(item)


def build_name_list_editor(title, placeholder, on_add, on_remove):
    """One admin list (clients or tasks): input + Add, the current names, and Remove."""
    box = QGroupBox(title)
    lay = QVBoxLayout(box)

    row = QHBoxLayout()
    name_input = QLineEdit()
    name_input.setPlaceholderText(placeholder)
    name_input.returnPressed.connect(on_add)
    add_btn = QPushButton("Add")
    add_btn.clicked.connect(on_add)
    row.addWidget(name_input, 1)
    row.addWidget(add_btn)
    lay.addLayout(row)

    count_lbl = _muted("")
    lay.addWidget(count_lbl)
    names = QListWidget()
    lay.addWidget(names, 1)

    remove_btn = QPushButton("Remove selected")
    remove_btn.setObjectName("danger")
    remove_btn.clicked.connect(lambda _=False: names.currentItem() and on_remove(names.currentItem().text()))
    lay.addWidget(remove_btn)

    widget_dict = {"input": name_input, "add": add_btn, "count": count_lbl, "list": names, "remove": remove_btn}
    return box, widget_dict


def fill_name_list(widget_dict, names, noun):
    widget_dict["list"].clear()
    widget_dict["list"].addItems(names)
    widget_dict["count"].setText(f"Current {noun} ({len(names)})" if names else f"No {noun} configured")
    widget_dict["remove"].setEnabled(bool(names))


def build_admin_panel(on_add_client, on_remove_client, on_add_task, on_remove_task, on_grant_admin):
    page = QWidget()
    lay = QVBoxLayout(page)
    lay.addWidget(_muted("Manage the clients and tasks available to everyone"))

    lists_row = QHBoxLayout()
    clients_box, clients = build_name_list_editor("Clients", "New client name...", on_add_client, on_remove_client)
    tasks_box, tasks = build_name_list_editor("Tasks", "New task name...", on_add_task, on_remove_task)
    lists_row.addWidget(clients_box)
    lists_row.addWidget(tasks_box)
    lay.addLayout(lists_row, 1)

    admins_box = QGroupBox("Administrators")
    admins_lay = QHBoxLayout(admins_box)
    user_cb = QComboBox()
    user_cb.setPlaceholderText("Select a user")
    grant_btn = QPushButton("Make administrator")
    grant_btn.clicked.connect(on_grant_admin)
    admins_lay.addWidget(user_cb, 1)
    admins_lay.addWidget(grant_btn)
    lay.addWidget(admins_box)

    widget_dict = {"clients": clients, "tasks": tasks, "users": user_cb, "grant": grant_btn}
    return page, widget_dict
