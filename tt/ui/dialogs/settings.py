"""Configuration dialog for TimeTracker, tabbed sidebar layout."""

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices, QFont
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDoubleSpinBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QPushButton,
    QSpinBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)
from tt.common.setup import PATHS
from tt.ui.theme import THEMES

# Simple tabbed settings dialog with a left sidebar for different categories. Opens from the gear button in the
# main window header.
class ConfigDialog(QDialog):

    def __init__(self, parent, cfg):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)

        # Output attributes, read by MainWindow after dialog closes
        self.chosen_supabase_url = cfg.get("supabase_url", "")
        self.chosen_supabase_key = cfg.get("supabase_key", "")
        self.chosen_request_timeout = cfg.get("request_timeout", 10.0)
        self.chosen_admin_passphrase = cfg.get("admin_passphrase", "")
        self.chosen_reminder_minutes = cfg.get("reminder_minutes", 30)
        self.chosen_export_dir = cfg.get("export_dir", "")
        self.chosen_theme = cfg.get("theme", "Light")
        self.backend_changed = False

        # --- Layout ---
        outer = QVBoxLayout(self)
        body = QHBoxLayout()

        # Left sidebar
        self._tab_list = QListWidget()
        self._tab_list.setFixedWidth(140)
        self._tab_list.setFont(QFont("Calibri", 12))
        self._tab_list.addItem("Backend")
        self._tab_list.addItem("Reminders")
        self._tab_list.addItem("Appearance")
        self._tab_list.setCurrentRow(0)
        self._tab_list.currentRowChanged.connect(self._on_tab_changed)
        body.addWidget(self._tab_list)

        # Right content
        self._stack = QStackedWidget()
        self._stack.addWidget(self._build_backend_page(cfg))
        self._stack.addWidget(self._build_reminders_page(cfg))
        self._stack.addWidget(self._build_appearance_page(cfg))
        body.addWidget(self._stack, 1)

        outer.addLayout(body, 1)

        # Bottom row: reconnect indicator + Apply
        btn_row = QHBoxLayout()
        self._reconnect_lbl = QLabel("* Signs you out and reconnects")
        self._reconnect_lbl.setFont(QFont("Calibri", 10))
        self._reconnect_lbl.setStyleSheet("color: #888888;")
        self._reconnect_lbl.setVisible(False)
        btn_row.addWidget(self._reconnect_lbl)
        btn_row.addStretch()
        apply_btn = QPushButton("Apply")
        apply_btn.setFont(QFont("Calibri", 12))
        apply_btn.clicked.connect(self._apply)
        btn_row.addWidget(apply_btn)
        outer.addLayout(btn_row)

    def _on_tab_changed(self, index):
        self._stack.setCurrentIndex(index)

    def _check_reconnect_needed(self):
        self._reconnect_lbl.setVisible(
            self._url.text().strip() != self.chosen_supabase_url
            or self._key.text().strip() != self.chosen_supabase_key)

    # Label + widget row with a shared tooltip, the way every settings row is laid out.
    @staticmethod
    def _row(lay, text, widget, tooltip):
        row = QHBoxLayout()
        lbl = QLabel(text)
        lbl.setFont(QFont("Calibri", 12, QFont.Bold))
        lbl.setToolTip(tooltip)
        widget.setToolTip(tooltip)
        widget.setMinimumWidth(260)
        row.addWidget(lbl)
        row.addWidget(widget)
        lay.addLayout(row)

    # ------------------------------------------------------------------ #
    #  Backend page                                                        #
    # ------------------------------------------------------------------ #

    def _build_backend_page(self, cfg):
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setSpacing(12)

        self._url = QLineEdit(cfg.get("supabase_url", ""))
        self._url.setPlaceholderText("https://<project>.supabase.co")
        self._url.textChanged.connect(self._check_reconnect_needed)
        self._row(lay, "Supabase URL:", self._url, "Base URL of the Supabase project entries are stored in.")

        self._key = QLineEdit(cfg.get("supabase_key", ""))
        self._key.setEchoMode(QLineEdit.Password)
        self._key.textChanged.connect(self._check_reconnect_needed)
        self._row(lay, "API Key:", self._key, "The project's public (anon) API key.")

        self._timeout = QDoubleSpinBox()
        self._timeout.setRange(1.0, 120.0)
        self._timeout.setSuffix(" s")
        self._timeout.setValue(float(cfg.get("request_timeout", 10.0)))
        self._row(lay, "Request Timeout:", self._timeout, "How long to wait for the backend before giving up on a request.")

        self._passphrase = QLineEdit(cfg.get("admin_passphrase", ""))
        self._passphrase.setEchoMode(QLineEdit.Password)
        self._row(lay, "Admin Passphrase:", self._passphrase,
                  "Shared passphrase that makes a newly registered account an administrator. Leave empty to disable.")

        lay.addStretch()
        return page

    # ------------------------------------------------------------------ #
    #  Reminders page                                                      #
    # ------------------------------------------------------------------ #

    def _build_reminders_page(self, cfg):
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setSpacing(12)

        self._reminder = QSpinBox()
        self._reminder.setRange(1, 240)
        self._reminder.setSuffix(" min")
        self._reminder.setValue(int(cfg.get("reminder_minutes", 30)))
        self._row(lay, "Reminder Interval:", self._reminder,
                  "While the stopwatch isn't running, remind me to track time every N minutes.")

        lay.addStretch()
        return page

    # ------------------------------------------------------------------ #
    #  Appearance page                                                     #
    # ------------------------------------------------------------------ #

    def _build_appearance_page(self, cfg):
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setSpacing(12)

        self._theme = QComboBox()
        self._theme.addItems(list(THEMES))
        self._theme.setCurrentText(cfg.get("theme", "Light"))
        self._row(lay, "Program Theme:", self._theme, "Color scheme of the program.")

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setFrameShadow(QFrame.Sunken)
        lay.addWidget(sep)

        self._export_dir = QLineEdit(cfg.get("export_dir", ""))
        self._export_dir.setPlaceholderText(str(PATHS.exports))
        self._row(lay, "Export Folder:", self._export_dir, "Where XLSX exports are written.")

        btn_row = QHBoxLayout()
        browse_btn = QPushButton("Browse...")
        browse_btn.setFont(QFont("Calibri", 11))
        browse_btn.clicked.connect(self._browse_export_dir)
        folder_btn = QPushButton("Open Logs Folder")
        folder_btn.setFont(QFont("Calibri", 11))
        folder_btn.clicked.connect(
            lambda: QDesktopServices.openUrl(QUrl.fromLocalFile(str(PATHS.logs)))
        )
        btn_row.addWidget(browse_btn)
        btn_row.addStretch()
        btn_row.addWidget(folder_btn)
        lay.addLayout(btn_row)

        lay.addStretch()
        return page

    def _browse_export_dir(self):
        chosen = QFileDialog.getExistingDirectory(
            self, "Export Folder", self._export_dir.text() or str(PATHS.exports))
        if chosen:
            self._export_dir.setText(chosen)

    # ------------------------------------------------------------------ #
    #  Apply                                                               #
    # ------------------------------------------------------------------ #

    def _apply(self):
        url = self._url.text().strip()
        key = self._key.text().strip()
        self.backend_changed = (url != self.chosen_supabase_url or key != self.chosen_supabase_key)
        self.chosen_supabase_url = url
        self.chosen_supabase_key = key
        self.chosen_request_timeout = self._timeout.value()
        self.chosen_admin_passphrase = self._passphrase.text()
        self.chosen_reminder_minutes = self._reminder.value()
        self.chosen_theme = self._theme.currentText()
        self.chosen_export_dir = self._export_dir.text().strip()
        self.accept()
