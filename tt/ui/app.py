import sys
from pathlib import Path
from PySide6.QtCore import Qt, QTimer, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)
from tt.common.logger import log
from tt.common.setup import PATHS
from tt.core import config
from tt.core.controller import Controller, PermissionDenied
from tt.core.duration import format_hours_minutes
from tt.core.entries import EntryValidationError, summarize
from tt.core.export import ExportError, write_xlsx
from tt.core.stopwatch import Stopwatch
from tt.core.store import StoreError, SupabaseStore
from tt.ui.dialogs import AuthDialog, ConfigDialog, EditEntryDialog
from tt.ui.theme import THEMES, build_stylesheet
from tt.ui.widgets import (
    build_admin_panel,
    build_entry_form,
    build_history_panel,
    build_reminder_banner,
    build_stopwatch_panel,
    fill_history,
    fill_name_list,
    set_combo_items,
)

# Save the stopwatch snapshot every N ticks while it's running
_SNAPSHOT_EVERY_TICKS = 20

_PAGE_LOADING = 0
_PAGE_MAIN = 1


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of the application. Shows nothing but a loading label until a session exists, then the Timer and
# History tabs, plus Admin for administrators.
class MainWindow(QMainWindow):

    def __init__(self):
        super().__init__()
        self.setWindowTitle("TimeTracker")
        self.resize(960, 640)

        # -- Load settings --
        self._state = config.load_settings()
        s = self._state["settings"]
        self.theme = s["theme"] if s["theme"] in THEMES else "Light"
        self.reminder_minutes = int(s.get("reminder_minutes", 30))

        # -- Core --
        self.store = None
        self.controller = None
        self._connect_backend()

        self._tab_widgets = {}
        self._tick_n = 0

        # -- Build UI skeleton --
        central = QWidget()
        self.setCentralWidget(central)
        main_lay = QVBoxLayout(central)

        header = QHBoxLayout()
        self._welcome_lbl = QLabel("")
        self._welcome_lbl.setObjectName("muted")
        header.addWidget(self._welcome_lbl, 1)
        cfg_btn = QPushButton("⚙")
        cfg_btn.setToolTip("Settings")
        cfg_btn.setFixedWidth(36)
        cfg_btn.clicked.connect(self._on_config)
        self._signout_btn = QPushButton("Sign out")
        self._signout_btn.clicked.connect(self._on_sign_out)
        header.addWidget(cfg_btn)
        header.addWidget(self._signout_btn)
        main_lay.addLayout(header)

        self._reminder_banner, _ = build_reminder_banner(self._dismiss_reminder)
        main_lay.addWidget(self._reminder_banner)

        self._pages = QStackedWidget()
        loading_lbl = QLabel("Loading...")
        loading_lbl.setAlignment(Qt.AlignCenter)
        self._pages.addWidget(loading_lbl)
        self._tabs = QTabWidget()
        self._pages.addWidget(self._tabs)
        main_lay.addWidget(self._pages, 1)

        self._apply_style()
        self._show_loading()

        # -- Tick timer (1 s) --
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._timer.start(1000)

        # -- Reminder timer, only acts while the stopwatch is stopped --
        self._reminder_timer = QTimer(self)
        self._reminder_timer.timeout.connect(self._on_reminder)
        self._reminder_timer.start(self.reminder_minutes * 60 * 1000)

        QTimer.singleShot(0, self._authenticate)

    # ------------------------------------------------------------------ #
    #  Style                                                               #
    # ------------------------------------------------------------------ #

    def _apply_style(self):
        self.setStyleSheet(build_stylesheet(self.theme))

    # ------------------------------------------------------------------ #
    #  Backend / session                                                   #
    # ------------------------------------------------------------------ #

    def _connect_backend(self):
        s = self._state["settings"]
        stopwatch = (self.controller.stopwatch if self.controller
                     else Stopwatch.from_snapshot(self._state.get("stopwatch")))
        if self.store is not None:
            self.store.close()
        try:
            self.store = SupabaseStore(s["supabase_url"], s["supabase_key"], timeout=float(s["request_timeout"]))
        except StoreError as e:
            log.warning(f"Backend not available: {e}")
            self.store = None
        self.controller = Controller(
            self.store,
            notify=self._notify,
            admin_passphrase=s.get("admin_passphrase", ""),
            stopwatch=stopwatch,
        )

    def _authenticate(self):
        self._show_loading()
        while self.store is None:
            QMessageBox.information(self, "Backend", "Set the Supabase URL and API key to continue.")
            if not self._on_config():
                self.close()
                return

        dlg = AuthDialog(self, self.controller, last_email=self._state["settings"].get("last_email", ""))
        if dlg.exec() != QDialog.Accepted:
            self.close()
            return
        self._state["settings"]["last_email"] = dlg.email
        self._save_settings()

        self.controller.load_all()
        self._build_tabs()
        self._welcome_lbl.setText(f"Welcome, {self.controller.display_name}")
        self._pages.setCurrentIndex(_PAGE_MAIN)
        self._signout_btn.setVisible(True)

    def _show_loading(self):
        self._pages.setCurrentIndex(_PAGE_LOADING)
        self._welcome_lbl.setText("")
        self._signout_btn.setVisible(False)

    def _on_sign_out(self):
        self.controller.sign_out()
        self._tabs.clear()
        self._tab_widgets = {}
        self._authenticate()

    def _notify(self, title, message, level="info"):
        if level == "error":
            QMessageBox.warning(self, title, message)
        else:
            self.statusBar().showMessage(f"{title}: {message}", 6000)

    # ------------------------------------------------------------------ #
    #  Tabs                                                                #
    # ------------------------------------------------------------------ #

    def _build_tabs(self):
        self._tabs.clear()
        self._tab_widgets = {}

        timer_page = QWidget()
        timer_lay = QHBoxLayout(timer_page)
        sw_box, self._tab_widgets["stopwatch"] = build_stopwatch_panel(
            self._on_start, self._on_pause, self._on_finalize, self._on_stop, self._on_reset, self._on_add_manual)
        form_box, self._tab_widgets["form"] = build_entry_form(self._on_submit_entry)
        timer_lay.addWidget(sw_box, 1)
        timer_lay.addWidget(form_box, 1)
        self._tabs.addTab(timer_page, "Timer")

        history_page, self._tab_widgets["history"] = build_history_panel(self._on_edit_entry, self._on_export)
        self._tabs.addTab(history_page, "History")

        if self.controller.is_admin:
            admin_page, self._tab_widgets["admin"] = build_admin_panel(
                self._on_add_client, self._on_remove_client,
                self._on_add_task, self._on_remove_task, self._on_grant_admin)
            self._tabs.addTab(admin_page, "Admin")

        self._refresh_all()

    def _refresh_all(self):
        self._update_stopwatch_display()
        self._refresh_form()
        self._refresh_history()
        self._refresh_admin()

    def _update_stopwatch_display(self):
        w = self._tab_widgets.get("stopwatch")
        if not w:
            return
        sw = self.controller.stopwatch
        w["clock"].setText(sw.display)
        w["status"].setText("Running" if sw.running else ("Idle" if sw.is_idle else "Paused"))

    def _refresh_form(self):
        w = self._tab_widgets.get("form")
        if not w:
            return
        set_combo_items(w["client"], self.controller.clients)
        set_combo_items(w["task"], self.controller.tasks)
        duration = self.controller.draft_duration
        w["duration"].setText(f"Duration: {format_hours_minutes(duration)}" if duration > 0 else "")

    def _refresh_history(self):
        w = self._tab_widgets.get("history")
        if not w:
            return
        entries = self.controller.entries
        fill_history(w, entries, summarize(entries))

    def _refresh_admin(self):
        w = self._tab_widgets.get("admin")
        if not w:
            return
        fill_name_list(w["clients"], self.controller.clients, "clients")
        fill_name_list(w["tasks"], self.controller.tasks, "tasks")
        try:
            others = [p.username for p in self.controller.list_profiles() if not p.admin and p.username]
        except PermissionDenied:
            others = []
        set_combo_items(w["users"], others)
        w["grant"].setEnabled(bool(others))

    # ------------------------------------------------------------------ #
    #  Stopwatch handlers                                                  #
    # ------------------------------------------------------------------ #

    def _on_start(self):
        self.controller.stopwatch.start()
        self._reminder_banner.setVisible(False)
        self._update_stopwatch_display()
        self._save_settings()

    def _on_pause(self):
        self.controller.stopwatch.pause()
        self._update_stopwatch_display()
        self._save_settings()

    def _on_finalize(self):
        self.controller.complete_timer()
        self._update_stopwatch_display()
        self._refresh_form()
        self._save_settings()

    def _on_stop(self):
        self.controller.autosave_timer()
        self._update_stopwatch_display()
        self._refresh_form()
        self._save_settings()

    def _on_reset(self):
        self.controller.stopwatch.reset()
        self._update_stopwatch_display()
        self._save_settings()

    def _on_add_manual(self):
        w = self._tab_widgets["stopwatch"]
        if self.controller.stopwatch.add_manual(w["hours"].value(), w["minutes"].value(), w["seconds"].value()):
            for key in ("hours", "minutes", "seconds"):
                w[key].setValue(0)
            self._update_stopwatch_display()
            self._save_settings()

    # ------------------------------------------------------------------ #
    #  Entry form / history handlers                                       #
    # ------------------------------------------------------------------ #

    def _on_submit_entry(self):
        w = self._tab_widgets["form"]
        w["error"].setVisible(False)
        try:
            entry = self.controller.submit_entry(
                w["client"].currentText(), w["task"].currentText(), w["description"].toPlainText())
        except EntryValidationError as e:
            w["error"].setText(str(e))
            w["error"].setVisible(True)
            return
        if entry is None:
            return
        w["client"].setCurrentIndex(-1)
        w["task"].setCurrentIndex(-1)
        w["description"].clear()
        self._refresh_form()
        self._refresh_history()

    def _on_edit_entry(self, entry_id):
        entry = next((e for e in self.controller.entries if e.id == entry_id), None)
        if entry is None:
            return
        dlg = EditEntryDialog(self, entry, self.controller.clients, self.controller.tasks)
        if dlg.exec() == QDialog.Accepted and dlg.updated_entry is not None:
            if self.controller.update_entry(dlg.updated_entry):
                self._refresh_history()

    def _on_export(self):
        export_dir = self._state["settings"].get("export_dir") or PATHS.exports
        try:
            path = write_xlsx(self.controller.entries, Path(export_dir), self.controller.display_name)
        except ExportError as e:
            self._notify("Export", str(e), "info")
            return
        except OSError as e:
            log.warning("Export failed", exc_info=True)
            self._notify("Export failed", str(e), "error")
            return
        self._notify("Exported", str(path), "info")
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(path.parent)))

    # ------------------------------------------------------------------ #
    #  Admin handlers                                                      #
    # ------------------------------------------------------------------ #

    def _take_input(self, key):
        w = self._tab_widgets["admin"][key]["input"]
        text = w.text()
        return w, text

    def _on_add_client(self):
        w, text = self._take_input("clients")
        if self.controller.add_client(text):
            w.clear()
        self._refresh_form()
        self._refresh_admin()

    def _on_remove_client(self, name):
        self.controller.remove_client(name)
        self._refresh_form()
        self._refresh_admin()

    def _on_add_task(self):
        w, text = self._take_input("tasks")
        if self.controller.add_task(text):
            w.clear()
        self._refresh_form()
        self._refresh_admin()

    def _on_remove_task(self, name):
        self.controller.remove_task(name)
        self._refresh_form()
        self._refresh_admin()

    def _on_grant_admin(self):
        username = self._tab_widgets["admin"]["users"].currentText()
        if not username:
            return
        if QMessageBox.question(
                self, "Confirm",
                f"Give '{username}' administrator rights?"
        ) != QMessageBox.Yes:
            return
        self.controller.grant_admin(username)
        self._refresh_admin()

    # ------------------------------------------------------------------ #
    #  Settings dialog                                                     #
    # ------------------------------------------------------------------ #

    def _on_config(self):
        s = self._state["settings"]
        dlg = ConfigDialog(self, dict(s))
        if dlg.exec() != QDialog.Accepted:
            return False

        s["supabase_url"] = dlg.chosen_supabase_url
        s["supabase_key"] = dlg.chosen_supabase_key
        s["request_timeout"] = dlg.chosen_request_timeout
        s["admin_passphrase"] = dlg.chosen_admin_passphrase
        s["reminder_minutes"] = dlg.chosen_reminder_minutes
        s["export_dir"] = dlg.chosen_export_dir
        s["theme"] = dlg.chosen_theme
        self.theme = dlg.chosen_theme
        self.reminder_minutes = dlg.chosen_reminder_minutes
        self._reminder_timer.start(self.reminder_minutes * 60 * 1000)
        self._apply_style()
        self._save_settings()

        if dlg.backend_changed or self.store is None:
            was_signed_in = self.controller.is_authenticated
            if was_signed_in:
                self.controller.sign_out()
            self._connect_backend()
            if was_signed_in:
                self._tabs.clear()
                self._tab_widgets = {}
                QTimer.singleShot(0, self._authenticate)
        else:
            self.controller.admin_passphrase = dlg.chosen_admin_passphrase
        return True

    # ------------------------------------------------------------------ #
    #  Tick / reminder / persistence                                       #
    # ------------------------------------------------------------------ #

    def _tick(self):
        sw = self.controller.stopwatch
        if not sw.running:
            return
        sw.tick()
        self._update_stopwatch_display()
        self._tick_n += 1
        if self._tick_n % _SNAPSHOT_EVERY_TICKS == 0:
            self._save_settings()

    def _on_reminder(self):
        if not self.controller.is_authenticated or not self.controller.reminder_due():
            return
        log.debug("Showing time tracking reminder")
        self._reminder_banner.setVisible(True)
        self._notify("Reminder", "Don't forget to track the time you're working", "info")

    def _dismiss_reminder(self):
        self._reminder_banner.setVisible(False)

    def _save_settings(self):
        self._state["stopwatch"] = self.controller.stopwatch.snapshot()
        try:
            config.save_settings(self._state)
        except OSError:
            log.warning("Failed to save settings", exc_info=True)

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        self._save_settings()
        if self.store is not None:
            self.store.close()
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())
