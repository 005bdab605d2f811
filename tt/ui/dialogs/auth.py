"""Sign in / register dialog. The only thing shown until a session exists."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)
from tt.common.logger import log
from tt.core.controller import RegistrationError
from tt.core.store import AuthError, StoreError

# Accepts once sign-in succeeds. Registering flips back to sign-in mode with the email kept, since a fresh
# account may still need to confirm its email.
class AuthDialog(QDialog):

    def __init__(self, parent, controller, last_email=""):
        super().__init__(parent)
        self.setWindowTitle("TimeTracker - Sign in")
        self.setModal(True)
        self.setMinimumWidth(380)
        self._controller = controller
        self._is_login = True

        outer = QVBoxLayout(self)

        title = QLabel("TimeTracker")
        title.setFont(QFont("Segoe UI", 18, QFont.Bold))
        title.setAlignment(Qt.AlignCenter)
        outer.addWidget(title)
        self._subtitle = QLabel("")
        self._subtitle.setObjectName("muted")
        self._subtitle.setAlignment(Qt.AlignCenter)
        outer.addWidget(self._subtitle)

        self._error = QLabel("")
        self._error.setObjectName("error")
        self._error.setWordWrap(True)
        self._error.setVisible(False)
        outer.addWidget(self._error)

        form = QFormLayout()
        self._username = QLineEdit()
        self._username.setPlaceholderText("Username")
        self._email = QLineEdit(last_email)
        self._email.setPlaceholderText("you@example.com")
        self._password = QLineEdit()
        self._password.setEchoMode(QLineEdit.Password)
        self._confirm = QLineEdit()
        self._confirm.setEchoMode(QLineEdit.Password)
        self._passphrase = QLineEdit()
        self._passphrase.setEchoMode(QLineEdit.Password)
        self._passphrase.setPlaceholderText("Only needed for administrator accounts")

        self._register_rows = []
        for label, widget, register_only in (
                ("Username", self._username, True),
                ("Email", self._email, False),
                ("Password", self._password, False),
                ("Confirm password", self._confirm, True),
                ("Administrator passphrase", self._passphrase, True),
        ):
            lbl = QLabel(label)
            form.addRow(lbl, widget)
            if register_only:
                self._register_rows.append((lbl, widget))
        outer.addLayout(form)

        for w in (self._username, self._email, self._password, self._confirm, self._passphrase):
            w.textChanged.connect(self._clear_error)
        self._password.returnPressed.connect(self._submit)

        btn_row = QHBoxLayout()
        self._submit_btn = QPushButton("")
        self._submit_btn.setObjectName("primary")
        self._submit_btn.setDefault(True)
        self._submit_btn.clicked.connect(self._submit)
        self._toggle_btn = QPushButton("")
        self._toggle_btn.setFlat(True)
        self._toggle_btn.clicked.connect(self._toggle_mode)
        btn_row.addWidget(self._toggle_btn)
        btn_row.addStretch()
        btn_row.addWidget(self._submit_btn)
        outer.addLayout(btn_row)

        self._apply_mode()

    @property
    def email(self):
        return self._email.text().strip()

    def _apply_mode(self):
        for lbl, widget in self._register_rows:
            lbl.setVisible(not self._is_login)
            widget.setVisible(not self._is_login)
        self._subtitle.setText("Sign in to your account" if self._is_login else "Register a new user")
        self._submit_btn.setText("Sign in" if self._is_login else "Register")
        self._toggle_btn.setText("Create an account" if self._is_login else "Back to sign in")
        self.adjustSize()

    def _toggle_mode(self):
        self._is_login = not self._is_login
        self._clear_error()
        self._apply_mode()

    def _clear_error(self):
        self._error.setVisible(False)

    def _show_error(self, message):
        self._error.setText(message)
        self._error.setVisible(True)

    def _submit(self):
        self._submit_btn.setEnabled(False)
        try:
            if self._is_login:
                self._sign_in()
            else:
                self._register()
        finally:
            self._submit_btn.setEnabled(True)

    def _sign_in(self):
        try:
            self._controller.sign_in(self.email, self._password.text())
        except AuthError as e:
            self._show_error(str(e))
            return
        except StoreError:
            log.warning("Sign in failed unexpectedly", exc_info=True)
            self._show_error("Unexpected error while signing in")
            return
        self.accept()

    def _register(self):
        try:
            self._controller.sign_up(
                self.email,
                self._password.text(),
                self._confirm.text(),
                self._username.text(),
                admin_passphrase=self._passphrase.text(),
            )
        except (RegistrationError, AuthError) as e:
            self._show_error(str(e))
            return
        except StoreError:
            log.warning("Registration failed unexpectedly", exc_info=True)
            self._show_error("Unexpected error while registering")
            return
        for w in (self._username, self._password, self._confirm, self._passphrase):
            w.clear()
        self._is_login = True
        self._apply_mode()
        self._subtitle.setText("User registered, sign in to continue")
