"""Application state and the routing of every mutation through the remote store.

The controller is the single owner of the entry list, the client/task lists,
the pending draft duration and the stopwatch, so views can come and go without
losing anything. It never talks to Qt; user-facing messages go through the
`notify(title, message, level)` callable it is given.
"""

import hmac

from tt.common.logger import log
from tt.core.duration import format_hours_minutes
from tt.core.entries import TimeEntry, build_draft, replace_entry
from tt.core.lists import CLIENTS_TABLE, TASKS_TABLE, should_add
from tt.core.stopwatch import Stopwatch, anchor_from
from tt.core.store import AuthError, Profile, StoreError
from tt.util import now_local

MIN_PASSWORD_LENGTH = 6
FALLBACK_DISPLAY_NAME = "User"

_LIST_LABELS = {
    CLIENTS_TABLE: "client",
    TASKS_TABLE: "task",
}


class RegistrationError(ValueError):
    """Sign-up form is incomplete or inconsistent. The message is shown as-is."""


class PermissionDenied(Exception):
    pass


def _noop_notify(title, message, level="info"):
    pass


class Controller:

    def __init__(self, store, notify=None, admin_passphrase="", stopwatch=None, clock=now_local):
        self.store = store
        self.notify = notify or _noop_notify
        self.admin_passphrase = admin_passphrase or ""
        self._clock = clock

        self.session = None
        self.profile: Profile | None = None
        self.loading = False

        self.entries: list[TimeEntry] = []
        self.clients: list[str] = []
        self.tasks: list[str] = []

        # Duration waiting to be turned into an entry by the entry form
        self.draft_duration = 0
        self.draft_start = None

        self.stopwatch = stopwatch or Stopwatch(clock=clock)

    # ------------------------------------------------------------------ #
    #  Session                                                             #
    # ------------------------------------------------------------------ #

    @property
    def is_authenticated(self):
        return self.session is not None

    @property
    def is_admin(self):
        return self.profile is not None and self.profile.admin

    @property
    def display_name(self):
        if self.profile and self.profile.username:
            return self.profile.username
        if self.session and self.session.email:
            return self.session.email
        return FALLBACK_DISPLAY_NAME

    # Raises AuthError/StoreError for the auth dialog to show inline.
    def sign_in(self, email, password):
        if not email or not password:
            raise AuthError("Email and password are required")
        session = self.store.sign_in(email, password)
        self.session = session
        self.loading = True
        try:
            self.profile = self.store.get_profile(session.user_id)
        except StoreError:
            log.warning("Could not load profile, continuing as a regular user", exc_info=True)
            self.profile = None
        if self.profile is None:
            self.profile = Profile(
                user_id=session.user_id,
                username=session.username or session.email.split("@")[0],
            )
        log.info(f"Session started for '{self.display_name}' (admin={self.is_admin})")
        return session

    def sign_up(self, email, password, confirm_password, username, admin_passphrase=""):
        if not email or not password:
            raise RegistrationError("Email and password are required")
        if not (username or "").strip():
            raise RegistrationError("A username is required")
        if password != confirm_password:
            raise RegistrationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        grant_admin = False
        if admin_passphrase:
            if not self.admin_passphrase or not hmac.compare_digest(
                    admin_passphrase.encode("utf-8"), self.admin_passphrase.encode("utf-8")):
                raise RegistrationError("Incorrect administrator passphrase")
            grant_admin = True

        username = username.strip()
        user_id = self.store.sign_up(email, password, username)
        try:
            self.store.create_profile(user_id, username, admin=grant_admin)
        except StoreError:
            log.warning(f"Registered '{email}' but could not create the profile row", exc_info=True)
        self.notify("User registered", "The account was created, you can sign in now.", "info")
        return user_id

    def sign_out(self):
        try:
            self.store.sign_out()
        except StoreError:
            log.warning("Sign out request failed, clearing the local session anyway", exc_info=True)
        self.session = None
        self.profile = None
        self.entries = []
        self.clients = []
        self.tasks = []
        self.draft_duration = 0
        self.draft_start = None
        self.notify("Signed out", "You have signed out.", "info")

    # ------------------------------------------------------------------ #
    #  Loading                                                             #
    # ------------------------------------------------------------------ #

    def load_all(self):
        if not self.is_authenticated:
            return
        self.loading = True
        try:
            self.load_entries()
            self.reload_list(CLIENTS_TABLE)
            self.reload_list(TASKS_TABLE)
        finally:
            self.loading = False

    def load_entries(self):
        try:
            rows = self.store.list_entries(self.session.user_id)
        except StoreError:
            log.warning("Could not load time entries", exc_info=True)
            self.notify("Error", "Could not load your entries", "error")
            return False
        entries = []
        skipped = 0
        for row in rows:
            try:
                entries.append(TimeEntry.from_row(row, username=self.display_name))
            except (KeyError, TypeError, ValueError):
                skipped += 1
                log.warning(f"Skipping unreadable time entry row {row!r}", exc_info=True)
        self.entries = entries
        log.info(f"Loaded {len(self.entries)} time entries")
        if skipped:
            self.notify("Error", f"{skipped} entries could not be read and were skipped", "error")
        return True

    def reload_list(self, table):
        try:
            names = self.store.list_names(table)
        except StoreError:
            log.warning(f"Could not load list '{table}'", exc_info=True)
            return False
        if table == CLIENTS_TABLE:
            self.clients = names
        else:
            self.tasks = names
        return True

    # ------------------------------------------------------------------ #
    #  Stopwatch -> draft                                                  #
    # ------------------------------------------------------------------ #

    # Finalize hands the duration to the entry form and puts the stopwatch back to zero.
    def complete_timer(self):
        duration = self.stopwatch.finalize()
        self.draft_duration = duration
        self.draft_start = anchor_from(duration, self._clock())
        self.stopwatch.reset()
        log.info(f"Timer completed with {duration} seconds")
        return duration

    def autosave_timer(self):
        def _record(duration, anchor):
            if not self.is_authenticated:
                self.notify("Authentication error", "You must be signed in to save entries", "error")
                return
            self.draft_duration = duration
            self.draft_start = anchor
            self.notify("Time recorded", "Fill in the details to save the entry", "info")
        return self.stopwatch.stop_and_autosave(_record)

    def reminder_due(self):
        return not self.stopwatch.running

    # ------------------------------------------------------------------ #
    #  Entries                                                             #
    # ------------------------------------------------------------------ #

    # Validates the entry form against the pending draft duration and saves it. EntryValidationError propagates.
    def submit_entry(self, client, task, description):
        draft = build_draft(
            client, task, description,
            duration=self.draft_duration,
            start_time=self.draft_start,
            clients=self.clients or None,
            tasks=self.tasks or None,
            now=self._clock(),
        )
        return self.save_entry(draft)

    def save_entry(self, draft):
        if not self.is_authenticated:
            self.notify("Authentication error", "You must be signed in to save entries", "error")
            return None
        try:
            row = self.store.insert_entry(self.session.user_id, draft)
        except StoreError:
            log.warning("Could not save time entry", exc_info=True)
            self.notify("Error", "Could not save the entry", "error")
            return None

        entry = TimeEntry.from_draft(row.get("id"), draft, username=self.display_name)
        self.entries = [entry] + self.entries
        self.draft_duration = 0
        self.draft_start = None
        log.info(f"Saved entry {entry.id} ({entry.duration}s for '{entry.client}')")
        self.notify("Entry saved", f"Recorded {format_hours_minutes(entry.duration)} for {entry.client}", "info")
        return entry

    def update_entry(self, entry):
        if not self.is_authenticated:
            self.notify("Authentication error", "You must be signed in to update entries", "error")
            return False
        try:
            self.store.update_entry(self.session.user_id, entry)
        except StoreError:
            log.warning(f"Could not update time entry {entry.id}", exc_info=True)
            self.notify("Error", "Could not update the entry", "error")
            return False
        self.entries = replace_entry(self.entries, entry, username=self.display_name)
        log.info(f"Updated entry {entry.id}")
        self.notify("Entry updated", f"Updated the entry for {entry.client}", "info")
        return True

    # ------------------------------------------------------------------ #
    #  Client / task lists                                                 #
    # ------------------------------------------------------------------ #

    def _current(self, table):
        return self.clients if table == CLIENTS_TABLE else self.tasks

    def add_name(self, table, name):
        name = should_add(name, self._current(table))
        if name is None:
            return False
        label = _LIST_LABELS[table]
        try:
            self.store.insert_name(table, name)
        except StoreError:
            log.warning(f"Could not add {label} '{name}'", exc_info=True)
            self.notify("Error", f"Could not add the {label}", "error")
            return False
        self.reload_list(table)
        log.info(f"Added {label} '{name}'")
        self.notify(f"{label.capitalize()} added", f"{name} was added to the list", "info")
        return True

    def remove_name(self, table, name):
        label = _LIST_LABELS[table]
        try:
            self.store.delete_name(table, name)
        except StoreError:
            log.warning(f"Could not remove {label} '{name}'", exc_info=True)
            self.notify("Error", f"Could not remove the {label}", "error")
            return False
        self.reload_list(table)
        log.info(f"Removed {label} '{name}'")
        self.notify(f"{label.capitalize()} removed", f"{name} was removed from the list", "info")
        return True

    def add_client(self, name):
        return self.add_name(CLIENTS_TABLE, name)

    def remove_client(self, name):
        return self.remove_name(CLIENTS_TABLE, name)

    def add_task(self, name):
        return self.add_name(TASKS_TABLE, name)

    def remove_task(self, name):
        return self.remove_name(TASKS_TABLE, name)

    # ------------------------------------------------------------------ #
    #  Administrators                                                      #
    # ------------------------------------------------------------------ #

    def list_profiles(self):
        if not self.is_admin:
            raise PermissionDenied("Only administrators can list users")
        try:
            return self.store.list_profiles()
        except StoreError:
            log.warning("Could not load user profiles", exc_info=True)
            self.notify("Error", "Could not load the user list", "error")
            return []

    # Explicit elevation, only ever performed by someone who is already an administrator.
    def grant_admin(self, username):
        if not self.is_admin:
            raise PermissionDenied("Only administrators can grant the administrator role")
        target = next((p for p in self.list_profiles() if p.username == username), None)
        if target is None:
            self.notify("Error", f"No user named '{username}'", "error")
            return False
        if target.admin:
            return False
        try:
            self.store.set_admin(target.user_id, True)
        except StoreError:
            log.warning(f"Could not grant administrator role to '{username}'", exc_info=True)
            self.notify("Error", "Could not update the user", "error")
            return False
        log.info(f"'{self.display_name}' granted administrator role to '{username}'")
        self.notify("Administrator added", f"{username} is now an administrator", "info")
        return True
