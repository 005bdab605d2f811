"""Time entries: the draft built by the entry form, the stored record, and the
history aggregation. Pure logic, no UI and no network.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from tt.core.duration import decimal_hours_string_to_seconds, format_hours_minutes
from tt.util import now_local, parse_iso


class EntryValidationError(ValueError):
    """A required selection is missing. The message is shown to the user as-is."""


@dataclass
class DraftEntry:
    """An entry that hasn't been given an id by the store yet."""
    client: str
    task: str
    description: str
    start: datetime
    end: datetime
    duration: int


@dataclass
class TimeEntry:
    id: str
    client: str
    task: str
    description: str
    start: datetime
    end: datetime
    duration: int
    username: str | None = None

    # Column mapping for the `time_entries` table. The backend schema keeps its Spanish column names.
    def to_row(self, user_id=None):
        row = _draft_row(self)
        if user_id is not None:
            row["user_id"] = user_id
        return row

    @staticmethod
    def from_row(row, username=None):
        return TimeEntry(
            id=str(row["id"]),
            client=row.get("cliente", ""),
            task=row.get("tarea", ""),
            description=row.get("descripcion") or "",
            start=parse_iso(row["fecha_inicio"]),
            end=parse_iso(row["fecha_fin"]),
            duration=int(row.get("duracion") or 0),
            username=username,
        )

    @staticmethod
    def from_draft(entry_id, draft, username=None):
        return TimeEntry(
            id=str(entry_id),
            client=draft.client,
            task=draft.task,
            description=draft.description,
            start=draft.start,
            end=draft.end,
            duration=draft.duration,
            username=username,
        )


def _draft_row(entry):
    return {
        "cliente": entry.client,
        "tarea": entry.task,
        "descripcion": entry.description,
        "fecha_inicio": entry.start.isoformat(),
        "fecha_fin": entry.end.isoformat(),
        "duracion": int(entry.duration),
    }


def draft_to_row(draft, user_id):
    row = _draft_row(draft)
    row["user_id"] = user_id
    return row


# ---------------------------------------------------------------------------
# Entry form
# ---------------------------------------------------------------------------

def build_draft(client, task, description, duration, start_time=None,
                clients=None, tasks=None, now=None):
    """Turn the entry form's fields plus a completed duration into a draft.

    Raises EntryValidationError when the client or task is unset, or (when
    the lists are given) not one of the known names. The end is `now` and
    the start is `start_time` when given, else `now - duration`.
    """
    client = (client or "").strip()
    task = (task or "").strip()
    if not client or not task:
        raise EntryValidationError("Please select a client and a task")
    if clients is not None and client not in clients:
        raise EntryValidationError(f"Unknown client '{client}'")
    if tasks is not None and task not in tasks:
        raise EntryValidationError(f"Unknown task '{task}'")

    duration = max(0, int(duration))
    now = now or now_local()
    start = start_time or (now - timedelta(seconds=duration))
    return DraftEntry(
        client=client,
        task=task,
        description=(description or "").strip(),
        start=start,
        end=now,
        duration=duration,
    )


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HistorySummary:
    count: int
    total_seconds: int
    distinct_clients: int

    @property
    def total_display(self):
        return format_hours_minutes(self.total_seconds)


def summarize(entries):
    entries = list(entries)
    return HistorySummary(
        count=len(entries),
        total_seconds=sum(e.duration for e in entries),
        distinct_clients=len({e.client for e in entries}),
    )


def replace_entry(entries, updated, username=None):
    """New list with the entry sharing `updated.id` swapped for `updated`, stamped with `username`."""
    stamped = replace(updated, username=username) if username is not None else updated
    return [stamped if e.id == updated.id else e for e in entries]


def apply_edit(entry, client, task, description, start, end, hours_text):
    """Full-record replace from the edit dialog.

    Duration is taken from the hours field as typed, so it can drift from
    end - start. That is how editing has always behaved.
    """
    client = (client or "").strip()
    task = (task or "").strip()
    if not client or not task:
        raise EntryValidationError("Please select a client and a task")
    return replace(
        entry,
        client=client,
        task=task,
        description=(description or "").strip(),
        start=parse_iso(start),
        end=parse_iso(end),
        duration=int(round(decimal_hours_string_to_seconds(hours_text))),
    )
